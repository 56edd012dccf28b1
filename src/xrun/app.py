from __future__ import annotations

import logging
import os
import sys

from xrun.core.command_registry import CommandRegistry, discover, get_options, register_all_commands
from xrun.core.errors import RegistryUnavailable
from xrun.core.managers.completion_manager import DEFAULT_ENV_VAR, CompletionManager
from xrun.core.managers.config_manager import config_manager
from xrun.core.utils.configure_logging import configure_from_settings
from xrun.core.utils.helptext import get_help_text
from xrun.core.xngine import ExecuteEngine

PROGRAM_NAME = "x"

logger = logging.getLogger(__name__)


def show_usage() -> None:
    print(get_help_text(PROGRAM_NAME), end="")


def main(argv: list[str] | None = None) -> int:
    """
    Entrypoint of the task runner.

    In completion mode (the shell sets COMP_LINE) only the candidates are
    printed. Otherwise global flags are stripped and the named command runs.
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    configure_from_settings(config_manager.get_all(), PROGRAM_NAME)

    try:
        register_all_commands()
    except RegistryUnavailable as e:
        logger.critical("Command registry unavailable: %s", e)
        print(f"{PROGRAM_NAME}: cannot load commands: {e}", file=sys.stderr)
        return 2

    env_var = config_manager.get_nested("completion.env_var", DEFAULT_ENV_VAR)
    request = CompletionManager.request_from_env(os.environ, env_var)
    if request is not None:
        return CompletionManager(discover(), get_options()).run(request, sys.stdout)

    config_manager.load_environment()

    engine = ExecuteEngine(
        command_registry=CommandRegistry,
        show_usage=show_usage,
        program=PROGRAM_NAME,
        logger=logger,
    )
    return engine.execute(argv)


if __name__ == "__main__":
    sys.exit(main())
