# src/xrun/core/handlers/install_handler.py
import logging
import sys
from typing import List

from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from xrun.core.context.run_context import RunContext
from xrun.core.errors import HandlerFailure
from xrun.core.handlers.check_handler import configured_tools, find_missing_tools
from xrun.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)


# pip or the shell exit codes that a retry cannot fix: usage error, missing
# virtualenv, no matching distribution, command not executable or not found.
PERMANENT_EXIT_CODES = (2, 3, 23, 126, 127)


def _is_transient(e: BaseException) -> bool:
    return isinstance(e, HandlerFailure) and e.exit_code not in PERMANENT_EXIT_CODES


def pip_install(requirements: List[str], ctx: RunContext, upgrade: bool = False) -> int:
    """
    Installs requirements into the running interpreter's environment.
    A pip run failing with a transient exit code is retried with exponential
    backoff (install.retries). Permanent failures are returned at once.
    """
    cmd = [sys.executable, "-m", "pip", "install"]
    if upgrade:
        cmd.append("--upgrade")
    cmd.extend(requirements)

    attempts = max(1, int(config_manager.get_nested("install.retries", 3)))
    retrying = Retrying(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, max=10),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    try:
        for attempt in retrying:
            with attempt:
                ctx.run(cmd, check=True)
    except HandlerFailure as e:
        logger.error("Giving up after %d attempt(s): %s", retrying.statistics.get("attempt_number", 1), e)
        return e.exit_code
    return 0


# Args: [tool...]
# Install the named tools, or every missing tool from the settings.
# Asks before installing unless --x-no-confirmation is given.
def x_install(args: List[str], ctx: RunContext) -> int:
    upgrade = False
    names: List[str] = []
    for arg in args:
        match arg:
            case "--x-upgrade":
                # Upgrade tools that are already installed.
                upgrade = True
            case _:
                names.append(arg)

    tools = configured_tools()
    if names:
        known = {tool.name: tool for tool in tools}
        requirements = [known[name].requirement if name in known else name for name in names]
    else:
        targets = tools if upgrade else find_missing_tools(tools)
        requirements = [tool.requirement for tool in targets]

    if not requirements:
        print("✅ Nothing to install.")
        return 0

    if not ctx.confirm(f"Install {', '.join(requirements)}?"):
        print("Aborted.")
        return 1

    return pip_install(requirements, ctx, upgrade=upgrade)
