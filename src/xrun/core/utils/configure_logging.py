# src/xrun/core/utils/configure_logging.py
import logging
import os
import sys
from typing import Mapping, Optional

from tqdm import tqdm

# Overrides debug.level for one run, e.g. XRUN_LOG_LEVEL=DEBUG x lint
LOG_LEVEL_ENV_VAR = "XRUN_LOG_LEVEL"

LOG_FORMAT = "{program}: %(levelname)s [%(name)s] %(message)s"
DEBUG_LOG_FORMAT = "{program}: %(levelname)s [%(name)s:%(lineno)d] %(message)s"


class LogWithTqdm(logging.Handler):
    """
    A logging handler that writes through `tqdm.write()` so that log lines
    do not tear the progress bar check-deps draws. Output goes to stderr;
    stdout is reserved for command output and completion candidates.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level, fallback):
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level if level is not None else fallback


def configure_logger(
    general_level='WARNING',
    module_specific_levels=None,
    silenced_loggers=None,
    program: str = "x",
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Routes every log record through a single tqdm-aware stderr handler,
    prefixed with the program name. Returns the effective root level.

    XRUN_LOG_LEVEL in `env` wins over `general_level`. Calling this again
    replaces the handler it installed before and leaves other handlers alone.
    """
    env = os.environ if env is None else env
    level = _to_level(env.get(LOG_LEVEL_ENV_VAR) or general_level, logging.WARNING)

    fmt = DEBUG_LOG_FORMAT if level <= logging.DEBUG else LOG_FORMAT
    tqdm_aware_handler = LogWithTqdm()
    tqdm_aware_handler.setFormatter(logging.Formatter(fmt.format(program=program)))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in [h for h in root_logger.handlers if isinstance(h, LogWithTqdm)]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(tqdm_aware_handler)

    for name, module_level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(module_level, logging.INFO))

    # Muzzle noisy loggers by setting their level high.
    for name, silenced_level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(silenced_level, logging.CRITICAL))

    return level


def configure_from_settings(settings: Mapping, program: str = "x", env: Optional[Mapping[str, str]] = None) -> int:
    """Applies the `debug` section of the merged settings."""
    debug = settings.get("debug") or {}
    return configure_logger(
        debug.get("level", "WARNING"),
        module_specific_levels=debug.get("module_levels"),
        silenced_loggers=debug.get("silenced_loggers"),
        program=program,
        env=env,
    )
