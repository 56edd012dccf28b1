import importlib
import inspect
import logging
from typing import Any, Callable, Dict, List, Tuple

from xrun.core.annotations import entry_for_handler
from xrun.core.errors import RegistryUnavailable
from xrun.core.option_scanner import scan_module, sort_options
from xrun.core.utils.path_utils import PathUtils
from xrun.model import CommandEntry, OptionFlag

logger = logging.getLogger(__name__)

HANDLER_PREFIX = "x_"
HANDLERS_PACKAGE = "xrun.core.handlers"
# Modules that handle global flags outside of any command
GLOBAL_FLAG_MODULES = ("xrun.core.xngine",)


def command_id_for(attr_name: str) -> str:
    """x_check_deps -> check-deps"""
    return attr_name[len(HANDLER_PREFIX):].replace("_", "-")


def composed_name(command_id: str) -> str:
    """check-deps -> x_check_deps"""
    return HANDLER_PREFIX + command_id.replace("-", "_")


def handlers_in_module(module: Any) -> Dict[str, Callable[..., int]]:
    """Returns the x_* callables defined (not merely imported) in a module."""
    found: Dict[str, Callable[..., int]] = {}
    for attr_name, obj in inspect.getmembers(module, callable):
        if not attr_name.startswith(HANDLER_PREFIX) or len(attr_name) == len(HANDLER_PREFIX):
            continue
        if getattr(obj, "__module__", None) != module.__name__:
            continue
        found[command_id_for(attr_name)] = obj
    return found


def discover_handlers() -> Tuple[Dict[str, Callable[..., int]], Dict[str, CommandEntry], List[OptionFlag]]:
    """
    Imports every *_handler.py module and returns three collections:
    1. A map of command ids to their handler function.
    2. A map of command ids to their CommandEntry (docs from source comments).
    3. All flags found in the handler modules and the global flag modules.
    """
    handlers_dir = PathUtils.get_handlers_dir()
    logger.debug("Scanning for handlers in: '%s'", handlers_dir)
    if not handlers_dir.is_dir():
        raise RegistryUnavailable(f"Handlers directory not found: {handlers_dir}")

    try:
        handler_files = sorted(handlers_dir.glob("*_handler.py"))
    except OSError as e:
        raise RegistryUnavailable(f"Cannot list handlers in {handlers_dir}: {e}") from e

    discovered_handlers: Dict[str, Callable[..., int]] = {}
    discovered_entries: Dict[str, CommandEntry] = {}
    discovered_options: List[OptionFlag] = []

    for file_path in handler_files:
        module_name = f"{HANDLERS_PACKAGE}.{file_path.stem}"
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            logger.error("Failed to load handler module %s: %s", file_path.name, e, exc_info=True)
            continue

        module_handlers = handlers_in_module(module)
        for command_id, handler in module_handlers.items():
            if command_id in discovered_handlers:
                logger.warning("Command '%s' in %s shadows an earlier definition", command_id, file_path.name)
            discovered_handlers[command_id] = handler
            discovered_entries[command_id] = entry_for_handler(command_id, handler)
            logger.debug("Discovered command '%s'", command_id)

        discovered_options.extend(scan_module(module, module_handlers))

    for module_name in GLOBAL_FLAG_MODULES:
        module = importlib.import_module(module_name)
        discovered_options.extend(scan_module(module, {}, allow_global=True))

    return discovered_handlers, discovered_entries, sort_options(discovered_options)
