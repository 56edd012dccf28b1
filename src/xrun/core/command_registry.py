# src/xrun/core/command_registry.py
import logging
from typing import Callable, Dict, Iterable, List

from xrun.core.discovery import composed_name, discover_handlers
from xrun.core.option_scanner import sort_options
from xrun.model import CommandEntry, OptionFlag

logger = logging.getLogger(__name__)

# The central registries, populated once per run.
CommandRegistry: Dict[str, Callable[..., int]] = {}
COMMAND_ENTRIES: Dict[str, CommandEntry] = {}
COMMAND_OPTIONS: Dict[tuple, OptionFlag] = {}


def register_command(
    entry: CommandEntry,
    handler: Callable[..., int],
    options: Iterable[OptionFlag] = (),
) -> None:
    """
    Adds a command, its docs and its flags to the registry.

    The handler must be named after the command (``x_<id>`` with ``-`` as
    ``_``), because only such handlers are dispatched. Anything else raises
    ValueError and leaves the registry untouched.
    """
    expected = composed_name(entry.id)
    actual = getattr(handler, "__name__", None)
    if actual != expected:
        raise ValueError(
            f"Handler for command '{entry.id}' must be named '{expected}', got '{actual}'"
        )

    CommandRegistry[entry.id] = handler
    COMMAND_ENTRIES[entry.id] = entry
    for option in options:
        register_option(option)
    logger.debug("Registered command '%s'", entry.id)


def register_option(option: OptionFlag) -> None:
    if option.key not in COMMAND_OPTIONS:
        COMMAND_OPTIONS[option.key] = option


def register_all_commands() -> None:
    """
    Discovers all handlers, their docs and their flags, then registers them.
    Raises RegistryUnavailable when the handler table cannot be read.
    """
    logger.debug("Discovering all command handlers...")
    discovered_handlers, discovered_entries, discovered_options = discover_handlers()

    for command_id, handler in discovered_handlers.items():
        if command_id not in CommandRegistry:
            register_command(discovered_entries[command_id], handler)

    for option in discovered_options:
        register_option(option)

    logger.debug(
        "Registered %d handlers and %d flags.", len(CommandRegistry), len(COMMAND_OPTIONS)
    )


def clear_registry() -> None:
    CommandRegistry.clear()
    COMMAND_ENTRIES.clear()
    COMMAND_OPTIONS.clear()


def discover() -> List[str]:
    """All registered command ids in code point (C locale) order."""
    return sorted(CommandRegistry.keys())


def get_entries() -> List[CommandEntry]:
    return [COMMAND_ENTRIES[command_id] for command_id in discover()]


def get_options() -> List[OptionFlag]:
    return sort_options(COMMAND_OPTIONS.values())
