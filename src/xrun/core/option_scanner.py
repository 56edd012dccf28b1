# src/xrun/core/option_scanner.py
import logging
import re
from types import ModuleType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from xrun.core.annotations import extract_trailing_docs, read_source
from xrun.model import OptionFlag

logger = logging.getLogger(__name__)

# A match-statement clause handling a flag, e.g.   case "--x-fix":
FLAG_CLAUSE = re.compile(r"""^\s*case\s+(["'])(--x-[A-Za-z0-9_-]+)\1\s*:""")

LineRange = Tuple[int, int]


def _owner_for(line_no: int, owners: Mapping[str, LineRange]) -> Optional[str]:
    for command_id, (first, last) in owners.items():
        if first <= line_no <= last:
            return command_id
    return None


def scan_options(
    lines: Sequence[str],
    owners: Mapping[str, LineRange],
    allow_global: bool = True,
) -> List[OptionFlag]:
    """
    Finds every flag clause in a source and attaches the comments below it.

    Args:
        lines: Source lines of one module.
        owners: CommandId -> (first, last) 1-based line range of its handler.
            A clause inside a range belongs to that command.
        allow_global: Whether a clause outside every range is a global flag.
            When False such a clause (e.g. in a helper function) is skipped.

    Returns:
        Flags sorted by (name, owner). A flag handled twice by the same owner
        is only taken once, with the docs of its first clause.
    """
    flags: Dict[tuple, OptionFlag] = {}

    for idx, line in enumerate(lines):
        m = FLAG_CLAUSE.match(line)
        if not m:
            continue

        line_no = idx + 1
        owner = _owner_for(line_no, owners)
        if owner is None and not allow_global:
            logger.debug("Skipping flag %s at line %d: not inside a command handler", m.group(2), line_no)
            continue

        flag = OptionFlag(
            name=m.group(2),
            owner=owner,
            doc_lines=extract_trailing_docs(lines, line_no),
        )
        if flag.key in flags:
            logger.debug("Flag %s already documented for '%s'", flag.name, flag.owner)
            continue
        flags[flag.key] = flag
        logger.debug("Found flag %s (owner: %s) at line %d", flag.name, flag.owner, line_no)

    return sort_options(flags.values())


def scan_module(
    module: ModuleType,
    handlers: Mapping[str, Callable[..., int]],
    allow_global: bool = False,
) -> List[OptionFlag]:
    """
    Scans a loaded module, using its handlers' source ranges as owners.
    Only modules that parse the global flags pass allow_global=True.
    """
    try:
        lines, _, _ = read_source(module)
    except (OSError, TypeError) as e:
        logger.debug("Cannot scan %s for flags: %s", getattr(module, "__name__", module), e)
        return []

    owners: Dict[str, LineRange] = {}
    for command_id, handler in handlers.items():
        try:
            _, first, last = read_source(handler)
        except (OSError, TypeError):
            continue
        owners[command_id] = (first, last)
    return scan_options(lines, owners, allow_global=allow_global)


def sort_options(options) -> List[OptionFlag]:
    return sorted(options, key=lambda o: o.key)
