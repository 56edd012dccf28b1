# src/xrun/core/annotations.py
import inspect
import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from xrun.core.errors import MalformedAnnotation
from xrun.model import NO_ARGS_HINT, CommandEntry

logger = logging.getLogger(__name__)

MAX_DOC_WIDTH = 88
BLANK_PLACEHOLDER = "·"
ELLIPSIS = "..."

_COMMENT_MARKER = re.compile(r"^\s*#+")
_ARGS_LINE = re.compile(r"^args:(.*)$", re.IGNORECASE)


def is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


def clean_comment(raw: str, max_width: int = MAX_DOC_WIDTH) -> str:
    """
    Strips the comment marker and leading whitespace from a raw comment line.
    Blank comments become a middle dot so they still render as a row; long
    lines are cut at max_width and end in an ellipsis.
    """
    text = _COMMENT_MARKER.sub("", raw, count=1).strip()
    if not text:
        return BLANK_PLACEHOLDER
    if len(text) > max_width:
        return text[:max_width] + ELLIPSIS
    return text


def _parse_args_line(text: str) -> Optional[str]:
    """Returns the hint of an 'args:' line, None for any other line."""
    m = _ARGS_LINE.match(text)
    if not m:
        return None
    hint = m.group(1).strip()
    if not hint:
        raise MalformedAnnotation("'args:' line declares no arguments", text)
    return hint


def _collect(lines: Sequence[str], start: int, step: int) -> List[str]:
    """Collects contiguous comment lines from a 0-based index in one direction."""
    found: List[str] = []
    i = start
    while 0 <= i < len(lines) and is_comment(lines[i]):
        found.append(lines[i])
        i += step
    return found


def extract_docs(lines: Sequence[str], def_line: int) -> Tuple[List[str], str]:
    """
    Reads the comment block directly above a definition.

    Args:
        lines: The full source, one entry per line.
        def_line: 1-based line number of the definition (first decorator line
            when the function is decorated).

    Returns:
        (doc_lines, args_hint). The walk stops at the first non-comment line,
        so a blank line cuts the block. A first line of the form 'args: <text>'
        becomes the args hint instead of a doc line.
    """
    raw = _collect(lines, def_line - 2, -1)
    raw.reverse()

    args_hint = NO_ARGS_HINT
    doc_lines: List[str] = []
    for idx, line in enumerate(raw):
        text = _COMMENT_MARKER.sub("", line, count=1).strip()
        try:
            hint = _parse_args_line(text)
            if hint is not None and idx > 0:
                raise MalformedAnnotation("'args:' line must open the comment block", text)
        except MalformedAnnotation as e:
            logger.debug("Treating annotation as plain doc line: %s (%r)", e, e.line)
            hint = None
        if hint is not None:
            args_hint = hint
            continue
        doc_lines.append(clean_comment(line))
    return doc_lines, args_hint


def extract_trailing_docs(lines: Sequence[str], flag_line: int) -> List[str]:
    """Reads the comment block directly below a 1-based flag clause line."""
    return [clean_comment(line) for line in _collect(lines, flag_line, 1)]


def read_source(obj) -> Tuple[List[str], int, int]:
    """
    Returns (module_lines, first_line, last_line) for a function or module.
    Raises OSError or TypeError when the source cannot be located.
    """
    source_file = inspect.getsourcefile(obj)
    if source_file is None:
        raise OSError(f"No source file for {obj!r}")
    module_lines, _ = inspect.findsource(obj)
    module_lines = [line.rstrip("\n") for line in module_lines]
    if inspect.ismodule(obj):
        return module_lines, 1, len(module_lines)
    block, first = inspect.getsourcelines(obj)
    return module_lines, first, first + len(block) - 1


def entry_for_handler(command_id: str, handler: Callable[..., int]) -> CommandEntry:
    """Builds the CommandEntry of a handler from the comments above it."""
    try:
        lines, first, _ = read_source(handler)
    except (OSError, TypeError) as e:
        logger.debug("No source available for '%s': %s", command_id, e)
        return CommandEntry(id=command_id)

    doc_lines, args_hint = extract_docs(lines, first)
    return CommandEntry(id=command_id, source_line=first, doc_lines=doc_lines, args_hint=args_hint)
