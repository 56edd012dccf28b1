# src/xrun/core/utils/helptext.py
import io
from typing import Iterable, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from xrun.core.command_registry import get_entries, get_options
from xrun.core.managers.config_manager import config_manager
from xrun.model import CommandEntry, OptionFlag

TABLE_WIDTH = 150
ARGS_WIDTH = 24
GLOBAL_OWNER = "*"

HEADER_TEXT = """
{program} - project task runner

Usage:
  {program} [--x-no-confirmation] <command> [args...]
  {program}                         Show this help.
""".strip("\n")

FOOTER_TEXT = """
Unknown commands show this help. Flags marked '*' apply to every command.
Tab completion (bash):  eval "$({program} completion)"
""".strip("\n")


def _table(title: str, key_header: str, middle_header: str, width: int, args_width: int) -> Table:
    table = Table(
        title=title,
        title_justify="left",
        title_style="bold",
        box=None,
        width=width,
        expand=True,
        pad_edge=False,
        header_style="dim",
    )
    table.add_column(key_header, style="bold cyan", no_wrap=True)
    table.add_column(middle_header, style="yellow", width=args_width, overflow="fold")
    table.add_column("description", overflow="fold", ratio=1)
    return table


def _add_rows(table: Table, key: str, middle: str, doc_lines: Sequence[str]) -> None:
    """One row for the first doc line, then continuation rows holding docs only."""
    first = doc_lines[0] if doc_lines else ""
    table.add_row(Text(key), Text(middle), Text(first))
    for line in doc_lines[1:]:
        table.add_row(Text(""), Text(""), Text(line))


def render_usage(
    commands: Iterable[CommandEntry],
    options: Iterable[OptionFlag],
    program: str = "x",
    width: int = TABLE_WIDTH,
    args_width: int = ARGS_WIDTH,
) -> str:
    """
    Renders the help document: a header, the commands table, the options
    table and a footer. The result keeps its ANSI styling so it can be
    written to any stream.
    """
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        force_terminal=True,
        color_system="standard",
        highlight=False,
        soft_wrap=False,
    )

    console.print(Text(HEADER_TEXT.format(program=program)), style="bold")
    console.print()

    command_table = _table("commands", "command", "args", width, args_width)
    for entry in commands:
        _add_rows(command_table, entry.id, entry.args_hint, entry.doc_lines)
    console.print(command_table)
    console.print()

    option_table = _table("options", "flag", "command", width, args_width)
    for option in options:
        _add_rows(option_table, option.name, option.owner or GLOBAL_OWNER, option.doc_lines)
    console.print(option_table)
    console.print()

    console.print(Text(FOOTER_TEXT.format(program=program)), style="dim")
    return buffer.getvalue()


def get_help_text(program: str = "x") -> str:
    """Renders the usage document from the live registry and settings."""
    return render_usage(
        get_entries(),
        get_options(),
        program=program,
        width=int(config_manager.get_nested("usage.table_width", TABLE_WIDTH)),
        args_width=int(config_manager.get_nested("usage.args_width", ARGS_WIDTH)),
    )

