# src/xrun/core/handlers/lint_handler.py
from typing import List

from xrun.core.context.run_context import RunContext
from xrun.core.managers.config_manager import config_manager


def _base_command(key: str, default: List[str]) -> List[str]:
    return [str(part) for part in config_manager.get_nested(key, default)]


# Args: [path...]
# Run the linter over the project (ruff check by default).
def x_lint(args: List[str], ctx: RunContext) -> int:
    cmd = _base_command("lint.command", ["ruff", "check"])
    for arg in args:
        match arg:
            case "--x-fix":
                # Apply the fixes the linter considers safe.
                cmd.append("--fix")
            case _:
                cmd.append(arg)
    return ctx.run(cmd)


# Args: [path...]
# Format the sources in place (ruff format by default).
def x_fmt(args: List[str], ctx: RunContext) -> int:
    cmd = _base_command("fmt.command", ["ruff", "format"])
    for arg in args:
        match arg:
            case "--x-check":
                # Only report files that would change.
                #
                # Exits non-zero when any would.
                cmd.append("--check")
            case _:
                cmd.append(arg)
    return ctx.run(cmd)
