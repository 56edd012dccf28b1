# src/xrun/core/handlers/help_handler.py
from typing import List

from xrun.core.context.run_context import RunContext
from xrun.core.utils.helptext import get_help_text


# Show this help.
def x_help(_args: List[str], ctx: RunContext) -> int:
    print(get_help_text(ctx.program), end="")
    return 0
