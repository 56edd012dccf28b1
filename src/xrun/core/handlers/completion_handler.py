# src/xrun/core/handlers/completion_handler.py
from typing import List

from xrun.core.context.run_context import RunContext


# Print the bash completion hook.
# Use it as: eval "$(x completion)"
# Bash then runs x with COMP_LINE set on every tab press.
def x_completion(_args: List[str], ctx: RunContext) -> int:
    print(f"complete -o default -C {ctx.program} {ctx.program}")
    return 0
