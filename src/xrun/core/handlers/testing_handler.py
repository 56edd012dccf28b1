# src/xrun/core/handlers/testing_handler.py
from typing import List

from xrun.core.context.run_context import RunContext
from xrun.core.managers.config_manager import config_manager


# Args: [pytest args...]
# Run the test suite; arguments go to the runner untouched.
def x_test(args: List[str], ctx: RunContext) -> int:
    cmd = [str(part) for part in config_manager.get_nested("test.command", ["pytest"])]
    return ctx.run(cmd + list(args))
