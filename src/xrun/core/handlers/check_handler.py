# src/xrun/core/handlers/check_handler.py
import logging
import shutil
from typing import List

from pydantic import TypeAdapter, ValidationError
from tqdm import tqdm

from xrun.core.context.run_context import RunContext
from xrun.core.managers.config_manager import config_manager
from xrun.model import ToolSpec

logger = logging.getLogger(__name__)

_TOOLS_ADAPTER = TypeAdapter(List[ToolSpec])


def configured_tools() -> List[ToolSpec]:
    """The tools declared under 'tools' in the settings."""
    raw = config_manager.get_nested("tools", [])
    try:
        return _TOOLS_ADAPTER.validate_python(raw)
    except ValidationError as e:
        logger.error("Invalid 'tools' setting: %s", e)
        return []


def find_missing_tools(tools: List[ToolSpec], show_progress: bool = False) -> List[ToolSpec]:
    """Returns the tools whose executable is not on PATH."""
    missing: List[ToolSpec] = []
    for tool in tqdm(tools, desc="Probing tools", unit="tool", disable=not show_progress, leave=False):
        if shutil.which(tool.name) is None:
            logger.debug("Tool '%s' not found on PATH", tool.name)
            missing.append(tool)
    return missing


# Check that every tool declared in the settings is installed.
# Exits 1 when something is missing; `x install` fixes that.
def x_check_deps(args: List[str], _ctx: RunContext) -> int:
    quiet = False
    for arg in args:
        match arg:
            case "--x-quiet":
                # Print nothing when all tools are present.
                quiet = True
            case _:
                print(f"Unknown argument: {arg}")
                return 2

    tools = configured_tools()
    missing = find_missing_tools(tools, show_progress=not quiet)

    if not missing:
        if not quiet:
            print(f"✅ All {len(tools)} tools are installed.")
        return 0

    print(f"❌ Missing {len(missing)} of {len(tools)} tools:")
    for tool in missing:
        print(f"  - {tool.name} (pip: {tool.requirement})")
    return 1
