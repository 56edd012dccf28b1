# src/xrun/core/handlers/gen_handler.py
import asyncio
import logging
from pathlib import Path
from typing import List, Sequence

from xrun.core.context.run_context import RunContext
from xrun.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)


async def _run_step(step: Sequence[str], cwd: Path) -> int:
    logger.debug("Generation step: %s", " ".join(step))
    try:
        proc = await asyncio.create_subprocess_exec(*step, cwd=cwd)
    except FileNotFoundError:
        print(f"command not found: {step[0]}")
        return 127
    return await proc.wait()


async def _run_steps(steps: List[Sequence[str]], cwd: Path) -> List[int]:
    return list(await asyncio.gather(*(_run_step(step, cwd) for step in steps)))


# Regenerate code from the schemas.
# Both generation steps run side by side; the first failure decides the exit code.
def x_gen(_args: List[str], ctx: RunContext) -> int:
    steps = [[str(part) for part in step] for step in config_manager.get_nested("gen.steps", []) if step]
    if not steps:
        print("No generation steps configured (gen.steps).")
        return 1

    codes = asyncio.run(_run_steps(steps, ctx.project_root))
    for step, code in zip(steps, codes):
        if code != 0:
            print(f"❌ '{' '.join(step)}' exited with {code}")
            return code
    print(f"✅ {len(steps)} generation steps done.")
    return 0
