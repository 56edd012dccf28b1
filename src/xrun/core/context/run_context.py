# src/xrun/core/context/run_context.py
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from prompt_toolkit.shortcuts import confirm

from xrun.core.errors import HandlerFailure
from xrun.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class RunContext:
    """
    Per-invocation state handed to every command handler.

    Global flags are resolved before the context is built, so a handler sees
    them as read-only attributes.
    """

    def __init__(self, skip_confirmation: bool = False, program: str = "x", cwd: Optional[Path] = None):
        self._skip_confirmation = skip_confirmation
        self.program = program
        self.cwd = cwd

    @property
    def skip_confirmation(self) -> bool:
        return self._skip_confirmation

    @property
    def project_root(self) -> Path:
        return self.cwd or PathUtils.get_project_root()

    def confirm(self, message: str) -> bool:
        """Asks a yes/no question unless --x-no-confirmation was given."""
        if self._skip_confirmation:
            logger.debug("Skipping confirmation: %s", message)
            return True
        return confirm(message)

    def run(self, command: Sequence[str], check: bool = False) -> int:
        """
        Runs an external command in the project root and returns its exit code.
        A missing executable yields 127, like a shell would.
        """
        cmd: List[str] = [str(part) for part in command]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, cwd=self.project_root, check=False)
            code = int(proc.returncode)
        except FileNotFoundError:
            print(f"command not found: {cmd[0]}")
            code = 127
        if check and code != 0:
            raise HandlerFailure(" ".join(cmd), code)
        return code

    def __repr__(self) -> str:
        return f"<RunContext program={self.program} skip_confirmation={self._skip_confirmation}>"
