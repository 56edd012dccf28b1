from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from xrun.core.context.run_context import RunContext
from xrun.core.discovery import composed_name
from xrun.core.errors import HandlerNotFound


class ExecuteEngine:
    """
    Resolves the first argument against the command registry and runs the
    matching handler with the remaining arguments. Anything it cannot resolve
    is answered with the usage document.
    """

    def __init__(
            self,
            *,
            command_registry: Dict[str, Callable[..., int]],
            show_usage: Callable[[], None],
            program: str = "x",
            logger: Optional[logging.Logger] = None,
    ) -> None:
        self._commands = command_registry
        self._show_usage = show_usage
        self._program = program
        self._log = logger or logging.getLogger(__name__)

    def strip_global_flags(self, argv: List[str]) -> Tuple[List[str], RunContext]:
        """
        Removes global flags from argv and returns the remaining arguments in
        their original order, together with the context the flags produced.
        """
        skip_confirmation = False
        remaining: List[str] = []
        for arg in argv:
            match arg:
                case "--x-no-confirmation":
                    # Answer every confirmation prompt with yes.
                    # Useful in CI and other non-interactive runs.
                    skip_confirmation = True
                case _:
                    remaining.append(arg)
        return remaining, RunContext(skip_confirmation=skip_confirmation, program=self._program)

    def resolve(self, command_id: str) -> Callable[..., int]:
        """Returns the live handler for a command id or raises HandlerNotFound."""
        handler = self._commands.get(command_id)
        if handler is None or not callable(handler):
            raise HandlerNotFound(command_id)
        if getattr(handler, "__name__", None) != composed_name(command_id):
            raise HandlerNotFound(command_id)
        return handler

    def dispatch(self, argv: List[str], ctx: RunContext) -> int:
        """
        Runs the handler named by argv[0] with argv[1:] and returns its exit
        code unchanged. Empty or unknown input shows the usage and returns 0.
        """
        if not argv:
            self._show_usage()
            return 0

        command_id, args = argv[0], list(argv[1:])
        try:
            handler = self.resolve(command_id)
        except HandlerNotFound as e:
            self._log.debug("%s; showing usage.", e)
            self._show_usage()
            return 0

        self._log.debug("Dispatching '%s' with %d args (%r)", command_id, len(args), ctx)
        return int(handler(args, ctx))

    def execute(self, argv: List[str]) -> int:
        """Strips global flags, then dispatches."""
        remaining, ctx = self.strip_global_flags(argv)
        return self.dispatch(remaining, ctx)
