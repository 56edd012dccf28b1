import logging
from typing import Iterable, List, Mapping, Optional, TextIO, Tuple

from xrun.model import CompletionRequest, OptionFlag

logger = logging.getLogger(__name__)

DEFAULT_ENV_VAR = "COMP_LINE"
POINT_ENV_VAR = "COMP_POINT"


class CompletionManager:
    """
    Answers shell tab-completion requests from the registered commands and
    their flags.

    Before a known command appears in the typed line, command ids are
    offered. Afterwards the flags of that command (and the global flags) are
    offered, each at most once per line.
    """

    def __init__(self, command_ids: Iterable[str], options: Iterable[OptionFlag]):
        self.command_ids = sorted(command_ids)
        self.options = list(options)

    @staticmethod
    def request_from_env(env: Mapping[str, str], env_var: str = DEFAULT_ENV_VAR) -> Optional[CompletionRequest]:
        """Returns a request when the shell asked for completions, else None."""
        line = env.get(env_var)
        if line is None:
            return None
        point = env.get(POINT_ENV_VAR, "")
        if point.isdigit():
            line = line[:int(point)]
        return CompletionRequest(partial_line=line)

    @staticmethod
    def split_line(partial_line: str) -> Tuple[List[str], str]:
        """
        Splits the buffer into the words already typed (program name dropped)
        and the prefix being completed, i.e. the text after the last space.
        """
        head, _, pre = partial_line.rpartition(" ")
        typed = head.split()[1:]
        return typed, pre

    def bound_command(self, typed: List[str]) -> Optional[str]:
        """The first typed word that is a known command id, if any."""
        known = set(self.command_ids)
        for word in typed:
            if word in known:
                return word
        return None

    def respond(self, request: CompletionRequest) -> List[str]:
        typed, pre = self.split_line(request.partial_line)
        command_id = self.bound_command(typed)
        if command_id is None:
            return self._get_command_completions(pre)
        return self._get_option_completions(command_id, typed, pre)

    # --- Helper methods for the two completion levels ---

    def _get_command_completions(self, pre: str) -> List[str]:
        return [
            command_id for command_id in self.command_ids
            if not pre or (command_id.startswith(pre) and command_id != pre)
        ]

    def _get_option_completions(self, command_id: str, typed: List[str], pre: str) -> List[str]:
        used = set(typed)
        prefix = pre.lower()
        candidates: List[str] = []
        for option in sorted(self.options, key=lambda o: o.key):
            if option.owner not in (None, command_id):
                continue
            if option.name in used or option.name in candidates:
                continue
            if option.name.lower().startswith(prefix):
                candidates.append(option.name)
        return candidates

    def run(self, request: CompletionRequest, out: TextIO) -> int:
        """Writes one candidate per line. Completion never fails."""
        candidates = self.respond(request)
        logger.debug("Completing %r -> %d candidates", request.partial_line, len(candidates))
        for candidate in candidates:
            out.write(candidate + "\n")
        out.flush()
        return 0
