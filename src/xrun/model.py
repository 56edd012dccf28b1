# src/xrun/model.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

NO_ARGS_HINT = "-"


class CommandEntry(BaseModel):
    """A discovered command together with the docs read from its source."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Short command name, e.g. 'check-deps'.")
    source_line: int = Field(default=0, description="1-based line of the handler definition.")
    doc_lines: List[str] = Field(default_factory=list)
    args_hint: str = NO_ARGS_HINT


class OptionFlag(BaseModel):
    """
    A '--x-<name>' flag handled by a command. An owner of None marks a global
    flag that the dispatcher consumes before any handler runs.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    owner: Optional[str] = None
    doc_lines: List[str] = Field(default_factory=list)

    @property
    def key(self) -> tuple:
        return self.name, self.owner or ""


class CompletionRequest(BaseModel):
    partial_line: str = ""


class ToolSpec(BaseModel):
    """A development tool the project depends on, declared in settings."""
    name: str = Field(description="Executable looked up on PATH.")
    package: Optional[str] = Field(default=None, description="pip requirement; defaults to name.")

    @property
    def requirement(self) -> str:
        return self.package or self.name
