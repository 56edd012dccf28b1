# src/xrun/core/errors.py
from typing import Optional


class XrunError(Exception):
    """Base class for all errors raised by the dispatch core."""


class RegistryUnavailable(XrunError):
    """The handler table could not be enumerated. Nothing else can run."""


class HandlerNotFound(XrunError):
    """The first argument does not name a registered command."""

    def __init__(self, command_id: str):
        super().__init__(f"No handler registered for '{command_id}'")
        self.command_id = command_id


class MalformedAnnotation(XrunError):
    """A comment block could not be parsed into the expected shape."""

    def __init__(self, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.line = line


class HandlerFailure(XrunError):
    """An external step run by a handler exited with a non-zero code."""

    def __init__(self, command: str, exit_code: int):
        super().__init__(f"'{command}' failed with exit code {exit_code}")
        self.command = command
        self.exit_code = exit_code
