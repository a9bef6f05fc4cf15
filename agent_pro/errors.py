"""Exception types shared across the activation core and the tools."""

from pathlib import Path
from typing import Any, Optional, Sequence, Union


class AgentProError(Exception):
    """Base class for all agent_pro errors."""


class ResourceSyncError(AgentProError, IOError):
    """The bundle is missing or could not be copied into storage."""


class ActivationError(AgentProError):
    """Activation aborted; no tools or commands were registered.

    ``transitions`` lists the activation states passed through, ending in
    the failed state.
    """

    def __init__(self, message: str, transitions: Sequence[Any] = ()):
        super().__init__(message)
        self.transitions = list(transitions)


class StateStoreError(AgentProError):
    """The persistent state store could not be read or written."""


class TelemetryWriteError(AgentProError):
    """A usage record could not be persisted. Never surfaced to users."""


class MissingContextError(AgentProError):
    """A tool needed host context (editor, workspace, resources) that is absent.

    ``reason`` is the short code recorded in usage statistics.
    """

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class MalformedInputError(AgentProError):
    """A file read by a tool could not be parsed."""

    def __init__(self, path: Union[str, Path], detail: Optional[str] = None):
        self.path = str(path)
        self.detail = detail
        message = f"Failed to parse {self.path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
