"""Core types for host-invocable tools."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, ClassVar, Dict, Optional, Tuple

from agent_pro.errors import MissingContextError
from agent_pro.host import Editor

NO_EDITOR_MESSAGE = "No active editor found"
NO_WORKSPACE_MESSAGE = "No workspace folder open"


class CapabilityName(str, Enum):
    """Closed set of tools exposed to the host assistant."""

    CODE_ANALYZER = "codeAnalyzer"
    TEST_GENERATOR = "testGenerator"
    DOCUMENTATION_BUILDER = "documentationBuilder"
    PERFORMANCE_PROFILER = "performanceProfiler"
    PROJECT_INSPECTOR = "projectInspector"
    RESOURCE_CATALOG = "resourceCatalog"


@dataclass
class InvocationOptions:
    """Options bag passed by the host for one invocation.

    ``cancellation`` is accepted for interface parity and currently ignored.
    """

    input: Dict[str, Any] = field(default_factory=dict)
    cancellation: Optional[Any] = None


@dataclass(frozen=True)
class ToolResult:
    """Result envelope returned to the host: a sequence of text parts."""

    parts: Tuple[str, ...]

    @classmethod
    def of(cls, text: str) -> "ToolResult":
        return cls(parts=(text,))

    @property
    def text(self) -> str:
        return "".join(self.parts)


@dataclass
class CapabilityOutput:
    """What a tool body produces: text for the host, metadata for telemetry."""

    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InvocationContext:
    """Ambient host context available to tool bodies."""

    active_editor: Callable[[], Optional[Editor]]
    workspace_root: Callable[[], Optional[Path]]
    resources_root: Path

    def require_editor(self) -> Editor:
        editor = self.active_editor()
        if editor is None:
            raise MissingContextError("no_editor", NO_EDITOR_MESSAGE)
        return editor

    def require_workspace(self) -> Path:
        root = self.workspace_root()
        if root is None:
            raise MissingContextError("no_workspace", NO_WORKSPACE_MESSAGE)
        return Path(root)


@dataclass(frozen=True)
class CapabilityDescriptor:
    """What the host sees for a registered tool."""

    name: str
    display_name: str
    description: str
    invoke: Callable[..., Awaitable[ToolResult]]


class Capability(ABC):
    """A named tool body. The registry supplies error containment and telemetry."""

    name: ClassVar[CapabilityName]
    display_name: ClassVar[str]
    description: ClassVar[str]
    # Prefix of the text returned when the body raises unexpectedly
    error_prefix: ClassVar[str] = "Error"

    @abstractmethod
    async def run(
        self, options: InvocationOptions, context: InvocationContext
    ) -> CapabilityOutput:
        """Produce the tool's text. May raise; the registry contains it."""
