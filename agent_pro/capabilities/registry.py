"""Capability registry and the uniform invocation wrapper.

Every tool call goes through ``CapabilityRegistry.invoke``, which:

1. records a start time,
2. runs the tool body with the ambient host context,
3. turns missing context, malformed input and any other exception into a
   failure-shaped text result (nothing propagates to the host),
4. reports exactly one outcome to the telemetry reporter.

The host only ever sees text. Success versus failure is kept in telemetry.
"""

import functools
import logging
import time
from typing import Any, Dict, List, Optional, Union

from agent_pro.capabilities.base import (
    Capability,
    CapabilityDescriptor,
    CapabilityName,
    InvocationContext,
    InvocationOptions,
    ToolResult,
)
from agent_pro.errors import MalformedInputError, MissingContextError
from agent_pro.telemetry import TelemetryReporter

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Typed registry of tools, bound to one telemetry reporter."""

    def __init__(self, reporter: TelemetryReporter, context: InvocationContext):
        self._reporter = reporter
        self._context = context
        self._capabilities: Dict[CapabilityName, Capability] = {}
        self._descriptors: Dict[CapabilityName, CapabilityDescriptor] = {}

    @property
    def context(self) -> InvocationContext:
        return self._context

    def register(self, capability: Capability) -> CapabilityDescriptor:
        name = CapabilityName(capability.name)
        if name in self._capabilities:
            raise ValueError(f"Capability already registered: {name.value}")

        descriptor = CapabilityDescriptor(
            name=name.value,
            display_name=capability.display_name,
            description=capability.description,
            invoke=functools.partial(self.invoke, name),
        )
        self._capabilities[name] = capability
        self._descriptors[name] = descriptor
        logger.debug(f"Registered capability '{name.value}'")
        return descriptor

    def get(self, name: Union[str, CapabilityName]) -> Optional[CapabilityDescriptor]:
        try:
            return self._descriptors.get(CapabilityName(name))
        except ValueError:
            return None

    def names(self) -> List[str]:
        return [name.value for name in self._descriptors]

    def descriptors(self) -> List[CapabilityDescriptor]:
        return list(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, name: object) -> bool:
        try:
            return CapabilityName(name) in self._capabilities
        except ValueError:
            return False

    def dispose(self) -> None:
        self._capabilities.clear()
        self._descriptors.clear()

    async def invoke(
        self,
        name: Union[str, CapabilityName],
        options: Optional[InvocationOptions] = None,
    ) -> ToolResult:
        """Run a registered tool. Raises ``KeyError`` only for unknown names."""
        try:
            capability = self._capabilities[CapabilityName(name)]
        except ValueError:
            raise KeyError(f"Unknown capability: {name}") from None
        tool_name = capability.name.value
        options = options or InvocationOptions()

        start = time.perf_counter()
        try:
            output = await capability.run(options, self._context)
        except MissingContextError as e:
            logger.debug(f"{tool_name}: missing context ({e.reason})")
            await self._reporter.log_usage(tool_name, False, {"reason": e.reason})
            return ToolResult.of(e.message)
        except MalformedInputError as e:
            logger.warning(f"{tool_name}: {e}")
            await self._reporter.log_usage(
                tool_name, False, {"reason": "malformed_input", "path": e.path}
            )
            return ToolResult.of(str(e))
        except Exception as e:
            logger.error(f"Capability {tool_name} failed: {e}", exc_info=True)
            await self._reporter.log_usage(
                tool_name, False, {"reason": "error", "error": str(e)}
            )
            return ToolResult.of(f"{capability.error_prefix}: {e}")

        metadata: Dict[str, Any] = dict(output.metadata)
        metadata["elapsed_ms"] = round((time.perf_counter() - start) * 1000, 2)
        await self._reporter.log_usage(tool_name, True, metadata)
        return ToolResult.of(output.text)
