"""Host-invocable tools and the registry that wraps them."""

from typing import List

from agent_pro.capabilities.base import (
    Capability,
    CapabilityDescriptor,
    CapabilityName,
    CapabilityOutput,
    InvocationContext,
    InvocationOptions,
    ToolResult,
)
from agent_pro.capabilities.code_analyzer import CodeAnalyzer
from agent_pro.capabilities.documentation_builder import DocumentationBuilder
from agent_pro.capabilities.performance_profiler import PerformanceProfiler
from agent_pro.capabilities.project_inspector import ProjectInspector
from agent_pro.capabilities.registry import CapabilityRegistry
from agent_pro.capabilities.resource_catalog import ResourceCatalog
from agent_pro.capabilities.test_generator import TestGenerator
from agent_pro.telemetry import TelemetryReporter


def default_capabilities() -> List[Capability]:
    """One instance of every built-in tool, in registration order."""
    return [
        CodeAnalyzer(),
        TestGenerator(),
        DocumentationBuilder(),
        PerformanceProfiler(),
        ProjectInspector(),
        ResourceCatalog(),
    ]


def build_default_registry(
    reporter: TelemetryReporter, context: InvocationContext
) -> CapabilityRegistry:
    registry = CapabilityRegistry(reporter, context)
    for capability in default_capabilities():
        registry.register(capability)
    return registry


__all__ = [
    "Capability",
    "CapabilityDescriptor",
    "CapabilityName",
    "CapabilityOutput",
    "CapabilityRegistry",
    "InvocationContext",
    "InvocationOptions",
    "ToolResult",
    "build_default_registry",
    "default_capabilities",
]
