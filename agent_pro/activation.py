"""Activation entry point: provisions the bundle, then wires tools and commands.

State machine per activation::

    NOT_INSTALLED --> INSTALLING --> INSTALLED(current)
    INSTALLED(old) --> INSTALLING --> INSTALLED(current)
    INSTALLING --(sync error)--> FAILED

INSTALLING is entered only when the stored version differs from the bundle
version or the resources directory is missing. A failed sync aborts
activation before any tool or command is registered, and leaves the stored
version untouched.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Union

from agent_pro.capabilities import (
    CapabilityName,
    CapabilityRegistry,
    InvocationContext,
    InvocationOptions,
    ToolResult,
    build_default_registry,
)
from agent_pro.commands import (
    RESET_USAGE_STATISTICS,
    SHOW_USAGE_STATISTICS,
    reset_usage_statistics,
    show_usage_statistics,
)
from agent_pro.errors import ActivationError, ResourceSyncError, StateStoreError
from agent_pro.host import HostServices
from agent_pro.resources.catalog import ResourceCategory, count_by_category, discover_resources
from agent_pro.resources.sync import ResourceSynchronizer, needs_sync
from agent_pro.settings import RESOURCES_DIRNAME, Settings
from agent_pro.state_store import INSTALLED_VERSION_KEY
from agent_pro.telemetry import TelemetryReporter

logger = logging.getLogger(__name__)

CommandHandler = Callable[[], Awaitable[object]]


class ActivationState(str, Enum):
    NOT_INSTALLED = "not_installed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class ExtensionHandle:
    """Everything ``start()`` wired up; pass it to ``stop()`` on shutdown."""

    settings: Settings
    host: HostServices
    reporter: TelemetryReporter
    registry: CapabilityRegistry
    resources_path: Path
    installed_version: str
    previous_version: Optional[str] = None
    synchronized: bool = False
    transitions: List[ActivationState] = field(default_factory=list)
    commands: Dict[str, CommandHandler] = field(default_factory=dict)
    disposed: bool = False

    @property
    def state(self) -> ActivationState:
        return self.transitions[-1] if self.transitions else ActivationState.INSTALLED

    def tool_names(self) -> List[str]:
        return self.registry.names()

    async def invoke_tool(
        self,
        name: Union[str, CapabilityName],
        options: Optional[InvocationOptions] = None,
    ) -> ToolResult:
        return await self.registry.invoke(name, options)

    async def execute_command(self, command_id: str) -> object:
        try:
            handler = self.commands[command_id]
        except KeyError:
            raise KeyError(f"Unknown command: {command_id}") from None
        return await handler()


@dataclass
class _ProvisionOutcome:
    previous_version: Optional[str]
    synchronized: bool


async def _provision(
    settings: Settings,
    host: HostServices,
    synchronizer: ResourceSynchronizer,
    resources_path: Path,
    transitions: List[ActivationState],
) -> _ProvisionOutcome:
    """Synchronize the bundle if needed, appending each state entered to ``transitions``."""
    current_version = settings.bundle.version
    installed_version = await host.state.get(INSTALLED_VERSION_KEY)
    transitions.append(
        ActivationState.NOT_INSTALLED
        if installed_version is None
        else ActivationState.INSTALLED
    )

    if not needs_sync(installed_version, current_version, resources_path):
        logger.info(f"Resources already installed (version {current_version})")
        return _ProvisionOutcome(installed_version, synchronized=False)

    logger.info(
        f"Installing resources (version: {installed_version} -> {current_version}), "
        f"state {transitions[-1].value} -> {ActivationState.INSTALLING.value}"
    )
    transitions.append(ActivationState.INSTALLING)
    await synchronizer.sync(settings.bundle.root, resources_path)
    # Only reached when the copy completed
    await host.state.update(INSTALLED_VERSION_KEY, current_version)
    transitions.append(ActivationState.INSTALLED)
    logger.info(f"Resources installed to {resources_path}")
    return _ProvisionOutcome(installed_version, synchronized=True)


def _activation_message(resources_path: Path, tool_count: int) -> str:
    counts = count_by_category(discover_resources(resources_path))
    return (
        f"Agent Pro: Activated! Your {counts[ResourceCategory.AGENTS]} expert agents "
        f"+ {tool_count} custom tools are ready. "
        "Open the assistant chat and type @ to see them."
    )


async def start(
    settings: Settings,
    host: HostServices,
    synchronizer: Optional[ResourceSynchronizer] = None,
) -> ExtensionHandle:
    """Activate: provision resources, register tools and commands.

    Raises:
        ActivationError: the bundle could not be installed. The error has
            already been shown to the user and nothing was registered.
    """
    logger.info("Agent Pro: Activating...")
    synchronizer = synchronizer or ResourceSynchronizer()
    storage_root = Path(host.storage_root)
    resources_path = storage_root / RESOURCES_DIRNAME
    transitions: List[ActivationState] = []

    try:
        storage_root.mkdir(parents=True, exist_ok=True)
        outcome = await _provision(settings, host, synchronizer, resources_path, transitions)
    except (ResourceSyncError, StateStoreError, OSError) as e:
        transitions.append(ActivationState.FAILED)
        logger.error(f"Agent Pro: Activation failed: {e}")
        await host.ui.show_error(f"Agent Pro: {e}")
        raise ActivationError(str(e), transitions) from e

    reporter = TelemetryReporter(host.state, enabled=settings.telemetry.enabled)
    context = InvocationContext(
        active_editor=host.active_editor,
        workspace_root=host.workspace_root,
        resources_root=resources_path,
    )
    registry = build_default_registry(reporter, context)
    logger.info(f"Agent Pro: Registered {len(registry)} custom tools")

    handle = ExtensionHandle(
        settings=settings,
        host=host,
        reporter=reporter,
        registry=registry,
        resources_path=resources_path,
        installed_version=settings.bundle.version,
        previous_version=outcome.previous_version,
        synchronized=outcome.synchronized,
        transitions=transitions,
    )
    handle.commands = {
        SHOW_USAGE_STATISTICS: partial(show_usage_statistics, reporter, host.ui),
        RESET_USAGE_STATISTICS: partial(reset_usage_statistics, reporter, host.ui),
    }

    if outcome.synchronized:
        await host.ui.show_information(_activation_message(resources_path, len(registry)))

    logger.info("Agent Pro: Ready")
    return handle


async def stop(handle: ExtensionHandle) -> None:
    """Deactivate: drop registered tools and commands. Safe to call twice."""
    if handle.disposed:
        return
    handle.registry.dispose()
    handle.commands.clear()
    handle.disposed = True
    logger.info("Agent Pro: Deactivated")
