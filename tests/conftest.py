"""Pytest configuration and fixtures for agent-pro tests.

This file intentionally keeps the test environment lean (no extra deps).
To support `async def` tests without pytest-asyncio, we provide a minimal
hook that runs coroutine test functions using the stdlib's asyncio.
"""

import asyncio
import inspect
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from agent_pro.host import Editor, HostServices, TextDocument
from agent_pro.settings import BundleSettings, Settings, TelemetrySettings, clear_settings_cache
from agent_pro.state_store import MemoryStateStore


class RecordingUI:
    """HostUI fake that records every message and answers confirmations."""

    def __init__(self, confirm_answer: bool = True):
        self.confirm_answer = confirm_answer
        self.infos: List[Tuple[str, bool]] = []
        self.errors: List[str] = []
        self.confirmations: List[Tuple[str, str]] = []

    async def show_information(self, message: str, modal: bool = False) -> None:
        self.infos.append((message, modal))

    async def show_error(self, message: str) -> None:
        self.errors.append(message)

    async def confirm(self, message: str, action: str) -> bool:
        self.confirmations.append((message, action))
        return self.confirm_answer


class FakeWorkbench:
    """Mutable stand-in for the IDE's editor/workspace state."""

    def __init__(self):
        self.editor: Optional[Editor] = None
        self.workspace: Optional[Path] = None

    def open(self, file_name: str, text: str, language_id: str = "python", selected_text: str = "") -> Editor:
        self.editor = Editor(
            document=TextDocument(file_name=file_name, language_id=language_id, text=text),
            selected_text=selected_text,
        )
        return self.editor

    def close(self) -> None:
        self.editor = None


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path_factory, monkeypatch):
    """Point XDG dirs at a temp location and drop cached settings."""
    xdg_root = tmp_path_factory.mktemp("xdg")
    monkeypatch.setenv("XDG_DATA_HOME", str(xdg_root / "data"))
    monkeypatch.setenv("XDG_STATE_HOME", str(xdg_root / "state"))
    monkeypatch.delenv("AGENT_PRO_TELEMETRY_ENABLED", raising=False)
    monkeypatch.delenv("AGENT_PRO_BUNDLE_ROOT", raising=False)
    monkeypatch.delenv("AGENT_PRO_BUNDLE_VERSION", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def bundle_dir(tmp_path) -> Path:
    """A small bundle tree with every resource category."""
    root = tmp_path / "bundle"
    (root / "agents").mkdir(parents=True)
    (root / "agents" / "reviewer.agent.md").write_text(
        "---\nname: reviewer\ndescription: Reviews code\n---\n# Reviewer\n"
    )
    (root / "agents" / "architect.agent.md").write_text(
        "---\ndescription: Designs systems\n---\n# Architect\n"
    )
    (root / "prompts").mkdir()
    (root / "prompts" / "explain.prompt.md").write_text("Explain the selection.\n")
    (root / "skills" / "refactoring").mkdir(parents=True)
    (root / "skills" / "refactoring" / "SKILL.md").write_text(
        "---\nname: refactoring\ndescription: Safe refactoring steps\n---\n# Refactoring\n"
    )
    (root / "instructions").mkdir()
    (root / "instructions" / "python.instructions.md").write_text(
        '---\napplyTo: "**/*.py"\n---\nUse pytest.\n'
    )
    (root / "templates").mkdir()
    (root / "templates" / "adr.md").write_text("# ADR\n")
    return root


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def ui() -> RecordingUI:
    return RecordingUI()


@pytest.fixture
def workbench() -> FakeWorkbench:
    return FakeWorkbench()


@pytest.fixture
def host(tmp_path, store, ui, workbench) -> HostServices:
    return HostServices(
        state=store,
        storage_root=tmp_path / "storage",
        ui=ui,
        active_editor=lambda: workbench.editor,
        workspace_root=lambda: workbench.workspace,
    )


@pytest.fixture
def make_settings(bundle_dir):
    def _make(version: str = "1", telemetry: bool = True, root: Optional[Path] = None) -> Settings:
        return Settings(
            telemetry=TelemetrySettings(enabled=telemetry),
            bundle=BundleSettings(root=root or bundle_dir, version=version),
        )

    return _make


def pytest_pyfunc_call(pyfuncitem: pytest.Item) -> bool | None:
    """Enable running `async def` tests without external plugins.

    If the test function is a coroutine function, execute it via asyncio.run.
    Return True to signal that the call was handled, allowing pytest to
    proceed without complaining about missing async plugins.
    """
    test_func = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_func):
        # Build the kwargs that pytest would normally inject (fixtures)
        kwargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        asyncio.run(test_func(**kwargs))
        return True
    return None
