"""Interfaces the host provides to the activation core.

Everything the core needs from the IDE (persistent state, storage location,
UI prompts, active document, workspace) arrives through ``HostServices`` so
the core can be driven by the console host or by test fakes.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.markup import escape as escape_rich_markup
from rich.panel import Panel
from rich.prompt import Confirm

from agent_pro.state_store import StateStore

logger = logging.getLogger(__name__)

# File extension -> language id, as reported by the IDE
LANGUAGE_IDS = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".cs": "csharp",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".md": "markdown",
    ".json": "json",
    ".toml": "toml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".sh": "shellscript",
}


@dataclass(frozen=True)
class TextDocument:
    file_name: str
    language_id: str
    text: str

    @property
    def base_name(self) -> str:
        return Path(self.file_name).name


@dataclass(frozen=True)
class Editor:
    """The focused editor: its document and the currently selected text."""

    document: TextDocument
    selected_text: str = ""


class HostUI(Protocol):
    async def show_information(self, message: str, modal: bool = False) -> None: ...

    async def show_error(self, message: str) -> None: ...

    async def confirm(self, message: str, action: str) -> bool: ...


def _no_editor() -> Optional[Editor]:
    return None


def _no_workspace() -> Optional[Path]:
    return None


@dataclass
class HostServices:
    """Capabilities handed to ``start()`` by the host."""

    state: StateStore
    storage_root: Path
    ui: HostUI
    active_editor: Callable[[], Optional[Editor]] = field(default=_no_editor)
    workspace_root: Callable[[], Optional[Path]] = field(default=_no_workspace)


def detect_language(path: Path) -> str:
    return LANGUAGE_IDS.get(Path(path).suffix.lower(), "plaintext")


def document_from_path(path: Path, language_id: Optional[str] = None) -> TextDocument:
    """Load a file from disk as if it were open in an editor."""
    path = Path(path)
    text = path.read_text(encoding="utf-8", errors="replace")
    return TextDocument(
        file_name=str(path.resolve()),
        language_id=language_id or detect_language(path),
        text=text,
    )


class ConsoleUI:
    """HostUI that renders to a terminal with rich."""

    def __init__(self, console: Optional[Console] = None, assume_yes: bool = False):
        self.console = console or Console()
        self.assume_yes = assume_yes

    async def show_information(self, message: str, modal: bool = False) -> None:
        safe_text = escape_rich_markup(message)
        if modal:
            self.console.print(Panel(safe_text, border_style="cyan"))
        else:
            self.console.print(f"[cyan]{safe_text}[/cyan]")

    async def show_error(self, message: str) -> None:
        self.console.print(f"[bold red]{escape_rich_markup(message)}[/bold red]")

    async def confirm(self, message: str, action: str) -> bool:
        if self.assume_yes:
            return True
        prompt = f"{escape_rich_markup(message)} [bold]({escape_rich_markup(action)})[/bold]"
        return await asyncio.to_thread(
            Confirm.ask, prompt, console=self.console, default=False
        )
