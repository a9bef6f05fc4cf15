"""Console host for agent_pro.

Plays the part of the IDE: a JSON state file stands in for global state,
``--file``/``--workspace`` stand in for the active editor and the open
folder, and rich renders the UI messages.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from agent_pro import __version__
from agent_pro.activation import ExtensionHandle, start, stop
from agent_pro.capabilities import CapabilityName, InvocationOptions
from agent_pro.commands import RESET_USAGE_STATISTICS, SHOW_USAGE_STATISTICS
from agent_pro.errors import ActivationError
from agent_pro.host import ConsoleUI, Editor, HostServices, document_from_path
from agent_pro.settings import Settings, get_settings
from agent_pro.state_store import JsonFileStateStore

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _parse_selection(selection: Optional[str], text: str) -> str:
    """``"3:7"`` -> lines 3..7 (1-based, inclusive) of ``text``."""
    if not selection:
        return ""
    start_str, _, end_str = selection.partition(":")
    try:
        start_line = int(start_str)
        end_line = int(end_str) if end_str else start_line
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid selection '{selection}', expected START:END")
    lines = text.split("\n")
    return "\n".join(lines[max(start_line, 1) - 1 : end_line])


def build_host(
    settings: Settings,
    ui: ConsoleUI,
    file: Optional[Path] = None,
    selection: Optional[str] = None,
    workspace: Optional[Path] = None,
) -> HostServices:
    editor: Optional[Editor] = None
    if file is not None:
        document = document_from_path(file)
        editor = Editor(document=document, selected_text=_parse_selection(selection, document.text))

    settings.ensure_directories()
    workspace_root = workspace.resolve() if workspace is not None else None
    return HostServices(
        state=JsonFileStateStore(settings.paths.state_file),
        storage_root=settings.paths.storage_dir,
        ui=ui,
        active_editor=lambda: editor,
        workspace_root=lambda: workspace_root,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-pro",
        description="Agent Pro - provision agents, prompts and skills; run analysis tools",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("activate", help="Install resources if needed and report status")
    subparsers.add_parser("tools", help="List available tools")

    invoke = subparsers.add_parser("invoke", help="Run one tool")
    invoke.add_argument("tool", choices=[name.value for name in CapabilityName])
    invoke.add_argument("--file", type=Path, help="File to treat as the active editor")
    invoke.add_argument("--selection-lines", help="Selected lines in the file, START:END")
    invoke.add_argument("--workspace", type=Path, help="Workspace folder")
    invoke.add_argument("--input", default="{}", help="Tool input as a JSON object")

    subparsers.add_parser("stats", help="Show tool usage statistics")
    reset = subparsers.add_parser("reset-stats", help="Reset tool usage statistics")
    reset.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    return parser


def _print_tools(handle: ExtensionHandle, console: Console) -> None:
    table = Table(title="Agent Pro tools")
    table.add_column("Name", style="cyan")
    table.add_column("Display name")
    table.add_column("Description")
    for descriptor in handle.registry.descriptors():
        table.add_row(descriptor.name, descriptor.display_name, descriptor.description)
    console.print(table)


async def _run(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    tool_input = {}
    if args.command == "invoke":
        try:
            tool_input = json.loads(args.input)
        except json.JSONDecodeError as e:
            console.print(f"[red]--input is not valid JSON: {e}[/red]")
            return 2
        if not isinstance(tool_input, dict):
            console.print("[red]--input must be a JSON object[/red]")
            return 2

    ui = ConsoleUI(console, assume_yes=getattr(args, "yes", False))
    try:
        host = build_host(
            settings,
            ui,
            file=getattr(args, "file", None),
            selection=getattr(args, "selection_lines", None),
            workspace=getattr(args, "workspace", None),
        )
    except OSError as e:
        console.print(f"[red]Cannot open {e.filename}: {e.strerror}[/red]")
        return 2

    try:
        handle = await start(settings, host)
    except ActivationError:
        return 1

    try:
        if args.command == "activate":
            status = "installed" if handle.synchronized else "up to date"
            console.print(
                f"Resources {status}: version {handle.installed_version} at {handle.resources_path}"
            )
        elif args.command == "tools":
            _print_tools(handle, console)
        elif args.command == "invoke":
            result = await handle.invoke_tool(args.tool, InvocationOptions(input=tool_input))
            console.print(result.text, markup=False, highlight=False)
        elif args.command == "stats":
            await handle.execute_command(SHOW_USAGE_STATISTICS)
        elif args.command == "reset-stats":
            await handle.execute_command(RESET_USAGE_STATISTICS)
    finally:
        await stop(handle)
    return 0


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    console = console or Console()
    configure_logging(args.verbose, console)

    settings = get_settings()
    try:
        return asyncio.run(_run(args, settings, console))
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        return 130
