"""DitLoop command line entry point

ditloop                          start (or fall back to a plain shell)
ditloop --panel TYPE --ipc PATH  run one panel process inside the session
ditloop --apply-layout NAME      resize the current session to a preset
ditloop --list-layouts           show the presets and their shortcuts
"""

import argparse
import asyncio
import os
from pathlib import Path

from rich.console import Console
from rich.table import Table

from . import __version__
from .config import DEFAULT_SESSION_NAME
from .errors import ExternalProcessError
from .fallback import ToggleShellOptions, check_tmux_available, spawn_toggle_shell
from .ipc import IpcClient
from .telemetry import get_logger, setup_logging
from .tmux import (
    LAYOUT_PRESETS,
    OrchestrateOptions,
    SessionOrchestrator,
    TmuxClient,
    apply_layout,
    discover_pane_ids,
)

logger = get_logger(__name__)

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ditloop", description="Terminal-first workspace IDE.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--session", default=None, help=f"tmux session name (default: {DEFAULT_SESSION_NAME})")
    parser.add_argument("--cwd", default=None, help="Workspace directory (default: current)")
    parser.add_argument("--layout", default="default", choices=sorted(LAYOUT_PRESETS), help="Initial preset")
    parser.add_argument("--profile", default=None, help="Profile exported to the fallback shell")
    parser.add_argument("--log-level", default=None, help="Override DITLOOP_LOG_LEVEL")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--panel", metavar="TYPE", help="Run a panel process of this type")
    mode.add_argument("--apply-layout", metavar="NAME", help="Apply a preset to the current session")
    mode.add_argument("--list-layouts", action="store_true", help="List layout presets")

    parser.add_argument("--ipc", metavar="PATH", help="IPC socket of the session (with --panel)")
    return parser


def print_layouts() -> None:
    table = Table(title="Layout presets")
    table.add_column("Name", style="bold")
    table.add_column("Shortcut", style="cyan")
    table.add_column("Panes")
    for preset in LAYOUT_PRESETS.values():
        table.add_row(preset.name, preset.shortcut, preset.description)
    console.print(table)


async def run_panel(panel_type: str, socket_path: str) -> int:
    """Print every message the session broadcasts."""
    client = IpcClient(socket_path)
    try:
        await client.connect()
    except OSError as e:
        console.print(f"[red]Cannot connect to {socket_path}: {e}[/red]")
        return 1

    console.rule(f"[bold]{panel_type}[/bold]")
    try:
        async for message in client.messages():
            console.print(f"[bold cyan]{message.type}[/bold cyan]", message.payload)
    finally:
        await client.close()
    return 0


async def run_apply_layout(name: str, session_name: str | None) -> int:
    tmux = TmuxClient()
    try:
        pane_ids = await discover_pane_ids(tmux, session_name)
        resized = await apply_layout(tmux, name, pane_ids)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return 2
    except ExternalProcessError as e:
        console.print(f"[red]tmux failed: {e}[/red]")
        return 1
    logger.info(f"[CLI] Applied {name} to {resized} panes")
    return 0


async def run_session(args: argparse.Namespace) -> int:
    """Start the tmux session and attach, or spawn the fallback shell."""
    cwd = args.cwd or os.getcwd()

    if not await check_tmux_available():
        console.print("[yellow]tmux not found, starting a plain shell[/yellow]")
        return await spawn_toggle_shell(ToggleShellOptions(workspace_path=cwd, profile_name=args.profile))

    tmux = TmuxClient()
    if tmux.is_inside_tmux():
        console.print("[red]Already inside tmux; run ditloop from a plain terminal[/red]")
        return 1

    options = OrchestrateOptions(
        session_name=args.session or DEFAULT_SESSION_NAME,
        cwd=cwd,
        layout=args.layout,
        workspaces=[{"path": cwd, "name": Path(cwd).name}],
    )
    try:
        session = await SessionOrchestrator(tmux).orchestrate(options)
    except ExternalProcessError as e:
        console.print(f"[red]Could not create session: {e}[/red]")
        return 1

    try:
        return await tmux.attach_session(session.session_name)
    finally:
        await session.teardown()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.list_layouts:
        print_layouts()
        return 0

    try:
        if args.panel:
            if not args.ipc:
                parser.error("--panel requires --ipc")
            return asyncio.run(run_panel(args.panel, args.ipc))
        if args.apply_layout:
            return asyncio.run(run_apply_layout(args.apply_layout, args.session))
        return asyncio.run(run_session(args))
    except KeyboardInterrupt:
        return 130
