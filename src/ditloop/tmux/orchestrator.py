"""Session orchestrator - stands up and tears down a full IDE session

Flow:
1. kill a stale session with the same name
2. start the IPC server on a fresh socket
3. create the session (its first pane is the terminal)
4. split sidebar / git / status panes off the terminal and launch the
   matching `--panel` process in each
5. apply the requested preset, bind Ctrl+1..5, focus the terminal

Any failure along the way kills every pane created so far and stops the
IPC server before the error propagates.
"""

import asyncio
import os
import shlex
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from ..config import DEFAULT_SESSION_NAME, IPC_SOCKET_DIR, IPC_SOCKET_PREFIX
from ..errors import ExternalProcessError
from ..ipc import WORKSPACE_CHANGED, IpcMessage, IpcServer
from ..telemetry import get_logger
from .client import CreatePaneOptions, TmuxClient
from .presets import LAYOUT_PRESETS, PaneIds, apply_layout, get_preset

logger = get_logger(__name__)

# role -> (panel type passed to --panel, split options relative to the terminal)
PANEL_PANES: tuple[tuple[str, str, CreatePaneOptions], ...] = (
    ("sidebar", "sidebar", CreatePaneOptions(position="left", size=25)),
    ("git", "source-control", CreatePaneOptions(position="right", size=25)),
    ("status", "status", CreatePaneOptions(position="bottom", size="3")),
)


def default_cli_command() -> list[str]:
    """Command that starts a DitLoop process with this interpreter."""
    return [sys.executable, "-m", "ditloop"]


def new_socket_path() -> Path:
    """A unique IPC socket path under the socket directory."""
    return IPC_SOCKET_DIR / f"{IPC_SOCKET_PREFIX}{uuid.uuid4().hex[:12]}.sock"


@dataclass
class OrchestrateOptions:
    """Options for orchestrate().

    Attributes:
        session_name: tmux session name
        cwd: Working directory of every pane (default: current directory)
        cli_command: argv prefix used to launch panel processes
        layout: Initial preset name
        workspaces: Workspace summaries broadcast to panels once up
        bind_shortcuts: Bind C-1..C-5 to the presets
        socket_path: IPC socket path (default: fresh path in the temp dir)
    """

    session_name: str = DEFAULT_SESSION_NAME
    cwd: str | None = None
    cli_command: list[str] = field(default_factory=default_cli_command)
    layout: str = "default"
    workspaces: list[dict[str, Any]] | None = None
    bind_shortcuts: bool = True
    socket_path: str | Path | None = None


@dataclass
class OrchestratedSession:
    """A running IDE session and its teardown handle."""

    session_name: str
    socket_path: str
    pane_ids: PaneIds
    ipc_server: IpcServer
    tmux: TmuxClient
    closed: bool = False

    async def teardown(self) -> None:
        """Kill the tmux session and stop the IPC server (idempotent)."""
        if self.closed:
            return
        self.closed = True
        try:
            await self.tmux.kill_session(self.session_name)
        except ExternalProcessError as e:
            logger.debug(f"[Orchestrator] Session {self.session_name} already gone: {e}")
        await self.ipc_server.stop()
        logger.info(f"[Orchestrator] Session {self.session_name} torn down")


class SessionOrchestrator:
    """Creates the standard sidebar | terminal | git (+ status) session."""

    def __init__(
        self,
        tmux: TmuxClient | None = None,
        server_factory: Callable[[str], IpcServer] = IpcServer,
    ):
        self._tmux = tmux or TmuxClient()
        self._server_factory = server_factory

    async def orchestrate(self, options: OrchestrateOptions | None = None) -> OrchestratedSession:
        """Build the full pane tree for one IDE session.

        Args:
            options: Session options

        Returns:
            The session with its pane ids, IPC server and teardown()

        Raises:
            ExternalProcessError: A tmux command failed (after rollback)
            ValueError: Unknown preset name
        """
        options = options or OrchestrateOptions()
        get_preset(options.layout)
        tmux = self._tmux
        name = options.session_name
        cwd = options.cwd or os.getcwd()

        if await tmux.has_session(name):
            logger.info(f"[Orchestrator] Killing stale session {name}")
            await tmux.kill_session(name)

        socket_path = str(options.socket_path or new_socket_path())
        ipc_server = self._server_factory(socket_path)
        await ipc_server.start()

        created: list[str] = []
        try:
            terminal_id = await tmux.create_session(name, cwd)
            created.append(terminal_id)
            await self._tag(terminal_id, "terminal")
            pane_ids: PaneIds = {"terminal": terminal_id}

            for role, panel, split in PANEL_PANES:
                pane_id = await tmux.create_pane(replace(split, cwd=cwd, target=terminal_id))
                created.append(pane_id)
                pane_ids[role] = pane_id
                await self._tag(pane_id, role)
                await tmux.send_keys(
                    pane_id,
                    shlex.join([*options.cli_command, "--panel", panel, "--ipc", socket_path]),
                )

            if options.layout != "default":
                await apply_layout(tmux, options.layout, pane_ids)

            if options.bind_shortcuts:
                for i, preset_name in enumerate(LAYOUT_PRESETS, start=1):
                    await tmux.bind_key(
                        f"C-{i}",
                        shlex.join([*options.cli_command, "--apply-layout", preset_name]),
                    )

            await tmux.select_pane(terminal_id)

        except (Exception, asyncio.CancelledError) as e:
            logger.error(f"[Orchestrator] Session setup failed, rolling back {len(created)} panes: {e}")
            await self._rollback(created, ipc_server)
            raise

        if options.workspaces:
            ipc_server.broadcast(
                IpcMessage(type=WORKSPACE_CHANGED, payload={"workspaces": options.workspaces})
            )

        logger.info(f"[Orchestrator] Session {name} ready: {pane_ids}")
        return OrchestratedSession(
            session_name=name,
            socket_path=socket_path,
            pane_ids=pane_ids,
            ipc_server=ipc_server,
            tmux=tmux,
        )

    async def _tag(self, pane_id: str, role: str) -> None:
        await self._tmux.rename_pane(pane_id, role)
        await self._tmux.set_pane_role(pane_id, role)

    async def _rollback(self, created: list[str], ipc_server: IpcServer) -> None:
        for pane_id in reversed(created):
            try:
                await self._tmux.kill_pane(pane_id)
            except ExternalProcessError as e:
                logger.warning(f"[Orchestrator] Rollback could not kill {pane_id}: {e}")
        await ipc_server.stop()


async def discover_pane_ids(tmux: TmuxClient, session_name: str | None = None) -> PaneIds:
    """Rebuild the role -> pane id map from pane role tags.

    Args:
        tmux: tmux client
        session_name: Session to inspect (default: the current one)
    """
    panes = await tmux.list_panes(session_name)
    return {pane["role"]: pane["pane_id"] for pane in panes if pane["role"]}
