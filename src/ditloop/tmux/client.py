"""Tmux client for subprocess-based tmux control."""

import asyncio
import os
from dataclasses import dataclass

from ..config import TMUX_BINARY
from ..errors import ExternalProcessError
from ..telemetry import format_pane_log, get_logger, metrics

logger = get_logger(__name__)

# Use tab as delimiter to avoid conflicts with colons in titles
_FIELD_SEP = "\t"

_POSITIONS = ("left", "right", "top", "bottom")

# User option holding a pane's DitLoop role
PANE_ROLE_OPTION = "@ditloop_role"


@dataclass
class CreatePaneOptions:
    """Options for splitting a new pane.

    Attributes:
        position: Side of the target pane the new pane appears on
        size: Percentage (int) or literal tmux size such as "3" rows (str)
        cwd: Working directory of the new pane
        command: Command typed into the pane once created
        target: Pane to split (default: tmux's current pane)
    """

    position: str = "right"
    size: int | str = 50
    cwd: str | None = None
    command: str | None = None
    target: str | None = None


@dataclass
class PaneDimensions:
    """Target size for resize-pane, in cells (int) or percent ("25%")."""

    width: int | str | None = None
    height: int | str | None = None


class TmuxClient:
    """Client for driving tmux via subprocess commands.

    Every command raises ExternalProcessError when tmux cannot be started or
    exits non-zero. Nothing is retried; callers decide.
    """

    def __init__(self, socket_path: str | None = None, binary: str = TMUX_BINARY):
        """Initialize TmuxClient.

        Args:
            socket_path: Optional tmux socket path. If None, uses default socket.
            binary: tmux executable name or path
        """
        self._socket_path = socket_path
        self._binary = binary

    def _command(self, args: tuple[str, ...]) -> list[str]:
        cmd = [self._binary]
        if self._socket_path:
            cmd.extend(["-S", self._socket_path])
        cmd.extend(args)
        return cmd

    async def run(self, *args: str) -> str:
        """Execute a tmux command.

        Args:
            *args: Command arguments (e.g., "split-window", "-h")

        Returns:
            Command stdout.

        Raises:
            ExternalProcessError: tmux could not be spawned or exited non-zero
        """
        cmd = self._command(args)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"[Tmux] subprocess error: {e}")
            metrics.inc("tmux.error", {"cmd": args[0] if args else ""})
            raise ExternalProcessError(cmd, None, str(e)) from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            err = stderr.decode(errors="replace")
            logger.warning(f"[Tmux] command failed: {' '.join(cmd)}: {err.strip()}")
            metrics.inc("tmux.error", {"cmd": args[0] if args else ""})
            raise ExternalProcessError(cmd, proc.returncode, err)

        return stdout.decode(errors="replace")

    # === Environment ===

    async def is_available(self) -> bool:
        """Check whether tmux can be executed."""
        try:
            await self.run("-V")
            return True
        except ExternalProcessError:
            return False

    async def version(self) -> str | None:
        """Get the tmux version string (e.g. "3.4"), or None if unavailable."""
        try:
            output = await self.run("-V")
        except ExternalProcessError:
            return None
        parts = output.strip().split(None, 1)
        return parts[1] if len(parts) == 2 else None

    @staticmethod
    def is_inside_tmux() -> bool:
        """Whether this process runs inside a tmux client."""
        return bool(os.environ.get("TMUX"))

    # === Sessions ===

    async def create_session(self, name: str, cwd: str | None = None) -> str:
        """Create a detached session.

        Args:
            name: Session name
            cwd: Working directory of the initial pane

        Returns:
            Pane ID of the session's initial pane
        """
        args = ["new-session", "-d", "-s", name, "-P", "-F", "#{pane_id}"]
        if cwd:
            args.extend(["-c", cwd])
        output = await self.run(*args)
        return output.strip()

    async def has_session(self, name: str) -> bool:
        """Whether a session with this name exists."""
        try:
            await self.run("has-session", "-t", name)
            return True
        except ExternalProcessError:
            return False

    async def kill_session(self, name: str | None = None) -> None:
        """Kill a session (the current one when name is None)."""
        args = ["kill-session"]
        if name:
            args.extend(["-t", name])
        await self.run(*args)

    async def attach_session(self, name: str) -> int:
        """Attach the controlling terminal to a session.

        Runs with inherited stdio and returns when the client detaches.

        Returns:
            tmux client exit status
        """
        cmd = self._command(("attach-session", "-t", name))
        try:
            proc = await asyncio.create_subprocess_exec(*cmd)
        except OSError as e:
            raise ExternalProcessError(cmd, None, str(e)) from e
        return await proc.wait()

    # === Panes ===

    async def create_pane(self, options: CreatePaneOptions) -> str:
        """Create a pane by splitting an existing one.

        Args:
            options: Split position, size, cwd and optional start command

        Returns:
            The new pane ID (e.g. "%3")
        """
        if options.position not in _POSITIONS:
            raise ValueError(f"Unknown pane position: {options.position}")

        args = ["split-window", "-P", "-F", "#{pane_id}"]
        if options.position in ("left", "right"):
            args.append("-h")
        else:
            args.append("-v")
        if options.position in ("left", "top"):
            args.append("-b")
        size = f"{options.size}%" if isinstance(options.size, int) else options.size
        args.extend(["-l", size])
        if options.target:
            args.extend(["-t", options.target])
        if options.cwd:
            args.extend(["-c", options.cwd])

        pane_id = (await self.run(*args)).strip()
        logger.debug(format_pane_log("Tmux", pane_id, f"created ({options.position} {size})"))

        if options.command:
            try:
                await self.send_keys(pane_id, options.command)
            except ExternalProcessError:
                await self.kill_pane(pane_id)
                raise
        return pane_id

    async def kill_pane(self, pane_id: str) -> None:
        """Kill a pane."""
        await self.run("kill-pane", "-t", pane_id)
        logger.debug(format_pane_log("Tmux", pane_id, "killed"))

    async def select_pane(self, pane_id: str) -> None:
        """Select/activate a pane."""
        await self.run("select-pane", "-t", pane_id)

    async def resize_pane(self, pane_id: str, dims: PaneDimensions) -> None:
        """Resize a pane.

        Args:
            pane_id: The pane identifier
            dims: Width and/or height in cells or percent
        """
        if dims.width is None and dims.height is None:
            raise ValueError("resize_pane needs a width or a height")
        args = ["resize-pane", "-t", pane_id]
        if dims.width is not None:
            args.extend(["-x", str(dims.width)])
        if dims.height is not None:
            args.extend(["-y", str(dims.height)])
        await self.run(*args)

    async def send_keys(self, pane_id: str, text: str, enter: bool = True) -> None:
        """Type text into a pane.

        Args:
            pane_id: Target pane
            text: Keystrokes to send
            enter: Press Enter afterwards
        """
        args = ["send-keys", "-t", pane_id, text]
        if enter:
            args.append("Enter")
        await self.run(*args)

    async def rename_pane(self, pane_id: str, name: str) -> None:
        """Set a pane's title."""
        await self.run("select-pane", "-t", pane_id, "-T", name)

    async def set_pane_role(self, pane_id: str, role: str) -> None:
        """Tag a pane with its DitLoop role (pane option, survives title changes)."""
        await self.run("set-option", "-p", "-t", pane_id, PANE_ROLE_OPTION, role)

    async def list_panes(self, target: str | None = None) -> list[dict]:
        """List panes of a session (current window when target is None).

        Returns:
            List of pane dicts with keys:
            - pane_id: str (e.g., "%0")
            - index: int
            - width: int
            - height: int
            - active: bool
            - role: str ("" when untagged)
        """
        fmt = _FIELD_SEP.join([
            "#{pane_id}", "#{pane_index}", "#{pane_width}",
            "#{pane_height}", "#{pane_active}", "#{" + PANE_ROLE_OPTION + "}",
        ])
        args = ["list-panes", "-F", fmt]
        if target:
            args.extend(["-s", "-t", target])
        output = await self.run(*args)

        panes = []
        for line in output.strip().split("\n"):
            if not line:
                continue
            parts = line.split(_FIELD_SEP)
            if len(parts) >= 5:
                try:
                    panes.append(
                        {
                            "pane_id": parts[0],
                            "index": int(parts[1]),
                            "width": int(parts[2]),
                            "height": int(parts[3]),
                            "active": parts[4] == "1",
                            "role": parts[5] if len(parts) >= 6 else "",
                        }
                    )
                except ValueError as e:
                    logger.warning(f"[Tmux] Failed to parse pane line: {line!r}: {e}")

        return panes

    # === Options / key bindings ===

    async def bind_key(self, key: str, command: str) -> None:
        """Bind a root-table key to a shell command (run-shell)."""
        await self.run("bind-key", "-n", key, "run-shell", command)
