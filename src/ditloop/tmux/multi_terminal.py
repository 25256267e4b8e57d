"""Multi-terminal manager - several workspace terminals in one session"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from ..config import TERMINAL_SPLIT_PERCENT
from ..telemetry import format_pane_log, get_logger
from .client import CreatePaneOptions

if TYPE_CHECKING:
    from .client import TmuxClient

logger = get_logger(__name__)


@dataclass
class TerminalInstance:
    """A terminal running in a tmux pane, cd'd into a workspace."""

    pane_id: str
    workspace_path: str
    workspace_name: str
    active: bool = False


class MultiTerminalManager:
    """Ordered list of terminal panes with cyclic focus.

    At most one instance is active. Focus rotation is plain index arithmetic
    modulo the list length.
    """

    def __init__(self, tmux: "TmuxClient", split_percent: int = TERMINAL_SPLIT_PERCENT):
        self._tmux = tmux
        self._split_percent = split_percent
        self._terminals: list[TerminalInstance] = []
        self._active_index: int | None = None

    @property
    def terminals(self) -> list[TerminalInstance]:
        """Snapshot of the terminals in order."""
        return [replace(t) for t in self._terminals]

    def __len__(self) -> int:
        return len(self._terminals)

    async def add_terminal(self, workspace_path: str, workspace_name: str) -> TerminalInstance:
        """Open a terminal pane for a workspace and make it active.

        Args:
            workspace_path: Absolute workspace path (pane cwd)
            workspace_name: Display name

        Returns:
            The new terminal instance
        """
        pane_id = await self._tmux.create_pane(
            CreatePaneOptions(position="right", size=self._split_percent, cwd=workspace_path)
        )
        instance = TerminalInstance(pane_id, workspace_path, workspace_name)
        self._terminals.append(instance)
        self._activate(len(self._terminals) - 1)
        logger.info(format_pane_log("Terminals", pane_id, f"added for {workspace_name}"))
        return replace(instance)

    async def remove_terminal(self, pane_id: str) -> bool:
        """Kill a terminal pane and forget it.

        No other terminal is promoted to active.

        Returns:
            False if the pane id is not managed here
        """
        idx = self._index_of(pane_id)
        if idx is None:
            logger.debug(format_pane_log("Terminals", pane_id, "remove: not managed"))
            return False

        await self._tmux.kill_pane(pane_id)
        del self._terminals[idx]

        if self._active_index is not None:
            if idx == self._active_index:
                self._active_index = None
            elif idx < self._active_index:
                self._active_index -= 1

        logger.info(format_pane_log("Terminals", pane_id, "removed"))
        return True

    async def focus_next(self) -> TerminalInstance | None:
        """Activate the next terminal, wrapping around."""
        if not self._terminals:
            return None
        start = -1 if self._active_index is None else self._active_index
        return await self._focus((start + 1) % len(self._terminals))

    async def focus_prev(self) -> TerminalInstance | None:
        """Activate the previous terminal, wrapping around."""
        if not self._terminals:
            return None
        start = 0 if self._active_index is None else self._active_index
        return await self._focus((start - 1) % len(self._terminals))

    def get_active_terminal(self) -> TerminalInstance | None:
        """The active terminal, or None."""
        if self._active_index is None:
            return None
        return replace(self._terminals[self._active_index])

    async def _focus(self, idx: int) -> TerminalInstance:
        await self._tmux.select_pane(self._terminals[idx].pane_id)
        self._activate(idx)
        return replace(self._terminals[idx])

    def _activate(self, idx: int) -> None:
        if self._active_index is not None:
            self._terminals[self._active_index].active = False
        self._terminals[idx].active = True
        self._active_index = idx

    def _index_of(self, pane_id: str) -> int | None:
        return next((i for i, t in enumerate(self._terminals) if t.pane_id == pane_id), None)
