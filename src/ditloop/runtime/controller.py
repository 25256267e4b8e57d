"""Workspace controller - turns routed key actions into state changes

keystroke -> KeyRouter -> RoutedAction -> one of:
- LayoutStore (resize / reset)
- PanelActionStore (scroll / activate / expand)
- MultiTerminalManager (new / close / cycle terminals)
- apply_layout (preset switch)

Layout changes made here are broadcast to sibling processes; messages from
siblings are applied locally through apply_remote() without re-broadcasting.
"""

from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from ..config import RESIZE_STEP
from ..errors import ExternalProcessError
from ..ipc import LAYOUT_CHANGED, WORKSPACE_CHANGED, IpcMessage
from ..keyboard import KeyBinding, KeyMode, KeyPress, RoutedAction
from ..layout import LayoutConfig
from ..panels import PanelAction
from ..telemetry import get_logger
from ..tmux import apply_layout
from .bootstrap import RuntimeComponents

logger = get_logger(__name__)

APPLY_LAYOUT_PREFIX = "apply-layout:"

TERMINAL_BINDINGS: tuple[KeyBinding, ...] = (
    KeyBinding(key="ctrl+n", mode=KeyMode.NORMAL, action="new-terminal", description="New terminal"),
    KeyBinding(key="ctrl+x", mode=KeyMode.NORMAL, action="close-terminal", description="Close terminal"),
    KeyBinding(key="]", mode=KeyMode.NORMAL, action="next-terminal", description="Next terminal"),
    KeyBinding(key="[", mode=KeyMode.NORMAL, action="prev-terminal", description="Previous terminal"),
)


class WorkspaceController:
    """Performs the actions the key router hands back.

    Args:
        components: Runtime components from bootstrap()
        workspace_path: Directory new terminals open in
        workspace_name: Display name of the workspace
        on_notice: Receives non-fatal error messages
        on_quit: Called for the quit action
    """

    def __init__(
        self,
        components: RuntimeComponents,
        workspace_path: str,
        workspace_name: str = "",
        on_notice: Callable[[str], None] | None = None,
        on_quit: Callable[[], None] | None = None,
    ):
        self.components = components
        self.workspace_path = workspace_path
        self.workspace_name = workspace_name
        self.workspaces: list[dict[str, Any]] = []
        self._on_notice = on_notice
        self._on_quit = on_quit
        self._applying_remote = False

        components.keyboard.register_bindings(TERMINAL_BINDINGS)
        components.layout_store.set_change_callback(self._on_layout_change)

    async def handle_key(self, press: KeyPress) -> RoutedAction | None:
        """Route a key press and perform the resulting action."""
        routed = self.components.router.handle(press)
        if routed is not None:
            await self.perform(routed)
        return routed

    async def perform(self, routed: RoutedAction) -> bool:
        """Perform one routed action.

        Returns:
            Whether the action was recognised
        """
        try:
            return await self._perform(routed.action, routed.panel_id)
        except ExternalProcessError as e:
            logger.warning(f"[Controller] {routed.action} failed: {e}")
            self._notice(f"{routed.action} failed: {e}")
            return True

    async def _perform(self, action: str, panel_id: str) -> bool:
        c = self.components

        if action == "quit":
            if self._on_quit:
                self._on_quit()
        elif action in ("resize-grow", "resize-shrink"):
            if not panel_id:
                return True
            delta = RESIZE_STEP if action == "resize-grow" else -RESIZE_STEP
            c.layout_store.resize_panel(panel_id, "h", delta)
        elif action == "reset-layout":
            c.layout_store.reset_layout()
        elif action in PanelAction.ALL:
            c.panel_actions.dispatch(panel_id, action)
        elif action == "new-terminal":
            await c.terminals.add_terminal(self.workspace_path, self.workspace_name)
        elif action == "close-terminal":
            active = c.terminals.get_active_terminal()
            if active is None:
                self._notice("No active terminal")
            else:
                await c.terminals.remove_terminal(active.pane_id)
        elif action == "next-terminal":
            await c.terminals.focus_next()
        elif action == "prev-terminal":
            await c.terminals.focus_prev()
        elif action.startswith(APPLY_LAYOUT_PREFIX):
            name = action.removeprefix(APPLY_LAYOUT_PREFIX)
            try:
                await apply_layout(c.tmux, name, c.pane_ids)
            except ValueError as e:
                self._notice(str(e))
        else:
            logger.debug(f"[Controller] Unhandled action {action} ({panel_id})")
            return False
        return True

    # === IPC ===

    def apply_remote(self, message: IpcMessage) -> bool:
        """Apply a state change broadcast by another process.

        Returns:
            Whether the message was applied
        """
        if message.type == LAYOUT_CHANGED:
            try:
                config = LayoutConfig.model_validate(message.payload)
            except ValidationError as e:
                logger.warning(f"[Controller] Ignoring invalid remote layout: {e}")
                return False
            self._applying_remote = True
            try:
                self.components.layout_store.load_layout(config)
            finally:
                self._applying_remote = False
            return True

        if message.type == WORKSPACE_CHANGED:
            payload = message.payload if isinstance(message.payload, dict) else {}
            if isinstance(payload.get("workspaces"), list):
                self.workspaces = payload["workspaces"]
            if payload.get("path"):
                self.workspace_path = payload["path"]
                self.workspace_name = payload.get("name", self.workspace_name)
            return True

        return False

    def _on_layout_change(self, layout: LayoutConfig, dirty: bool) -> None:
        self.components.keyboard.set_panel_order(layout.panel_ids())
        server = self.components.ipc_server
        if self._applying_remote or server is None:
            return
        server.broadcast(IpcMessage(type=LAYOUT_CHANGED, payload=layout.to_json_dict()))

    def _notice(self, text: str) -> None:
        if self._on_notice:
            self._on_notice(text)
