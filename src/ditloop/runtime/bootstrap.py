"""Bootstrap - builds the per-process components

Responsibilities:
- create the layout store (restoring any persisted layout)
- create the keyboard store + router with the layout's panels as focus order
- create the panel action store and the multi-terminal manager

Not responsible for:
- starting/stopping the IPC server or tmux session (the caller owns them)

Every call returns fresh components; nothing is kept in module state.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from ..ipc import IpcServer
from ..keyboard import KeyboardStore, KeyPress, KeyRouter
from ..layout import LayoutPersistence, LayoutStore
from ..layout.store import LayoutSource
from ..panels import PanelActionStore
from ..telemetry import get_logger
from ..tmux import MultiTerminalManager, PaneIds, TmuxClient

logger = get_logger(__name__)


@dataclass
class RuntimeComponents:
    """Components owned by one DitLoop process."""

    tmux: TmuxClient
    layout_store: LayoutStore
    keyboard: KeyboardStore
    router: KeyRouter
    panel_actions: PanelActionStore
    terminals: MultiTerminalManager
    ipc_server: IpcServer | None = None
    pane_ids: PaneIds = field(default_factory=dict)


def bootstrap(
    tmux: TmuxClient | None = None,
    persistence: LayoutSource | None = None,
    ipc_server: IpcServer | None = None,
    pane_ids: PaneIds | None = None,
    on_search_input: Callable[[KeyPress], None] | None = None,
    restore_layout: bool = True,
) -> RuntimeComponents:
    """Construct runtime components.

    Args:
        tmux: Multiplexer client (default: a new TmuxClient)
        persistence: Layout load/save collaborator (default: ~/.ditloop/layout.json)
        ipc_server: Server used to broadcast shared state, if this process owns one
        pane_ids: role -> pane id map of the running session
        on_search_input: Receives key presses typed in search mode
        restore_layout: Load the persisted layout into the store

    Returns:
        RuntimeComponents
    """
    tmux = tmux or TmuxClient()
    layout_store = LayoutStore(persistence=persistence or LayoutPersistence())
    if restore_layout:
        layout_store.restore()

    keyboard = KeyboardStore(panel_order=layout_store.layout.panel_ids())
    router = KeyRouter(keyboard, on_search_input=on_search_input)

    logger.info(f"[Bootstrap] Components created ({len(keyboard.panel_order)} panels)")

    return RuntimeComponents(
        tmux=tmux,
        layout_store=layout_store,
        keyboard=keyboard,
        router=router,
        panel_actions=PanelActionStore(),
        terminals=MultiTerminalManager(tmux),
        ipc_server=ipc_server,
        pane_ids=dict(pane_ids or {}),
    )
