"""Panel action dispatch - single-slot, last-writer-wins event bus

Consumers detect a new event by its timestamp only, since the same action
can legitimately repeat (two scroll-downs in a row).
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from ..telemetry import get_logger

logger = get_logger(__name__)


class PanelAction:
    """Actions a panel can receive."""

    SCROLL_UP = "scroll-up"
    SCROLL_DOWN = "scroll-down"
    ACTIVATE = "activate"
    TOGGLE_EXPAND = "toggle-expand"

    ALL = frozenset({SCROLL_UP, SCROLL_DOWN, ACTIVATE, TOGGLE_EXPAND})


@dataclass(frozen=True)
class PanelActionEvent:
    """A dispatched action. ts is in monotonic nanoseconds."""

    panel_id: str
    action: str
    ts: int


PanelActionListener = Callable[[PanelActionEvent], None]


class PanelActionStore:
    """Holds the last dispatched panel action."""

    def __init__(self):
        self._last_action: PanelActionEvent | None = None
        self._listeners: list[PanelActionListener] = []

    @property
    def last_action(self) -> PanelActionEvent | None:
        return self._last_action

    def dispatch(self, panel_id: str, action: str) -> PanelActionEvent:
        """Overwrite the slot with a new event.

        Raises:
            ValueError: Unknown action
        """
        if action not in PanelAction.ALL:
            raise ValueError(f"Unknown panel action: {action}")

        ts = time.monotonic_ns()
        if self._last_action is not None and ts <= self._last_action.ts:
            ts = self._last_action.ts + 1

        event = PanelActionEvent(panel_id=panel_id, action=action, ts=ts)
        self._last_action = event
        logger.debug(f"[PanelAction] {panel_id} <- {action}")
        for listener in list(self._listeners):
            listener(event)
        return event

    def subscribe(self, listener: PanelActionListener) -> Callable[[], None]:
        """Register a listener called synchronously on every dispatch.

        Returns:
            Unsubscribe function
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class PanelActionCursor:
    """Per-panel consumer tracking the last timestamp it has seen."""

    def __init__(self, store: PanelActionStore, panel_id: str):
        self.store = store
        self.panel_id = panel_id
        self._last_seen = 0

    def poll(self) -> PanelActionEvent | None:
        """Return the last action if it is new and addressed to this panel."""
        event = self.store.last_action
        if event is None or event.panel_id != self.panel_id or event.ts <= self._last_seen:
            return None
        self._last_seen = event.ts
        return event
