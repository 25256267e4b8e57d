"""Keyboard store - mode, panel focus and key binding registry"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ..telemetry import get_logger

logger = get_logger(__name__)

GLOBAL_PANEL = ""


class KeyMode(Enum):
    """Keyboard input mode."""

    NORMAL = "normal"
    SEARCH = "search"
    COMMAND = "command"


@dataclass(frozen=True)
class KeyBinding:
    """A key binding.

    Attributes:
        key: Canonical key name ("j", "enter", "tab", "ctrl+f", ...)
        mode: Mode the binding is active in
        action: Action identifier dispatched on match
        description: Help overlay text
        panel_id: Owning panel; "" makes the binding global
    """

    key: str
    mode: KeyMode
    action: str
    description: str = ""
    panel_id: str = GLOBAL_PANEL

    @property
    def is_global(self) -> bool:
        return self.panel_id == GLOBAL_PANEL


class KeyboardStore:
    """Keyboard state owned by one process.

    Binding resolution for a key: exact (mode, focused panel) match first,
    then a global (mode, "") binding, otherwise nothing.
    """

    def __init__(self, panel_order: Iterable[str] = ()):
        self.mode = KeyMode.NORMAL
        self.focused_panel_id = ""
        self.panel_order: list[str] = []
        self.bindings: list[KeyBinding] = []
        self.help_visible = False
        self.set_panel_order(panel_order)

    # === Mode / help ===

    def set_mode(self, mode: KeyMode) -> None:
        if mode != self.mode:
            logger.debug(f"[Keyboard] mode {self.mode.value} -> {mode.value}")
        self.mode = mode

    def toggle_help(self) -> bool:
        self.help_visible = not self.help_visible
        return self.help_visible

    # === Focus ===

    def set_focus(self, panel_id: str) -> None:
        self.focused_panel_id = panel_id

    def set_panel_order(self, order: Iterable[str]) -> None:
        """Set the focus cycle; keeps focus if the panel is still present."""
        self.panel_order = list(order)
        if self.focused_panel_id not in self.panel_order:
            self.focused_panel_id = self.panel_order[0] if self.panel_order else ""

    def focus_next(self) -> str:
        return self._step(1)

    def focus_prev(self) -> str:
        return self._step(-1)

    # h/l move focus the same way Tab/Shift+Tab do
    focus_right = focus_next
    focus_left = focus_prev

    def focus_by_number(self, number: int) -> str:
        """Focus the panel at a 1-based position in panel_order."""
        idx = number - 1
        if 0 <= idx < len(self.panel_order):
            self.focused_panel_id = self.panel_order[idx]
        return self.focused_panel_id

    def _step(self, offset: int) -> str:
        if not self.panel_order:
            return self.focused_panel_id
        try:
            idx = self.panel_order.index(self.focused_panel_id)
        except ValueError:
            idx = -1 if offset > 0 else 0
        self.focused_panel_id = self.panel_order[(idx + offset) % len(self.panel_order)]
        return self.focused_panel_id

    # === Bindings ===

    def register_bindings(self, bindings: Iterable[KeyBinding]) -> None:
        """Append bindings; a key may be bound for several (mode, panel) pairs."""
        self.bindings.extend(bindings)

    def unregister_bindings(self, panel_id: str) -> int:
        """Remove every binding owned by panel_id.

        Returns:
            Number of bindings removed (0 for an unknown panel)
        """
        before = len(self.bindings)
        self.bindings = [b for b in self.bindings if b.panel_id != panel_id]
        return before - len(self.bindings)

    def remove_bindings(self, bindings: Iterable[KeyBinding]) -> int:
        """Remove exactly the given binding objects, one registration each.

        Equal bindings registered by someone else stay in place.

        Returns:
            Number of bindings removed
        """
        removed = 0
        for binding in bindings:
            for idx in range(len(self.bindings) - 1, -1, -1):
                if self.bindings[idx] is binding:
                    del self.bindings[idx]
                    removed += 1
                    break
        return removed

    def resolve(self, key: str) -> KeyBinding | None:
        """Find the binding a key press dispatches to."""
        fallback = None
        for binding in self.bindings:
            if binding.key != key or binding.mode != self.mode:
                continue
            if binding.panel_id == self.focused_panel_id and not binding.is_global:
                return binding
            if binding.is_global and fallback is None:
                fallback = binding
        return fallback

    def active_bindings(self) -> list[KeyBinding]:
        """Bindings eligible in the current mode for the focused panel."""
        return [
            b
            for b in self.bindings
            if b.mode == self.mode and (b.is_global or b.panel_id == self.focused_panel_id)
        ]
