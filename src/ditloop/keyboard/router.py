"""Key router - dispatches key presses through the keyboard store

The root bindings (quit, focus cycling, scrolling, resize, search, help)
are registered as ordinary global bindings, so a panel binding on the same
key and mode always wins. Focus, mode and help actions are applied to the
store directly; every other action is handed back to the caller.
"""

from collections.abc import Callable
from dataclasses import dataclass

from ..telemetry import get_logger
from .store import KeyBinding, KeyboardStore, KeyMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyPress:
    """A single key press.

    Attributes:
        key: Printable character or named key ("tab", "enter", "escape", "up", ...)
        ctrl: Control held
        meta: Meta/Alt held
        shift: Shift held (only meaningful for named keys)
    """

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def name(self) -> str:
        """Canonical binding name, e.g. "j", "ctrl+f", "shift+tab"."""
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.meta:
            prefix += "meta+"
        # Shifted characters already arrive as the shifted glyph
        if self.shift and len(self.key) > 1:
            prefix += "shift+"
        return prefix + self.key


@dataclass(frozen=True)
class RoutedAction:
    """An action the router does not handle itself."""

    action: str
    panel_id: str


def _normal(key: str, action: str, description: str) -> KeyBinding:
    return KeyBinding(key=key, mode=KeyMode.NORMAL, action=action, description=description)


DEFAULT_BINDINGS: tuple[KeyBinding, ...] = (
    _normal("q", "quit", "Quit"),
    _normal("tab", "focus-next", "Next panel"),
    _normal("shift+tab", "focus-prev", "Previous panel"),
    _normal("h", "focus-left", "Focus left"),
    _normal("l", "focus-right", "Focus right"),
    _normal("j", "scroll-down", "Scroll down"),
    _normal("k", "scroll-up", "Scroll up"),
    _normal("enter", "activate", "Activate selection"),
    *(_normal(str(n), f"focus-{n}", f"Jump to panel {n}") for n in range(1, 8)),
    _normal("+", "resize-grow", "Grow panel"),
    _normal("-", "resize-shrink", "Shrink panel"),
    _normal("=", "reset-layout", "Reset layout"),
    _normal("/", "mode-search", "Search"),
    _normal("ctrl+f", "mode-search", "Search"),
    _normal("ctrl+b", "toggle-sidebar", "Toggle sidebar"),
    _normal("?", "toggle-help", "Toggle help"),
    _normal("escape", "back", "Close help / go back"),
    KeyBinding(key="escape", mode=KeyMode.SEARCH, action="mode-normal", description="Leave search"),
    KeyBinding(key="escape", mode=KeyMode.COMMAND, action="mode-normal", description="Leave command"),
)


class KeyRouter:
    """Routes key presses for one process.

    Args:
        store: Keyboard store to resolve against and mutate
        on_search_input: Receives unbound key presses while in search mode
        register_defaults: Register DEFAULT_BINDINGS as global bindings
    """

    def __init__(
        self,
        store: KeyboardStore,
        on_search_input: Callable[[KeyPress], None] | None = None,
        register_defaults: bool = True,
    ):
        self.store = store
        self._on_search_input = on_search_input
        if register_defaults:
            store.register_bindings(DEFAULT_BINDINGS)

    def set_search_input_callback(self, callback: Callable[[KeyPress], None] | None) -> None:
        self._on_search_input = callback

    def handle(self, press: KeyPress) -> RoutedAction | None:
        """Route one key press.

        Returns:
            The action for the caller to perform, or None when the press was
            consumed here or matched nothing
        """
        binding = self.store.resolve(press.name)
        if binding is None:
            if self.store.mode == KeyMode.SEARCH and self._on_search_input:
                self._on_search_input(press)
            return None

        if self._apply_builtin(binding.action):
            return None
        logger.debug(f"[Keyboard] {press.name} -> {binding.action} ({self.store.focused_panel_id})")
        return RoutedAction(binding.action, self.store.focused_panel_id)

    def _apply_builtin(self, action: str) -> bool:
        store = self.store
        if action == "back":
            # Escape closes the help overlay first; otherwise it goes to the caller
            if not store.help_visible:
                return False
            store.toggle_help()
            return True

        simple: dict[str, Callable[[], object]] = {
            "focus-next": store.focus_next,
            "focus-prev": store.focus_prev,
            "focus-left": store.focus_left,
            "focus-right": store.focus_right,
            "mode-search": lambda: store.set_mode(KeyMode.SEARCH),
            "mode-command": lambda: store.set_mode(KeyMode.COMMAND),
            "mode-normal": lambda: store.set_mode(KeyMode.NORMAL),
            "toggle-help": store.toggle_help,
        }
        handler = simple.get(action)
        if handler is not None:
            handler()
            return True

        number = action.removeprefix("focus-")
        if number != action and number.isdigit():
            store.focus_by_number(int(number))
            return True
        return False
