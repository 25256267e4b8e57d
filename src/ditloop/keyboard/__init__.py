"""Keyboard module - mode x focused-panel binding registry and routing"""

from .router import DEFAULT_BINDINGS, KeyPress, KeyRouter, RoutedAction
from .scope import panel_keys
from .store import GLOBAL_PANEL, KeyBinding, KeyboardStore, KeyMode

__all__ = [
    "KeyboardStore",
    "KeyBinding",
    "KeyMode",
    "GLOBAL_PANEL",
    "KeyRouter",
    "KeyPress",
    "RoutedAction",
    "DEFAULT_BINDINGS",
    "panel_keys",
]
