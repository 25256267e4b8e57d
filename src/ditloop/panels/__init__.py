"""Panels module - per-panel action dispatch"""

from .actions import PanelAction, PanelActionCursor, PanelActionEvent, PanelActionStore

__all__ = [
    "PanelAction",
    "PanelActionEvent",
    "PanelActionStore",
    "PanelActionCursor",
]
