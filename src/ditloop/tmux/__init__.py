"""Tmux module - multiplexer control, presets, terminals and sessions"""

from .client import CreatePaneOptions, PaneDimensions, TmuxClient
from .multi_terminal import MultiTerminalManager, TerminalInstance
from .orchestrator import (
    OrchestratedSession,
    OrchestrateOptions,
    SessionOrchestrator,
    discover_pane_ids,
)
from .presets import (
    LAYOUT_PRESETS,
    LayoutPreset,
    PaneIds,
    PresetPane,
    apply_layout,
    get_layout_shortcut,
    get_preset,
)

__all__ = [
    "TmuxClient",
    "CreatePaneOptions",
    "PaneDimensions",
    "MultiTerminalManager",
    "TerminalInstance",
    "LAYOUT_PRESETS",
    "LayoutPreset",
    "PresetPane",
    "PaneIds",
    "apply_layout",
    "get_layout_shortcut",
    "get_preset",
    "SessionOrchestrator",
    "OrchestrateOptions",
    "OrchestratedSession",
    "discover_pane_ids",
]
