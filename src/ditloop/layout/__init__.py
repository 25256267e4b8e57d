"""Layout module

- models: declarative LayoutConfig and resolved panel geometry
- engine: resolve_layout / adjust_split
- store: LayoutStore (current layout + dirty flag)
- persistence: file-backed load/save collaborator
"""

from .engine import DEFAULT_WORKSPACE_LAYOUT, adjust_split, default_layout, resolve_layout
from .models import (
    BottomBar,
    LayoutColumn,
    LayoutConfig,
    LayoutRow,
    PanelConstraints,
    ResolvedPanel,
)
from .persistence import LayoutPersistence
from .store import RESIZE_STEP, LayoutStore

__all__ = [
    # Models
    "LayoutConfig",
    "LayoutRow",
    "LayoutColumn",
    "BottomBar",
    "ResolvedPanel",
    "PanelConstraints",
    # Engine
    "resolve_layout",
    "adjust_split",
    "default_layout",
    "DEFAULT_WORKSPACE_LAYOUT",
    # Store
    "LayoutStore",
    "LayoutPersistence",
    "RESIZE_STEP",
]
