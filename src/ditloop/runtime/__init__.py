"""Runtime module - component wiring and the action controller"""

from .bootstrap import RuntimeComponents, bootstrap
from .controller import TERMINAL_BINDINGS, WorkspaceController

__all__ = [
    "RuntimeComponents",
    "bootstrap",
    "WorkspaceController",
    "TERMINAL_BINDINGS",
]
