"""Layout store - owns the current layout config and its dirty flag"""

from collections.abc import Callable
from typing import Protocol

from ..config import RESIZE_STEP
from ..telemetry import get_logger
from .engine import adjust_split, default_layout
from .models import LayoutConfig, PanelConstraints

logger = get_logger(__name__)

# Change callback: (layout, is_dirty) -> None
LayoutChangeCallback = Callable[[LayoutConfig, bool], None]

__all__ = ["LayoutStore", "LayoutSource", "LayoutChangeCallback", "RESIZE_STEP"]


class LayoutSource(Protocol):
    """Persistence collaborator contract."""

    def load(self) -> LayoutConfig | None: ...

    def save(self, config: LayoutConfig) -> bool: ...


class LayoutStore:
    """Layout store

    Mutations are synchronous; listeners are notified after each one.
    Resizes are optimistic: the store commits immediately and never waits
    for the multiplexer to confirm.
    """

    def __init__(
        self,
        persistence: LayoutSource | None = None,
        default: LayoutConfig | None = None,
        constraints: dict[str, PanelConstraints] | None = None,
    ):
        self._default = default.model_copy(deep=True) if default else default_layout()
        self._layout = self._default.model_copy(deep=True)
        self._dirty = False
        self._persistence = persistence
        self._constraints = dict(constraints or {})
        self._on_change: LayoutChangeCallback | None = None

    @property
    def layout(self) -> LayoutConfig:
        return self._layout

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def set_change_callback(self, callback: LayoutChangeCallback | None) -> None:
        """Set the listener invoked after every mutation."""
        self._on_change = callback

    def set_constraints(self, panel_id: str, constraints: PanelConstraints) -> None:
        self._constraints[panel_id] = constraints

    def resize_panel(self, panel_id: str, axis: str, delta: float) -> LayoutConfig:
        """Move the split containing panel_id by delta percentage points.

        Args:
            panel_id: Panel to grow/shrink
            axis: "h" (width) or "v" (height)
            delta: Percentage points, positive grows

        Returns:
            The new current layout
        """
        self._layout = adjust_split(self._layout, panel_id, axis, delta, self._constraints)
        self._dirty = True
        logger.debug(f"[LayoutStore] resize {panel_id} {axis} {delta:+}")
        self._notify()
        return self._layout

    def reset_layout(self) -> None:
        """Restore the built-in default layout."""
        self._layout = self._default.model_copy(deep=True)
        self._dirty = False
        logger.info("[LayoutStore] Layout reset to default")
        self._notify()

    def load_layout(self, config: LayoutConfig) -> None:
        """Replace the layout wholesale (e.g. a restored or remote layout)."""
        self._layout = config.model_copy(deep=True)
        self._dirty = False
        self._notify()

    def restore(self) -> bool:
        """Load the persisted layout, keeping the current one when absent.

        Returns:
            Whether a persisted layout was applied
        """
        if self._persistence is None:
            return False
        config = self._persistence.load()
        if config is None:
            logger.info("[LayoutStore] No persisted layout, using default")
            return False
        self.load_layout(config)
        return True

    def persist(self) -> bool:
        """Save the current layout through the persistence collaborator."""
        if self._persistence is None:
            return False
        return self._persistence.save(self._layout)

    def _notify(self) -> None:
        if self._on_change:
            self._on_change(self._layout, self._dirty)
