"""Layout presets

Five fixed bundles of per-role pane sizes, visibility and shortcuts.
Applying a preset only resizes panes; showing or hiding panes is the
orchestrator's job.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..config import COLLAPSED_PANE_WIDTH
from ..telemetry import get_logger
from .client import PaneDimensions

if TYPE_CHECKING:
    from .client import TmuxClient

logger = get_logger(__name__)

# role -> tmux pane id
PaneIds = dict[str, str]


@dataclass(frozen=True)
class PresetPane:
    """Size and visibility of one role within a preset."""

    role: str
    size_percent: int
    visible: bool = True


@dataclass(frozen=True)
class LayoutPreset:
    """A named layout preset."""

    name: str
    label: str
    description: str
    panes: tuple[PresetPane, ...]
    shortcut: str

    def pane(self, role: str) -> PresetPane | None:
        return next((p for p in self.panes if p.role == role), None)


def _three_column(sidebar: int, terminal: int, git: int) -> tuple[PresetPane, ...]:
    return (
        PresetPane("sidebar", sidebar),
        PresetPane("terminal", terminal),
        PresetPane("git", git),
    )


_PRESETS = (
    LayoutPreset(
        "default", "Default", "Sidebar (25%) | Terminal (50%) | Git (25%)",
        _three_column(25, 50, 25), "Ctrl+1",
    ),
    LayoutPreset(
        "code-focus", "Code Focus", "Sidebar (10%) | Terminal (80%) | Git (10%)",
        _three_column(10, 80, 10), "Ctrl+2",
    ),
    LayoutPreset(
        "git-focus", "Git Focus", "Sidebar (20%) | Terminal (50%) | Git (30%)",
        _three_column(20, 50, 30), "Ctrl+3",
    ),
    LayoutPreset(
        "multi-terminal", "Multi-Terminal", "Sidebar (20%) | Terminals (50%) | Git (30%)",
        _three_column(20, 50, 30), "Ctrl+4",
    ),
    LayoutPreset(
        "zen", "Zen", "Terminal only (100%)",
        (
            PresetPane("sidebar", 0, visible=False),
            PresetPane("terminal", 100),
            PresetPane("git", 0, visible=False),
        ),
        "Ctrl+5",
    ),
)

LAYOUT_PRESETS: MappingProxyType[str, LayoutPreset] = MappingProxyType(
    {preset.name: preset for preset in _PRESETS}
)


def get_preset(name: str) -> LayoutPreset:
    """Look up a preset by name.

    Raises:
        ValueError: Unknown preset name
    """
    try:
        return LAYOUT_PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown layout preset: {name} (expected one of {', '.join(LAYOUT_PRESETS)})"
        ) from None


def get_layout_shortcut(name: str) -> str:
    """Keyboard shortcut of a preset, e.g. "Ctrl+1"."""
    return get_preset(name).shortcut


async def apply_layout(tmux: "TmuxClient", preset_name: str, pane_ids: PaneIds) -> int:
    """Resize panes to match a preset.

    One resize per role present in both the preset and pane_ids. Hidden
    or 0% roles are collapsed to COLLAPSED_PANE_WIDTH columns.

    Args:
        tmux: Client issuing resize-pane
        preset_name: Preset to apply
        pane_ids: Current role -> pane id map

    Returns:
        Number of resize calls issued
    """
    preset = get_preset(preset_name)
    issued = 0
    for pane in preset.panes:
        pane_id = pane_ids.get(pane.role)
        if not pane_id:
            continue
        if pane.visible and pane.size_percent > 0:
            width = f"{pane.size_percent}%"
        else:
            width = COLLAPSED_PANE_WIDTH
        await tmux.resize_pane(pane_id, PaneDimensions(width=width))
        issued += 1

    logger.info(f"[Presets] Applied '{preset_name}' ({issued} panes resized)")
    return issued
