"""Layout engine

Pure functions turning a declarative LayoutConfig into absolute panel
rectangles, and transforming a config when a split is resized.

Resolution rules:
- the bottom bar is carved off the terminal height first
- rows tile the remaining height exactly; rounding drift is absorbed by the
  last rows
- columns flow left to right through the free x-regions of their row; a
  region reserved by a rowSpan from above is never overlapped
- panels that end up with no area are dropped
"""

from ..config import MAX_PANEL_PERCENT, MIN_PANEL_PERCENT
from ..telemetry import get_logger
from .models import LayoutColumn, LayoutConfig, PanelConstraints, ResolvedPanel

logger = get_logger(__name__)

_DEFAULT_BOUNDS = (MIN_PANEL_PERCENT, MAX_PANEL_PERCENT)
_PERCENT_DIGITS = 6  # adjust_split rounds to this many decimals


def _fit(sizes: list[int], total: int) -> list[int]:
    """Normalise integer sizes so they sum exactly to total.

    Every entry keeps at least one cell while there is room; surplus goes to
    the last entry and deficits are taken from the tail first.
    """
    sizes = [max(1, s) for s in sizes]
    diff = total - sum(sizes)
    if diff > 0:
        sizes[-1] += diff
        return sizes

    for floor in (1, 0):
        idx = len(sizes) - 1
        while diff < 0 and idx >= 0:
            take = min(-diff, sizes[idx] - floor)
            if take > 0:
                sizes[idx] -= take
                diff += take
            idx -= 1
    return sizes


def _free_regions(reserved: list[tuple[int, int]], total_width: int) -> list[tuple[int, int]]:
    """Compute (x, width) gaps left between reserved x-ranges."""
    regions = []
    cursor = 0
    for x, width in sorted(reserved):
        if x > cursor:
            regions.append((cursor, x - cursor))
        cursor = max(cursor, x + width)
    if cursor < total_width:
        regions.append((cursor, total_width - cursor))
    return regions


def _place_columns(
    columns: list[LayoutColumn],
    regions: list[tuple[int, int]],
    total_width: int,
) -> list[tuple[LayoutColumn, int, int]]:
    """Flow columns into free regions.

    Returns:
        (column, x, width) for every column that found a region
    """
    assigned: list[list[tuple[LayoutColumn, int]]] = [[] for _ in regions]
    region_idx = 0
    offset = 0
    for col in columns:
        if region_idx >= len(regions):
            logger.warning(
                f"[Layout] No free region left for panel {col.panel_id}; dropped"
            )
            continue
        wanted = round(col.width_percent / 100 * total_width)
        assigned[region_idx].append((col, wanted))
        offset += wanted
        if offset >= regions[region_idx][1]:
            region_idx += 1
            offset = 0

    placements = []
    for (region_x, region_width), group in zip(regions, assigned):
        if not group:
            continue
        widths = _fit([w for _, w in group], region_width)
        x = region_x
        for (col, _), width in zip(group, widths):
            placements.append((col, x, width))
            x += width
    return placements


def resolve_layout(
    config: LayoutConfig, total_width: int, total_height: int
) -> list[ResolvedPanel]:
    """Resolve a layout config against a terminal size.

    Args:
        config: Declarative layout
        total_width: Terminal width in columns
        total_height: Terminal height in rows

    Returns:
        Panels in row order, bottom bar last. Every panel has a positive area
        and lies within the terminal.
    """
    if total_width <= 0 or total_height <= 0:
        return []

    bar_height = 0
    if config.bottom_bar is not None:
        bar_height = max(1, round(config.bottom_bar.height_percent / 100 * total_height))
        bar_height = min(bar_height, max(total_height - 1, 0))
    available_height = total_height - bar_height

    heights = _fit(
        [round(row.height_percent / 100 * available_height) for row in config.rows],
        available_height,
    )
    row_y = []
    y = 0
    for height in heights:
        row_y.append(y)
        y += height

    reserved: dict[int, list[tuple[int, int]]] = {}
    panels: list[ResolvedPanel] = []

    for ri, row in enumerate(config.rows):
        regions = _free_regions(reserved.get(ri, []), total_width)
        for col, x, width in _place_columns(row.columns, regions, total_width):
            span = min(col.row_span or 1, len(config.rows) - ri)
            height = sum(heights[ri : ri + span])
            if width <= 0 or height <= 0:
                logger.debug(f"[Layout] Panel {col.panel_id} has no room at this size")
                continue
            panels.append(ResolvedPanel(col.panel_id, x, row_y[ri], width, height))
            for s in range(1, span):
                reserved.setdefault(ri + s, []).append((x, width))

    if config.bottom_bar is not None and bar_height > 0:
        panels.append(
            ResolvedPanel(
                config.bottom_bar.panel_id, 0, available_height, total_width, bar_height
            )
        )

    return panels


def _shift(
    current: float,
    neighbor: float,
    delta: float,
    own: tuple[float, float],
    other: tuple[float, float],
) -> tuple[float, float] | None:
    """Move delta from neighbor to current, keeping their sum constant.

    Returns:
        (new_current, new_neighbor), or None if no value satisfies both bounds
    """
    combined = current + neighbor
    low = max(own[0], combined - other[1])
    high = min(own[1], combined - other[0])
    if low > high:
        return None
    new_current = round(min(max(current + delta, low), high), _PERCENT_DIGITS)
    new_neighbor = round(neighbor - (new_current - current), _PERCENT_DIGITS)
    return new_current, new_neighbor


def _panel_bounds(
    panel_ids: list[str], constraints: dict[str, PanelConstraints]
) -> tuple[float, float]:
    low, high = _DEFAULT_BOUNDS
    for panel_id in panel_ids:
        if panel_id in constraints:
            c_low, c_high = constraints[panel_id].bounds()
            low, high = max(low, c_low), min(high, c_high)
    return low, high


def adjust_split(
    config: LayoutConfig,
    panel_id: str,
    axis: str,
    delta: float,
    constraints: dict[str, PanelConstraints] | None = None,
) -> LayoutConfig:
    """Grow (or shrink) a panel's split by delta percentage points.

    The next sibling (or the previous one when the panel is last) gives up
    the same amount, so the pair's combined percent is preserved.

    Args:
        config: Current layout (never mutated)
        panel_id: Panel whose split to move
        axis: "v" adjusts the panel's row height, "h" its column width
        delta: Percentage points to add (negative shrinks)
        constraints: Optional per-panel clamp windows

    Returns:
        A new config, or the input unchanged if the panel is unknown, has no
        sibling on that axis, or the bounds cannot be met.
    """
    if axis not in ("h", "v"):
        raise ValueError(f"axis must be 'h' or 'v', got {axis!r}")
    constraints = constraints or {}

    row_idx = next(
        (i for i, row in enumerate(config.rows) if any(c.panel_id == panel_id for c in row.columns)),
        None,
    )
    if row_idx is None:
        logger.debug(f"[Layout] adjust_split: unknown panel {panel_id}")
        return config

    new_config = config.model_copy(deep=True)

    if axis == "v":
        rows = new_config.rows
        if len(rows) < 2:
            return config
        sibling_idx = row_idx + 1 if row_idx < len(rows) - 1 else row_idx - 1
        result = _shift(
            rows[row_idx].height_percent,
            rows[sibling_idx].height_percent,
            delta,
            _panel_bounds([panel_id], constraints),
            _panel_bounds([c.panel_id for c in rows[sibling_idx].columns], constraints),
        )
        if result is None:
            return config
        rows[row_idx].height_percent, rows[sibling_idx].height_percent = result
    else:
        columns = new_config.rows[row_idx].columns
        if len(columns) < 2:
            return config
        col_idx = next(i for i, c in enumerate(columns) if c.panel_id == panel_id)
        sibling_idx = col_idx + 1 if col_idx < len(columns) - 1 else col_idx - 1
        result = _shift(
            columns[col_idx].width_percent,
            columns[sibling_idx].width_percent,
            delta,
            _panel_bounds([panel_id], constraints),
            _panel_bounds([columns[sibling_idx].panel_id], constraints),
        )
        if result is None:
            return config
        columns[col_idx].width_percent, columns[sibling_idx].width_percent = result

    return new_config


DEFAULT_WORKSPACE_LAYOUT = LayoutConfig(
    rows=[
        {
            "heightPercent": 33,
            "columns": [
                {"panelId": "git-status", "widthPercent": 35},
                {"panelId": "commits", "widthPercent": 65},
            ],
        },
        {
            "heightPercent": 34,
            "columns": [
                {"panelId": "tasks", "widthPercent": 35},
                {"panelId": "preview", "widthPercent": 65, "rowSpan": 2},
            ],
        },
        {
            "heightPercent": 33,
            "columns": [{"panelId": "branches", "widthPercent": 35}],
        },
    ],
    bottomBar={"panelId": "command-log", "heightPercent": 15},
)


def default_layout() -> LayoutConfig:
    """A fresh copy of the built-in dashboard layout."""
    return DEFAULT_WORKSPACE_LAYOUT.model_copy(deep=True)
