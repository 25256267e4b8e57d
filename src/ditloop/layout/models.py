"""Layout data models

Declarative layout (validated with pydantic, serialised with camelCase keys)
and the resolved, absolute panel geometry.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import (
    MAX_BOTTOM_BAR_PERCENT,
    MAX_PANEL_PERCENT,
    MIN_BOTTOM_BAR_PERCENT,
    MIN_PANEL_PERCENT,
)


class _LayoutModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LayoutColumn(_LayoutModel):
    """A column within a layout row.

    Attributes:
        panel_id: Panel identifier, unique across the whole config
        width_percent: Intended width as a percentage of the terminal width
        row_span: Number of rows the panel extends down across
    """

    panel_id: str = Field(alias="panelId", min_length=1)
    width_percent: float = Field(alias="widthPercent", ge=MIN_PANEL_PERCENT, le=MAX_PANEL_PERCENT)
    row_span: int | None = Field(default=None, alias="rowSpan", ge=1)


class LayoutRow(_LayoutModel):
    """A row of the layout grid."""

    height_percent: float = Field(alias="heightPercent", ge=MIN_PANEL_PERCENT, le=MAX_PANEL_PERCENT)
    columns: list[LayoutColumn] = Field(min_length=1)


class BottomBar(_LayoutModel):
    """Full-width bar reserved below the grid."""

    panel_id: str = Field(alias="panelId", min_length=1)
    height_percent: float = Field(
        alias="heightPercent", ge=MIN_BOTTOM_BAR_PERCENT, le=MAX_BOTTOM_BAR_PERCENT
    )


class LayoutConfig(_LayoutModel):
    """Declarative, percentage-based layout.

    Percentages express rendering intent; they do not have to sum to 100.
    """

    rows: list[LayoutRow] = Field(min_length=1)
    bottom_bar: BottomBar | None = Field(default=None, alias="bottomBar")

    @model_validator(mode="after")
    def _check_unique_panels(self) -> "LayoutConfig":
        seen: set[str] = set()
        for panel_id in self.panel_ids():
            if panel_id in seen:
                raise ValueError(f"duplicate panelId: {panel_id}")
            seen.add(panel_id)
        return self

    def panel_ids(self) -> list[str]:
        """All panel ids in declaration order (bottom bar last)."""
        ids = [col.panel_id for row in self.rows for col in row.columns]
        if self.bottom_bar:
            ids.append(self.bottom_bar.panel_id)
        return ids

    def to_json_dict(self) -> dict:
        """Serialise with the camelCase wire keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class ResolvedPanel:
    """A panel placed at absolute terminal coordinates (cells)."""

    panel_id: str
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class PanelConstraints:
    """Per-panel clamp window for resize operations, in percent."""

    min_percent: float = MIN_PANEL_PERCENT
    max_percent: float = MAX_PANEL_PERCENT

    def bounds(self) -> tuple[float, float]:
        """Clamp window intersected with the global [5, 95] bounds."""
        return (
            max(self.min_percent, MIN_PANEL_PERCENT),
            min(self.max_percent, MAX_PANEL_PERCENT),
        )
