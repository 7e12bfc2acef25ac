"""Types for the widget layout engine.

This module defines the value types shared by the grid geometry, the
collision index and the placement engine: pixel/cell rectangles, the
grid specification and the per-widget interaction state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PixelSize(BaseModel):
    """Width and height in pixels."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(0.0, ge=0.0, description="Width in pixels")
    height: float = Field(0.0, ge=0.0, description="Height in pixels")


class Insets(BaseModel):
    """System bar insets around the canvas, in pixels."""

    model_config = ConfigDict(frozen=True)

    left: float = Field(0.0, ge=0.0)
    top: float = Field(0.0, ge=0.0)
    right: float = Field(0.0, ge=0.0)
    bottom: float = Field(0.0, ge=0.0)

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


class GridSpec(BaseModel):
    """Logical grid for one layout pass.

    ``origin`` is the top-left usable point after insets and padding,
    ``extent`` the usable area. Cell sizes are derived and never drop
    below one pixel.
    """

    model_config = ConfigDict(frozen=True)

    canvas: PixelSize = Field(..., description="Full canvas size")
    origin_x: float = Field(..., description="Usable area left edge")
    origin_y: float = Field(..., description="Usable area top edge")
    extent: PixelSize = Field(..., description="Usable area size")
    columns: int = Field(5, ge=1, description="Number of grid columns")
    rows: int = Field(10, ge=1, description="Number of grid rows")

    @property
    def cell_width(self) -> float:
        return max(1.0, self.extent.width / self.columns)

    @property
    def cell_height(self) -> float:
        return max(1.0, self.extent.height / self.rows)

    @property
    def end_x(self) -> float:
        return self.origin_x + self.extent.width

    @property
    def end_y(self) -> float:
        return self.origin_y + self.extent.height


class CellRect(BaseModel):
    """A widget's durable placement in grid cells."""

    model_config = ConfigDict(frozen=True)

    cell_x: int = Field(0, ge=0, description="Column of the top-left cell")
    cell_y: int = Field(0, ge=0, description="Row of the top-left cell")
    cell_width: int = Field(1, ge=1, description="Width in cells")
    cell_height: int = Field(1, ge=1, description="Height in cells")

    @classmethod
    def sanitized(cls, cell_x: int, cell_y: int, cell_width: int, cell_height: int) -> "CellRect":
        """Build a rect from raw stored values, clamping them into validity."""
        return cls(
            cell_x=max(0, cell_x),
            cell_y=max(0, cell_y),
            cell_width=max(1, cell_width),
            cell_height=max(1, cell_height),
        )

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.cell_x, self.cell_y, self.cell_width, self.cell_height)


class PixelRect(BaseModel):
    """Rectangle in canvas pixels, used for rendering and live interaction."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    width: float = Field(0.0, ge=0.0)
    height: float = Field(0.0, ge=0.0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        """Check whether a point falls inside the rectangle."""
        return self.x <= px < self.right and self.y <= py < self.bottom


class GestureKind(str, Enum):
    """Interaction state of a single widget."""

    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class CommitOutcome(str, Enum):
    """Result of ending a gesture."""

    COMMITTED = "committed"
    REVERTED = "reverted"
    IGNORED = "ignored"


@dataclass
class Widget:
    """In-memory mirror of one placed widget.

    ``cell_rect`` is the committed placement, ``rect`` the live pixel
    rectangle. They only disagree while a gesture is in progress.
    """

    widget_id: int
    cell_rect: CellRect
    rect: PixelRect
    gesture: GestureKind = GestureKind.IDLE
    gesture_start: Optional[PixelRect] = None
    last_pointer: Optional[Tuple[float, float]] = None
    edit_mode: bool = False

    @property
    def in_gesture(self) -> bool:
        return self.gesture != GestureKind.IDLE


class WidgetProjection(BaseModel):
    """What the rendering layer needs to draw one widget."""

    model_config = ConfigDict(frozen=True)

    widget_id: int
    rect: PixelRect
    edit_mode: bool = False
    gesture: GestureKind = GestureKind.IDLE
