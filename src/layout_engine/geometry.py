"""Grid geometry for widget placement.

Pure functions that derive the logical grid from the canvas size and
insets, and convert between pixel and cell coordinates.

Position snapping floors to the grid line at or before the pixel, so a
widget never snaps past the canvas edge. Size snapping rounds to the
nearest whole cell, so a widget does not grow on every release.

Example:
    >>> spec = compute_grid_spec(PixelSize(width=200, height=400), Insets(), 0, 5, 10)
    >>> spec.cell_width, spec.cell_height
    (40.0, 40.0)
"""

import math
from typing import List, Tuple

from layout_engine.types import CellRect, GridSpec, Insets, PixelRect, PixelSize

# Fraction of a cell absorbed when flooring, so float error on an exact
# grid line never lands in the previous cell
_EPSILON = 1e-6


def compute_grid_spec(
    canvas_size: PixelSize,
    insets: Insets,
    padding: float,
    columns: int,
    rows: int,
) -> GridSpec:
    """Compute the grid for a canvas.

    Args:
        canvas_size: Full canvas size in pixels
        insets: System bar insets
        padding: Constant padding inside the insets on every side
        columns: Number of grid columns
        rows: Number of grid rows

    Returns:
        Grid specification for this layout pass
    """
    extent = PixelSize(
        width=max(0.0, canvas_size.width - insets.horizontal - 2 * padding),
        height=max(0.0, canvas_size.height - insets.vertical - 2 * padding),
    )

    return GridSpec(
        canvas=canvas_size,
        origin_x=insets.left + padding,
        origin_y=insets.top + padding,
        extent=extent,
        columns=columns,
        rows=rows,
    )


def pixel_to_cell(pixel: float, axis_origin: float, cell_size: float) -> int:
    """Return the index of the cell a pixel coordinate belongs to (never negative)."""
    return max(0, math.floor((pixel - axis_origin) / cell_size + _EPSILON))


def cell_to_pixel(cell_index: int, axis_origin: float, cell_size: float) -> float:
    """Return the pixel coordinate of a cell's leading edge."""
    return axis_origin + cell_index * cell_size


def snap_position(pixel: float, axis_origin: float, cell_size: float, extent: float) -> float:
    """Snap a coordinate down to a grid line inside ``[origin, origin + extent]``.

    Args:
        pixel: Coordinate to snap
        axis_origin: Usable area start on this axis
        cell_size: Cell size on this axis
        extent: Usable area length on this axis

    Returns:
        Snapped coordinate
    """
    last_index = pixel_to_cell(axis_origin + extent, axis_origin, cell_size)
    index = min(pixel_to_cell(pixel, axis_origin, cell_size), last_index)
    return cell_to_pixel(index, axis_origin, cell_size)


def size_to_cells(pixel_size: float, cell_size: float) -> int:
    """Round a pixel length to the nearest whole number of cells (half up, min 1)."""
    return max(1, math.floor(pixel_size / cell_size + 0.5))


def snap_size(pixel_size: float, cell_size: float) -> float:
    """Snap a pixel length to the nearest whole number of cells."""
    return size_to_cells(pixel_size, cell_size) * cell_size


def min_size_to_cells(pixel_size: float, cell_size: float) -> int:
    """Number of cells needed to hold ``pixel_size`` (rounded up, min 1)."""
    return max(1, math.ceil(pixel_size / cell_size - _EPSILON))


def cell_rect_to_pixels(rect: CellRect, spec: GridSpec) -> PixelRect:
    """Project a cell rectangle onto the canvas."""
    return PixelRect(
        x=cell_to_pixel(rect.cell_x, spec.origin_x, spec.cell_width),
        y=cell_to_pixel(rect.cell_y, spec.origin_y, spec.cell_height),
        width=rect.cell_width * spec.cell_width,
        height=rect.cell_height * spec.cell_height,
    )


def pixel_rect_to_cells(rect: PixelRect, spec: GridSpec) -> CellRect:
    """Convert a (snapped) pixel rectangle back to cells."""
    return CellRect(
        cell_x=pixel_to_cell(rect.x, spec.origin_x, spec.cell_width),
        cell_y=pixel_to_cell(rect.y, spec.origin_y, spec.cell_height),
        cell_width=size_to_cells(rect.width, spec.cell_width),
        cell_height=size_to_cells(rect.height, spec.cell_height),
    )


def clamp_cell_rect(rect: CellRect, spec: GridSpec) -> CellRect:
    """Fit a cell rectangle inside the grid.

    The size is capped at the columns/rows remaining from the rectangle's
    origin. The origin only moves when it lies past the last column/row,
    since capping the size there would leave less than one cell.
    """
    cell_x = min(rect.cell_x, spec.columns - 1)
    cell_y = min(rect.cell_y, spec.rows - 1)

    return CellRect(
        cell_x=cell_x,
        cell_y=cell_y,
        cell_width=max(1, min(rect.cell_width, spec.columns - cell_x)),
        cell_height=max(1, min(rect.cell_height, spec.rows - cell_y)),
    )


def grid_points(spec: GridSpec) -> List[Tuple[float, float]]:
    """Pixel coordinates of every grid line intersection.

    Drawn as dots in edit mode to show where widgets will snap.
    """
    points = []
    for row in range(spec.rows + 1):
        y = cell_to_pixel(row, spec.origin_y, spec.cell_height)
        for column in range(spec.columns + 1):
            points.append((cell_to_pixel(column, spec.origin_x, spec.cell_width), y))
    return points
