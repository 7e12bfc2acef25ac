"""Widget layout engine.

Grid geometry, collision detection and the placement state machine for
home screen widgets.

Example:
    >>> from layout_engine import PlacementEngine
    >>> engine = PlacementEngine(store, host, canvas, columns=5, rows=10)
    >>> engine.load()
"""

from layout_engine.types import (
    CellRect,
    CommitOutcome,
    GestureKind,
    GridSpec,
    Insets,
    PixelRect,
    PixelSize,
    Widget,
    WidgetProjection,
)
from layout_engine.geometry import (
    cell_to_pixel,
    compute_grid_spec,
    pixel_to_cell,
    snap_position,
    snap_size,
)
from layout_engine.collision import CollisionIndex, CollisionOracle, rects_overlap
from layout_engine.placement import (
    CanvasProvider,
    CommitSink,
    PlacementEngine,
    StoreCommitSink,
)

__all__ = [
    # Types
    "CellRect",
    "CommitOutcome",
    "GestureKind",
    "GridSpec",
    "Insets",
    "PixelRect",
    "PixelSize",
    "Widget",
    "WidgetProjection",
    # Geometry
    "cell_to_pixel",
    "compute_grid_spec",
    "pixel_to_cell",
    "snap_position",
    "snap_size",
    # Collision
    "CollisionIndex",
    "CollisionOracle",
    "rects_overlap",
    # Placement
    "CanvasProvider",
    "CommitSink",
    "PlacementEngine",
    "StoreCommitSink",
]
