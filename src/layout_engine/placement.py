"""Placement engine for home screen widgets.

Owns the in-memory mirror of every placed widget and the per-widget
interaction state machine:

    IDLE --pointer_down in resize handle--> RESIZING
    IDLE --pointer_down elsewhere--> DRAGGING
    DRAGGING/RESIZING --pointer_move--> same state, raw pixel deltas, no snapping
    DRAGGING/RESIZING --pointer_up/pointer_cancel--> IDLE (commit or revert)

On release the live rectangle is snapped to the grid, fitted into the
grid bounds and checked against every other widget. A collision restores
the rectangle captured at pointer-down; otherwise the new cell placement
is written to the layout store.

Example:
    >>> engine = PlacementEngine(store, host, canvas)
    >>> engine.load()
    >>> engine.set_edit_mode(True)
    >>> engine.pointer_down(widget_id, 120, 80)
    >>> engine.pointer_move(widget_id, 180, 80)
    >>> engine.pointer_up(widget_id)
    <CommitOutcome.COMMITTED: 'committed'>
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, Set

from layout_engine.collision import CollisionIndex, CollisionOracle
from layout_engine.geometry import (
    cell_rect_to_pixels,
    clamp_cell_rect,
    compute_grid_spec,
    min_size_to_cells,
    pixel_rect_to_cells,
    snap_position,
    snap_size,
)
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

if TYPE_CHECKING:  # pragma: no cover
    from home_screen.widget_host import WidgetHostAdapter
    from system.layout_store import LayoutStore

logger = logging.getLogger(__name__)


class CanvasProvider(Protocol):
    """Supplies the canvas size and insets the grid is computed from."""

    def current_canvas_size(self) -> PixelSize:
        ...

    def current_insets(self) -> Insets:
        ...


class CommitSink(Protocol):
    """Receives every accepted placement."""

    def commit(self, widget_id: int, cell_rect: CellRect) -> bool:
        """Persist a placement.

        Returns:
            True if the placement was written
        """
        ...


class StoreCommitSink:
    """Commit sink that writes placements to a layout store."""

    def __init__(self, store: "LayoutStore") -> None:
        self.store = store

    def commit(self, widget_id: int, cell_rect: CellRect) -> bool:
        return self.store.save_rect(widget_id, cell_rect)


class PlacementEngine:
    """Grid-constrained placement of resizable, draggable widgets.

    The engine is single-threaded: every call runs synchronously on the
    UI thread. Gestures on different widgets are independent, each one
    only moves its own rectangle and reads the committed placement of
    the others.
    """

    def __init__(
        self,
        store: "LayoutStore",
        host: "WidgetHostAdapter",
        canvas: CanvasProvider,
        *,
        columns: int = 5,
        rows: int = 10,
        padding: float = 24.0,
        resize_handle_size: float = 80.0,
        collision_oracle: Optional[CollisionOracle] = None,
        commit_sink: Optional[CommitSink] = None,
    ) -> None:
        """Initialize placement engine.

        Args:
            store: Durable widget placement storage
            host: Widget host supplying content and minimum sizes
            canvas: Canvas size and insets provider
            columns: Number of grid columns
            rows: Number of grid rows
            padding: Padding inside the insets, in pixels
            resize_handle_size: Side of the bottom-right resize handle, in pixels
            collision_oracle: Overlap check (default: CollisionIndex)
            commit_sink: Placement persistence (default: writes to ``store``)
        """
        self.store = store
        self.host = host
        self.canvas = canvas
        self.columns = columns
        self.rows = rows
        self.padding = padding
        self.resize_handle_size = resize_handle_size

        self.collision_oracle = collision_oracle or CollisionIndex(lambda: self.grid_spec)
        self.commit_sink = commit_sink or StoreCommitSink(store)

        self._widgets: Dict[int, Widget] = {}
        self._pending_removals: Set[int] = set()
        self._grid_spec: Optional[GridSpec] = None
        self._edit_mode = False

    # Grid ------------------------------------------------------------------

    @property
    def grid_spec(self) -> GridSpec:
        """Current grid, computed on first use."""
        if self._grid_spec is None:
            return self.refresh_grid()
        return self._grid_spec

    def refresh_grid(self) -> GridSpec:
        """Recompute the grid from the canvas provider.

        Call whenever the canvas size or insets change (e.g. rotation).
        Committed cell placements are kept and re-projected; gestures in
        progress are cancelled without committing.

        Returns:
            The current grid specification
        """
        spec = compute_grid_spec(
            self.canvas.current_canvas_size(),
            self.canvas.current_insets(),
            self.padding,
            self.columns,
            self.rows,
        )

        if spec == self._grid_spec:
            return spec

        self._grid_spec = spec
        logger.info(
            f"Grid updated: {spec.columns}x{spec.rows} cells of "
            f"{spec.cell_width:.1f}x{spec.cell_height:.1f}px"
        )

        for widget in self._widgets.values():
            if widget.in_gesture:
                logger.info(f"Cancelled gesture on widget {widget.widget_id}: grid changed")
                self._end_gesture(widget)
            widget.rect = cell_rect_to_pixels(widget.cell_rect, spec)

        return spec

    # Layout lifecycle ------------------------------------------------------

    def load(self) -> int:
        """Rebuild the in-memory mirror from the layout store.

        Widgets whose content can no longer be resolved are dropped and
        queued for removal from the store after the next successful
        write. Widgets without a usable stored placement get a default
        one, or are queued for removal too when no row has room.

        Returns:
            Number of widgets placed
        """
        self._widgets.clear()
        self._pending_removals = set()
        spec = self.refresh_grid()

        unplaced: List[int] = []

        for widget_id in sorted(self.store.list_widget_ids()):
            if not self._content_available(widget_id):
                logger.warning(f"Widget {widget_id} content unavailable, dropping from layout")
                self._pending_removals.add(widget_id)
                continue

            stored = self.store.load_rect(widget_id)
            if stored is None:
                unplaced.append(widget_id)
                continue

            cell_rect = clamp_cell_rect(stored, spec)
            rect = cell_rect_to_pixels(cell_rect, spec)

            if self.collision_oracle.overlaps(rect, widget_id, self._widgets.values()):
                logger.warning(
                    f"Stored placement {cell_rect.as_tuple()} of widget {widget_id} "
                    f"overlaps another widget, re-placing"
                )
                unplaced.append(widget_id)
                continue

            self._widgets[widget_id] = Widget(
                widget_id=widget_id,
                cell_rect=cell_rect,
                rect=rect,
                edit_mode=self._edit_mode,
            )

        for widget_id in unplaced:
            if self._place_new(widget_id) is None:
                logger.warning(f"Widget {widget_id} has no room, dropping from layout")
                self._pending_removals.add(widget_id)

        logger.info(
            f"Loaded {len(self._widgets)} widgets "
            f"({len(self._pending_removals)} pending removal)"
        )
        return len(self._widgets)

    def add_widget(self, widget_id: int) -> Optional[Widget]:
        """Add a newly bound widget at its default placement.

        Args:
            widget_id: Widget ID allocated by the widget host

        Returns:
            The placed widget, or None if it could not be placed
        """
        if widget_id in self._widgets:
            logger.warning(f"Widget {widget_id} already placed")
            return self._widgets[widget_id]

        if not self._content_available(widget_id):
            logger.error(f"Cannot add widget {widget_id}: content unavailable")
            return None

        return self._place_new(widget_id)

    def remove_widget(self, widget_id: int) -> bool:
        """Remove a widget from the layout and the store.

        A widget whose store entry cannot be removed stays queued for
        removal after the next successful write.

        Args:
            widget_id: Widget ID

        Returns:
            True if the widget was placed or pending removal
        """
        widget = self._widgets.pop(widget_id, None)
        if widget is None and widget_id not in self._pending_removals:
            logger.warning(f"Widget not placed: {widget_id}")
            return False

        self._pending_removals.discard(widget_id)

        if self.store.remove_widget(widget_id):
            self._flush_pending_removals()
        else:
            logger.warning(f"Failed to remove widget {widget_id} from layout store")
            self._pending_removals.add(widget_id)

        logger.info(f"Removed widget {widget_id}")
        return True

    def widget(self, widget_id: int) -> Optional[Widget]:
        return self._widgets.get(widget_id)

    def widgets(self) -> List[Widget]:
        return list(self._widgets.values())

    @property
    def pending_removals(self) -> Set[int]:
        return set(self._pending_removals)

    def widget_at(self, x: float, y: float) -> Optional[Widget]:
        """Topmost widget whose live rectangle contains the point."""
        for widget in reversed(list(self._widgets.values())):
            if widget.rect.contains(x, y):
                return widget
        return None

    def projections(self) -> List[WidgetProjection]:
        """Snapshot of every widget for the rendering layer, in drawing order."""
        return [
            WidgetProjection(
                widget_id=widget.widget_id,
                rect=widget.rect,
                edit_mode=widget.edit_mode,
                gesture=widget.gesture,
            )
            for widget in self._widgets.values()
        ]

    # Edit mode -------------------------------------------------------------

    @property
    def edit_mode(self) -> bool:
        return self._edit_mode

    def set_edit_mode(self, enabled: bool) -> None:
        """Enable or disable editing of every widget."""
        self._edit_mode = enabled
        for widget in self._widgets.values():
            widget.edit_mode = enabled
        logger.info(f"Edit mode {'enabled' if enabled else 'disabled'}")

    def toggle_widget_edit_mode(self, widget_id: int) -> bool:
        """Toggle editing of a single widget (long press).

        Returns:
            The widget's new edit mode flag
        """
        widget = self._widgets.get(widget_id)
        if widget is None:
            logger.warning(f"Widget not placed: {widget_id}")
            return False

        widget.edit_mode = not widget.edit_mode
        return widget.edit_mode

    # Gestures --------------------------------------------------------------

    def pointer_down(self, widget_id: int, x: float, y: float) -> Optional[GestureKind]:
        """Start a drag or resize gesture.

        Args:
            widget_id: Widget under the pointer
            x: Pointer x in canvas pixels
            y: Pointer y in canvas pixels

        Returns:
            The gesture started, or None if the event was ignored
        """
        widget = self._widgets.get(widget_id)
        if widget is None:
            logger.warning(f"Pointer down on unknown widget {widget_id}")
            return None

        if not widget.edit_mode or widget.in_gesture:
            return None

        rect = widget.rect
        local_x = x - rect.x
        local_y = y - rect.y
        in_handle = (
            rect.width - self.resize_handle_size <= local_x <= rect.width
            and rect.height - self.resize_handle_size <= local_y <= rect.height
        )

        widget.gesture = GestureKind.RESIZING if in_handle else GestureKind.DRAGGING
        widget.gesture_start = rect
        widget.last_pointer = (x, y)

        logger.debug(f"Widget {widget_id} {widget.gesture.value} from {rect}")
        return widget.gesture

    def pointer_move(self, widget_id: int, x: float, y: float) -> Optional[PixelRect]:
        """Apply a pointer move to the widget's live rectangle.

        Returns:
            The updated live rectangle, or None if no gesture is active
        """
        widget = self._widgets.get(widget_id)
        if widget is None or not widget.in_gesture or widget.last_pointer is None:
            return None

        last_x, last_y = widget.last_pointer
        dx = x - last_x
        dy = y - last_y
        widget.last_pointer = (x, y)

        canvas = self.grid_spec.canvas
        rect = widget.rect

        if widget.gesture == GestureKind.DRAGGING:
            max_x = max(0.0, canvas.width - rect.width)
            max_y = max(0.0, canvas.height - rect.height)
            widget.rect = PixelRect(
                x=min(max(rect.x + dx, 0.0), max_x),
                y=min(max(rect.y + dy, 0.0), max_y),
                width=rect.width,
                height=rect.height,
            )
        else:
            cell_width = self.grid_spec.cell_width
            cell_height = self.grid_spec.cell_height
            max_width = max(cell_width, canvas.width - rect.x)
            max_height = max(cell_height, canvas.height - rect.y)
            widget.rect = PixelRect(
                x=rect.x,
                y=rect.y,
                width=min(max(rect.width + dx, cell_width), max_width),
                height=min(max(rect.height + dy, cell_height), max_height),
            )

        return widget.rect

    def pointer_up(self, widget_id: int) -> CommitOutcome:
        """End the gesture: commit the snapped placement or revert.

        Returns:
            COMMITTED, REVERTED, or IGNORED if no gesture was active
        """
        widget = self._widgets.get(widget_id)
        if widget is None or not widget.in_gesture:
            return CommitOutcome.IGNORED

        start = widget.gesture_start
        candidate = self._snap(widget.rect)
        self._end_gesture(widget)

        if self._commit(widget, candidate):
            return CommitOutcome.COMMITTED

        widget.rect = start
        logger.info(f"Widget {widget_id} placement {candidate.as_tuple()} collides, reverted")
        return CommitOutcome.REVERTED

    def pointer_cancel(self, widget_id: int) -> CommitOutcome:
        """Cancelled gestures commit or revert exactly like a release."""
        return self.pointer_up(widget_id)

    # Internals -------------------------------------------------------------

    def _content_available(self, widget_id: int) -> bool:
        try:
            return self.host.resolve_content(widget_id) is not None
        except Exception as e:
            logger.error(f"Failed to resolve content for widget {widget_id}: {e}", exc_info=True)
            return False

    def _end_gesture(self, widget: Widget) -> None:
        widget.gesture = GestureKind.IDLE
        widget.gesture_start = None
        widget.last_pointer = None

    def _snap(self, rect: PixelRect) -> CellRect:
        """Snap a live rectangle to the grid and fit it inside the grid bounds.

        Position is snapped first so the size is measured from the
        snapped origin.
        """
        spec = self.grid_spec
        snapped = PixelRect(
            x=snap_position(rect.x, spec.origin_x, spec.cell_width, spec.extent.width),
            y=snap_position(rect.y, spec.origin_y, spec.cell_height, spec.extent.height),
            width=snap_size(rect.width, spec.cell_width),
            height=snap_size(rect.height, spec.cell_height),
        )
        return clamp_cell_rect(pixel_rect_to_cells(snapped, spec), spec)

    def _commit(self, widget: Widget, cell_rect: CellRect) -> bool:
        """Accept a placement unless it overlaps another widget.

        A failed store write keeps the in-memory placement for this session.

        Returns:
            False if the placement collides
        """
        rect = cell_rect_to_pixels(cell_rect, self.grid_spec)

        if self.collision_oracle.overlaps(rect, widget.widget_id, self._widgets.values()):
            return False

        widget.cell_rect = cell_rect
        widget.rect = rect

        if self.commit_sink.commit(widget.widget_id, cell_rect):
            logger.info(f"Widget {widget.widget_id} committed at {cell_rect.as_tuple()}")
            self._flush_pending_removals()
        else:
            logger.warning(
                f"Failed to persist widget {widget.widget_id} at {cell_rect.as_tuple()}, "
                f"keeping placement for this session"
            )

        return True

    def _flush_pending_removals(self) -> None:
        for widget_id in sorted(self._pending_removals):
            if self.store.remove_widget(widget_id):
                self._pending_removals.discard(widget_id)
                logger.info(f"Removed unavailable widget {widget_id} from layout store")

    def _default_size(self, widget_id: int) -> CellRect:
        spec = self.grid_spec
        minimum = self.host.minimum_content_size(widget_id)
        return CellRect(
            cell_width=min(min_size_to_cells(minimum.width, spec.cell_width), spec.columns),
            cell_height=min(min_size_to_cells(minimum.height, spec.cell_height), spec.rows),
        )

    def _place_new(self, widget_id: int) -> Optional[Widget]:
        """Place a widget in column 0 at the first row where it fits.

        Every candidate goes through the same collision check and commit
        as a gesture release.
        """
        spec = self.grid_spec
        size = self._default_size(widget_id)

        widget = Widget(
            widget_id=widget_id,
            cell_rect=size,
            rect=cell_rect_to_pixels(size, spec),
            edit_mode=self._edit_mode,
        )

        for row in range(spec.rows - size.cell_height + 1):
            candidate = CellRect(
                cell_x=0,
                cell_y=row,
                cell_width=size.cell_width,
                cell_height=size.cell_height,
            )
            if self._commit(widget, candidate):
                self._widgets[widget_id] = widget
                return widget

        logger.warning(
            f"No room for widget {widget_id} "
            f"({size.cell_width}x{size.cell_height} cells), not placed"
        )
        return None
