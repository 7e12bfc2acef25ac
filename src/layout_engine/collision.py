"""Overlap detection between placed widgets.

A linear scan is enough at home-screen scale (tens of widgets).
"""

import logging
from typing import Callable, Iterable, List, Protocol

from layout_engine.geometry import cell_rect_to_pixels
from layout_engine.types import GridSpec, PixelRect, Widget

logger = logging.getLogger(__name__)

# Shared edges computed through different float paths may differ by a few ulps
_TOLERANCE = 1e-6


def rects_overlap(a: PixelRect, b: PixelRect) -> bool:
    """Check whether two rectangles overlap. Touching edges do not count."""
    return not (
        a.right <= b.x + _TOLERANCE
        or a.x >= b.right - _TOLERANCE
        or a.bottom <= b.y + _TOLERANCE
        or a.y >= b.bottom - _TOLERANCE
    )


class CollisionOracle(Protocol):
    """Answers whether a candidate placement collides with other widgets."""

    def overlaps(
        self, candidate: PixelRect, excluding_id: int, widgets: Iterable[Widget]
    ) -> bool:
        ...


class CollisionIndex:
    """Collision checks against the committed placement of every other widget.

    Other widgets are compared by their committed cell rectangle projected
    onto the grid, not their live rectangle, so a gesture in progress on
    another widget never affects the result.

    Example:
        >>> index = CollisionIndex(lambda: spec)
        >>> index.overlaps(candidate, excluding_id=3, widgets=engine.widgets())
        False
    """

    def __init__(self, grid_spec_source: Callable[[], GridSpec]) -> None:
        """Initialize collision index.

        Args:
            grid_spec_source: Callable returning the current GridSpec
        """
        self._grid_spec_source = grid_spec_source

    def _committed_rect(self, widget: Widget, spec: GridSpec) -> PixelRect:
        return cell_rect_to_pixels(widget.cell_rect, spec)

    def find_collisions(
        self, candidate: PixelRect, excluding_id: int, widgets: Iterable[Widget]
    ) -> List[int]:
        """Find every widget the candidate would overlap.

        Args:
            candidate: Proposed rectangle
            excluding_id: Widget being placed (never collides with itself)
            widgets: All placed widgets

        Returns:
            IDs of the overlapped widgets
        """
        spec = self._grid_spec_source()
        return [
            widget.widget_id
            for widget in widgets
            if widget.widget_id != excluding_id
            and rects_overlap(candidate, self._committed_rect(widget, spec))
        ]

    def overlaps(
        self, candidate: PixelRect, excluding_id: int, widgets: Iterable[Widget]
    ) -> bool:
        """Check whether the candidate overlaps any other widget."""
        spec = self._grid_spec_source()
        for widget in widgets:
            if widget.widget_id == excluding_id:
                continue
            if rects_overlap(candidate, self._committed_rect(widget, spec)):
                logger.debug(
                    f"Widget {excluding_id} would overlap widget {widget.widget_id}"
                )
                return True
        return False
