"""Widget layout persistence.

Stores each widget's committed cell placement and the set of live widget
IDs as a flat JSON key-value document:

    {
      "widget_list": [12, 15],
      "12_x": 0, "12_y": 0, "12_width": 2, "12_height": 2,
      ...
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Set

from layout_engine.types import CellRect

logger = logging.getLogger(__name__)

WIDGET_LIST_KEY = "widget_list"
RECT_FIELDS = ("x", "y", "width", "height")


def rect_key(widget_id: int, field: str) -> str:
    """Key under which one field of a widget's placement is stored."""
    return f"{widget_id}_{field}"


class LayoutStore(Protocol):
    """Durable storage for widget placements."""

    def list_widget_ids(self) -> Set[int]:
        ...

    def load_rect(self, widget_id: int) -> Optional[CellRect]:
        ...

    def save_rect(self, widget_id: int, cell_rect: CellRect) -> bool:
        ...

    def remove_widget(self, widget_id: int) -> bool:
        ...


class JsonLayoutStore:
    """Layout store backed by a JSON file."""

    def __init__(self, store_file: Optional[Path] = None):
        """Initialize layout store.

        Args:
            store_file: Path to layout file (default: ~/.local/share/widget-launcher/widgets.json)
        """
        self.store_file = store_file or Path("~/.local/share/widget-launcher/widgets.json").expanduser()
        self.data = self._load()

    def _load(self) -> Dict[str, Any]:
        """Load the layout document.

        Returns:
            Layout dictionary (empty if missing or unreadable)
        """
        if self.store_file.exists():
            try:
                with open(self.store_file) as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.error(f"Layout file {self.store_file} is not a JSON object, ignoring")
            except Exception as e:
                logger.error(f"Failed to load widget layout: {e}")

        return {WIDGET_LIST_KEY: []}

    def _save(self) -> bool:
        """Write the layout document to disk.

        Returns:
            True if saved successfully
        """
        try:
            self.store_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.store_file, 'w') as f:
                json.dump(self.data, f, indent=2)
            return True
        except Exception as e:
            logger.error(f"Failed to save widget layout: {e}")
            return False

    def list_widget_ids(self) -> Set[int]:
        """Get the IDs of all stored widgets.

        Returns:
            Widget IDs (unparseable entries are skipped)
        """
        raw_ids = self.data.get(WIDGET_LIST_KEY, [])
        if not isinstance(raw_ids, list):
            logger.warning(f"Ignoring malformed widget list in layout: {raw_ids!r}")
            return set()

        ids = set()
        for raw in raw_ids:
            try:
                ids.add(int(raw))
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid widget ID in layout: {raw!r}")
        return ids

    def load_rect(self, widget_id: int) -> Optional[CellRect]:
        """Get a widget's stored placement.

        Out-of-range values are clamped into validity.

        Args:
            widget_id: Widget ID

        Returns:
            Placement, or None if missing or malformed
        """
        values = [self.data.get(rect_key(widget_id, field)) for field in RECT_FIELDS]

        if any(value is None for value in values):
            return None

        if not all(isinstance(value, int) and not isinstance(value, bool) for value in values):
            logger.warning(f"Malformed placement for widget {widget_id}: {values}")
            return None

        return CellRect.sanitized(*values)

    def save_rect(self, widget_id: int, cell_rect: CellRect) -> bool:
        """Store a widget's placement and record it as live.

        Args:
            widget_id: Widget ID
            cell_rect: Committed placement

        Returns:
            True if saved successfully
        """
        ids = self.list_widget_ids()
        ids.add(widget_id)
        self.data[WIDGET_LIST_KEY] = sorted(ids)

        for field, value in zip(RECT_FIELDS, cell_rect.as_tuple()):
            self.data[rect_key(widget_id, field)] = value

        return self._save()

    def remove_widget(self, widget_id: int) -> bool:
        """Forget a widget and its placement.

        Args:
            widget_id: Widget ID

        Returns:
            True if saved successfully
        """
        ids = self.list_widget_ids()
        ids.discard(widget_id)
        self.data[WIDGET_LIST_KEY] = sorted(ids)

        for field in RECT_FIELDS:
            self.data.pop(rect_key(widget_id, field), None)

        if self._save():
            logger.info(f"Removed widget {widget_id} from layout")
            return True
        return False

    def to_dict(self) -> dict:
        """Get the layout document as a dictionary."""
        return self.data.copy()
