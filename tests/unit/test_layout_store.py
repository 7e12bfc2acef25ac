"""Unit tests for the JSON layout store."""

import json

import pytest

from layout_engine.types import CellRect
from system.layout_store import JsonLayoutStore, rect_key


@pytest.mark.unit
class TestJsonLayoutStore:
    """Test JsonLayoutStore persistence."""

    def test_empty_when_missing(self, temp_dir):
        """Test a missing file gives an empty layout."""
        store = JsonLayoutStore(store_file=temp_dir / "missing.json")

        assert store.list_widget_ids() == set()
        assert store.load_rect(1) is None

    def test_save_and_load_rect(self, layout_store):
        """Test a placement is stored under per-field keys."""
        rect = CellRect(cell_x=1, cell_y=2, cell_width=3, cell_height=4)

        assert layout_store.save_rect(12, rect) is True

        assert layout_store.load_rect(12) == rect
        assert layout_store.list_widget_ids() == {12}
        data = layout_store.to_dict()
        assert data["12_x"] == 1
        assert data["12_height"] == 4

    def test_persists_across_instances(self, layout_store):
        """Test saved placements are read back from disk."""
        layout_store.save_rect(3, CellRect(cell_x=2, cell_y=0, cell_width=1, cell_height=1))
        layout_store.save_rect(7, CellRect(cell_x=0, cell_y=5, cell_width=2, cell_height=2))

        reopened = JsonLayoutStore(store_file=layout_store.store_file)

        assert reopened.list_widget_ids() == {3, 7}
        assert reopened.load_rect(7).as_tuple() == (0, 5, 2, 2)

        with open(layout_store.store_file) as f:
            assert json.load(f)["widget_list"] == [3, 7]

    def test_remove_widget(self, layout_store):
        """Test removal drops the ID and every placement key."""
        layout_store.save_rect(4, CellRect())

        assert layout_store.remove_widget(4) is True

        assert layout_store.list_widget_ids() == set()
        assert layout_store.load_rect(4) is None
        assert rect_key(4, "x") not in layout_store.to_dict()

    def test_remove_unknown_widget(self, layout_store):
        """Test removing an unknown ID still succeeds."""
        assert layout_store.remove_widget(99) is True

    def test_partial_rect_is_missing(self, layout_store):
        """Test a placement with a missing field is treated as absent."""
        layout_store.data.update({"widget_list": [5], "5_x": 1, "5_y": 1, "5_width": 2})

        assert layout_store.load_rect(5) is None

    def test_non_integer_rect_is_missing(self, layout_store):
        """Test a placement with non-integer fields is treated as absent."""
        layout_store.data.update({"5_x": 1.5, "5_y": 1, "5_width": 2, "5_height": 2})
        assert layout_store.load_rect(5) is None

        layout_store.data["5_x"] = True
        assert layout_store.load_rect(5) is None

    def test_out_of_range_rect_sanitized(self, layout_store):
        """Test negative positions and empty sizes are clamped."""
        layout_store.data.update({"5_x": -2, "5_y": 3, "5_width": 0, "5_height": -1})

        assert layout_store.load_rect(5).as_tuple() == (0, 3, 1, 1)

    def test_invalid_widget_ids_skipped(self, layout_store):
        """Test unparseable widget IDs are ignored."""
        layout_store.data["widget_list"] = [1, "2", "abc", None]

        assert layout_store.list_widget_ids() == {1, 2}

    @pytest.mark.parametrize("widget_list", [5, "12", {"12": True}, None])
    def test_malformed_widget_list(self, temp_dir, widget_list):
        """Test a widget list that is not a list reads as empty."""
        store_file = temp_dir / "widgets.json"
        store_file.write_text(json.dumps({"widget_list": widget_list, "12_x": 0}))
        store = JsonLayoutStore(store_file=store_file)

        assert store.list_widget_ids() == set()

        assert store.save_rect(3, CellRect()) is True
        assert store.list_widget_ids() == {3}
        assert store.remove_widget(3) is True
        assert store.list_widget_ids() == set()

    def test_corrupt_file(self, temp_dir):
        """Test an unreadable file gives an empty layout."""
        store_file = temp_dir / "widgets.json"
        store_file.write_text("{not json")

        store = JsonLayoutStore(store_file=store_file)

        assert store.list_widget_ids() == set()

    def test_non_object_file(self, temp_dir):
        """Test a JSON document that is not an object is ignored."""
        store_file = temp_dir / "widgets.json"
        store_file.write_text("[1, 2, 3]")

        store = JsonLayoutStore(store_file=store_file)

        assert store.to_dict() == {"widget_list": []}

    def test_save_failure(self, temp_dir):
        """Test a write failure is reported, not raised."""
        blocker = temp_dir / "blocker"
        blocker.write_text("")
        store = JsonLayoutStore(store_file=blocker / "widgets.json")

        assert store.save_rect(1, CellRect()) is False
