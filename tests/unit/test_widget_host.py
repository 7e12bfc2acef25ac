"""Unit tests for the widget host and built-in providers."""

from datetime import datetime

import pygame
import pytest

from home_screen.providers import ClockWidget, LabelWidget, register_builtin_providers
from home_screen.widget_host import LocalWidgetHost
from layout_engine.types import PixelSize


@pytest.mark.unit
class TestLocalWidgetHost:
    """Test widget ID allocation and content resolution."""

    def test_allocate_widget_id(self, widget_host):
        """Test IDs are allocated sequentially from 1."""
        assert widget_host.allocate_widget_id("small") == 1
        assert widget_host.allocate_widget_id("wide") == 2

    def test_allocate_unknown_provider(self, widget_host):
        """Test allocation fails for an unknown provider."""
        assert widget_host.allocate_widget_id("nonexistent") is None

    def test_resolve_content(self, widget_host):
        """Test a bound widget resolves to its provider."""
        widget_id = widget_host.allocate_widget_id("wide")

        content = widget_host.resolve_content(widget_id)

        assert content.widget_id == widget_id
        assert content.provider.provider_id == "wide"
        assert content.label == "Label"

    def test_resolve_unbound(self, widget_host):
        """Test an unbound ID does not resolve."""
        assert widget_host.resolve_content(42) is None

    def test_unregistered_provider_stops_resolving(self, widget_host):
        """Test a widget whose provider is gone no longer resolves."""
        widget_id = widget_host.allocate_widget_id("small")

        assert widget_host.unregister_provider("small") is True
        assert widget_host.resolve_content(widget_id) is None
        assert widget_host.unregister_provider("small") is False

    def test_minimum_content_size(self, widget_host):
        """Test minimum size comes from the provider."""
        widget_id = widget_host.allocate_widget_id("tall")

        assert widget_host.minimum_content_size(widget_id) == PixelSize(width=40, height=300)
        assert widget_host.minimum_content_size(42) == PixelSize()

    def test_delete_widget_id(self, widget_host):
        """Test deleting a binding."""
        widget_id = widget_host.allocate_widget_id("small")

        assert widget_host.delete_widget_id(widget_id) is True
        assert widget_host.resolve_content(widget_id) is None
        assert widget_host.delete_widget_id(widget_id) is False

    def test_bindings_persist(self, widget_host):
        """Test bindings and the ID counter survive a restart."""
        first = widget_host.allocate_widget_id("small")
        widget_host.allocate_widget_id("wide")
        widget_host.delete_widget_id(first)

        restarted = LocalWidgetHost(bindings_file=widget_host.bindings_file)

        assert restarted.bindings == {2: "wide"}
        assert restarted.next_widget_id == 3

    def test_corrupt_bindings_file(self, temp_dir):
        """Test an unreadable bindings file starts empty."""
        bindings_file = temp_dir / "host.json"
        bindings_file.write_text("{broken")

        host = LocalWidgetHost(bindings_file=bindings_file)

        assert host.bindings == {}
        assert host.next_widget_id == 1


@pytest.mark.unit
class TestProviders:
    """Test built-in providers."""

    def test_register_builtin_providers(self, temp_dir):
        """Test the clock and label providers are registered."""
        host = LocalWidgetHost(bindings_file=temp_dir / "host.json")
        register_builtin_providers(host)

        assert {p.provider_id for p in host.list_providers()} == {"clock", "label"}
        assert host.get_provider("clock").minimum_size == PixelSize(width=150, height=60)

    def test_clock_text(self):
        """Test the clock formats the current time."""
        clock = ClockWidget(time_format="%H:%M")

        assert clock.current_text(datetime(2024, 1, 1, 9, 5)) == "09:05"

    def test_to_dict(self):
        """Test provider metadata."""
        data = LabelWidget(provider_id="note", min_width=100, min_height=50).to_dict()

        assert data == {"provider_id": "note", "label": "Label", "min_width": 100, "min_height": 50}

    @pytest.mark.parametrize("provider", [LabelWidget(), ClockWidget()])
    def test_render(self, provider):
        """Test providers draw their card into the rectangle."""
        pygame.font.init()
        try:
            surface = pygame.Surface((200, 100))
            surface.fill((0, 0, 0))

            provider.render(surface, pygame.Rect(0, 0, 200, 100))

            assert surface.get_at((100, 5))[:3] != (0, 0, 0)
        finally:
            pygame.font.quit()
