"""Integration tests for layout persistence across restarts."""

import pygame
import pytest

from home_screen.widget_screen import create_widget_screen
from layout_engine.types import CommitOutcome


def restart(config):
    screen = create_widget_screen(config)
    screen.engine.load()
    return screen


@pytest.mark.integration
class TestLayoutPersistence:
    """Test the layout survives restarting the home screen."""

    def test_edited_layout_restored(self, launcher_config):
        """Test added, moved and resized widgets come back where they were left."""
        screen = restart(launcher_config)
        label = screen.add_widget("label")
        clock = screen.add_widget("clock")
        engine = screen.engine
        engine.set_edit_mode(True)

        # Drag the label right by two cells, then grow the clock by one row
        engine.pointer_down(label, 10, 10)
        engine.pointer_move(label, 90, 10)
        assert engine.pointer_up(label) == CommitOutcome.COMMITTED

        engine.pointer_down(clock, 155, 155)
        engine.pointer_move(clock, 155, 195)
        assert engine.pointer_up(clock) == CommitOutcome.COMMITTED

        restarted = restart(launcher_config)

        assert restarted.engine.widget(label).cell_rect.as_tuple() == (2, 0, 2, 2)
        assert restarted.engine.widget(clock).cell_rect.as_tuple() == (0, 2, 4, 3)
        assert restarted.engine.edit_mode is False

    def test_reverted_gesture_not_persisted(self, launcher_config):
        """Test a colliding drag leaves the stored layout untouched."""
        screen = restart(launcher_config)
        first = screen.add_widget("label")
        second = screen.add_widget("label")
        screen.engine.set_edit_mode(True)

        screen.engine.pointer_down(second, 10, 90)
        screen.engine.pointer_move(second, 50, 50)
        assert screen.engine.pointer_up(second) == CommitOutcome.REVERTED

        restarted = restart(launcher_config)

        assert restarted.engine.widget(first).cell_rect.as_tuple() == (0, 0, 2, 2)
        assert restarted.engine.widget(second).cell_rect.as_tuple() == (0, 2, 2, 2)

    def test_removed_provider_cleaned_up(self, launcher_config):
        """Test widgets of a removed provider are dropped after the next edit."""
        screen = restart(launcher_config)
        label = screen.add_widget("label")
        clock = screen.add_widget("clock")

        restarted = create_widget_screen(launcher_config)
        restarted.host.unregister_provider("clock")
        restarted.engine.load()
        restarted.engine.set_edit_mode(True)

        assert restarted.engine.pending_removals == {clock}
        restarted.engine.pointer_down(label, 10, 10)
        assert restarted.engine.pointer_up(label) == CommitOutcome.COMMITTED

        assert restarted.store.list_widget_ids() == {label}

        final = restart(launcher_config)
        assert [widget.widget_id for widget in final.engine.widgets()] == [label]
        assert final.engine.pending_removals == set()


@pytest.mark.integration
class TestWidgetScreenLifecycle:
    """Test the screen's main loop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, launcher_config, monkeypatch):
        """Test the screen opens, loads the layout and stops on quit."""
        restart(launcher_config).add_widget("label")

        screen = create_widget_screen(launcher_config)
        monkeypatch.setattr(pygame.event, "get", lambda: [pygame.event.Event(pygame.QUIT)])

        await screen.start()

        assert screen.running is False
        assert len(screen.engine.widgets()) == 1
        assert screen.engine.grid_spec.canvas.width == 200

        await screen.stop()
        assert screen.screen is None
