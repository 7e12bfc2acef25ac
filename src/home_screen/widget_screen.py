"""Home Screen Widget Canvas.

Draws the placed widgets and routes pointer input into the placement
engine. The screen is a projection of the engine's state: it never moves
a widget itself.

Controls:
    E               toggle edit mode
    right click     toggle edit mode of one widget
    drag            move a widget (edit mode)
    drag handle     resize a widget from its bottom-right corner (edit mode)
    A               add the next built-in widget
    DELETE          remove the widget under the cursor
    Q / ESC         leave edit mode, or quit
"""

import asyncio
import logging
from typing import Dict, List, Optional

import pygame

from home_screen.providers import register_builtin_providers
from home_screen.widget_host import LocalWidgetHost
from layout_engine.geometry import grid_points
from layout_engine.placement import PlacementEngine
from layout_engine.types import Insets, PixelRect, PixelSize
from system.config import LauncherConfig, load_launcher_config
from system.layout_store import JsonLayoutStore, LayoutStore

logger = logging.getLogger(__name__)

BG_COLOR = (15, 20, 30)
GRID_DOT_COLOR = (97, 97, 97)
BORDER_COLOR = (70, 110, 160)
HANDLE_COLOR = (100, 150, 220)
PLACEHOLDER_BG = (60, 30, 30)
TEXT_COLOR = (255, 255, 255)

GRID_DOT_RADIUS = 6
BORDER_WIDTH = 4


class ConfiguredCanvas:
    """Canvas provider with a size set by the owner and insets from config."""

    def __init__(self, width: int, height: int, insets: Insets):
        self.width = width
        self.height = height
        self.insets = insets

    def current_canvas_size(self) -> PixelSize:
        return PixelSize(width=self.width, height=self.height)

    def current_insets(self) -> Insets:
        return self.insets


def to_pygame_rect(rect: PixelRect) -> pygame.Rect:
    return pygame.Rect(round(rect.x), round(rect.y), round(rect.width), round(rect.height))


class WidgetScreen:
    """Home screen with freely placed, grid-snapped widgets."""

    def __init__(
        self,
        config: LauncherConfig,
        host: LocalWidgetHost,
        store: LayoutStore,
    ):
        """Initialize widget screen.

        Args:
            config: Launcher configuration
            host: Widget host
            store: Widget placement store
        """
        self.config = config
        self.host = host
        self.store = store

        self.screen: Optional[pygame.Surface] = None
        self.clock = None
        self.running = False

        self.canvas = ConfiguredCanvas(
            config.display.width, config.display.height, config.grid.insets
        )
        self.engine = PlacementEngine(
            store,
            host,
            self.canvas,
            columns=config.grid.columns,
            rows=config.grid.rows,
            padding=config.grid.padding,
            resize_handle_size=config.grid.resize_handle_size,
        )

        # Active gestures: mouse pointer and touch fingers
        self._mouse_widget: Optional[int] = None
        self._finger_widgets: Dict[int, int] = {}
        self._next_provider = 0

    async def start(self) -> None:
        """Start the widget screen."""
        try:
            logger.info("Starting widget screen")

            pygame.init()

            flags = pygame.FULLSCREEN if self.config.display.fullscreen else pygame.RESIZABLE
            self.screen = pygame.display.set_mode(
                (self.config.display.width, self.config.display.height), flags
            )
            pygame.display.set_caption("Home Screen")
            self.resize(*self.screen.get_size())

            self.clock = pygame.time.Clock()

            self.engine.load()

            self.running = True
            await self._main_loop()

        except Exception as e:
            logger.error(f"Failed to start widget screen: {e}", exc_info=True)
            raise

    async def stop(self) -> None:
        """Stop the widget screen."""
        logger.info("Stopping widget screen")
        self.running = False
        self.cancel_gestures()

        if self.screen:
            pygame.quit()
            self.screen = None

        logger.info("Widget screen stopped")

    def resize(self, width: int, height: int) -> None:
        """Update the canvas size and recompute the grid."""
        self.canvas.width = width
        self.canvas.height = height
        self.engine.refresh_grid()

    # Widget management -----------------------------------------------------

    def add_widget(self, provider_id: str) -> Optional[int]:
        """Bind and place a new widget.

        Args:
            provider_id: Provider to create the widget from

        Returns:
            The new widget ID, or None if it could not be placed
        """
        widget_id = self.host.allocate_widget_id(provider_id)
        if widget_id is None:
            return None

        if self.engine.add_widget(widget_id) is None:
            self.host.delete_widget_id(widget_id)
            return None

        return widget_id

    def remove_widget(self, widget_id: int) -> bool:
        """Remove a widget from the layout and release its binding."""
        self._finger_widgets = {
            finger: wid for finger, wid in self._finger_widgets.items() if wid != widget_id
        }
        if self._mouse_widget == widget_id:
            self._mouse_widget = None

        removed = self.engine.remove_widget(widget_id)
        self.host.delete_widget_id(widget_id)
        return removed

    def cancel_gestures(self) -> None:
        """Cancel every gesture in progress (commit-or-revert still runs)."""
        if self._mouse_widget is not None:
            self.engine.pointer_cancel(self._mouse_widget)
            self._mouse_widget = None

        for widget_id in self._finger_widgets.values():
            self.engine.pointer_cancel(widget_id)
        self._finger_widgets.clear()

    # Input -----------------------------------------------------------------

    def handle_event(self, event: pygame.event.Event) -> None:
        """Route one pygame event.

        Args:
            event: Pygame event
        """
        if event.type == pygame.QUIT:
            self.running = False

        elif event.type == pygame.VIDEORESIZE:
            self.resize(event.w, event.h)

        elif event.type in (pygame.WINDOWLEAVE, pygame.WINDOWFOCUSLOST):
            self.cancel_gestures()

        elif event.type == pygame.KEYDOWN:
            self._handle_keypress(event.key)

        elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEMOTION, pygame.MOUSEBUTTONUP):
            # Touch input is handled from the FINGER* events
            if not getattr(event, "touch", False):
                self._handle_mouse(event)

        elif event.type in (pygame.FINGERDOWN, pygame.FINGERMOTION, pygame.FINGERUP):
            self._handle_finger(event)

    def _handle_keypress(self, key: int) -> None:
        if key == pygame.K_e:
            self.engine.set_edit_mode(not self.engine.edit_mode)

        elif key == pygame.K_a:
            providers = self.host.list_providers()
            if providers:
                provider = providers[self._next_provider % len(providers)]
                self._next_provider += 1
                self.add_widget(provider.provider_id)

        elif key == pygame.K_DELETE:
            widget = self.engine.widget_at(*pygame.mouse.get_pos())
            if widget is not None:
                self.remove_widget(widget.widget_id)

        elif key == pygame.K_q or key == pygame.K_ESCAPE:
            if self.engine.edit_mode:
                self.engine.set_edit_mode(False)
            else:
                self.running = False

    def _handle_mouse(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN:
            widget = self.engine.widget_at(*event.pos)
            if widget is None:
                return

            if event.button == 3:
                self.engine.toggle_widget_edit_mode(widget.widget_id)
            elif event.button == 1 and self._mouse_widget is None:
                if self.engine.pointer_down(widget.widget_id, *event.pos) is not None:
                    self._mouse_widget = widget.widget_id

        elif event.type == pygame.MOUSEMOTION:
            if self._mouse_widget is not None:
                self.engine.pointer_move(self._mouse_widget, *event.pos)

        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            if self._mouse_widget is not None:
                self.engine.pointer_up(self._mouse_widget)
                self._mouse_widget = None

    def _handle_finger(self, event: pygame.event.Event) -> None:
        # Finger coordinates are normalized to the window
        x = event.x * self.canvas.width
        y = event.y * self.canvas.height

        if event.type == pygame.FINGERDOWN:
            widget = self.engine.widget_at(x, y)
            if widget is None or widget.widget_id in self._finger_widgets.values():
                return
            if self.engine.pointer_down(widget.widget_id, x, y) is not None:
                self._finger_widgets[event.finger_id] = widget.widget_id

        elif event.type == pygame.FINGERMOTION:
            widget_id = self._finger_widgets.get(event.finger_id)
            if widget_id is not None:
                self.engine.pointer_move(widget_id, x, y)

        elif event.type == pygame.FINGERUP:
            widget_id = self._finger_widgets.pop(event.finger_id, None)
            if widget_id is not None:
                self.engine.pointer_up(widget_id)

    # Rendering -------------------------------------------------------------

    def render(self, surface: pygame.Surface) -> List[int]:
        """Draw the layout.

        Args:
            surface: Target surface

        Returns:
            IDs of the widgets drawn, in drawing order
        """
        surface.fill(BG_COLOR)

        if self.engine.edit_mode:
            for x, y in grid_points(self.engine.grid_spec):
                pygame.draw.circle(surface, GRID_DOT_COLOR, (round(x), round(y)), GRID_DOT_RADIUS)

        drawn = []
        for projection in self.engine.projections():
            rect = to_pygame_rect(projection.rect)
            content = self.host.resolve_content(projection.widget_id)

            if content is not None:
                content.provider.render(surface, rect)
            else:
                pygame.draw.rect(surface, PLACEHOLDER_BG, rect, border_radius=10)

            if projection.edit_mode:
                handle = round(self.engine.resize_handle_size)
                pygame.draw.rect(surface, BORDER_COLOR, rect, width=BORDER_WIDTH)
                pygame.draw.rect(
                    surface,
                    HANDLE_COLOR,
                    pygame.Rect(rect.right - handle, rect.bottom - handle, handle, handle),
                )

            drawn.append(projection.widget_id)

        return drawn

    async def _main_loop(self) -> None:
        """Main UI loop."""
        while self.running:
            for event in pygame.event.get():
                self.handle_event(event)

            self.render(self.screen)
            pygame.display.flip()

            self.clock.tick(self.config.display.fps)
            await asyncio.sleep(0)

        logger.info("Widget screen loop finished")


def create_widget_screen(config: LauncherConfig) -> WidgetScreen:
    """Build a widget screen with the built-in providers from configuration."""
    host = LocalWidgetHost(config.storage.host_file)
    register_builtin_providers(host)
    store = JsonLayoutStore(config.storage.layout_file)
    return WidgetScreen(config, host, store)


async def main(config_path: Optional[str] = None):
    """Main entry point for the widget screen."""
    screen = create_widget_screen(load_launcher_config(config_path))

    try:
        await screen.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    finally:
        await screen.stop()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    asyncio.run(main())
