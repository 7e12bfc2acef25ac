"""Built-in widget providers.

Placeholder content for the home screen: a clock and a static label.
"""

from datetime import datetime
from typing import Optional, Tuple

import pygame

from home_screen.widget_host import WidgetProvider

TEXT_COLOR = (255, 255, 255)
CARD_BG = (40, 50, 65)


def _fit_font(text: str, rect: pygame.Rect, max_size: int) -> pygame.font.Font:
    """Largest default font (up to max_size) that fits the text in the rect."""
    size = max(8, min(max_size, rect.height - 8))
    font = pygame.font.Font(None, size)
    while size > 8 and font.size(text)[0] > rect.width - 16:
        size -= 4
        font = pygame.font.Font(None, size)
    return font


class LabelWidget(WidgetProvider):
    """Static text widget."""

    def __init__(
        self,
        provider_id: str = "label",
        text: str = "Hello",
        min_width: float = 60,
        min_height: float = 60,
        background: Tuple[int, int, int] = CARD_BG,
    ):
        super().__init__(provider_id, "Label", min_width, min_height)
        self.text = text
        self.background = background

    def render(self, surface: pygame.Surface, rect: pygame.Rect) -> None:
        pygame.draw.rect(surface, self.background, rect, border_radius=10)

        if not pygame.font.get_init():
            return

        font = _fit_font(self.text, rect, 64)
        text = font.render(self.text, True, TEXT_COLOR)
        surface.blit(text, text.get_rect(center=rect.center))


class ClockWidget(WidgetProvider):
    """Current time."""

    def __init__(
        self,
        provider_id: str = "clock",
        time_format: str = "%H:%M",
        min_width: float = 150,
        min_height: float = 60,
    ):
        super().__init__(provider_id, "Clock", min_width, min_height)
        self.time_format = time_format

    def current_text(self, now: Optional[datetime] = None) -> str:
        return (now or datetime.now()).strftime(self.time_format)

    def render(self, surface: pygame.Surface, rect: pygame.Rect) -> None:
        pygame.draw.rect(surface, CARD_BG, rect, border_radius=10)

        if not pygame.font.get_init():
            return

        text = self.current_text()
        font = _fit_font(text, rect, 120)
        rendered = font.render(text, True, TEXT_COLOR)
        surface.blit(rendered, rendered.get_rect(center=rect.center))


def register_builtin_providers(host) -> None:
    """Register the built-in providers with a widget host."""
    host.register_provider(ClockWidget())
    host.register_provider(LabelWidget())
