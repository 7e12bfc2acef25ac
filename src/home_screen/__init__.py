"""Home Screen Platform.

Widget host, built-in widgets and the widget home screen.
"""

from home_screen.widget_host import (
    ContentHandle,
    LocalWidgetHost,
    WidgetHostAdapter,
    WidgetProvider,
)
from home_screen.providers import ClockWidget, LabelWidget
from home_screen.widget_screen import WidgetScreen

__all__ = [
    "ContentHandle",
    "LocalWidgetHost",
    "WidgetHostAdapter",
    "WidgetProvider",
    "ClockWidget",
    "LabelWidget",
    "WidgetScreen",
]
