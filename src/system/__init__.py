"""System components.

Launcher configuration and widget layout persistence.
"""

from system.config import (
    ConfigLoader,
    DisplayConfig,
    GridConfig,
    LauncherConfig,
    StorageConfig,
    load_launcher_config,
)
from system.layout_store import JsonLayoutStore, LayoutStore

__all__ = [
    "ConfigLoader",
    "DisplayConfig",
    "GridConfig",
    "LauncherConfig",
    "StorageConfig",
    "load_launcher_config",
    "JsonLayoutStore",
    "LayoutStore",
]
