"""Launcher configuration.

Configuration is read from a YAML file and validated into pydantic
models. Missing files fall back to defaults.

Example file::

    grid:
      columns: 5
      rows: 10
      padding: 24
      insets: {top: 48, bottom: 96}
    display:
      width: 1080
      height: 1920
      fullscreen: true
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

from layout_engine.types import Insets

logger = logging.getLogger(__name__)


class GridConfig(BaseModel):
    """Widget grid configuration."""

    columns: int = Field(5, ge=1, le=64, description="Number of grid columns")
    rows: int = Field(10, ge=1, le=64, description="Number of grid rows")
    padding: float = Field(24.0, ge=0.0, description="Padding inside the insets in pixels")
    resize_handle_size: float = Field(
        80.0, gt=0.0, description="Side of the bottom-right resize handle in pixels"
    )
    insets: Insets = Field(default_factory=Insets, description="System bar insets")


class StorageConfig(BaseModel):
    """Persistent storage locations."""

    layout_file: Path = Field(
        Path("~/.local/share/widget-launcher/widgets.json"),
        description="Widget placement store",
    )
    host_file: Path = Field(
        Path("~/.local/share/widget-launcher/host.json"),
        description="Widget host bindings",
    )


class DisplayConfig(BaseModel):
    """Home screen window configuration."""

    width: int = Field(1080, ge=1, description="Window width")
    height: int = Field(1920, ge=1, description="Window height")
    fullscreen: bool = Field(False, description="Open fullscreen")
    fps: int = Field(60, ge=1, le=240, description="Frame rate cap")


class LauncherConfig(BaseModel):
    """Complete launcher configuration."""

    grid: GridConfig = Field(default_factory=GridConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)


class ConfigLoader:
    """Loads and manages launcher configuration."""

    DEFAULT_CONFIG_PATHS = [
        "/etc/widget-launcher/launcher.yaml",
        "./config/launcher.yaml",
        "~/.config/widget-launcher/launcher.yaml"
    ]

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to configuration file (optional)
        """
        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Returns:
            Configuration dictionary
        """
        if self.config_path:
            paths = [self.config_path]
        else:
            paths = self.DEFAULT_CONFIG_PATHS

        for path in paths:
            expanded_path = Path(path).expanduser()
            if expanded_path.exists():
                try:
                    with open(expanded_path, 'r') as f:
                        self.config = yaml.safe_load(f) or {}
                    logger.info(f"Loaded configuration from {expanded_path}")
                    return self.config
                except Exception as e:
                    logger.error(f"Error loading config from {expanded_path}: {e}")

        logger.warning("No configuration file found, using defaults")
        self.config = LauncherConfig().model_dump(mode="json")
        return self.config

    def launcher_config(self) -> LauncherConfig:
        """Validate the loaded configuration.

        Returns:
            Launcher configuration

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        config = LauncherConfig.model_validate(self.config)
        config.storage.layout_file = config.storage.layout_file.expanduser()
        config.storage.host_file = config.storage.host_file.expanduser()
        return config


def load_launcher_config(config_path: Optional[str] = None) -> LauncherConfig:
    """Load and validate launcher configuration."""
    return ConfigLoader(config_path).launcher_config()
