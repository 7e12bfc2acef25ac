"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Headless pygame for rendering and event tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

# Add packages to Python path
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def mock_config_dir(temp_dir):
    """Provide a mock configuration directory."""
    config_dir = temp_dir / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@pytest.fixture
def mock_data_dir(temp_dir):
    """Provide a mock data directory."""
    data_dir = temp_dir / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


@pytest.fixture
def layout_store(mock_data_dir):
    """Provide a layout store backed by a temporary file."""
    from system.layout_store import JsonLayoutStore

    store = JsonLayoutStore(store_file=mock_data_dir / "widgets.json")
    yield store


@pytest.fixture
def widget_host(mock_data_dir):
    """Provide a widget host with test providers.

    - small: 60x60px minimum (2x2 cells on the 40px test grid)
    - wide: 150x60px minimum (4x2 cells)
    - tall: 40x300px minimum (1x8 cells)
    """
    from home_screen.providers import LabelWidget
    from home_screen.widget_host import LocalWidgetHost

    host = LocalWidgetHost(bindings_file=mock_data_dir / "host.json")
    host.register_provider(LabelWidget(provider_id="small", text="S", min_width=60, min_height=60))
    host.register_provider(LabelWidget(provider_id="wide", text="W", min_width=150, min_height=60))
    host.register_provider(LabelWidget(provider_id="tall", text="T", min_width=40, min_height=300))
    yield host


@pytest.fixture
def canvas():
    """Provide a 200x400px canvas without insets."""
    from home_screen.widget_screen import ConfiguredCanvas
    from layout_engine.types import Insets

    return ConfiguredCanvas(200, 400, Insets())


@pytest.fixture
def engine(layout_store, widget_host, canvas):
    """Provide a placement engine on a 5x10 grid of 40x40px cells."""
    from layout_engine.placement import PlacementEngine

    engine = PlacementEngine(
        layout_store,
        widget_host,
        canvas,
        columns=5,
        rows=10,
        padding=0,
        resize_handle_size=20,
    )
    engine.load()
    engine.set_edit_mode(True)
    yield engine


@pytest.fixture
def add_widget(engine, widget_host):
    """Bind a widget to a provider and place it."""

    def _add(provider_id: str = "small"):
        widget_id = widget_host.allocate_widget_id(provider_id)
        return engine.add_widget(widget_id)

    return _add


@pytest.fixture
def launcher_config(mock_data_dir):
    """Provide a launcher configuration using temporary storage."""
    from system.config import LauncherConfig

    return LauncherConfig.model_validate(
        {
            "grid": {"columns": 5, "rows": 10, "padding": 0, "resize_handle_size": 20},
            "storage": {
                "layout_file": str(mock_data_dir / "widgets.json"),
                "host_file": str(mock_data_dir / "host.json"),
            },
            "display": {"width": 200, "height": 400, "fullscreen": False},
        }
    )


# Markers for test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
