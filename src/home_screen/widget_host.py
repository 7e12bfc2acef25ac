"""Home screen platform - Widget host.

Binds widget IDs to widget providers and supplies the layout engine with
what it needs from them: whether a widget's content can still be
resolved, and the minimum size its content requires.

Each provider (clock, label, ...) inherits from WidgetProvider.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from layout_engine.types import PixelSize

if TYPE_CHECKING:  # pragma: no cover
    import pygame

logger = logging.getLogger(__name__)


class WidgetProvider(ABC):
    """Base class for all widget content providers.

    Each provider must implement:
    - render(): Draw the widget's content into its rectangle
    """

    def __init__(
        self,
        provider_id: str,
        label: str,
        min_width: float,
        min_height: float,
    ):
        """Initialize widget provider.

        Args:
            provider_id: Unique provider identifier
            label: Display name
            min_width: Minimum content width in pixels
            min_height: Minimum content height in pixels
        """
        self.provider_id = provider_id
        self.label = label
        self.min_width = min_width
        self.min_height = min_height

    @property
    def minimum_size(self) -> PixelSize:
        return PixelSize(width=self.min_width, height=self.min_height)

    @abstractmethod
    def render(self, surface: "pygame.Surface", rect: "pygame.Rect") -> None:
        """Draw the widget content.

        Args:
            surface: Target surface
            rect: Area occupied by the widget
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert provider to dictionary.

        Returns:
            Provider metadata dictionary
        """
        return {
            "provider_id": self.provider_id,
            "label": self.label,
            "min_width": self.min_width,
            "min_height": self.min_height,
        }


@dataclass
class ContentHandle:
    """Resolved content of a bound widget."""

    widget_id: int
    provider: WidgetProvider

    @property
    def label(self) -> str:
        return self.provider.label


class WidgetHostAdapter(Protocol):
    """What the layout engine needs from the widget host."""

    def minimum_content_size(self, widget_id: int) -> PixelSize:
        ...

    def resolve_content(self, widget_id: int) -> Optional[ContentHandle]:
        ...


class LocalWidgetHost:
    """Widget host for in-process providers.

    Widget IDs are allocated here and bound to a provider. Bindings are
    persisted so placed widgets resolve again after a restart; a widget
    whose provider is no longer registered resolves to None.
    """

    def __init__(self, bindings_file: Optional[Path] = None):
        """Initialize widget host.

        Args:
            bindings_file: Path to bindings file (default: ~/.local/share/widget-launcher/host.json)
        """
        self.bindings_file = bindings_file or Path("~/.local/share/widget-launcher/host.json").expanduser()
        self.providers: Dict[str, WidgetProvider] = {}
        self.bindings: Dict[int, str] = {}
        self.next_widget_id = 1

        self._load_bindings()

    def _load_bindings(self) -> None:
        if not self.bindings_file.exists():
            return

        try:
            with open(self.bindings_file) as f:
                data = json.load(f)
            self.bindings = {int(k): str(v) for k, v in data.get("bindings", {}).items()}
            self.next_widget_id = max(
                int(data.get("next_widget_id", 1)),
                max(self.bindings, default=0) + 1,
            )
            logger.info(f"Loaded {len(self.bindings)} widget bindings")
        except Exception as e:
            logger.error(f"Failed to load widget bindings: {e}")

    def save_bindings(self) -> bool:
        """Save bindings to file.

        Returns:
            True if saved successfully
        """
        try:
            self.bindings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.bindings_file, 'w') as f:
                json.dump(
                    {
                        "next_widget_id": self.next_widget_id,
                        "bindings": {str(k): v for k, v in self.bindings.items()},
                    },
                    f,
                    indent=2,
                )
            return True
        except Exception as e:
            logger.error(f"Failed to save widget bindings: {e}")
            return False

    def register_provider(self, provider: WidgetProvider) -> None:
        """Register a widget provider.

        Args:
            provider: Provider instance
        """
        self.providers[provider.provider_id] = provider
        logger.info(f"Registered widget provider: {provider.label} ({provider.provider_id})")

    def unregister_provider(self, provider_id: str) -> bool:
        """Unregister a widget provider.

        Widgets bound to it stay bound but no longer resolve.

        Args:
            provider_id: Provider ID

        Returns:
            True if unregistered
        """
        if provider_id in self.providers:
            del self.providers[provider_id]
            logger.info(f"Unregistered widget provider: {provider_id}")
            return True
        return False

    def get_provider(self, provider_id: str) -> Optional[WidgetProvider]:
        return self.providers.get(provider_id)

    def list_providers(self) -> List[WidgetProvider]:
        return list(self.providers.values())

    def allocate_widget_id(self, provider_id: str) -> Optional[int]:
        """Bind a new widget ID to a provider.

        Args:
            provider_id: Provider ID

        Returns:
            The new widget ID, or None if the provider is unknown
        """
        if provider_id not in self.providers:
            logger.error(f"Widget provider not found: {provider_id}")
            return None

        widget_id = self.next_widget_id
        self.next_widget_id += 1
        self.bindings[widget_id] = provider_id
        self.save_bindings()

        logger.info(f"Allocated widget {widget_id} for {provider_id}")
        return widget_id

    def delete_widget_id(self, widget_id: int) -> bool:
        """Release a widget ID.

        Args:
            widget_id: Widget ID

        Returns:
            True if the ID was bound
        """
        if self.bindings.pop(widget_id, None) is None:
            return False

        self.save_bindings()
        logger.info(f"Deleted widget {widget_id}")
        return True

    def resolve_content(self, widget_id: int) -> Optional[ContentHandle]:
        """Resolve a widget ID to its content.

        Args:
            widget_id: Widget ID

        Returns:
            Content handle, or None if unbound or the provider is gone
        """
        provider_id = self.bindings.get(widget_id)
        if provider_id is None:
            return None

        provider = self.providers.get(provider_id)
        if provider is None:
            return None

        return ContentHandle(widget_id=widget_id, provider=provider)

    def minimum_content_size(self, widget_id: int) -> PixelSize:
        """Minimum content size of a widget (zero if unresolvable)."""
        content = self.resolve_content(widget_id)
        if content is None:
            return PixelSize()
        return content.provider.minimum_size
