"""Application, provider and window abstractions shared across the desktop."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class Resource:
    """A named blob of static data, usually image bytes."""

    name: str
    content: bytes


# Marker returned when an application icon could not be located or decoded.
BROKEN_IMAGE = Resource("broken-image.png", b"")


class AppData(abc.ABC):
    """Information about an installed application and how to start it."""

    name: str

    @abc.abstractmethod
    def run(self, env: Sequence[str]) -> None:
        """Start the application with extra ``KEY=value`` environment entries."""

    @abc.abstractmethod
    def icon(self, theme: str, size: int) -> Optional[Resource]:
        """Return an icon for the application in the given theme and size."""


class ApplicationProvider(abc.ABC):
    """Locates applications and their icons on the current system."""

    @abc.abstractmethod
    def available_apps(self) -> List[AppData]:
        """Return every application that can be found."""

    @abc.abstractmethod
    def available_themes(self) -> List[str]:
        """Return the names of the icon themes that are installed."""

    @abc.abstractmethod
    def find_app_from_name(self, app_name: str) -> Optional[AppData]:
        """Return the application with the given name, or None."""

    @abc.abstractmethod
    def find_app_from_win_info(self, win: "Window") -> Optional[AppData]:
        """Return the application that owns a window, or None."""

    @abc.abstractmethod
    def find_apps_matching(self, pattern: str) -> List[AppData]:
        """Return the applications whose name matches a partial pattern."""

    @abc.abstractmethod
    def default_apps(self) -> List[AppData]:
        """Return a sensible set of applications for a fresh launcher."""


@dataclass
class WindowProperties:
    """Metadata that a window advertises about itself."""

    title: str = ""
    command: str = ""
    icon_name: str = ""
    window_class: List[str] = field(default_factory=list)
    icon: Optional[Resource] = None
    decorated: bool = True
    skip_taskbar: bool = False


@dataclass(eq=False)
class Window:
    """A managed window and its stacking and display state.

    ``snapshot`` holds the image that ``capture`` hands out; in-memory
    windows have none unless one is supplied.
    """

    properties: WindowProperties = field(default_factory=WindowProperties)
    iconic: bool = False
    focused: bool = False
    fullscreen: bool = False
    maximized: bool = False
    raised: bool = False
    closed: bool = False
    snapshot: Any = None

    @property
    def top_window(self) -> bool:
        """True when this window has been raised above all others."""
        return self.raised

    def focus(self) -> None:
        self.focused = True

    def iconify(self) -> None:
        self.iconic = True

    def uniconify(self) -> None:
        self.iconic = False

    def raise_to_top(self) -> None:
        self.raised = True

    def maximize(self) -> None:
        self.maximized = True

    def unmaximize(self) -> None:
        self.maximized = False

    def make_fullscreen(self) -> None:
        self.fullscreen = True

    def unfullscreen(self) -> None:
        self.fullscreen = False

    def close(self) -> None:
        self.closed = True

    def capture(self) -> Any:
        """Return an image of the window contents, or None if there is none."""
        return self.snapshot


def find_one_app_from_names(provider: ApplicationProvider, *names: str) -> Optional[AppData]:
    """Return the first application the provider knows from the given names."""
    for name in names:
        app = provider.find_app_from_name(name)
        if app is not None:
            return app
    return None


_registry: Dict[str, Any] = {}


def set_instance(desk: Any) -> None:
    """Register the running desktop."""
    _registry["desktop"] = desk


def instance() -> Any:
    """Return the running desktop, or None before one is registered."""
    return _registry.get("desktop")