"""Screen and window management used when running inside another desktop."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from deskshell.apps import Window


@dataclass(eq=False)
class Screen:
    """A physical or virtual display area."""

    name: str
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    scale: float = 1.0
    user_scale: float = 1.0

    def canvas_scale(self) -> float:
        """Return the scale applied to content drawn on this screen."""
        return self.scale * self.user_scale


def _embedded_screen() -> Screen:
    return Screen(name="(Embedded)", x=0, y=0, width=1280, height=1024, scale=1.0)


@dataclass
class EmbeddedScreens:
    """A fixed list of screens; the first is always the primary one."""

    screens: List[Screen] = field(default_factory=lambda: [_embedded_screen()])
    active: Optional[Screen] = None
    listeners: List[Callable[[], None]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.screens:
            raise ValueError("at least one screen is required")
        if self.active is None:
            self.active = self.screens[0]

    def refresh_screens(self) -> None:
        """Make sure the active screen is still one of the known screens."""
        if self.active not in self.screens:
            self.active = self.screens[0]

    def add_change_listener(self, listener: Callable[[], None]) -> None:
        """Remember a listener; embedded screens never change, so it is not called."""
        self.listeners.append(listener)

    def primary(self) -> Screen:
        return self.screens[0]

    def screen_for_window(self, win: Window) -> Screen:
        return self.screens[0]

    def screen_for_geometry(self, x: int, y: int, width: int, height: int) -> Screen:
        return self.screens[0]


@dataclass
class EmbeddedWindowManager:
    """Keeps a simple stack of windows without controlling a display server.

    ``screen_image`` is what ``capture`` returns; the host's screen cannot be
    read, so it stays None unless supplied.
    """

    windows: List[Window] = field(default_factory=list)
    on_close: Optional[Callable[[], None]] = None
    screen_image: Any = None
    stack_listeners: List[Any] = field(default_factory=list)

    def add_window(self, win: Window) -> None:
        self.windows.append(win)

    def remove_window(self, win: Window) -> None:
        for index, existing in enumerate(self.windows):
            if existing is win:
                del self.windows[index]
                return

    def top_window(self) -> Optional[Window]:
        return self.windows[-1] if self.windows else None

    def add_stack_listener(self, listener: Any) -> None:
        """Remember a listener interested in stack changes."""
        self.stack_listeners.append(listener)

    def capture(self) -> Any:
        """Return the captured screen image, or None."""
        return self.screen_image

    def close(self) -> None:
        """Ask the desktop's root window to close."""
        if self.on_close is not None:
            self.on_close()