"""A window switcher that cycles through windows and raises the chosen one."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from deskshell.apps import ApplicationProvider, Resource, Window, instance

SWITCHER_ICON_SIZE = 64
SWITCHER_TEXT_SIZE = 24
SWITCHER_TITLE = "Window switcher FyneDesk:skip"


@dataclass(eq=False)
class SwitchIcon:
    """One window as shown in the switcher."""

    win: Window
    title: str
    icon: Optional[Resource] = None
    current: bool = False


def _current_icon_theme() -> str:
    desk = instance()
    settings = getattr(desk, "settings", None)
    return getattr(settings, "icon_theme", "") if settings is not None else ""


def _switch_icon(win: Window, provider: ApplicationProvider, theme: str) -> SwitchIcon:
    app = provider.find_app_from_win_info(win)
    if app is not None:
        return SwitchIcon(win, app.name, app.icon(theme, SWITCHER_ICON_SIZE * 2))
    return SwitchIcon(win, win.properties.title, win.properties.icon)


@dataclass
class Switcher:
    """A visible switcher; the current icon is raised by :meth:`hide_apply`."""

    icons: List[SwitchIcon]
    provider: ApplicationProvider
    title: str = SWITCHER_TITLE
    visible: bool = True
    closed: bool = field(default=False)

    def current_index(self) -> int:
        return next((i for i, icon in enumerate(self.icons) if icon.current), 0)

    def set_current(self, index: int) -> None:
        for position, icon in enumerate(self.icons):
            icon.current = position == index

    def next(self) -> None:
        """Select the next lower window, wrapping to the top."""
        if not self.icons:
            return
        self.set_current((self.current_index() + 1) % len(self.icons))

    def previous(self) -> None:
        """Select the next higher window, wrapping to the bottom."""
        if not self.icons:
            return
        self.set_current((self.current_index() - 1) % len(self.icons))

    def hide_apply(self) -> None:
        """Dismiss the switcher and raise the selected window."""
        self.hide_cancel()
        win = self.icons[self.current_index()].win
        if win.iconic:
            win.uniconify()
        win.raise_to_top()

    def hide_cancel(self) -> None:
        """Dismiss the switcher without changing the window order."""
        self.visible = False
        self.closed = True


def _show_app_switcher_at(offset: int, windows: Sequence[Window],
                          provider: ApplicationProvider) -> Optional[Switcher]:
    if len(windows) <= 1:
        return None
    theme = _current_icon_theme()
    switcher = Switcher([_switch_icon(win, provider, theme) for win in windows], provider)
    if offset < 0:
        offset += len(switcher.icons)
    switcher.set_current(offset)
    return switcher


def show_app_switcher(windows: Sequence[Window],
                      provider: ApplicationProvider) -> Optional[Switcher]:
    """Show the switcher with the most recent non-top window selected."""
    return _show_app_switcher_at(1, windows, provider)


def show_app_switcher_reverse(windows: Sequence[Window],
                              provider: ApplicationProvider) -> Optional[Switcher]:
    """Show the switcher with the least recently used window selected."""
    return _show_app_switcher_at(-1, windows, provider)