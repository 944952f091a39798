"""The launcher and taskbar strip with its zooming icon layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from deskshell.apps import BROKEN_IMAGE, AppData, Resource, Window

log = logging.getLogger(__name__)

PADDING = 4.0
ICON_ZOOM_DISTANCE = 2.5
SEPARATOR_WIDTH = 2.0

Position = Tuple[float, float]
Size = Tuple[float, float]


@dataclass(eq=False)
class CanvasItem:
    """Something drawn on the bar with a position and a size."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def position(self) -> Position:
        return self.x, self.y

    @property
    def size(self) -> Size:
        return self.width, self.height

    def move(self, x: float, y: float) -> None:
        self.x, self.y = x, y

    def resize(self, width: float, height: float) -> None:
        self.width, self.height = width, height


@dataclass(eq=False)
class Separator(CanvasItem):
    """The divider between launcher icons and taskbar icons."""


@dataclass(eq=False)
class AppWindow:
    """A taskbar entry's window, with a way to look up the app that owns it."""

    win: Optional[Window]
    bar: "Bar"

    def find_app(self) -> Optional[AppData]:
        """Return the application for the window, or None when it is unknown."""
        if self.win is None:
            return None
        return self.bar.desk.icon_provider.find_app_from_win_info(self.win)


@dataclass(eq=False)
class BarIcon(CanvasItem):
    """An icon on the bar, either a launcher for an app or a running window."""

    resource: Optional[Resource] = None
    app_data: Optional[AppData] = None
    window_data: Optional[AppWindow] = None
    on_tapped: Optional[Callable[[], None]] = None

    def tapped(self) -> None:
        if self.on_tapped is not None:
            self.on_tapped()


class BarLayout:
    """Packs bar icons in a centred row and zooms those near the pointer."""

    def __init__(self, bar: "Bar") -> None:
        self.bar = bar
        self.mouse_inside = False
        self.mouse_position: Position = (0.0, 0.0)

    def _bar_width(self, objects: Sequence[CanvasItem]) -> float:
        count = float(len(objects))
        step = self.bar.icon_size + PADDING
        if not self.bar.disable_taskbar:
            return (count - 1) * step + SEPARATOR_WIDTH
        return count * step

    def _zooming(self, bar_left: float, bar_width: float) -> bool:
        mouse_x = self.mouse_position[0]
        return (not self.bar.disable_zoom and self.mouse_inside
                and bar_left <= mouse_x < bar_left + bar_width)

    def layout(self, objects: Sequence[CanvasItem], size: Size) -> None:
        """Position ``objects``; the first is the background, the rest the icons."""
        background, items = objects[0], objects[1:]
        icon_size = self.bar.icon_size
        mouse_x = self.mouse_position[0]

        bar_width = self._bar_width(items)
        bar_left = (size[0] - bar_width) / 2
        zoom = self._zooming(bar_left, bar_width)

        offset = 0.0
        icon_left = bar_left
        for child in items:
            separator = isinstance(child, Separator)
            if separator:
                child.resize(SEPARATOR_WIDTH, icon_size)
            if zoom:
                if separator:
                    if icon_left + SEPARATOR_WIDTH + PADDING < mouse_x:
                        offset += SEPARATOR_WIDTH
                    elif icon_left < mouse_x:
                        offset += SEPARATOR_WIDTH + PADDING
                else:
                    icon_center = icon_left + icon_size / 2
                    scale = self.bar.icon_scale - abs(mouse_x - icon_center) / (
                        icon_size * ICON_ZOOM_DISTANCE)
                    new_size = max(icon_size * scale, icon_size)
                    child.resize(new_size, new_size)
                    if icon_left + icon_size + PADDING < mouse_x:
                        offset += new_size - icon_size
                    elif icon_left < mouse_x:
                        ratio = (mouse_x - icon_left) / (icon_size + PADDING)
                        offset += (new_size - icon_size) * ratio + PADDING
            elif not separator:
                child.resize(icon_size, icon_size)
            icon_left += (SEPARATOR_WIDTH if separator else icon_size) + PADDING

        x = bar_left - offset
        zoom_left = x
        tall_height = icon_size * self.bar.icon_scale
        for child in items:
            if not zoom:
                child.move(x, 0)
            elif isinstance(child, Separator):
                child.move(x, icon_size)
            else:
                child.move(x, tall_height - child.height)
            x += child.width + PADDING

        background.move(zoom_left - PADDING, icon_size if zoom else 0)
        background.resize(x - zoom_left + PADDING, icon_size)

    def min_size(self, objects: Sequence[CanvasItem]) -> Size:
        """Return the row width and the icon height, taller while zoomed."""
        bar_width = self._bar_width(objects)
        bar_left = (self.bar.width - bar_width) / 2
        if self._zooming(bar_left, bar_width):
            return bar_width, self.bar.icon_size * self.bar.icon_scale
        return bar_width, self.bar.icon_size


class Bar(CanvasItem):
    """Application launcher icons followed by a taskbar of open windows.

    ``desk`` provides ``settings``, ``icon_provider``, ``screens``,
    ``window_manager`` (or None) and ``run_app(app)``.
    """

    def __init__(self, desk: Any) -> None:
        super().__init__()
        self.desk = desk
        self.children: List[CanvasItem] = []
        self.icons: List[BarIcon] = []
        self.mouse_inside = False
        self.mouse_position: Position = (0.0, 0.0)
        self.separator: Optional[Separator] = None
        self.background = CanvasItem()
        self.disable_zoom = False

        settings = desk.settings
        self.icon_size = float(settings.launcher_icon_size)
        self.icon_scale = float(settings.launcher_zoom_scale)
        self.disable_taskbar = bool(settings.launcher_disable_taskbar)
        self._layout = BarLayout(self)

        manager = desk.window_manager
        if manager is not None:
            manager.add_stack_listener(self)
        self._append_launcher_icons()

    # pointer handling

    def mouse_in(self, position: Position) -> None:
        if self.desk.settings.launcher_disable_zoom:
            return
        self.mouse_inside = True
        self.refresh()

    def mouse_out(self) -> None:
        if self.desk.settings.launcher_disable_zoom:
            return
        self.mouse_inside = False
        self.refresh()

    def mouse_moved(self, position: Position) -> None:
        if self.desk.settings.launcher_disable_zoom:
            return
        self.mouse_position = position
        self.refresh()

    # contents

    def append(self, obj: CanvasItem) -> None:
        self.children.append(obj)
        self.refresh()

    def append_separator(self) -> None:
        self.separator = Separator()
        self.append(self.separator)

    def remove_from_taskbar(self, obj: CanvasItem) -> None:
        for index, child in enumerate(self.children):
            if child is obj:
                del self.children[index]
                break
        self.refresh()

    def _app_icon(self, data: AppData) -> Optional[Resource]:
        scale = self.desk.screens.primary().canvas_scale()
        size = int(self.icon_size * self.icon_scale * scale)
        return data.icon(self.desk.settings.icon_theme, size)

    def _win_icon(self, win: AppWindow) -> Resource:
        app = win.find_app()
        if app is not None:
            icon = self._app_icon(app)
            if icon is not None and icon != BROKEN_IMAGE:
                return icon
        if win.win is None or win.win.properties.icon is None:
            return BROKEN_IMAGE
        return win.win.properties.icon

    def _launch(self, data: AppData) -> None:
        try:
            self.desk.run_app(data)
        except (OSError, ValueError) as err:
            log.error("Failed to start app %s: %s", data.name, err)

    def create_icon(self, data: Optional[AppData],
                    win: Optional[Window]) -> Optional[BarIcon]:
        """Make a launcher icon for ``data`` or a taskbar icon for ``win``."""
        if data is None and win is None:
            return None
        if win is None:
            assert data is not None
            icon = BarIcon(resource=self._app_icon(data), app_data=data)
            icon.on_tapped = lambda: self._launch(data)
        else:
            window = AppWindow(win=win, bar=self)
            icon = BarIcon(resource=self._win_icon(window), window_data=window)
        self.icons.append(icon)
        return icon

    def taskbar_icon_tapped(self, win: Window) -> None:
        if not win.iconic and win.top_window:
            win.iconify()
            return
        if win.iconic:
            win.uniconify()
        win.raise_to_top()
        win.focus()

    def window_added(self, win: Window) -> None:
        if win.properties.skip_taskbar or self.desk.settings.launcher_disable_taskbar:
            return
        icon = self.create_icon(None, win)
        if icon is not None:
            icon.on_tapped = lambda: self.taskbar_icon_tapped(win)
            self.append(icon)

    def window_removed(self, win: Window) -> None:
        if win.properties.skip_taskbar or self.desk.settings.launcher_disable_taskbar:
            return
        for index, icon in enumerate(self.icons):
            if icon.window_data is None or icon.window_data.win is not win:
                continue
            if not win.iconic:
                self.remove_from_taskbar(icon)
                del self.icons[index]
            break

    def update_taskbar(self) -> None:
        disable = bool(self.desk.settings.launcher_disable_taskbar)
        if disable == self.disable_taskbar:
            return
        self.disable_taskbar = disable
        if disable:
            return
        self.append_separator()
        manager = self.desk.window_manager
        for win in list(manager.windows) if manager is not None else []:
            self.window_added(win)

    def update_icon_order(self) -> None:
        """Rebuild launcher icons from settings, keeping taskbar icons after them."""
        index = next((i for i, child in enumerate(self.children)
                      if isinstance(child, Separator)), -1)
        taskbar_icons = self.icons[index:] if index != -1 else []

        self.icons = []
        self.children = []
        self._append_launcher_icons()

        if self.desk.settings.launcher_disable_taskbar:
            return
        self.icons.extend(taskbar_icons)
        for icon in taskbar_icons:
            self.append(icon)

    def update_icons(self) -> None:
        """Reload every icon's image, for example after a theme change."""
        for icon in self.icons:
            if icon.window_data is not None:
                icon.resource = self._win_icon(icon.window_data)
            elif icon.app_data is not None:
                icon.resource = self._app_icon(icon.app_data)
        self.refresh()

    def _append_launcher_icons(self) -> None:
        settings = self.desk.settings
        for name in settings.launcher_icons:
            app = self.desk.icon_provider.find_app_from_name(name)
            if app is None:
                continue
            icon = self.create_icon(app, None)
            if icon is not None:
                self.append(icon)
        if not settings.launcher_disable_taskbar:
            self.append_separator()

    # geometry

    def min_size(self) -> Size:
        return self._layout.min_size(self.children)

    def refresh(self) -> None:
        """Lay out the background and children for the bar's current size."""
        self._layout.mouse_inside = self.mouse_inside
        self._layout.mouse_position = self.mouse_position
        self._layout.layout([self.background, *self.children], self.size)