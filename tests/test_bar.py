from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from deskshell.apps import (
    BROKEN_IMAGE,
    AppData,
    ApplicationProvider,
    Resource,
    Window,
    WindowProperties,
)
from deskshell.bar import Bar, BarIcon, BarLayout, CanvasItem, PADDING, Separator
from deskshell.embedded import EmbeddedScreens, EmbeddedWindowManager, Screen
from deskshell.settings import DeskSettings

MAXIMIZE = Resource("maximize.png", b"max")
ICONIFY = Resource("iconify.png", b"icon")


class FakeApp(AppData):
    def __init__(self, name: str) -> None:
        self.name = name

    def run(self, env=()) -> None:
        pass

    def icon(self, theme: str, size: int) -> Optional[Resource]:
        if theme == "":
            return None
        if theme == "Maximize":
            return MAXIMIZE
        return ICONIFY


class DummyIcon(AppData):
    def __init__(self, name: str = "") -> None:
        self.name = name

    def run(self, env=()) -> None:
        pass

    def icon(self, theme: str, size: int) -> Optional[Resource]:
        return Resource("test.png", b"")


class FakeProvider(ApplicationProvider):
    def available_apps(self):
        return []

    def available_themes(self):
        return []

    def find_app_from_name(self, app_name):
        return FakeApp(app_name)

    def find_app_from_win_info(self, win):
        return FakeApp("")

    def find_apps_matching(self, pattern):
        return []

    def default_apps(self):
        return []


@dataclass
class FakeDesk:
    settings: DeskSettings = field(
        default_factory=lambda: DeskSettings(launcher_icon_size=32, launcher_zoom_scale=1.5))
    icon_provider: ApplicationProvider = field(default_factory=FakeProvider)
    screens: EmbeddedScreens = field(default_factory=lambda: EmbeddedScreens(
        [Screen("Screen0", width=2000, height=1000)]))
    window_manager: EmbeddedWindowManager = field(default_factory=EmbeddedWindowManager)
    launched: List[AppData] = field(default_factory=list)
    fail_run: bool = False

    def run_app(self, app):
        if self.fail_run:
            raise OSError("cannot start")
        self.launched.append(app)


def make_bar(names):
    bar = Bar(FakeDesk())
    bar.children = []
    for name in names:
        icon = bar.create_icon(DummyIcon(name), None)
        if icon is not None:
            bar.append(icon)
    return bar


def new_window(title=""):
    return Window(properties=WindowProperties(title=title))


def test_append():
    icons = ["fyne"] * 4
    bar = make_bar(icons)
    assert len(bar.children) == 4
    bar.append_separator()
    assert len(bar.children) == 5
    icon = bar.create_icon(DummyIcon(), new_window())
    bar.append(icon)
    assert len(bar.children) == 6
    bar.remove_from_taskbar(icon)
    assert len(bar.children) == 5


def test_zoom():
    bar = make_bar(["fyne"] * 4)
    bar.disable_zoom = False
    bar.icon_size = 32
    bar.icon_scale = 2.0
    bar.mouse_inside = True
    x, y = bar.children[0].position
    bar.mouse_position = (x + 5, y + 5)
    bar.refresh()
    assert bar.children[0].width > bar.children[1].width


def test_background_width():
    bar = make_bar(["fyne"])
    bar.disable_taskbar = True
    assert bar.background.width == bar.icon_size + PADDING * 2


def test_icons_and_icon_theme_change():
    bar = make_bar([])
    assert len(bar.icons) == 0
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()
    assert len(bar.icons) == 3

    bar.desk.settings.icon_theme = "Maximize"
    bar.update_icons()
    assert bar.children[0].resource == MAXIMIZE

    bar.desk.settings.icon_theme = "TestIconTheme"
    bar.update_icons()
    assert bar.children[0].resource == ICONIFY


def test_icon_order_change():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()
    assert [c.app_data.name for c in bar.children[:3]] == ["App1", "App2", "App3"]

    bar.desk.settings.launcher_icons = ["App3", "App1", "App2"]
    bar.update_icon_order()
    assert [c.app_data.name for c in bar.children[:3]] == ["App3", "App1", "App2"]


def test_icon_size_change():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()
    assert bar.icons[0].width == 32

    bar.desk.settings.launcher_icon_size = 64
    bar.icon_size = bar.desk.settings.launcher_icon_size
    bar.update_icons()
    assert bar.icons[0].width == 64


def test_zoom_scale_change():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()

    bar.mouse_inside = True
    bar.mouse_position = bar.children[0].position
    bar.refresh()
    first_width = bar.children[0].width

    bar.desk.settings.launcher_zoom_scale = 2.0
    bar.icon_scale = bar.desk.settings.launcher_zoom_scale
    bar.update_icons()

    bar.mouse_inside = True
    bar.mouse_position = bar.children[0].position
    bar.refresh()
    assert bar.children[0].width > first_width


def test_icon_zoom_disabled():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.desk.settings.launcher_zoom_scale = 2.0
    bar.icon_scale = bar.desk.settings.launcher_zoom_scale
    bar.update_icon_order()

    bar.mouse_inside = True
    bar.mouse_position = bar.children[0].position
    bar.refresh()
    assert bar.children[0].width != bar.desk.settings.launcher_icon_size

    bar.desk.settings.launcher_disable_zoom = True
    bar.disable_zoom = True
    bar.update_icon_order()
    bar.mouse_inside = True
    bar.mouse_position = bar.children[0].position
    bar.refresh()
    assert bar.children[0].width == bar.desk.settings.launcher_icon_size


def test_icon_taskbar_disabled():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()
    assert len(bar.icons) == len(bar.children) - 1

    icon = bar.create_icon(FakeApp("dummy"), new_window())
    bar.append(icon)
    assert bar.children[-1].window_data is not None

    bar.desk.settings.launcher_disable_taskbar = True
    bar.update_icon_order()
    bar.update_taskbar()
    last = bar.children[-1]
    assert isinstance(last, BarIcon)
    assert last.window_data is None


def test_create_icon_needs_data_or_window():
    bar = make_bar([])
    assert bar.create_icon(None, None) is None


def test_app_icon_tap_runs_app():
    bar = make_bar([])
    app = DummyIcon("editor")
    icon = bar.create_icon(app, None)
    icon.tapped()
    assert bar.desk.launched == [app]


def test_app_icon_tap_failure_is_logged_not_raised():
    bar = make_bar([])
    bar.desk.fail_run = True
    icon = bar.create_icon(DummyIcon("editor"), None)
    icon.tapped()
    assert bar.desk.launched == []


def test_window_icon_falls_back_to_broken_image():
    bar = make_bar([])
    icon = bar.create_icon(None, new_window())
    assert icon.resource == BROKEN_IMAGE


def test_window_icon_uses_window_property_icon():
    bar = make_bar([])
    own = Resource("own.png", b"x")
    win = Window(properties=WindowProperties(icon=own))
    icon = bar.create_icon(None, win)
    assert icon.resource == own


def test_window_added_and_removed():
    bar = make_bar([])
    win = new_window("term")
    bar.window_added(win)
    assert bar.children[-1].window_data.win is win
    count = len(bar.children)
    bar.window_removed(win)
    assert len(bar.children) == count - 1
    assert all(i.window_data is None or i.window_data.win is not win for i in bar.icons)


def test_window_removed_keeps_iconic_window():
    bar = make_bar([])
    win = new_window()
    bar.window_added(win)
    win.iconify()
    count = len(bar.children)
    bar.window_removed(win)
    assert len(bar.children) == count


def test_window_added_skips_taskbar_hint():
    bar = make_bar([])
    win = Window(properties=WindowProperties(skip_taskbar=True))
    bar.window_added(win)
    assert bar.children == []


def test_taskbar_icon_tap_iconifies_top_window():
    bar = make_bar([])
    win = new_window()
    bar.window_added(win)
    win.raise_to_top()
    bar.children[-1].tapped()
    assert win.iconic is True


def test_taskbar_icon_tap_restores_iconic_window():
    bar = make_bar([])
    win = new_window()
    win.iconify()
    bar.taskbar_icon_tapped(win)
    assert (win.iconic, win.raised, win.focused) == (False, True, True)


def test_update_taskbar_adds_existing_windows():
    desk = FakeDesk()
    desk.settings.launcher_disable_taskbar = True
    win = new_window()
    desk.window_manager.add_window(win)
    bar = Bar(desk)
    assert not any(isinstance(c, Separator) for c in bar.children)
    desk.settings.launcher_disable_taskbar = False
    bar.update_taskbar()
    assert isinstance(bar.children[-2], Separator)
    assert bar.children[-1].window_data.win is win


def test_min_size_without_zoom():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()
    assert bar.min_size() == (3 * (32 + PADDING) + 2, 32)


def test_min_size_zoomed_is_taller():
    bar = make_bar([])
    bar.desk.settings.launcher_icons = ["App1", "App2", "App3"]
    bar.update_icon_order()
    bar.mouse_inside = True
    bar.mouse_position = bar.children[0].position
    bar.refresh()
    assert bar.min_size()[1] == pytest.approx(32 * 1.5)


def test_mouse_in_ignored_when_zoom_disabled():
    bar = make_bar([])
    bar.desk.settings.launcher_disable_zoom = True
    bar.mouse_in((1, 1))
    assert bar.mouse_inside is False


def test_mouse_in_and_out():
    bar = make_bar([])
    bar.mouse_in((1, 1))
    assert bar.mouse_inside is True
    bar.mouse_moved((7, 3))
    assert bar.mouse_position == (7, 3)
    bar.mouse_out()
    assert bar.mouse_inside is False


def test_layout_centres_icons():
    bar = make_bar(["a", "b"])
    bar.disable_taskbar = True
    layout = BarLayout(bar)
    background = CanvasItem()
    items = list(bar.children)
    layout.layout([background, *items], (200, 50))
    bar_width = 2 * (32 + PADDING)
    assert items[0].position == ((200 - bar_width) / 2, 0)
    assert items[1].x == items[0].x + 32 + PADDING
    assert background.size == (bar_width + PADDING, 32)