from typing import Optional

from deskshell.apps import AppData, ApplicationProvider, Resource, Window, WindowProperties
from deskshell.switcher import show_app_switcher, show_app_switcher_reverse


class _App(AppData):
    def __init__(self, name: str) -> None:
        self.name = name

    def run(self, env) -> None:
        pass

    def icon(self, theme: str, size: int) -> Optional[Resource]:
        return Resource(f"icon-{size}.png", b"")


class _Provider(ApplicationProvider):
    def __init__(self, known: bool = False) -> None:
        self.known = known

    def available_apps(self):
        return []

    def available_themes(self):
        return []

    def find_app_from_name(self, app_name):
        return None

    def find_app_from_win_info(self, win):
        return _App("Known " + win.properties.title) if self.known else None

    def find_apps_matching(self, pattern):
        return []

    def default_apps(self):
        return []


def _windows():
    return [Window(WindowProperties(title=t)) for t in ("App1", "App2", "App3")]


def test_show_app_switcher():
    s = show_app_switcher(_windows(), _Provider())
    assert s.visible is True
    assert s.current_index() == 1


def test_show_app_switcher_reverse():
    wins = _windows()
    s = show_app_switcher_reverse(wins, _Provider())
    assert s.visible is True
    assert s.current_index() == len(wins) - 1


def test_single_window_not_shown():
    assert show_app_switcher(_windows()[:1], _Provider()) is None


def test_next():
    s = show_app_switcher(_windows(), _Provider())
    current = s.current_index()
    s.next()
    assert s.current_index() == current + 1
    s.set_current(len(s.icons) - 1)
    s.next()
    assert s.current_index() == 0


def test_previous():
    s = show_app_switcher(_windows(), _Provider())
    current = s.current_index()
    s.previous()
    assert s.current_index() == current - 1
    s.set_current(0)
    s.previous()
    assert s.current_index() == len(s.icons) - 1


def test_hide_apply():
    wins = _windows()
    wins[1].iconify()
    s = show_app_switcher(wins, _Provider())
    s.hide_apply()
    assert wins[s.current_index()].top_window is True
    assert wins[1].iconic is False
    assert s.visible is False


def test_hide_cancel():
    wins = _windows()
    s = show_app_switcher(wins, _Provider())
    s.hide_cancel()
    assert wins[s.current_index()].top_window is False
    assert s.closed is True


def test_titles_from_windows_or_apps():
    plain = show_app_switcher(_windows(), _Provider())
    assert [icon.title for icon in plain.icons] == ["App1", "App2", "App3"]
    known = show_app_switcher(_windows(), _Provider(known=True))
    assert known.icons[0].title == "Known App1"
    assert known.icons[0].icon == Resource("icon-128.png", b"")