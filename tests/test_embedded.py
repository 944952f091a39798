import pytest

from deskshell.apps import Window
from deskshell.embedded import EmbeddedScreens, EmbeddedWindowManager, Screen


def test_default_screen():
    screens = EmbeddedScreens()
    primary = screens.primary()
    assert primary.name == "(Embedded)"
    assert (primary.width, primary.height) == (1280, 1024)
    assert screens.active is primary


def test_lookups_return_primary():
    first = Screen("A", width=10, height=10)
    second = Screen("B", x=10, width=10, height=10)
    screens = EmbeddedScreens([first, second])
    assert screens.primary() is first
    assert screens.screen_for_window(Window()) is first
    assert screens.screen_for_geometry(15, 0, 1, 1) is first


def test_no_screens_rejected():
    with pytest.raises(ValueError):
        EmbeddedScreens([])


def test_canvas_scale_follows_scale():
    screen = Screen("S", scale=1.5)
    assert screen.canvas_scale() == pytest.approx(1.5)


def test_window_stack():
    wm = EmbeddedWindowManager()
    assert wm.top_window() is None
    a, b = Window(), Window()
    wm.add_window(a)
    wm.add_window(b)
    assert wm.top_window() is b
    wm.remove_window(b)
    assert wm.top_window() is a
    assert wm.windows == [a]


def test_remove_unknown_window_keeps_stack():
    wm = EmbeddedWindowManager()
    a = Window()
    wm.add_window(a)
    wm.remove_window(Window())
    assert wm.windows == [a]


def test_capture_is_empty_and_close_calls_back():
    closed = []
    wm = EmbeddedWindowManager(on_close=lambda: closed.append(True))
    assert wm.capture() is None
    wm.close()
    assert closed == [True]