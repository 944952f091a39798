"""The desktop: ties settings, screens, the bar and modules together."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from deskshell.apps import AppData, ApplicationProvider, set_instance
from deskshell.bar import Bar, CanvasItem
from deskshell.embedded import EmbeddedScreens, EmbeddedWindowManager, Screen
from deskshell.launcher import AppPicker
from deskshell.settings import DeskSettings, Modifier, is_module_enabled, load_settings

log = logging.getLogger(__name__)

ROOT_WINDOW_NAME = "Fyne Desktop"
SKIP_TASKBAR_HINT = "FyneDesk:skip"
WIDGET_PANEL_WIDTH = 200.0
MIN_SIZE: Tuple[float, float] = (640.0, 480.0)


@dataclass(frozen=True)
class _Shortcut:
    name: str
    key: str
    modifier: Modifier = Modifier.NONE
    user_modifier: bool = False


def _round_half_away(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return int(math.copysign(rounded, value)) if rounded else 0


def qt_screen_scales(screens: Iterable[Screen]) -> str:
    """Return the Qt per-screen scale list; Qt cannot handle scales below 1."""
    return ";".join(f"{screen.name}={max(1.0, screen.canvas_scale()):.1f}"
                    for screen in screens)


def scale_vars(screens: Iterable[Screen], scale: float) -> List[str]:
    """Return environment entries that tell toolkits which scale to use."""
    return [
        f"QT_SCREEN_SCALE_FACTORS={qt_screen_scales(screens)}",
        f"GDK_SCALE={_round_half_away(scale)}",
        f"ELM_SCALE={scale:.1f}",
    ]


def _background_path(path: str) -> str:
    """Return ``path`` if it names a regular file, otherwise an empty string."""
    if path and os.path.isfile(path):
        return path
    return ""


class Desktop:
    """A desktop environment with a launcher bar, a widget panel and modules.

    ``available_modules`` holds module descriptions with a ``name`` and a
    ``new_instance()`` method; enabled ones are created on demand.
    Shortcuts mapped to None are handled by the window manager itself.
    """

    def __init__(self, icon_provider: ApplicationProvider,
                 settings: Optional[DeskSettings] = None,
                 window_manager: Any = None,
                 screens: Optional[EmbeddedScreens] = None,
                 available_modules: Sequence[Any] = (),
                 on_capture: Optional[Callable[[Any], None]] = None) -> None:
        self.icon_provider = icon_provider
        self.window_manager = (window_manager if window_manager is not None
                               else EmbeddedWindowManager())
        self.screens = screens if screens is not None else EmbeddedScreens()
        self.available_modules = list(available_modules)
        self.on_capture = on_capture
        self.shortcuts: Dict[Any, Optional[Callable[[], None]]] = {}
        self.app_launcher: Optional[AppPicker] = None
        self._module_cache: Optional[List[Any]] = None

        set_instance(self)
        self.settings = (settings if settings is not None
                         else load_settings(provider=icon_provider))
        self.settings.add_change_listener(lambda _settings: self.apply_settings())
        self._register_shortcuts()

        self.background = CanvasItem()
        self.wallpaper = _background_path(self.settings.background)
        self.bar = Bar(self)
        self.widgets = CanvasItem(width=WIDGET_PANEL_WIDTH, height=200.0)

    # applications

    def run_app(self, app: AppData) -> None:
        """Start an application with scale variables for the active screen."""
        active = self.screens.active if self.screens.active is not None \
            else self.screens.primary()
        app.run(scale_vars(self.screens.screens, active.canvas_scale()))

    def content_size_pixels(self, screen: Screen) -> Tuple[int, int]:
        """Return the space maximised windows may use on ``screen``."""
        width, height = int(screen.width), int(screen.height)
        if screen is self.screens.primary():
            return width - int(WIDGET_PANEL_WIDTH * screen.canvas_scale()), height
        return width, height

    # modules and shortcuts

    def _clear_module_cache(self) -> None:
        for module in self._module_cache or []:
            destroy = getattr(module, "destroy", None)
            if callable(destroy):
                destroy()
        self._module_cache = None

    def modules(self) -> List[Any]:
        """Return the enabled modules, creating them the first time."""
        if self._module_cache is not None:
            return self._module_cache

        mods: List[Any] = []
        for meta in self.available_modules:
            if not is_module_enabled(meta.name, self.settings):
                continue
            module = meta.new_instance()
            mods.append(module)
            shortcuts = getattr(module, "shortcuts", None)
            if callable(shortcuts):
                for shortcut, handler in shortcuts().items():
                    self.add_shortcut(shortcut, handler)

        self._module_cache = mods
        return mods

    def add_shortcut(self, shortcut: Any, handler: Optional[Callable[[], None]]) -> None:
        """Register a shortcut; a None handler leaves it to the window manager."""
        self.shortcuts[shortcut] = handler

    def _register_shortcuts(self) -> None:
        self.add_shortcut(_Shortcut("Show Launcher", "Space", user_modifier=True),
                          self._toggle_app_launcher)
        # the window manager drives the app switcher
        self.add_shortcut(_Shortcut("Switch App Next", "Tab", user_modifier=True), None)
        self.add_shortcut(_Shortcut("Switch App Previous", "Tab", Modifier.SHIFT,
                                    user_modifier=True), None)
        self.add_shortcut(_Shortcut("Print Window", "Print", Modifier.SHIFT),
                          self._screenshot_window)
        self.add_shortcut(_Shortcut("Print Screen", "Print"), self._screenshot)

    def _toggle_app_launcher(self) -> Optional[AppPicker]:
        if self.app_launcher is not None:
            self.app_launcher.close()
            return None

        def closed() -> None:
            self.app_launcher = None

        def launch(app: AppData) -> None:
            try:
                self.run_app(app)
            except (OSError, ValueError) as err:
                log.error("Failed to start app %s: %s", app.name, err)

        self.app_launcher = AppPicker(
            title="Application Launcher " + SKIP_TASKBAR_HINT,
            callback=launch,
            provider=self.icon_provider,
            icon_theme=self.settings.icon_theme,
            modules=self.modules(),
            on_closed=closed,
        )
        return self.app_launcher

    def _screenshot(self) -> None:
        image = self.window_manager.capture()
        if image is not None and self.on_capture is not None:
            self.on_capture(image)

    def _screenshot_window(self) -> None:
        win = self.window_manager.top_window()
        if win is None:
            log.error("Unable to print window with no window visible")
            return
        image = win.capture()
        if image is not None and self.on_capture is not None:
            self.on_capture(image)

    # geometry and pointer

    def layout(self, size: Tuple[float, float]) -> None:
        """Place the background, the bar along the bottom and the widget panel."""
        width, height = size
        self.background.move(0, 0)
        self.background.resize(width, height)

        bar_height = self.bar.min_size()[1]
        # one extra pixel so rounding cannot trigger mouse-out on the bottom edge
        self.bar.resize(width, bar_height + 1)
        self.bar.move(0, height - bar_height)
        self.bar.refresh()

        self.widgets.resize(WIDGET_PANEL_WIDTH, height)
        self.widgets.move(width - WIDGET_PANEL_WIDTH, 0)

    def mouse_in_notify(self, position: Tuple[float, float]) -> None:
        """Tell the bar the pointer entered when it lies within the bar."""
        mouse_x, mouse_y = position
        bar_x, bar_y = self.bar.position
        bar_width, bar_height = self.bar.size
        if bar_x <= mouse_x <= bar_x + bar_width and bar_y <= mouse_y <= bar_y + bar_height:
            self.bar.mouse_in(position)

    def mouse_out_notify(self) -> None:
        self.bar.mouse_out()

    def apply_settings(self) -> None:
        """Bring modules, wallpaper and bar in line with the current settings."""
        self._clear_module_cache()
        self.wallpaper = _background_path(self.settings.background)
        self.modules()

        self.bar.icon_size = float(self.settings.launcher_icon_size)
        self.bar.icon_scale = float(self.settings.launcher_zoom_scale)
        self.bar.disable_zoom = bool(self.settings.launcher_disable_zoom)
        self.bar.update_icons()
        self.bar.update_icon_order()
        self.bar.update_taskbar()