"""User preferences for the desktop, loaded from the environment and a store."""

from __future__ import annotations

import enum
import json
import os
import threading
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional

from deskshell.apps import ApplicationProvider

DEFAULT_MODULE_NAMES = "Battery|Brightness|Sound|Launcher: Calculate|Launcher: Open URLs"
DEFAULT_ICON_THEME = "hicolor"
DEFAULT_ICON_SIZE = 48.0
DEFAULT_ZOOM_SCALE = 2.0


class Modifier(enum.IntFlag):
    """Keyboard modifier keys."""

    NONE = 0
    SHIFT = 1 << 0
    CONTROL = 1 << 1
    ALT = 1 << 2
    SUPER = 1 << 3


class Preferences:
    """A key/value preference store, optionally persisted as a JSON file."""

    def __init__(self, path: Optional[str] = None,
                 values: Optional[Mapping[str, Any]] = None) -> None:
        self.path = path
        self._values: Dict[str, Any] = {}
        if path is not None and os.path.exists(path):
            with open(path, encoding="utf-8") as handle:
                loaded = json.load(handle)
            if not isinstance(loaded, dict):
                raise ValueError(f"preferences file {path} does not hold an object")
            self._values.update(loaded)
        if values:
            self._values.update(values)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` when the key was never set."""
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value, writing the file through when one is configured."""
        self._values[key] = value
        if self.path is not None:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, indent=2, sort_keys=True)

    def __contains__(self, key: str) -> bool:
        return key in self._values


def _join(names: List[str]) -> str:
    return "|".join(names)


# attribute -> (preference key, encoder for the stored value)
_PREFERENCE_KEYS: Dict[str, tuple] = {
    "background": ("background", str),
    "icon_theme": ("icontheme", str),
    "launcher_icons": ("launchericons", _join),
    "launcher_icon_size": ("launchericonsize", int),
    "launcher_disable_taskbar": ("launcherdisabletaskbar", bool),
    "launcher_disable_zoom": ("launcherdisablezoom", bool),
    "launcher_zoom_scale": ("launcherzoomscale", float),
    "keyboard_modifier": ("keyboardmodifier", int),
    "module_names": ("modulenames", _join),
    "border_button_position": ("borderbuttonposition", str),
    "clock_formatting": ("clockformatting", str),
}

SettingsListener = Callable[["DeskSettings"], None]


@dataclass
class DeskSettings:
    """The desktop's current configuration."""

    background: str = ""
    icon_theme: str = ""
    launcher_icons: List[str] = field(default_factory=list)
    launcher_icon_size: float = 0.0
    launcher_disable_taskbar: bool = False
    launcher_disable_zoom: bool = False
    launcher_zoom_scale: float = 0.0
    keyboard_modifier: Modifier = Modifier.NONE
    module_names: List[str] = field(default_factory=list)
    border_button_position: str = ""
    clock_formatting: str = ""
    preferences: Optional[Preferences] = field(default=None, repr=False, compare=False)
    _listeners: List[SettingsListener] = field(default_factory=list, init=False,
                                               repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False,
                                  repr=False, compare=False)

    def add_change_listener(self, listener: SettingsListener) -> None:
        """Register a callable that receives these settings after each change."""
        with self._lock:
            self._listeners.append(listener)

    def update(self, **kwargs: Any) -> None:
        """Change settings, store them in the preferences and notify listeners."""
        unknown = set(kwargs) - set(_PREFERENCE_KEYS)
        if unknown:
            raise TypeError(f"unknown settings: {', '.join(sorted(unknown))}")

        for attr, value in kwargs.items():
            if attr == "keyboard_modifier":
                value = Modifier(int(value))
            elif attr in ("launcher_icons", "module_names"):
                value = list(value)
            elif attr in ("launcher_icon_size", "launcher_zoom_scale"):
                value = float(value)
            setattr(self, attr, value)
            if self.preferences is not None:
                key, encode = _PREFERENCE_KEYS[attr]
                self.preferences.set(key, encode(value))
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)


def _split(value: Any) -> List[str]:
    text = str(value) if value is not None else ""
    return text.split("|") if text else []


def load_settings(preferences: Optional[Preferences] = None,
                  provider: Optional[ApplicationProvider] = None,
                  environ: Optional[Mapping[str, str]] = None) -> DeskSettings:
    """Build settings from environment overrides, stored preferences and defaults."""
    prefs = preferences if preferences is not None else Preferences()
    env = os.environ if environ is None else environ

    background = env.get("FYNEDESK_BACKGROUND", "") or str(prefs.get("background", ""))
    icon_theme = env.get("FYNEDESK_ICONTHEME", "") or str(prefs.get("icontheme", ""))
    if not icon_theme:
        icon_theme = DEFAULT_ICON_THEME

    launcher_icons = _split(prefs.get("launchericons", ""))
    if not launcher_icons and provider is not None:
        launcher_icons = [app.name for app in provider.default_apps()]

    icon_size = float(int(prefs.get("launchericonsize", 0) or 0)) or DEFAULT_ICON_SIZE
    zoom_scale = float(prefs.get("launcherzoomscale", 0.0) or 0.0) or DEFAULT_ZOOM_SCALE

    return DeskSettings(
        background=background,
        icon_theme=icon_theme,
        launcher_icons=launcher_icons,
        launcher_icon_size=icon_size,
        launcher_disable_taskbar=bool(prefs.get("launcherdisabletaskbar", False)),
        launcher_disable_zoom=bool(prefs.get("launcherdisablezoom", False)),
        launcher_zoom_scale=zoom_scale,
        keyboard_modifier=Modifier(int(prefs.get("keyboardmodifier", 0) or 0)),
        module_names=_split(prefs.get("modulenames", DEFAULT_MODULE_NAMES)),
        border_button_position=str(prefs.get("borderbuttonposition", "Left")),
        clock_formatting=str(prefs.get("clockformatting", "12h")),
        preferences=prefs,
    )


def is_module_enabled(name: str, settings: Any) -> bool:
    """True when the named module is among the settings' enabled modules."""
    return name in settings.module_names


def _setting_names() -> List[str]:
    return [f.name for f in fields(DeskSettings) if f.name in _PREFERENCE_KEYS]