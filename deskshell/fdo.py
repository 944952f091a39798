"""Application and icon discovery following the FreeDesktop.org specifications."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence

from deskshell.apps import (
    BROKEN_IMAGE,
    AppData,
    ApplicationProvider,
    Resource,
    Window,
    find_one_app_from_names,
)
from deskshell.xpm import xpm_to_png

log = logging.getLogger(__name__)

ICON_EXTENSIONS = (".png", ".svg", ".xpm")
SUB_ICON_DIRS = ("apps", "actions", "devices", "emblems", "legacy", "mimetypes",
                 "places", "status")
_DESKTOP_SECTION = "[Desktop Entry]"
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> Optional[int]:
    return int(text) if _INTEGER.fullmatch(text) else None


def _value_after_equals(line: str) -> str:
    """Return the second segment of the line when split after each ``=``."""
    rest = line.split("=", 1)[1]
    idx = rest.find("=")
    return rest if idx < 0 else rest[: idx + 1]


def _list_dir(path: str) -> Optional[List[str]]:
    try:
        return sorted(os.listdir(path))
    except OSError:
        return None


def _first_existing(paths: Iterable[str]) -> Optional[str]:
    return next((path for path in paths if os.path.exists(path)), None)


def extract_args(args: Sequence[str]) -> List[str]:
    """Drop field codes such as ``%U`` from a desktop file's Exec arguments."""
    return [arg for arg in args if not (len(arg) >= 2 and arg[0] == "%")]


def load_icon(path: str) -> Optional[Resource]:
    """Load an icon file, converting XPM images to PNG; None if unreadable."""
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as err:
        log.error("Failed to load image %s: %s", path, err)
        return None

    if path.endswith(".xpm"):
        try:
            data = xpm_to_png(data)
        except (ValueError, OSError, IndexError) as err:
            log.error("Failed to re-encode XPM image %s: %s", path, err)
            return None
        path = path[:-4] + ".png"

    return Resource(os.path.basename(path), data)


@dataclass
class FdoApplication(AppData):
    """An application described by a ``.desktop`` file."""

    name: str = ""
    icon_name: str = ""
    icon_path: str = ""
    command: str = ""

    def icon(self, theme: str, size: int) -> Optional[Resource]:
        path = self.icon_path or lookup_icon_path(theme, size, self.icon_name)
        if not path:
            return BROKEN_IMAGE
        return load_icon(path)

    def run(self, env: Sequence[str] = ()) -> None:
        """Start the application with extra ``KEY=value`` environment entries."""
        parts = self.command.split(" ")
        program = parts[0]
        if not program:
            raise ValueError(f"application {self.name!r} has no command to run")
        if program.startswith('"'):
            program = program[1:-1]

        args = extract_args(parts) if len(parts) > 1 else [program]
        environment = dict(os.environ)
        for entry in env:
            key, sep, value = entry.partition("=")
            if sep:
                environment[key] = value
        subprocess.Popen(args, executable=program, env=environment)


def xdg_data_dirs() -> List[str]:
    """Return the XDG data directories, with the standard fallbacks."""
    locations = os.environ.get("XDG_DATA_DIRS", "").split(":")
    if locations == [""]:
        fallback: List[str] = []
        try:
            fallback.append(os.path.join(os.path.expanduser("~"), ".local/share"))
        except (KeyError, RuntimeError):
            pass
        fallback.extend(["/usr/local/share", "/usr/share"])
        return fallback
    return locations


def parse_desktop_file(path: str) -> FdoApplication:
    """Read the ``[Desktop Entry]`` of a desktop file; raises OSError if unreadable."""
    with open(path, encoding="utf-8", errors="replace") as handle:
        text = handle.read()

    app = FdoApplication()
    section = ""
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if line.startswith("["):
            section = line
        if section != _DESKTOP_SECTION:
            continue
        if line.startswith("Name="):
            app.name = _value_after_equals(line)
        elif line.startswith("Icon="):
            app.icon_name = _value_after_equals(line)
            if os.path.exists(app.icon_name):
                app.icon_path = app.icon_name
        elif line.startswith("Exec="):
            app.command = _value_after_equals(line)
    return app


def _try_parse(path: str) -> Optional[FdoApplication]:
    try:
        return parse_desktop_file(path)
    except OSError as err:
        log.error("Could not open file %s: %s", path, err)
        return None


def _iter_applications() -> Iterator[FdoApplication]:
    for data_dir in xdg_data_dirs():
        location = os.path.join(data_dir, "applications")
        entries = _list_dir(location)
        if entries is None:
            continue
        for entry in entries:
            path = os.path.join(location, entry)
            if entry.startswith(".") or os.path.isdir(path):
                continue
            app = _try_parse(path)
            if app is not None:
                yield app


def lookup_application(app_name: str) -> Optional[FdoApplication]:
    """Find an application by desktop file name, then by its Name or Exec value."""
    if not app_name:
        return None
    for data_dir in xdg_data_dirs():
        path = os.path.join(data_dir, "applications", app_name + ".desktop")
        if os.path.exists(path):
            return _try_parse(path)
    return next((app for app in _iter_applications()
                 if app.name == app_name or app.command == app_name), None)


def lookup_applications_matching(pattern: str) -> List[FdoApplication]:
    """Return applications whose name or command contains the pattern, ignoring case."""
    needle = pattern.lower()
    return [app for app in _iter_applications()
            if needle in app.name.lower() or needle in app.command.lower()]


def lookup_applications() -> List[FdoApplication]:
    """Return every application found in the data directories."""
    return list(_iter_applications())


def _closest_size_icon(entries: Sequence[str], icon_size: int, square: bool,
                       base_dir: str, joiner: str, icon_name: str) -> Optional[str]:
    best: Optional[str] = None
    best_diff = 0
    for entry in entries:
        size = _atoi(entry.split("x")[0] if square else entry)
        if size is None:
            continue
        size_dir = f"{size}x{size}" if square else str(size)
        match_dir = (os.path.join(base_dir, size_dir, joiner) if joiner
                     else os.path.join(base_dir, size_dir))
        found = _first_existing(os.path.join(match_dir, icon_name + ext)
                                for ext in ICON_EXTENSIONS)
        if found is None:
            continue
        diff = abs(icon_size - size)
        if best is None or diff < best_diff:
            best, best_diff = found, diff
    return best


def _closest_in(entries: Sequence[str], icon_size: int, base_dir: str, joiner: str,
                icon_name: str) -> Optional[str]:
    return (_closest_size_icon(entries, icon_size, True, base_dir, joiner, icon_name)
            or _closest_size_icon(entries, icon_size, False, base_dir, joiner, icon_name))


def _lookup_any_size_in_theme_dir(theme_dir: str, joiner: str, icon_name: str,
                                  icon_size: int) -> Optional[str]:
    entries = _list_dir(theme_dir)
    if entries is None:
        return None
    # <theme>/<size>/<joiner>/<icon>
    found = _closest_in(entries, icon_size, theme_dir, joiner, icon_name)
    if found:
        return found

    directory = os.path.join(theme_dir, joiner)
    entries = _list_dir(directory)
    if entries is None:
        return None
    # <theme>/<joiner>/<size>/<icon>
    return _closest_in(entries, icon_size, directory, "", icon_name)


def _inherited_themes(index_path: str) -> List[str]:
    try:
        with open(index_path, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                line = line.rstrip("\r\n")
                if line.startswith("Inherits="):
                    return _value_after_equals(line).split(",")
    except OSError:
        pass
    return []


def _lookup_icon_path_in_theme(icon_size: str, theme_dir: str, parent_dir: str,
                               icon_name: str,
                               seen: FrozenSet[str] = frozenset()) -> Optional[str]:
    if not os.path.exists(theme_dir):
        return None
    seen = seen | {theme_dir}

    for ext in ICON_EXTENSIONS:
        file_name = icon_name + ext
        found = _first_existing((
            os.path.join(theme_dir, icon_size, "apps", file_name),
            os.path.join(theme_dir, f"{icon_size}x{icon_size}", "apps", file_name),
            os.path.join(theme_dir, "apps", icon_size, file_name),
            os.path.join(theme_dir, "apps", f"{icon_size}x{icon_size}", file_name),
        ))
        if found:
            return found

    size_value = _atoi(icon_size)
    if size_value is None:
        size_value = 32
    for joiner in SUB_ICON_DIRS:
        found = _lookup_any_size_in_theme_dir(theme_dir, joiner, icon_name, size_value)
        if found:
            return found

    index_path = os.path.join(theme_dir, "index.theme")
    if os.path.exists(index_path):
        for theme in _inherited_themes(index_path):
            theme_dir = os.path.join(parent_dir, "icons", theme)
            if theme_dir in seen:
                continue
            found = _lookup_icon_path_in_theme(icon_size, theme_dir, parent_dir,
                                               icon_name, seen)
            if found:
                return found

    for ext in ICON_EXTENSIONS:
        file_name = icon_name + ext
        found = _first_existing((
            os.path.join(theme_dir, "scalable", "apps", file_name),
            os.path.join(theme_dir, "apps", "scalable", file_name),
        ))
        if found:
            return found
    return None


def lookup_icon_path(theme: str, size: int, icon_name: str) -> Optional[str]:
    """Find the image file for an icon name, falling back to hicolor and pixmaps."""
    data_dirs = xdg_data_dirs()
    icon_size = str(size)
    for theme_name in (theme, "hicolor"):
        for data_dir in data_dirs:
            theme_dir = os.path.join(data_dir, "icons", theme_name)
            found = _lookup_icon_path_in_theme(icon_size, theme_dir, data_dir, icon_name)
            if found:
                return found
    for data_dir in data_dirs:
        found = _first_existing(os.path.join(data_dir, "pixmaps", icon_name + ext)
                                for ext in ICON_EXTENSIONS)
        if found:
            return found
    return None


def available_themes() -> List[str]:
    """Return the names of icon theme directories in every data directory."""
    themes: List[str] = []
    for data_dir in xdg_data_dirs():
        icons_dir = os.path.join(data_dir, "icons")
        entries = _list_dir(icons_dir)
        if entries is None:
            continue
        themes.extend(entry for entry in entries
                      if not entry.startswith(".")
                      and os.path.isdir(os.path.join(icons_dir, entry)))
    return themes


class FdoIconProvider(ApplicationProvider):
    """Application provider backed by desktop files and icon themes."""

    def available_apps(self) -> List[AppData]:
        return list(lookup_applications())

    def available_themes(self) -> List[str]:
        return available_themes()

    def find_app_from_name(self, app_name: str) -> Optional[AppData]:
        return lookup_application(app_name)

    def find_apps_matching(self, pattern: str) -> List[AppData]:
        return list(lookup_applications_matching(pattern))

    def find_app_from_win_info(self, win: Window) -> Optional[AppData]:
        props = win.properties
        app = lookup_application(props.command)
        if app is not None:
            return app
        for window_class in props.window_class:
            app = lookup_application(window_class)
            if app is not None:
                return app
        return lookup_application(props.icon_name)

    def default_apps(self) -> List[AppData]:
        candidates = [
            find_one_app_from_names(self, "xfce4-terminal", "gnome-terminal",
                                    "org.kde.konsole", "xterm"),
            find_one_app_from_names(self, "chromium", "google-chrome", "firefox"),
            find_one_app_from_names(self, "sylpheed", "thunderbird", "evolution"),
            self.find_app_from_name("gimp"),
        ]
        return [app for app in candidates if app is not None]