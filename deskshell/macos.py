"""Discovery of macOS application bundles and their icons."""

from __future__ import annotations

import io
import logging
import os
import plistlib
import subprocess
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from PIL import Image

from deskshell.apps import (
    BROKEN_IMAGE,
    AppData,
    ApplicationProvider,
    Resource,
    Window,
    find_one_app_from_names,
)

log = logging.getLogger(__name__)

DEFAULT_ROOT_DIRS = (
    "/Applications",
    "/Applications/Utilities",
    "/System/Applications",
    "/System/Applications/Utilities",
)


@dataclass
class MacOSAppBundle(AppData):
    """An application bundle described by its ``Info.plist``."""

    display_name: str
    executable: str = ""
    run_path: str = ""
    icon_file: str = ""
    icon_path: str = ""

    @property
    def name(self) -> str:
        return self.display_name

    def icon(self, theme: str, size: int) -> Optional[Resource]:
        """Decode the bundle's ICNS icon into PNG; theme and size are unused."""
        try:
            with Image.open(self.icon_path) as img:
                buffer = io.BytesIO()
                img.save(buffer, format="PNG")
        except (OSError, ValueError) as err:
            log.error("Failed to load icon data for %s: %s", self.icon_path, err)
            return BROKEN_IMAGE
        icon_name = os.path.basename(self.icon_path).replace(".icns", ".png", 1)
        return Resource(icon_name, buffer.getvalue())

    def run(self, env: Sequence[str] = ()) -> None:
        """Open the bundle; desktop environment variables are not applied here."""
        subprocess.Popen(["open", "-a", self.run_path])


def load_app_bundle(name: str, path: str) -> MacOSAppBundle:
    """Read the bundle at ``path``; raises OSError or ValueError if unreadable."""
    with open(os.path.join(path, "Contents", "Info.plist"), "rb") as handle:
        info = plistlib.load(handle)
    if not isinstance(info, dict):
        raise ValueError(f"application plist in {path} is not a dictionary")

    executable = str(info.get("CFBundleExecutable", ""))
    icon_file = str(info.get("CFBundleIconFile", ""))
    icon_path = os.path.join(path, "Contents", "Resources", icon_file)
    if ".icns" not in icon_path:
        icon_path += ".icns"
    return MacOSAppBundle(
        display_name=str(info.get("CFBundleDisplayName", name)),
        executable=executable,
        run_path=os.path.join(path, "Contents", "MacOS", executable),
        icon_file=icon_file,
        icon_path=icon_path,
    )


def _try_load(name: str, path: str) -> Optional[MacOSAppBundle]:
    try:
        return load_app_bundle(name, path)
    except (OSError, ValueError) as err:
        log.error("Unable to read application bundle %s: %s", path, err)
        return None


@dataclass
class MacOSAppProvider(ApplicationProvider):
    """Finds applications installed as ``.app`` bundles."""

    root_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_ROOT_DIRS))

    def _applications(self) -> Iterator[Tuple[str, str]]:
        for root in self.root_dirs:
            try:
                entries = sorted(os.listdir(root))
            except OSError as err:
                log.error("Could not read applications directory %s: %s", root, err)
                return
            for entry in entries:
                app_dir = os.path.join(root, entry)
                if not entry.endswith(".app") or not os.path.isdir(app_dir):
                    continue
                yield entry[: -len(".app")], app_dir

    def available_apps(self) -> List[AppData]:
        loaded = (_try_load(name, path) for name, path in self._applications())
        return [app for app in loaded if app is not None]

    def available_themes(self) -> List[str]:
        return []

    def find_app_from_name(self, app_name: str) -> Optional[AppData]:
        for name, path in self._applications():
            if name == app_name:
                app = _try_load(name, path)
                if app is not None:
                    return app
        return None

    def find_apps_matching(self, pattern: str) -> List[AppData]:
        needle = pattern.lower()
        matches: List[AppData] = []
        for name, path in self._applications():
            if needle not in name.lower():
                continue
            app = _try_load(name, path)
            if app is not None:
                matches.append(app)
        return matches

    def find_app_from_win_info(self, win: Window) -> Optional[AppData]:
        return self.find_app_from_name(win.properties.title)

    def default_apps(self) -> List[AppData]:
        candidates = [
            find_one_app_from_names(self, "Terminal", "iTerm"),
            find_one_app_from_names(self, "Google Chrome", "Firefox", "Safari"),
            find_one_app_from_names(self, "Spark", "AirMail", "Mail"),
            self.find_app_from_name("Photos"),
            self.find_app_from_name("System Preferences"),
        ]
        return [app for app in candidates if app is not None]