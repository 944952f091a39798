"""An application picker that filters installed apps as the user types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from deskshell.apps import BROKEN_IMAGE, AppData, ApplicationProvider, Resource

PICKER_ICON_SIZE = 32


@dataclass
class LaunchItem:
    """One selectable entry in the picker."""

    title: str
    icon: Optional[Resource]
    action: Callable[[], None]
    highlighted: bool = False

    def activate(self) -> None:
        self.action()


@dataclass
class AppPicker:
    """Lists applications and module suggestions that match the typed text.

    ``modules`` may hold objects with a ``launch_suggestions(text)`` method whose
    results carry ``title``, ``icon`` and a ``launch()`` method.
    """

    title: str
    callback: Callable[[AppData], None]
    provider: ApplicationProvider
    icon_theme: str = ""
    modules: Sequence[Any] = ()
    on_closed: Optional[Callable[[], None]] = None
    text: str = ""
    items: List[LaunchItem] = field(default_factory=list)
    active_index: int = 0
    closed: bool = False

    def _changed(self) -> None:
        self.items = []
        if self.text:
            self.update_matching(self.text)

    def type_text(self, text: str) -> None:
        """Type characters into the entry, refreshing the list after each one."""
        for char in text:
            self.text += char
            self._changed()

    def update_matching(self, text: str) -> None:
        self.active_index = 0
        self.items = self.items_matching(text)

    def _app_item(self, app: AppData) -> LaunchItem:
        def launch() -> None:
            self.callback(app)
            self.close()

        icon = app.icon(self.icon_theme, PICKER_ICON_SIZE)
        return LaunchItem(app.name, icon if icon is not None else BROKEN_IMAGE, launch)

    def _suggestion_items(self, text: str) -> List[LaunchItem]:
        items: List[LaunchItem] = []
        for module in self.modules:
            suggest = getattr(module, "launch_suggestions", None)
            if suggest is None:
                continue
            for suggestion in suggest(text):
                def launch(chosen: Any = suggestion) -> None:
                    self.close()
                    chosen.launch()

                items.append(LaunchItem(suggestion.title, suggestion.icon, launch))
        return items

    def items_matching(self, text: str) -> List[LaunchItem]:
        """Build the entries for apps and suggestions matching ``text``."""
        items = [self._app_item(app) for app in self.provider.find_apps_matching(text)]
        items.extend(self._suggestion_items(text))
        if items:
            items[0].highlighted = True
        return items

    def set_active_index(self, index: int) -> None:
        if not 0 <= index < len(self.items):
            return
        self.items[self.active_index].highlighted = False
        self.items[index].highlighted = True
        self.active_index = index

    def pick_selected(self) -> None:
        if not self.items:
            return
        self.items[self.active_index].activate()

    def key(self, name: str) -> None:
        """Handle a named key press such as ``Escape``, ``Return``, ``Up`` or ``Down``."""
        if name == "Escape":
            self.close()
        elif name == "Return":
            self.pick_selected()
        elif name == "Up":
            self.set_active_index(self.active_index - 1)
        elif name == "Down":
            self.set_active_index(self.active_index + 1)
        elif name == "BackSpace" and self.text:
            self.text = self.text[:-1]
            self._changed()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.on_closed is not None:
            self.on_closed()