# deskshell

The non-graphical core of a small desktop shell. It finds applications and their
icons, holds the desktop's settings, computes the launcher bar's zooming layout,
models an application picker and a window switcher, and supervises a session
command so that it is restarted after a crash.

## Modules

- `deskshell.apps`: the shared abstractions. `AppData` and `ApplicationProvider`
  are abstract base classes. `Resource` is a name plus bytes. `Window` and
  `WindowProperties` are in-memory windows with their state. The module also has
  `find_one_app_from_names`, and `set_instance` / `instance` to register and look
  up the running desktop.
- `deskshell.fdo`: FreeDesktop application discovery.
  - Reads the `[Desktop Entry]` section of `.desktop` files (`parse_desktop_file`)
    from the `applications` folder of every directory in `XDG_DATA_DIRS`. When that
    variable is unset, it uses `~/.local/share`, `/usr/local/share` and `/usr/share`.
  - `lookup_icon_path` looks for an icon in this order, and returns the first
    match:
    1. the requested theme in every data directory, including the themes that
       theme's `index.theme` inherits;
    2. `hicolor`;
    3. the `pixmaps` folders.
  - `load_icon` turns XPM files into PNG.
  - `FdoIconProvider` puts all of this behind the `ApplicationProvider` interface.
  - `FdoApplication.run` strips field codes such as `%U` (`extract_args`) and
    starts the command with the extra environment entries.
- `deskshell.macos`: `.app` bundles. `MacOSAppProvider` scans `/Applications`,
  `/Applications/Utilities`, `/System/Applications` and
  `/System/Applications/Utilities`. `load_app_bundle` reads `Info.plist`.
  `MacOSAppBundle.icon` converts the `.icns` icon to PNG with Pillow, and
  `MacOSAppBundle.run` uses `open -a`.
- `deskshell.xpm`: `parse_xpm` decodes XPM text into an RGBA Pillow image, and
  `xpm_to_png` re-encodes it as PNG. Only `#rrggbb` colours and `None` are
  understood; any other colour name becomes transparent.
- `deskshell.settings`: the settings themselves.
  - `DeskSettings` holds the launcher icons, icon size and zoom scale, the
    taskbar and zoom switches, the icon theme, the background, the keyboard
    `Modifier`, the module names, the border button position and the clock
    format.
  - `update(**kwargs)` writes the changes to a `Preferences` store (optionally a
    JSON file) and calls the registered listeners.
  - `load_settings` builds settings from the `FYNEDESK_BACKGROUND` and
    `FYNEDESK_ICONTHEME` environment variables, the stored preferences and the
    defaults.
  - `is_module_enabled` checks whether a module is enabled.
- `deskshell.embedded`: `Screen`, `EmbeddedScreens` (a fixed screen list whose
  first screen is primary) and `EmbeddedWindowManager` (a simple window stack).
- `deskshell.bar`: `Bar` holds launcher icons, a `Separator` and taskbar icons for
  open windows. `BarLayout` positions them in a centred row and zooms the icons
  near the pointer.
- `deskshell.launcher`: `AppPicker` lists apps (and module suggestions) matching
  the typed text. It handles the `Up`, `Down`, `Return`, `Escape` and `BackSpace`
  keys through `key()`.
- `deskshell.switcher`: `show_app_switcher` selects the second window, and
  `show_app_switcher_reverse` selects the last one. `Switcher` has `next`,
  `previous`, `hide_apply` (raises the selected window) and `hide_cancel`.
- `deskshell.desk`: `Desktop` ties the settings, screens, window manager, bar and
  modules together.
  - It lays out the background, the bar and the 200-pixel widget panel.
  - It registers the launcher and screenshot shortcuts.
  - It re-applies the settings when they change.
  - It starts applications with toolkit scale variables from `scale_vars`.

## Installation

```
pip install deskshell
```

For development, with the test dependencies:

```
pip install -e ".[test]"
pytest
```

## Finding applications

```python
from deskshell.fdo import FdoIconProvider

provider = FdoIconProvider()
for app in provider.find_apps_matching("term"):
    print(app.name)

terminal = provider.find_app_from_name("xterm")
if terminal is not None:
    icon = terminal.icon("hicolor", 32)   # Resource with the file's bytes, or BROKEN_IMAGE
    terminal.run([])                      # start the application
```

## Running a session

`deskshell-runner` runs a session command and starts it again each time it exits
with an error. By default the command is `fynedesk`. Pass a different command and
its arguments to supervise something else:

```
deskshell-runner
deskshell-runner my-session --flag
```

The command's output goes to `fyne/io.fyne.fynedesk/fynedesk.log` below the user's
log directory:

- `~/.cache` on Linux and BSD;
- `~/Library/Logs` on macOS;
- `~/AppData/Local` on Windows.

Before each restart, the previous log is renamed to a timestamped
`fynedesk-crash-<time>.log`. The runner stops in these cases:

- the command exits with status 0;
- the command exits with status 512;
- the command cannot be executed.

## What this package does not do

- It draws nothing and opens no windows. `Bar`, `Desktop` and the picker and
  switcher only compute state and geometry.
- It contains no window manager for a display server. `EmbeddedWindowManager`
  keeps a list of windows in memory, and its `capture` returns only an image
  that was supplied to it.
- It does not ship the `fynedesk` session command that `deskshell-runner` starts
  by default. That command must be installed separately, or another command
  named on the command line.