[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "deskshell"
version = "0.2.0"
description = "Desktop shell core: application discovery, icon lookup, XPM decoding, settings, launcher bar layout, app picker, window switcher and a restarting session runner"
requires-python = ">=3.10"
keywords = [
    "desktop",
    "freedesktop",
    "desktop-entry",
    "icon-theme",
    "xpm",
    "launcher",
    "taskbar",
    "window-switcher",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
deskshell-runner = "deskshell.runner:main"

[tool.hatch.build.targets.wheel]
packages = ["deskshell"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
