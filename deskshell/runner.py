"""Supervisor that runs the desktop and restarts it after a crash."""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import IO, List, Optional, Sequence

log = logging.getLogger(__name__)

RUN_COMMAND = "fynedesk"
APP_ID = "io.fyne.fynedesk"
RUNNER_ENV = "FYNE_DESK_RUNNER"
_X_SERVER_GONE = 512


def system_log_dir() -> str:
    """Return the platform's per-user log or cache directory."""
    home = Path.home()
    if sys.platform == "darwin":
        return str(home / "Library" / "Logs")
    if sys.platform.startswith("win"):
        return str(home / "AppData" / "Local")
    return str(home / ".cache")


def log_dir(parent: str) -> str:
    """Return (and create) the desktop's log directory below ``parent``."""
    path = os.path.join(parent, "fyne", APP_ID)
    try:
        os.makedirs(path, mode=0o700, exist_ok=True)
    except OSError as err:
        log.error("Could not create log directory: %s", err)
    return path


def log_path_relative_to(parent: str) -> str:
    return os.path.join(log_dir(parent), "fynedesk.log")


def log_path() -> str:
    return log_path_relative_to(system_log_dir())


def _rfc3339_now() -> str:
    stamp = datetime.now().astimezone().replace(microsecond=0).isoformat()
    if stamp.endswith("+00:00"):
        stamp = stamp[: -len("+00:00")] + "Z"
    return stamp


def crash_log_path_relative_to(parent: str) -> str:
    base = os.path.join(log_dir(parent), "fynedesk")
    return f"{base}-crash-{_rfc3339_now()}.log"


def crash_log_path() -> str:
    return crash_log_path_relative_to(system_log_dir())


def open_log_writer() -> IO[str]:
    """Open a fresh log file for the child's output, falling back to stderr."""
    try:
        return open(log_path(), "w", encoding="utf-8")
    except OSError as err:
        log.error("Unable to open log file: %s", err)
        return sys.stderr


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the desktop until it exits cleanly, restarting it after failures.

    ``argv`` may name the command to supervise; it defaults to the desktop.
    """
    command: List[str] = list(argv) if argv else [RUN_COMMAND]
    with contextlib.suppress(OSError):
        os.remove(log_path())

    while True:
        current = log_path()
        if os.path.exists(current):
            crash_file = crash_log_path()
            try:
                os.rename(current, crash_file)
            except OSError:
                log.error("Could not save crash file %s", crash_file)

        env = {**os.environ, RUNNER_ENV: "1"}
        logger = open_log_writer()
        try:
            status = subprocess.run(command, env=env, stdout=logger, stderr=logger,
                                    check=False).returncode
        except OSError:
            log.error("Could not execute %s command", command[0])
            return 1
        finally:
            if logger is not sys.stderr:
                logger.close()

        if status == 0:
            return 0
        if status == _X_SERVER_GONE:
            log.info("X server went away")
            return 0
        log.info("Restart from status %d", status)


if __name__ == "__main__":
    sys.exit(main())