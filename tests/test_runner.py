import os
import sys
from datetime import datetime

import pytest

from deskshell import runner

RESTART_SCRIPT = """
import os, sys
marker = sys.argv[1]
if os.path.exists(marker):
    print("second run")
    sys.exit(0)
open(marker, "w").close()
print("first run")
sys.exit(3)
"""

ENV_SCRIPT = """
import os
print("runner=" + os.environ.get("FYNE_DESK_RUNNER", ""))
"""


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    return tmp_path


def test_log_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = runner.log_path_relative_to(os.path.join("testdata", "cache"))
    assert path == os.path.join("testdata", "cache", "fyne", "io.fyne.fynedesk", "fynedesk.log")
    assert os.path.isdir(os.path.dirname(path))


def test_crash_log_path(tmp_path):
    path = runner.crash_log_path_relative_to(str(tmp_path))
    prefix = os.path.join(str(tmp_path), "fyne", "io.fyne.fynedesk", "fynedesk-crash-")
    assert path.startswith(prefix)
    assert path.endswith(".log")
    stamp = path[len(prefix):-len(".log")]
    parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
    assert parsed.tzinfo is not None


@pytest.mark.parametrize(
    "platform, parts",
    [
        ("darwin", ("Library", "Logs")),
        ("win32", ("AppData", "Local")),
        ("linux", (".cache",)),
    ],
)
def test_system_log_dir(home, monkeypatch, platform, parts):
    monkeypatch.setattr(sys, "platform", platform)
    assert runner.system_log_dir() == os.path.join(str(home), *parts)


def test_open_log_writer_creates_log(home):
    with runner.open_log_writer() as handle:
        handle.write("hello")
    with open(runner.log_path(), encoding="utf-8") as handle:
        assert handle.read() == "hello"


def test_main_sets_runner_env(home):
    assert runner.main([sys.executable, "-c", ENV_SCRIPT]) == 0
    with open(runner.log_path(), encoding="utf-8") as handle:
        assert "runner=1" in handle.read()


def test_main_restarts_after_failure(home, tmp_path):
    marker = tmp_path / "marker"
    assert runner.main([sys.executable, "-c", RESTART_SCRIPT, str(marker)]) == 0
    with open(runner.log_path(), encoding="utf-8") as handle:
        assert "second run" in handle.read()
    folder = os.path.dirname(runner.log_path())
    crashes = [name for name in os.listdir(folder) if name.startswith("fynedesk-crash-")]
    assert len(crashes) == 1
    with open(os.path.join(folder, crashes[0]), encoding="utf-8") as handle:
        assert "first run" in handle.read()


def test_main_missing_command(home):
    assert runner.main([str(home / "no-such-command")]) == 1