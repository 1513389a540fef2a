import io
import sys
import threading
import time
from pathlib import Path

import pytest

from magicpager.main import build_command, main, timer_loop, watch_files
from magicpager.opts import Options


class _CountingState:
    def __init__(self):
        self.updates = 0
        self.draws = 0
        self.changed = threading.Event()

    def update(self):
        self.updates += 1
        self.changed.set()

    def draw(self):
        self.draws += 1


class _StoppingState(_CountingState):
    """Counts refreshes and sets the stop event after a fixed number of them."""

    def __init__(self, stop: threading.Event, limit: int):
        super().__init__()
        self._stop = stop
        self._limit = limit

    def update(self):
        super().update()
        if self.updates >= self._limit:
            self._stop.set()


def _fake_stdin(data: bytes):
    return io.TextIOWrapper(io.BytesIO(data))


def test_build_command_for_file():
    opts = Options(file=Path("notes.txt"))
    assert build_command(opts) == ["sh", "-c", "cat notes.txt"]


def test_build_command_for_command():
    opts = Options(cmd="ls -l")
    assert build_command(opts) == ["sh", "-c", "ls -l"]


def test_build_command_prefers_file_over_command():
    opts = Options(file=Path("a"), cmd="echo b")
    assert build_command(opts)[2] == "cat a"


def test_main_help_returns_zero(capsys):
    assert main(["--help"]) == 0
    assert "Usage: mp [OPTION]... [FILE]" in capsys.readouterr().err


def test_main_version(capsys):
    assert main(["--version"]) == 0
    err = capsys.readouterr().err
    assert "mp 0.0.1" in err
    assert "Usage:" not in err


def test_main_without_target_fails(capsys):
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "must specify a file or a command" in err
    assert "Usage:" in err


def test_main_missing_file_fails(tmp_path, capsys):
    missing = tmp_path / "absent"
    assert main([str(missing)]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_timer_loop_refreshes_until_stopped():
    stop = threading.Event()
    state = _StoppingState(stop, limit=2)
    lock = threading.Lock()
    started = time.monotonic()
    timer_loop(state, lock, 0.01, stop)
    assert time.monotonic() - started < 5
    assert stop.is_set()
    assert state.updates == 2
    assert state.draws == state.updates


def test_timer_loop_returns_immediately_when_stopped():
    state = _CountingState()
    stop = threading.Event()
    stop.set()
    timer_loop(state, threading.Lock(), 10.0, stop)
    assert state.updates == 0


def test_watch_files_refreshes_on_modification(tmp_path):
    target = tmp_path / "watched.txt"
    target.write_text("one\n")
    state = _CountingState()
    observer = watch_files(state, threading.Lock(), [target])
    try:
        time.sleep(0.2)
        with target.open("a") as handle:
            handle.write("two\n")
        assert state.changed.wait(5)
    finally:
        observer.stop()
        observer.join(5)
    assert state.draws >= 1


def test_watch_files_ignores_other_files(tmp_path):
    target = tmp_path / "watched.txt"
    other = tmp_path / "other.txt"
    target.write_text("one\n")
    other.write_text("x\n")
    state = _CountingState()
    observer = watch_files(state, threading.Lock(), [target])
    try:
        time.sleep(0.2)
        with other.open("a") as handle:
            handle.write("y\n")
        assert not state.changed.wait(0.5)
    finally:
        observer.stop()
        observer.join(5)
    assert state.updates == 0


def test_main_shows_command_output_and_quits(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", _fake_stdin(b"jq"))
    with pytest.raises(SystemExit) as excinfo:
        main(["-0", "--", "echo", "hello"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "hello" in out
    assert "echo hello" in out


def test_main_exits_at_end_of_input(monkeypatch, tmp_path, capsys):
    document = tmp_path / "doc.txt"
    document.write_text("first line\nsecond line\n")
    monkeypatch.setattr(sys, "stdin", _fake_stdin(b""))
    with pytest.raises(SystemExit) as excinfo:
        main(["-0", str(document)])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "first line" in out
    assert "second line" in out
    assert str(document) in out