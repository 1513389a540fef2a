"""Command entry point: run the pager and refresh it on timers and file changes."""

from __future__ import annotations

import os
import sys
import threading
from pathlib import Path
from typing import Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .opts import Options, UsageError, parse_opts, usage_text
from .ui import State


def build_command(opts: Options) -> list[str]:
    """Return the shell command whose output the pager shows."""
    if opts.file is not None:
        script = f"cat {opts.file}"
    else:
        script = opts.cmd or ""
    return ["sh", "-c", script]


def _refresh(state, lock: threading.Lock) -> None:
    with lock:
        state.update()
        state.draw()


def timer_loop(state, lock: threading.Lock, interval: float, stop: threading.Event) -> None:
    """Refresh ``state`` every ``interval`` seconds until ``stop`` is set."""
    while not stop.wait(interval):
        _refresh(state, lock)


class _ChangeHandler(FileSystemEventHandler):
    """Refreshes the pager when a watched file, or a file in a watched directory, changes."""

    def __init__(self, files: set[str], dirs: set[str], state, lock: threading.Lock):
        super().__init__()
        self._files = files
        self._dirs = dirs
        self._state = state
        self._lock = lock

    def _watched(self, path: str) -> bool:
        return path in self._files or path in self._dirs or os.path.dirname(path) in self._dirs

    def on_modified(self, event: FileSystemEvent) -> None:
        path = os.path.abspath(os.fsdecode(event.src_path))
        if self._watched(path):
            _refresh(self._state, self._lock)


def watch_files(state, lock: threading.Lock, paths: Iterable[Path | str]):
    """Start watching ``paths`` for modifications and return the running observer."""
    files: set[str] = set()
    dirs: set[str] = set()
    for path in paths:
        absolute = os.path.abspath(os.fspath(path))
        (dirs if os.path.isdir(absolute) else files).add(absolute)

    handler = _ChangeHandler(files, dirs, state, lock)
    observer = Observer()
    observer.daemon = True
    for directory in sorted(dirs | {os.path.dirname(f) for f in files}):
        observer.schedule(handler, directory, recursive=False)
    observer.start()
    return observer


def _report_usage(error: UsageError) -> int:
    if error.show_usage:
        if error.message:
            print(error.message + "\n", file=sys.stderr)
        print(usage_text(), file=sys.stderr, end="")
    elif error.message:
        print(error.message, file=sys.stderr)
    return error.code


def main(argv: list[str] | None = None) -> int:
    """Run the pager; returns the exit status for argument errors."""
    try:
        opts = parse_opts(argv)
    except UsageError as error:
        return _report_usage(error)

    lock = threading.Lock()
    state = State(build_command(opts), opts)
    with lock:
        state.start()

    stop = threading.Event()
    observer = None
    try:
        if opts.time is not None:
            threading.Thread(
                target=timer_loop,
                args=(state, lock, opts.time, stop),
                name="timer",
                daemon=True,
            ).start()

        if opts.files:
            observer = watch_files(state, lock, opts.files)

        stdin = getattr(sys.stdin, "buffer", sys.stdin)
        while True:
            data = stdin.read(1)
            if not data:
                break
            key = chr(data[0]) if isinstance(data, bytes) else data
            with lock:
                state.event(key)
                state.draw()

        with lock:
            state.exit()
    finally:
        stop.set()
        if observer is not None:
            observer.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())