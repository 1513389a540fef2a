"""Pager state: the output buffer, cursor movement, key handling and drawing."""

from __future__ import annotations

import enum
import os
import shutil
import subprocess
import sys
from functools import partial
from typing import Callable, Sequence, TextIO

import regex

from .opts import Options

_CSI = "\x1b["
ENTER_ALTERNATE_SCREEN = "\x1b[?1049h"
LEAVE_ALTERNATE_SCREEN = "\x1b[?1049l"
_CLEAR_ALL = "\x1b[2J"
_DISABLE_WRAP = "\x1b[?7l"
_ENABLE_WRAP = "\x1b[?7h"
_DARK_GREY = "\x1b[38;5;8m"
_MAGENTA = "\x1b[38;5;5m"
_RESET_COLOR = "\x1b[0m"
_MOVE_DOWN = "\x1b[1B"

_LINES_PER_REDRAW = 1024
_GRAPHEME = regex.compile(r"\X")


def _move_to(col: int, row: int) -> str:
    return f"{_CSI}{max(row, 0) + 1};{max(col, 0) + 1}H"


def _move_to_column(col: int) -> str:
    return f"{_CSI}{max(col, 0) + 1}G"


def _strip_eol(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def _default_terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size()
    return size.columns, size.lines


class _Mode(enum.Enum):
    NORMAL = enum.auto()
    ESC = enum.auto()
    CSI = enum.auto()
    GOTO = enum.auto()


class State:
    """Everything the pager shows, and the keys that move around in it."""

    def __init__(
        self,
        command: Sequence[str],
        opts: Options,
        stream: TextIO | None = None,
        terminal_size: Callable[[], tuple[int, int]] | None = None,
    ):
        self.command = list(command)
        self.opts = opts
        self.stream = stream if stream is not None else sys.stdout
        self._terminal_size = terminal_size or _default_terminal_size
        self.buf: list[str] = []
        self.cursor_x = 0
        self.cursor_y = 0
        self.scroll_x = 0
        self.scroll_y = 0
        self.term_size: tuple[int, int] = (0, 0)
        self._mode = _Mode.NORMAL
        self._digits = ""
        self._saved_tty = None

    # terminal setup

    def start(self) -> None:
        """Take over the terminal, run the command and draw the first screen."""
        self.stream.write(ENTER_ALTERNATE_SCREEN)
        self.stream.flush()
        self._enable_raw_mode()
        self.update()
        self.draw()

    def _enable_raw_mode(self) -> None:
        try:
            import termios
            import tty
        except ImportError:
            return
        try:
            fd = sys.stdin.fileno()
        except (AttributeError, OSError, ValueError):
            return
        if not os.isatty(fd):
            return
        self._saved_tty = (fd, termios.tcgetattr(fd))
        tty.setraw(fd)

    def _restore_tty(self) -> None:
        if self._saved_tty is None:
            return
        import termios

        fd, attrs = self._saved_tty
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        self._saved_tty = None

    def exit(self) -> None:
        """Give the terminal back and end the program."""
        self._restore_tty()
        self.stream.write(_ENABLE_WRAP + LEAVE_ALTERNATE_SCREEN)
        self.stream.flush()
        raise SystemExit(0)

    # content

    @property
    def _num_digits(self) -> int:
        return len(str(len(self.buf)))

    def update(self) -> None:
        """Run the command again and replace the buffer with its output."""
        self.buf.clear()
        with subprocess.Popen(
            self.command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        ) as proc:
            for count, raw in enumerate(proc.stdout, start=1):
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError:
                    break
                self.buf.append(_strip_eol(line))
                if count % _LINES_PER_REDRAW == 0:
                    self.draw()
            proc.stdout.close()

        last = max(len(self.buf) - 1, 0)
        while self.scroll_y + self.cursor_y > last:
            self._up()

    # movement

    def _left(self) -> None:
        if self.cursor_x == 0 and self.scroll_x > 0:
            self.scroll_x -= 1
        else:
            self.cursor_x = max(self.cursor_x - 1, 0)

    def _right(self) -> None:
        cols = self.term_size[0]
        if self.cursor_x == cols - self._num_digits - 3:
            self.scroll_x += 1
        else:
            self.cursor_x = min(self.cursor_x + 1, max(cols - 1, 0))

    def _up(self) -> None:
        vscroll = self.term_size[1] // 5
        if self.cursor_y <= vscroll and self.scroll_y > 0:
            self.scroll_y -= 1
        else:
            self.cursor_y = max(self.cursor_y - 1, 0)

    def _down(self) -> None:
        rows = self.term_size[1]
        vscroll = rows // 5
        if self.cursor_y >= vscroll * 4 and self.scroll_y + (rows - 1) < len(self.buf):
            self.scroll_y += 1
        else:
            self.cursor_y = min(self.cursor_y + 1, max(rows - 2, 0))

    def _position(self) -> tuple[int, int, int, int]:
        return self.cursor_x, self.cursor_y, self.scroll_x, self.scroll_y

    def _step_while(self, condition: Callable[[], bool], step: Callable[[], None]) -> None:
        while condition():
            before = self._position()
            step()
            if self._position() == before:
                break

    @staticmethod
    def _repeat(step: Callable[[], None], times: int) -> None:
        for _ in range(times):
            step()

    def _jump(self, row: int, col: int) -> None:
        row = min(row, max(len(self.buf) - 1, 0))
        self._step_while(lambda: self.scroll_y + self.cursor_y < row, self._down)
        self._step_while(lambda: self.scroll_y + self.cursor_y > row, self._up)
        self._step_while(lambda: self.scroll_x + self.cursor_x < col, self._right)
        self._step_while(lambda: self.scroll_x + self.cursor_x > col, self._left)

    # input

    def mode_label(self) -> str:
        """The four-column mode indicator shown in the bottom bar."""
        if self._mode is _Mode.ESC:
            return "ESC "
        if self._mode is _Mode.CSI:
            return f"CSI {self._digits}"
        if self._mode is _Mode.GOTO:
            return f"g{self._digits:<3}"
        return "    "

    def _enter(self, mode: _Mode) -> None:
        self._mode = mode
        self._digits = ""

    def _count(self) -> int:
        return int(self._digits) if self._digits else 1

    def _line_at_cursor(self, row: int) -> str:
        return self.buf[row] if 0 <= row < len(self.buf) else ""

    def _interpret(self, c: str) -> Callable[[], None] | None:
        """Return the action for key ``c``, or None to keep waiting."""
        is_digit = c in "0123456789" and len(c) == 1

        if self._mode is _Mode.NORMAL:
            moves = {"j": self._down, "k": self._up, "h": self._left, "l": self._right}
            if c in ("q", "\x03"):
                return self.exit
            if c in moves:
                return partial(self._repeat, moves[c], 1)
            if c == "\x1b":
                self._enter(_Mode.ESC)
            elif c == "g":
                self._enter(_Mode.GOTO)
            return None

        if self._mode is _Mode.ESC:
            self._enter(_Mode.CSI if c == "[" else _Mode.NORMAL)
            return None

        if self._mode is _Mode.CSI:
            moves = {"a": self._up, "b": self._down, "c": self._right, "d": self._left}
            if is_digit:
                self._digits += c
                return None
            if c in moves:
                return partial(self._repeat, moves[c], self._count())
            if c == "~":
                page = self.term_size[1] - 1
                if self._digits == "5":
                    return partial(self._repeat, self._up, page)
                if self._digits == "6":
                    return partial(self._repeat, self._down, page)
                return None
            self._enter(_Mode.NORMAL)
            return None

        # goto mode
        row = self.cursor_y + self.scroll_y
        if is_digit:
            self._digits += c
            return None
        if c == "g":
            target = int(self._digits) if self._digits else 0
            return partial(self._jump, max(target - 1, 0), 0)
        if c == "e":
            return partial(self._jump, len(self.buf), 0)
        if c == "h":
            return partial(self._jump, row, 0)
        if c == "l":
            return partial(self._jump, row, len(self._line_at_cursor(row).encode("utf-8")))
        if c == "s":
            row = min(row, max(len(self.buf) - 1, 0))
            line = self._line_at_cursor(row)
            first = next((i for i, ch in enumerate(line) if not ch.isspace()), 0)
            return partial(self._jump, row, first)
        self._enter(_Mode.NORMAL)
        return None

    def event(self, c: str) -> None:
        """Handle one input character."""
        action = self._interpret(c)
        if action is not None:
            action()
            self._enter(_Mode.NORMAL)

    # output

    def draw(self) -> None:
        """Redraw the whole screen from the current state."""
        cols, rows = self.term_size = tuple(self._terminal_size())
        digits = self._num_digits
        start = self.scroll_y
        end = min(start + rows - 1, len(self.buf))
        width = max(cols - digits - 2, 0)

        out = [_CLEAR_ALL, _DISABLE_WRAP, _move_to(0, 0)]
        for number, line in enumerate(self.buf[start:end], start=start + 1):
            if number > start + 1:
                out.append(_MOVE_DOWN)
            out.append(_move_to_column(0))
            out.append(f"{_DARK_GREY}{number:>{digits}}│ {_RESET_COLOR}")
            graphemes = _GRAPHEME.findall(line)
            out.append("".join(graphemes[self.scroll_x : self.scroll_x + width]))

        name = str(self.opts.file) if self.opts.file is not None else self.command[-1]
        out.append(_move_to(0, rows - 1))
        out.append(f"{_MAGENTA}{self.mode_label()} {name}")

        position = f"{self.cursor_y + self.scroll_y + 1}:{self.cursor_x + self.scroll_x + 1}"
        out.append(_move_to_column(cols - len(position)))
        out.append(position)
        out.append(_move_to(digits + 2 + self.cursor_x, self.cursor_y))

        self.stream.write("".join(out))
        self.stream.flush()