"""Command-line option parsing for the pager."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

VERSION_TEXT = "mp 0.0.1"

_USAGE = """\
Usage: mp [OPTION]... [FILE]
       mp [OPTION]... -- [COMMAND]
Display the output of a file or command in the terminal.
Update the output on events selected by options.

Options:
  -0, --never      never update
  -t, --time=n     update every n seconds
  -f, --file=f     update when file f changes (default when file specified)
  -d, --dir=d      update when any file in dir d changes
  -s, --size       update when the terminal size changes

  -e, --errexit    exit if command has a non-zero exit
  --diff           highlight changes between updates

  -h, --help       display this help message
  --version        display the program version
"""


def usage_text() -> str:
    """Return the help text shown by --help and after usage errors."""
    return _USAGE


class UsageError(Exception):
    """Raised when parsing stops: on bad arguments, --help or --version.

    ``code`` is the exit status the command should use; ``show_usage``
    tells whether the usage text should follow the message.
    """

    def __init__(self, message: str, code: int = 1, show_usage: bool = True):
        super().__init__(message)
        self.message = message
        self.code = code
        self.show_usage = show_usage


@dataclass
class Options:
    """What to display and when to refresh it."""

    time: float | None = None
    files: list[Path] = field(default_factory=list)
    size: bool = False
    errexit: bool = False
    diff: bool = False
    never: bool = False
    file: Path | None = None
    cmd: str | None = None


def _parse_float(text: str | None) -> float:
    # Stricter than float(): no surrounding whitespace, no digit separators.
    if text is None or text != text.strip() or "_" in text or not text:
        raise UsageError("numeric value expected for time argument")
    try:
        return float(text)
    except ValueError:
        raise UsageError("numeric value expected for time argument") from None


def _set_time(opts: Options, text: str | None) -> None:
    if opts.time is not None:
        raise UsageError("time option specified multiple times")
    opts.time = _parse_float(text)


def _require_arg(value: str | None, option: str) -> Path:
    if value is None:
        raise UsageError(f"argument expected for {option} option")
    return Path(value)


def parse_opts(argv: list[str] | None = None) -> Options:
    """Parse command-line arguments (without the program name)."""
    if argv is None:
        argv = sys.argv[1:]
    opts = Options()
    args = iter(argv)

    for arg in args:
        match arg:
            case "-h" | "--help":
                raise UsageError("", code=0)
            case "--version":
                raise UsageError(VERSION_TEXT, code=0, show_usage=False)
            case "-0" | "--never":
                opts.never = True
                continue
            case "-t" | "--time":
                _set_time(opts, next(args, None))
                continue
            case "-f" | "--file":
                opts.files.append(_require_arg(next(args, None), "file"))
                continue
            case "-d" | "--dir":
                opts.files.append(_require_arg(next(args, None), "dir"))
                continue
            case "-s" | "--size":
                opts.size = True
                continue
            case "-e" | "--errexit":
                opts.errexit = True
                continue
            case "--diff":
                opts.diff = True
                continue
            case "--":
                opts.cmd = " ".join(args)
                break
            case _ if not arg.startswith("-"):
                opts.file = Path(arg)
                break

        key, sep, value = arg.partition("=")
        if sep:
            if key == "--time":
                _set_time(opts, value)
            elif key in ("--file", "--dir"):
                opts.files.append(Path(value))
            else:
                raise UsageError(f"unrecognized option: {arg}")
            continue

        # allows the compact form -t2
        if arg.startswith("-t"):
            _set_time(opts, arg[2:])

    if opts.cmd is None and opts.file is None:
        raise UsageError("must specify a file or a command")

    if opts.never and (opts.files or opts.size or opts.time is not None):
        raise UsageError("cannot specify never with other update options")

    if opts.file is not None and not opts.never:
        opts.files.append(opts.file)

    for path in ([opts.file] if opts.file is not None else []) + opts.files:
        if not path.exists():
            raise UsageError(f"file '{path}' does not exist")

    return opts