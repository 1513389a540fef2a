# magicpager

`mp` shows a file, or the output of a shell command, in a scrollable
full-screen view with line numbers. It can refresh that view on a timer
or whenever watched files or directories change. It works like a pager
and `watch` in one tool.

## Installation

```
pip install magicpager
```

The command needs a POSIX system: it runs commands through `sh -c` and
switches the terminal into raw mode.

## Usage

```
mp [OPTION]... [FILE]
mp [OPTION]... -- [COMMAND]
```

When you give a file, `mp` shows it with `cat`, watches it by default,
and reloads it whenever it changes:

```
mp notes.txt
```

To rerun a command every two seconds:

```
mp -t2 -- ls -l
```

To rerun a build whenever a source file changes:

```
mp -f main.c -- make
```

Everything after `--` is joined with spaces and run by `sh -c`. Only the
command's standard output is shown; its standard error is discarded.
Output is read as UTF-8 and stops at the first line that is not valid
UTF-8.

### Options

| Option            | Meaning                                              |
|-------------------|------------------------------------------------------|
| `-0`, `--never`   | never update                                         |
| `-t`, `--time=n`  | update every *n* seconds (`-t n` and `-t2` also work) |
| `-f`, `--file=f`  | update when file *f* changes                         |
| `-d`, `--dir=d`   | update when any file in directory *d* changes        |
| `-h`, `--help`    | show help                                            |
| `--version`       | show the program version                             |

`-f` and `-d` may be given more than once. `--never` cannot be combined
with `-t`, `-f`, `-d` or `-s`, and `--time` may be given only once. Every
file and directory named must exist. Bad arguments print a message and
the help text, and exit with status 1.

### Keys

| Key                         | Action                                        |
|-----------------------------|-----------------------------------------------|
| `q`, `Ctrl-C`               | quit                                          |
| `h` `j` `k` `l`             | move left / down / up / right                 |
| `ESC [` *n* `a`/`b`/`c`/`d` | move up / down / right / left *n* times (default 1) |
| PageUp / PageDown           | move by one screen                            |
| `gg`, *n*`gg`               | go to the first line, or to line *n*          |
| `ge`                        | go to the last line                           |
| `gh`                        | go to the start of the current line           |
| `gl`                        | go to the end of the current line             |
| `gs`                        | go to the first non-blank character           |

The bar at the bottom shows the pending key mode, the file or command
being shown, and the cursor position as `line:column`.

## What it does not do

The options `-s`/`--size`, `-e`/`--errexit` and `--diff` are accepted
and recorded, but nothing acts on them yet: the view is not refreshed
when the terminal is resized, a failing command does not end the
program, and changes between updates are not highlighted. The arrow-key
moves listen for lowercase final letters, so the sequences most
terminals send for the arrow keys are not recognised.

## Library use

- `magicpager.opts.parse_opts(argv)` turns a list of arguments (without
  the program name) into an `Options` value. It raises `UsageError`,
  which carries `message`, `code` and `show_usage`, for bad input as
  well as for `--help` and `--version`. `usage_text()` returns the help
  text.
- `magicpager.ui.State(command, opts, stream=None, terminal_size=None)`
  holds the output buffer and the cursor. `update()` reruns the command,
  `event(c)` handles one key, `draw()` writes the screen to `stream`,
  `mode_label()` gives the mode shown in the bottom bar, `start()` takes
  over the terminal, and `exit()` gives it back and raises `SystemExit`.
- `magicpager.main` holds `build_command(opts)`, `timer_loop(...)`,
  `watch_files(...)` and `main(argv=None)`, the entry point of `mp`.