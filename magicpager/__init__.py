"""A terminal pager that shows a file or command output and refreshes it on a timer or file changes."""

__version__ = "0.1.0"