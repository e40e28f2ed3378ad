"""
Output capture - a console object handed to evaluated code.

Every diagnostic call appends exactly one ``LogEntry`` to a ``ConsoleLog``.
The log is append-only: entries are never removed, so a caller can share one
console across several evaluations and read the whole session back.
"""
import sys
import traceback
from abc import ABC, abstractmethod
from typing import List

from pydantic import BaseModel

from evalcore.formatter import format_args, render, render_html, render_text


class LogEntry(BaseModel):
    """One captured console call."""
    kind: str
    text: str
    html: str


class LogWriter(ABC):
    """Append-only sink for log entries."""

    @abstractmethod
    def append(self, entry: LogEntry) -> None:
        pass


class ConsoleLog(LogWriter):
    """Ordered record of console calls, readable as text or HTML."""

    def __init__(self):
        self._entries: List[LogEntry] = []

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self):
        return tuple(self._entries)

    def lines(self) -> List[str]:
        return [entry.text for entry in self._entries]

    def html_lines(self) -> List[str]:
        return [entry.html for entry in self._entries]

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))


class Console:
    """
    Console-like capture object.

    Mirrors the browser console surface (``log``, ``info``, ``warn``,
    ``error``, ``debug``, ``trace``, ``assert_``) and also provides a
    ``print`` compatible with the builtin.
    """

    def __init__(self, record=None):
        if record is not None and not isinstance(record, ConsoleLog):
            raise TypeError("Console record must be a ConsoleLog")
        self.record = record if record is not None else ConsoleLog()

    def _write(self, kind, args):
        text, html = render(args)
        self.record.append(LogEntry(kind=kind, text=text, html=html))

    def log(self, *args):
        self._write("log", args)

    def info(self, *args):
        self._write("info", args)

    def warn(self, *args):
        self._write("warn", args)

    warning = warn

    def error(self, *args):
        self._write("error", args)

    def debug(self, *args):
        self._write("debug", args)

    def trace(self, *args):
        stack = "".join(traceback.format_stack(sys._getframe(1))).rstrip()
        pieces = [("text", "Trace")]
        if args:
            pieces = [("text", "Trace: ")] + format_args(args)
        pieces.append(("text", "\n" + stack))
        self.record.append(LogEntry(kind="trace", text=render_text(pieces), html=render_html(pieces)))

    def assert_(self, condition, *args):
        if condition:
            return
        pieces = [("text", "Assertion failed")]
        if args:
            pieces = [("text", "Assertion failed: ")] + format_args(args)
        self.record.append(LogEntry(kind="assert", text=render_text(pieces), html=render_html(pieces)))

    def print(self, *args, sep=" ", end="\n", file=None, flush=False):
        """Drop-in replacement for the builtin ``print``."""
        if file is not None and file not in (sys.stdout, sys.stderr):
            print(*args, sep=sep, end=end, file=file, flush=flush)
            return
        message = (" " if sep is None else sep).join(str(arg) for arg in args)
        if end is not None and end != "\n":
            message += end
        pieces = [("text", message)]
        kind = "error" if file is sys.stderr else "log"
        self.record.append(LogEntry(kind=kind, text=render_text(pieces), html=render_html(pieces)))

    def lines(self):
        return self.record.lines()

    def html_lines(self):
        return self.record.html_lines()

    def __repr__(self):
        return f"<Console entries={len(self.record)}>"
