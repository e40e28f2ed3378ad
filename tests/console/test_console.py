"""
Unit tests for evalcore/console.py - Console and ConsoleLog.
"""
import io
import sys

import pytest

from evalcore.console import Console, ConsoleLog, LogEntry, LogWriter


class TestConsoleLog:
    """Tests for the append-only record."""

    def test_append_and_read(self):
        record = ConsoleLog()
        record.append(LogEntry(kind="log", text="a", html="a"))
        record.append(LogEntry(kind="warn", text="b", html="<b>"))
        assert record.lines() == ["a", "b"]
        assert record.html_lines() == ["a", "<b>"]
        assert len(record) == 2
        assert [entry.kind for entry in record] == ["log", "warn"]

    def test_entries_snapshot(self):
        """entries is a snapshot that cannot be used to mutate the record."""
        record = ConsoleLog()
        record.append(LogEntry(kind="log", text="a", html="a"))
        assert isinstance(record.entries, tuple)

    def test_no_clear(self):
        """The record has no way to drop entries."""
        assert not hasattr(ConsoleLog(), "clear")

    def test_is_log_writer(self):
        assert isinstance(ConsoleLog(), LogWriter)


class TestConsole:
    """Tests for console methods."""

    @pytest.fixture
    def console(self):
        return Console()

    @pytest.mark.parametrize("method,kind", [
        ("log", "log"),
        ("info", "info"),
        ("warn", "warn"),
        ("warning", "warn"),
        ("error", "error"),
        ("debug", "debug"),
    ])
    def test_one_entry_per_call(self, console, method, kind):
        getattr(console, method)("hello", 1)
        assert [entry.kind for entry in console.record] == [kind]
        assert console.lines() == ["hello 1"]

    def test_format_string(self, console):
        console.log("%s has %d items", "cart", 3)
        assert console.lines() == ["cart has 3 items"]

    def test_assert_passes_silently(self, console):
        console.assert_(True, "never shown")
        assert console.lines() == []

    def test_assert_failure(self, console):
        console.assert_(1 == 2, "math is %s", "broken")
        assert console.lines() == ["Assertion failed: math is broken"]
        assert console.record.entries[0].kind == "assert"

    def test_assert_failure_without_message(self, console):
        console.assert_(False)
        assert console.lines() == ["Assertion failed"]

    def test_trace(self, console):
        console.trace("here")
        text = console.lines()[0]
        assert text.startswith("Trace: here\n")
        assert "test_trace" in text

    def test_print_sep_and_end(self, console):
        console.print("a", "b", sep=", ", end="!")
        console.print("c")
        assert console.lines() == ["a, b!", "c"]

    def test_print_to_stderr_is_error(self, console):
        console.print("oops", file=sys.stderr)
        assert console.record.entries[0].kind == "error"

    def test_print_to_other_file(self, console):
        buffer = io.StringIO()
        console.print("elsewhere", file=buffer)
        assert buffer.getvalue() == "elsewhere\n"
        assert console.lines() == []

    def test_shared_record(self):
        """Two consoles on one record write to the same log."""
        record = ConsoleLog()
        Console(record).log("a")
        Console(record).log("b")
        assert record.lines() == ["a", "b"]

    def test_separate_consoles_not_aliased(self):
        first, second = Console(), Console()
        first.log("a")
        assert second.lines() == []

    def test_html_rendering(self, console):
        console.error("\x1b[31mfailed\x1b[0m")
        entry = console.record.entries[0]
        assert entry.text == "failed"
        assert entry.html == '<span style="color: #cd0000">failed</span>'
