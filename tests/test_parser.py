"""
Unit tests for evalcore/parser.py and the syntax error hints.
"""
import ast

import pytest

from evalcore.errors import EvalSyntaxError, detect_common_error_patterns, get_line_context
from evalcore.parser import generate_source, parse_source


class TestParseSource:
    """Tests for parse_source()."""

    def test_parses_module(self):
        """Valid source gives an ast.Module."""
        tree = parse_source("x = 1\nx")
        assert isinstance(tree, ast.Module)
        assert len(tree.body) == 2

    def test_top_level_await_accepted(self):
        """Top-level await parses since the code runs inside a coroutine."""
        tree = parse_source("await something()")
        assert isinstance(tree.body[0].value, ast.Await)

    def test_syntax_error_has_position(self):
        """Syntax errors carry line, column and context."""
        with pytest.raises(EvalSyntaxError) as exc_info:
            parse_source("x = 1\ny = (2 +\n")
        error = exc_info.value
        assert error.line_number is not None
        assert error.column is not None
        assert error.message

    def test_syntax_error_context_line(self):
        """The offending line is quoted."""
        with pytest.raises(EvalSyntaxError) as exc_info:
            parse_source("x = 1\nfor in range(3):\n    pass")
        assert exc_info.value.line_number == 2
        assert exc_info.value.context == "for in range(3):"

    def test_null_bytes_rejected(self):
        """Source with null bytes is reported as a syntax error."""
        with pytest.raises(EvalSyntaxError):
            parse_source("x = 1\x00")

    def test_pasted_prompt_suggestion(self):
        """Source copied with '>>>' prompts gets a hint."""
        with pytest.raises(EvalSyntaxError) as exc_info:
            parse_source(">>> x = 1\n>>> x")
        assert "'>>>'" in exc_info.value.suggestion
        assert "hint:" in str(exc_info.value)


class TestGenerateSource:
    """Tests for generate_source()."""

    def test_round_trip(self):
        """Generating from a parsed tree reproduces normalised source."""
        source = "def f(a, b=2):\n    return a + b"
        assert generate_source(parse_source(source)) == source


class TestErrorHints:
    """Tests for detect_common_error_patterns() and get_line_context()."""

    def test_unmatched_parens(self):
        suggestion, kind = detect_common_error_patterns("print((1)", "'(' was never closed")
        assert kind == "unmatched_parens"
        assert "Unmatched parens" in suggestion

    def test_missing_colon(self):
        suggestion, kind = detect_common_error_patterns("if x\n    pass", "expected ':'")
        assert kind == "missing_colon"

    def test_unexpected_indent(self):
        _, kind = detect_common_error_patterns("    x = 1", "unexpected indent")
        assert kind == "unexpected_indent"

    def test_no_pattern(self):
        assert detect_common_error_patterns("x = = 1", "invalid syntax") == (None, None)

    def test_line_context(self):
        assert get_line_context("a\n  b  \nc", 2) == "b"
        assert get_line_context("a", 5) is None
        assert get_line_context("a", None) is None
