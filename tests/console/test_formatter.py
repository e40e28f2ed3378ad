"""
Unit tests for evalcore/formatter.py and the console message grammar.
"""
import pytest
from lark import Lark

from evalcore.formatter import (
    MessageTransformer,
    SgrState,
    parse_message,
    render,
    substitute,
    xterm_color,
)
from evalcore.grammar import message_grammar


class TestMessageGrammar:
    """Tests for the Lark grammar itself."""

    @pytest.fixture
    def parser(self):
        """Create a Lark parser for testing."""
        return Lark(message_grammar, start='message', parser='lalr')

    def test_plain_text(self, parser):
        tree = parser.parse("hello world")
        assert MessageTransformer().transform(tree) == [("text", "hello world")]

    def test_directives_and_escape(self, parser):
        tree = parser.parse("%s is 100%% %d")
        assert MessageTransformer().transform(tree) == [
            ("directive", "s"),
            ("text", " is 100"),
            ("text", "%"),
            ("text", " "),
            ("directive", "d"),
        ]

    def test_stray_percent(self, parser):
        tree = parser.parse("50%")
        assert MessageTransformer().transform(tree) == [("text", "50"), ("text", "%")]

    def test_style_mode_keeps_directives_as_text(self, parser):
        tree = parser.parse("%s%%")
        assert MessageTransformer("style").transform(tree) == [("text", "%s"), ("text", "%%")]

    def test_sgr_sequence(self, parser):
        tree = parser.parse("\x1b[1;31mred")
        assert MessageTransformer("style").transform(tree) == [("sgr", [1, 31]), ("text", "red")]

    def test_empty_sgr_is_reset(self):
        assert parse_message("\x1b[m", mode="style") == [("sgr", [0])]

    def test_control_sequence(self):
        assert parse_message("\x1b[2Kdone", mode="style") == [("control", "\x1b[2K"), ("text", "done")]


class TestSubstitution:
    """Tests for printf-style directives."""

    def test_string_and_number(self):
        assert render(("%s is %d years", "Bob", 42))[0] == "Bob is 42 years"

    def test_missing_argument_left_verbatim(self):
        assert render(("%s and %s", "a"))[0] == "a and %s"

    def test_extra_arguments_appended(self):
        assert render(("x", 1, [2]))[0] == "x 1 [2]"

    def test_non_string_first_argument(self):
        assert render((1, 2))[0] == "1 2"

    def test_percent_escape(self):
        assert render(("100%%",))[0] == "100%"

    def test_no_arguments(self):
        assert render(()) == ("", "")

    @pytest.mark.parametrize("directive,value,expected", [
        ("d", 1.5, "1.5"),
        ("d", "12", "12"),
        ("d", "abc", "NaN"),
        ("i", 1.9, "1"),
        ("i", None, "NaN"),
        ("f", 2, "2.0"),
        ("j", {"a": 1}, '{"a": 1}'),
        ("o", "x", "'x'"),
        ("O", [1], "[1]"),
        ("s", None, "None"),
    ])
    def test_directive(self, directive, value, expected):
        assert substitute(directive, value) == expected

    def test_json_fallback(self):
        assert substitute("j", object).startswith("<class")


class TestStyles:
    """Tests for ANSI and %c styling."""

    def test_css_directive(self):
        text, html = render(("%cred", "color: red"))
        assert text == "red"
        assert html == '<span style="color: red">red</span>'

    def test_ansi_color(self):
        text, html = render(("\x1b[31merror\x1b[0m ok",))
        assert text == "error ok"
        assert html == '<span style="color: #cd0000">error</span> ok'

    def test_ansi_in_substituted_argument(self):
        text, html = render(("status: %s", "\x1b[1mbold\x1b[22m"))
        assert text == "status: bold"
        assert html == 'status: <span style="font-weight: bold">bold</span>'

    def test_html_escaped(self):
        text, html = render(("<b>&",))
        assert text == "<b>&"
        assert html == "&lt;b&gt;&amp;"

    def test_control_sequence_removed(self):
        assert render(("\x1b[2Kdone",)) == ("done", "done")

    def test_css_and_ansi_combined(self):
        _, html = render(("%c\x1b[4mx", "font-size: 2em;"))
        assert html == '<span style="font-size: 2em; text-decoration: underline">x</span>'


class TestSgrState:
    """Tests for SGR code handling."""

    def test_bold_and_color(self):
        state = SgrState()
        state.apply([1, 32])
        assert state.css() == "font-weight: bold; color: #00cd00"

    def test_reset(self):
        state = SgrState()
        state.apply([1, 3, 4, 41])
        state.apply([0])
        assert state.css() == ""

    def test_bright_colors(self):
        state = SgrState()
        state.apply([91, 104])
        assert state.css() == "color: #ff0000; background-color: #5c5cff"

    def test_256_colors(self):
        state = SgrState()
        state.apply([38, 5, 196])
        assert state.fg == "#ff0000"

    def test_truecolor(self):
        state = SgrState()
        state.apply([48, 2, 10, 20, 30])
        assert state.bg == "rgb(10, 20, 30)"

    def test_default_colors(self):
        state = SgrState()
        state.apply([31, 42, 39, 49])
        assert state.fg is None and state.bg is None

    def test_underline_and_strike(self):
        state = SgrState()
        state.apply([4, 9])
        assert state.css() == "text-decoration: underline line-through"

    @pytest.mark.parametrize("index,expected", [
        (1, "#cd0000"),
        (16, "#000000"),
        (196, "#ff0000"),
        (232, "#080808"),
        (255, "#eeeeee"),
    ])
    def test_xterm_palette(self, index, expected):
        assert xterm_color(index) == expected
