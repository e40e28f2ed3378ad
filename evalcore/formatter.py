"""
Console message formatter - renders console call arguments as plain text and HTML.

Messages are parsed with the Lark grammar in ``evalcore.grammar``. The first
pass substitutes printf-style directives of the format string. The second
pass turns ANSI SGR sequences (and ``%c`` CSS) into ``<span style>`` runs for
HTML and strips them for plain text.
"""
import html
import json

from lark import Lark, Transformer

from evalcore.grammar import message_grammar

# Standard 16-colour palette (xterm defaults)
ANSI_COLORS = [
    "#000000", "#cd0000", "#00cd00", "#cdcd00", "#0000ee", "#cd00cd", "#00cdcd", "#e5e5e5",
    "#7f7f7f", "#ff0000", "#00ff00", "#ffff00", "#5c5cff", "#ff00ff", "#00ffff", "#ffffff",
]

_parser = Lark(message_grammar, start='message', parser='lalr')


class MessageTransformer(Transformer):
    """
    Transforms a parsed message into a list of ``(kind, value)`` segments.

    In ``format`` mode directives are reported as ``('directive', letter)``
    and escape sequences are kept as text. In ``style`` mode directives are
    text and SGR sequences become ``('sgr', [codes])``.
    """

    def __init__(self, mode="format"):
        super().__init__()
        self.mode = mode

    def message(self, items):
        return list(items)

    def directive(self, args):
        token = str(args[0])
        if self.mode == "format":
            return ("directive", token[1])
        return ("text", token)

    def escape(self, args):
        if self.mode == "format":
            return ("text", "%")
        return ("text", str(args[0]))

    def ansi(self, args):
        token = str(args[0])
        if self.mode == "format":
            return ("text", token)
        if token.endswith("m"):
            params = token[2:-1]
            codes = [int(p) for p in params.split(";") if p.isdigit()] if params else [0]
            return ("sgr", codes or [0])
        # Cursor movement, erase line... carry no style
        return ("control", token)

    def text(self, args):
        return ("text", str(args[0]))


def parse_message(message, mode="format"):
    """Split a message string into segments."""
    if not message:
        return []
    return MessageTransformer(mode).transform(_parser.parse(message))


def format_args(args):
    """
    Substitute printf-style directives the way a browser console does.

    Returns a list of pieces: ``('text', str)`` or ``('css', str)``.
    """
    args = list(args)
    pieces = []

    if args and isinstance(args[0], str):
        fmt = args.pop(0)
        for kind, value in parse_message(fmt, mode="format"):
            if kind != "directive":
                pieces.append(("text", value))
            elif not args:
                pieces.append(("text", "%" + value))
            elif value == "c":
                pieces.append(("css", str(args.pop(0))))
            else:
                pieces.append(("text", substitute(value, args.pop(0))))

    rest = " ".join(str(arg) for arg in args)
    if rest:
        if pieces:
            rest = " " + rest
        pieces.append(("text", rest))
    return pieces


def substitute(directive, value):
    """Render one argument for a ``%s``, ``%d``, ``%i``, ``%f``, ``%j`` or ``%o`` directive."""
    if directive == "s":
        return str(value)
    if directive in ("o", "O"):
        return repr(value)
    if directive == "j":
        try:
            return json.dumps(value)
        except (TypeError, ValueError):
            return str(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "NaN"
    if directive == "i":
        return str(int(number)) if number == number and abs(number) != float("inf") else "NaN"
    if directive == "d" and number.is_integer():
        return str(int(number))
    return str(number)


def render_text(pieces):
    """Plain-text rendering: styles and escape sequences are dropped."""
    raw = "".join(value for kind, value in pieces if kind == "text")
    return "".join(value for kind, value in parse_message(raw, mode="style") if kind == "text")


def render_html(pieces):
    """HTML rendering: styles become ``<span style="...">`` runs."""
    out = []
    css = ""
    state = SgrState()
    for kind, value in pieces:
        if kind == "css":
            css = value.strip().rstrip(";")
            continue
        for seg_kind, seg_value in parse_message(value, mode="style"):
            if seg_kind == "sgr":
                state.apply(seg_value)
            elif seg_kind == "text":
                style = "; ".join(s for s in (css, state.css()) if s)
                escaped = html.escape(seg_value, quote=False)
                if style:
                    out.append(f'<span style="{html.escape(style)}">{escaped}</span>')
                else:
                    out.append(escaped)
    return "".join(out)


def render(args):
    """Render console call arguments to ``(text, html)``."""
    pieces = format_args(args)
    return render_text(pieces), render_html(pieces)


class SgrState:
    """Current graphic rendition while walking a message."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.bold = False
        self.dim = False
        self.italic = False
        self.underline = False
        self.strike = False
        self.fg = None
        self.bg = None

    def apply(self, codes):
        codes = list(codes)
        while codes:
            code = codes.pop(0)
            if code == 0:
                self.reset()
            elif code == 1:
                self.bold = True
            elif code == 2:
                self.dim = True
            elif code == 3:
                self.italic = True
            elif code == 4:
                self.underline = True
            elif code == 9:
                self.strike = True
            elif code == 22:
                self.bold = self.dim = False
            elif code == 23:
                self.italic = False
            elif code == 24:
                self.underline = False
            elif code == 29:
                self.strike = False
            elif 30 <= code <= 37:
                self.fg = ANSI_COLORS[code - 30]
            elif 90 <= code <= 97:
                self.fg = ANSI_COLORS[code - 90 + 8]
            elif 40 <= code <= 47:
                self.bg = ANSI_COLORS[code - 40]
            elif 100 <= code <= 107:
                self.bg = ANSI_COLORS[code - 100 + 8]
            elif code == 39:
                self.fg = None
            elif code == 49:
                self.bg = None
            elif code in (38, 48):
                color = _extended_color(codes)
                if color is not None:
                    if code == 38:
                        self.fg = color
                    else:
                        self.bg = color

    def css(self):
        rules = []
        if self.bold:
            rules.append("font-weight: bold")
        if self.dim:
            rules.append("opacity: 0.5")
        if self.italic:
            rules.append("font-style: italic")
        decorations = [name for flag, name in ((self.underline, "underline"), (self.strike, "line-through")) if flag]
        if decorations:
            rules.append("text-decoration: " + " ".join(decorations))
        if self.fg:
            rules.append(f"color: {self.fg}")
        if self.bg:
            rules.append(f"background-color: {self.bg}")
        return "; ".join(rules)


def _extended_color(codes):
    """Consume a ``5;n`` or ``2;r;g;b`` colour spec from ``codes``."""
    if not codes:
        return None
    mode = codes.pop(0)
    if mode == 5 and codes:
        return xterm_color(codes.pop(0))
    if mode == 2 and len(codes) >= 3:
        r, g, b = (min(codes.pop(0), 255) for _ in range(3))
        return f"rgb({r}, {g}, {b})"
    return None


def xterm_color(index):
    """Hex colour of an entry of the 256-colour palette."""
    index = max(0, min(index, 255))
    if index < 16:
        return ANSI_COLORS[index]
    if index < 232:
        index -= 16
        levels = [0 if c == 0 else 55 + c * 40 for c in (index // 36, (index // 6) % 6, index % 6)]
        return "#" + "".join(f"{level:02x}" for level in levels)
    gray = 8 + (index - 232) * 10
    return f"#{gray:02x}{gray:02x}{gray:02x}"
