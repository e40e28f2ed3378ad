"""
Console Message Grammar.

This module contains the Lark grammar for console messages: printf-style
directives in a format string, ANSI escape sequences and plain text.
"""

message_grammar = r"""
    message: _item*

    _item: directive | escape | ansi | text

    directive: DIRECTIVE
    escape: PERCENT
    ansi: ANSI
    text: TEXT | STRAY

    // --- Terminals ---
    DIRECTIVE.2: /%[sdifjoOc]/
    PERCENT.2: "%%"
    ANSI.2: /\x1b\[[0-9;?]*[A-Za-z]/
    TEXT: /[^%\x1b]+/
    STRAY: /%|\x1b/
"""
