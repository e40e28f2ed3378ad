"""
Error handling utilities for the pasteval engine.
"""
import re


class EvalSyntaxError(Exception):
    """Syntax error in pasted source, with line numbers and hints."""
    def __init__(self, message, line_number=None, column=None, context=None, suggestion=None):
        self.message = message
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with context and suggestion."""
        lines = ["Syntax error"]
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(f": {self.message}")

        if self.context:
            lines.append(f"\n   > {self.context}")

        if self.suggestion:
            lines.append(f"\n   hint: {self.suggestion}")

        return "".join(lines)


class InvalidBindingError(ValueError):
    """A binding name that cannot be used as a parameter of the evaluated code."""
    def __init__(self, name, reason):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid binding name {name!r}: {reason}")


class PolicyViolation(Exception):
    """Raised by a script policy that refuses to let a script be compiled."""


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


def detect_common_error_patterns(source_code, error_msg):
    """Detect common paste mistakes and return helpful suggestions."""
    # Copied straight out of an interactive session
    if re.search(r'^\s*(>>>|\.\.\.)( |$)', source_code, re.MULTILINE):
        return "Remove the '>>>' and '...' prompts copied from an interactive session", "pasted_prompts"

    # Tabs and spaces in the same indentation
    if "inconsistent use of tabs" in error_msg or re.search(r'^(\t+ +| +\t+)', source_code, re.MULTILINE):
        return "Indent with spaces only; the pasted code mixes tabs and spaces", "mixed_indentation"

    if "unexpected indent" in error_msg:
        return "The first line must not be indented; dedent the pasted block", "unexpected_indent"

    # Unmatched brackets
    for opening, closing, kind in (('(', ')', 'parens'), ('[', ']', 'brackets'), ('{', '}', 'braces')):
        open_count = source_code.count(opening)
        close_count = source_code.count(closing)
        if open_count != close_count:
            return (
                f"Unmatched {kind}: found {open_count} '{opening}' but {close_count} '{closing}'",
                f"unmatched_{kind}",
            )

    # Block header without the colon
    if re.search(r'^\s*(if|elif|else|for|while|def|class|with|try|except|finally)\b[^:#\n]*$', source_code, re.MULTILINE):
        return "Block statements end with ':'", "missing_colon"

    return None, None
