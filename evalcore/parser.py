"""
Parsing and code generation for pasted Python source.

Thin wrappers around the interpreter's own parser and unparser. Top-level
``await`` is accepted since the code ends up inside a coroutine function.
"""
import ast

from evalcore.errors import (
    EvalSyntaxError,
    detect_common_error_patterns,
    get_line_context,
)

PARSE_FLAGS = ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT


def parse_source(source_code, filename="<console>"):
    """
    Parse pasted source into an ``ast.Module``.

    Raises:
        EvalSyntaxError: If the source is not valid Python.
    """
    try:
        return compile(source_code, filename, "exec", flags=PARSE_FLAGS, dont_inherit=True)
    except (SyntaxError, ValueError) as e:
        line_number = getattr(e, "lineno", None)
        column = getattr(e, "offset", None)
        message = getattr(e, "msg", None) or str(e)

        context = get_line_context(source_code, line_number)
        suggestion, _ = detect_common_error_patterns(source_code, message)

        raise EvalSyntaxError(
            message=message,
            line_number=line_number,
            column=column,
            context=context,
            suggestion=suggestion,
        ) from e


def generate_source(tree):
    """Render a syntax tree back to source text."""
    return ast.unparse(ast.fix_missing_locations(tree))
