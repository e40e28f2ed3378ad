"""
Evaluation results and structured errors.
"""
import traceback as tb
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from evalcore.errors import EvalSyntaxError, get_line_context


class ErrorKind(str, Enum):
    """Categorizes evaluation failures."""
    SYNTAX_ERROR = "SyntaxError"
    COMPILE_ERROR = "CompileError"
    EXECUTION_ERROR = "ExecutionError"
    BINDING_ERROR = "BindingError"
    POLICY_ERROR = "PolicyError"


class EvalError(BaseModel):
    """Rich error context for a failed evaluation."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: ErrorKind
    name: str
    message: str
    line_number: Optional[int] = None
    column: Optional[int] = None
    context: Optional[str] = None
    suggestion: Optional[str] = None
    traceback: Optional[str] = None
    exception: Optional[BaseException] = Field(default=None, exclude=True, repr=False)

    @classmethod
    def from_exception(cls, exc, kind, source=None, filename=None, line_offset=0):
        """
        Build an error from a caught exception.

        Args:
            exc: The exception.
            kind: ErrorKind to report.
            source: Text the reported line numbers refer to, used for context.
            filename: Filename the program was compiled under. Only frames of
                that file are kept in the traceback.
            line_offset: Lines to subtract from reported line numbers.
        """
        line_number = None
        column = None
        context = None
        suggestion = None
        message = str(exc)

        if isinstance(exc, EvalSyntaxError):
            message = exc.message
            line_number, column = exc.line_number, exc.column
            context, suggestion = exc.context, exc.suggestion
        elif isinstance(exc, SyntaxError) and kind == ErrorKind.SYNTAX_ERROR:
            message = exc.msg or message
            line_number, column = exc.lineno, exc.offset
        elif filename is not None:
            frames = [f for f in tb.extract_tb(exc.__traceback__) if f.filename == filename]
            if frames:
                line_number = frames[-1].lineno

        if line_number is not None:
            if source is not None and context is None:
                context = get_line_context(source, line_number)
            line_number = max(line_number - line_offset, 1)

        return cls(
            kind=kind,
            name=type(exc).__name__,
            message=message,
            line_number=line_number,
            column=column,
            context=context,
            suggestion=suggestion,
            traceback=format_traceback(exc, filename),
            exception=exc,
        )

    def __str__(self):
        result = f"{self.name}: {self.message}"
        if self.line_number:
            result += f" (line {self.line_number})"
        if self.context:
            result += "\n   > " + self.context
        if self.suggestion:
            result += "\n   hint: " + self.suggestion
        return result


class EvaluationResult(BaseModel):
    """
    Outcome of one evaluation.

    ``output`` and ``output_html`` are always present and always have the
    same length. ``error`` is set if and only if the evaluation failed.
    """
    result: Any = None
    output: List[str] = Field(default_factory=list)
    output_html: List[str] = Field(default_factory=list)
    error: Optional[EvalError] = None

    @classmethod
    def capture(cls, console, result=None, error=None):
        """Snapshot the console record into a result."""
        entries = list(console.record)
        return cls(
            result=result,
            output=[entry.text for entry in entries],
            output_html=[entry.html for entry in entries],
            error=error,
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def unwrap(self):
        """Get the value or re-raise the captured exception."""
        if self.error is None:
            return self.result
        if self.error.exception is not None:
            raise self.error.exception
        raise RuntimeError(str(self.error))

    def to_dict(self):
        """JSON-safe representation."""
        return {
            "result": None if self.result is None else repr(self.result),
            "output": list(self.output),
            "output_html": list(self.output_html),
            "error": self.error.model_dump(mode="json") if self.error else None,
        }


def format_traceback(exc, filename=None):
    """Format the traceback of ``exc``, keeping only frames of the evaluated program."""
    if filename is None:
        return "".join(tb.format_exception_only(type(exc), exc))
    frames = [f for f in tb.extract_tb(exc.__traceback__) if f.filename == filename]
    lines = ["Traceback (most recent call last):\n"] if frames else []
    lines.extend(tb.format_list(frames))
    lines.extend(tb.format_exception_only(type(exc), exc))
    return "".join(lines)
