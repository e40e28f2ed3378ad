import asyncio
import sys

# Import from the evalcore package
from evalcore.console import Console
from evalcore.config import Settings
from evalcore.errors import EvalSyntaxError
from evalcore.modules import ModuleLoader
from evalcore.parser import generate_source, parse_source
from evalcore.result import ErrorKind, EvalError, EvaluationResult
from evalcore.returns import inject_implicit_return
from evalcore.rewriter import ImportRewriter
from evalcore.sandbox import Sandbox

# Global verbose flag
_VERBOSE = False

def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value

def debug_log(message):
    """Log a debug message to stderr if verbose mode is enabled."""
    if _VERBOSE:
        print(f"\033[94mDEBUG:\033[0m {message}", file=sys.stderr)


class TransformedSource:
    """Rewritten syntax tree ready to be wrapped and compiled."""

    def __init__(self, source, tree, future_flags=0, returns_value=False, global_names=(), star_import=False):
        self.source = source
        self.tree = tree
        self.future_flags = future_flags
        self.returns_value = returns_value
        self.global_names = frozenset(global_names)
        self.star_import = star_import

    @property
    def body(self):
        """Generated source of the rewritten program body."""
        return generate_source(self.tree)

    def __repr__(self):
        return f"TransformedSource(returns_value={self.returns_value}, statements={len(self.tree.body)})"


def transform_source(source_code, filename="<console>"):
    """
    Rewrite pasted source so it can run as the body of a coroutine function.

    Raises:
        EvalSyntaxError: If the source does not parse.
    """
    # STEP 1: PARSE
    tree = parse_source(source_code, filename)
    debug_log(f"Parsed {len(tree.body)} top-level statement(s)")

    # STEP 2: REWRITE IMPORTS
    rewriter = ImportRewriter()
    tree = rewriter.rewrite(tree)

    # STEP 3: IMPLICIT RETURN
    returns_value = inject_implicit_return(tree)
    debug_log(f"Implicit return injected: {returns_value}")

    return TransformedSource(
        source_code,
        tree,
        rewriter.future_flags,
        returns_value,
        global_names=rewriter.global_names,
        star_import=rewriter.star_import,
    )


class Evaluator:
    """
    Evaluates source code as if pasted into an interactive console.

    Args:
        policy: Optional ``ScriptPolicy`` gating compilation.
        modules: Stub modules served to top-level imports, by name.
        loader: Custom ``ModuleLoader``; ``modules`` is ignored when given.
        settings: ``Settings``; defaults are used when omitted.
    """

    def __init__(self, policy=None, modules=None, loader=None, settings=None):
        self.settings = settings or Settings()
        self.sandbox = Sandbox(
            policy=policy,
            loader=loader if loader is not None else ModuleLoader(modules),
            filename=self.settings.filename,
            console_name=self.settings.console_name,
            capture_print=self.settings.capture_print,
        )

    def select_console(self, bindings):
        """
        The capture console for a run.

        A ``Console`` passed under the console name is used (and keeps
        accumulating). Any other value there is an ordinary binding that
        shadows the console, and a fresh capture still records ``print``.
        """
        supplied = bindings.get(self.settings.console_name)
        if isinstance(supplied, Console):
            return supplied
        return Console()

    async def evaluate(self, code, bindings=None):
        """Evaluate ``code`` and return an ``EvaluationResult``. Never raises for program errors."""
        bindings = dict(bindings or {})
        console = self.select_console(bindings)

        debug_log(f"Evaluating {len(code)} character(s) with bindings {list(bindings)}")
        try:
            transformed = transform_source(code, self.settings.filename)
        except EvalSyntaxError as e:
            debug_log(f"Syntax error: {e.message}")
            return EvaluationResult.capture(console, error=EvalError.from_exception(e, ErrorKind.SYNTAX_ERROR))
        except Exception as e:
            # Rewriting a tree that parsed is not expected to fail
            return EvaluationResult.capture(console, error=EvalError.from_exception(e, ErrorKind.COMPILE_ERROR))

        result = await self.sandbox.run(transformed, bindings, console)
        if result.error is not None:
            debug_log(f"Evaluation failed: {result.error.name}: {result.error.message}")
        return result


async def evaluate(code, bindings=None, **kwargs):
    """Evaluate ``code`` with a one-off ``Evaluator`` built from ``kwargs``."""
    return await Evaluator(**kwargs).evaluate(code, bindings)


def evaluate_sync(code, bindings=None, **kwargs):
    """Blocking variant of ``evaluate`` for callers without an event loop."""
    return asyncio.run(evaluate(code, bindings, **kwargs))
