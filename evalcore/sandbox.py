"""
Execution sandbox - compiles rewritten code as one coroutine function and runs it.

The program body becomes the body of ``async def __pasteval__(...)`` whose
parameters are the caller's bindings (sorted by name) followed by the
console, the ``print`` redirect and the module loader. Program failures,
including ``SystemExit``, are reported in the returned ``EvaluationResult``.
"""
import ast
import builtins
import copy
import keyword
import symtable

from evalcore.errors import InvalidBindingError
from evalcore.modules import ModuleLoader
from evalcore.parser import generate_source
from evalcore.result import ErrorKind, EvalError, EvaluationResult
from evalcore.rewriter import MODULES_NAME, NAMESPACE_NAME

FUNCTION_NAME = "__pasteval__"
RESERVED_PREFIX = "__pasteval"

# The generated function header sits on line 1
HEADER_LINES = 1


def validate_bindings(bindings):
    """
    Check that every binding name can be a parameter name.

    Raises:
        InvalidBindingError: For the first offending name.
    """
    for name in bindings:
        if not isinstance(name, str) or not name.isidentifier():
            raise InvalidBindingError(name, "not a valid identifier")
        if keyword.iskeyword(name):
            raise InvalidBindingError(name, "is a reserved keyword")
        if name.startswith(RESERVED_PREFIX):
            raise InvalidBindingError(name, "is reserved by the evaluator")


def bound_names(script, filename):
    """Sorted names the generated function binds, without its parameters or annotated names."""
    try:
        table = symtable.symtable(script, filename, "exec")
    except SyntaxError:
        # Left for compile() to report
        return []
    function = table.get_children()[0]
    return sorted(
        symbol.get_name()
        for symbol in function.get_symbols()
        if symbol.is_local() and not symbol.is_parameter() and not symbol.is_annotated()
    )


class Sandbox:
    """
    Compiles and runs transformed programs.

    Args:
        policy: Optional ``ScriptPolicy`` applied to the generated text.
        loader: ``ModuleLoader`` serving rewritten imports.
        filename: Filename the program is compiled under.
        console_name: Parameter name the console is bound to.
        capture_print: Redirect ``print`` into the console.
    """

    def __init__(self, policy=None, loader=None, filename="<console>", console_name="console", capture_print=True):
        self.policy = policy
        self.loader = loader if loader is not None else ModuleLoader()
        self.filename = filename
        self.console_name = console_name
        self.capture_print = capture_print

    def arguments(self, bindings, console):
        """Ordered parameter name -> value mapping for one run."""
        arguments = {name: bindings[name] for name in sorted(bindings)}
        # Caller bindings win over the engine's defaults
        if self.console_name not in arguments:
            arguments[self.console_name] = console
        if self.capture_print and "print" not in arguments:
            arguments["print"] = console.print
        arguments[MODULES_NAME] = self.loader
        return arguments

    def wrap(self, transformed, names):
        """
        Build the module tree holding ``async def __pasteval__(names)``.

        Names the program shares with nested ``global`` statements, or every
        bound name when it star-imports, are declared ``global`` on the first
        body line so they live in the module namespace.

        Returns:
            Tuple of (module tree, number of generated lines before the program body).
        """
        template = ast.parse(f"async def {FUNCTION_NAME}({', '.join(names)}):\n    pass\n")
        function = template.body[0]
        body = copy.deepcopy(transformed.tree.body)
        if not body:
            return template, HEADER_LINES
        function.body = body

        shared = [
            name for name in bound_names(generate_source(template), self.filename)
            if transformed.star_import or name in transformed.global_names
        ]
        if not shared:
            return template, HEADER_LINES
        function.body.insert(0, ast.Global(names=shared))
        return template, HEADER_LINES + 1

    def build_script(self, transformed, names):
        """Generate the source of the coroutine function wrapping ``transformed``."""
        tree, _ = self.wrap(transformed, names)
        return generate_source(tree) + "\n"

    async def run(self, transformed, bindings, console):
        """Run a ``TransformedSource`` and collect the result."""
        bindings = dict(bindings or {})
        try:
            validate_bindings(bindings)
        except InvalidBindingError as e:
            return EvaluationResult.capture(console, error=EvalError.from_exception(e, ErrorKind.BINDING_ERROR))

        arguments = self.arguments(bindings, console)
        try:
            tree, header_lines = self.wrap(transformed, list(arguments))
            script = generate_source(tree) + "\n"
        except Exception as e:
            return EvaluationResult.capture(console, error=EvalError.from_exception(e, ErrorKind.COMPILE_ERROR))

        if self.policy is not None:
            try:
                script = self.policy.create_script(script)
            except Exception as e:
                return EvaluationResult.capture(console, error=EvalError.from_exception(e, ErrorKind.POLICY_ERROR))

        try:
            code = compile(script, self.filename, "exec", flags=transformed.future_flags, dont_inherit=True)
        except SyntaxError as e:
            error = EvalError.from_exception(e, ErrorKind.SYNTAX_ERROR, source=script, line_offset=header_lines)
            return EvaluationResult.capture(console, error=error)
        except Exception as e:
            return EvaluationResult.capture(console, error=EvalError.from_exception(e, ErrorKind.COMPILE_ERROR))

        namespace = {"__name__": "__console__", "__builtins__": builtins}
        namespace[NAMESPACE_NAME] = namespace
        try:
            exec(code, namespace)
            value = await namespace[FUNCTION_NAME](*arguments.values())
        except (Exception, SystemExit) as e:
            # SystemExit ends the program, not the caller
            error = EvalError.from_exception(
                e,
                ErrorKind.EXECUTION_ERROR,
                source=script,
                filename=self.filename,
                line_offset=header_lines,
            )
            return EvaluationResult.capture(console, error=error)

        return EvaluationResult.capture(console, result=value)
