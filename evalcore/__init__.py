# pasteval - Core Evaluation Engine
"""
Core modules for the pasteval engine:
- errors: Error types and syntax error hints
- parser: Parsing and code generation for pasted source
- rewriter: Top-level import rewriting
- returns: Implicit return of the last statement
- modules: Module loader used by rewritten imports
- sandbox: Compiles and runs the rewritten program
- console: Output capture handed to the program
- grammar / formatter: Console message parsing and rendering
- policy: Optional script integrity policies
- result: Evaluation results
- config: Settings
"""

from .errors import EvalSyntaxError, InvalidBindingError, PolicyViolation
from .console import Console, ConsoleLog, LogEntry, LogWriter
from .modules import ModuleLoader
from .policy import ScriptPolicy, create_policy, forbid_names
from .result import ErrorKind, EvalError, EvaluationResult
from .rewriter import ImportRewriter
from .returns import inject_implicit_return
from .sandbox import Sandbox

__all__ = [
    'EvalSyntaxError',
    'InvalidBindingError',
    'PolicyViolation',
    'Console',
    'ConsoleLog',
    'LogEntry',
    'LogWriter',
    'ModuleLoader',
    'ScriptPolicy',
    'create_policy',
    'forbid_names',
    'ErrorKind',
    'EvalError',
    'EvaluationResult',
    'ImportRewriter',
    'inject_implicit_return',
    'Sandbox',
]
