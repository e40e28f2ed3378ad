"""
Import rewriter - turns top-level imports into awaited loader calls.

Only the direct children of the module body are rewritten. Anything nested
inside functions, classes or compound statements keeps the regular import
system.
"""
import __future__
import ast

from evalcore.errors import EvalSyntaxError

MODULES_NAME = "__pasteval_modules__"
NAMESPACE_NAME = "__pasteval_namespace__"


class ImportRewriter(ast.NodeTransformer):
    """
    Rewrites module-level import statements into expressions that are legal
    inside a coroutine function body.

    ``import a.b``            -> ``a = await __pasteval_modules__.load('a.b', top_level=True)``
    ``import a.b as x``       -> ``x = await __pasteval_modules__.load('a.b')``
    ``from m import a, b as c`` -> ``(a, c) = await __pasteval_modules__.pick('m', ['a', 'b'])``
    ``from m import *``       -> ``await __pasteval_modules__.star('m', __pasteval_namespace__)``

    ``from __future__`` imports are dropped and collected in ``future_flags``.
    Top-level ``global`` statements are dropped. Relative imports are left
    untouched.

    Names declared ``global`` anywhere in the program are collected in
    ``global_names`` and ``star_import`` records a star import, so the
    sandbox can keep those names in the module namespace.
    """

    def __init__(self, modules_name=MODULES_NAME, namespace_name=NAMESPACE_NAME):
        super().__init__()
        self.modules_name = modules_name
        self.namespace_name = namespace_name
        self.future_flags = 0
        self.global_names = set()
        self.star_import = False

    def rewrite(self, tree):
        """Rewrite ``tree`` in place and return it."""
        for node in ast.walk(tree):
            if isinstance(node, ast.Global):
                self.global_names.update(node.names)

        body = []
        for node in tree.body:
            new_node = self.visit(node)
            if new_node is None:
                continue
            if isinstance(new_node, list):
                body.extend(new_node)
            else:
                body.append(new_node)
        tree.body = body
        return ast.fix_missing_locations(tree)

    def generic_visit(self, node):
        # Never descend: nested statements are not top-level
        return node

    def visit_Import(self, node):
        statements = []
        for alias in node.names:
            if alias.asname:
                target = alias.asname
                call = self._load(alias.name)
            else:
                target = alias.name.partition(".")[0]
                call = self._load(alias.name, top_level="." in alias.name)
            assign = ast.Assign(
                targets=[ast.Name(id=target, ctx=ast.Store())],
                value=ast.Await(value=call),
            )
            statements.append(ast.copy_location(assign, node))
        return statements

    def visit_ImportFrom(self, node):
        if node.level:
            return node

        if node.module == "__future__":
            for alias in node.names:
                if alias.name not in __future__.all_feature_names:
                    raise EvalSyntaxError(
                        f"future feature {alias.name} is not defined",
                        line_number=node.lineno,
                        column=node.col_offset + 1,
                    )
                self.future_flags |= getattr(__future__, alias.name).compiler_flag
            return None

        if len(node.names) == 1 and node.names[0].name == "*":
            self.star_import = True
            star = ast.Call(
                func=self._helper("star"),
                args=[
                    ast.Constant(value=node.module),
                    ast.Name(id=self.namespace_name, ctx=ast.Load()),
                ],
                keywords=[],
            )
            return ast.copy_location(ast.Expr(value=ast.Await(value=star)), node)

        pick = ast.Call(
            func=self._helper("pick"),
            args=[
                ast.Constant(value=node.module),
                ast.List(elts=[ast.Constant(value=alias.name) for alias in node.names], ctx=ast.Load()),
            ],
            keywords=[],
        )
        targets = ast.Tuple(
            elts=[ast.Name(id=alias.asname or alias.name, ctx=ast.Store()) for alias in node.names],
            ctx=ast.Store(),
        )
        assign = ast.Assign(targets=[targets], value=ast.Await(value=pick))
        return ast.copy_location(assign, node)

    def visit_Global(self, node):
        return None

    def _load(self, name, top_level=False):
        keywords = []
        if top_level:
            keywords.append(ast.keyword(arg="top_level", value=ast.Constant(value=True)))
        return ast.Call(func=self._helper("load"), args=[ast.Constant(value=name)], keywords=keywords)

    def _helper(self, method):
        return ast.Attribute(
            value=ast.Name(id=self.modules_name, ctx=ast.Load()),
            attr=method,
            ctx=ast.Load(),
        )
