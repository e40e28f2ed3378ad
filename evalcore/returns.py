"""
Implicit return - promotes the value of the last top-level statement.
"""
import ast


def inject_implicit_return(tree):
    """
    Make the last statement of ``tree`` produce the function's return value.

    A trailing expression becomes ``return <expr>``. A trailing assignment to
    one or more names is kept and followed by ``return <last name>``. Every
    other statement is left alone.

    Returns:
        True if a return statement was injected.
    """
    if not tree.body:
        return False

    last = tree.body[-1]
    if isinstance(last, ast.Expr):
        tree.body[-1] = ast.copy_location(ast.Return(value=last.value), last)
        return True

    name = declared_name(last)
    if name is None:
        return False

    ret = ast.Return(value=ast.Name(id=name, ctx=ast.Load()))
    tree.body.append(ast.copy_location(ret, last))
    return True


def declared_name(node):
    """Name bound last by an assignment statement, or None."""
    if isinstance(node, ast.Assign):
        names = [name for target in node.targets for name in _target_names(target)]
        return names[-1] if names else None
    if isinstance(node, ast.AnnAssign):
        if node.value is not None and isinstance(node.target, ast.Name):
            return node.target.id
    return None


def _target_names(target):
    if isinstance(target, ast.Name):
        yield target.id
    elif isinstance(target, ast.Starred):
        yield from _target_names(target.value)
    elif isinstance(target, (ast.Tuple, ast.List)):
        for element in target.elts:
            yield from _target_names(element)
