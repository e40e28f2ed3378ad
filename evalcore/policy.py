"""
Script integrity policies.

A policy sees the generated function source right before it is compiled. It
returns the text to compile or raises ``PolicyViolation``. Policies are
optional and are injected once when the sandbox is built.
"""
import ast

from evalcore.errors import PolicyViolation


class ScriptPolicy:
    """Named gate in front of dynamic code compilation."""

    def __init__(self, name, create_script):
        self.name = name
        self._create_script = create_script

    def create_script(self, text):
        script = self._create_script(text)
        if not isinstance(script, str):
            raise PolicyViolation(f"Policy {self.name!r} did not return source text")
        return script

    def __repr__(self):
        return f"ScriptPolicy({self.name!r})"


def create_policy(name, create_script):
    """Create a policy from a ``create_script(text) -> text`` callable."""
    return ScriptPolicy(name, create_script)


def forbid_names(*names):
    """
    Build a ``create_script`` that rejects scripts referencing any of ``names``.

    Names are looked up on the parsed script, so strings and comments that
    merely mention a name are accepted.
    """
    forbidden = frozenset(names)

    def create_script(text):
        for node in ast.walk(ast.parse(text)):
            if isinstance(node, ast.Name) and node.id in forbidden:
                raise PolicyViolation(f"Use of {node.id!r} is not allowed (line {node.lineno})")
            if isinstance(node, ast.Attribute) and node.attr in forbidden:
                raise PolicyViolation(f"Use of {node.attr!r} is not allowed (line {node.lineno})")
        return text

    return create_script
