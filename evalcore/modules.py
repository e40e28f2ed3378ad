"""
Module loader used by rewritten import statements.

Resolves module names when the evaluated code runs. Overrides let a caller
inject stub modules (or plain dicts) under any name before falling back to
the regular import system.
"""
import importlib
import types
from collections.abc import Mapping


class ModuleLoader:
    """
    Loads modules for ``__pasteval_modules__.load/pick/star`` calls.

    The default importer runs synchronously, so a slow first import blocks
    the event loop until it finishes.

    Args:
        overrides: Mapping of module name to a module, an object or a dict
            of attributes, served instead of importing.
        importer: Callable that imports a module by absolute name.
    """

    def __init__(self, overrides=None, importer=None):
        self.overrides = dict(overrides or {})
        self._import = importer or importlib.import_module

    async def load(self, name, top_level=False):
        """Load ``name``; with ``top_level`` return its top-level package instead."""
        if not name or name.startswith("."):
            raise ImportError(f"relative import of {name!r} has no package to resolve against")
        module = self._resolve(name)
        if not top_level or "." not in name:
            return module
        return self._top_level(name, module)

    async def pick(self, name, attributes):
        """Load ``name`` and return the requested attributes as a tuple."""
        module = await self.load(name)
        return tuple(self._attribute(module, name, attribute) for attribute in attributes)

    async def star(self, name, namespace):
        """Load ``name`` and publish its public names into ``namespace``."""
        module = await self.load(name)
        public = getattr(module, "__all__", None)
        if public is None:
            public = [key for key in vars(module) if not key.startswith("_")]
        for key in public:
            namespace[key] = self._attribute(module, name, key)
        return module

    def _resolve(self, name):
        if name in self.overrides:
            return as_module(name, self.overrides[name])
        return self._import(name)

    def _top_level(self, name, module):
        parts = name.split(".")
        if parts[0] in self.overrides or name not in self.overrides:
            return self._resolve(parts[0])
        # Only the dotted name is stubbed: synthesise its parent packages
        top = current = types.ModuleType(parts[0])
        for index, part in enumerate(parts[1:-1], start=2):
            child = types.ModuleType(".".join(parts[:index]))
            setattr(current, part, child)
            current = child
        setattr(current, parts[-1], module)
        return top

    def _attribute(self, module, name, attribute):
        try:
            return getattr(module, attribute)
        except AttributeError:
            pass
        if hasattr(module, "__path__"):
            try:
                return self._resolve(f"{name}.{attribute}")
            except ImportError:
                pass
        raise ImportError(f"cannot import name {attribute!r} from {name!r}", name=name)


def as_module(name, value):
    """Wrap a dict of attributes into a module object; other values pass through."""
    if isinstance(value, Mapping):
        module = types.ModuleType(name)
        module.__dict__.update(value)
        return module
    return value
