"""Named predicates for 'custom' assertions.

A predicate is a plain callable ``(response, context) -> True | str | Any``.
Returning ``True`` passes the assertion, a string is used as the failure
reason, anything else fails with a generic reason. Predicates are registered
by name or referenced as ``module:function`` and are resolved before a run
starts. Source code from configuration files is never compiled.
"""
import importlib
from typing import Any, Callable, Dict, Iterable

from .errors import ConfigError

Predicate = Callable[[Any, Dict[str, Any]], Any]


class PredicateRegistry:
    """Maps predicate names to callables."""

    def __init__(self):
        self._predicates: Dict[str, Predicate] = {}

    def register(self, name: str, predicate: Predicate) -> None:
        if not callable(predicate):
            raise TypeError(f"Predicate '{name}' is not callable")
        self._predicates[name] = predicate

    def predicate(self, name: str) -> Callable[[Predicate], Predicate]:
        """Decorator form of register."""
        def decorator(fn: Predicate) -> Predicate:
            self.register(name, fn)
            return fn
        return decorator

    def has(self, name: str) -> bool:
        return name in self._predicates

    def resolve(self, ref: str) -> Predicate:
        """
        Resolve a registered name or a 'module:function' reference.

        Raises:
            ConfigError: If the reference cannot be resolved to a callable
        """
        if ref in self._predicates:
            return self._predicates[ref]
        if ":" in ref:
            module_name, _, attr = ref.partition(":")
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                raise ConfigError(f"Cannot import predicate module '{module_name}': {str(e)}")
            fn = getattr(module, attr, None)
            if not callable(fn):
                raise ConfigError(f"Predicate '{ref}' is not a callable")
            self._predicates[ref] = fn
            return fn
        raise ConfigError(f"Unknown custom predicate '{ref}'")

    def resolve_all(self, refs: Iterable[str]) -> Dict[str, Predicate]:
        return {ref: self.resolve(ref) for ref in refs}


default_registry = PredicateRegistry()
predicate = default_registry.predicate


def load_predicate_modules(module_names: Iterable[str]) -> None:
    """Import modules whose import registers predicates on the default registry."""
    for name in module_names:
        try:
            importlib.import_module(name)
        except ImportError as e:
            raise ConfigError(f"Cannot import predicate module '{name}': {str(e)}")
