"""
Registry of named functions.

Maps function names to Function objects. Invocations look their function
up here by name at run time; unknown names resolve to an inert placeholder
instead of raising. Access is not synchronized: hosts that register from
several threads must serialize those calls themselves.
"""
from typing import Dict, List, Optional

from csfn.csfn_config import _dbg
from csfn.csfn_function import Function


def not_found(name: str) -> Function:
    """A transient stand-in for an unregistered name. Never stored in a registry."""
    return Function(
        name=f"Function {name} not found",
        parameters=[],
        has_body=True,
    )


class FunctionRegistry:
    def __init__(self, functions: Optional[Dict[str, Function]] = None):
        if functions is None:
            from csfn.csfn_builtins import builtin_functions
            functions = builtin_functions()
        self._functions: Dict[str, Function] = dict(functions)

    def register(self, function: Function) -> None:
        """Adds a function; an existing entry with the same name is replaced."""
        if function.name in self._functions:
            _dbg("register", "replacing", function.name)
        self._functions[function.name] = function

    def get_function(self, name: str) -> Function:
        fn = self._functions.get(name)
        if fn is None:
            _dbg("get_function", "not found", name)
            return not_found(name)
        return fn

    @property
    def registered_function_names(self) -> List[str]:
        return sorted(self._functions)

    def __contains__(self, name) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __repr__(self) -> str:
        return f"<FunctionRegistry functions={self.registered_function_names}>"


# Module-level singleton
_registry: Optional[FunctionRegistry] = None

def get_registry() -> FunctionRegistry:
    global _registry
    if _registry is None:
        _registry = FunctionRegistry()
    return _registry


def reset_registry() -> FunctionRegistry:
    """Replaces the singleton with a freshly seeded registry."""
    global _registry
    _registry = FunctionRegistry()
    return _registry


def register(function: Function) -> None:
    get_registry().register(function)


def get_function(name: str) -> Function:
    return get_registry().get_function(name)
