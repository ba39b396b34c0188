"""
The function-invocation core: arguments, parameters, functions and invocations.

An Invocation names a registered Function and binds its parameters to
Arguments. Arguments are either literal Values or References (a type hint
plus a key-path) that are re-read from the scope on every resolve.
"""
from __future__ import annotations

import collections.abc
import enum
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, TYPE_CHECKING

from csfn.csfn_datatypes import (
    Scope, Type, Value, UNDEFINED, UNDEFINED_VALUE, as_key_path
)

if TYPE_CHECKING:
    from csfn.csfn_registry import FunctionRegistry

# =================================================================
# Arguments
# =================================================================

class Argument(ABC):
    """Base class for the two argument variants, Literal and Reference."""

    key_path: Optional[tuple] = None

    @abstractmethod
    def resolve(self, scope: Scope) -> Value:
        ...

    @abstractmethod
    def to_data(self) -> Dict[str, Any]:
        ...

    @staticmethod
    def from_data(data: Any) -> 'Argument':
        """Decodes an argument record. Unknown discriminators give an undefined Literal."""
        if not isinstance(data, collections.abc.Mapping):
            return Literal(UNDEFINED_VALUE)
        match data.get("type"):
            case "value":
                return Literal(Value.from_data(data.get("value")))
            case "identifier":
                inner = data.get("value")
                if not isinstance(inner, collections.abc.Mapping):
                    inner = {}
                path = inner.get("path") or []
                if isinstance(path, str) or not isinstance(path, collections.abc.Iterable):
                    path = []
                return Reference(Type.from_data(inner.get("type")), path)
            case _:
                return Literal(UNDEFINED_VALUE)


class Literal(Argument):
    """A value embedded directly in the invocation."""
    def __init__(self, value: Value):
        self.value = value

    def resolve(self, scope: Scope) -> Value:
        return self.value

    def to_data(self) -> Dict[str, Any]:
        return {"type": "value", "value": self.value.to_data()}

    def __eq__(self, other):
        if not isinstance(other, Literal):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(("value", self.value))

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


class Reference(Argument):
    """A pointer into the scope: the type expected when authored, and a key-path."""
    def __init__(self, type_hint: Type, key_path: Sequence[str]):
        self.type_hint = type_hint
        self.key_path = as_key_path(key_path)

    def resolve(self, scope: Scope) -> Value:
        # TODO: check the resolved type against type_hint once the editor surfaces stale references
        if not self.key_path:
            return UNDEFINED_VALUE
        return scope.get(self.key_path)

    def to_data(self) -> Dict[str, Any]:
        return {
            "type": "identifier",
            "value": {
                "type": self.type_hint.to_data(),
                "path": list(self.key_path),
            },
        }

    def __eq__(self, other):
        if not isinstance(other, Reference):
            return NotImplemented
        return self.type_hint == other.type_hint and self.key_path == other.key_path

    def __hash__(self):
        return hash(("identifier", self.type_hint, self.key_path))

    def __repr__(self) -> str:
        return f"Reference({self.type_hint!r}, {list(self.key_path)!r})"


# Well-known key-paths used by editors for "no value" and "custom value" choices
NONE_VALUE = "none"
CUSTOM_VALUE = "custom"
NONE_KEY_PATH = (NONE_VALUE,)
CUSTOM_KEY_PATH = (CUSTOM_VALUE,)
CUSTOM_VALUE_KEY_PATH = (CUSTOM_VALUE, "value")
CUSTOM_TYPE_KEY_PATH = (CUSTOM_VALUE, "type")

NamedArguments = Dict[str, Argument]

# =================================================================
# Parameters
# =================================================================

class Access(enum.Enum):
    READ = "read"
    WRITE = "write"


class Variable:
    """An ordinary typed slot."""
    def __init__(self, type: Type, access: Access = Access.READ):
        self.type = type
        self.access = access

    def __eq__(self, other):
        return isinstance(other, Variable) and self.type == other.type and self.access == other.access

    def __repr__(self) -> str:
        return f"Variable({self.type!r}, {self.access.value})"


class Keyword:
    """A slot whose value comes from a fixed vocabulary. Always read."""
    access = Access.READ

    def __init__(self, type: Type):
        self.type = type

    def __eq__(self, other):
        return isinstance(other, Keyword) and self.type == other.type

    def __repr__(self) -> str:
        return f"Keyword({self.type!r})"


class Declaration:
    """Introduces a new binding. Always written; its type is unknown until resolved."""
    access = Access.WRITE
    type = UNDEFINED

    def __eq__(self, other):
        return isinstance(other, Declaration)

    def __repr__(self) -> str:
        return "Declaration()"


ParameterType = Variable | Keyword | Declaration


class Parameter:
    """A formal parameter. The label is for display only; the name is the lookup key."""
    def __init__(self, name: str, type: ParameterType, label: Optional[str] = None):
        self.name = name
        self.type = type
        self.label = label

    @property
    def variable_type(self) -> Type:
        return self.type.type

    @property
    def access(self) -> Access:
        return self.type.access

    def __eq__(self, other):
        return (
            isinstance(other, Parameter) and
            self.name == other.name and
            self.type == other.type and
            self.label == other.label
        )

    def __repr__(self) -> str:
        return f"Parameter(name={self.name!r}, type={self.type!r}, label={self.label!r})"

# =================================================================
# Functions
# =================================================================

class ControlFlow(enum.Enum):
    STEP_OVER = "step-over"
    STEP_INTO = "step-into"


class ReturnValue(NamedTuple):
    scope: Scope
    control_flow: ControlFlow


Invoke = Callable[[NamedArguments, Scope], ReturnValue]


def _no_op(arguments: NamedArguments, scope: Scope) -> ReturnValue:
    return ReturnValue(scope, ControlFlow.STEP_OVER)


class Function:
    """A named operation with an ordered parameter list and an invoke behavior.

    has_body tells the host interpreter whether the invocation owns a nested
    block it may step into.
    """
    def __init__(self, name: str, parameters: Optional[List[Parameter]] = None,
                 has_body: bool = False, invoke: Optional[Invoke] = None):
        self.name = name
        self.parameters: List[Parameter] = list(parameters or [])
        self.has_body = has_body
        self.invoke: Invoke = invoke or _no_op
        seen = set()
        for p in self.parameters:
            if p.name in seen:
                raise ValueError(f"Duplicate parameter name {p.name!r} in function {name!r}")
            seen.add(p.name)

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def parameter_named(self, name: str) -> Optional[Parameter]:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    def __repr__(self) -> str:
        return f"<Function {self.name!r} params={self.parameter_names} has_body={self.has_body}>"

# =================================================================
# Invocations
# =================================================================

class Invocation:
    """A function name bound to concrete arguments: the unit of execution and persistence."""
    def __init__(self, name: str = "none", arguments: Optional[NamedArguments] = None):
        self.name = name
        self.arguments: NamedArguments = dict(arguments or {})

    @property
    def function(self) -> Function:
        return self.function_in(None)

    def function_in(self, registry: Optional['FunctionRegistry']) -> Function:
        """Looks the function up in registry, or in the process-wide registry when None."""
        if registry is None:
            from csfn.csfn_registry import get_registry
            registry = get_registry()
        return registry.get_function(self.name)

    def run(self, scope: Scope, registry: Optional['FunctionRegistry'] = None) -> ReturnValue:
        return self.function_in(registry).invoke(self.arguments, scope)

    @property
    def can_be_invoked(self) -> bool:
        """True when every declared parameter has an argument. Types are not checked."""
        return self.can_be_invoked_in(None)

    def can_be_invoked_in(self, registry: Optional['FunctionRegistry']) -> bool:
        return all(p.name in self.arguments for p in self.function_in(registry).parameters)

    def concrete_type_for_argument(self, argument_name: str, scope: Scope,
                                   registry: Optional['FunctionRegistry'] = None) -> Optional[Type]:
        """Returns the concrete type for a parameter, or None if none can be inferred.

        Generic parameters take their type from the first earlier parameter that
        shares the generic id and already has an argument. Parameters declared
        after the target are never consulted.
        """
        function = self.function_in(registry)
        target = function.parameter_named(argument_name)
        if target is None:
            return None
        target_type = target.variable_type
        if not target_type.is_generic:
            return target_type

        for parameter in function.parameters:
            if parameter.name == argument_name:
                break
            if parameter.variable_type.generic_id != target_type.generic_id:
                continue
            argument = self.arguments.get(parameter.name)
            if argument is not None:
                return argument.resolve(scope).type

        return None

    def to_data(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "arguments": {k: arg.to_data() for k, arg in self.arguments.items()},
        }

    @classmethod
    def from_data(cls, data: Any) -> 'Invocation':
        if not isinstance(data, collections.abc.Mapping):
            return cls()
        name = data.get("name")
        raw_args = data.get("arguments")
        if not isinstance(raw_args, collections.abc.Mapping):
            raw_args = {}
        return cls(
            name=str(name) if name is not None else "none",
            arguments={str(k): Argument.from_data(v) for k, v in raw_args.items()},
        )

    def __eq__(self, other):
        if not isinstance(other, Invocation):
            return NotImplemented
        return self.name == other.name and self.arguments == other.arguments

    def __repr__(self) -> str:
        return f"Invocation({self.name!r}, {self.arguments!r})"
