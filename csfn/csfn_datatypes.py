"""
Defines the value, type and scope model used by the csfn function core.

Values are small typed payloads; scopes are trees of bindings addressed
by key-paths (sequences of string segments).
"""

import collections.abc
from typing import Any, Dict, Iterable, Optional, Sequence

class PathNotFound(Exception):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

# =================================================================
# Types
# =================================================================

class Type:
    """A named value type. Generic types carry a generic_id instead of a concrete name."""
    def __init__(self, name: str, generic_id: Optional[str] = None):
        self.name = name
        self.generic_id = generic_id

    @property
    def is_generic(self) -> bool:
        return self.generic_id is not None

    def to_data(self) -> Any:
        if self.is_generic:
            return {"generic": self.generic_id}
        return self.name

    @classmethod
    def from_data(cls, data: Any) -> 'Type':
        if isinstance(data, str):
            return _NAMED_TYPES.get(data) or cls(data)
        if isinstance(data, collections.abc.Mapping) and isinstance(data.get("generic"), str):
            return generic(data["generic"])
        return UNDEFINED

    def __eq__(self, other):
        if not isinstance(other, Type):
            return NotImplemented
        return self.name == other.name and self.generic_id == other.generic_id

    def __hash__(self):
        return hash((self.name, self.generic_id))

    def __repr__(self) -> str:
        if self.is_generic:
            return f"Type<generic {self.generic_id!r}>"
        return f"Type<{self.name}>"


def generic(generic_id: str) -> Type:
    return Type("Generic", generic_id=generic_id)


UNDEFINED = Type("Undefined")
BOOL = Type("Boolean")
NUMBER = Type("Number")
STRING = Type("String")
URL = Type("URL")
COMPARATOR = Type("Comparator")
GENERIC_A = generic("A")

_NAMED_TYPES: Dict[str, Type] = {
    t.name: t for t in (UNDEFINED, BOOL, NUMBER, STRING, URL, COMPARATOR)
}

COMPARATORS = (
    "equal to",
    "greater than",
    "greater than or equal to",
    "less than",
    "less than or equal to",
)

# =================================================================
# Values
# =================================================================

class Value:
    """A typed payload. Equality compares both the type and the raw data."""
    def __init__(self, type: Type, data: Any = None):
        self.type = type
        self.data = data

    @property
    def number_value(self) -> Optional[float]:
        """Numeric interpretation of the payload, or None when it is not a number."""
        # bool is a subclass of int, so check it first
        if isinstance(self.data, bool):
            return None
        if isinstance(self.data, (int, float)):
            return float(self.data)
        return None

    @property
    def string_value(self) -> str:
        d = self.data
        if d is None:
            return ""
        if isinstance(d, bool):
            return "true" if d else "false"
        if isinstance(d, float) and d.is_integer():
            return str(int(d))
        return str(d)

    def to_data(self) -> Dict[str, Any]:
        return {"type": self.type.to_data(), "data": self.data}

    @classmethod
    def from_data(cls, data: Any) -> 'Value':
        if not isinstance(data, collections.abc.Mapping) or "type" not in data:
            return UNDEFINED_VALUE
        t = Type.from_data(data["type"])
        if t == UNDEFINED:
            return UNDEFINED_VALUE
        return cls(t, data.get("data"))

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.type == other.type and self.data == other.data

    def __hash__(self):
        try:
            return hash((self.type, self.data))
        except TypeError:
            return hash(self.type)

    def __repr__(self) -> str:
        return f"Value({self.type.name}, {self.data!r})"


UNDEFINED_VALUE = Value(UNDEFINED, None)


def number(n) -> Value:
    return Value(NUMBER, n)

def string(s: str) -> Value:
    return Value(STRING, s)

def boolean(b: bool) -> Value:
    return Value(BOOL, bool(b))

def url(s: str) -> Value:
    return Value(URL, s)

def comparator(s: str) -> Value:
    return Value(COMPARATOR, s)

# =================================================================
# Scope
# =================================================================

class Scope:
    """A tree of bindings addressed by key-paths, with an optional parent scope.

    The first segment of a key-path is looked up through the parent chain
    (self, then parent); later segments walk into nested scopes or mappings.
    Reads of missing paths yield UNDEFINED_VALUE rather than raising.
    """
    def __init__(self, parent: Optional['Scope'] = None, bindings: Optional[Dict[str, Any]] = None):
        self.parent = parent
        self.bindings: Dict[str, Any] = dict(bindings or {})

    def find_owner(self, key: str) -> Optional['Scope']:
        """Finds the Scope in the parent chain that binds key."""
        cur = self
        while cur is not None:
            if key in cur.bindings:
                return cur
            cur = cur.parent
        return None

    def get(self, key_path: Sequence[str]) -> Value:
        path = list(key_path)
        if not path:
            return UNDEFINED_VALUE
        owner = self.find_owner(path[0])
        if owner is None:
            return UNDEFINED_VALUE
        node = owner.bindings[path[0]]
        for seg in path[1:]:
            node = _child(node, seg)
            if node is None:
                return UNDEFINED_VALUE
        return node if isinstance(node, Value) else UNDEFINED_VALUE

    def set(self, key_path: Sequence[str], value: Any) -> None:
        """Writes value at key_path, creating intermediate scopes as needed.

        A single name rebinds in the scope that already owns it, else binds locally.
        Intermediate segments that hold a plain value are replaced by a nested Scope.
        """
        path = list(key_path)
        if not path:
            return
        head = path[0]
        owner = self.find_owner(head) or self
        if len(path) == 1:
            owner.bindings[head] = value
            return
        container = owner.bindings.get(head)
        if not isinstance(container, (Scope, collections.abc.MutableMapping)):
            container = Scope()
            owner.bindings[head] = container
        for seg in path[1:-1]:
            nxt = _child(container, seg)
            if not isinstance(nxt, (Scope, collections.abc.MutableMapping)):
                nxt = Scope()
                _bind(container, seg, nxt)
            container = nxt
        _bind(container, path[-1], value)

    def __getitem__(self, key: str) -> Any:
        owner = self.find_owner(key)
        if owner is None:
            raise PathNotFound(key)
        return owner.bindings[key]

    def __setitem__(self, key: str, value: Any):
        if not isinstance(key, str):
            raise TypeError(f"Scope key must be a str, not {type(key)}")
        self.bindings[key] = value

    def __contains__(self, key: Any) -> bool:
        return isinstance(key, str) and self.find_owner(key) is not None

    def keys(self) -> collections.abc.KeysView:
        """Returns a view of keys in the current scope only."""
        return self.bindings.keys()

    def to_dict(self) -> Dict[str, Any]:
        """Flatten this scope and its parents; nearer bindings win. Nested scopes become dicts."""
        chain = []
        cur = self
        while cur is not None:
            chain.append(cur)
            cur = cur.parent
        out: Dict[str, Any] = {}
        for s in reversed(chain):
            for k, v in s.bindings.items():
                out[k] = v.to_dict() if isinstance(v, Scope) else v
        return out

    @classmethod
    def from_data(cls, data: Any, parent: Optional['Scope'] = None) -> 'Scope':
        """Builds a scope from {name: Value data}; nested mappings without a 'type' key become child scopes."""
        scope = cls(parent=parent)
        if isinstance(data, collections.abc.Mapping):
            for k, v in data.items():
                if isinstance(v, collections.abc.Mapping) and "type" not in v:
                    scope.bindings[str(k)] = cls.from_data(v)
                else:
                    scope.bindings[str(k)] = Value.from_data(v)
        return scope

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Scope bindings=[{keys}]{parent_id}>"


def _child(node: Any, seg: str) -> Any:
    if isinstance(node, Scope):
        owner = node.find_owner(seg)
        return owner.bindings[seg] if owner is not None else None
    if isinstance(node, collections.abc.Mapping):
        return node.get(seg)
    return None


def _bind(container: Any, seg: str, value: Any) -> None:
    if isinstance(container, Scope):
        (container.find_owner(seg) or container).bindings[seg] = value
    else:
        container[seg] = value


def as_key_path(key_path: Iterable[Any]) -> tuple:
    """Normalizes a key-path to a tuple of strings."""
    return tuple(str(seg) for seg in key_path)
