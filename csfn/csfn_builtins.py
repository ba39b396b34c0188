"""
Built-in functions: none, Assign, If and Append.

Each built-in resolves its inputs, writes at most one Reference slot, and
reports a control-flow directive. Write targets given as Literals are
skipped without raising.
"""
from csfn.csfn_config import _dbg
from csfn.csfn_datatypes import (
    Scope, Value, COMPARATOR, GENERIC_A, STRING, URL, UNDEFINED_VALUE, url
)
from csfn.csfn_function import (
    Access, Argument, ControlFlow, Function, Keyword, Literal, NamedArguments,
    Parameter, Reference, ReturnValue, Variable
)

_MISSING = Literal(UNDEFINED_VALUE)


def _arg(arguments: NamedArguments, name: str) -> Argument:
    return arguments.get(name, _MISSING)


def none_function() -> Function:
    return Function(name="none", parameters=[], has_body=False)

# -----------------------------------------------------------------
# Assign
# -----------------------------------------------------------------

def _assign(arguments: NamedArguments, scope: Scope) -> ReturnValue:
    lhs = _arg(arguments, "lhs").resolve(scope)
    rhs = _arg(arguments, "rhs")
    if not isinstance(rhs, Reference):
        _dbg("Assign", "skip: rhs is not a reference", rhs)
        return ReturnValue(scope, ControlFlow.STEP_OVER)
    scope.set(rhs.key_path, lhs)
    return ReturnValue(scope, ControlFlow.STEP_OVER)


ASSIGN = Function(
    name="Assign",
    parameters=[
        Parameter(name="lhs", type=Variable(GENERIC_A, Access.READ)),
        Parameter(name="rhs", type=Variable(GENERIC_A, Access.WRITE), label="to"),
    ],
    has_body=False,
    invoke=_assign,
)

# -----------------------------------------------------------------
# If
# -----------------------------------------------------------------

def _same_payload(a, b) -> bool:
    # Booleans only equal booleans, so True is not 1
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _compare(op: str, lhs: Value, rhs: Value) -> bool:
    if op == "equal to":
        return _same_payload(lhs.data, rhs.data)
    a, b = lhs.number_value, rhs.number_value
    # Non-numeric operands never satisfy an ordering comparison
    if a is None or b is None:
        return False
    match op:
        case "greater than":
            return a > b
        case "greater than or equal to":
            return a >= b
        case "less than":
            return a < b
        case "less than or equal to":
            return a <= b
    return False


def _if(arguments: NamedArguments, scope: Scope) -> ReturnValue:
    lhs = _arg(arguments, "lhs").resolve(scope)
    cmp = _arg(arguments, "cmp").resolve(scope)
    rhs = _arg(arguments, "rhs").resolve(scope)

    if cmp.type != COMPARATOR:
        _dbg("If", "cmp is not a comparator", cmp)
        return ReturnValue(scope, ControlFlow.STEP_OVER)

    if _compare(cmp.string_value, lhs, rhs):
        return ReturnValue(scope, ControlFlow.STEP_INTO)
    return ReturnValue(scope, ControlFlow.STEP_OVER)


IF = Function(
    name="If",
    parameters=[
        Parameter(name="lhs", type=Variable(GENERIC_A, Access.READ)),
        Parameter(name="cmp", type=Keyword(COMPARATOR), label="is"),
        Parameter(name="rhs", type=Variable(GENERIC_A, Access.READ)),
    ],
    has_body=True,
    invoke=_if,
)

# -----------------------------------------------------------------
# Append
# -----------------------------------------------------------------

def _append(arguments: NamedArguments, scope: Scope) -> ReturnValue:
    component = _arg(arguments, "component").resolve(scope)
    base_arg = _arg(arguments, "base")
    base = base_arg.resolve(scope)
    if not isinstance(base_arg, Reference):
        _dbg("Append", "skip: base is not a reference", base_arg)
        return ReturnValue(scope, ControlFlow.STEP_OVER)
    scope.set(base_arg.key_path, url(base.string_value + component.string_value))
    return ReturnValue(scope, ControlFlow.STEP_OVER)


APPEND = Function(
    name="Append",
    parameters=[
        Parameter(name="component", type=Variable(STRING, Access.READ), label="the component"),
        Parameter(name="base", type=Variable(URL, Access.WRITE), label="to"),
    ],
    has_body=False,
    invoke=_append,
)


def builtin_functions() -> dict:
    """The seed table for a fresh registry."""
    return {
        "none": none_function(),
        "Append": APPEND,
        "Assign": ASSIGN,
        "If": IF,
    }
