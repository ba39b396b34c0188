import pytest
from csfn.csfn_datatypes import (
    Scope, UNDEFINED, UNDEFINED_VALUE, NUMBER, STRING, URL, COMPARATOR, GENERIC_A,
    number, string, comparator,
)
from csfn.csfn_function import (
    Access, Argument, ControlFlow, Declaration, Function, Invocation, Keyword,
    Literal, Parameter, Reference, ReturnValue, Variable,
)
from csfn.csfn_registry import FunctionRegistry, register


# --- Argument Tests ---

def test_literal_resolves_to_its_value_without_scope():
    arg = Literal(number(5))
    assert arg.resolve(None) == number(5)
    assert arg.key_path is None

def test_reference_resolves_from_scope_every_time():
    scope = Scope(bindings={"x": number(1)})
    arg = Reference(NUMBER, ["x"])
    assert arg.resolve(scope) == number(1)
    scope.set(["x"], number(2))
    assert arg.resolve(scope) == number(2)
    assert arg.key_path == ("x",)

def test_reference_with_empty_path_is_undefined():
    scope = Scope(bindings={"x": number(1)})
    assert Reference(NUMBER, []).resolve(scope) is UNDEFINED_VALUE

def test_reference_type_hint_may_be_stale():
    scope = Scope(bindings={"x": string("s")})
    assert Reference(NUMBER, ["x"]).resolve(scope) == string("s")

def test_argument_equality():
    assert Literal(number(1)) == Literal(number(1))
    assert Reference(NUMBER, ["a", "b"]) == Reference(NUMBER, ("a", "b"))
    assert Reference(NUMBER, ["a"]) != Reference(STRING, ["a"])
    assert Literal(number(1)) != Reference(NUMBER, ["a"])

def test_argument_base_is_abstract():
    with pytest.raises(TypeError):
        Argument()

    class Partial(Argument):
        def resolve(self, scope):
            return UNDEFINED_VALUE

    with pytest.raises(TypeError):
        Partial()

def test_argument_records():
    assert Literal(number(5)).to_data() == {
        "type": "value",
        "value": {"type": "Number", "data": 5},
    }
    assert Reference(GENERIC_A, ["x", "y"]).to_data() == {
        "type": "identifier",
        "value": {"type": {"generic": "A"}, "path": ["x", "y"]},
    }

@pytest.mark.parametrize("arg", [
    Literal(number(5)),
    Literal(comparator("less than")),
    Reference(URL, ["base"]),
    Reference(GENERIC_A, []),
])
def test_argument_record_roundtrip(arg):
    assert Argument.from_data(arg.to_data()) == arg

@pytest.mark.parametrize("data", [
    {"type": "bogus", "value": 1},
    {"value": 1},
    "value",
    None,
])
def test_unknown_argument_record_is_undefined_literal(data):
    assert Argument.from_data(data) == Literal(UNDEFINED_VALUE)

def test_identifier_record_with_bad_path():
    arg = Argument.from_data({"type": "identifier", "value": {"type": "Number", "path": "x"}})
    assert arg == Reference(NUMBER, [])


# --- Parameter Tests ---

def test_parameter_type_facets():
    v = Parameter(name="a", type=Variable(NUMBER, Access.WRITE))
    k = Parameter(name="b", type=Keyword(COMPARATOR), label="is")
    d = Parameter(name="c", type=Declaration())
    assert (v.variable_type, v.access) == (NUMBER, Access.WRITE)
    assert (k.variable_type, k.access) == (COMPARATOR, Access.READ)
    assert (d.variable_type, d.access) == (UNDEFINED, Access.WRITE)
    assert k.label == "is"

def test_function_rejects_duplicate_parameter_names():
    with pytest.raises(ValueError):
        Function(name="Bad", parameters=[
            Parameter(name="a", type=Variable(NUMBER)),
            Parameter(name="a", type=Variable(STRING)),
        ])

def test_function_default_invoke_is_no_op():
    scope = Scope(bindings={"x": number(1)})
    fn = Function(name="Nothing")
    ret = fn.invoke({}, scope)
    assert ret == ReturnValue(scope, ControlFlow.STEP_OVER)
    assert ret.scope is scope
    assert scope.to_dict() == {"x": number(1)}


# --- Invocation Tests ---

def test_default_invocation_is_none():
    inv = Invocation()
    assert inv.name == "none"
    assert inv.arguments == {}
    assert inv.can_be_invoked

def test_can_be_invoked_requires_every_parameter():
    inv = Invocation("Assign", {"lhs": Literal(number(5))})
    assert not inv.can_be_invoked
    inv.arguments["rhs"] = Reference(NUMBER, ["x"])
    assert inv.can_be_invoked

def test_unknown_function_can_be_invoked_and_does_nothing():
    scope = Scope(bindings={"x": number(1)})
    inv = Invocation("Xyz", {"lhs": Literal(number(5))})
    assert inv.can_be_invoked
    ret = inv.run(scope)
    assert ret.control_flow is ControlFlow.STEP_OVER
    assert scope.to_dict() == {"x": number(1)}

def test_run_dispatches_by_name():
    scope = Scope(bindings={"x": number(5)})
    inv = Invocation("Assign", {"lhs": Literal(number(7)), "rhs": Reference(GENERIC_A, ["x"])})
    ret = inv.run(scope)
    assert ret.scope is scope
    assert ret.control_flow is ControlFlow.STEP_OVER
    assert scope.get(["x"]) == number(7)

def test_run_and_can_be_invoked_against_a_given_registry():
    local = FunctionRegistry({"Assign": Function(name="Assign", parameters=[
        Parameter(name="value", type=Variable(NUMBER)),
    ])})
    inv = Invocation("Assign", {"value": Literal(number(1))})
    assert inv.can_be_invoked_in(local)
    assert not inv.can_be_invoked
    assert inv.function_in(local) is local.get_function("Assign")
    scope = Scope()
    assert inv.run(scope, local).control_flow is ControlFlow.STEP_OVER
    assert scope.to_dict() == {}

def test_invocation_data_roundtrip():
    inv = Invocation("If", {
        "lhs": Reference(GENERIC_A, ["n"]),
        "cmp": Literal(comparator("equal to")),
        "rhs": Literal(number(3)),
    })
    data = inv.to_data()
    assert data["name"] == "If"
    assert set(data["arguments"]) == {"lhs", "cmp", "rhs"}
    assert Invocation.from_data(data) == inv

def test_invocation_from_partial_data():
    assert Invocation.from_data({}) == Invocation()
    assert Invocation.from_data(None) == Invocation()
    assert Invocation.from_data({"name": "Assign", "arguments": []}) == Invocation("Assign")


# --- Generic type resolution ---

def _pair(name, first, second):
    register(Function(name=name, parameters=[
        Parameter(name=first, type=Variable(GENERIC_A, Access.READ)),
        Parameter(name=second, type=Variable(GENERIC_A, Access.WRITE)),
    ]))

def test_generic_type_found_from_earlier_parameter():
    _pair("Pair", "lhs", "rhs")
    scope = Scope(bindings={"n": number(4)})
    inv = Invocation("Pair", {"lhs": Reference(GENERIC_A, ["n"])})
    assert inv.concrete_type_for_argument("rhs", scope) == NUMBER

def test_generic_type_ignores_later_parameters():
    _pair("Reversed", "rhs", "lhs")
    scope = Scope(bindings={"n": number(4)})
    inv = Invocation("Reversed", {"lhs": Reference(GENERIC_A, ["n"])})
    assert inv.concrete_type_for_argument("rhs", scope) is None

def test_generic_type_first_parameter_has_nothing_to_scan():
    scope = Scope()
    inv = Invocation("Assign", {"lhs": Literal(string("a"))})
    assert inv.concrete_type_for_argument("lhs", scope) is None
    assert inv.concrete_type_for_argument("rhs", scope) == STRING

def test_generic_type_needs_a_bound_argument():
    inv = Invocation("Assign", {})
    assert inv.concrete_type_for_argument("rhs", Scope()) is None

def test_generic_type_reflects_current_scope():
    scope = Scope()
    inv = Invocation("Assign", {"lhs": Reference(GENERIC_A, ["v"])})
    assert inv.concrete_type_for_argument("rhs", scope) == UNDEFINED
    scope.set(["v"], string("now a string"))
    assert inv.concrete_type_for_argument("rhs", scope) == STRING

def test_generic_type_skips_other_generic_ids():
    from csfn.csfn_datatypes import generic
    register(Function(name="Mixed", parameters=[
        Parameter(name="b", type=Variable(generic("B"))),
        Parameter(name="a", type=Variable(GENERIC_A)),
        Parameter(name="target", type=Variable(GENERIC_A)),
    ]))
    inv = Invocation("Mixed", {"b": Literal(string("x")), "a": Literal(number(1))})
    assert inv.concrete_type_for_argument("target", Scope()) == NUMBER

def test_non_generic_parameter_returns_declared_type():
    inv = Invocation("Append", {})
    assert inv.concrete_type_for_argument("component", Scope()) == STRING
    assert inv.concrete_type_for_argument("base", Scope()) == URL
    assert inv.concrete_type_for_argument("cmp", Scope()) is None

def test_concrete_type_for_unknown_parameter_is_none():
    inv = Invocation("If", {})
    assert inv.concrete_type_for_argument("nope", Scope()) is None
    assert inv.concrete_type_for_argument("cmp", Scope()) == COMPARATOR
