import pytest
from csfn.csfn_datatypes import (
    Scope, Type, UNDEFINED_VALUE, GENERIC_A, NUMBER, STRING, URL,
    boolean, comparator, number, string, url,
)
from csfn.csfn_function import Access, Function, Invocation, Literal, Parameter, Reference, Variable
from csfn.csfn_printer import Printer
from csfn.csfn_registry import FunctionRegistry, get_function, register


@pytest.fixture
def printer():
    return Printer()


@pytest.mark.parametrize("obj,expected", [
    (number(7), "7"),
    (number(2.5), "2.5"),
    (string("p"), '"p"'),
    (string('say "hi"'), '"say \\"hi\\""'),
    (comparator("less than"), '"less than"'),
    (url("http://x.com/"), "<http://x.com/>"),
    (boolean(True), "true"),
    (UNDEFINED_VALUE, "undefined"),
    (NUMBER, "Number"),
    (GENERIC_A, "<A>"),
    (Literal(number(1)), "1"),
    (Reference(NUMBER, ["a", "b"]), "a.b"),
    (Reference(NUMBER, []), "?"),
])
def test_pformat_values_and_arguments(printer, obj, expected):
    assert printer.pformat(obj) == expected

def test_pformat_scope(printer):
    scope = Scope(bindings={"x": number(1)})
    scope.set(["o", "k"], string("v"))
    assert printer.pformat(scope) == '{x: 1, o: {k: "v"}}'

def test_pformat_function_signature(printer):
    assert printer.pformat(get_function("Append")) == "Append(component: String, base: URL)"
    assert printer.pformat(get_function("If")) == "If(lhs: <A>, cmp: Comparator, rhs: <A>)"

def test_sentence_template_uses_labels(printer):
    assert printer.sentence_template(get_function("Assign")) == "{{function}} {{p0}} {{l1}} {{p1}}"

def test_pformat_with_awkward_names_and_labels(printer):
    # A parameter called "function" and a label holding Mustache markup
    fn = Function(name="Pipe", parameters=[
        Parameter(name="function", type=Variable(STRING)),
        Parameter(name="into", type=Variable(GENERIC_A, Access.WRITE), label="{{into}} &"),
    ])
    register(fn)
    inv = Invocation("Pipe", {"function": Literal(string("f")), "into": Reference(GENERIC_A, ["y"])})
    assert printer.pformat(inv) == 'Pipe "f" {{into}} & y'

def test_pformat_uses_its_own_registry():
    local = FunctionRegistry({"Say": Function(name="Say", parameters=[
        Parameter(name="what", type=Variable(STRING), label="out loud"),
    ])})
    inv = Invocation("Say", {"what": Literal(string("hi"))})
    assert Printer(registry=local).pformat(inv) == 'Say out loud "hi"'
    assert Printer().pformat(inv) == "Function Say not found"

def test_pformat_assign_sentence(printer):
    inv = Invocation("Assign", {"lhs": Literal(number(7)), "rhs": Reference(GENERIC_A, ["x"])})
    assert printer.pformat(inv) == "Assign 7 to x"

def test_pformat_if_sentence(printer):
    inv = Invocation("If", {
        "lhs": Reference(GENERIC_A, ["n"]),
        "cmp": Literal(comparator("greater than")),
        "rhs": Literal(number(3)),
    })
    assert printer.pformat(inv) == 'If n is "greater than" 3'

def test_pformat_append_sentence(printer):
    inv = Invocation("Append", {"component": Literal(string("p")), "base": Reference(URL, ["base"])})
    assert printer.pformat(inv) == 'Append the component "p" to base'

def test_pformat_sentence_does_not_escape_markup(printer):
    inv = Invocation("Assign", {"lhs": Literal(string("<b>&")), "rhs": Reference(GENERIC_A, ["x"])})
    assert printer.pformat(inv) == 'Assign "<b>&" to x'

def test_pformat_missing_argument(printer):
    inv = Invocation("Assign", {"lhs": Literal(number(7))})
    assert printer.pformat(inv) == "Assign 7 to ___"

def test_pformat_unknown_function(printer):
    assert printer.pformat(Invocation("Xyz")) == "Function Xyz not found"

def test_pformat_unknown_object_falls_back_to_repr(printer):
    assert printer.pformat(Type) == repr(Type)
