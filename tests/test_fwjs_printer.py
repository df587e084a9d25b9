import pytest
from fwjs.fwjs_printer import Printer
from fwjs.fwjs_datatypes import (
    Environment, IntVal, BoolVal, NULL, ClosureVal,
    Literal, VarRef, Print, BinOp, If, While, Seq, VarDecl, Assign,
    FuncDecl, FuncApp, Op, seq_of,
)

@pytest.fixture
def printer():
    return Printer(indent_width=2)

I = lambda n: Literal(IntVal(n))

# Test cases: (id, object, expected_string)
FORMAT_TEST_CASES = [
    ("int", IntVal(123), "123"),
    ("negative_int", IntVal(-7), "-7"),
    ("bool_true", BoolVal(True), "true"),
    ("bool_false", BoolVal(False), "false"),
    ("null", NULL, "null"),
    ("closure", ClosureVal(["a", "b"], None, Environment()), "function(a, b) {...}"),
    ("closure_no_params", ClosureVal([], None, Environment()), "function() {...}"),
    ("literal", I(4), "4"),
    ("null_literal", Literal(NULL), "null"),
    ("var_ref", VarRef("x"), "x"),
    ("print", Print(VarRef("x")), "print(x)"),
    ("binop", BinOp(Op.ADD, I(1), BinOp(Op.MUL, I(2), VarRef("y"))), "(1 + (2 * y))"),
    ("var_decl", VarDecl("x", I(1)), "var x = 1"),
    ("assign", Assign("x", BinOp(Op.GE, VarRef("x"), I(2))), "x = (x >= 2)"),
    ("call", FuncApp(VarRef("f"), [I(1), VarRef("z")]), "f(1, z)"),
    ("call_no_args", FuncApp(VarRef("f"), []), "f()"),
    ("iife", FuncApp(FuncDecl([], None), []), "(function() {})()"),
    ("seq", Seq(Seq(VarDecl("a", I(1)), VarDecl("b", I(2))), VarRef("a")), "var a = 1;\nvar b = 2;\na"),
    ("empty_while", While(Literal(BoolVal(False)), None), "while (false) {}"),
]

@pytest.mark.parametrize("test_id, obj, expected", FORMAT_TEST_CASES, ids=[c[0] for c in FORMAT_TEST_CASES])
def test_pformat(printer, test_id, obj, expected):
    assert printer.pformat(obj) == expected

def test_if_else_block_layout(printer):
    node = If(BinOp(Op.LT, VarRef("x"), I(0)), Print(I(1)), Print(I(2)))
    assert printer.pformat(node) == (
        "if ((x < 0)) {\n"
        "  print(1);\n"
        "} else {\n"
        "  print(2);\n"
        "}"
    )

def test_nested_function_indents_body(printer):
    node = VarDecl("f", FuncDecl(["n"], seq_of([
        VarDecl("m", BinOp(Op.SUB, VarRef("n"), I(1))),
        While(BinOp(Op.GT, VarRef("m"), I(0)), Assign("m", BinOp(Op.SUB, VarRef("m"), I(1)))),
    ])))
    assert printer.pformat(node) == (
        "var f = function(n) {\n"
        "  var m = (n - 1);\n"
        "  while ((m > 0)) {\n"
        "    m = (m - 1);\n"
        "  };\n"
        "}"
    )

def test_custom_indent_width():
    p = Printer(indent_width=4)
    assert p.pformat(While(VarRef("c"), VarRef("x"))) == "while (c) {\n    x;\n}"

def test_unknown_objects_fall_back_to_repr(printer):
    assert printer.pformat([1, 2]) == "[1, 2]"

def test_expression_repr_and_str_repr():
    node = BinOp(Op.MOD, VarRef("a"), I(3))
    assert node.to_str_repr() == "(a % 3)"
    assert repr(VarRef("a")) == "VarRef(name='a')"
