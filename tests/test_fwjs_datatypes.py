import pytest
from fwjs.fwjs_datatypes import (
    Environment, IntVal, BoolVal, NullVal, NULL, ClosureVal,
    Literal, VarRef, BinOp, Seq, FuncDecl, Op, seq_of, wrap_int,
    INT_MIN, INT_MAX,
    DuplicateVariableError, FwjsTypeError, DivisionByZero, FwjsError,
)

# --- Value Tests ---

def test_int_and_bool_are_distinct_kinds():
    assert IntVal(1) != BoolVal(True)
    assert IntVal(1).kind == "int"
    assert BoolVal(True).kind == "bool"
    assert IntVal(3) == IntVal(3)
    assert BoolVal(False) == BoolVal(False)

def test_int_val_rejects_non_int():
    with pytest.raises(TypeError):
        IntVal(True)
    with pytest.raises(TypeError):
        IntVal("3")

def test_scalar_values_are_immutable():
    v = IntVal(5)
    with pytest.raises(AttributeError):
        v.value = 6
    b = BoolVal(True)
    with pytest.raises(AttributeError):
        b.value = False

def test_null_is_a_singleton():
    assert NullVal() is NULL
    assert NULL == NullVal()
    assert NULL != IntVal(0)
    assert NULL.kind == "null"

def test_int_val_wraps_to_32_bits():
    assert IntVal(INT_MAX + 1).value == INT_MIN
    assert wrap_int(INT_MIN - 1) == INT_MAX
    assert wrap_int(-5) == -5

def test_closures_compare_by_identity():
    env = Environment()
    a = ClosureVal(["x"], VarRef("x"), env)
    b = ClosureVal(["x"], VarRef("x"), env)
    assert a == a
    assert a != b
    assert a.kind == "closure"

def test_value_str_uses_printed_form():
    assert str(IntVal(-4)) == "-4"
    assert str(BoolVal(True)) == "true"
    assert str(NULL) == "null"

# --- Environment Tests ---

def test_environment_init():
    outer = Environment()
    inner = Environment(outer=outer)
    assert inner.outer is outer
    assert outer.outer is None
    assert not inner.bindings
    assert inner.depth == 1
    assert outer.depth == 0
    assert inner.global_env() is outer

def test_get_var_and_set_var_are_local_only():
    outer = Environment()
    outer.set_var("a", IntVal(1))
    inner = Environment(outer=outer)
    assert inner.get_var("a") is None
    inner.set_var("a", IntVal(2))
    assert inner.get_var("a") == IntVal(2)
    assert outer.get_var("a") == IntVal(1)

def test_resolve_var_walks_outward():
    g = Environment()
    g.create_var("a", IntVal(1))
    mid = Environment(outer=g)
    mid.create_var("b", IntVal(2))
    inner = Environment(outer=mid)
    assert inner.resolve_var("a") == IntVal(1)
    assert inner.resolve_var("b") == IntVal(2)

@pytest.mark.parametrize("depth", [0, 1, 3])
def test_resolve_var_undeclared_is_null_at_every_depth(depth):
    env = Environment()
    for _ in range(depth):
        env = Environment(outer=env)
    assert env.resolve_var("nope") is NULL

def test_update_var_overwrites_nearest_binding():
    g = Environment()
    g.create_var("x", IntVal(1))
    mid = Environment(outer=g)
    mid.create_var("x", IntVal(10))
    inner = Environment(outer=mid)
    inner.update_var("x", IntVal(99))
    assert mid.get_var("x") == IntVal(99)
    assert g.get_var("x") == IntVal(1)
    assert inner.get_var("x") is None

def test_update_var_creates_unbound_name_in_global_scope():
    g = Environment()
    inner = Environment(outer=Environment(outer=g))
    inner.update_var("fresh", IntVal(7))
    assert g.get_var("fresh") == IntVal(7)
    assert inner.get_var("fresh") is None
    assert inner.outer.get_var("fresh") is None
    assert inner.resolve_var("fresh") == IntVal(7)

def test_create_var_rejects_local_duplicate():
    env = Environment()
    env.create_var("x", IntVal(1))
    with pytest.raises(DuplicateVariableError) as exc:
        env.create_var("x", IntVal(2))
    assert exc.value.name == "x"
    assert env.get_var("x") == IntVal(1)

def test_create_var_allows_shadowing_in_child_scope():
    g = Environment()
    g.create_var("x", IntVal(1))
    child = Environment(outer=g)
    child.create_var("x", IntVal(2))
    assert child.resolve_var("x") == IntVal(2)
    assert g.resolve_var("x") == IntVal(1)

def test_find_owner_and_contains():
    g = Environment()
    g.create_var("a", IntVal(1))
    child = Environment(outer=g)
    assert child.find_owner("a") is g
    assert child.find_owner("b") is None
    assert "a" in child
    assert "b" not in child
    assert 3 not in child
    assert list(child.keys()) == []

def test_environment_repr_lists_local_names():
    env = Environment()
    env.create_var("a", IntVal(1))
    assert "bindings=[a]" in repr(env)

# --- Closure application ---

def test_closure_apply_binds_params_in_child_of_captured_env():
    g = Environment()
    g.create_var("k", IntVal(100))
    body = BinOp(Op.ADD, VarRef("x"), VarRef("k"))
    clo = ClosureVal(["x"], body, g)
    assert clo.apply([IntVal(1)]) == IntVal(101)
    # parameters never leak into the captured scope
    assert g.get_var("x") is None

def test_closure_apply_pads_missing_and_drops_surplus_args():
    g = Environment()
    clo = ClosureVal(["a", "b"], VarRef("b"), g)
    assert clo.apply([IntVal(1)]) is NULL
    clo2 = ClosureVal(["a"], VarRef("a"), g)
    assert clo2.apply([IntVal(1), IntVal(2), IntVal(3)]) == IntVal(1)

def test_closure_apply_with_empty_body_returns_null():
    clo = ClosureVal([], None, Environment())
    assert clo.apply([]) is NULL

def test_closure_apply_repeated_param_name_fails():
    clo = ClosureVal(["a", "a"], VarRef("a"), Environment())
    with pytest.raises(DuplicateVariableError):
        clo.apply([IntVal(1), IntVal(2)])

# --- Expressions and operators ---

@pytest.mark.parametrize("text,expected", [
    ("+", Op.ADD), ("-", Op.SUB), ("*", Op.MUL), ("/", Op.DIV), ("%", Op.MOD),
    (">", Op.GT), (">=", Op.GE), ("<", Op.LT), ("<=", Op.LE), ("==", Op.EQ),
    ("ADD", Op.ADD), ("mod", Op.MOD), ("SUBTRACT", Op.SUB), ("divide", Op.DIV),
])
def test_op_lookup(text, expected):
    assert Op.lookup(text) is expected

def test_op_lookup_unknown():
    with pytest.raises(KeyError):
        Op.lookup("**")

def test_op_relational_flag():
    assert Op.EQ.is_relational
    assert not Op.MOD.is_relational

def test_expression_nodes_are_read_only():
    node = VarRef("x")
    with pytest.raises(AttributeError):
        node.name = "y"

def test_expression_equality_is_structural():
    a = BinOp(Op.ADD, Literal(IntVal(1)), VarRef("x"))
    b = BinOp(Op.ADD, Literal(IntVal(1)), VarRef("x"))
    c = BinOp(Op.SUB, Literal(IntVal(1)), VarRef("x"))
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert FuncDecl(["x"], None) == FuncDecl(("x",), None)

def test_seq_of_folds_left():
    a, b, c = VarRef("a"), VarRef("b"), VarRef("c")
    assert seq_of([]) is None
    assert seq_of([a]) is a
    assert seq_of([a, b, c]) == Seq(Seq(a, b), c)

def test_error_taxonomy_subclasses_builtins():
    assert issubclass(FwjsTypeError, TypeError)
    assert issubclass(FwjsTypeError, FwjsError)
    assert issubclass(DivisionByZero, ZeroDivisionError)
    assert issubclass(DuplicateVariableError, FwjsError)
