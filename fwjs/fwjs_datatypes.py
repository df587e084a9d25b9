"""
Defines the core data types for the FWJS evaluator.

This module provides the runtime values, the lexical Environment (scope
chain), the error taxonomy, and the Expression node classes that the
Evaluator walks.
"""

import enum
from abc import ABC
from typing import List, Dict, Any, Optional

INT_MIN = -2**31
INT_MAX = 2**31 - 1


def wrap_int(n: int) -> int:
    """Wraps a Python int into the 32-bit two's-complement range."""
    return ((n - INT_MIN) % 2**32) + INT_MIN


# =================================================================
# Errors
# =================================================================

class FwjsError(Exception):
    """Base class for every failure raised while building or evaluating a tree."""
    kind = "FwjsError"


class DuplicateVariableError(FwjsError):
    kind = "DuplicateVariableError"

    def __init__(self, name: str):
        super().__init__(f"Variable '{name}' is already declared in this scope")
        self.name = name


class FwjsTypeError(FwjsError, TypeError):
    """An operator or control construct received a value of the wrong kind."""
    kind = "TypeError"

    def __init__(self, message: str, value: Optional['Value'] = None):
        super().__init__(message)
        self.value = value


class DivisionByZero(FwjsError, ZeroDivisionError):
    kind = "DivisionByZero"


class NotCallableError(FwjsError):
    kind = "NotCallableError"

    def __init__(self, value: 'Value'):
        from fwjs.fwjs_printer import Printer
        super().__init__(f"Value is not a function: {Printer().pformat(value)}")
        self.value = value


class StackExhaustion(FwjsError):
    """Raised when FWJS recursion exhausts the host stack. Never recoverable."""
    kind = "StackExhaustion"


class MalformedTreeError(FwjsError, ValueError):
    """The Expression tree handed to the evaluator is not well formed."""
    kind = "MalformedTree"

    def __init__(self, message: str, node: Any = None):
        super().__init__(message)
        self.node = node


# =================================================================
# Values
# =================================================================

class Value(ABC):
    """Abstract base class for all FWJS runtime values."""
    kind = "value"

    def __str__(self) -> str:
        from fwjs.fwjs_printer import Printer
        return Printer().pformat(self)


class IntVal(Value):
    """A 32-bit signed integer."""
    kind = "int"
    __slots__ = ("value",)

    def __init__(self, value: int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"IntVal requires an int, not {type(value).__name__}")
        object.__setattr__(self, "value", wrap_int(value))

    def __setattr__(self, key, value):
        raise AttributeError("IntVal is immutable")

    def __repr__(self) -> str:
        return f"IntVal({self.value})"

    def __eq__(self, other):
        return isinstance(other, IntVal) and self.value == other.value

    def __hash__(self):
        return hash(("int", self.value))


class BoolVal(Value):
    kind = "bool"
    __slots__ = ("value",)

    def __init__(self, value: bool):
        object.__setattr__(self, "value", bool(value))

    def __setattr__(self, key, value):
        raise AttributeError("BoolVal is immutable")

    def __repr__(self) -> str:
        return f"BoolVal({self.value})"

    def __eq__(self, other):
        return isinstance(other, BoolVal) and self.value == other.value

    def __hash__(self):
        return hash(("bool", self.value))


class NullVal(Value):
    """Marker for "no value" and for undefined variables. Use the NULL instance."""
    kind = "null"
    _instance: Optional['NullVal'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NULL"

    def __eq__(self, other):
        return isinstance(other, NullVal)

    def __hash__(self):
        return hash("null")


NULL = NullVal()


class ClosureVal(Value):
    """A function value.

    Bundles the parameter names and body with the Environment that was
    active when the function literal was evaluated. The Environment is
    held by reference, so later changes to it are visible to the body.
    """
    kind = "closure"

    def __init__(self, params: List[str], body: Optional['Expression'], env: 'Environment'):
        self.params = list(params)
        self.body = body
        self.env = env

    def apply(self, args: List[Value], evaluator=None) -> Value:
        """Binds args positionally in a fresh child Environment and runs the body.

        Missing trailing parameters are bound to NULL; surplus arguments are
        dropped.
        """
        if evaluator is None:
            from fwjs.fwjs_interpreter import Evaluator
            evaluator = Evaluator()
        call_env = Environment(outer=self.env)
        for i, param in enumerate(self.params):
            call_env.create_var(param, args[i] if i < len(args) else NULL)
        if self.body is None:
            return NULL
        return evaluator.eval(self.body, call_env)

    def __repr__(self) -> str:
        return f"<ClosureVal params={self.params!r}>"


# =================================================================
# Environment
# =================================================================

class Environment:
    """A single scope in the lexical scope chain.

    Each Environment maps names to Values and points at most at one outer
    Environment. Nothing points inward, so the chain is acyclic and a
    closure keeps every scope it can see alive just by holding its
    innermost one.
    """
    def __init__(self, outer: Optional['Environment'] = None):
        self.bindings: Dict[str, Value] = {}
        self._outer = outer

    @property
    def outer(self) -> Optional['Environment']:
        return self._outer

    @property
    def depth(self) -> int:
        """Number of scopes between this one and the global scope."""
        n = 0
        cur = self._outer
        while cur is not None:
            n += 1
            cur = cur._outer
        return n

    def global_env(self) -> 'Environment':
        cur = self
        while cur._outer is not None:
            cur = cur._outer
        return cur

    # --- local primitives ---

    def get_var(self, name: str) -> Optional[Value]:
        """Local lookup only. Returns None (not NULL) when unbound here."""
        return self.bindings.get(name)

    def set_var(self, name: str, value: Value) -> None:
        """Local write only, overwriting any existing local binding."""
        self.bindings[name] = value

    # --- chain operations ---

    def find_owner(self, name: str) -> Optional['Environment']:
        """Finds the nearest Environment in the chain that binds name."""
        cur = self
        while cur is not None:
            if name in cur.bindings:
                return cur
            cur = cur._outer
        return None

    def resolve_var(self, name: str) -> Value:
        """Returns the nearest binding of name, or NULL if no scope binds it."""
        owner = self.find_owner(name)
        if owner is None:
            return NULL
        return owner.bindings[name]

    def update_var(self, name: str, value: Value) -> None:
        """Overwrites the nearest existing binding of name.

        If no scope binds name, the variable is created in the global scope,
        not the current one.
        """
        owner = self.find_owner(name)
        if owner is None:
            owner = self.global_env()
        owner.set_var(name, value)

    def create_var(self, name: str, value: Value) -> None:
        """Declares name in this scope. Outer scopes are not consulted."""
        if name in self.bindings:
            raise DuplicateVariableError(name)
        self.set_var(name, value)

    def __contains__(self, name: Any) -> bool:
        return isinstance(name, str) and self.find_owner(name) is not None

    def keys(self):
        """Returns a view of names bound in this scope only."""
        return self.bindings.keys()

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        outer_id = f", outer=#{id(self._outer)}" if self._outer else ""
        return f"<Environment bindings=[{keys}]{outer_id}>"


# =================================================================
# Expressions
# =================================================================

class Op(enum.Enum):
    """Binary operators, valued by their source symbol."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    EQ = "=="

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_relational(self) -> bool:
        return self in (Op.GT, Op.GE, Op.LT, Op.LE, Op.EQ)

    @classmethod
    def lookup(cls, text: str) -> 'Op':
        """Accepts either a symbol ('+') or a member name ('ADD', 'add')."""
        for op in cls:
            if text == op.value or text.upper() == op.name:
                return op
        # Long names used by some front ends.
        aliases = {"SUBTRACT": cls.SUB, "MULTIPLY": cls.MUL, "DIVIDE": cls.DIV}
        if text.upper() in aliases:
            return aliases[text.upper()]
        raise KeyError(text)


class Expression(ABC):
    """Abstract base class for all FWJS AST nodes.

    Nodes are immutable once built; a function body is shared by every
    invocation of the closures created from it.
    """
    _fields: tuple = ()

    def evaluate(self, env: Environment) -> Value:
        from fwjs.fwjs_interpreter import Evaluator
        return Evaluator().eval(self, env)

    def __setattr__(self, key, value):
        if key in self._fields and key in self.__dict__:
            raise AttributeError(f"{type(self).__name__}.{key} is read-only")
        super().__setattr__(key, value)

    def to_str_repr(self) -> str:
        from fwjs.fwjs_printer import Printer
        return Printer().pformat(self)

    def __repr__(self) -> str:
        parts = ", ".join(f"{f}={getattr(self, f)!r}" for f in self._fields)
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.to_str_repr()))


class Literal(Expression):
    """A constant value (int, bool or null)."""
    _fields = ("value",)

    def __init__(self, value: Value):
        self.value = value


class VarRef(Expression):
    _fields = ("name",)

    def __init__(self, name: str):
        self.name = name


class Print(Expression):
    _fields = ("expr",)

    def __init__(self, expr: Expression):
        self.expr = expr


class BinOp(Expression):
    _fields = ("op", "left", "right")

    def __init__(self, op: Op, left: Expression, right: Expression):
        self.op = op
        self.left = left
        self.right = right


class If(Expression):
    """if-then-else. The else branch is optional; a missing branch yields NULL."""
    _fields = ("cond", "thn", "els")

    def __init__(self, cond: Expression, thn: Optional[Expression], els: Optional[Expression] = None):
        self.cond = cond
        self.thn = thn
        self.els = els


class While(Expression):
    _fields = ("cond", "body")

    def __init__(self, cond: Expression, body: Optional[Expression]):
        self.cond = cond
        self.body = body


class Seq(Expression):
    _fields = ("first", "second")

    def __init__(self, first: Expression, second: Expression):
        self.first = first
        self.second = second

    def statements(self) -> List[Expression]:
        """Flattens the left-nested chain rooted here into source order.

        Walks the spine iteratively so program length never costs stack depth.
        """
        stmts = []
        node: Expression = self
        while isinstance(node, Seq):
            stmts.append(node.second)
            node = node.first
        stmts.append(node)
        stmts.reverse()
        return stmts


class VarDecl(Expression):
    _fields = ("name", "expr")

    def __init__(self, name: str, expr: Expression):
        self.name = name
        self.expr = expr


class Assign(Expression):
    _fields = ("name", "expr")

    def __init__(self, name: str, expr: Expression):
        self.name = name
        self.expr = expr


class FuncDecl(Expression):
    """A function literal; evaluates to a ClosureVal over the current Environment."""
    _fields = ("params", "body")

    def __init__(self, params: List[str], body: Optional[Expression]):
        self.params = tuple(params)
        self.body = body


class FuncApp(Expression):
    _fields = ("func", "args")

    def __init__(self, func: Expression, args: List[Expression]):
        self.func = func
        self.args = tuple(args)


def seq_of(exprs: List[Expression]) -> Optional[Expression]:
    """Folds a list of expressions left into nested Seq nodes; None if empty."""
    result: Optional[Expression] = None
    for expr in exprs:
        result = expr if result is None else Seq(result, expr)
    return result
