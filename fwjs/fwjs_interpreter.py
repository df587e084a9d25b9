"""
The core FWJS interpreter, containing the Evaluator.
"""
import os
import sys
from typing import Any, List, Optional, TextIO

from fwjs.fwjs_datatypes import (
    Environment, Value, IntVal, BoolVal, NULL, ClosureVal,
    Expression, Literal, VarRef, Print, BinOp, If, While, Seq,
    VarDecl, Assign, FuncDecl, FuncApp, Op, wrap_int,
    FwjsTypeError, DivisionByZero, NotCallableError, MalformedTreeError,
)


def _trunc_div(a: int, b: int) -> int:
    # Python's // floors; FWJS truncates toward zero.
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _trunc_mod(a: int, b: int) -> int:
    return a - b * _trunc_div(a, b)


_ARITHMETIC = {
    Op.ADD: lambda a, b: a + b,
    Op.SUB: lambda a, b: a - b,
    Op.MUL: lambda a, b: a * b,
    Op.DIV: _trunc_div,
    Op.MOD: _trunc_mod,
}

# Print records kept per run; older records are dropped, output is not.
MAX_SIDE_EFFECTS = 10000

_RELATIONAL = {
    Op.GT: lambda a, b: a > b,
    Op.GE: lambda a, b: a >= b,
    Op.LT: lambda a, b: a < b,
    Op.LE: lambda a, b: a <= b,
    Op.EQ: lambda a, b: a == b,
}


class Evaluator:
    """The FWJS execution engine."""
    def __init__(self, stdout: Optional[TextIO] = None, max_side_effects: int = MAX_SIDE_EFFECTS):
        # None means "whatever sys.stdout is at write time" so capture works.
        self.stdout = stdout
        self.max_side_effects = max_side_effects
        self.side_effects: List[dict] = []
        self.call_stack: List[dict] = []
        self.current_node: Optional[Expression] = None

    def _push_frame(self, name, func, args, call_site_node):
        self.call_stack.append({
            'name': name,
            'func': func,
            'args': args,
            'call_site': call_site_node,
        })

    def _pop_frame(self):
        if self.call_stack:
            self.call_stack.pop()

    def _dbg(self, *parts):
        if os.environ.get("FWJS_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def _write_line(self, text: str):
        out = self.stdout if self.stdout is not None else sys.stdout
        out.write(text + "\n")
        self.side_effects.append({'topics': ['stdout'], 'message': text})
        overflow = len(self.side_effects) - self.max_side_effects
        if overflow > 0:
            del self.side_effects[:overflow]

    def eval(self, node: Expression, env: Environment) -> Value:
        """Recursive dispatcher for evaluating any Expression node."""
        self.current_node = node
        match node:
            case Literal():
                return node.value

            case VarRef():
                return env.resolve_var(node.name)

            case Print():
                value = self.eval(node.expr, env)
                from fwjs.fwjs_printer import Printer
                self._write_line(Printer().pformat(value))
                return value

            case BinOp():
                return self._eval_binop(node, env)

            case If():
                if self._eval_condition(node.cond, env, "if"):
                    return self._eval_block(node.thn, env)
                if node.els is not None:
                    return self._eval_block(node.els, env)
                return NULL

            case While():
                result: Value = NULL
                iterations = 0
                while self._eval_condition(node.cond, env, "while"):
                    result = self._eval_block(node.body, env)
                    iterations += 1
                self._dbg("while finished after", iterations, "iterations")
                return result

            case Seq():
                result = NULL
                for stmt in node.statements():
                    result = self.eval(stmt, env)
                return result

            case VarDecl():
                value = self.eval(node.expr, env)
                self.current_node = node
                env.create_var(node.name, value)
                self._dbg("declare", node.name, repr(value))
                return env.resolve_var(node.name)

            case Assign():
                value = self.eval(node.expr, env)
                env.update_var(node.name, value)
                self._dbg("assign", node.name, repr(value))
                return env.resolve_var(node.name)

            case FuncDecl():
                return ClosureVal(list(node.params), node.body, env)

            case FuncApp():
                return self._eval_call(node, env)

            case _:
                raise MalformedTreeError(f"Unknown expression node: {node!r}", node)

    def _eval_block(self, node: Optional[Expression], env: Environment) -> Value:
        # An empty block has no expression at all.
        if node is None:
            return NULL
        return self.eval(node, env)

    def _eval_condition(self, cond: Expression, env: Environment, construct: str) -> bool:
        value = self.eval(cond, env)
        if not isinstance(value, BoolVal):
            raise FwjsTypeError(
                f"{construct} condition must be a bool, got {value.kind}", value
            )
        return value.value

    def _eval_binop(self, node: BinOp, env: Environment) -> Value:
        left = self.eval(node.left, env)
        right = self.eval(node.right, env)
        self.current_node = node
        for operand in (left, right):
            if not isinstance(operand, IntVal):
                raise FwjsTypeError(
                    f"operator '{node.op.symbol}' expects int operands, got "
                    f"{left.kind} {node.op.symbol} {right.kind}",
                    operand,
                )
        a, b = left.value, right.value
        if node.op in _RELATIONAL:
            return BoolVal(_RELATIONAL[node.op](a, b))
        if node.op in (Op.DIV, Op.MOD) and b == 0:
            raise DivisionByZero(f"{a} {node.op.symbol} 0")
        return IntVal(wrap_int(_ARITHMETIC[node.op](a, b)))

    def _eval_call(self, node: FuncApp, env: Environment) -> Value:
        func = self.eval(node.func, env)
        if not isinstance(func, ClosureVal):
            self.current_node = node
            raise NotCallableError(func)
        args = [self.eval(arg, env) for arg in node.args]
        return self.call(func, args, call_site_node=node)

    def call(self, func: Any, args: List[Value], call_site_node: Optional[FuncApp] = None) -> Value:
        """Applies a ClosureVal to already evaluated arguments."""
        if not isinstance(func, ClosureVal):
            raise NotCallableError(func)
        name = "<anonymous>"
        if call_site_node is not None and isinstance(call_site_node.func, VarRef):
            name = call_site_node.func.name
        self._dbg("call", name, "argc", len(args), "params", func.params)
        if len(args) != len(func.params):
            self._dbg("arity mismatch in", name, "- padding/dropping arguments")
        self._push_frame(name, func, args, call_site_node)
        # Frames stay on the stack when the body fails so the runner can
        # report where the failure happened.
        result = func.apply(args, evaluator=self)
        self._pop_frame()
        return result
