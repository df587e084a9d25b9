"""
A pretty-printer for FWJS values and Expression trees.
"""
from fwjs.fwjs_datatypes import (
    IntVal, BoolVal, NullVal, ClosureVal, Environment,
    Literal, VarRef, Print, BinOp, If, While, Seq, VarDecl, Assign,
    FuncDecl, FuncApp,
)


class Printer:
    """Formats FWJS values as their printed form and trees as FWJS-like source."""

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if obj is None:
            return self._pformat_empty
        # Default to Python's repr for unknown types
        return lambda o, l: repr(o)

    def _create_handlers(self):
        return {
            IntVal: self._pformat_int,
            BoolVal: self._pformat_bool,
            NullVal: self._pformat_null,
            ClosureVal: self._pformat_closure,
            Environment: lambda o, l: repr(o),
            Literal: self._pformat_literal,
            VarRef: self._pformat_var_ref,
            Print: self._pformat_print,
            BinOp: self._pformat_binop,
            If: self._pformat_if,
            While: self._pformat_while,
            Seq: self._pformat_seq,
            VarDecl: self._pformat_var_decl,
            Assign: self._pformat_assign,
            FuncDecl: self._pformat_func_decl,
            FuncApp: self._pformat_func_app,
        }

    # --- values ---

    def _pformat_int(self, obj, level):
        return str(obj.value)

    def _pformat_bool(self, obj, level):
        return 'true' if obj.value else 'false'

    def _pformat_null(self, obj, level):
        return 'null'

    def _pformat_closure(self, obj, level):
        return f"function({', '.join(obj.params)}) {{...}}"

    # --- expressions ---

    def _pformat_empty(self, obj, level):
        return ''

    def _pformat_literal(self, obj, level):
        return self.pformat(obj.value, level)

    def _pformat_var_ref(self, obj, level):
        return obj.name

    def _pformat_print(self, obj, level):
        return f"print({self.pformat(obj.expr, level)})"

    def _pformat_binop(self, obj, level):
        return f"({self.pformat(obj.left, level)} {obj.op.symbol} {self.pformat(obj.right, level)})"

    def _pformat_var_decl(self, obj, level):
        return f"var {obj.name} = {self.pformat(obj.expr, level)}"

    def _pformat_assign(self, obj, level):
        return f"{obj.name} = {self.pformat(obj.expr, level)}"

    def _pformat_seq(self, obj, level):
        # One statement per line.
        indent = self._indent_char * level
        return f";\n{indent}".join(self.pformat(s, level) for s in obj.statements())

    def _pformat_block(self, body, level):
        """Formats a body as a braced block indented one level deeper."""
        if body is None:
            return "{}"
        inner = self._indent_char * (level + 1)
        outer = self._indent_char * level
        return f"{{\n{inner}{self.pformat(body, level + 1)};\n{outer}}}"

    def _pformat_if(self, obj, level):
        out = f"if ({self.pformat(obj.cond, level)}) {self._pformat_block(obj.thn, level)}"
        if obj.els is not None:
            out += f" else {self._pformat_block(obj.els, level)}"
        return out

    def _pformat_while(self, obj, level):
        return f"while ({self.pformat(obj.cond, level)}) {self._pformat_block(obj.body, level)}"

    def _pformat_func_decl(self, obj, level):
        return f"function({', '.join(obj.params)}) {self._pformat_block(obj.body, level)}"

    def _pformat_func_app(self, obj, level):
        callee = self.pformat(obj.func, level)
        if isinstance(obj.func, FuncDecl):
            callee = f"({callee})"
        args = ", ".join(self.pformat(a, level) for a in obj.args)
        return f"{callee}({args})"
