"""
Transforms decoded tree documents (tagged dicts) into FWJS Expression nodes,
and encodes Expression nodes back into tagged dicts.
"""

from fwjs.fwjs_datatypes import (
    IntVal, BoolVal, NULL, NullVal, INT_MIN, INT_MAX,
    Expression, Literal, VarRef, Print, BinOp, If, While, Seq, VarDecl, Assign,
    FuncDecl, FuncApp, Op, seq_of, MalformedTreeError,
)


class FwjsTransformer:
    def _require(self, node: dict, key: str):
        if key not in node or node[key] is None:
            raise MalformedTreeError(f"'{node.get('tag')}' node is missing required field '{key}'", node)
        return node[key]

    def _name(self, node: dict, key: str = 'name') -> str:
        name = self._require(node, key)
        if not isinstance(name, str) or not name:
            raise MalformedTreeError(f"'{node.get('tag')}' node field '{key}' must be a non-empty string", node)
        return name

    def _int_literal(self, value, node) -> Literal:
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedTreeError(f"int literal must be an integer, got {value!r}", node)
        if not INT_MIN <= value <= INT_MAX:
            raise MalformedTreeError(f"int literal {value} is outside the 32-bit range", node)
        return Literal(IntVal(value))

    def _expr(self, node: dict, key: str) -> Expression:
        """Transforms a required child that must produce an expression."""
        out = self.transform(self._require(node, key))
        if out is None:
            raise MalformedTreeError(f"'{node.get('tag')}' node field '{key}' must not be empty", node)
        return out

    def _block(self, node: dict, key: str):
        """Transforms an optional child; an empty block yields None."""
        if key not in node or node[key] is None:
            return None
        return self.transform(node[key])

    def transform(self, node: object):
        # Lists: a block of statements folded into a sequence
        if isinstance(node, list):
            stmts = (self.transform(n) for n in node if n is not None)
            return seq_of([s for s in stmts if s is not None])

        # Bare scalars are literal shorthand
        if node is None:
            return Literal(NULL)
        if isinstance(node, bool):
            return Literal(BoolVal(node))
        if isinstance(node, int):
            return self._int_literal(node, node)
        if isinstance(node, Expression):
            return node
        if not isinstance(node, dict):
            raise MalformedTreeError(f"Unexpected tree element: {node!r}", node)

        if 'tag' not in node:
            raise MalformedTreeError(f"Tree node has no 'tag': {node!r}", node)
        # YAML reads an unquoted `tag: null` as None.
        tag = 'null' if node['tag'] is None else node['tag']
        match tag:
            # Literals
            case 'int':
                return self._int_literal(self._require(node, 'value'), node)
            case 'bool':
                value = self._require(node, 'value')
                if not isinstance(value, bool):
                    raise MalformedTreeError(f"bool literal must be true or false, got {value!r}", node)
                return Literal(BoolVal(value))
            case 'null':
                return Literal(NULL)

            # Structural containers
            case 'program' | 'block':
                body = node.get('body') or []
                if not isinstance(body, list):
                    raise MalformedTreeError(f"'{tag}' body must be a list", node)
                return self.transform(body)
            case 'seq':
                return Seq(self._expr(node, 'first'), self._expr(node, 'second'))

            # Variables
            case 'var':
                return VarRef(self._name(node))
            case 'vardecl':
                return VarDecl(self._name(node), self._expr(node, 'expr'))
            case 'assign':
                return Assign(self._name(node), self._expr(node, 'expr'))

            # Operators and control flow
            case 'binop':
                op_text = self._require(node, 'op')
                try:
                    op = Op.lookup(str(op_text))
                except KeyError:
                    raise MalformedTreeError(f"Unknown operator: {op_text!r}", node)
                return BinOp(op, self._expr(node, 'left'), self._expr(node, 'right'))
            case 'if':
                if 'then' not in node:
                    raise MalformedTreeError("'if' node is missing required field 'then'", node)
                return If(self._expr(node, 'cond'), self._block(node, 'then'), self._block(node, 'else'))
            case 'while':
                if 'body' not in node:
                    raise MalformedTreeError("'while' node is missing required field 'body'", node)
                return While(self._expr(node, 'cond'), self._block(node, 'body'))
            case 'print':
                return Print(self._expr(node, 'expr'))

            # Functions
            case 'function':
                params = node.get('params') or []
                if not isinstance(params, list) or not all(isinstance(p, str) and p for p in params):
                    raise MalformedTreeError("'function' params must be a list of names", node)
                return FuncDecl(params, self._block(node, 'body'))
            case 'call':
                args = node.get('args') or []
                if not isinstance(args, list):
                    raise MalformedTreeError("'call' args must be a list", node)
                arg_nodes = []
                for a in args:
                    out = self.transform(a)
                    if out is None:
                        raise MalformedTreeError("'call' argument must not be empty", node)
                    arg_nodes.append(out)
                return FuncApp(self._expr(node, 'func'), arg_nodes)

            case _:
                raise MalformedTreeError(f"Unknown node tag: {tag!r}", node)

    # --- encoding ---

    def to_data(self, expr) -> object:
        """Encodes an Expression (or None for an empty block) as tagged dicts."""
        match expr:
            case None:
                return None
            case Literal(value=IntVal() as v):
                return {'tag': 'int', 'value': v.value}
            case Literal(value=BoolVal() as v):
                return {'tag': 'bool', 'value': v.value}
            case Literal(value=NullVal()):
                return {'tag': 'null'}
            case VarRef():
                return {'tag': 'var', 'name': expr.name}
            case Print():
                return {'tag': 'print', 'expr': self.to_data(expr.expr)}
            case BinOp():
                return {'tag': 'binop', 'op': expr.op.symbol,
                        'left': self.to_data(expr.left), 'right': self.to_data(expr.right)}
            case If():
                out = {'tag': 'if', 'cond': self.to_data(expr.cond), 'then': self.to_data(expr.thn)}
                if expr.els is not None:
                    out['else'] = self.to_data(expr.els)
                return out
            case While():
                return {'tag': 'while', 'cond': self.to_data(expr.cond), 'body': self.to_data(expr.body)}
            case Seq():
                # A statement chain encodes flat; the list folds back to the same chain.
                return {'tag': 'block', 'body': [self.to_data(s) for s in expr.statements()]}
            case VarDecl():
                return {'tag': 'vardecl', 'name': expr.name, 'expr': self.to_data(expr.expr)}
            case Assign():
                return {'tag': 'assign', 'name': expr.name, 'expr': self.to_data(expr.expr)}
            case FuncDecl():
                return {'tag': 'function', 'params': list(expr.params), 'body': self.to_data(expr.body)}
            case FuncApp():
                return {'tag': 'call', 'func': self.to_data(expr.func),
                        'args': [self.to_data(a) for a in expr.args]}
            case _:
                raise MalformedTreeError(f"Cannot encode {expr!r}", expr)
