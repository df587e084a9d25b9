"""
FWJS: a tree-walking evaluator for a small JavaScript-like expression language.
"""
from fwjs.fwjs_datatypes import (
    Value, IntVal, BoolVal, NullVal, NULL, ClosureVal, Environment,
    Expression, Literal, VarRef, Print, BinOp, If, While, Seq, VarDecl, Assign,
    FuncDecl, FuncApp, Op, seq_of,
    FwjsError, DuplicateVariableError, FwjsTypeError, DivisionByZero,
    NotCallableError, StackExhaustion, MalformedTreeError,
)
from fwjs.fwjs_interpreter import Evaluator
from fwjs.fwjs_printer import Printer
from fwjs.fwjs_transformer import FwjsTransformer
from fwjs.fwjs_runtime import evaluate, ExecutionResult, ScriptRunner

__version__ = "0.1.0"
