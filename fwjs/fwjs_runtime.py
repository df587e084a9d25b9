# fwjs_runtime.py

import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Literal, Dict, TextIO

from fwjs.fwjs_datatypes import Environment, Expression, Value, FwjsError, StackExhaustion, MalformedTreeError
from fwjs.fwjs_interpreter import Evaluator
from fwjs.fwjs_printer import Printer
from fwjs.fwjs_serialize import deserialize
from fwjs.fwjs_transformer import FwjsTransformer

# Frames shown at each end of a long FWJS stacktrace.
STACKTRACE_EDGE = 8


def evaluate(expr: Expression, env: Optional[Environment] = None, *, evaluator: Optional[Evaluator] = None) -> Value:
    """Evaluates expr against env (a fresh global Environment by default).

    Raises an FwjsError on failure. Host stack exhaustion from unbounded FWJS
    recursion is reported as StackExhaustion; the run cannot be resumed.
    """
    if env is None:
        env = Environment()
    if evaluator is None:
        evaluator = Evaluator()
    try:
        return evaluator.eval(expr, env)
    except RecursionError as e:
        depth = len(evaluator.call_stack)
        raise StackExhaustion(f"maximum recursion depth exceeded after {depth} nested calls") from e


def _recursion_limit_from_env() -> Optional[int]:
    raw = os.environ.get("FWJS_RECURSION_LIMIT")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"FWJS_RECURSION_LIMIT must be an integer, got {raw!r}")


# ===================================================================
# Script Execution
# ===================================================================

@dataclass
class ExecutionResult:
    """The structured result of a program run."""
    status: Literal['success', 'error']
    value: Optional[Value] = None
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    side_effects: List[Dict] = field(default_factory=list)

    @property
    def output(self) -> List[str]:
        """Lines written by print, in order."""
        return [e.get('message', '') for e in self.side_effects if e.get('topics') == ['stdout']]

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error_message or "Unknown error")


class ScriptRunner:
    """Transforms and executes FWJS trees against one global Environment."""

    def __init__(self, stdout: Optional[TextIO] = None, recursion_limit: Optional[int] = None):
        self.global_env = Environment()
        self.evaluator = Evaluator(stdout=stdout)
        self.transformer = FwjsTransformer()
        self.printer = Printer()
        self.recursion_limit = recursion_limit if recursion_limit is not None else _recursion_limit_from_env()

    def _format_runtime_error(self, e: FwjsError) -> str:
        msg = f"{e.kind}: {e}"
        node = self.evaluator.current_node
        if node is not None and not isinstance(e, StackExhaustion):
            msg += f"\nAt: {self.printer.pformat(node)}"
        st = self._format_stacktrace()
        if st:
            msg += "\n" + st
        return msg

    def _format_stacktrace(self) -> str:
        stack = self.evaluator.call_stack
        if not stack:
            return ""

        def fmt(frame):
            args = " ".join(self.printer.pformat(a) for a in frame.get('args') or [])
            name = frame.get('name') or '<anonymous>'
            return f"({name} {args})" if args else f"({name})"

        if len(stack) > 2 * STACKTRACE_EDGE:
            head = [fmt(f) for f in stack[:STACKTRACE_EDGE]]
            tail = [fmt(f) for f in stack[-STACKTRACE_EDGE:]]
            skipped = len(stack) - 2 * STACKTRACE_EDGE
            frames = head + [f"... {skipped} more ..."] + tail
        else:
            frames = [fmt(f) for f in stack]
        return "FWJS stacktrace: " + " ".join(frames)

    def _set_recursion_limit(self, limit: int):
        try:
            sys.setrecursionlimit(limit)
        except RecursionError as e:
            raise StackExhaustion(f"recursion limit {limit} is below the current stack depth") from e

    def run(self, expr: Optional[Expression]) -> ExecutionResult:
        """Evaluates a tree; FWJS failures become error results."""
        self.evaluator.side_effects = []
        self.evaluator.call_stack.clear()
        self.evaluator.current_node = None
        if expr is None:
            return ExecutionResult(status='success', value=None, side_effects=self.evaluator.side_effects)

        prev_limit = sys.getrecursionlimit()
        try:
            if self.recursion_limit:
                self._set_recursion_limit(self.recursion_limit)
            value = evaluate(expr, self.global_env, evaluator=self.evaluator)
        except FwjsError as e:
            return ExecutionResult(
                status='error',
                error_message=self._format_runtime_error(e),
                error_kind=e.kind,
                side_effects=self.evaluator.side_effects,
            )
        finally:
            if self.recursion_limit:
                sys.setrecursionlimit(prev_limit)

        return ExecutionResult(status='success', value=value, side_effects=self.evaluator.side_effects)

    def handle_document(self, source: str, fmt: Optional[str] = None, content_type: Optional[str] = None) -> ExecutionResult:
        """The main entry point to execute a JSON/YAML tree document."""
        try:
            data = deserialize(source, fmt=fmt, content_type=content_type)
        except (ValueError, RecursionError) as e:
            return ExecutionResult(status='error', error_message=f"ParseError: {e}", error_kind='ParseError')
        try:
            expr = self.transformer.transform(data)
        except FwjsError as e:
            return ExecutionResult(status='error', error_message=f"{e.kind}: {e}", error_kind=e.kind)
        except RecursionError:
            err = MalformedTreeError("tree document is nested too deeply")
            return ExecutionResult(status='error', error_message=f"{err.kind}: {err}", error_kind=err.kind)
        return self.run(expr)
