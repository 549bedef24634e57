# src/minic/evaluator/functions.py
import sys

from ..environment import Builtin
from ..errors import InputError, StackOverflowError, UndefinedFunctionError, UnsupportedOperationError
from ..values import to_value
from .utils import debug_log


class FunctionEvaluatorMixin:
    """Handles function application and defines the four builtins."""

    def __init__(self, stdin=None, stdout=None, stderr=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self._pending_input = []

        self.builtins = {}
        self._register_core_builtins()

    def eval_call_expression(self, node):
        callee = node.callee

        # Arguments are computed in the caller's frame, left to right
        args = [self.eval_node(arg) for arg in node.arguments]
        debug_log("  Arguments evaluated", f"{callee.name}{tuple(args)}")

        builtin = self.env.builtin_for(callee)
        if builtin is not None:
            self.summary['builtin_calls'] += 1
            value = self.builtins[builtin](node, args)
            self.env.top.bind_stmt(node, to_value(value))
        elif callee.is_definition():
            self.call_function(callee, args, call=node)
        else:
            raise UndefinedFunctionError(f"Function '{callee.name}' is declared but never defined",
                                         stack_trace=self.env.stack_trace())

        return self.env.top.get_stmt_val(node)

    def call_function(self, fdecl, args, call=None):
        """Run a user-defined function in a fresh frame and return its value."""
        if self.env.depth > self.config.max_call_depth:
            raise StackOverflowError(
                f"Call depth exceeded {self.config.max_call_depth} calling '{fdecl.name}'",
                stack_trace=self.env.stack_trace()[-5:])

        self.summary['calls'] += 1
        frame = self.env.push_frame(fdecl)
        for i, param in enumerate(fdecl.params):
            frame.bind_decl(param, args[i] if i < len(args) else 0)

        self.eval_node(fdecl.body)
        value = self.env.pop_frame(call)
        debug_log("call_function", f"{fdecl.name} returned {value}")
        return value

    # --- BUILTIN IMPLEMENTATIONS ---

    def _register_core_builtins(self):
        def _arg(node, args):
            if len(args) != 1:
                raise UnsupportedOperationError(
                    f"{node.callee.name}() takes exactly 1 argument ({len(args)} given)")
            return args[0]

        def _get(node, args):
            if self.config.show_prompt:
                self.stderr.write(self.config.input_prompt)
                self.stderr.flush()
            return self._read_integer()

        def _print(node, args):
            value = _arg(node, args)
            self.stdout.write(f"{value}{self.config.print_separator}")
            self.stdout.flush()
            return 0

        def _malloc(node, args):
            return self.heap.allocate(_arg(node, args))

        def _free(node, args):
            self.heap.free(_arg(node, args))
            return 0

        self.builtins.update({
            Builtin.GET: _get,
            Builtin.PRINT: _print,
            Builtin.MALLOC: _malloc,
            Builtin.FREE: _free,
        })

    def _read_integer(self):
        # Whitespace-separated integers, one input line at a time
        while not self._pending_input:
            line = self.stdin.readline()
            if not line:
                raise InputError("GET: end of input", stack_trace=self.env.stack_trace())
            self._pending_input = line.split()

        token = self._pending_input.pop(0)
        try:
            return to_value(int(token))
        except ValueError:
            raise InputError(f"GET: expected an integer, got {token!r}",
                             stack_trace=self.env.stack_trace()) from None
