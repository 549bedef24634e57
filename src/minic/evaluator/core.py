# src/minic/evaluator/core.py
import sys

from .. import minic_ast
from ..config import InterpreterConfig
from ..environment import Environment
from ..errors import FatalError, StackOverflowError, UnsupportedOperationError
from ..heap import Heap
from .utils import debug_log, new_summary
from .expressions import ExpressionEvaluatorMixin
from .statements import StatementEvaluatorMixin
from .functions import FunctionEvaluatorMixin

# Rough number of host frames consumed by one MiniC call
_HOST_FRAMES_PER_CALL = 40


class Evaluator(ExpressionEvaluatorMixin, StatementEvaluatorMixin, FunctionEvaluatorMixin):
    def __init__(self, config=None, stdin=None, stdout=None, stderr=None):
        self.config = config or InterpreterConfig()
        self.env = Environment()
        self.heap = Heap(limit=self.config.heap_limit)
        self.summary = new_summary()
        self.diagnostics = []
        # FunctionEvaluatorMixin wires up the I/O channels and builtins
        FunctionEvaluatorMixin.__init__(self, stdin, stdout, stderr)

    def eval_node(self, node):
        """Evaluate an expression (returns its value) or execute a statement (returns None)."""
        if node is None:
            return None

        frame = self.env.top
        node_type = type(node)

        # === STATEMENTS ===
        if isinstance(node, minic_ast.Statement):
            if frame.returned:
                debug_log("  Skipping statement after return", node_type.__name__)
                return None
            frame.pc = node
            self.summary['statements'] += 1

            if node_type == minic_ast.CompoundStmt:
                return self.eval_compound_statement(node)

            elif node_type == minic_ast.DeclStmt:
                return self.eval_decl_statement(node)

            elif node_type == minic_ast.ExpressionStatement:
                self.eval_node(node.expression)
                return None

            elif node_type == minic_ast.IfStmt:
                return self.eval_if_statement(node)

            elif node_type == minic_ast.WhileStmt:
                return self.eval_while_statement(node)

            elif node_type == minic_ast.ForStmt:
                return self.eval_for_statement(node)

            elif node_type == minic_ast.ReturnStmt:
                return self.eval_return_statement(node)

            elif node_type == minic_ast.NullStmt:
                return None

            raise UnsupportedOperationError(f"Unknown statement kind: {node_type.__name__}")

        # === EXPRESSIONS ===
        frame.pc = node
        self.summary['expressions'] += 1

        if node_type == minic_ast.IntegerLiteral or node_type == minic_ast.CharacterLiteral:
            return self.eval_literal(node)

        elif node_type == minic_ast.DeclRef:
            return self.eval_decl_ref(node)

        elif node_type == minic_ast.UnaryOperator:
            return self.eval_unary_operator(node)

        elif node_type in (minic_ast.ParenExpr, minic_ast.ImplicitCast, minic_ast.CastExpr):
            # One representation for every scalar type: pass the inner value through
            return self.eval_node(node.inner)

        elif node_type == minic_ast.SizeOfExpr:
            return self.eval_sizeof(node)

        elif node_type == minic_ast.ArraySubscript:
            return self.eval_array_subscript(node)

        elif node_type == minic_ast.BinaryOperator:
            return self.eval_binary_operator(node)

        elif node_type == minic_ast.AssignmentExpression:
            return self.eval_assignment_expression(node)

        elif node_type == minic_ast.CallExpression:
            debug_log("  CallExpression node", node.callee.name)
            return self.eval_call_expression(node)

        raise UnsupportedOperationError(f"Unknown expression kind: {node_type.__name__}")

    # ---- Program lifecycle ----------------------------------------------------

    def initialize(self, unit):
        """Resolve program handles and bind globals."""
        self.env.init(unit, self.heap, eval_init=self.eval_node)

    def run(self, unit):
        """Run ``main`` to completion and return its value.

        The call stack is back to the single global frame afterwards, whether
        the program finished or a fatal error escaped.
        """
        old_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(old_limit, self.config.max_call_depth * _HOST_FRAMES_PER_CALL))
        try:
            self.initialize(unit)
            entry = self.env.get_entry()
            debug_log("run", f"entering {entry.name}")
            return self.call_function(entry, [])
        except RecursionError:
            raise StackOverflowError("Host recursion limit exhausted",
                                     stack_trace=self._short_trace()) from None
        except FatalError as e:
            if not e.stack_trace:
                e.stack_trace = self._short_trace()
            raise
        finally:
            sys.setrecursionlimit(old_limit)
            del self.env.stack[1:]
            self.summary['max_depth'] = self.env.max_depth
            if hasattr(self.stdout, 'flush'):
                self.stdout.flush()

    def _short_trace(self):
        trace = self.env.stack_trace()
        # Last 5 frames
        return trace[-5:]


# Global Entry Point
def evaluate(unit, config=None, stdin=None, stdout=None, stderr=None):
    evaluator = Evaluator(config, stdin=stdin, stdout=stdout, stderr=stderr)
    return evaluator.run(unit)
