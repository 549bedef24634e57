# src/minic/evaluator/expressions.py
import logging

from ..minic_ast import ArraySubscript, DeclRef, ParenExpr, UnaryOperator
from ..errors import DivisionByZeroError, UnsupportedOperationError
from ..values import SLOT_SIZE, c_divmod, from_bool, scale, to_value
from .utils import debug_log

logger = logging.getLogger(__name__)


def _strip_parens(node):
    while isinstance(node, ParenExpr):
        node = node.inner
    return node


class ExpressionEvaluatorMixin:
    """Handles evaluation of expressions: Literals, Math, Memory access, Assignment."""

    def _memo(self, node, value):
        return self.env.top.bind_stmt(node, value)

    def eval_literal(self, node):
        value = node.value
        if isinstance(value, str):
            value = ord(value)
        return self._memo(node, to_value(value))

    def eval_decl_ref(self, node):
        val = self.env.lookup(node.decl)
        debug_log("eval_decl_ref", f"{node.decl.name} = {val}")
        return self._memo(node, val)

    def eval_unary_operator(self, node):
        operator = node.operator
        if operator == "&":
            return self._memo(node, self.eval_address_of(node.operand))

        operand = self.eval_node(node.operand)
        if operator == "-":
            value = to_value(-operand)
        elif operator == "+":
            value = operand
        elif operator == "*":
            value = self.heap.read_slot(operand)
        else:
            raise UnsupportedOperationError(f"Unknown unary operator: {operator}")
        return self._memo(node, value)

    def eval_address_of(self, operand):
        target = _strip_parens(operand)
        if isinstance(target, ArraySubscript):
            return self.element_address(target)
        if isinstance(target, UnaryOperator) and target.operator == "*":
            return self.eval_node(target.operand)
        if isinstance(target, DeclRef) and target.decl.ctype.is_array():
            return self.eval_node(target)
        raise UnsupportedOperationError(f"Cannot take the address of {target}")

    def eval_sizeof(self, node):
        # Every scalar kind occupies one slot
        return self._memo(node, SLOT_SIZE)

    def element_address(self, node):
        base = self.eval_node(node.base)
        index = self.eval_node(node.index)
        return to_value(base + scale(index))

    def eval_array_subscript(self, node):
        address = self.element_address(node)
        return self._memo(node, self.heap.read_slot(address))

    # ---- Binary operators ---------------------------------------------------

    def eval_binary_operator(self, node):
        # Both operands first, left to right
        left = self.eval_node(node.left)
        right = self.eval_node(node.right)
        operator = node.operator
        left_ptr = node.left.ctype.is_pointer_like()
        right_ptr = node.right.ctype.is_pointer_like()

        if operator == "+":
            if left_ptr and not right_ptr:
                right = scale(right)
            elif right_ptr and not left_ptr:
                left = scale(left)
            value = to_value(left + right)
        elif operator == "-":
            if left_ptr and right_ptr:
                value, _ = c_divmod(left - right, SLOT_SIZE)
            else:
                if left_ptr:
                    right = scale(right)
                value = to_value(left - right)
        elif operator == "*":
            value = to_value(left * right)
        elif operator == "/":
            value = self.eval_division(left, right)
        elif operator == "<":
            value = from_bool(left < right)
        elif operator == ">":
            value = from_bool(left > right)
        elif operator == "==":
            value = from_bool(left == right)
        else:
            raise UnsupportedOperationError(f"Unknown binary operator: {operator}")

        return self._memo(node, value)

    def eval_division(self, left, right):
        if right == 0:
            raise DivisionByZeroError("number cannot be divided by zero",
                                      stack_trace=self.env.stack_trace())
        quotient, remainder = c_divmod(left, right)
        if remainder != 0:
            message = f"{left} / {right} is not exact; remainder {remainder} discarded"
            logger.warning(message)
            self.diagnostics.append(message)
            self.summary['warnings'] += 1
        return quotient

    # ---- Assignment ---------------------------------------------------------

    def eval_assignment_expression(self, node):
        value = self.eval_node(node.value)
        target = _strip_parens(node.target)

        if isinstance(target, DeclRef):
            self.env.assign(target.decl, value)
            self._memo(target, value)
            debug_log("eval_assignment", f"{target.decl.name} = {value}")
        elif isinstance(target, ArraySubscript):
            self.heap.write_slot(self.element_address(target), value)
        elif isinstance(target, UnaryOperator) and target.operator == "*":
            self.heap.write_slot(self.eval_node(target.operand), value)
        else:
            raise UnsupportedOperationError(f"Cannot assign to {target}")

        return self._memo(node, value)
