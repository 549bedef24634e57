# src/minic/evaluator/statements.py
from ..values import SLOT_SIZE
from .utils import debug_log


class StatementEvaluatorMixin:
    """Handles execution of statements and flow control.

    A return marks the active frame; blocks and loops stop as soon as they see
    the mark, and ``eval_node`` skips any statement reached afterwards.
    """

    def eval_compound_statement(self, block):
        frame = self.env.top
        for stmt in block.statements:
            self.eval_node(stmt)
            if frame.returned:
                debug_log("  Block interrupted by return", frame.name)
                break
        return None

    def eval_decl_statement(self, node):
        for decl in node.decls:
            self.declare_variable(decl)
        return None

    def declare_variable(self, decl):
        if decl.ctype.is_array():
            value = self.heap.allocate(decl.ctype.length * SLOT_SIZE, zero=True)
        elif decl.init is not None:
            value = self.eval_node(decl.init)
        else:
            value = 0
        debug_log("declare", f"{decl.name} = {value}")
        return self.env.declare(decl, value)

    def eval_if_statement(self, node):
        if self.eval_node(node.condition):
            self.eval_node(node.then)
        elif node.alternative is not None:
            self.eval_node(node.alternative)
        return None

    def eval_while_statement(self, node):
        frame = self.env.top
        while not frame.returned and self.eval_node(node.condition):
            self.eval_node(node.body)
        return None

    def eval_for_statement(self, node):
        frame = self.env.top
        if node.init is not None:
            self.eval_node(node.init)
        while not frame.returned:
            if node.condition is not None and not self.eval_node(node.condition):
                break
            self.eval_node(node.body)
            if frame.returned:
                break
            if node.increment is not None:
                self.eval_node(node.increment)
        return None

    def eval_return_statement(self, node):
        value = self.eval_node(node.value) if node.value is not None else 0
        self.env.top.set_return(value)
        debug_log("eval_return_statement", f"{self.env.top.name} -> {value}")
        return None
