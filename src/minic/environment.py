# environment.py
"""Activation records and the call stack of a running MiniC program."""

import logging
from enum import Enum

from .errors import MissingEntryPointError, UnboundVariableError
from .minic_ast import FunctionDecl
from .values import SLOT_SIZE

logger = logging.getLogger(__name__)

ENTRY_POINT = "main"


class Builtin(Enum):
    """Host-provided primitives, recognised by name."""
    GET = "GET"
    PRINT = "PRINT"
    MALLOC = "MALLOC"
    FREE = "FREE"


class StackFrame:
    """One function activation.

    ``vars`` maps declaration nodes to values, ``exprs`` maps expression nodes
    to the value last computed for them during this activation.
    """

    def __init__(self, function=None):
        self.function = function
        self.vars = {}
        self.exprs = {}
        self.pc = None
        self.returned = False
        self.return_value = 0

    # ---- Variable bindings --------------------------------------------------

    def bind_decl(self, decl, value):
        self.vars[decl] = value
        return value

    def has_decl(self, decl):
        return decl in self.vars

    def get_decl_val(self, decl):
        try:
            return self.vars[decl]
        except KeyError:
            raise UnboundVariableError(f"Variable '{decl.name}' has no binding") from None

    # ---- Expression memo ----------------------------------------------------

    def bind_stmt(self, node, value):
        self.exprs[node] = value
        return value

    def get_stmt_val(self, node):
        return self.exprs[node]

    # ---- Return state -------------------------------------------------------

    def set_return(self, value):
        self.return_value = value
        self.returned = True

    @property
    def name(self):
        return self.function.name if self.function is not None else "<global>"

    def __repr__(self):
        return f"StackFrame({self.name}, vars={len(self.vars)}, returned={self.returned})"


class Environment:
    """The call stack plus the handles resolved once from the program.

    The bottom frame holds globals and outlives every call frame.
    """

    def __init__(self):
        self.stack = []
        self.builtins = {}
        self.entry = None
        self.max_depth = 0

    def init(self, unit, heap, eval_init=None):
        """Resolve built-ins and ``main`` and bind globals in the bottom frame.

        ``eval_init`` evaluates a global initializer expression; it runs with
        the global frame already on the stack.
        """
        self.builtins = {}
        self.entry = None
        for decl in unit.decls:
            if not isinstance(decl, FunctionDecl):
                continue
            try:
                self.builtins[decl] = Builtin(decl.name)
                continue
            except ValueError:
                pass
            if decl.name == ENTRY_POINT:
                self.entry = decl

        if self.entry is None or not self.entry.is_definition():
            raise MissingEntryPointError(f"No '{ENTRY_POINT}' function defined")

        self.stack = [StackFrame()]
        self.max_depth = 1
        for var in unit.variables():
            if var.ctype.is_array():
                value = heap.allocate(var.ctype.length * SLOT_SIZE, zero=True)
            elif var.init is not None and eval_init is not None:
                value = eval_init(var.init)
            else:
                value = 0
            self.globals.bind_decl(var, value)
            logger.debug("global %s = %d", var.name, value)

    def get_entry(self):
        return self.entry

    def builtin_for(self, fdecl):
        return self.builtins.get(fdecl)

    # ---- Call stack ---------------------------------------------------------

    @property
    def top(self):
        return self.stack[-1]

    @property
    def globals(self):
        return self.stack[0]

    @property
    def depth(self):
        return len(self.stack)

    def push_frame(self, function):
        frame = StackFrame(function)
        self.stack.append(frame)
        self.max_depth = max(self.max_depth, len(self.stack))
        return frame

    def pop_frame(self, call=None):
        """Pop the callee frame and hand its return value to the caller.

        When ``call`` is given the value is memoized on that call node in the
        caller's frame. A body that ran off its end returns 0.
        """
        frame = self.stack.pop()
        value = frame.return_value if frame.returned else 0
        if call is not None:
            self.top.bind_stmt(call, value)
        return value

    # ---- Variable access ----------------------------------------------------

    def _owner(self, decl):
        if self.top.has_decl(decl):
            return self.top
        if self.globals.has_decl(decl):
            return self.globals
        raise UnboundVariableError(f"Variable '{decl.name}' has no binding",
                                   stack_trace=self.stack_trace())

    def lookup(self, decl):
        return self._owner(decl).get_decl_val(decl)

    def assign(self, decl, value):
        """Rebind an existing variable in whichever frame declared it."""
        return self._owner(decl).bind_decl(decl, value)

    def declare(self, decl, value):
        """Bind a fresh variable in the active frame."""
        return self.top.bind_decl(decl, value)

    def stack_trace(self):
        return [f"  at {frame.name}" for frame in self.stack[1:]]
