"""
MiniC error hierarchy.

Fatal conditions raised inside the evaluator all derive from ``FatalError``;
the driver turns them into a diagnostic and a non-zero exit status. Problems in
the AST document itself are ``LoadError``.
"""

from typing import List, Optional


class MinicError(Exception):
    """Base class for every MiniC error"""
    pass


class LoadError(MinicError):
    """Malformed or unresolvable AST document"""
    pass


class FatalError(MinicError):
    """Unrecoverable runtime condition; the program terminates"""

    def __init__(self, message: str, stack_trace: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.stack_trace = stack_trace or []

    def __str__(self):
        if not self.stack_trace:
            return self.message
        return self.message + "\n" + "\n".join(self.stack_trace)


class DivisionByZeroError(FatalError):
    """Integer division with a zero divisor"""
    pass


class UnboundVariableError(FatalError):
    """Variable referenced with no binding in the active or global frame"""
    pass


class MissingEntryPointError(FatalError):
    """The program defines no ``main`` function"""
    pass


class UnsupportedOperationError(FatalError):
    """Node shape the evaluator does not give a meaning to"""
    pass


class UndefinedFunctionError(FatalError):
    """Call to a function that is neither a built-in nor defined"""
    pass


class SegmentationFault(FatalError):
    """Memory access outside the addressable arena"""
    pass


class StackOverflowError(FatalError):
    """Call depth exceeded"""
    pass


class InputError(FatalError):
    """GET could not read an integer"""
    pass
