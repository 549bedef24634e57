# src/minic/values.py
"""The single runtime value representation.

Integers, characters, comparison results and addresses are all plain Python
``int`` objects kept in the signed 64-bit range.
"""

SLOT_SIZE = 8

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
_MASK = (1 << 64) - 1

TRUE = 1
FALSE = 0


def to_value(n):
    """Wrap an arbitrary Python int to two's-complement 64-bit."""
    n &= _MASK
    if n > INT64_MAX:
        n -= 1 << 64
    return n


def from_bool(flag):
    return TRUE if flag else FALSE


def c_divmod(left, right):
    """Quotient and remainder with C semantics (truncate toward zero).

    The caller is responsible for rejecting a zero divisor.
    """
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        quotient = -quotient
    remainder = left - quotient * right
    return to_value(quotient), to_value(remainder)


def scale(index):
    """Byte offset of element ``index`` in an array of slots."""
    return to_value(index * SLOT_SIZE)
