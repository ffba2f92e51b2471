"""Unsigned fixed-width integers for xod language. Values are plain Python ints kept in [0, 2 ** width), and lists are
tuples of values. Any operation whose mathematical result would leave that range fails instead of wrapping, except
for the bitwise operators, which work bit-for-bit on the fixed-width representation (so `<<` drops high bits).
"""

from xod.lang.error import DivisionByZero, DomainError, NegativeResult, Overflow, TypeMismatch


WIDTH = 64  # default width in bits
WIDTHS = (8, 16, 32, 64, 128)

FORMATS = {"hex": ("0x", "x"), "bin": ("0b", "b"), "oct": ("0o", "o"), "dec": ("", "d")}


def mask(width):
    """Largest value representable in width bits."""
    return (1 << width) - 1


def is_list(value):
    return isinstance(value, tuple)


def check_width(value, width, snippet, start=0, end=-1):
    """Returns value if it fits in width bits, otherwise raises Overflow."""
    if value > mask(width):
        raise Overflow("'{}' does not fit in {} bits", (snippet, width), start, end)
    return value


def complement(value, width):
    """Bitwise complement within width, not arithmetic negation."""
    return value ^ mask(width)


def binary(op, left, right, width, start=0, end=-1):
    """Applies binary operator op to two integers. start/end locate the operator in the source for errors."""
    if op == "+":
        return check_width(left + right, width, f"{left} + {right}", start, end)

    elif op == "-":
        if right > left:
            raise NegativeResult("'{}' would be negative", f"{left} - {right}", start, end)
        return left - right

    elif op == "*":
        return check_width(left * right, width, f"{left} * {right}", start, end)

    elif op in ("/", "%"):
        if right == 0:
            raise DivisionByZero("'{}' divides by zero", f"{left} {op} {right}", start, end)
        return left // right if op == "/" else left % right

    elif op == "**":
        if left > 1 and right >= width:  # 2 ** width already overflows
            raise Overflow("'{}' does not fit in {} bits", (f"{left} ** {right}", width), start, end)
        return check_width(left ** right, width, f"{left} ** {right}", start, end)

    elif op == "&":
        return left & right
    elif op == "|":
        return left | right
    elif op == "^":
        return left ^ right

    elif op == "<<":
        return 0 if right >= width else (left << right) & mask(width)
    elif op == ">>":
        return 0 if right >= width else left >> right

    elif op == "==":
        return int(left == right)
    elif op == "!=":
        return int(left != right)
    elif op == "<":
        return int(left < right)
    elif op == "<=":
        return int(left <= right)
    elif op == ">":
        return int(left > right)
    elif op == ">=":
        return int(left >= right)

    raise ValueError(f"unknown operator '{op}'")


def ilog(base, value, start=0, end=-1):
    """Integer (floor) logarithm of value in base."""
    if base < 2:
        raise DomainError("log base must be at least 2, got '{}'", base, start, end)
    if value == 0:
        raise DomainError("log of '{}' is undefined", value, start, end)

    result = 0
    while value >= base:
        value //= base
        result += 1
    return result


def format_value(value, name="dec"):
    """Formats value with the conventions of builtin name: 0xff, 0b11, 0o10, 255. Lists format each element."""
    if is_list(value):
        return "[" + ", ".join(format_value(item, name) for item in value) + "]"

    prefix, spec = FORMATS[name]
    return prefix + format(value, spec)


def expect_int(value, what, start=0, end=-1):
    """Returns value if it is an Integer, otherwise raises TypeMismatch."""
    if is_list(value):
        raise TypeMismatch("{} expects an integer, got list '{}'", (what, format_value(value)), start, end)
    return value


def expect_list(value, what, start=0, end=-1):
    """Returns value if it is a List, otherwise raises TypeMismatch."""
    if not is_list(value):
        raise TypeMismatch("{} expects a list, got integer '{}'", (what, value), start, end)
    return value
