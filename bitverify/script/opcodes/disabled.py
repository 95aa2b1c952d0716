"""
Opcodes disabled since 2010. They keep their original stack effect, but the ScriptEngine fails any script that
contains one, executed or not.
    0x7e | OP_CAT
    0x7f | OP_SUBSTR
    0x80 | OP_LEFT
    0x81 | OP_RIGHT
    0x83 | OP_INVERT
    0x84 | OP_AND
    0x85 | OP_OR
    0x86 | OP_XOR
    0x8d | OP_2MUL
    0x8e | OP_2DIV
    0x95 | OP_MUL
    0x96 | OP_DIV
    0x97 | OP_MOD
    0x98 | OP_LSHIFT
    0x99 | OP_RSHIFT
"""
from bitverify.core.exceptions import BitNumError, BitStackError
from bitverify.core.formats import SCRIPT
from bitverify.script.stack import BitStack

__all__ = ["op_cat", "op_substr", "op_left", "op_right", "op_invert", "op_and", "op_or", "op_xor", "op_2mul",
           "op_2div", "op_mul", "op_div", "op_mod", "op_lshift", "op_rshift"]


def op_cat(main_stack: BitStack):
    """
    OP_CAT | 0x7e
    Concatenates two strings.
    """
    b, a = main_stack.popitems(2)
    if len(a) + len(b) > SCRIPT.MAX_ELEMENT:
        raise BitStackError("OP_CAT result exceeds maximum element size")
    main_stack.push(a + b)


def op_substr(main_stack: BitStack):
    """
    OP_SUBSTR | 0x7f
    Returns a section of a string. Stack: data begin size
    """
    size = main_stack.popnum()
    begin = main_stack.popnum()
    data = main_stack.pop()
    if begin < 0 or size < 0 or begin + size > len(data):
        raise BitStackError("OP_SUBSTR range out of bounds")
    main_stack.push(data[begin:begin + size])


def op_left(main_stack: BitStack):
    """
    OP_LEFT | 0x80
    Keeps only characters left of the specified point in a string.
    """
    size = main_stack.popnum()
    data = main_stack.pop()
    if size < 0 or size > len(data):
        raise BitStackError("OP_LEFT size out of bounds")
    main_stack.push(data[:size])


def op_right(main_stack: BitStack):
    """
    OP_RIGHT | 0x81
    Keeps only characters right of the specified point in a string.
    """
    size = main_stack.popnum()
    data = main_stack.pop()
    if size < 0 or size > len(data):
        raise BitStackError("OP_RIGHT size out of bounds")
    main_stack.push(data[len(data) - size:])


def op_invert(main_stack: BitStack):
    """
    OP_INVERT | 0x83
    Flips all of the bits in the input.
    """
    main_stack.push(bytes(~b & 0xff for b in main_stack.pop()))


def _bitwise(main_stack: BitStack, func):
    b, a = main_stack.popitems(2)
    if len(a) != len(b):
        raise BitStackError("Bitwise operands must have equal length")
    main_stack.push(bytes(func(x, y) for x, y in zip(a, b)))


def op_and(main_stack: BitStack):
    """
    OP_AND | 0x84
    """
    _bitwise(main_stack, lambda x, y: x & y)


def op_or(main_stack: BitStack):
    """
    OP_OR | 0x85
    """
    _bitwise(main_stack, lambda x, y: x | y)


def op_xor(main_stack: BitStack):
    """
    OP_XOR | 0x86
    """
    _bitwise(main_stack, lambda x, y: x ^ y)


def op_2mul(main_stack: BitStack):
    """
    OP_2MUL | 0x8d
    """
    main_stack.pushnum(main_stack.popnum() * 2)


def op_2div(main_stack: BitStack):
    """
    OP_2DIV | 0x8e
    """
    n = main_stack.popnum()
    main_stack.pushnum(-(-n // 2) if n < 0 else n // 2)


def op_mul(main_stack: BitStack):
    """
    OP_MUL | 0x95
    """
    b = main_stack.popnum()
    a = main_stack.popnum()
    main_stack.pushnum(a * b)


def _pop_divisor_pair(main_stack: BitStack) -> tuple[int, int]:
    b = main_stack.popnum()
    a = main_stack.popnum()
    if b == 0:
        raise BitNumError("Division by zero")
    return a, b


def op_div(main_stack: BitStack):
    """
    OP_DIV | 0x96
    Quotient truncated toward zero.
    """
    a, b = _pop_divisor_pair(main_stack)
    quotient = abs(a) // abs(b)
    main_stack.pushnum(quotient if (a < 0) == (b < 0) else -quotient)


def op_mod(main_stack: BitStack):
    """
    OP_MOD | 0x97
    Remainder with the sign of the dividend.
    """
    a, b = _pop_divisor_pair(main_stack)
    remainder = abs(a) % abs(b)
    main_stack.pushnum(-remainder if a < 0 else remainder)


def _pop_shift(main_stack: BitStack) -> tuple[int, int]:
    shift = main_stack.popnum()
    n = main_stack.popnum()
    if not 0 <= shift <= SCRIPT.MAX_SHIFT:
        raise BitNumError(f"Shift count {shift} out of range")
    return n, shift


def op_lshift(main_stack: BitStack):
    """
    OP_LSHIFT | 0x98
    """
    n, shift = _pop_shift(main_stack)
    main_stack.pushnum(n << shift)


def op_rshift(main_stack: BitStack):
    """
    OP_RSHIFT | 0x99
    """
    n, shift = _pop_shift(main_stack)
    main_stack.pushnum(n >> shift)
