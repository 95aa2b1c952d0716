"""
Numerical Operations for Bitcoin script
    0x82 | OP_SIZE
    0x87 | OP_EQUAL
    0x8b | OP_1ADD
    0x8c | OP_1SUB
    0x8f | OP_NEGATE
    0x90 | OP_ABS
    0x91 | OP_NOT
    0x92 | OP_0NOTEQUAL
    0x93 | OP_ADD
    0x94 | OP_SUB
    0x9a | OP_BOOLAND
    0x9b | OP_BOOLOR
    0x9c | OP_NUMEQUAL
    0x9e | OP_NUMNOTEQUAL
    0x9f | OP_LESSTHAN
    0xa0 | OP_GREATERTHAN
    0xa1 | OP_LESSTHANOREQUAL
    0xa2 | OP_GREATERTHANOREQUAL
    0xa3 | OP_MIN
    0xa4 | OP_MAX
    0xa5 | OP_WITHIN

Binary operations pop b (the top) and then a, and compute a <op> b.
"""
from bitverify.script.stack import BitStack

__all__ = ["op_size", "op_equal", "op_1add", "op_1sub", "op_negate", "op_abs", "op_not", "op_0notequal", "op_add",
           "op_sub", "op_booland", "op_boolor", "op_numequal", "op_numnotequal", "op_lessthan", "op_greaterthan",
           "op_lessthanorequal", "op_greaterthanorequal", "op_min", "op_max", "op_within"]


def _pop_pair(main_stack: BitStack) -> tuple[int, int]:
    b = main_stack.popnum()
    a = main_stack.popnum()
    return a, b


def op_size(main_stack: BitStack):
    """
    OP_SIZE | 0x82
    Pushes the byte length of the top element without popping it
    """
    main_stack.pushnum(len(main_stack.top))


def op_equal(main_stack: BitStack):
    """
    OP_EQUAL | 0x87
    Returns 1 if the inputs are exactly equal, 0 otherwise
    """
    a, b = main_stack.popitems(2)
    main_stack.pushbool(a == b)


def op_1add(main_stack: BitStack):
    """
    OP_1ADD | 0x8b
    """
    main_stack.pushnum(main_stack.popnum() + 1)


def op_1sub(main_stack: BitStack):
    """
    OP_1SUB | 0x8c
    """
    main_stack.pushnum(main_stack.popnum() - 1)


def op_negate(main_stack: BitStack):
    """
    OP_NEGATE | 0x8f
    """
    main_stack.pushnum(-main_stack.popnum())


def op_abs(main_stack: BitStack):
    """
    OP_ABS | 0x90
    """
    main_stack.pushnum(abs(main_stack.popnum()))


def op_not(main_stack: BitStack):
    """
    OP_NOT | 0x91
    If the input is 0 or 1, it is flipped. Otherwise the output will be 0.
    """
    main_stack.pushbool(main_stack.popnum() == 0)


def op_0notequal(main_stack: BitStack):
    """
    OP_0NOTEQUAL | 0x92
    Returns 0 if the input is 0. 1 otherwise.
    """
    main_stack.pushbool(main_stack.popnum() != 0)


def op_add(main_stack: BitStack):
    """
    OP_ADD | 0x93
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushnum(a + b)


def op_sub(main_stack: BitStack):
    """
    OP_SUB | 0x94
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushnum(a - b)


def op_booland(main_stack: BitStack):
    """
    OP_BOOLAND | 0x9a
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a != 0 and b != 0)


def op_boolor(main_stack: BitStack):
    """
    OP_BOOLOR | 0x9b
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a != 0 or b != 0)


def op_numequal(main_stack: BitStack):
    """
    OP_NUMEQUAL | 0x9c
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a == b)


def op_numnotequal(main_stack: BitStack):
    """
    OP_NUMNOTEQUAL | 0x9e
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a != b)


def op_lessthan(main_stack: BitStack):
    """
    OP_LESSTHAN | 0x9f
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a < b)


def op_greaterthan(main_stack: BitStack):
    """
    OP_GREATERTHAN | 0xa0
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a > b)


def op_lessthanorequal(main_stack: BitStack):
    """
    OP_LESSTHANOREQUAL | 0xa1
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a <= b)


def op_greaterthanorequal(main_stack: BitStack):
    """
    OP_GREATERTHANOREQUAL | 0xa2
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushbool(a >= b)


def op_min(main_stack: BitStack):
    """
    OP_MIN | 0xa3
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushnum(min(a, b))


def op_max(main_stack: BitStack):
    """
    OP_MAX | 0xa4
    """
    a, b = _pop_pair(main_stack)
    main_stack.pushnum(max(a, b))


def op_within(main_stack: BitStack):
    """
    OP_WITHIN | 0xa5
    Returns 1 if x is within the specified range (left-inclusive), 0 otherwise. Stack: x min max
    """
    max_val = main_stack.popnum()
    min_val = main_stack.popnum()
    x = main_stack.popnum()
    main_stack.pushbool(min_val <= x < max_val)
