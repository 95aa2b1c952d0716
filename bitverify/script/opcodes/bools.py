"""
The functions for all number-pushing opcodes
    0x00: OP_0, OP_FALSE
    0x4f: OP_1NEGATE
    0x51 -- 0x60: OP_1 (OP_TRUE) -- OP_16
"""
from bitverify.script.stack import BitStack

__all__ = ["op_false", "op_1negate", "op_pushnum"]


def op_false(main_stack: BitStack):
    """
    OP_0, OP_FALSE | 0x00
    Push empty byte array to stack
    """
    main_stack.pushbool(False)


def op_1negate(main_stack: BitStack):
    """
    OP_1NEGATE | 0x4f
    Push -1 to the stack
    """
    main_stack.pushnum(-1)


def op_pushnum(num: int):
    """
    OP_1 -- OP_16 | 0x51 -- 0x60
    Returns the function pushing num to the stack
    """

    def _push(main_stack: BitStack):
        main_stack.pushnum(num)

    _push.__name__ = f"op_{num}"
    return _push
