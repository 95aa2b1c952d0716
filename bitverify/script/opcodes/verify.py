"""
Opcodes for verification. Each returns False when the script must stop as failed.

    0x69 | OP_VERIFY
    0x88 | OP_EQUALVERIFY
    0x9d | OP_NUMEQUALVERIFY
"""
from bitverify.script.opcodes.numeric import op_equal, op_numequal
from bitverify.script.stack import BitStack

__all__ = ["op_verify", "op_equalverify", "op_numequalverify"]


def op_verify(main_stack: BitStack) -> bool:
    """
    OP_VERIFY | 0x69
    Pop the stack. Return False if the element is false, True otherwise
    """
    return main_stack.popbool()


def op_equalverify(main_stack: BitStack) -> bool:
    """
    OP_EQUALVERIFY | 0x88
    Same as OP_EQUAL, but runs OP_VERIFY afterward.
    """
    op_equal(main_stack)
    return op_verify(main_stack)


def op_numequalverify(main_stack: BitStack) -> bool:
    """
    OP_NUMEQUALVERIFY | 0x9d
    Same as OP_NUMEQUAL, but runs OP_VERIFY afterward.
    """
    op_numequal(main_stack)
    return op_verify(main_stack)
