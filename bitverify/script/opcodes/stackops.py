"""
Basic Stack Operation OpCodes
    0x6b -- 0x7d
    0x6b | OP_TOALTSTACK
    0x6c | OP_FROMALTSTACK
    0x6d | OP_2DROP
    0x6e | OP_2DUP
    0x6f | OP_3DUP
    0x70 | OP_2OVER
    0x71 | OP_2ROT
    0x72 | OP_2SWAP
    0x73 | OP_IFDUP
    0x74 | OP_DEPTH
    0x75 | OP_DROP
    0x76 | OP_DUP
    0x77 | OP_NIP
    0x78 | OP_OVER
    0x79 | OP_PICK
    0x7a | OP_ROLL
    0x7b | OP_ROT
    0x7c | OP_SWAP
    0x7d | OP_TUCK
"""
from bitverify.core.exceptions import BitStackError
from bitverify.script.stack import BitStack, cast_to_bool

__all__ = ["op_toaltstack", "op_fromaltstack", "op_2drop", "op_2dup", "op_3dup", "op_2over", "op_2rot", "op_2swap",
           "op_ifdup", "op_depth", "op_drop", "op_dup", "op_nip", "op_over", "op_pick", "op_roll", "op_rot",
           "op_swap", "op_tuck"]


def op_toaltstack(main_stack: BitStack, alt_stack: BitStack):
    """
    OP_TOALTSTACK | 0x6b
    Puts the input onto the top of the alt stack. Removes it from the main stack.
    """
    alt_stack.push(main_stack.pop())


def op_fromaltstack(main_stack: BitStack, alt_stack: BitStack):
    """
    OP_FROMALTSTACK | 0x6c
    Puts the input onto the top of the main stack. Removes it from the alt stack.
    """
    main_stack.push(alt_stack.pop())


def op_2drop(main_stack: BitStack):
    """
    OP_2DROP | 0x6d
    """
    main_stack.popitems(2)


def op_2dup(main_stack: BitStack):
    """
    OP_2DUP | 0x6e
    """
    items = main_stack.popitems(2)
    main_stack.pushlist(items + items)


def op_3dup(main_stack: BitStack):
    """
    OP_3DUP | 0x6f
    """
    items = main_stack.popitems(3)
    main_stack.pushlist(items + items)


def op_2over(main_stack: BitStack):
    """
    OP_2OVER | 0x70
    Copies the pair of items two spaces back in the stack to the front.
    """
    items = main_stack.popitems(4)  # top [0, 1, 2, 3] bottom
    main_stack.pushlist(items[2:] + items)


def op_2rot(main_stack: BitStack):
    """
    OP_2ROT | 0x71
    The fifth and sixth items back are moved to the top of the stack.
    """
    items = main_stack.popitems(6)
    main_stack.pushlist(items[4:] + items[:4])


def op_2swap(main_stack: BitStack):
    """
    OP_2SWAP | 0x72
    Swaps the top two pairs of items.
    """
    items = main_stack.popitems(4)
    main_stack.pushlist(items[2:] + items[:2])


def op_ifdup(main_stack: BitStack):
    """
    OP_IFDUP | 0x73
    If the top stack value is true, duplicate it.
    """
    if cast_to_bool(main_stack.top):
        main_stack.push(main_stack.top)


def op_depth(main_stack: BitStack):
    """
    OP_DEPTH | 0x74
    Puts the number of stack items onto the stack.
    """
    main_stack.pushnum(main_stack.height)


def op_drop(main_stack: BitStack):
    """
    OP_DROP | 0x75
    """
    main_stack.pop()


def op_dup(main_stack: BitStack):
    """
    OP_DUP | 0x76
    """
    main_stack.push(main_stack.top)


def op_nip(main_stack: BitStack):
    """
    OP_NIP | 0x77
    Removes the second-to-top stack item.
    """
    main_stack.remove(1)


def op_over(main_stack: BitStack):
    """
    OP_OVER | 0x78
    Copies the second-to-top stack item to the top.
    """
    main_stack.push(main_stack.peek(1))


def _pop_depth(main_stack: BitStack) -> int:
    n = main_stack.popnum()
    if n < 0 or n >= main_stack.height:
        raise BitStackError(f"Stack depth {n} out of range for stack of height {main_stack.height}")
    return n


def op_pick(main_stack: BitStack):
    """
    OP_PICK | 0x79
    The item n back in the stack is copied to the top.
    """
    n = _pop_depth(main_stack)
    main_stack.push(main_stack.peek(n))


def op_roll(main_stack: BitStack):
    """
    OP_ROLL | 0x7a
    The item n back in the stack is moved to the top.
    """
    n = _pop_depth(main_stack)
    main_stack.push(main_stack.remove(n))


def op_rot(main_stack: BitStack):
    """
    OP_ROT | 0x7b
    The 3rd item down the stack is moved to the top.
    """
    top, second, third = main_stack.popitems(3)
    main_stack.pushlist([third, top, second])


def op_swap(main_stack: BitStack):
    """
    OP_SWAP | 0x7c
    """
    top, second = main_stack.popitems(2)
    main_stack.pushlist([second, top])


def op_tuck(main_stack: BitStack):
    """
    OP_TUCK | 0x7d
    The item at the top of the stack is copied and inserted before the second-to-top item.
    """
    top, second = main_stack.popitems(2)
    main_stack.pushlist([top, second, top])
