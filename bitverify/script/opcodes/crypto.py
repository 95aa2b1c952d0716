"""
Hashing op-codes
    0xa6 | OP_RIPEMD160
    0xa7 | OP_SHA1
    0xa8 | OP_SHA256
    0xa9 | OP_HASH160
    0xaa | OP_HASH256

The signature op-codes 0xab -- 0xaf need the sighash callback and are handled in the ScriptEngine.
"""
from bitverify.crypto.hash_functions import ripemd160, sha1, sha256, hash160, hash256
from bitverify.script.stack import BitStack

__all__ = ["op_ripemd160", "op_sha1", "op_sha256", "op_hash160", "op_hash256"]


def op_ripemd160(main_stack: BitStack):
    """
    OP_RIPEMD160 | 0xa6
    The input is hashed using RIPEMD-160.
    """
    main_stack.push(ripemd160(main_stack.pop()))


def op_sha1(main_stack: BitStack):
    """
    OP_SHA1 | 0xa7
    The input is hashed using SHA-1.
    """
    main_stack.push(sha1(main_stack.pop()))


def op_sha256(main_stack: BitStack):
    """
    OP_SHA256 | 0xa8
    The input is hashed using SHA-256.
    """
    main_stack.push(sha256(main_stack.pop()))


def op_hash160(main_stack: BitStack):
    """
    OP_HASH160 | 0xa9
    The input is hashed twice: first with SHA-256 and then with RIPEMD-160.
    """
    main_stack.push(hash160(main_stack.pop()))


def op_hash256(main_stack: BitStack):
    """
    OP_HASH256 | 0xaa
    The input is hashed two times with SHA-256.
    """
    main_stack.push(hash256(main_stack.pop()))
