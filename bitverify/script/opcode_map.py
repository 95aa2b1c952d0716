"""
Opcode mapping - maps opcode mnemonics to their implementation functions, and groups the mnemonics the ScriptEngine
treats specially
"""
from bitverify.script.opcodes.bools import *
from bitverify.script.opcodes.crypto import *
from bitverify.script.opcodes.disabled import *
from bitverify.script.opcodes.numeric import *
from bitverify.script.opcodes.stackops import *
from bitverify.script.opcodes.verify import *

__all__ = ["OPCODE_MAP", "ALTSTACK_OPS", "VERIFY_OPS", "DISABLED_OPS", "NOP_OPS", "RESERVED_OPS", "ALWAYS_INVALID_OPS",
           "BRANCH_OPS", "SIGNATURE_OPS"]

OPCODE_MAP = {
    # Bools
    "OP_0": op_false,
    "OP_FALSE": op_false,
    "OP_1NEGATE": op_1negate,
    "OP_TRUE": op_pushnum(1),
    **{f"OP_{n}": op_pushnum(n) for n in range(1, 17)},

    # Verify
    "OP_VERIFY": op_verify,
    "OP_EQUALVERIFY": op_equalverify,
    "OP_NUMEQUALVERIFY": op_numequalverify,

    # StackOps
    "OP_TOALTSTACK": op_toaltstack,
    "OP_FROMALTSTACK": op_fromaltstack,
    "OP_2DROP": op_2drop,
    "OP_2DUP": op_2dup,
    "OP_3DUP": op_3dup,
    "OP_2OVER": op_2over,
    "OP_2ROT": op_2rot,
    "OP_2SWAP": op_2swap,
    "OP_IFDUP": op_ifdup,
    "OP_DEPTH": op_depth,
    "OP_DROP": op_drop,
    "OP_DUP": op_dup,
    "OP_NIP": op_nip,
    "OP_OVER": op_over,
    "OP_PICK": op_pick,
    "OP_ROLL": op_roll,
    "OP_ROT": op_rot,
    "OP_SWAP": op_swap,
    "OP_TUCK": op_tuck,

    # Crypto
    "OP_RIPEMD160": op_ripemd160,
    "OP_SHA1": op_sha1,
    "OP_SHA256": op_sha256,
    "OP_HASH160": op_hash160,
    "OP_HASH256": op_hash256,

    # Numeric
    "OP_SIZE": op_size,
    "OP_EQUAL": op_equal,
    "OP_1ADD": op_1add,
    "OP_1SUB": op_1sub,
    "OP_NEGATE": op_negate,
    "OP_ABS": op_abs,
    "OP_NOT": op_not,
    "OP_0NOTEQUAL": op_0notequal,
    "OP_ADD": op_add,
    "OP_SUB": op_sub,
    "OP_BOOLAND": op_booland,
    "OP_BOOLOR": op_boolor,
    "OP_NUMEQUAL": op_numequal,
    "OP_NUMNOTEQUAL": op_numnotequal,
    "OP_LESSTHAN": op_lessthan,
    "OP_GREATERTHAN": op_greaterthan,
    "OP_LESSTHANOREQUAL": op_lessthanorequal,
    "OP_GREATERTHANOREQUAL": op_greaterthanorequal,
    "OP_MIN": op_min,
    "OP_MAX": op_max,
    "OP_WITHIN": op_within,

    # Disabled
    "OP_CAT": op_cat,
    "OP_SUBSTR": op_substr,
    "OP_LEFT": op_left,
    "OP_RIGHT": op_right,
    "OP_INVERT": op_invert,
    "OP_AND": op_and,
    "OP_OR": op_or,
    "OP_XOR": op_xor,
    "OP_2MUL": op_2mul,
    "OP_2DIV": op_2div,
    "OP_MUL": op_mul,
    "OP_DIV": op_div,
    "OP_MOD": op_mod,
    "OP_LSHIFT": op_lshift,
    "OP_RSHIFT": op_rshift,
}

ALTSTACK_OPS = frozenset({"OP_TOALTSTACK", "OP_FROMALTSTACK"})
VERIFY_OPS = frozenset({"OP_VERIFY", "OP_EQUALVERIFY", "OP_NUMEQUALVERIFY"})
DISABLED_OPS = frozenset({"OP_CAT", "OP_SUBSTR", "OP_LEFT", "OP_RIGHT", "OP_INVERT", "OP_AND", "OP_OR", "OP_XOR",
                          "OP_2MUL", "OP_2DIV", "OP_MUL", "OP_DIV", "OP_MOD", "OP_LSHIFT", "OP_RSHIFT"})
NOP_OPS = frozenset({"OP_NOP", "OP_NOP1", "OP_CHECKLOCKTIMEVERIFY", "OP_CHECKSEQUENCEVERIFY", "OP_NOP2", "OP_NOP3",
                     "OP_NOP4", "OP_NOP5", "OP_NOP6", "OP_NOP7", "OP_NOP8", "OP_NOP9", "OP_NOP10"})

# Fail the script when executed
RESERVED_OPS = frozenset({"OP_RESERVED", "OP_VER", "OP_RESERVED1", "OP_RESERVED2", "OP_RETURN"})

# Fail the script even inside an unexecuted branch
ALWAYS_INVALID_OPS = frozenset({"OP_VERIF", "OP_VERNOTIF"})

BRANCH_OPS = frozenset({"OP_IF", "OP_NOTIF", "OP_ELSE", "OP_ENDIF"})
SIGNATURE_OPS = frozenset({"OP_CODESEPARATOR", "OP_CHECKSIG", "OP_CHECKSIGVERIFY", "OP_CHECKMULTISIG",
                           "OP_CHECKMULTISIGVERIFY"})
