"""
Methods for converting between script bytes and the asm token list.

A token is either an "OP_" mnemonic or a lowercase hex literal. Direct pushes (0x01 -- 0x4b) become a bare literal,
OP_PUSHDATA1/2/4 become the mnemonic followed by the literal. Bytes with no opcode, and pushes running past the end
of the script, become a single OP_INVALID_<hex> token so that disassembly never fails.
"""
from bitverify.core.exceptions import OpCodeError
from bitverify.core.formats import OPCODES, OPCODE_BYTES, OPCODE_ALIASES, MNEMONICS, MNEMONIC_START, INVALID_PREFIX, \
    SCRIPT

__all__ = ["to_asm", "from_asm", "asm_string", "is_literal", "is_invalid", "push_data", "is_push_only",
           "is_p2sh", "is_p2wpkh", "is_p2wsh", "p2pkh_tokens", "PUSHDATA_WIDTHS"]

PUSHDATA_WIDTHS = {
    "OP_PUSHDATA1": 1,
    "OP_PUSHDATA2": 2,
    "OP_PUSHDATA4": 4,
}
_PUSHDATA_BY_BYTE = {OPCODE_BYTES[name]: (name, width) for name, width in PUSHDATA_WIDTHS.items()}


def to_asm(script: bytes) -> list[str]:
    """
    Disassemble script bytes into a token list
    """
    asm = []
    i = 0
    length = len(script)

    while i < length:
        opcode = script[i]

        # Direct push
        if 0x01 <= opcode <= SCRIPT.PUSHBYTES_MAX:
            end = i + 1 + opcode
            if end > length:
                asm.append(INVALID_PREFIX + script[i:].hex())
                break
            asm.append(script[i + 1:end].hex())
            i = end

        # OP_PUSHDATA1/2/4
        elif opcode in _PUSHDATA_BY_BYTE:
            name, width = _PUSHDATA_BY_BYTE[opcode]
            data_start = i + 1 + width
            if data_start > length:
                asm.append(INVALID_PREFIX + script[i:].hex())
                break
            size = int.from_bytes(script[i + 1:data_start], "little")
            end = data_start + size
            if end > length:
                asm.append(INVALID_PREFIX + script[i:].hex())
                break
            asm.extend([name, script[data_start:end].hex()])
            i = end

        elif opcode == 0x00:
            asm.append(OPCODES[0x00])
            i += 1

        elif MNEMONIC_START <= opcode < MNEMONIC_START + len(MNEMONICS):
            asm.append(MNEMONICS[opcode - MNEMONIC_START])
            i += 1

        else:
            asm.append(f"{INVALID_PREFIX}{opcode:02x}")
            i += 1

    return asm


def _encode_push(data: bytes) -> bytes:
    """
    Minimal push for a bare literal
    """
    size = len(data)
    if size == 0:
        return b'\x00'
    if size <= SCRIPT.PUSHBYTES_MAX:
        return bytes([size]) + data
    if size <= 0xff:
        return b'\x4c' + size.to_bytes(1, "little") + data
    if size <= 0xffff:
        return b'\x4d' + size.to_bytes(2, "little") + data
    return b'\x4e' + size.to_bytes(4, "little") + data


def from_asm(asm: list[str]) -> bytes:
    """
    Assemble a token list into script bytes. Exact inverse of to_asm.
    """
    parts = []
    tokens = iter(asm)
    for token in tokens:
        if token in PUSHDATA_WIDTHS:
            width = PUSHDATA_WIDTHS[token]
            literal = next(tokens, None)
            if literal is None or not is_literal(literal):
                raise OpCodeError(f"{token} must be followed by a data literal")
            data = bytes.fromhex(literal)
            parts.append(bytes([OPCODE_BYTES[token]]) + len(data).to_bytes(width, "little") + data)
        elif token in OPCODE_BYTES:
            parts.append(bytes([OPCODE_BYTES[token]]))
        elif token in OPCODE_ALIASES:
            parts.append(bytes([OPCODE_ALIASES[token]]))
        elif is_invalid(token):
            parts.append(bytes.fromhex(token[len(INVALID_PREFIX):]))
        elif is_literal(token):
            parts.append(_encode_push(bytes.fromhex(token)))
        else:
            raise OpCodeError(f"Unknown script token: {token}")
    return b''.join(parts)


def asm_string(asm: list[str]) -> str:
    return " ".join(asm)


# --- TOKEN PREDICATES --- #

def is_literal(token: str) -> bool:
    if token.startswith("OP_") or len(token) % 2:
        return False
    try:
        bytes.fromhex(token)
    except ValueError:
        return False
    return True


def is_invalid(token: str) -> bool:
    return token.startswith(INVALID_PREFIX)


def push_data(token: str) -> bytes:
    """
    Return the bytes a literal token pushes
    """
    return bytes.fromhex(token)


def is_push_only(asm: list[str]) -> bool:
    """
    True if every token is a literal, OP_PUSHDATAn or an opcode no greater than OP_16
    """
    for token in asm:
        if is_literal(token) or token in PUSHDATA_WIDTHS:
            continue
        code = OPCODE_BYTES.get(token, OPCODE_ALIASES.get(token))
        if code is None or code > 0x60:
            return False
    return True


# --- TEMPLATES --- #

def is_p2sh(asm: list[str]) -> bool:
    """
    OP_HASH160 <20 bytes> OP_EQUAL
    """
    return (len(asm) == 3 and asm[0] == "OP_HASH160" and asm[2] == "OP_EQUAL" and is_literal(asm[1])
            and len(asm[1]) == 2 * SCRIPT.PUBKEYHASH)


def _is_witness_v0(asm: list[str], program_size: int) -> bool:
    return len(asm) == 2 and asm[0] in ("OP_0", "OP_FALSE") and is_literal(asm[1]) and len(asm[1]) == 2 * program_size


def is_p2wpkh(asm: list[str]) -> bool:
    """
    OP_0 <20 bytes>
    """
    return _is_witness_v0(asm, SCRIPT.PUBKEYHASH)


def is_p2wsh(asm: list[str]) -> bool:
    """
    OP_0 <32 bytes>
    """
    return _is_witness_v0(asm, SCRIPT.SCRIPTHASH)


def p2pkh_tokens(pubkey_hash: bytes | str) -> list[str]:
    """
    OP_DUP OP_HASH160 <pubkey_hash> OP_EQUALVERIFY OP_CHECKSIG
    """
    pubkey_hash = pubkey_hash.hex() if isinstance(pubkey_hash, bytes) else pubkey_hash
    return ["OP_DUP", "OP_HASH160", pubkey_hash, "OP_EQUALVERIFY", "OP_CHECKSIG"]
