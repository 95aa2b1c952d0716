"""
Encoding and decoding of ECDSA signatures.

Strict DER goes through the `cryptography` package. Signatures from before BIP66 may violate DER (negative integers,
excess padding, trailing garbage, long-form lengths); decode_der_lax accepts those the way libsecp256k1's lax parser
does.
"""
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature, decode_dss_signature

from bitverify.core.exceptions import SignatureError
from bitverify.core.logging import get_logger

logger = get_logger(__name__)

__all__ = ["encode_der_signature", "decode_der_signature", "decode_der_lax", "decode_signature"]

COMPACT_SIZE = 64
INTEGER_SIZE = 32


def encode_der_signature(r: int, s: int) -> bytes:
    """
    Encodes ECDSA integers r and s into a DER-encoded signature.
    """
    return encode_dss_signature(r, s)


def decode_der_signature(der_sig: bytes) -> tuple[int, int]:
    """
    Decodes a strict DER-encoded ECDSA signature back into integers r and s.
    """
    try:
        r, s = decode_dss_signature(der_sig)
    except ValueError as e:
        raise SignatureError(f"Signature is not strict DER: {e}") from e
    if r <= 0 or s <= 0:
        raise SignatureError("DER signature contains a non-positive integer")
    return r, s


def _read_length(sig: bytes, pos: int) -> tuple[int, int]:
    """
    Read a (possibly long-form) length starting at pos. Returns (length, new_pos).
    """
    if pos >= len(sig):
        raise SignatureError("Lax DER: missing length byte")
    lenbyte = sig[pos]
    pos += 1
    if not lenbyte & 0x80:
        return lenbyte, pos

    lenbyte -= 0x80
    if lenbyte > len(sig) - pos:
        raise SignatureError("Lax DER: length descriptor runs past end of signature")
    while lenbyte > 0 and sig[pos] == 0:
        pos += 1
        lenbyte -= 1
    if lenbyte >= 4:
        raise SignatureError("Lax DER: length descriptor too long")
    length = int.from_bytes(sig[pos:pos + lenbyte], "big")
    return length, pos + lenbyte


def _read_integer(sig: bytes, pos: int) -> tuple[bytes, int]:
    if pos >= len(sig) or sig[pos] != 0x02:
        raise SignatureError("Lax DER: missing integer tag")
    length, pos = _read_length(sig, pos + 1)
    if length > len(sig) - pos:
        raise SignatureError("Lax DER: integer runs past end of signature")
    return sig[pos:pos + length], pos + length


def decode_der_lax(sig: bytes) -> tuple[int, int]:
    """
    Decode a BER-ish signature: sequence tag, any sequence length, then two integer elements. Integers are read as
    unsigned big-endian magnitudes with leading zeros ignored, and anything after the second integer is ignored.

    An integer longer than 32 significant bytes yields (0, 0), which never verifies.
    """
    if not sig or sig[0] != 0x30:
        raise SignatureError("Lax DER: missing sequence tag")

    # The sequence length is read but not enforced
    if len(sig) < 2:
        raise SignatureError("Lax DER: missing sequence length")
    pos = 2
    if sig[1] & 0x80:
        skip = sig[1] - 0x80
        if skip > len(sig) - pos:
            raise SignatureError("Lax DER: sequence length runs past end of signature")
        pos += skip

    r_bytes, pos = _read_integer(sig, pos)

    # Trailing bytes after s are ignored
    s_bytes, _ = _read_integer(sig, pos)

    r_bytes = r_bytes.lstrip(b'\x00')
    s_bytes = s_bytes.lstrip(b'\x00')
    if len(r_bytes) > INTEGER_SIZE or len(s_bytes) > INTEGER_SIZE:
        return 0, 0
    return int.from_bytes(r_bytes, "big"), int.from_bytes(s_bytes, "big")


def decode_signature(sig: bytes, lax: bool = True) -> tuple[int, int]:
    """
    Decode a signature (hash type byte already removed). Strict DER first; when lax is set, fall back to lax DER and
    then to a raw 64-byte r || s encoding.
    """
    try:
        return decode_der_signature(sig)
    except SignatureError as strict_error:
        if not lax:
            raise
        logger.debug(f"Strict DER decoding failed: {strict_error}")

    try:
        return decode_der_lax(sig)
    except SignatureError as lax_error:
        if len(sig) != COMPACT_SIZE:
            raise
        logger.debug(f"Lax DER decoding failed, reading raw r || s: {lax_error}")

    return int.from_bytes(sig[:INTEGER_SIZE], "big"), int.from_bytes(sig[INTEGER_SIZE:], "big")
