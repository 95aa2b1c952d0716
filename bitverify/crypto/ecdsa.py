"""
ECDSA algorithm.

Fixed to run on secp256k1 elliptic curve.
"""
import secrets

from bitverify.core.exceptions import ECDSAError
from bitverify.core.logging import get_logger
from bitverify.crypto.ecc import SECP256K1

logger = get_logger(__name__)

__all__ = ["ecdsa", "verify_ecdsa"]


def _message_integer(message_hash: bytes) -> int:
    # Take the leftmost n bits of the hash
    n = SECP256K1.order
    z = int.from_bytes(message_hash, byteorder='big')
    excess = len(message_hash) * 8 - n.bit_length()
    return z >> excess if excess > 0 else z


def ecdsa(private_key: int, message_hash: bytes) -> tuple[int, int]:
    """
    Generates an ECDSA signature for a given private_key and message hash.

    Parameters:
    ----------
    private_key : int
        The signer's private key.
    message_hash : bytes
        The hash of the message (typically a transaction sighash) that will be signed.

    Returns:
    --------
    tuple
        The ECDSA signature (r, s), using low s as per BIP-62.

    Algorithm:
    ----------
    1) Compute z as the integer value of the first n bits of message hash.
    2) Select a random integer k in [1, n-1].
    3) Calculate curve point (x, y) = k * generator.
    4) Compute r = x (mod n) and s = k^(-1)(z + r * private_key) (mod n).
    5) If r or s is 0, repeat from step 2.
    """
    n = SECP256K1.order
    if not 1 <= private_key < n:
        raise ECDSAError("Private key out of range")

    z = _message_integer(message_hash)

    while True:
        k = secrets.randbelow(n - 1) + 1
        x, _ = SECP256K1.multiply_generator(k)

        r = x % n
        if r == 0:
            continue

        s = (pow(k, -1, n) * (z + r * private_key)) % n
        if s == 0:
            continue
        break

    return r, min(s, n - s)


def verify_ecdsa(signature: tuple[int, int], message_hash: bytes, public_key: tuple) -> bool:
    """
    We verify that the given signature corresponds to the public_key for the given message hash.

    Algorithm
    --------
    Let n denote the group order of the elliptic curve.

    1) Verify that (r,s) are integers in the interval [1,n-1]
    2) Let z be the integer value of the first n bits of the message hash
    3) Let u1 = z * s^(-1) (mod n) and u2 = r * s^(-1) (mod n)
    4) Calculate the curve point (x,y) = (u1 * generator) + (u2 * public_key)
    5) If r = x (mod n), the signature is valid.
    """
    n = SECP256K1.order
    r, s = signature

    if not (1 <= r < n):
        logger.debug(f"ECDSA r value {r} out of bounds.")
        return False
    if not (1 <= s < n):
        logger.debug(f"ECDSA s value {s} out of bounds.")
        return False
    if not SECP256K1.is_point_on_curve(public_key):
        logger.error("Public key point not on secp256k1")
        return False

    z = _message_integer(message_hash)

    s_inv = pow(s, -1, n)
    u1 = (z * s_inv) % n
    u2 = (r * s_inv) % n

    point = SECP256K1.add_points(SECP256K1.multiply_generator(u1), SECP256K1.scalar_multiplication(u2, public_key))
    if point is None:
        logger.debug("Point at infinity encountered during signature verification.")
        return False

    x, _ = point
    return r == x % n
