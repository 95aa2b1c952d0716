"""
Hash functions used by script opcodes and signature hashing
"""
import hashlib

from ripemd.ripemd160 import ripemd160 as _ripemd160

__all__ = ["sha1", "sha256", "ripemd160", "hash160", "hash256"]


def sha1(encoded_data: bytes) -> bytes:
    return hashlib.sha1(encoded_data).digest()


def sha256(encoded_data: bytes) -> bytes:
    return hashlib.sha256(encoded_data).digest()


def ripemd160(encoded_data: bytes) -> bytes:
    return _ripemd160(encoded_data)


def hash160(encoded_data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    return ripemd160(sha256(encoded_data))


def hash256(encoded_data: bytes) -> bytes:
    """SHA256(SHA256(data))"""
    return sha256(sha256(encoded_data))
