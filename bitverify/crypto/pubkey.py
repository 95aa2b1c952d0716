"""
The PubKey class, used to decode SEC1 public keys and to derive keys for signing
"""
import json

from bitverify.core.exceptions import PubKeyError
from bitverify.core.formats import ECC
from bitverify.crypto.ecc import SECP256K1
from bitverify.crypto.hash_functions import hash160

__all__ = ["PubKey"]


class PubKey:
    """
    A point on secp256k1 with its SEC1 serializations
    """
    __slots__ = ("x", "y")

    def __init__(self, private_key: int | bytes):
        private_key = int.from_bytes(private_key, "big") if isinstance(private_key, bytes) else private_key
        if not 1 <= private_key < SECP256K1.order:
            raise PubKeyError("Private key out of range")
        self.x, self.y = SECP256K1.multiply_generator(private_key)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PubKey):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    # --- CLASS METHODS --- #

    @classmethod
    def _from_coords(cls, x: int, y: int):
        obj = object.__new__(cls)  # bypass __init__
        obj.x, obj.y = x, y
        return obj

    @classmethod
    def from_uncompressed(cls, full_pubkey: bytes):
        if len(full_pubkey) != ECC.UNCOMPRESSED_KEY:
            raise PubKeyError("Uncompressed pubkey not of correct length.")
        if full_pubkey[0] not in (0x04, 0x06, 0x07):
            raise PubKeyError("Uncompressed pubkey has incorrect prefix")

        x = int.from_bytes(full_pubkey[1:33], "big")
        y = int.from_bytes(full_pubkey[33:], "big")
        if not (x < SECP256K1.p and y < SECP256K1.p) or not SECP256K1.is_point_on_curve((x, y)):
            raise PubKeyError("Decoded public key point not on SECP256K1 curve")
        # Hybrid keys carry the y parity in the prefix as well
        if full_pubkey[0] in (0x06, 0x07) and (y & 1) != (full_pubkey[0] & 1):
            raise PubKeyError("Hybrid pubkey prefix does not match y parity")
        return cls._from_coords(x, y)

    @classmethod
    def from_compressed(cls, compressed_pubkey: bytes):
        if len(compressed_pubkey) != ECC.COMPRESSED_KEY:
            raise PubKeyError("Compressed pubkey must be 33 bytes")
        prefix = compressed_pubkey[0]
        if prefix not in (0x02, 0x03):
            raise PubKeyError("Invalid prefix for compressed pubkey")

        x = int.from_bytes(compressed_pubkey[1:], "big")
        if not (0 < x < SECP256K1.p):
            raise PubKeyError("x out of range")
        if not SECP256K1.is_x_on_curve(x):
            raise PubKeyError("Given x coordinate not on curve")

        y = SECP256K1.find_y_from_x(x)
        want_odd = 1 if prefix == 0x03 else 0
        if (y & 1) != want_odd:
            y = SECP256K1.p - y
        return cls._from_coords(x, y)

    @classmethod
    def from_bytes(cls, pubkey_bytes: bytes):
        """
        Proceed based on length and prefix of pubkey
        """
        if len(pubkey_bytes) == ECC.UNCOMPRESSED_KEY and pubkey_bytes[0] in (0x04, 0x06, 0x07):
            return cls.from_uncompressed(pubkey_bytes)
        elif len(pubkey_bytes) == ECC.COMPRESSED_KEY and pubkey_bytes[0] in (0x02, 0x03):
            return cls.from_compressed(pubkey_bytes)
        raise PubKeyError("Unrecognized pubkey type")

    # --- FORMATTING --- #

    def compressed(self) -> bytes:
        y_byte = b'\x02' if self.y % 2 == 0 else b'\x03'
        return y_byte + self.x.to_bytes(ECC.COORD_BYTES, "big")

    def uncompressed(self) -> bytes:
        return b'\x04' + self.x.to_bytes(ECC.COORD_BYTES, "big") + self.y.to_bytes(ECC.COORD_BYTES, "big")

    def to_point(self) -> tuple[int, int]:
        return self.x, self.y

    def pubkey_hash(self, compressed: bool = True) -> bytes:
        """
        HASH160 of the serialized key, as committed to by P2PKH and P2WPKH scripts
        """
        return hash160(self.compressed() if compressed else self.uncompressed())

    def to_dict(self) -> dict:
        return {
            "x": self.x.to_bytes(ECC.COORD_BYTES, "big").hex(),
            "y": self.y.to_bytes(ECC.COORD_BYTES, "big").hex(),
            "compressed": self.compressed().hex()
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)
