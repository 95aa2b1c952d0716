"""
The SignatureEngine class, used to compute the message hashes that transaction signatures commit to

An unknown base hash type is never an error: it is hashed as SIGHASH_ALL with the full byte still committed.
"""
from enum import IntEnum

from bitverify.core import SignatureError, TX, SIGHASH, write_little_int, write_length_prefixed
from bitverify.core.logging import get_logger
from bitverify.crypto import ecdsa, hash256, encode_der_signature
from bitverify.tx import Transaction, TxOutput, WitnessField

logger = get_logger(__name__)

__all__ = ["SigHash", "SignatureEngine"]

_ZERO_HASH = b'\x00' * 32


class SigHash(IntEnum):
    ALL = 0x01
    NONE = 0x02
    SINGLE = 0x03
    ALL_ANYONECANPAY = 0x81
    NONE_ANYONECANPAY = 0x82
    SINGLE_ANYONECANPAY = 0x83

    def to_byte(self) -> bytes:
        return self.value.to_bytes(1, "little")

    def for_hashing(self) -> bytes:
        """
        The hash type as it is appended to a preimage: 4 bytes little-endian
        """
        return self.value.to_bytes(TX.SIGHASH, "little")


def _split_hash_type(sighash_num: int) -> tuple[int, bool]:
    """
    Return the base type (low 5 bits) and the ANYONECANPAY flag. Any base other than NONE or SINGLE behaves as ALL.
    """
    return sighash_num & SIGHASH.BASE_MASK, bool(sighash_num & SIGHASH.ANYONECANPAY)


class SignatureEngine:
    """Signature hash algorithms for legacy and segwit v0 inputs"""

    # --- SIGHASH ALGORITHMS --- #

    def get_legacy_sighash(self, tx: Transaction, input_index: int, script_code: bytes, sighash_num: int = 1) -> bytes:
        """
        Computes legacy message_hash for signing:
            1. Remove all existing scriptsigs (and the witness)
            2. Put the script code in the scriptsig for the input
            3. Apply the hash type:
                NONE: remove all outputs, zero the sequence of every other input
                SINGLE: keep outputs up to input_index, blanking the earlier ones, zero other sequences
                ANYONECANPAY: keep only the input being signed
            4. Append the 4-byte hash type and hash256 the serialized tx data
        SIGHASH_SINGLE without a matching output returns 01 00 .. 00.
        """
        if not 0 <= input_index < len(tx.inputs):
            raise SignatureError(f"Input index {input_index} out of range for legacy signature hash")

        base_type, anyone_can_pay = _split_hash_type(sighash_num)
        if base_type == SigHash.SINGLE and input_index >= len(tx.outputs):
            logger.debug(f"SIGHASH_SINGLE for input {input_index} without matching output")
            return SIGHASH.ONE

        tx_copy = tx.clone(hash_only=True)
        tx_copy.segwit = False
        tx_copy.witness = [WitnessField() for _ in tx_copy.inputs]

        # 1 + 2
        for txin in tx_copy.inputs:
            txin.scriptsig = b''
        tx_copy.inputs[input_index].scriptsig = script_code

        # 3
        if base_type in (SigHash.NONE, SigHash.SINGLE):
            if base_type == SigHash.NONE:
                tx_copy.outputs = []
            else:
                kept = tx_copy.outputs[input_index]
                tx_copy.outputs = [TxOutput(-1, b'') for _ in range(input_index)] + [kept]
            for n, txin in enumerate(tx_copy.inputs):
                if n != input_index:
                    txin.sequence = 0

        if anyone_can_pay:
            tx_copy.inputs = [tx_copy.inputs[input_index]]
            tx_copy.witness = [tx_copy.witness[input_index]]

        # 4
        data = tx_copy.to_bytes() + write_little_int(sighash_num, TX.SIGHASH)
        return hash256(data)

    def get_segwit_preimage(self, tx: Transaction, input_index: int, amount: int, script_code: bytes,
                            sighash_num: int = 1) -> bytes:
        """
        BIP143 preimage:
            version || hashPrevouts || hashSequence || outpoint || script_code || amount || sequence ||
            hashOutputs || locktime || hash type

        hashPrevouts is zero with ANYONECANPAY; hashSequence is zero with ANYONECANPAY, NONE or SINGLE; hashOutputs
        commits to all outputs, only the matching output for SINGLE, and is zero otherwise. The script code is given
        without its length prefix.
        """
        if not 0 <= input_index < len(tx.inputs):
            raise SignatureError(f"Input index {input_index} out of range for segwit signature hash")

        base_type, anyone_can_pay = _split_hash_type(sighash_num)
        single_or_none = base_type in (SigHash.SINGLE, SigHash.NONE)

        hash_prevouts = _ZERO_HASH
        if not anyone_can_pay:
            hash_prevouts = hash256(b''.join(txin.outpoint for txin in tx.inputs))

        hash_sequence = _ZERO_HASH
        if not anyone_can_pay and not single_or_none:
            hash_sequence = hash256(b''.join(write_little_int(txin.sequence, TX.SEQUENCE) for txin in tx.inputs))

        hash_outputs = _ZERO_HASH
        if not single_or_none:
            hash_outputs = hash256(b''.join(txout.to_bytes() for txout in tx.outputs))
        elif base_type == SigHash.SINGLE and input_index < len(tx.outputs):
            hash_outputs = hash256(tx.outputs[input_index].to_bytes())

        my_input = tx.inputs[input_index]
        parts = [
            write_little_int(tx.version, TX.VERSION, signed=True),
            hash_prevouts,
            hash_sequence,
            my_input.outpoint,
            write_length_prefixed(script_code),
            write_little_int(amount, TX.AMOUNT, signed=True),
            write_little_int(my_input.sequence, TX.SEQUENCE),
            hash_outputs,
            write_little_int(tx.locktime, TX.LOCKTIME),
            write_little_int(sighash_num, TX.SIGHASH)
        ]
        return b''.join(parts)

    def get_segwit_sighash(self, tx: Transaction, input_index: int, amount: int, script_code: bytes,
                           sighash_num: int = 1) -> bytes:
        """
        We return the sighash for a segwit v0 input
        """
        return hash256(self.get_segwit_preimage(tx, input_index, amount, script_code, sighash_num))

    # --- ECDSA --- #

    def get_ecdsa_sig(self, private_key: int, message: bytes, sighash_num: int = SigHash.ALL) -> bytes:
        """
        Sign the message hash and return the DER signature with the hash type byte appended
        """
        r, s = ecdsa(private_key, message)
        return encode_der_signature(r, s) + int(sighash_num).to_bytes(1, "little")
