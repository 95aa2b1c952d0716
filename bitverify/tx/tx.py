"""
The classes for bitverify transactions
"""
from bitverify.core import Serializable, SERIALIZED, get_stream, read_little_int, read_stream, TX, \
    read_compact_size, write_compact_size, write_little_int, read_length_prefixed, write_length_prefixed, \
    ReadError, UnsupportedTxError
from bitverify.crypto import hash256
from bitverify.script.parser import to_asm, asm_string

__all__ = ["TxInput", "TxOutput", "WitnessField", "Transaction"]


class TxInput(Serializable):
    """
    =============================================================================
    |   name            |   data type   |   format              |   byte size   |
    =============================================================================
    |   txid            |   bytes       |   reversed on wire    |   32          |
    |   vout            |   int         |   little-endian       |   4           |
    |   scriptsig_size  |               |   compactSize         |   var         |
    |   scriptsig       |   bytes       |   script bytes        |   var         |
    |   sequence        |   int         |   little-endian       |   4           |
    =============================================================================
    The txid is held in display order; the null outpoint (vout = 0xffffffff) never has its scriptsig disassembled.
    """
    __slots__ = ("txid", "vout", "_scriptsig", "sequence", "scriptsig_asm", "_disassemble")

    def __init__(self, txid: bytes, vout: int, scriptsig: bytes = b'', sequence: int = 0xffffffff,
                 disassemble: bool = True):
        self.txid = txid
        self.vout = vout
        self._disassemble = disassemble
        self.scriptsig = scriptsig
        self.sequence = sequence

    @property
    def scriptsig(self) -> bytes:
        return self._scriptsig

    @scriptsig.setter
    def scriptsig(self, scriptsig: bytes):
        # Keep the asm in step with the bytes
        self._scriptsig = scriptsig
        self.scriptsig_asm = to_asm(scriptsig) if self._disassemble and not self.is_null else None

    @property
    def is_null(self) -> bool:
        return self.vout == TX.NULL_VOUT

    @property
    def outpoint(self) -> bytes:
        """
        Wire form: reversed txid || vout
        """
        return self.txid[::-1] + write_little_int(self.vout, TX.VOUT)

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED, hash_only: bool = False):
        stream = get_stream(byte_stream)

        txid = read_stream(stream, TX.TXID, "txid")[::-1]
        vout = read_little_int(stream, TX.VOUT, "vout")
        scriptsig = read_length_prefixed(stream, "scriptsig")
        sequence = read_little_int(stream, TX.SEQUENCE, "sequence")

        return cls(txid, vout, scriptsig, sequence, disassemble=not hash_only)

    def to_bytes(self) -> bytes:
        """
        Serialize input
        txid || vout || scriptsig_size || scriptsig || sequence
        """
        parts = [
            self.outpoint,
            write_length_prefixed(self.scriptsig),
            write_little_int(self.sequence, TX.SEQUENCE)
        ]
        return b''.join(parts)

    def to_dict(self) -> dict:
        return {
            "txid": self.txid.hex(),
            "vout": self.vout,
            "scriptsig": self.scriptsig.hex(),
            "scriptsig_asm": asm_string(self.scriptsig_asm) if self.scriptsig_asm is not None else None,
            "sequence": self.sequence
        }


class TxOutput(Serializable):
    """
    TxOutput
    -----------------------------------------------------------------
    |   Field               |   Byte Size   |   Format              |
    -----------------------------------------------------------------
    |   Amount              |   8           |   signed little-endian|
    |   scriptpubkey_size   |   var         |   CompactSize         |
    |   scriptpubkey        |   var         |   Script              |
    -----------------------------------------------------------------
    """
    __slots__ = ("amount", "_scriptpubkey", "scriptpubkey_asm")

    def __init__(self, amount: int, scriptpubkey: bytes):
        self.amount = amount
        self.scriptpubkey = scriptpubkey

    @property
    def scriptpubkey(self) -> bytes:
        return self._scriptpubkey

    @scriptpubkey.setter
    def scriptpubkey(self, scriptpubkey: bytes):
        self._scriptpubkey = scriptpubkey
        self.scriptpubkey_asm = to_asm(scriptpubkey)

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        amount = read_little_int(stream, TX.AMOUNT, "amount", signed=True)
        scriptpubkey = read_length_prefixed(stream, "scriptpubkey")

        return cls(amount, scriptpubkey)

    def to_bytes(self) -> bytes:
        """
        amount || scriptpubkey_size || scriptpubkey
        """
        return write_little_int(self.amount, TX.AMOUNT, signed=True) + write_length_prefixed(self.scriptpubkey)

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "scriptpubkey": self.scriptpubkey.hex(),
            "scriptpubkey_asm": asm_string(self.scriptpubkey_asm)
        }


class WitnessField(Serializable):
    """
    WitnessField
    -------------------------------------------------------------
    |   Field           |   Byte Size   |   Format              |
    -------------------------------------------------------------
    |   Stack Items     |   var         |   CompactSize         |
    =============================================================
    |   Size            |   var         |   CompactSize         |
    |   Item            |   var         |   bytes               |
    =============================================================
    |   the Size | Item format repeats for all witness items    |
    -------------------------------------------------------------
    """
    __slots__ = ("items",)

    def __init__(self, items: list[bytes] = None):
        self.items = list(items) if items else []

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED):
        stream = get_stream(byte_stream)

        stack_items = read_compact_size(stream)
        return cls([read_length_prefixed(stream, "witness item") for _ in range(stack_items)])

    def to_bytes(self) -> bytes:
        return write_compact_size(len(self.items)) + b''.join(write_length_prefixed(item) for item in self.items)

    def to_dict(self) -> dict:
        return {
            "stack_items": len(self.items),
            "items": [item.hex() for item in self.items]
        }

    def __len__(self):
        return len(self.items)


class Transaction(Serializable):
    """
    Transaction
    -------------------------------------------------------------
    |   Field           |   Byte Size   |   Format              |
    -------------------------------------------------------------
    |   Version         |   4           |   signed little-endian|
    |   Marker*         |   1           |   fixed byte          |
    |   Flag*           |   1           |   fixed byte          |
    |   input_count     |   var         |   CompactSize         |
    |   inputs          |   var         |   TxInput             |
    |   output_count    |   var         |   CompactSize         |
    |   outputs         |   var         |   TxOutput            |
    |   witness*        |   var         |   WitnessField        |
    |   locktime        |   4           |   little-endian       |
    -------------------------------------------------------------
    * indicates optional segwit specific fields

    There is always one WitnessField per input; for legacy transactions they are empty.
    """
    __slots__ = ("version", "inputs", "outputs", "witness", "locktime", "segwit")

    def __init__(self, inputs: list[TxInput] = None, outputs: list[TxOutput] = None,
                 witness: list[WitnessField] = None, locktime: int = 0, version: int = TX.DEFAULT_VERSION,
                 segwit: bool = None):
        self.inputs = inputs or []
        self.outputs = outputs or []
        self.witness = list(witness or [])
        self.locktime = locktime
        self.version = version

        # Pad witness to input count
        while len(self.witness) < len(self.inputs):
            self.witness.append(WitnessField())

        self.segwit = segwit if segwit is not None else any(len(w) > 0 for w in self.witness)

    @classmethod
    def from_bytes(cls, byte_stream: SERIALIZED, hash_only: bool = False):
        """
        Decode a complete transaction. With hash_only the scriptsigs are not disassembled; the result is only used
        to build signature hashes.
        """
        stream = get_stream(byte_stream)

        version = read_little_int(stream, TX.VERSION, "version", signed=True)

        # Marker | Flag
        segwit = False
        marker = read_stream(stream, 1, "marker")
        if marker == TX.MARKER:
            flag = read_stream(stream, 1, "flag")
            if flag == TX.FLAG:
                segwit = True
            elif flag == b'\x00':
                # Zero inputs followed by zero outputs
                stream.seek(-2, 1)
            else:
                raise UnsupportedTxError(f"Unsupported segwit flag: {flag.hex()}")
        else:
            stream.seek(-1, 1)

        input_num = read_compact_size(stream)
        inputs = [TxInput.from_bytes(stream, hash_only=hash_only) for _ in range(input_num)]

        output_num = read_compact_size(stream)
        outputs = [TxOutput.from_bytes(stream) for _ in range(output_num)]

        witness = [WitnessField.from_bytes(stream) for _ in range(input_num)] if segwit else []

        locktime = read_little_int(stream, TX.LOCKTIME, "locktime")

        if stream.read(1):
            raise ReadError("trailing data")

        return cls(inputs, outputs, witness, locktime, version, segwit)

    def to_bytes(self, include_witness: bool = True) -> bytes:
        """
        Serialize the transaction. Marker, flag and witness are only written for segwit transactions when
        include_witness is set.
        """
        with_witness = self.segwit and include_witness
        parts = [write_little_int(self.version, TX.VERSION, signed=True)]
        if with_witness:
            parts.append(TX.MARKER + TX.FLAG)
        parts.append(write_compact_size(len(self.inputs)))
        parts.extend(i.to_bytes() for i in self.inputs)
        parts.append(write_compact_size(len(self.outputs)))
        parts.extend(o.to_bytes() for o in self.outputs)
        if with_witness:
            parts.extend(w.to_bytes() for w in self.witness)
        parts.append(write_little_int(self.locktime, TX.LOCKTIME))
        return b''.join(parts)

    def clone(self, hash_only: bool = False):
        return self.from_bytes(self.to_bytes(), hash_only=hash_only)

    @property
    def is_coinbase(self) -> bool:
        return len(self.inputs) == 1 and self.inputs[0].is_null and self.inputs[0].txid == b'\x00' * TX.TXID

    @property
    def txid(self) -> bytes:
        """
        Display-order txid: the reversed hash256 of the witness-stripped serialization
        """
        return hash256(self.to_bytes(include_witness=False))[::-1]

    @property
    def wtxid(self) -> bytes:
        return hash256(self.to_bytes())[::-1]

    def to_dict(self) -> dict:
        tx_dict = {
            "txid": self.txid.hex(),
            "wtxid": self.wtxid.hex(),
            "version": self.version,
            "segwit": self.segwit,
            "inputs": [i.to_dict() for i in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
            "locktime": self.locktime
        }
        if self.segwit:
            tx_dict["witness"] = [w.to_dict() for w in self.witness]
        return tx_dict
