"""
We test the various parts of a bitverify transaction
"""
import pytest

from bitverify.core import ReadError, UnsupportedTxError, TX
from bitverify.crypto import hash256
from bitverify.tx import TxInput, TxOutput, WitnessField, Transaction
from tests.randbtc_generators import getrand_txinput, getrand_txoutput, getrand_witnessfield, getrand_tx
from tests.vectors import P2PK_TX, P2PKH_TX, P2MS_TX, P2SH_P2MS_TX, P2SH_P2WPKH_TX, P2WPKH_TX

MAINNET_TXS = [P2PK_TX, P2PKH_TX, P2MS_TX, P2SH_P2MS_TX, P2SH_P2WPKH_TX, P2WPKH_TX]


def test_txinput():
    random_txinput = getrand_txinput()
    recovered_txinput = TxInput.from_bytes(random_txinput.to_bytes())

    assert recovered_txinput == random_txinput, "Failed to reconstruct TxInput using to_bytes -> from_bytes method"
    assert recovered_txinput.txid == random_txinput.txid
    assert recovered_txinput.scriptsig_asm is not None


def test_txinput_txid_reversed_on_wire():
    txin = TxInput(bytes.fromhex("00" * 31 + "ff"), 2)
    assert txin.to_bytes()[:TX.TXID] == bytes.fromhex("ff" + "00" * 31)
    assert txin.outpoint == bytes.fromhex("ff" + "00" * 31) + bytes.fromhex("02000000")


def test_txoutput():
    random_txoutput = getrand_txoutput()
    recovered_txoutput = TxOutput.from_bytes(random_txoutput.to_bytes())

    assert recovered_txoutput == random_txoutput, "Failed to reconstruct TxOutput using to_bytes -> from_bytes method"
    assert recovered_txoutput.scriptpubkey_asm == random_txoutput.scriptpubkey_asm


def test_txoutput_negative_amount():
    placeholder = TxOutput(-1, b'')
    assert placeholder.to_bytes() == b'\xff' * 8 + b'\x00'
    assert TxOutput.from_bytes(placeholder.to_bytes()).amount == -1


def test_witness():
    random_witness = getrand_witnessfield()
    recovered_witness = WitnessField.from_bytes(random_witness.to_bytes())

    assert random_witness == recovered_witness, "Failed to reconstruct WitnessField using to_bytes -> from_bytes method"


@pytest.mark.parametrize("segwit", [True, False])
def test_random_tx_round_trip(segwit):
    random_tx = getrand_tx(segwit)
    recovered_tx = Transaction.from_bytes(random_tx.to_bytes())

    assert recovered_tx == random_tx, "Failed to reconstruct Transaction using to_bytes -> from_bytes method"
    assert recovered_tx.segwit is segwit
    assert len(recovered_tx.witness) == len(recovered_tx.inputs)


@pytest.mark.parametrize("tx_hex", MAINNET_TXS)
def test_mainnet_round_trip(tx_hex):
    tx_bytes = bytes.fromhex(tx_hex)
    assert Transaction.from_bytes(tx_bytes).to_bytes() == tx_bytes


def test_txid_and_wtxid():
    segwit_tx = Transaction.from_bytes(bytes.fromhex(P2WPKH_TX))
    assert segwit_tx.segwit
    assert segwit_tx.txid == hash256(segwit_tx.to_bytes(include_witness=False))[::-1]
    assert segwit_tx.wtxid == hash256(segwit_tx.to_bytes())[::-1]
    assert segwit_tx.txid != segwit_tx.wtxid

    legacy_tx = Transaction.from_bytes(bytes.fromhex(P2PKH_TX))
    assert not legacy_tx.segwit
    assert legacy_tx.txid == legacy_tx.wtxid
    assert legacy_tx.witness == [WitnessField()]


def test_display_txid_of_inputs():
    tx = Transaction.from_bytes(bytes.fromhex(P2PK_TX))
    assert tx.inputs[0].txid.hex() == "1db6251a9afce7025a2061a19e63c700dffc3bec368bd1883decfac353357a9d"
    assert tx.inputs[0].vout == 1


def test_trailing_data():
    tx_bytes = bytes.fromhex(P2PKH_TX)
    with pytest.raises(ReadError, match="trailing data"):
        Transaction.from_bytes(tx_bytes + b'\x00')


def test_truncated_tx():
    tx_bytes = bytes.fromhex(P2WPKH_TX)
    with pytest.raises(ReadError):
        Transaction.from_bytes(tx_bytes[:-1])


def test_unsupported_flag():
    tx_bytes = bytearray(bytes.fromhex(P2WPKH_TX))
    tx_bytes[5] = 0x02  # Flag byte after the 00 marker
    with pytest.raises(UnsupportedTxError):
        Transaction.from_bytes(bytes(tx_bytes))


def test_hash_only_skips_disassembly():
    tx = Transaction.from_bytes(bytes.fromhex(P2SH_P2MS_TX), hash_only=True)
    assert all(txin.scriptsig_asm is None for txin in tx.inputs)

    full_tx = Transaction.from_bytes(bytes.fromhex(P2SH_P2MS_TX))
    assert all(txin.scriptsig_asm is not None for txin in full_tx.inputs)


def test_null_outpoint_not_disassembled():
    coinbase_input = TxInput(b'\x00' * TX.TXID, TX.NULL_VOUT, bytes.fromhex("03a0bb0d184d696e656420627920416e74506f6f6c"))
    coinbase = Transaction([coinbase_input], [TxOutput(625000000, bytes.fromhex("51"))])

    recovered = Transaction.from_bytes(coinbase.to_bytes())
    assert recovered.is_coinbase
    assert recovered.inputs[0].scriptsig_asm is None
    assert recovered == coinbase


def test_clone_is_independent():
    tx = getrand_tx()
    tx_copy = tx.clone()
    tx_copy.inputs[0].scriptsig = b''
    assert tx_copy != tx
    assert tx.clone() == tx


def test_witness_padded_to_inputs():
    inputs = [getrand_txinput() for _ in range(3)]
    tx = Transaction(inputs, [getrand_txoutput()], witness=[WitnessField([b'\x01'])])
    assert len(tx.witness) == 3
    assert tx.segwit
    assert Transaction.from_bytes(tx.to_bytes()) == tx


def test_to_dict():
    tx = Transaction.from_bytes(bytes.fromhex(P2PKH_TX))
    tx_dict = tx.to_dict()
    assert tx_dict["txid"] == tx.txid.hex()
    assert tx_dict["inputs"][0]["txid"] == "0b6461de422c46a221db99608fcbe0326e4f2325ebf2a47c9faf660ed61ee6a4"
    assert tx_dict["outputs"][0]["scriptpubkey_asm"].startswith("OP_DUP OP_HASH160")
    assert "witness" not in tx_dict
