"""
End-to-end tests for the ScriptValidator: transactions spending outputs we fund and sign ourselves
"""
import random
from secrets import token_bytes

import pytest

from bitverify.core import ScriptEngineError, SIGHASH, TX
from bitverify.crypto import PubKey, ecdsa, encode_der_signature, hash160, sha256
from bitverify.script import DISABLED_OPS, from_asm, p2pkh_tokens
from bitverify.tx import Transaction, TxInput, TxOutput, WitnessField
from bitverify.validation import SigHash
from tests.randbtc_generators import getrand_privkey

FUNDING_AMOUNT = 50_000


def _p2pkh_scriptpubkey(pubkey: PubKey) -> bytes:
    return from_asm(p2pkh_tokens(pubkey.pubkey_hash()))


def _p2sh_scriptpubkey(redeem_script: bytes) -> bytes:
    return from_asm(["OP_HASH160", hash160(redeem_script).hex(), "OP_EQUAL"])


def _funding_tx(*scriptpubkeys: bytes, amount: int = FUNDING_AMOUNT) -> Transaction:
    txin = TxInput(token_bytes(TX.TXID), 0, bytes.fromhex("51"))
    return Transaction([txin], [TxOutput(amount, spk) for spk in scriptpubkeys])


def _spending_tx(funding: Transaction, vouts: tuple = (0,), output_num: int = 1) -> Transaction:
    inputs = [TxInput(funding.txid, vout) for vout in vouts]
    outputs = [TxOutput(10_000 + n, from_asm(p2pkh_tokens(token_bytes(20)))) for n in range(output_num)]
    return Transaction(inputs, outputs)


def _sign_p2pkh(sig_engine, tx: Transaction, input_index: int, priv_key: int, pubkey: PubKey,
                sighash_num: int = SigHash.ALL) -> bytes:
    sighash = sig_engine.get_legacy_sighash(tx, input_index, _p2pkh_scriptpubkey(pubkey), sighash_num)
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash, sighash_num)
    tx.inputs[input_index].scriptsig = from_asm([sig.hex(), pubkey.compressed().hex()])
    return sig


@pytest.fixture()
def p2pkh_spend(sig_engine, keypair):
    priv_key, pubkey = keypair
    funding = _funding_tx(_p2pkh_scriptpubkey(pubkey))
    spend = _spending_tx(funding)
    sig = _sign_p2pkh(sig_engine, spend, 0, priv_key, pubkey)
    return funding, spend, sig, pubkey


# --- P2PKH --- #


def test_p2pkh_spend(validator, strict_validator, p2pkh_spend):
    funding, spend, _, _ = p2pkh_spend
    assert validator.verify(spend, [funding]), "Signed P2PKH spend failed validation"
    assert strict_validator.verify(spend, [funding])


def test_p2pkh_round_trip_spend(validator, p2pkh_spend):
    funding, spend, _, _ = p2pkh_spend
    decoded = Transaction.from_bytes(spend.to_bytes())
    assert validator.verify(decoded, [funding])


def test_signature_bit_flips(validator, p2pkh_spend):
    """
    Any flipped bit of the signature invalidates the spend. Byte 1 (the DER sequence length) is skipped: the lax
    DER parser does not read it.
    """
    funding, spend, sig, pubkey = p2pkh_spend
    positions = [bit for bit in range(len(sig) * 8) if bit // 8 != 1]

    for bit in random.sample(positions, 12):
        flipped = bytearray(sig)
        flipped[bit // 8] ^= 1 << (bit % 8)
        tampered = spend.clone()
        tampered.inputs[0].scriptsig = from_asm([bytes(flipped).hex(), pubkey.compressed().hex()])
        assert not validator.verify(tampered, [funding]), f"Spend validated with signature bit {bit} flipped"


def test_sequence_length_byte_ignored_when_lax(validator, strict_validator, p2pkh_spend):
    funding, spend, sig, pubkey = p2pkh_spend
    flipped = bytearray(sig)
    flipped[1] ^= 0x01
    spend.inputs[0].scriptsig = from_asm([bytes(flipped).hex(), pubkey.compressed().hex()])

    assert validator.verify(spend, [funding])
    assert not strict_validator.verify(spend, [funding])


def test_pubkey_bit_flip(validator, p2pkh_spend):
    funding, spend, sig, pubkey = p2pkh_spend
    flipped = bytearray(pubkey.compressed())
    flipped[random.randrange(1, len(flipped))] ^= 0x10
    spend.inputs[0].scriptsig = from_asm([sig.hex(), bytes(flipped).hex()])
    assert not validator.verify(spend, [funding])


@pytest.mark.parametrize("field", ["amount", "locktime", "version", "sequence"])
def test_tampered_transaction(validator, p2pkh_spend, field):
    funding, spend, _, _ = p2pkh_spend
    match field:
        case "amount":
            spend.outputs[0].amount += 1
        case "locktime":
            spend.locktime += 1
        case "version":
            spend.version = 2
        case _:
            spend.inputs[0].sequence -= 1
    assert not validator.verify(spend, [funding])


# --- Hash types --- #


def test_sighash_single(validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    spk = _p2pkh_scriptpubkey(pubkey)
    funding = _funding_tx(spk, spk)
    spend = _spending_tx(funding, vouts=(0, 1), output_num=2)

    _sign_p2pkh(sig_engine, spend, 0, priv_key, pubkey, SigHash.SINGLE)
    _sign_p2pkh(sig_engine, spend, 1, priv_key, pubkey, SigHash.ALL)
    assert validator.verify(spend, [funding, funding])

    # Input 0 only commits to output 0
    spend.outputs[1] = TxOutput(1, bytes.fromhex("51"))
    assert validator.verify_input(spend, 0, funding.outputs[0])
    assert not validator.verify_input(spend, 1, funding.outputs[1])
    assert not validator.verify(spend, [funding, funding])

    spend.outputs[0].amount += 1
    assert not validator.verify_input(spend, 0, funding.outputs[0])


def test_sighash_single_without_output(strict_validator, sig_engine, keypair):
    """
    Input 1 has no matching output: its legacy sighash is 01 00 .. 00, which verifies without the sentinel fallback
    """
    priv_key, pubkey = keypair
    spk = _p2pkh_scriptpubkey(pubkey)
    funding = _funding_tx(spk, spk)
    spend = _spending_tx(funding, vouts=(0, 1), output_num=1)

    sig = _sign_p2pkh(sig_engine, spend, 1, priv_key, pubkey, SigHash.SINGLE)
    assert strict_validator.verify_input(spend, 1, funding.outputs[1])
    assert sig[-1] == SigHash.SINGLE


def test_sighash_anyonecanpay(validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    spk = _p2pkh_scriptpubkey(pubkey)
    funding = _funding_tx(spk, spk)
    spend = _spending_tx(funding)
    _sign_p2pkh(sig_engine, spend, 0, priv_key, pubkey, SigHash.ALL_ANYONECANPAY)
    assert validator.verify_input(spend, 0, funding.outputs[0])

    spend.inputs.append(TxInput(funding.txid, 1))
    spend.witness.append(WitnessField())
    assert validator.verify_input(spend, 0, funding.outputs[0]), "Adding an input broke an ANYONECANPAY signature"


def test_sighash_none(validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    funding = _funding_tx(_p2pkh_scriptpubkey(pubkey))
    spend = _spending_tx(funding, output_num=2)
    _sign_p2pkh(sig_engine, spend, 0, priv_key, pubkey, SigHash.NONE)

    spend.outputs = [TxOutput(1, bytes.fromhex("6a"))]
    assert validator.verify(spend, [funding])


# --- Legacy-compatibility switches --- #


def test_sentinel_fallback(validator, strict_validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    funding = _funding_tx(_p2pkh_scriptpubkey(pubkey))
    spend = _spending_tx(funding)
    sig = sig_engine.get_ecdsa_sig(priv_key, SIGHASH.ONE, SigHash.ALL)
    spend.inputs[0].scriptsig = from_asm([sig.hex(), pubkey.compressed().hex()])

    assert validator.verify(spend, [funding])
    assert not strict_validator.verify(spend, [funding])


def test_lax_der(validator, strict_validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    funding = _funding_tx(_p2pkh_scriptpubkey(pubkey))
    spend = _spending_tx(funding)
    sighash = sig_engine.get_legacy_sighash(spend, 0, _p2pkh_scriptpubkey(pubkey), SigHash.ALL)
    r, s = ecdsa(priv_key, sighash)
    sig = encode_der_signature(r, s) + b'\x00' + SigHash.ALL.to_byte()
    spend.inputs[0].scriptsig = from_asm([sig.hex(), pubkey.compressed().hex()])

    assert validator.verify(spend, [funding])
    assert not strict_validator.verify(spend, [funding])


def test_permissive_retry(validator, strict_validator):
    # Passes only when the stack starts empty
    funding = _funding_tx(from_asm(["OP_DEPTH", "OP_0", "OP_EQUAL"]))
    spend = _spending_tx(funding)
    spend.inputs[0].scriptsig = from_asm(["OP_1"])

    assert validator.verify(spend, [funding])
    assert not strict_validator.verify(spend, [funding])


def test_permissive_retry_needs_scriptsig(validator):
    funding = _funding_tx(from_asm(["OP_0"]))
    spend = _spending_tx(funding)
    assert not validator.verify(spend, [funding])


@pytest.mark.parametrize("disabled_op", sorted(DISABLED_OPS))
def test_disabled_opcode_always_fails(validator, disabled_op):
    funding = _funding_tx(from_asm(["OP_0", "OP_IF", disabled_op, "OP_ENDIF", "OP_1"]),
                          from_asm(["OP_1", "OP_1", disabled_op, "OP_DROP", "OP_1"]))
    skipped = _spending_tx(funding, vouts=(0,))
    executed = _spending_tx(funding, vouts=(1,))

    assert not validator.verify(skipped, [funding])
    assert not validator.verify(executed, [funding])


# --- P2SH --- #


def test_p2sh_trivial_redeem(validator):
    redeem_script = from_asm(["OP_1"])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)
    spend.inputs[0].scriptsig = from_asm([redeem_script.hex()])

    assert validator.verify(spend, [funding])
    assert validator.verify(spend, [funding]), "Verification should be repeatable"


def test_p2sh_failing_redeem(validator):
    redeem_script = from_asm(["OP_0"])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)
    spend.inputs[0].scriptsig = from_asm([redeem_script.hex()])

    assert not validator.verify(spend, [funding]), "A P2SH spend must also pass its redeem script"


@pytest.mark.parametrize("redeem_asm", [["OP_0"], ["OP_1"]])
def test_p2sh_redeem_script_in_witness_only(validator, strict_validator, redeem_asm):
    # Witness items never reach the stack of a legacy run
    redeem_script = from_asm(redeem_asm)
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)
    spend.witness = [WitnessField([redeem_script])]
    spend.segwit = True

    assert not strict_validator.verify(spend, [funding])
    assert not validator.verify(spend, [funding])


def test_p2sh_retry_runs_redeem_script(validator):
    redeem_script = from_asm(["OP_0"])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)
    spend.inputs[0].scriptsig = from_asm(["OP_1"])
    spend.witness = [WitnessField([redeem_script])]
    spend.segwit = True

    assert not validator.verify(spend, [funding]), "The permissive retry must not skip the redeem script"


def test_p2sh_non_push_only_scriptsig(validator, strict_validator):
    redeem_script = from_asm(["OP_1"])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)
    spend.inputs[0].scriptsig = from_asm(["OP_1", "OP_DROP", redeem_script.hex()])

    assert not strict_validator.verify(spend, [funding])
    assert not validator.verify(spend, [funding])


def test_p2sh_empty_redeem_script(validator, strict_validator):
    funding = _funding_tx(_p2sh_scriptpubkey(b''))
    spend = _spending_tx(funding)

    # OP_0 pushes the empty redeem script, which leaves the rest of the scriptsig to decide
    spend.inputs[0].scriptsig = from_asm(["OP_1", "OP_0"])
    assert strict_validator.verify(spend, [funding])
    assert validator.verify(spend, [funding])

    spend.inputs[0].scriptsig = from_asm(["OP_0", "OP_0"])
    assert not strict_validator.verify(spend, [funding])
    assert not validator.verify(spend, [funding])


def test_p2sh_multisig(validator, strict_validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    redeem_script = from_asm(["OP_1", pubkey.compressed().hex(), "OP_1", "OP_CHECKMULTISIG"])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)

    sighash = sig_engine.get_legacy_sighash(spend, 0, redeem_script, SigHash.ALL)
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash)
    spend.inputs[0].scriptsig = from_asm(["OP_0", sig.hex(), redeem_script.hex()])

    assert validator.verify(spend, [funding])
    assert strict_validator.verify(spend, [funding])

    # Signing the P2SH scriptpubkey instead of the redeem script
    wrong_sighash = sig_engine.get_legacy_sighash(spend, 0, funding.outputs[0].scriptpubkey, SigHash.ALL)
    wrong_sig = sig_engine.get_ecdsa_sig(priv_key, wrong_sighash)
    spend.inputs[0].scriptsig = from_asm(["OP_0", wrong_sig.hex(), redeem_script.hex()])
    assert not validator.verify(spend, [funding])


def test_p2sh_large_redeem_script(validator, sig_engine):
    """
    A 2-of-4 with uncompressed keys is pushed with OP_PUSHDATA2
    """
    priv_keys = [getrand_privkey() for _ in range(4)]
    pubkeys = [PubKey(k).uncompressed().hex() for k in priv_keys]
    redeem_script = from_asm(["OP_2"] + pubkeys + ["OP_4", "OP_CHECKMULTISIG"])
    assert len(redeem_script) > 0xff

    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)
    sighash = sig_engine.get_legacy_sighash(spend, 0, redeem_script, SigHash.ALL)
    sigs = [sig_engine.get_ecdsa_sig(k, sighash).hex() for k in (priv_keys[1], priv_keys[3])]
    spend.inputs[0].scriptsig = from_asm(["OP_0"] + sigs + [redeem_script.hex()])

    assert spend.inputs[0].scriptsig_asm[-2] == "OP_PUSHDATA2"
    assert validator.verify(spend, [funding])


# --- Segwit --- #


def test_p2wpkh_spend(validator, strict_validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    pubkey_hash = pubkey.pubkey_hash()
    funding = _funding_tx(from_asm(["OP_0", pubkey_hash.hex()]))
    spend = _spending_tx(funding)

    script_code = from_asm(p2pkh_tokens(pubkey_hash))
    sighash = sig_engine.get_segwit_sighash(spend, 0, FUNDING_AMOUNT, script_code, SigHash.ALL)
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash)
    spend.witness = [WitnessField([sig, pubkey.compressed()])]
    spend.segwit = True

    assert validator.verify(spend, [funding])
    assert strict_validator.verify(spend, [funding])
    assert validator.verify(Transaction.from_bytes(spend.to_bytes()), [funding])

    assert not validator.verify_input(spend, 0, TxOutput(FUNDING_AMOUNT + 1, funding.outputs[0].scriptpubkey))

    # The legacy algorithm gives a different message
    legacy_sighash = sig_engine.get_legacy_sighash(spend, 0, script_code, SigHash.ALL)
    legacy_sig = sig_engine.get_ecdsa_sig(priv_key, legacy_sighash)
    spend.witness = [WitnessField([legacy_sig, pubkey.compressed()])]
    assert not validator.verify(spend, [funding])


def test_p2wpkh_witness_shape(validator, strict_validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    pubkey_hash = pubkey.pubkey_hash()
    funding = _funding_tx(from_asm(["OP_0", pubkey_hash.hex()]))
    spend = _spending_tx(funding)
    sighash = sig_engine.get_segwit_sighash(spend, 0, FUNDING_AMOUNT, from_asm(p2pkh_tokens(pubkey_hash)))
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash)

    spend.witness = [WitnessField([sig, pubkey.compressed(), b'\x01'])]
    assert not validator.verify(spend, [funding]), "P2WPKH needs exactly two witness items"

    spend.witness = [WitnessField([sig, pubkey.compressed()])]
    spend.inputs[0].scriptsig = from_asm(["OP_1"])
    assert not strict_validator.verify(spend, [funding]), "P2WPKH needs an empty scriptsig"
    # The permissive retry drops the scriptsig
    assert validator.verify(spend, [funding])


def test_p2wsh_spend(validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    witness_script = from_asm([pubkey.compressed().hex(), "OP_CHECKSIG"])
    funding = _funding_tx(from_asm(["OP_0", sha256(witness_script).hex()]))
    spend = _spending_tx(funding)

    sighash = sig_engine.get_segwit_sighash(spend, 0, FUNDING_AMOUNT, witness_script, SigHash.ALL)
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash)
    spend.witness = [WitnessField([sig, witness_script])]
    spend.segwit = True
    assert validator.verify(spend, [funding])

    other_script = from_asm([PubKey(getrand_privkey()).compressed().hex(), "OP_CHECKSIG"])
    spend.witness = [WitnessField([sig, other_script])]
    assert not validator.verify(spend, [funding]), "Witness script must hash to the program"

    spend.witness = [WitnessField()]
    spend.segwit = False
    assert not validator.verify(spend, [funding])


def test_p2sh_p2wpkh_spend(validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    pubkey_hash = pubkey.pubkey_hash()
    redeem_script = from_asm(["OP_0", pubkey_hash.hex()])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)

    sighash = sig_engine.get_segwit_sighash(spend, 0, FUNDING_AMOUNT, from_asm(p2pkh_tokens(pubkey_hash)))
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash)
    spend.inputs[0].scriptsig = from_asm([redeem_script.hex()])
    spend.witness = [WitnessField([sig, pubkey.compressed()])]
    spend.segwit = True

    assert validator.verify(spend, [funding])
    assert not validator.verify_input(spend, 0, TxOutput(FUNDING_AMOUNT - 1, funding.outputs[0].scriptpubkey))


def test_p2sh_p2wsh_spend(validator, sig_engine, keypair):
    priv_key, pubkey = keypair
    witness_script = from_asm([pubkey.compressed().hex(), "OP_CHECKSIG"])
    redeem_script = from_asm(["OP_0", sha256(witness_script).hex()])
    funding = _funding_tx(_p2sh_scriptpubkey(redeem_script))
    spend = _spending_tx(funding)

    sighash = sig_engine.get_segwit_sighash(spend, 0, FUNDING_AMOUNT, witness_script)
    sig = sig_engine.get_ecdsa_sig(priv_key, sighash)
    spend.inputs[0].scriptsig = from_asm([redeem_script.hex()])
    spend.witness = [WitnessField([sig, witness_script])]
    spend.segwit = True

    assert validator.verify(spend, [funding])


# --- Inputs and previous transactions --- #


def test_multiple_inputs(validator, sig_engine):
    keys = [getrand_privkey() for _ in range(2)]
    pubkeys = [PubKey(k) for k in keys]
    funding = _funding_tx(*[_p2pkh_scriptpubkey(p) for p in pubkeys])
    spend = _spending_tx(funding, vouts=(0, 1))

    for n in range(2):
        _sign_p2pkh(sig_engine, spend, n, keys[n], pubkeys[n])
    assert validator.verify(spend, [funding, funding])

    # Input 1 signed with the wrong key
    _sign_p2pkh(sig_engine, spend, 1, keys[0], pubkeys[0])
    assert validator.verify_input(spend, 0, funding.outputs[0])
    assert not validator.verify(spend, [funding, funding])


def test_coinbase_input(validator):
    coinbase_input = TxInput(b'\x00' * TX.TXID, TX.NULL_VOUT, bytes.fromhex("03a0bb0d184d696e6564"))
    coinbase = Transaction([coinbase_input], [TxOutput(625000000, bytes.fromhex("51"))])

    assert validator.verify(coinbase, [None])
    assert validator.verify_input(coinbase, 0, TxOutput(0, b''))


def test_null_outpoint_outside_coinbase(strict_validator):
    inputs = [TxInput(token_bytes(TX.TXID), TX.NULL_VOUT, bytes.fromhex("51")) for _ in range(2)]
    tx = Transaction(inputs, [TxOutput(1000, bytes.fromhex("51"))])
    assert not tx.is_coinbase

    with pytest.raises(ScriptEngineError):
        strict_validator.verify(tx, [None, None])

    funding = _funding_tx(bytes.fromhex("51"))
    with pytest.raises(ScriptEngineError):
        strict_validator.verify(tx, [funding, funding])

    # Given an output, its scripts are run like any other input
    assert not strict_validator.verify_input(tx, 0, TxOutput(0, from_asm(["OP_0"])))
    assert strict_validator.verify_input(tx, 0, TxOutput(0, from_asm(["OP_1"])))


def test_missing_previous_transaction(validator, p2pkh_spend):
    funding, spend, _, _ = p2pkh_spend
    with pytest.raises(ScriptEngineError):
        validator.verify(spend, [])
    with pytest.raises(ScriptEngineError):
        validator.verify(spend, [None])


def test_missing_previous_output(validator, p2pkh_spend):
    funding, spend, _, _ = p2pkh_spend
    spend.inputs[0].vout = 3
    with pytest.raises(ScriptEngineError):
        validator.verify(spend, [funding])
