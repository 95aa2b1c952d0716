"""
The ScriptValidator class

For each input we resolve the script pair to run and the signature hash algorithm to use, then hand both to a fresh
ScriptEngine. The attempts for an input are bounded:
    1. the base run, with v0 witness programs resolved to the script they commit to
    2. the P2SH redeem run, required whenever the base run succeeds against a P2SH scriptpubkey
    3. the permissive retry with an empty scriptsig, when enabled and the scriptsig was non-empty

Witness items only reach the stack of a v0 witness program run; a legacy run always starts from an empty stack.
"""
from bitverify.core import ScriptEngineError
from bitverify.core.logging import get_logger
from bitverify.crypto import sha256
from bitverify.script import ScriptEngine, ExecutionContext, ValidatorConfig, to_asm, is_p2sh, is_p2wpkh, is_p2wsh, \
    is_push_only, is_literal, push_data, p2pkh_tokens, PUSHDATA_WIDTHS
from bitverify.tx import Transaction, TxOutput
from bitverify.validation.sighash import SignatureEngine

logger = get_logger(__name__)

__all__ = ["ScriptValidator"]


class ScriptValidator:

    def __init__(self, config: ValidatorConfig = None):
        self.config = config or ValidatorConfig()
        self.signature_engine = SignatureEngine()

    def verify(self, tx: Transaction, prev_txs: list) -> bool:
        """
        Verify every input of tx. prev_txs[i] is the transaction whose output input i spends; a coinbase has no
        scripts to run and its entry may be None. Returns False at the first failing input.
        """
        if tx.is_coinbase:
            logger.debug(f"Coinbase tx {tx.txid.hex()}; no scripts to run")
            return True

        if len(prev_txs) < len(tx.inputs):
            raise ScriptEngineError(f"Expected {len(tx.inputs)} previous transactions, received {len(prev_txs)}")

        for n in range(len(tx.inputs)):
            prev_output = self._get_prev_output(tx, n, prev_txs[n])
            if not self.verify_input(tx, n, prev_output):
                logger.info(f"Input {n} of tx {tx.txid.hex()} failed validation")
                return False

        logger.debug(f"All inputs of tx {tx.txid.hex()} validated")
        return True

    def verify_input(self, tx: Transaction, input_index: int, prev_output: TxOutput) -> bool:
        if tx.is_coinbase:
            logger.debug(f"Input {input_index} belongs to a coinbase; no scripts to run")
            return True

        txin = tx.inputs[input_index]
        scriptsig = txin.scriptsig_asm if txin.scriptsig_asm is not None else to_asm(txin.scriptsig)
        scriptpubkey = prev_output.scriptpubkey_asm
        witness = tx.witness[input_index].items if input_index < len(tx.witness) else []

        # 1. Base run, then 2. P2SH redeem run
        result = self._attempt(tx, input_index, prev_output.amount, scriptsig, scriptpubkey, witness)

        # 3. Permissive retry
        if not result and self.config.permissive_retry and scriptsig:
            logger.debug(f"Retrying input {input_index} with an empty scriptsig")
            result = self._attempt(tx, input_index, prev_output.amount, [], scriptpubkey, witness)

        return result

    # --- Attempts --- #

    def _attempt(self, tx: Transaction, input_index: int, amount: int, scriptsig: list[str],
                 scriptpubkey: list[str], witness: list[bytes]) -> bool:
        """
        A base run; against a P2SH scriptpubkey it only counts once the redeem script has also passed
        """
        if not self._run(tx, input_index, amount, scriptsig, scriptpubkey, witness):
            return False
        if not is_p2sh(scriptpubkey):
            return True
        return self._redeem(tx, input_index, amount, scriptsig, witness)

    @staticmethod
    def _get_prev_output(tx: Transaction, input_index: int, prev_tx: Transaction) -> TxOutput:
        txin = tx.inputs[input_index]
        if prev_tx is None:
            raise ScriptEngineError(f"Missing previous transaction for input {input_index}")
        if txin.vout >= len(prev_tx.outputs):
            raise ScriptEngineError(
                f"Previous transaction {txin.txid.hex()} has no output {txin.vout} for input {input_index}")
        return prev_tx.outputs[txin.vout]

    def _run(self, tx: Transaction, input_index: int, amount: int, scriptsig: list[str], scriptpubkey: list[str],
             witness: list[bytes]) -> bool:
        """
        Run one script pair. A v0 witness program is replaced by the script it commits to and is hashed with the
        segwit algorithm; its scriptsig must be empty.
        """
        if is_p2wpkh(scriptpubkey):
            if scriptsig or len(witness) != 2:
                logger.debug("P2WPKH spend needs an empty scriptsig and exactly two witness items")
                return False
            return self._execute(tx, input_index, amount, [], p2pkh_tokens(scriptpubkey[1]), witness, True)

        if is_p2wsh(scriptpubkey):
            if scriptsig or not witness:
                logger.debug("P2WSH spend needs an empty scriptsig and a witness script")
                return False
            witness_script = witness[-1]
            if sha256(witness_script) != push_data(scriptpubkey[1]):
                logger.debug("Witness script does not match the P2WSH program")
                return False
            return self._execute(tx, input_index, amount, [], to_asm(witness_script), witness[:-1], True)

        return self._execute(tx, input_index, amount, scriptsig, scriptpubkey, [], False)

    def _redeem(self, tx: Transaction, input_index: int, amount: int, scriptsig: list[str],
                witness: list[bytes]) -> bool:
        """
        The last push of the scriptsig is the redeem script; the pushes before it form the new scriptsig. OP_0
        pushes the empty redeem script.
        """
        if not scriptsig or not is_push_only(scriptsig):
            logger.debug("P2SH spend needs a non-empty push-only scriptsig")
            return False
        if scriptsig[-1] == "OP_0":
            redeem_script = []
        elif is_literal(scriptsig[-1]):
            redeem_script = to_asm(push_data(scriptsig[-1]))
        else:
            logger.debug("P2SH scriptsig does not end with a data push")
            return False

        strip = 2 if len(scriptsig) > 1 and scriptsig[-2] in PUSHDATA_WIDTHS else 1
        new_scriptsig = scriptsig[:-strip]

        logger.debug(f"Running P2SH redeem script for input {input_index}")
        return self._run(tx, input_index, amount, new_scriptsig, redeem_script, witness)

    def _execute(self, tx: Transaction, input_index: int, amount: int, scriptsig: list[str],
                 scriptpubkey: list[str], initial_stack: list[bytes], is_segwit: bool) -> bool:
        if is_segwit:
            def sighash_fn(script_code: bytes, hash_type: int) -> bytes:
                return self.signature_engine.get_segwit_sighash(tx, input_index, amount, script_code, hash_type)
        else:
            def sighash_fn(script_code: bytes, hash_type: int) -> bytes:
                return self.signature_engine.get_legacy_sighash(tx, input_index, script_code, hash_type)

        ctx = ExecutionContext(
            sighash_fn=sighash_fn,
            initial_stack=tuple(initial_stack),
            is_segwit=is_segwit,
            config=self.config
        )
        return ScriptEngine().validate_script_pair(scriptsig, scriptpubkey, ctx)
