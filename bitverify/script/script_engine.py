"""
The ScriptEngine class

The engine runs asm token lists. A script pair is run as one token list, the scriptsig tokens followed by the
scriptpubkey tokens, on a stack that may be primed with witness items. Signature checks call back into the
ExecutionContext's sighash function with (script_code, hash_type).
"""
from bitverify.core.exceptions import ScriptEngineError, BitStackError, BitNumError, SignatureError, PubKeyError
from bitverify.core.formats import OPCODE_BYTES, OPCODE_ALIASES, SCRIPT, SIGHASH
from bitverify.core.logging import get_logger
from bitverify.crypto import decode_signature, verify_ecdsa, PubKey
from bitverify.script.context import ExecutionContext
from bitverify.script.opcode_map import OPCODE_MAP, ALTSTACK_OPS, VERIFY_OPS, DISABLED_OPS, NOP_OPS, RESERVED_OPS, \
    ALWAYS_INVALID_OPS, BRANCH_OPS, SIGNATURE_OPS
from bitverify.script.parser import to_asm, from_asm, is_literal, is_invalid, push_data, asm_string, PUSHDATA_WIDTHS
from bitverify.script.stack import BitStack, cast_to_bool

logger = get_logger(__name__)

__all__ = ["ScriptEngine"]


class ScriptFailure(Exception):
    """
    Raised inside a run to stop it; the run then evaluates to False
    """
    pass


class ScriptEngine:
    opcode_map = OPCODE_MAP

    def __init__(self):
        self.stack = BitStack()
        self.alt_stack = BitStack()
        self.branch_stack: list[bool] = []
        self.ops_log = []
        self.valid = True
        self.final_height = 0
        self._subscript_start = 0

    def clear_stacks(self):
        self.stack.clear()
        self.alt_stack.clear()
        self.branch_stack = []
        self.ops_log = []
        self.valid = True
        self.final_height = 0
        self._subscript_start = 0

    @property
    def executing(self) -> bool:
        return all(self.branch_stack)

    # --- Public API --- #

    def validate_script_pair(self, scriptsig: list[str], scriptpubkey: list[str],
                             ctx: ExecutionContext = None) -> bool:
        """
        Run scriptsig + scriptpubkey as one script, starting from the context's initial stack, and validate the
        final stack.
        """
        ctx = ctx or ExecutionContext()
        self.clear_stacks()
        self._apply_limits(ctx)
        self.stack.pushitems(list(ctx.initial_stack))

        self.execute_script(list(scriptsig) + list(scriptpubkey), ctx, locking_start=len(scriptsig))
        return self.validate_stack()

    def validate_script(self, script: list[str] | bytes, ctx: ExecutionContext = None) -> bool:
        """
        Run a single script (asm tokens or raw bytes) on an empty stack and validate the final stack.
        """
        asm = to_asm(script) if isinstance(script, bytes) else script
        return self.validate_script_pair([], asm, ctx)

    def execute_script(self, script: list[str] | bytes, ctx: ExecutionContext = None, locking_start: int = 0):
        """
        We only execute the given script with the accompanying ExecutionContext. We do NOT clear or validate the
        stacks. Tokens before locking_start belong to the scriptsig and are never part of a signature's script code.
        """
        if isinstance(script, bytes):
            script = to_asm(script)
        ctx = ctx or ExecutionContext()
        self._subscript_start = locking_start

        i = 0
        while i < len(script):
            token = script[i]
            self.ops_log.append(token)
            try:
                i = self._step(script, i, ctx, locking_start)
            except ScriptFailure as e:
                self._fail(str(e))
                break
            except (BitStackError, BitNumError) as e:
                self._fail(f"{token}: {e}")
                break

        logger.debug(f"OPS LOG: {asm_string(self.ops_log)}")
        logger.debug(f"MAIN STACK: {self.stack.to_json()}")

    def validate_stack(self) -> bool:
        """
        Called at the end of a run. Return False if any of the following are True:
            - the script failed during execution (OP_RETURN, failed VERIFY, disabled opcode, ...)
            - an OP_IF/OP_NOTIF was left open
            - the stack is empty
            - the top element is false
        """
        self.final_height = self.stack.height
        if not self.valid:
            return False
        if self.branch_stack:
            logger.debug("Unbalanced conditional at end of script")
            return False
        if self.stack.is_empty:
            return False
        return cast_to_bool(self.stack.pop())

    # --- Execution --- #

    def _fail(self, reason: str):
        self.valid = False
        logger.debug(f"Script failed: {reason}")

    def _apply_limits(self, ctx: ExecutionContext):
        self.stack.max_size = ctx.config.max_stack
        self.alt_stack.max_size = ctx.config.max_stack

    def _step(self, script: list[str], i: int, ctx: ExecutionContext, locking_start: int) -> int:
        """
        Execute the token at index i and return the index of the next token
        """
        token = script[i]

        if not self._is_known(token):
            raise ScriptEngineError(f"Unrecognized script token: {token}")

        # Checked before branch skipping
        if token in DISABLED_OPS:
            if self.executing:
                self.opcode_map[token](self.stack)
            raise ScriptFailure(f"Disabled opcode {token}")
        if token in ALWAYS_INVALID_OPS:
            raise ScriptFailure(f"Invalid opcode {token}")

        if token in BRANCH_OPS:
            self._handle_branch(token)
            return i + 1

        # Unexecuted branch
        if not self.executing:
            return i + 1

        if is_literal(token):
            self._push_data(push_data(token))

        elif token in PUSHDATA_WIDTHS:
            if i + 1 >= len(script) or not is_literal(script[i + 1]):
                raise ScriptEngineError(f"{token} is not followed by a data literal")
            self._push_data(push_data(script[i + 1]))
            self.ops_log.append(script[i + 1])
            i += 1

        elif is_invalid(token) or token in RESERVED_OPS:
            raise ScriptFailure(f"Executed {token}")

        elif token in NOP_OPS:
            pass

        elif token in SIGNATURE_OPS:
            self._handle_signatures(token, script, i, ctx, locking_start)

        elif token in ALTSTACK_OPS:
            self.opcode_map[token](self.stack, self.alt_stack)

        elif token in VERIFY_OPS:
            if not self.opcode_map[token](self.stack):
                raise ScriptFailure(f"{token} failed")

        else:
            self.opcode_map[token](self.stack)

        if self.stack.height + self.alt_stack.height > ctx.config.max_stack:
            raise ScriptFailure("Combined stack size exceeded")
        return i + 1

    def _is_known(self, token: str) -> bool:
        return (token in self.opcode_map or token in OPCODE_BYTES or token in OPCODE_ALIASES or is_invalid(token)
                or is_literal(token))

    def _push_data(self, data: bytes):
        if len(data) > SCRIPT.MAX_ELEMENT:
            raise ScriptFailure(f"Push of {len(data)} bytes exceeds {SCRIPT.MAX_ELEMENT} byte limit")
        self.stack.push(data)

    def _handle_branch(self, token: str):
        match token:
            case "OP_IF" | "OP_NOTIF":
                condition = False
                if self.executing:
                    condition = self.stack.popbool()
                    if token == "OP_NOTIF":
                        condition = not condition
                self.branch_stack.append(condition)
            case "OP_ELSE":
                if not self.branch_stack:
                    raise ScriptFailure("OP_ELSE without OP_IF")
                self.branch_stack[-1] = not self.branch_stack[-1]
            case _:
                if not self.branch_stack:
                    raise ScriptFailure("OP_ENDIF without OP_IF")
                self.branch_stack.pop()

    # --- Signatures --- #

    def _handle_signatures(self, token: str, script: list[str], i: int, ctx: ExecutionContext, locking_start: int):
        match token:
            case "OP_CODESEPARATOR":
                self._subscript_start = max(i + 1, locking_start)
            case "OP_CHECKSIG" | "OP_CHECKSIGVERIFY":
                result = self._handle_checksig(script, ctx)
                if token == "OP_CHECKSIGVERIFY":
                    if not result:
                        raise ScriptFailure("OP_CHECKSIGVERIFY failed")
                else:
                    self.stack.pushbool(result)
            case _:
                result = self._handle_multisig(script, ctx)
                if token == "OP_CHECKMULTISIGVERIFY":
                    if not result:
                        raise ScriptFailure("OP_CHECKMULTISIGVERIFY failed")
                else:
                    self.stack.pushbool(result)

    def _script_code(self, script: list[str], signatures: list[bytes], ctx: ExecutionContext) -> bytes:
        """
        The tokens after the last executed OP_CODESEPARATOR, with OP_CODESEPARATOR removed. For legacy hashing every
        direct push of a signature being checked is removed as well.
        """
        tokens = [t for t in script[self._subscript_start:] if t != "OP_CODESEPARATOR"]
        if not ctx.is_segwit:
            sig_hexes = {sig.hex() for sig in signatures if sig}
            kept = []
            for token in tokens:
                # Data following OP_PUSHDATAn is not a direct push
                if token in sig_hexes and not (kept and kept[-1] in PUSHDATA_WIDTHS):
                    continue
                kept.append(token)
            tokens = kept
        return from_asm(tokens)

    def _check_signature(self, sig: bytes, pubkey: bytes, script_code: bytes, ctx: ExecutionContext) -> bool:
        """
        Verify a signature (with trailing hash type byte) against the pubkey and the sighash of script_code
        """
        if not sig:
            return False
        if ctx.sighash_fn is None:
            raise ScriptEngineError("Missing sighash function for signature check")

        hash_type = sig[-1]
        try:
            signature = decode_signature(sig[:-1], lax=ctx.config.lax_der)
            point = PubKey.from_bytes(pubkey).to_point()
        except (SignatureError, PubKeyError) as e:
            logger.debug(f"Unusable signature or pubkey: {e}")
            return False

        message_hash = ctx.sighash_fn(script_code, hash_type)
        if verify_ecdsa(signature, message_hash, point):
            return True
        if ctx.config.sentinel_fallback and verify_ecdsa(signature, SIGHASH.ONE, point):
            logger.debug("Signature verified against the sentinel message")
            return True
        return False

    def _handle_checksig(self, script: list[str], ctx: ExecutionContext) -> bool:
        pubkey, sig = self.stack.popitems(2)
        script_code = self._script_code(script, [sig], ctx)
        return self._check_signature(sig, pubkey, script_code, ctx)

    def _handle_multisig(self, script: list[str], ctx: ExecutionContext) -> bool:
        """
        OP_CHECKMULTISIG:
            1) pop n, then pop that number of public keys
            2) pop m, then pop that number of signatures
            3) pop the unused extra element
            4) match each signature, in order, against the remaining public keys; keys may be skipped but not
               revisited
        """
        key_count = self.stack.popnum()
        if not 0 <= key_count <= SCRIPT.MAX_PUBKEYS:
            raise ScriptFailure(f"OP_CHECKMULTISIG key count {key_count} out of range")
        pubkeys = self.stack.popitems(key_count)[::-1]

        sig_count = self.stack.popnum()
        if not 0 <= sig_count <= key_count:
            raise ScriptFailure(f"OP_CHECKMULTISIG signature count {sig_count} out of range")
        sigs = self.stack.popitems(sig_count)[::-1]

        self.stack.pop()

        script_code = self._script_code(script, sigs, ctx)

        sig_index = 0
        key_index = 0
        while sig_index < len(sigs):
            # Not enough keys left for the remaining signatures
            if len(sigs) - sig_index > len(pubkeys) - key_index:
                return False
            if self._check_signature(sigs[sig_index], pubkeys[key_index], script_code, ctx):
                sig_index += 1
            key_index += 1
        return True
