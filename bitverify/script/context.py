"""
We create the ValidatorConfig and the ExecutionContext: the settings for a validator and the read-only inputs of a
single script run. The mutable run state (stacks, branch stack, sub-script start, result flag) lives on the
ScriptEngine and is reset at the start of every run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from bitverify.core.formats import SCRIPT

__all__ = ["ValidatorConfig", "ExecutionContext", "SighashFunc"]

# (script_code, hash_type) -> 32-byte message hash
SighashFunc = Callable[[bytes, int], bytes]


@dataclass(frozen=True)
class ValidatorConfig:
    """
    Legacy-compatibility switches.

    permissive_retry: when a spend fails and its scriptsig is non-empty, run the scriptpubkey once more with an
        empty scriptsig.
    sentinel_fallback: a signature that does not verify against its sighash is also checked against the message
        01 00 .. 00.
    lax_der: decode non-DER signatures with the lax parser instead of rejecting them.
    max_stack: combined item limit of the main and alt stacks.
    """
    permissive_retry: bool = True
    sentinel_fallback: bool = True
    lax_der: bool = True
    max_stack: int = SCRIPT.MAX_STACK


@dataclass(frozen=True)
class ExecutionContext:
    sighash_fn: Optional[SighashFunc] = None
    initial_stack: tuple = ()  # Bottom item first, as in a witness field
    is_segwit: bool = False
    config: ValidatorConfig = field(default_factory=ValidatorConfig)
