"""
Sources of raw transactions and block contents, and verification of a transaction looked up by its txid
"""
from typing import Protocol

from bitverify.core import TxSourceError
from bitverify.core.logging import get_logger
from bitverify.tx import Transaction
from bitverify.validation.script_validator import ScriptValidator

logger = get_logger(__name__)

__all__ = ["TxSource", "MemoryTxSource", "verify_txid"]


class TxSource(Protocol):
    """
    Anything that can hand out raw transactions by display-order txid and the ordered txids of a block
    """

    def fetch_raw_transaction(self, txid_hex: str) -> bytes:
        ...

    def fetch_block(self, height_or_hash: int | str) -> list[str]:
        ...


class MemoryTxSource:
    """
    A dict-backed TxSource
    """

    def __init__(self, transactions: dict[str, bytes] = None):
        self.transactions = {}
        self.blocks = {}
        self.block_hashes = {}
        for txid_hex, raw_tx in (transactions or {}).items():
            self.transactions[txid_hex.lower()] = raw_tx

    def add_transaction(self, tx: Transaction | bytes) -> str:
        """
        Store a transaction under its computed txid and return that txid
        """
        if isinstance(tx, (bytes, bytearray)):
            tx = Transaction.from_bytes(tx)
        txid_hex = tx.txid.hex()
        self.transactions[txid_hex] = tx.to_bytes()
        return txid_hex

    def add_block(self, height: int, block_hash: str, txids: list[str]):
        self.blocks[height] = list(txids)
        self.block_hashes[block_hash.lower()] = height

    def fetch_raw_transaction(self, txid_hex: str) -> bytes:
        raw_tx = self.transactions.get(txid_hex.lower())
        if raw_tx is None:
            raise TxSourceError(f"Unknown transaction: {txid_hex}")
        return raw_tx

    def fetch_block(self, height_or_hash: int | str) -> list[str]:
        height = height_or_hash
        if isinstance(height_or_hash, str):
            height = self.block_hashes.get(height_or_hash.lower())
        if height not in self.blocks:
            raise TxSourceError(f"Unknown block: {height_or_hash}")
        return list(self.blocks[height])


def verify_txid(txid_hex: str, source: TxSource, validator: ScriptValidator = None) -> bool:
    """
    Fetch and decode the transaction and every transaction it spends from, then verify its inputs
    """
    validator = validator or ScriptValidator()
    tx = Transaction.from_bytes(source.fetch_raw_transaction(txid_hex))

    prev_txs = []
    for txin in tx.inputs:
        if tx.is_coinbase:
            prev_txs.append(None)
            continue
        prev_txs.append(Transaction.from_bytes(source.fetch_raw_transaction(txin.txid.hex())))

    result = validator.verify(tx, prev_txs)
    logger.info(f"Transaction {txid_hex}: {'valid' if result else 'invalid'}")
    return result
