"""Execution client that checks untrusted RPC answers against verified payloads."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Mapping, Optional, Sequence, TypeVar, Union

from heliolite import rlp
from heliolite.consensus_types import ExecutionPayload
from heliolite.errors import (
    CodeHashMismatch,
    IncorrectExecutionRpcNetwork,
    InvalidAccountProof,
    InvalidStorageProof,
    MissingLog,
    MissingTransaction,
    NoReceiptForTransaction,
    ReceiptRootMismatch,
    TooManyLogsToProve,
)
from heliolite.execution_rpc import ExecutionRpc, HttpRpc
from heliolite.execution_types import (
    Account,
    ExecutionBlock,
    Filter,
    Log,
    Transaction,
    TransactionReceipt,
)
from heliolite.proof import encode_account, keccak256, verify_proof
from heliolite.trie import ordered_trie_root

PARALLEL_QUERY_BATCH_SIZE = 20

# Logs are proven one receipt set at a time, so the number fetched is capped.
MAX_SUPPORTED_LOGS_NUMBER = 5

KECCAK_EMPTY = keccak256(b"")
EMPTY_NONCE = "0x0000000000000000"
EMPTY_UNCLE_HASH = bytes.fromhex(
    "1dcc4de8dec75d7aab85b567b6ccd41ad312451b948a7413f0a142fd40d49347"
)

_T = TypeVar("_T")
_R = TypeVar("_R")


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _parallel(func: Callable[[_T], _R], items: Iterable[_T]) -> list[_R]:
    items = list(items)
    if not items:
        return []
    workers = min(PARALLEL_QUERY_BATCH_SIZE, len(items))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(func, items))


def encode_receipt(receipt: TransactionReceipt) -> bytes:
    """Consensus encoding of a receipt, prefixed with its type byte unless legacy."""
    if receipt.status is None:
        raise ValueError("receipt has no status")
    if receipt.transaction_type is None:
        raise ValueError("receipt has no transaction type")
    legacy = rlp.encode(
        [
            receipt.status,
            receipt.cumulative_gas_used,
            bytes(receipt.logs_bloom),
            [log.rlp_items() for log in receipt.logs],
        ]
    )
    if receipt.transaction_type == 0:
        return legacy
    return bytes([receipt.transaction_type & 0xFF]) + legacy


class ExecutionClient:
    """Fetches execution data from an RPC and proves it against payloads."""

    def __init__(self, rpc: Union[ExecutionRpc, str]) -> None:
        self.rpc = HttpRpc(rpc) if isinstance(rpc, str) else rpc

    def check_rpc(self, chain_id: int) -> None:
        """Raise if the RPC serves a different chain."""
        if self.rpc.chain_id() != chain_id:
            raise IncorrectExecutionRpcNetwork()

    def get_account(
        self,
        address: bytes,
        slots: Optional[Sequence[bytes]],
        payload: ExecutionPayload,
    ) -> Account:
        """Fetch an account and the requested storage slots, checking every proof."""
        address = bytes(address)
        slots = list(slots or [])
        proof = self.rpc.get_proof(address, slots, payload.block_number)

        is_valid = verify_proof(
            proof.account_proof,
            bytes(payload.state_root),
            keccak256(address),
            encode_account(proof),
        )
        if not is_valid:
            raise InvalidAccountProof(_hex(address))

        slot_map: dict[bytes, int] = {}
        for storage_proof in proof.storage_proof:
            key = bytes(storage_proof.key)
            is_valid = verify_proof(
                storage_proof.proof,
                bytes(proof.storage_hash),
                keccak256(key),
                rlp.encode(storage_proof.value),
            )
            if not is_valid:
                raise InvalidStorageProof(_hex(address), _hex(key))
            slot_map[key] = storage_proof.value

        if bytes(proof.code_hash) == KECCAK_EMPTY:
            code = b""
        else:
            code = bytes(self.rpc.get_code(address, payload.block_number))
            code_hash = keccak256(code)
            if code_hash != bytes(proof.code_hash):
                raise CodeHashMismatch(_hex(address), _hex(code_hash), _hex(proof.code_hash))

        return Account(
            balance=proof.balance,
            nonce=proof.nonce,
            code=code,
            code_hash=bytes(proof.code_hash),
            storage_hash=bytes(proof.storage_hash),
            slots=slot_map,
        )

    def send_raw_transaction(self, data: bytes) -> bytes:
        """Broadcast a signed transaction and return its hash."""
        return self.rpc.send_raw_transaction(bytes(data))

    def get_block(self, payload: ExecutionPayload, full_tx: bool) -> ExecutionBlock:
        """Build a block from a verified payload, with hashes or full transactions."""
        tx_hashes = [keccak256(tx) for tx in payload.transactions]

        if full_tx:
            payloads = {payload.block_number: payload}

            def fetch(tx_hash: bytes) -> Transaction:
                tx = self.get_transaction(tx_hash, payloads)
                if tx is None:
                    raise MissingTransaction(_hex(tx_hash))
                return tx

            transactions: Union[list[bytes], list[Transaction]] = _parallel(fetch, tx_hashes)
        else:
            transactions = tx_hashes

        return ExecutionBlock(
            number=payload.block_number,
            base_fee_per_gas=payload.base_fee_per_gas,
            difficulty=0,
            extra_data=bytes(payload.extra_data),
            gas_limit=payload.gas_limit,
            gas_used=payload.gas_used,
            hash=bytes(payload.block_hash),
            logs_bloom=bytes(payload.logs_bloom),
            miner=bytes(payload.fee_recipient),
            mix_hash=bytes(payload.prev_randao),
            nonce=EMPTY_NONCE,
            parent_hash=bytes(payload.parent_hash),
            receipts_root=bytes(payload.receipts_root),
            sha3_uncles=EMPTY_UNCLE_HASH,
            size=0,
            state_root=bytes(payload.state_root),
            timestamp=payload.timestamp,
            total_difficulty=0,
            transactions=transactions,
            transactions_root=bytes(32),
            uncles=[],
        )

    def get_transaction_by_block_hash_and_index(
        self, payload: ExecutionPayload, index: int
    ) -> Transaction:
        """The verified transaction at a position in the payload."""
        tx_hash = keccak256(payload.transactions[index])
        tx = self.get_transaction(tx_hash, {payload.block_number: payload})
        if tx is None:
            raise MissingTransaction(_hex(tx_hash))
        return tx

    def get_transaction_receipt(
        self, tx_hash: bytes, payloads: Mapping[int, ExecutionPayload]
    ) -> Optional[TransactionReceipt]:
        """A receipt proven by the receipts root of its block, or None if unknown."""
        tx_hash = bytes(tx_hash)
        receipt = self.rpc.get_transaction_receipt(tx_hash)
        if receipt is None:
            return None
        if receipt.block_number is None:
            raise ValueError("receipt has no block number")
        payload = payloads.get(receipt.block_number)
        if payload is None:
            return None

        def fetch(hash_: bytes) -> TransactionReceipt:
            block_receipt = self.rpc.get_transaction_receipt(hash_)
            if block_receipt is None:
                raise NoReceiptForTransaction(_hex(hash_))
            return block_receipt

        receipts = _parallel(fetch, (keccak256(tx) for tx in payload.transactions))
        expected_root = ordered_trie_root([encode_receipt(r) for r in receipts])

        if bytes(expected_root) != bytes(payload.receipts_root) or receipt not in receipts:
            raise ReceiptRootMismatch(_hex(tx_hash))
        return receipt

    def get_transaction(
        self, tx_hash: bytes, payloads: Mapping[int, ExecutionPayload]
    ) -> Optional[Transaction]:
        """A transaction proven to be in a known payload, or None if unknown."""
        tx_hash = bytes(tx_hash)
        tx = self.rpc.get_transaction(tx_hash)
        if tx is None or tx.block_number is None:
            return None
        payload = payloads.get(tx.block_number)
        if payload is None:
            return None

        encoded = tx.rlp()
        if not any(bytes(raw) == encoded for raw in payload.transactions):
            raise MissingTransaction(_hex(tx_hash))
        return tx

    def get_logs(
        self, filter: Filter, payloads: Mapping[int, ExecutionPayload]
    ) -> list[Log]:
        """Logs matching a filter, each proven through its transaction's receipt."""
        logs = self.rpc.get_logs(filter)
        if len(logs) > MAX_SUPPORTED_LOGS_NUMBER:
            raise TooManyLogsToProve(len(logs), MAX_SUPPORTED_LOGS_NUMBER)

        for log in logs:
            if log.transaction_hash is None:
                raise ValueError("tx hash not found in log")
            tx_hash = bytes(log.transaction_hash)
            receipt = self.get_transaction_receipt(tx_hash, payloads)
            if receipt is None:
                raise NoReceiptForTransaction(_hex(tx_hash))

            receipt_logs = {receipt_log.rlp_bytes() for receipt_log in receipt.logs}
            if log.rlp_bytes() not in receipt_logs:
                raise MissingLog(_hex(tx_hash), log.log_index)
        return logs