"""Execution layer data types with JSON-RPC conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from heliolite import rlp
from heliolite.proof import keccak256


def _quantity(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


def _data(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if value.startswith("0x"):
        value = value[2:]
    if len(value) % 2:
        value = "0" + value
    return bytes.fromhex(value)


def _word(value: Any) -> Optional[bytes]:
    data = _data(value)
    if data is None:
        return None
    if len(data) > 32:
        raise ValueError("value exceeds 32 bytes")
    return data.rjust(32, b"\x00")


def _hex_bytes(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _hex_int(value: int) -> str:
    return hex(value)


def _compact(entries: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in entries.items() if value is not None}


@dataclass
class Account:
    balance: int = 0
    nonce: int = 0
    code_hash: bytes = bytes(32)
    code: bytes = b""
    storage_hash: bytes = bytes(32)
    slots: dict[bytes, int] = field(default_factory=dict)


@dataclass
class AccessListItem:
    address: bytes
    storage_keys: list[bytes] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AccessListItem":
        return cls(
            address=_data(data["address"]),
            storage_keys=[_word(key) for key in data.get("storageKeys", [])],
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "address": _hex_bytes(self.address),
            "storageKeys": [_hex_bytes(key) for key in self.storage_keys],
        }


@dataclass
class CallOpts:
    to: bytes
    from_: Optional[bytes] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    value: Optional[int] = None
    data: Optional[bytes] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "CallOpts":
        return cls(
            to=_data(data["to"]),
            from_=_data(data.get("from")),
            gas=_quantity(data.get("gas")),
            gas_price=_quantity(data.get("gasPrice")),
            value=_quantity(data.get("value")),
            data=_data(data.get("data")),
        )

    def __repr__(self) -> str:
        data = (self.data or b"").hex()
        return f"CallOpts(from={self.from_!r}, to={self.to!r}, value={self.value!r}, data={data!r})"


@dataclass
class StorageProof:
    key: bytes
    value: int
    proof: list[bytes]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "StorageProof":
        return cls(
            key=_word(data["key"]),
            value=_quantity(data["value"]),
            proof=[_data(node) for node in data["proof"]],
        )


@dataclass
class ProofResponse:
    address: bytes
    balance: int
    code_hash: bytes
    nonce: int
    storage_hash: bytes
    account_proof: list[bytes]
    storage_proof: list[StorageProof]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ProofResponse":
        return cls(
            address=_data(data["address"]),
            balance=_quantity(data["balance"]),
            code_hash=_word(data["codeHash"]),
            nonce=_quantity(data["nonce"]),
            storage_hash=_word(data["storageHash"]),
            account_proof=[_data(node) for node in data["accountProof"]],
            storage_proof=[StorageProof.from_json(item) for item in data["storageProof"]],
        )


@dataclass
class Log:
    address: bytes
    topics: list[bytes]
    data: bytes
    block_hash: Optional[bytes] = None
    block_number: Optional[int] = None
    transaction_hash: Optional[bytes] = None
    transaction_index: Optional[int] = None
    log_index: Optional[int] = None
    removed: Optional[bool] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Log":
        return cls(
            address=_data(data["address"]),
            topics=[_word(topic) for topic in data["topics"]],
            data=_data(data["data"]),
            block_hash=_word(data.get("blockHash")),
            block_number=_quantity(data.get("blockNumber")),
            transaction_hash=_word(data.get("transactionHash")),
            transaction_index=_quantity(data.get("transactionIndex")),
            log_index=_quantity(data.get("logIndex")),
            removed=data.get("removed"),
        )

    def rlp_items(self) -> list:
        return [self.address, list(self.topics), self.data]

    def rlp_bytes(self) -> bytes:
        """RLP encoding of the consensus part of the log: address, topics, data."""
        return rlp.encode(self.rlp_items())


@dataclass
class TransactionReceipt:
    transaction_hash: bytes
    transaction_index: int
    block_hash: Optional[bytes]
    block_number: Optional[int]
    from_: bytes
    to: Optional[bytes]
    cumulative_gas_used: int
    gas_used: Optional[int]
    contract_address: Optional[bytes]
    logs: list[Log]
    status: Optional[int]
    logs_bloom: bytes
    transaction_type: Optional[int] = None
    effective_gas_price: Optional[int] = None
    root: Optional[bytes] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "TransactionReceipt":
        return cls(
            transaction_hash=_word(data["transactionHash"]),
            transaction_index=_quantity(data["transactionIndex"]),
            block_hash=_word(data.get("blockHash")),
            block_number=_quantity(data.get("blockNumber")),
            from_=_data(data["from"]),
            to=_data(data.get("to")),
            cumulative_gas_used=_quantity(data["cumulativeGasUsed"]),
            gas_used=_quantity(data.get("gasUsed")),
            contract_address=_data(data.get("contractAddress")),
            logs=[Log.from_json(item) for item in data["logs"]],
            status=_quantity(data.get("status")),
            logs_bloom=_data(data["logsBloom"]),
            transaction_type=_quantity(data.get("type")),
            effective_gas_price=_quantity(data.get("effectiveGasPrice")),
            root=_word(data.get("root")),
        )


@dataclass
class Transaction:
    hash_: bytes
    nonce: int
    from_: bytes
    to: Optional[bytes]
    value: int
    gas: int
    input: bytes
    v: int
    r: int
    s: int
    gas_price: Optional[int] = None
    block_hash: Optional[bytes] = None
    block_number: Optional[int] = None
    transaction_index: Optional[int] = None
    transaction_type: Optional[int] = None
    access_list: Optional[list[AccessListItem]] = None
    max_priority_fee_per_gas: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    chain_id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Transaction":
        access_list = data.get("accessList")
        return cls(
            hash_=_word(data["hash"]),
            nonce=_quantity(data["nonce"]),
            from_=_data(data["from"]),
            to=_data(data.get("to")),
            value=_quantity(data["value"]),
            gas=_quantity(data["gas"]),
            input=_data(data["input"]),
            v=_quantity(data["v"]),
            r=_quantity(data["r"]),
            s=_quantity(data["s"]),
            gas_price=_quantity(data.get("gasPrice")),
            block_hash=_word(data.get("blockHash")),
            block_number=_quantity(data.get("blockNumber")),
            transaction_index=_quantity(data.get("transactionIndex")),
            transaction_type=_quantity(data.get("type")),
            access_list=None
            if access_list is None
            else [AccessListItem.from_json(item) for item in access_list],
            max_priority_fee_per_gas=_quantity(data.get("maxPriorityFeePerGas")),
            max_fee_per_gas=_quantity(data.get("maxFeePerGas")),
            chain_id=_quantity(data.get("chainId")),
        )

    def to_json(self) -> dict[str, Any]:
        def opt(value: Any, render: Any) -> Any:
            return None if value is None else render(value)

        return _compact(
            {
                "hash": _hex_bytes(self.hash_),
                "nonce": _hex_int(self.nonce),
                "blockHash": opt(self.block_hash, _hex_bytes),
                "blockNumber": opt(self.block_number, _hex_int),
                "transactionIndex": opt(self.transaction_index, _hex_int),
                "from": _hex_bytes(self.from_),
                "to": opt(self.to, _hex_bytes),
                "value": _hex_int(self.value),
                "gasPrice": opt(self.gas_price, _hex_int),
                "gas": _hex_int(self.gas),
                "input": _hex_bytes(self.input),
                "v": _hex_int(self.v),
                "r": _hex_int(self.r),
                "s": _hex_int(self.s),
                "type": opt(self.transaction_type, _hex_int),
                "accessList": opt(
                    self.access_list, lambda items: [item.to_json() for item in items]
                ),
                "maxPriorityFeePerGas": opt(self.max_priority_fee_per_gas, _hex_int),
                "maxFeePerGas": opt(self.max_fee_per_gas, _hex_int),
                "chainId": opt(self.chain_id, _hex_int),
            }
        )

    def _access_list_items(self) -> list:
        return [[item.address, list(item.storage_keys)] for item in self.access_list or []]

    def rlp(self) -> bytes:
        """Signed wire encoding, with a type byte prefix for typed transactions."""
        to = self.to or b""
        kind = self.transaction_type or 0
        if kind == 0:
            return rlp.encode(
                [self.nonce, self.gas_price or 0, self.gas, to, self.value,
                 self.input, self.v, self.r, self.s]
            )
        if kind == 1:
            fields = [self.chain_id or 0, self.nonce, self.gas_price or 0, self.gas, to,
                      self.value, self.input, self._access_list_items(), self.v, self.r, self.s]
        elif kind == 2:
            fields = [self.chain_id or 0, self.nonce, self.max_priority_fee_per_gas or 0,
                      self.max_fee_per_gas or 0, self.gas, to, self.value, self.input,
                      self._access_list_items(), self.v, self.r, self.s]
        else:
            raise ValueError(f"unsupported transaction type: {kind}")
        return bytes([kind]) + rlp.encode(fields)

    def hash(self) -> bytes:
        """Keccak-256 of the signed encoding."""
        return keccak256(self.rlp())


@dataclass
class Filter:
    from_block: Optional[Union[int, str]] = None
    to_block: Optional[Union[int, str]] = None
    block_hash: Optional[bytes] = None
    address: Optional[Union[bytes, list[bytes]]] = None
    topics: list[Optional[Union[bytes, list[bytes]]]] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        def block(value: Any) -> Any:
            if value is None or isinstance(value, str):
                return value
            return _hex_int(value)

        def hexes(value: Any) -> Any:
            if value is None:
                return None
            if isinstance(value, list):
                return [_hex_bytes(item) for item in value]
            return _hex_bytes(value)

        return _compact(
            {
                "fromBlock": block(self.from_block),
                "toBlock": block(self.to_block),
                "blockHash": hexes(self.block_hash),
                "address": hexes(self.address),
                "topics": [hexes(topic) for topic in self.topics] if self.topics else None,
            }
        )


@dataclass
class ExecutionBlock:
    number: int
    base_fee_per_gas: int
    difficulty: int
    extra_data: bytes
    gas_limit: int
    gas_used: int
    hash: bytes
    logs_bloom: bytes
    miner: bytes
    mix_hash: bytes
    nonce: str
    parent_hash: bytes
    receipts_root: bytes
    sha3_uncles: bytes
    size: int
    state_root: bytes
    timestamp: int
    total_difficulty: int
    transactions: Union[list[bytes], list[Transaction]]
    transactions_root: bytes
    uncles: list[bytes] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        """JSON-RPC representation with camelCase keys and hex quantities."""
        return {
            "number": _hex_int(self.number),
            "baseFeePerGas": _hex_int(self.base_fee_per_gas),
            "difficulty": _hex_int(self.difficulty),
            "extraData": _hex_bytes(self.extra_data),
            "gasLimit": _hex_int(self.gas_limit),
            "gasUsed": _hex_int(self.gas_used),
            "hash": _hex_bytes(self.hash),
            "logsBloom": _hex_bytes(self.logs_bloom),
            "miner": _hex_bytes(self.miner),
            "mixHash": _hex_bytes(self.mix_hash),
            "nonce": self.nonce,
            "parentHash": _hex_bytes(self.parent_hash),
            "receiptsRoot": _hex_bytes(self.receipts_root),
            "sha3Uncles": _hex_bytes(self.sha3_uncles),
            "size": _hex_int(self.size),
            "stateRoot": _hex_bytes(self.state_root),
            "timestamp": _hex_int(self.timestamp),
            "totalDifficulty": _hex_int(self.total_difficulty),
            "transactions": [
                tx.to_json() if isinstance(tx, Transaction) else _hex_bytes(tx)
                for tx in self.transactions
            ],
            "transactionsRoot": _hex_bytes(self.transactions_root),
            "uncles": [_hex_bytes(uncle) for uncle in self.uncles],
        }