"""Untrusted execution layer data sources: a JSON-RPC node and a directory of JSON files."""

from __future__ import annotations

import itertools
import json
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Sequence

import requests

from heliolite.errors import RpcError
from heliolite.execution_types import (
    AccessListItem,
    CallOpts,
    Filter,
    Log,
    ProofResponse,
    Transaction,
    TransactionReceipt,
)

_MAX_RETRIES = 100
_RETRY_DELAY = 0.05
_TIMEOUT = 30
_DEFAULT_ACCESS_LIST_GAS = 100_000_000


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _bytes(value: str) -> bytes:
    if value.startswith("0x"):
        value = value[2:]
    return bytes.fromhex(value)


class ExecutionRpc(ABC):
    """Execution node endpoints the client relies on."""

    @abstractmethod
    def get_proof(self, address: bytes, slots: Sequence[bytes], block: int) -> ProofResponse:
        """Account and storage proof at a block."""

    @abstractmethod
    def create_access_list(self, opts: CallOpts, block: int) -> list[AccessListItem]:
        """Accounts and slots a call touches."""

    @abstractmethod
    def get_code(self, address: bytes, block: int) -> bytes:
        """Contract code at a block."""

    @abstractmethod
    def send_raw_transaction(self, data: bytes) -> bytes:
        """Broadcast a signed transaction and return its hash."""

    @abstractmethod
    def get_transaction_receipt(self, tx_hash: bytes) -> Optional[TransactionReceipt]:
        """Receipt of a transaction, or None."""

    @abstractmethod
    def get_transaction(self, tx_hash: bytes) -> Optional[Transaction]:
        """A transaction by hash, or None."""

    @abstractmethod
    def get_logs(self, filter: Filter) -> list[Log]:
        """Logs matching a filter."""

    @abstractmethod
    def chain_id(self) -> int:
        """The node's chain id."""


class HttpRpc(ExecutionRpc):
    """JSON-RPC over HTTP, retrying while the node is rate limiting."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._session = requests.Session()
        self._ids = itertools.count(1)

    def _call(self, name: str, method: str, params: list) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            for attempt in range(_MAX_RETRIES + 1):
                response = self._session.post(self.url, json=payload, timeout=_TIMEOUT)
                if response.status_code != 429 or attempt == _MAX_RETRIES:
                    break
                time.sleep(_RETRY_DELAY)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RpcError(name, exc) from exc
        if "error" in body:
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(name, message)
        return body.get("result")

    def get_proof(self, address: bytes, slots: Sequence[bytes], block: int) -> ProofResponse:
        result = self._call(
            "get_proof", "eth_getProof", [_hex(address), [_hex(s) for s in slots], hex(block)]
        )
        return ProofResponse.from_json(result)

    def create_access_list(self, opts: CallOpts, block: int) -> list[AccessListItem]:
        tx = {
            "type": "0x2",
            "to": _hex(opts.to),
            "gas": hex(opts.gas if opts.gas is not None else _DEFAULT_ACCESS_LIST_GAS),
            "maxFeePerGas": "0x0",
            "maxPriorityFeePerGas": "0x0",
        }
        if opts.from_ is not None:
            tx["from"] = _hex(opts.from_)
        if opts.value is not None:
            tx["value"] = hex(opts.value)
        if opts.data is not None:
            tx["data"] = _hex(opts.data)
        result = self._call("create_access_list", "eth_createAccessList", [tx, hex(block)])
        return [AccessListItem.from_json(item) for item in result["accessList"]]

    def get_code(self, address: bytes, block: int) -> bytes:
        return _bytes(self._call("get_code", "eth_getCode", [_hex(address), hex(block)]))

    def send_raw_transaction(self, data: bytes) -> bytes:
        return _bytes(
            self._call("send_raw_transaction", "eth_sendRawTransaction", [_hex(data)])
        )

    def get_transaction_receipt(self, tx_hash: bytes) -> Optional[TransactionReceipt]:
        result = self._call(
            "get_transaction_receipt", "eth_getTransactionReceipt", [_hex(tx_hash)]
        )
        return None if result is None else TransactionReceipt.from_json(result)

    def get_transaction(self, tx_hash: bytes) -> Optional[Transaction]:
        result = self._call("get_transaction", "eth_getTransactionByHash", [_hex(tx_hash)])
        return None if result is None else Transaction.from_json(result)

    def get_logs(self, filter: Filter) -> list[Log]:
        result = self._call("get_logs", "eth_getLogs", [filter.to_json()])
        return [Log.from_json(item) for item in result]

    def chain_id(self) -> int:
        return int(self._call("chain_id", "eth_chainId", []), 16)


class MockRpc(ExecutionRpc):
    """Serves fixed responses from JSON files in a directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self, name: str) -> Any:
        return json.loads((self.path / name).read_text())

    def get_proof(self, address: bytes, slots: Sequence[bytes], block: int) -> ProofResponse:
        return ProofResponse.from_json(self._load("proof.json"))

    def create_access_list(self, opts: CallOpts, block: int) -> list[AccessListItem]:
        raise RpcError("create_access_list", "the mock rpc cannot build access lists")

    def get_code(self, address: bytes, block: int) -> bytes:
        code = (self.path / "code.json").read_text()
        return _bytes(code[:-1])

    def send_raw_transaction(self, data: bytes) -> bytes:
        raise RpcError("send_raw_transaction", "the mock rpc cannot send transactions")

    def get_transaction_receipt(self, tx_hash: bytes) -> Optional[TransactionReceipt]:
        result = self._load("receipt.json")
        return None if result is None else TransactionReceipt.from_json(result)

    def get_transaction(self, tx_hash: bytes) -> Optional[Transaction]:
        result = self._load("transaction.json")
        return None if result is None else Transaction.from_json(result)

    def get_logs(self, filter: Filter) -> list[Log]:
        return [Log.from_json(item) for item in self._load("logs.json")]

    def chain_id(self) -> int:
        raise RpcError("chain_id", "the mock rpc has no chain id")