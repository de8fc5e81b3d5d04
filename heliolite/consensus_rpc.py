"""Sources of light client data: a beacon node HTTP API and a directory of JSON files."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import requests

from heliolite.consensus_types import (
    BeaconBlock,
    Bootstrap,
    FinalityUpdate,
    OptimisticUpdate,
    Update,
)
from heliolite.errors import RpcError

MAX_REQUEST_LIGHT_CLIENT_UPDATES = 128
_TIMEOUT = 30


class ConsensusRpc(ABC):
    """Light client endpoints of the beacon API."""

    @abstractmethod
    def get_bootstrap(self, block_root: bytes) -> Bootstrap:
        """Bootstrap data for a trusted block root."""

    @abstractmethod
    def get_updates(self, period: int, count: int) -> list[Update]:
        """Up to count sync committee updates starting at period."""

    @abstractmethod
    def get_finality_update(self) -> FinalityUpdate:
        """The latest finality update."""

    @abstractmethod
    def get_optimistic_update(self) -> OptimisticUpdate:
        """The latest optimistic update."""

    @abstractmethod
    def get_block(self, slot: int) -> BeaconBlock:
        """The beacon block at slot."""

    @abstractmethod
    def chain_id(self) -> int:
        """The network's chain id."""


class NimbusRpc(ConsensusRpc):
    """Talks to a beacon node over its REST API."""

    def __init__(self, rpc: str) -> None:
        self.rpc = rpc
        self._session = requests.Session()

    def _get(self, name: str, path: str) -> Any:
        try:
            response = self._session.get(f"{self.rpc}{path}", timeout=_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RpcError(name, exc) from exc

    @staticmethod
    def _parse(name: str, parser: Any, data: Any) -> Any:
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise RpcError(name, exc) from exc

    def get_bootstrap(self, block_root: bytes) -> Bootstrap:
        body = self._get(
            "bootstrap",
            f"/eth/v1/beacon/light_client/bootstrap/0x{bytes(block_root).hex()}",
        )
        return self._parse("bootstrap", lambda b: Bootstrap.from_json(b["data"]), body)

    def get_updates(self, period: int, count: int) -> list[Update]:
        count = min(count, MAX_REQUEST_LIGHT_CLIENT_UPDATES)
        body = self._get(
            "updates",
            f"/eth/v1/beacon/light_client/updates?start_period={period}&count={count}",
        )
        return self._parse(
            "updates", lambda b: [Update.from_json(item["data"]) for item in b], body
        )

    def get_finality_update(self) -> FinalityUpdate:
        body = self._get("finality_update", "/eth/v1/beacon/light_client/finality_update")
        return self._parse(
            "finality_update", lambda b: FinalityUpdate.from_json(b["data"]), body
        )

    def get_optimistic_update(self) -> OptimisticUpdate:
        body = self._get(
            "optimistic_update", "/eth/v1/beacon/light_client/optimistic_update"
        )
        return self._parse(
            "optimistic_update", lambda b: OptimisticUpdate.from_json(b["data"]), body
        )

    def get_block(self, slot: int) -> BeaconBlock:
        body = self._get("blocks", f"/eth/v2/beacon/blocks/{slot}")
        return self._parse(
            "blocks", lambda b: BeaconBlock.from_json(b["data"]["message"]), body
        )

    def chain_id(self) -> int:
        body = self._get("spec", "/eth/v1/config/spec")
        return self._parse("spec", lambda b: int(b["data"]["DEPOSIT_NETWORK_ID"]), body)


class MockRpc(ConsensusRpc):
    """Serves fixed responses from JSON files in a directory."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self, name: str) -> Any:
        return json.loads((self.path / name).read_text())

    def get_bootstrap(self, block_root: bytes) -> Bootstrap:
        return Bootstrap.from_json(self._load("bootstrap.json"))

    def get_updates(self, period: int, count: int) -> list[Update]:
        return [Update.from_json(item) for item in self._load("updates.json")]

    def get_finality_update(self) -> FinalityUpdate:
        return FinalityUpdate.from_json(self._load("finality.json"))

    def get_optimistic_update(self) -> OptimisticUpdate:
        return OptimisticUpdate.from_json(self._load("optimistic.json"))

    def get_block(self, slot: int) -> BeaconBlock:
        return BeaconBlock.from_json(self._load("blocks.json"))

    def chain_id(self) -> int:
        raise RpcError("chain_id", "the mock rpc has no chain id")