"""Beacon chain and light client data types with JSON parsing and SSZ roots."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Mapping, Optional

from heliolite.ssz import (
    bitlist_root,
    bitvector_root,
    bytes_list_root,
    bytes_vector_root,
    container_root,
    merkleize,
    mix_in_length,
    uint256_root,
    uint64_root,
)

SYNC_COMMITTEE_SIZE = 512
MAX_TRANSACTION_BYTES = 1073741824
MAX_TRANSACTIONS = 1048576
MAX_EXTRA_DATA_BYTES = 32


def _u64(value: Any) -> int:
    number = int(value)
    if not 0 <= number < 2**64:
        raise ValueError(f"{value} does not fit in uint64")
    return number


def _u256(value: Any) -> int:
    number = int(value, 10)
    if not 0 <= number < 2**256:
        raise ValueError(f"{value} does not fit in uint256")
    return number


def _hex(value: str, prefixed: bool = False) -> bytes:
    if value.startswith("0x"):
        value = value[2:]
    elif prefixed:
        raise ValueError("hex string is missing its 0x prefix")
    return bytes.fromhex(value)


def _fixed(value: str, size: int, prefixed: bool = False) -> bytes:
    data = _hex(value, prefixed)
    if len(data) != size:
        raise ValueError(f"expected {size} bytes, got {len(data)}")
    return data


def _vector_root(data: bytes, size: int) -> bytes:
    if len(data) != size:
        raise ValueError(f"expected {size} bytes, got {len(data)}")
    return bytes_vector_root(data)


def _list_root(roots: list[bytes], limit: int) -> bytes:
    return mix_in_length(merkleize(roots, limit), len(roots))


def _uint64_list_root(values: list[int], limit: int) -> bytes:
    packed = b"".join(_u64(value).to_bytes(8, "little") for value in values)
    packed += bytes(-len(packed) % 32)
    chunks = [packed[i : i + 32] for i in range(0, len(packed), 32)]
    return mix_in_length(merkleize(chunks, (limit * 8 + 31) // 32), len(values))


def _bitvector(value: str, size: int) -> tuple[bool, ...]:
    number = int.from_bytes(_fixed(value, (size + 7) // 8), "little")
    return tuple(bool((number >> i) & 1) for i in range(size))


def _bitlist(value: str) -> tuple[bool, ...]:
    data = _hex(value)
    if not data or data[-1] == 0:
        raise ValueError("bitlist is missing its length delimiter")
    length = (len(data) - 1) * 8 + data[-1].bit_length() - 1
    number = int.from_bytes(data, "little")
    return tuple(bool((number >> i) & 1) for i in range(length))


def _extra_data(value: str) -> bytes:
    data = _hex(value, prefixed=True)
    if len(data) > MAX_EXTRA_DATA_BYTES:
        raise ValueError("extra data exceeds 32 bytes")
    return data


def _committee_bits_root(bits: tuple[bool, ...]) -> bytes:
    if len(bits) != SYNC_COMMITTEE_SIZE:
        raise ValueError(f"expected {SYNC_COMMITTEE_SIZE} committee bits")
    return bitvector_root(bits)


@dataclass(frozen=True)
class _Kind:
    """How one field is read from JSON and how its SSZ root is taken."""

    parse: Callable[[Any], Any]
    root: Optional[Callable[[Any], bytes]] = None


def _bytes_kind(size: int, prefixed: bool = False) -> _Kind:
    return _Kind(lambda v: _fixed(v, size, prefixed), lambda b: _vector_root(b, size))


def _vector_kind(count: int, size: int) -> _Kind:
    def parse(values: list[str]) -> list[bytes]:
        items = [_fixed(value, size) for value in values]
        if len(items) != count:
            raise ValueError(f"expected {count} items, got {len(items)}")
        return items

    def root(items: list[bytes]) -> bytes:
        if len(items) != count:
            raise ValueError(f"expected {count} items, got {len(items)}")
        return merkleize([_vector_root(item, size) for item in items])

    return _Kind(parse, root)


def _container_kind(cls: Any) -> _Kind:
    return _Kind(cls.from_json, lambda obj: obj.hash_tree_root())


def _list_kind(cls: Any, limit: int) -> _Kind:
    return _Kind(
        lambda values: [cls.from_json(value) for value in values],
        lambda items: _list_root([item.hash_tree_root() for item in items], limit),
    )


_U64 = _Kind(_u64, uint64_root)
_U256 = _Kind(_u256, uint256_root)
_BYTES32 = _bytes_kind(32, prefixed=True)
_PUBKEY = _bytes_kind(48)
_SIGNATURE = _bytes_kind(96)
_BRANCH = _Kind(lambda values: [_fixed(value, 32) for value in values])
_EXTRA_DATA = _Kind(_extra_data, lambda b: bytes_list_root(b, MAX_EXTRA_DATA_BYTES))
_TRANSACTIONS = _Kind(
    lambda txs: [_hex(tx) for tx in txs],
    lambda txs: _list_root(
        [bytes_list_root(tx, MAX_TRANSACTION_BYTES) for tx in txs], MAX_TRANSACTIONS
    ),
)
_COMMITTEE_BITS = _Kind(lambda v: _bitvector(v, SYNC_COMMITTEE_SIZE), _committee_bits_root)
_AGGREGATION_BITS = _Kind(_bitlist, lambda bits: bitlist_root(bits, 2048))
_INDICES = _Kind(lambda values: [_u64(v) for v in values], lambda v: _uint64_list_root(v, 2048))


def _f(kind: _Kind, **kwargs: Any) -> Any:
    return field(metadata={"kind": kind}, **kwargs)


def _parse(cls: Any, data: Mapping[str, Any]) -> Any:
    return cls(**{f.name: f.metadata["kind"].parse(data[f.name]) for f in fields(cls)})


def _root(obj: Any) -> bytes:
    return container_root([f.metadata["kind"].root(getattr(obj, f.name)) for f in fields(obj)])


class _Container:
    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Any:
        """Build the object from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the container."""
        return _root(self)


@dataclass
class Header:
    slot: int = _f(_U64, default=0)
    proposer_index: int = _f(_U64, default=0)
    parent_root: bytes = _f(_BYTES32, default=bytes(32))
    state_root: bytes = _f(_BYTES32, default=bytes(32))
    body_root: bytes = _f(_BYTES32, default=bytes(32))

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Header":
        """Parse a header, unwrapping a {"beacon": ...} light client header."""
        return _parse(cls, data["beacon"] if "beacon" in data else data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the header."""
        return _root(self)


_HEADER = _container_kind(Header)


@dataclass
class SyncCommittee:
    pubkeys: list[bytes] = _f(
        _vector_kind(SYNC_COMMITTEE_SIZE, 48),
        default_factory=lambda: [bytes(48)] * SYNC_COMMITTEE_SIZE,
    )
    aggregate_pubkey: bytes = _f(_PUBKEY, default=bytes(48))

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SyncCommittee":
        """Parse a sync committee from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the committee."""
        return _root(self)


@dataclass
class SyncAggregate:
    sync_committee_bits: tuple[bool, ...] = _f(
        _COMMITTEE_BITS, default=(False,) * SYNC_COMMITTEE_SIZE
    )
    sync_committee_signature: bytes = _f(_SIGNATURE, default=bytes(96))

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SyncAggregate":
        """Parse a sync aggregate from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the aggregate."""
        return _root(self)


@dataclass
class ExecutionPayload:
    parent_hash: bytes = _f(_BYTES32, default=bytes(32))
    fee_recipient: bytes = _f(_bytes_kind(20, prefixed=True), default=bytes(20))
    state_root: bytes = _f(_BYTES32, default=bytes(32))
    receipts_root: bytes = _f(_BYTES32, default=bytes(32))
    logs_bloom: bytes = _f(_bytes_kind(256, prefixed=True), default=bytes(256))
    prev_randao: bytes = _f(_BYTES32, default=bytes(32))
    block_number: int = _f(_U64, default=0)
    gas_limit: int = _f(_U64, default=0)
    gas_used: int = _f(_U64, default=0)
    timestamp: int = _f(_U64, default=0)
    extra_data: bytes = _f(_EXTRA_DATA, default=b"")
    base_fee_per_gas: int = _f(_U256, default=0)
    block_hash: bytes = _f(_BYTES32, default=bytes(32))
    transactions: list[bytes] = _f(_TRANSACTIONS, default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ExecutionPayload":
        """Parse an execution payload from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the payload."""
        return _root(self)


@dataclass
class _Checkpoint(_Container):
    epoch: int = _f(_U64)
    root: bytes = _f(_BYTES32)


@dataclass
class _AttestationData(_Container):
    slot: int = _f(_U64)
    index: int = _f(_U64)
    beacon_block_root: bytes = _f(_BYTES32)
    source: _Checkpoint = _f(_container_kind(_Checkpoint))
    target: _Checkpoint = _f(_container_kind(_Checkpoint))


@dataclass
class _IndexedAttestation(_Container):
    attesting_indices: list[int] = _f(_INDICES)
    data: _AttestationData = _f(_container_kind(_AttestationData))
    signature: bytes = _f(_SIGNATURE)


@dataclass
class _Attestation(_Container):
    aggregation_bits: tuple[bool, ...] = _f(_AGGREGATION_BITS)
    data: _AttestationData = _f(_container_kind(_AttestationData))
    signature: bytes = _f(_SIGNATURE)


@dataclass
class _AttesterSlashing(_Container):
    attestation_1: _IndexedAttestation = _f(_container_kind(_IndexedAttestation))
    attestation_2: _IndexedAttestation = _f(_container_kind(_IndexedAttestation))


@dataclass
class _SignedBeaconBlockHeader(_Container):
    message: Header = _f(_HEADER)
    signature: bytes = _f(_SIGNATURE)


@dataclass
class _ProposerSlashing(_Container):
    signed_header_1: _SignedBeaconBlockHeader = _f(_container_kind(_SignedBeaconBlockHeader))
    signed_header_2: _SignedBeaconBlockHeader = _f(_container_kind(_SignedBeaconBlockHeader))


@dataclass
class _DepositData(_Container):
    pubkey: bytes = _f(_PUBKEY)
    withdrawal_credentials: bytes = _f(_BYTES32)
    amount: int = _f(_U64)
    signature: bytes = _f(_SIGNATURE)


@dataclass
class _Deposit(_Container):
    proof: list[bytes] = _f(_vector_kind(33, 32))
    data: _DepositData = _f(_container_kind(_DepositData))


@dataclass
class _VoluntaryExit(_Container):
    epoch: int = _f(_U64)
    validator_index: int = _f(_U64)


@dataclass
class _SignedVoluntaryExit(_Container):
    message: _VoluntaryExit = _f(_container_kind(_VoluntaryExit))
    signature: bytes = _f(_SIGNATURE)


@dataclass
class Eth1Data:
    deposit_root: bytes = _f(_BYTES32, default=bytes(32))
    deposit_count: int = _f(_U64, default=0)
    block_hash: bytes = _f(_BYTES32, default=bytes(32))

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Eth1Data":
        """Parse eth1 data from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the eth1 data."""
        return _root(self)


@dataclass
class BeaconBlockBody:
    randao_reveal: bytes = _f(_SIGNATURE, default=bytes(96))
    eth1_data: Eth1Data = _f(_container_kind(Eth1Data), default_factory=Eth1Data)
    graffiti: bytes = _f(_BYTES32, default=bytes(32))
    proposer_slashings: list[_ProposerSlashing] = _f(
        _list_kind(_ProposerSlashing, 16), default_factory=list
    )
    attester_slashings: list[_AttesterSlashing] = _f(
        _list_kind(_AttesterSlashing, 2), default_factory=list
    )
    attestations: list[_Attestation] = _f(_list_kind(_Attestation, 128), default_factory=list)
    deposits: list[_Deposit] = _f(_list_kind(_Deposit, 16), default_factory=list)
    voluntary_exits: list[_SignedVoluntaryExit] = _f(
        _list_kind(_SignedVoluntaryExit, 16), default_factory=list
    )
    sync_aggregate: SyncAggregate = _f(
        _container_kind(SyncAggregate), default_factory=SyncAggregate
    )
    execution_payload: ExecutionPayload = _f(
        _container_kind(ExecutionPayload), default_factory=ExecutionPayload
    )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "BeaconBlockBody":
        """Parse a block body from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the block body."""
        return _root(self)


@dataclass
class BeaconBlock:
    slot: int = _f(_U64, default=0)
    proposer_index: int = _f(_U64, default=0)
    parent_root: bytes = _f(_BYTES32, default=bytes(32))
    state_root: bytes = _f(_BYTES32, default=bytes(32))
    body: BeaconBlockBody = _f(_container_kind(BeaconBlockBody), default_factory=BeaconBlockBody)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "BeaconBlock":
        """Parse a beacon block from its JSON form."""
        return _parse(cls, data)

    def hash_tree_root(self) -> bytes:
        """SSZ hash tree root of the block."""
        return _root(self)


_SYNC_COMMITTEE = _container_kind(SyncCommittee)
_SYNC_AGGREGATE = _container_kind(SyncAggregate)


@dataclass
class Bootstrap:
    header: Header = _f(_HEADER)
    current_sync_committee: SyncCommittee = _f(_SYNC_COMMITTEE)
    current_sync_committee_branch: list[bytes] = _f(_BRANCH)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Bootstrap":
        """Parse a light client bootstrap from its JSON form."""
        return _parse(cls, data)


@dataclass
class Update:
    attested_header: Header = _f(_HEADER)
    next_sync_committee: SyncCommittee = _f(_SYNC_COMMITTEE)
    next_sync_committee_branch: list[bytes] = _f(_BRANCH)
    finalized_header: Header = _f(_HEADER)
    finality_branch: list[bytes] = _f(_BRANCH)
    sync_aggregate: SyncAggregate = _f(_SYNC_AGGREGATE)
    signature_slot: int = _f(_U64)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Update":
        """Parse a light client update from its JSON form."""
        return _parse(cls, data)


@dataclass
class FinalityUpdate:
    attested_header: Header = _f(_HEADER)
    finalized_header: Header = _f(_HEADER)
    finality_branch: list[bytes] = _f(_BRANCH)
    sync_aggregate: SyncAggregate = _f(_SYNC_AGGREGATE)
    signature_slot: int = _f(_U64)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "FinalityUpdate":
        """Parse a finality update from its JSON form."""
        return _parse(cls, data)


@dataclass
class OptimisticUpdate:
    attested_header: Header = _f(_HEADER)
    sync_aggregate: SyncAggregate = _f(_SYNC_AGGREGATE)
    signature_slot: int = _f(_U64)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "OptimisticUpdate":
        """Parse an optimistic update from its JSON form."""
        return _parse(cls, data)


@dataclass
class GenericUpdate:
    """Common view over full, finality and optimistic updates."""

    attested_header: Header
    sync_aggregate: SyncAggregate
    signature_slot: int
    next_sync_committee: Optional[SyncCommittee] = None
    next_sync_committee_branch: Optional[list[bytes]] = None
    finalized_header: Optional[Header] = None
    finality_branch: Optional[list[bytes]] = None

    @classmethod
    def from_update(cls, update: Any) -> "GenericUpdate":
        if not isinstance(update, (Update, FinalityUpdate, OptimisticUpdate)):
            raise TypeError(f"cannot build a generic update from {type(update).__name__}")
        update = copy.deepcopy(update)
        return cls(
            attested_header=update.attested_header,
            sync_aggregate=update.sync_aggregate,
            signature_slot=update.signature_slot,
            next_sync_committee=getattr(update, "next_sync_committee", None),
            next_sync_committee_branch=getattr(update, "next_sync_committee_branch", None),
            finalized_header=getattr(update, "finalized_header", None),
            finality_branch=getattr(update, "finality_branch", None),
        )