import pytest

from heliolite.consensus_types import (
    BeaconBlock,
    BeaconBlockBody,
    Bootstrap,
    Eth1Data,
    ExecutionPayload,
    FinalityUpdate,
    GenericUpdate,
    Header,
    OptimisticUpdate,
    SyncAggregate,
    SyncCommittee,
    Update,
)
from heliolite.ssz import merkleize


def hx(data):
    return "0x" + data.hex()


HEADER_JSON = {
    "slot": "3818112",
    "proposer_index": "12",
    "parent_root": hx(b"\x01" * 32),
    "state_root": hx(b"\x02" * 32),
    "body_root": hx(b"\x03" * 32),
}

COMMITTEE_JSON = {
    "pubkeys": [hx(b"\x11" * 48)] * 512,
    "aggregate_pubkey": hx(b"\x22" * 48),
}

AGGREGATE_JSON = {
    "sync_committee_bits": "0x" + "ff" + "00" * 63,
    "sync_committee_signature": hx(b"\x33" * 96),
}

PAYLOAD_JSON = {
    "parent_hash": hx(b"\x04" * 32),
    "fee_recipient": hx(b"\x05" * 20),
    "state_root": hx(b"\x06" * 32),
    "receipts_root": hx(b"\x07" * 32),
    "logs_bloom": hx(bytes(256)),
    "prev_randao": hx(b"\x08" * 32),
    "block_number": "7530932",
    "gas_limit": "30000000",
    "gas_used": "21000",
    "timestamp": "1664900000",
    "extra_data": "0xabcd",
    "base_fee_per_gas": "7",
    "block_hash": hx(b"\x09" * 32),
    "transactions": ["0x02f8b2", "0x01"],
}

CHECKPOINT_JSON = {"epoch": "10", "root": hx(b"\x0a" * 32)}

BODY_JSON = {
    "randao_reveal": hx(b"\x44" * 96),
    "eth1_data": {
        "deposit_root": hx(b"\x0b" * 32),
        "deposit_count": "5",
        "block_hash": hx(b"\x0c" * 32),
    },
    "graffiti": hx(bytes(32)),
    "proposer_slashings": [],
    "attester_slashings": [],
    "attestations": [
        {
            "aggregation_bits": "0x0d",
            "data": {
                "slot": "1",
                "index": "0",
                "beacon_block_root": hx(b"\x0d" * 32),
                "source": CHECKPOINT_JSON,
                "target": CHECKPOINT_JSON,
            },
            "signature": hx(b"\x55" * 96),
        }
    ],
    "deposits": [],
    "voluntary_exits": [
        {"message": {"epoch": "3", "validator_index": "4"}, "signature": hx(b"\x66" * 96)}
    ],
    "sync_aggregate": AGGREGATE_JSON,
    "execution_payload": PAYLOAD_JSON,
}

BRANCH_JSON = [hx(bytes([i]) * 32) for i in range(5)]


def test_header_from_json():
    header = Header.from_json(HEADER_JSON)
    assert header.slot == 3818112
    assert header.proposer_index == 12
    assert header.state_root == b"\x02" * 32


def test_wrapped_header_matches_unwrapped():
    assert Header.from_json({"beacon": HEADER_JSON}) == Header.from_json(HEADER_JSON)


def test_header_root_depends_on_fields():
    header = Header.from_json(HEADER_JSON)
    assert header.hash_tree_root() == Header.from_json(HEADER_JSON).hash_tree_root()
    changed = Header.from_json({**HEADER_JSON, "slot": "3818113"})
    assert changed.hash_tree_root() != header.hash_tree_root()


def test_default_header_root_is_zero_tree():
    assert Header().hash_tree_root() == merkleize([], 8)


def test_bytes32_requires_prefix_and_length():
    with pytest.raises(ValueError):
        Header.from_json({**HEADER_JSON, "state_root": (b"\x02" * 32).hex()})
    with pytest.raises(ValueError):
        Header.from_json({**HEADER_JSON, "state_root": hx(b"\x02" * 31)})


def test_non_numeric_slot_raises():
    with pytest.raises(ValueError):
        Header.from_json({**HEADER_JSON, "slot": "abc"})


def test_sync_committee_from_json():
    committee = SyncCommittee.from_json(COMMITTEE_JSON)
    assert len(committee.pubkeys) == 512
    assert committee.aggregate_pubkey == b"\x22" * 48
    assert committee.hash_tree_root() != SyncCommittee().hash_tree_root()


def test_sync_committee_wrong_size():
    with pytest.raises(ValueError):
        SyncCommittee.from_json({**COMMITTEE_JSON, "pubkeys": COMMITTEE_JSON["pubkeys"][:3]})
    with pytest.raises(ValueError):
        SyncCommittee(pubkeys=[bytes(48)]).hash_tree_root()


def test_sync_aggregate_bits():
    aggregate = SyncAggregate.from_json(AGGREGATE_JSON)
    assert sum(aggregate.sync_committee_bits) == 8
    assert aggregate.sync_committee_bits[:9] == (True,) * 8 + (False,)
    assert aggregate.hash_tree_root() != SyncAggregate().hash_tree_root()


def test_execution_payload_from_json():
    payload = ExecutionPayload.from_json(PAYLOAD_JSON)
    assert payload.block_number == 7530932
    assert payload.base_fee_per_gas == 7
    assert payload.extra_data == b"\xab\xcd"
    assert payload.transactions == [b"\x02\xf8\xb2", b"\x01"]


def test_execution_payload_root_tracks_transactions():
    payload = ExecutionPayload()
    empty_root = payload.hash_tree_root()
    assert ExecutionPayload().hash_tree_root() == empty_root
    payload.transactions.append(b"\x02\xf8")
    assert payload.hash_tree_root() != empty_root


def test_eth1_data_from_json():
    eth1 = Eth1Data.from_json(BODY_JSON["eth1_data"])
    assert eth1.deposit_count == 5
    assert eth1.hash_tree_root() != Eth1Data().hash_tree_root()


def test_block_root_matches_header_with_body_root():
    block = BeaconBlock.from_json(
        {
            "slot": "3818112",
            "proposer_index": "12",
            "parent_root": hx(b"\x01" * 32),
            "state_root": hx(b"\x02" * 32),
            "body": BODY_JSON,
        }
    )
    header = Header(
        slot=3818112,
        proposer_index=12,
        parent_root=b"\x01" * 32,
        state_root=b"\x02" * 32,
        body_root=block.body.hash_tree_root(),
    )
    assert block.hash_tree_root() == header.hash_tree_root()
    assert block.body.execution_payload.block_number == 7530932
    assert block.body.attestations[0].aggregation_bits == (True, False, True)


def test_body_root_differs_from_default():
    body = BeaconBlockBody.from_json(BODY_JSON)
    assert body.hash_tree_root() != BeaconBlockBody().hash_tree_root()


def test_bootstrap_from_json():
    bootstrap = Bootstrap.from_json(
        {
            "header": {"beacon": HEADER_JSON},
            "current_sync_committee": COMMITTEE_JSON,
            "current_sync_committee_branch": BRANCH_JSON,
        }
    )
    assert bootstrap.header.slot == 3818112
    assert bootstrap.current_sync_committee_branch[4] == b"\x04" * 32


def _update_json():
    return {
        "attested_header": HEADER_JSON,
        "next_sync_committee": COMMITTEE_JSON,
        "next_sync_committee_branch": BRANCH_JSON,
        "finalized_header": {"beacon": HEADER_JSON},
        "finality_branch": BRANCH_JSON + [hx(bytes(32))],
        "sync_aggregate": AGGREGATE_JSON,
        "signature_slot": "3818197",
    }


def test_generic_from_full_update():
    generic = GenericUpdate.from_update(Update.from_json(_update_json()))
    assert generic.signature_slot == 3818197
    assert generic.next_sync_committee is not None
    assert len(generic.finality_branch) == 6
    assert generic.finalized_header.slot == 3818112


def test_generic_from_finality_update():
    data = _update_json()
    update = FinalityUpdate.from_json(data)
    generic = GenericUpdate.from_update(update)
    assert generic.next_sync_committee is None
    assert generic.next_sync_committee_branch is None
    assert generic.finalized_header == update.finalized_header


def test_generic_from_optimistic_update():
    update = OptimisticUpdate.from_json(_update_json())
    generic = GenericUpdate.from_update(update)
    assert generic.finalized_header is None
    assert generic.finality_branch is None
    assert generic.attested_header == update.attested_header


def test_generic_update_copies_data():
    update = Update.from_json(_update_json())
    generic = GenericUpdate.from_update(update)
    generic.attested_header.slot = 1
    assert update.attested_header.slot == 3818112


def test_generic_update_rejects_other_types():
    with pytest.raises(TypeError):
        GenericUpdate.from_update(Header())