import json
from urllib.parse import parse_qs, urlparse

import pytest
import responses

from heliolite.consensus_rpc import MAX_REQUEST_LIGHT_CLIENT_UPDATES, MockRpc, NimbusRpc
from heliolite.errors import RpcError

BASE = "http://beacon.example.com"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def header_json(slot):
    return {
        "slot": str(slot),
        "proposer_index": "7",
        "parent_root": "0x" + "11" * 32,
        "state_root": "0x" + "22" * 32,
        "body_root": "0x" + "33" * 32,
    }


def aggregate_json():
    return {"sync_committee_bits": "0x" + "ff" * 64, "sync_committee_signature": "0x" + "00" * 96}


def committee_json():
    return {"pubkeys": ["0x" + "ab" * 48] * 512, "aggregate_pubkey": "0x" + "cd" * 48}


def update_json(slot):
    return {
        "attested_header": {"beacon": header_json(slot)},
        "next_sync_committee": committee_json(),
        "next_sync_committee_branch": ["0x" + "00" * 32] * 5,
        "finalized_header": header_json(slot - 1),
        "finality_branch": ["0x" + "00" * 32] * 6,
        "sync_aggregate": aggregate_json(),
        "signature_slot": str(slot + 1),
    }


def test_optimistic_update_parsed(mocked):
    mocked.add(
        responses.GET,
        f"{BASE}/eth/v1/beacon/light_client/optimistic_update",
        json={"data": {"attested_header": header_json(100), "sync_aggregate": aggregate_json(), "signature_slot": "101"}},
    )
    update = NimbusRpc(BASE).get_optimistic_update()
    assert update.attested_header.slot == 100
    assert update.signature_slot == 101
    assert all(update.sync_aggregate.sync_committee_bits)


def test_updates_count_is_capped(mocked):
    mocked.add(responses.GET, f"{BASE}/eth/v1/beacon/light_client/updates", json=[{"data": update_json(50)}])
    updates = NimbusRpc(BASE).get_updates(3, 250)
    assert [u.attested_header.slot for u in updates] == [50]
    query = parse_qs(urlparse(mocked.calls[0].request.url).query)
    assert query["count"] == [str(MAX_REQUEST_LIGHT_CLIENT_UPDATES)]
    assert query["start_period"] == ["3"]


def test_bootstrap_url_uses_hex_root(mocked):
    root = bytes(range(32))
    mocked.add(
        responses.GET,
        f"{BASE}/eth/v1/beacon/light_client/bootstrap/0x{root.hex()}",
        json={"data": {"header": header_json(9), "current_sync_committee": committee_json(),
                       "current_sync_committee_branch": ["0x" + "00" * 32] * 5}},
    )
    bootstrap = NimbusRpc(BASE).get_bootstrap(root)
    assert bootstrap.header.slot == 9
    assert len(bootstrap.current_sync_committee.pubkeys) == 512


def test_chain_id_from_spec(mocked):
    mocked.add(responses.GET, f"{BASE}/eth/v1/config/spec", json={"data": {"DEPOSIT_NETWORK_ID": "5"}})
    assert NimbusRpc(BASE).chain_id() == 5


def test_server_error_raises_rpc_error(mocked):
    mocked.add(responses.GET, f"{BASE}/eth/v1/beacon/light_client/finality_update", status=500)
    with pytest.raises(RpcError) as info:
        NimbusRpc(BASE).get_finality_update()
    assert info.value.method == "finality_update"


def test_mock_rpc_reads_files(tmp_path):
    (tmp_path / "updates.json").write_text(json.dumps([update_json(70), update_json(80)]))
    (tmp_path / "finality.json").write_text(json.dumps({
        "attested_header": header_json(12), "finalized_header": header_json(8),
        "finality_branch": ["0x" + "00" * 32] * 6, "sync_aggregate": aggregate_json(), "signature_slot": "13",
    }))
    rpc = MockRpc(tmp_path)
    assert [u.attested_header.slot for u in rpc.get_updates(0, 1)] == [70, 80]
    assert rpc.get_finality_update().finalized_header.slot == 8
    with pytest.raises(RpcError):
        rpc.chain_id()


def test_mock_rpc_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        MockRpc(tmp_path).get_block(1)