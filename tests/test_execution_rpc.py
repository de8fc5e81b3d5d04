import json

import pytest
import responses

from heliolite.errors import RpcError
from heliolite.execution_rpc import HttpRpc, MockRpc
from heliolite.execution_types import CallOpts, Filter

URL = "http://node.example.com"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def reply(result):
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def test_chain_id(mocked):
    mocked.add(responses.POST, URL, json=reply("0x5"))
    assert HttpRpc(URL).chain_id() == 5
    assert json.loads(mocked.calls[0].request.body)["method"] == "eth_chainId"


def test_get_code_sends_address_and_block(mocked):
    mocked.add(responses.POST, URL, json=reply("0x6080"))
    assert HttpRpc(URL).get_code(b"\x01" * 20, 16) == b"\x60\x80"
    params = json.loads(mocked.calls[0].request.body)["params"]
    assert params == ["0x" + "01" * 20, "0x10"]


def test_missing_receipt_is_none(mocked):
    mocked.add(responses.POST, URL, json=reply(None))
    assert HttpRpc(URL).get_transaction_receipt(b"\x02" * 32) is None


def test_error_response_raises(mocked):
    mocked.add(responses.POST, URL, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "boom"}})
    with pytest.raises(RpcError) as info:
        HttpRpc(URL).get_logs(Filter())
    assert info.value.method == "get_logs"
    assert info.value.error == "boom"


def test_rate_limit_is_retried(mocked):
    mocked.add(responses.POST, URL, status=429)
    mocked.add(responses.POST, URL, json=reply("0x1"))
    assert HttpRpc(URL).chain_id() == 1
    assert len(mocked.calls) == 2


def test_create_access_list_request(mocked):
    mocked.add(responses.POST, URL, json=reply({"accessList": [{"address": "0x" + "03" * 20, "storageKeys": []}], "gasUsed": "0x1"}))
    items = HttpRpc(URL).create_access_list(CallOpts(to=b"\x04" * 20), 7)
    assert [i.address for i in items] == [b"\x03" * 20]
    tx = json.loads(mocked.calls[0].request.body)["params"][0]
    assert int(tx["gas"], 16) == 100_000_000
    assert tx["to"] == "0x" + "04" * 20


def test_mock_rpc_files(tmp_path):
    (tmp_path / "code.json").write_text("0x6001\n")
    (tmp_path / "logs.json").write_text(json.dumps([{"address": "0x" + "aa" * 20, "topics": [], "data": "0x01"}]))
    (tmp_path / "receipt.json").write_text("null")
    rpc = MockRpc(tmp_path)
    assert rpc.get_code(b"\x00" * 20, 0) == b"\x60\x01"
    assert rpc.get_logs(Filter())[0].data == b"\x01"
    assert rpc.get_transaction_receipt(b"\x00" * 32) is None


def test_mock_rpc_unsupported_calls(tmp_path):
    rpc = MockRpc(tmp_path)
    with pytest.raises(RpcError):
        rpc.send_raw_transaction(b"\x01")
    with pytest.raises(RpcError):
        rpc.create_access_list(CallOpts(to=b"\x00" * 20), 0)