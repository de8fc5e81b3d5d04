# heliolite

Pieces of an Ethereum light client that check what an untrusted node tells
you instead of believing it.

- **Consensus side** (`heliolite.consensus_types`, `heliolite.ssz`,
  `heliolite.consensus_utils`, `heliolite.consensus_rpc`): beacon-chain and
  light-client types read from the beacon API's JSON, SSZ hash-tree roots,
  Merkle branch checks, sync-period arithmetic, and the signing-root and
  domain helpers.
- **Execution side** (`heliolite.rlp`, `heliolite.proof`, `heliolite.trie`,
  `heliolite.execution_types`, `heliolite.execution_rpc`,
  `heliolite.execution`): RLP encoding and decoding, Merkle-Patricia proof
  checking for accounts and storage slots, ordered-trie roots for receipts,
  and an `ExecutionClient` that checks accounts, transactions, receipts and
  logs against an execution payload you already trust.

## Installation

```
pip install heliolite
```

To run the tests:

```
pip install "heliolite[test]"
pytest
```

## Usage

### Reading beacon light-client data

```python
from heliolite.consensus_rpc import NimbusRpc
from heliolite.consensus_utils import calc_sync_period, is_proof_valid

rpc = NimbusRpc("http://localhost:5052")
finality = rpc.get_finality_update()
period = calc_sync_period(finality.finalized_header.slot)
updates = rpc.get_updates(period, 4)   # count is capped at 128

# Is the finalized header proven by the attested header's state root?
ok = is_proof_valid(
    finality.attested_header,
    finality.finalized_header,
    finality.finality_branch,
    6,
    41,
)
```

`NimbusRpc` also offers `get_bootstrap(block_root)`,
`get_optimistic_update()`, `get_block(slot)` and `chain_id()`. Failed requests
and unparseable answers raise `RpcError`.

`MockRpc(path)` serves the same calls from JSON files in a directory:
`bootstrap.json`, `updates.json`, `finality.json`, `optimistic.json` and
`blocks.json`. Its `chain_id()` raises `RpcError`.

Every container type (`Header`, `SyncCommittee`, `SyncAggregate`,
`ExecutionPayload`, `Eth1Data`, `BeaconBlockBody`, `BeaconBlock`) has
`from_json` and `hash_tree_root()`. `Bootstrap`, `Update`, `FinalityUpdate`
and `OptimisticUpdate` have `from_json`. `GenericUpdate.from_update` gives a
common view of all three update kinds.

### Checking execution data

```python
from heliolite.execution import ExecutionClient
from heliolite.execution_rpc import HttpRpc

client = ExecutionClient(HttpRpc("http://localhost:8545"))
account = client.get_account(address, None, payload)
print(account.balance, account.nonce)
```

`ExecutionClient` also accepts a URL string and builds an `HttpRpc` from it.
`HttpRpc` retries a request while the node answers with HTTP 429.

`payload` is an `ExecutionPayload` whose state root you already trust. For
example, it may be taken from a beacon block you have checked. `get_account`
raises an error in three cases:

- `InvalidAccountProof` if the node's account proof does not match that root.
- `InvalidStorageProof` if a storage proof fails.
- `CodeHashMismatch` if the returned code does not hash to the proven code
  hash.

Transactions and receipts are checked against payloads keyed by block number:

```python
payloads = {payload.block_number: payload}
tx = client.get_transaction(tx_hash, payloads)
receipt = client.get_transaction_receipt(tx_hash, payloads)
```

Both return `None` when the node does not know the transaction, or when its
block is not among the payloads. A transaction whose encoding is not in its
payload raises `MissingTransaction`. A receipt set whose trie root differs
from the payload's receipts root raises `ReceiptRootMismatch`.

Other checked calls:

- `get_block(payload, full_tx)` builds an `ExecutionBlock` from the payload.
  It carries transaction hashes, or full checked transactions when `full_tx`
  is true. `ExecutionBlock.to_json()` renders it in JSON-RPC form.
- `get_transaction_by_block_hash_and_index(payload, index)` fetches and checks
  the transaction at that position.
- `get_logs(filter, payloads)` proves each log through its transaction's
  receipt. It refuses more than five logs at once and raises
  `TooManyLogsToProve` beyond that. It raises `MissingLog` when a log is not
  in its proven receipt.
- `check_rpc(chain_id)` raises `IncorrectExecutionRpcNetwork` on a chain id
  mismatch.
- `send_raw_transaction(data)` passes the bytes to the node and returns the
  hash the node reports.

`heliolite.execution_rpc.MockRpc(path)` serves execution calls from
`proof.json`, `code.json`, `receipt.json`, `transaction.json` and `logs.json`.
Its `create_access_list`, `send_raw_transaction` and `chain_id` raise
`RpcError`.

### Low-level helpers

```python
from heliolite import rlp
from heliolite.proof import keccak256, verify_proof
from heliolite.trie import ordered_trie_root

encoded = rlp.encode([b"cat", b"dog"])
assert rlp.decode(encoded) == [b"cat", b"dog"]
root = ordered_trie_root([b"a", b"b"])
```

`heliolite.ssz` provides `merkleize`, `mix_in_length`, the root helpers for
integers, byte vectors and lists, and bit vectors and lists. It also provides
`is_valid_merkle_branch`.

## Errors

Every failure is an exception. All of them live in `heliolite.errors`:

- `ConsensusError` and its subclasses, for consensus checks.
- `ExecutionError` and its subclasses, for execution checks.
- `RpcError`, when a remote call fails.
- `EvmError`. `EvmError.decode_revert_reason(data)` decodes the message string
  from ABI-encoded revert data. It returns `None` when the data is not a
  revert string.

## What this package does not do

- It does not verify sync-committee BLS signatures.
- It does not run a light-client sync loop that bootstraps and applies updates
  to a store. The types, proofs and helpers for such a loop are here; the loop
  is not.
- It does not execute calls or estimate gas, because it has no EVM.
- It serves no local JSON-RPC endpoint, reads no configuration files, keeps no
  checkpoint storage, and has no command-line program.