"""Helpers for sync periods, Merkle proofs and signing domains."""

from __future__ import annotations

from typing import Any, Sequence

from heliolite.ssz import bytes_vector_root, container_root, is_valid_merkle_branch


def calc_sync_period(slot: int) -> int:
    """Sync committee period that a slot belongs to."""
    epoch = slot // 32  # 32 slots per epoch
    return epoch // 256  # 256 epochs per sync committee period


def is_proof_valid(
    attested_header: Any,
    leaf_object: Any,
    branch: Sequence[bytes],
    depth: int,
    index: int,
) -> bool:
    """Check that leaf_object is proven by branch against the header's state root."""
    try:
        leaf = leaf_object.hash_tree_root()
        return is_valid_merkle_branch(
            leaf, branch, depth, index, bytes(attested_header.state_root)
        )
    except (ValueError, TypeError, AttributeError):
        return False


def compute_signing_root(object_root: bytes, domain: bytes) -> bytes:
    """Root of the signing data pairing an object root with a domain."""
    return container_root([bytes(object_root), bytes(domain)])


def compute_fork_data_root(current_version: bytes, genesis_validator_root: bytes) -> bytes:
    """Root of the fork data for a fork version and genesis validators root."""
    return container_root(
        [bytes_vector_root(bytes(current_version)), bytes(genesis_validator_root)]
    )


def compute_domain(domain_type: bytes, fork_version: bytes, genesis_root: bytes) -> bytes:
    """Signature domain: the domain type followed by 28 bytes of the fork data root."""
    fork_data_root = compute_fork_data_root(fork_version, genesis_root)
    domain = bytes(domain_type) + fork_data_root[:28]
    if len(domain) != 32:
        raise ValueError(f"domain must be 32 bytes, got {len(domain)}")
    return domain