"""SSZ merkleization helpers for hash_tree_root computation."""

from __future__ import annotations

import hashlib
from functools import lru_cache
from typing import Iterable, Sequence

BYTES_PER_CHUNK = 32
_ZERO_CHUNK = bytes(BYTES_PER_CHUNK)
_UINT64_MAX = 2**64 - 1
_UINT256_MAX = 2**256 - 1


def _hash(left: bytes, right: bytes) -> bytes:
    return hashlib.sha256(left + right).digest()


@lru_cache(maxsize=None)
def _zero_hash(depth: int) -> bytes:
    if depth == 0:
        return _ZERO_CHUNK
    below = _zero_hash(depth - 1)
    return _hash(below, below)


def _pack(data: bytes) -> list[bytes]:
    data = bytes(data)
    if len(data) % BYTES_PER_CHUNK:
        data += bytes(BYTES_PER_CHUNK - len(data) % BYTES_PER_CHUNK)
    return [data[start : start + BYTES_PER_CHUNK] for start in range(0, len(data), BYTES_PER_CHUNK)]


def _pack_bits(bits: Sequence[bool]) -> bytes:
    value = sum(1 << position for position, bit in enumerate(bits) if bit)
    return value.to_bytes((len(bits) + 7) // 8, "little")


def _check_chunk(chunk: bytes) -> bytes:
    chunk = bytes(chunk)
    if len(chunk) != BYTES_PER_CHUNK:
        raise ValueError(f"expected a {BYTES_PER_CHUNK}-byte chunk, got {len(chunk)} bytes")
    return chunk


def merkleize(chunks: Iterable[bytes], limit: int | None = None) -> bytes:
    """Merkle root of chunks, padded with zero chunks up to limit (a power of two)."""
    layer = [_check_chunk(chunk) for chunk in chunks]
    if limit is None:
        limit = len(layer)
    if len(layer) > limit:
        raise ValueError(f"{len(layer)} chunks exceed the limit of {limit}")

    depth = (max(limit, 1) - 1).bit_length()
    if not layer:
        return _zero_hash(depth)

    for level in range(depth):
        if len(layer) % 2:
            layer.append(_zero_hash(level))
        layer = [_hash(layer[i], layer[i + 1]) for i in range(0, len(layer), 2)]
    return layer[0]


def mix_in_length(root: bytes, length: int) -> bytes:
    """Combine a list's content root with its length."""
    return _hash(_check_chunk(root), length.to_bytes(BYTES_PER_CHUNK, "little"))


def uint64_root(value: int) -> bytes:
    """Root of an unsigned 64-bit integer."""
    if not 0 <= value <= _UINT64_MAX:
        raise ValueError(f"{value} does not fit in uint64")
    return value.to_bytes(8, "little") + bytes(24)


def uint256_root(value: int) -> bytes:
    """Root of an unsigned 256-bit integer."""
    if not 0 <= value <= _UINT256_MAX:
        raise ValueError(f"{value} does not fit in uint256")
    return value.to_bytes(BYTES_PER_CHUNK, "little")


def bytes_vector_root(data: bytes) -> bytes:
    """Root of a fixed-length byte vector."""
    return merkleize(_pack(data))


def bytes_list_root(data: bytes, limit: int) -> bytes:
    """Root of a variable-length byte list with a maximum length of limit."""
    data = bytes(data)
    if len(data) > limit:
        raise ValueError(f"{len(data)} bytes exceed the limit of {limit}")
    chunk_limit = (limit + BYTES_PER_CHUNK - 1) // BYTES_PER_CHUNK
    return mix_in_length(merkleize(_pack(data), chunk_limit), len(data))


def bitvector_root(bits: Sequence[bool]) -> bytes:
    """Root of a fixed-length bit vector."""
    bits = list(bits)
    return merkleize(_pack(_pack_bits(bits)), (len(bits) + 255) // 256)


def bitlist_root(bits: Sequence[bool], limit: int) -> bytes:
    """Root of a variable-length bit list with a maximum length of limit."""
    bits = list(bits)
    if len(bits) > limit:
        raise ValueError(f"{len(bits)} bits exceed the limit of {limit}")
    root = merkleize(_pack(_pack_bits(bits)), (limit + 255) // 256)
    return mix_in_length(root, len(bits))


def container_root(field_roots: Iterable[bytes]) -> bytes:
    """Root of a container given the roots of its fields in order."""
    return merkleize(field_roots)


def is_valid_merkle_branch(
    leaf: bytes, branch: Sequence[bytes], depth: int, index: int, root: bytes
) -> bool:
    """Check that leaf sits at subtree index under root, proven by branch."""
    branch = [_check_chunk(node) for node in branch]
    if len(branch) < depth:
        return False
    value = _check_chunk(leaf)
    for level in range(depth):
        if (index >> level) & 1:
            value = _hash(branch[level], value)
        else:
            value = _hash(value, branch[level])
    return value == bytes(root)