"""Merkle Patricia proof verification for account and storage data."""

from __future__ import annotations

from typing import Any, Sequence

from Crypto.Hash import keccak as _keccak

from heliolite import rlp

_EMPTY_STORAGE_HASH = bytes.fromhex(
    "56e81f171bcc55a6ff8345e692c0f86e5b48e01b996cadc001622fb5e363b421"
)
_EMPTY_CODE_HASH = bytes.fromhex(
    "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
)
_EMPTY_ACCOUNT = rlp.encode([b"", b"", _EMPTY_STORAGE_HASH, _EMPTY_CODE_HASH])
_EMPTY_SLOT = b"\x80"


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of data."""
    return _keccak.new(digest_bits=256, data=bytes(data)).digest()


def _get_nibble(path: bytes, offset: int) -> int:
    byte = path[offset // 2]
    return byte >> 4 if offset % 2 == 0 else byte & 0x0F


def _skip_length(node: bytes) -> int:
    if not node:
        return 0
    return {0: 2, 1: 1, 2: 2, 3: 1}.get(_get_nibble(node, 0), 0)


def _paths_match(p1: bytes, s1: int, p2: bytes, s2: int) -> bool:
    len1 = len(p1) * 2 - s1
    len2 = len(p2) * 2 - s2
    if len1 != len2:
        return False
    return all(
        _get_nibble(p1, s1 + offset) == _get_nibble(p2, s2 + offset)
        for offset in range(len1)
    )


def _is_empty_value(value: bytes) -> bool:
    return value == _EMPTY_SLOT or value == _EMPTY_ACCOUNT


def shared_prefix_length(path: bytes, path_offset: int, node_path: bytes) -> int:
    """Count the nibbles path (from path_offset) shares with an encoded node path."""
    skip = _skip_length(node_path)
    length = min(len(node_path) * 2 - skip, len(path) * 2 - path_offset)
    count = 0
    for i in range(length):
        if _get_nibble(path, i + path_offset) != _get_nibble(node_path, i + skip):
            break
        count += 1
    return count


def _walk(proof: Sequence[bytes], root: bytes, path: bytes, value: bytes) -> bool:
    expected_hash = root
    path_offset = 0
    last = len(proof) - 1

    for i, raw_node in enumerate(proof):
        node = bytes(raw_node)
        if keccak256(node) != expected_hash:
            return False

        items = rlp.decode_list(node)
        is_last = i == last

        if len(items) == 17:
            nibble = _get_nibble(path, path_offset)
            if is_last:
                # exclusion proof
                if not items[nibble] and _is_empty_value(value):
                    return True
            else:
                expected_hash = items[nibble]
                path_offset += 1
        elif len(items) == 2:
            node_path, node_value = items
            skip = _skip_length(node_path)
            if is_last:
                matches = _paths_match(node_path, skip, path, path_offset)
                # exclusion proof
                if not matches and _is_empty_value(value):
                    return True
                # inclusion proof
                if node_value == value:
                    return matches
            else:
                prefix = shared_prefix_length(path, path_offset, node_path)
                if prefix < len(node_path) * 2 - skip:
                    # divergent path before the end of the proof
                    return False
                path_offset += prefix
                expected_hash = node_value
        else:
            return False

    return False


def verify_proof(proof: Sequence[bytes], root: bytes, path: bytes, value: bytes) -> bool:
    """Check that proof shows value at path (or its absence) under root."""
    try:
        return _walk(proof, bytes(root), bytes(path), bytes(value))
    except (ValueError, IndexError):
        return False


def encode_account(proof: Any) -> bytes:
    """RLP-encode the account fields carried by a proof response."""
    return rlp.encode(
        [
            proof.nonce,
            proof.balance,
            bytes(proof.storage_hash),
            bytes(proof.code_hash),
        ]
    )