"""Root computation for ordered Merkle Patricia tries."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple, Union

from heliolite import rlp
from heliolite.proof import keccak256

_Nibbles = Tuple[int, ...]
_Node = Union[bytes, list]


def _nibbles(data: bytes) -> _Nibbles:
    return tuple(n for byte in data for n in (byte >> 4, byte & 0x0F))


def _hex_prefix(nibbles: Sequence[int], leaf: bool) -> bytes:
    flag = 2 if leaf else 0
    if len(nibbles) % 2:
        head = bytes([((flag + 1) << 4) | nibbles[0]])
        rest = nibbles[1:]
    else:
        head = bytes([flag << 4])
        rest = nibbles
    return head + bytes((hi << 4) | lo for hi, lo in zip(rest[::2], rest[1::2]))


def _common_prefix_length(keys: Iterable[_Nibbles]) -> int:
    length = 0
    for column in zip(*keys):
        if any(nibble != column[0] for nibble in column):
            break
        length += 1
    return length


def _reference(node: _Node) -> _Node:
    encoded = rlp.encode(node)
    return node if len(encoded) < 32 else keccak256(encoded)


def _build(pairs: List[Tuple[_Nibbles, bytes]]) -> _Node:
    if not pairs:
        return b""
    if len(pairs) == 1:
        key, value = pairs[0]
        return [_hex_prefix(key, leaf=True), value]

    prefix_length = _common_prefix_length(key for key, _ in pairs)
    if prefix_length:
        rest = [(key[prefix_length:], value) for key, value in pairs]
        return [
            _hex_prefix(pairs[0][0][:prefix_length], leaf=False),
            _reference(_build(rest)),
        ]

    branch: List[_Node] = []
    for nibble in range(16):
        group = [(key[1:], value) for key, value in pairs if key and key[0] == nibble]
        branch.append(_reference(_build(group)) if group else b"")
    branch.append(next((value for key, value in pairs if not key), b""))
    return branch


def ordered_trie_root(items: Iterable[bytes]) -> bytes:
    """Root of the trie mapping rlp(index) to each item, as used for receipts."""
    pairs = [
        (_nibbles(rlp.encode(index)), bytes(item)) for index, item in enumerate(items)
    ]
    return keccak256(rlp.encode(_build(pairs)))