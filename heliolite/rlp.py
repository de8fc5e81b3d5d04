"""Recursive Length Prefix encoding and decoding."""

from __future__ import annotations

from typing import Any, List, Tuple, Union

Item = Union[bytes, List["Item"]]


def encode(item: Any) -> bytes:
    """Encode bytes, non-negative integers and (nested) lists of them."""
    if isinstance(item, (bytes, bytearray, memoryview)):
        data = bytes(item)
        if len(data) == 1 and data[0] < 0x80:
            return data
        return _prefix(len(data), 0x80) + data
    if isinstance(item, bool):
        raise TypeError("cannot RLP-encode a bool")
    if isinstance(item, int):
        if item < 0:
            raise ValueError("cannot RLP-encode a negative integer")
        return encode(item.to_bytes((item.bit_length() + 7) // 8, "big"))
    if isinstance(item, (list, tuple)):
        payload = b"".join(encode(element) for element in item)
        return _prefix(len(payload), 0xC0) + payload
    raise TypeError(f"cannot RLP-encode {type(item).__name__}")


def _prefix(length: int, offset: int) -> bytes:
    if length < 56:
        return bytes([offset + length])
    size = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + 55 + len(size)]) + size


def _long_length(data: bytes, pos: int, size: int) -> Tuple[int, int]:
    start = pos + 1 + size
    if start > len(data):
        raise ValueError("unexpected end of RLP data")
    raw = data[pos + 1 : start]
    if raw[0] == 0:
        raise ValueError("RLP length has leading zeros")
    length = int.from_bytes(raw, "big")
    if length < 56:
        raise ValueError("non-canonical RLP length")
    return start, length


def _header(data: bytes, pos: int) -> Tuple[bool, int, int]:
    """Return (is_list, payload_start, payload_end) of the item at pos."""
    if pos >= len(data):
        raise ValueError("unexpected end of RLP data")
    prefix = data[pos]
    if prefix < 0x80:
        return False, pos, pos + 1
    if prefix < 0xB8:
        is_list, start, length = False, pos + 1, prefix - 0x80
    elif prefix < 0xC0:
        is_list = False
        start, length = _long_length(data, pos, prefix - 0xB7)
    elif prefix < 0xF8:
        is_list, start, length = True, pos + 1, prefix - 0xC0
    else:
        is_list = True
        start, length = _long_length(data, pos, prefix - 0xF7)
    end = start + length
    if end > len(data):
        raise ValueError("RLP item exceeds available data")
    if prefix == 0x81 and data[start] < 0x80:
        raise ValueError("non-canonical RLP single byte")
    return is_list, start, end


def _decode_at(data: bytes, pos: int) -> Tuple[Item, int]:
    is_list, start, end = _header(data, pos)
    if not is_list:
        return data[start:end], end
    items: List[Item] = []
    cursor = start
    while cursor < end:
        item, cursor = _decode_at(data, cursor)
        items.append(item)
    if cursor != end:
        raise ValueError("RLP list item overruns its list")
    return items, end


def decode(data: bytes) -> Item:
    """Decode one RLP item; raises ValueError if the data is malformed."""
    data = bytes(data)
    item, end = _decode_at(data, 0)
    if end != len(data):
        raise ValueError("trailing bytes after RLP item")
    return item


def decode_list(data: bytes) -> List[bytes]:
    """Decode an RLP list whose elements are all byte strings."""
    data = bytes(data)
    is_list, start, end = _header(data, 0)
    if end != len(data):
        raise ValueError("trailing bytes after RLP item")
    if not is_list:
        raise ValueError("expected an RLP list")
    elements: List[bytes] = []
    cursor = start
    while cursor < end:
        nested, item_start, item_end = _header(data, cursor)
        if nested:
            raise ValueError("expected a byte string element, found a list")
        elements.append(data[item_start:item_end])
        cursor = item_end
    if cursor != end:
        raise ValueError("RLP list item overruns its list")
    return elements