import pytest

from heliolite.ssz import (
    bitlist_root,
    bitvector_root,
    bytes_list_root,
    bytes_vector_root,
    container_root,
    is_valid_merkle_branch,
    merkleize,
    mix_in_length,
    uint256_root,
    uint64_root,
)

ZERO = bytes(32)
DEPTH_ONE_ZERO = bytes.fromhex(
    "f5a5fd42d16a20302798ef6ed309979b43003d2320d9f0e8ea9831a92759fb4b"
)


def chunk(n):
    return bytes([n]) * 32


def test_single_chunk_is_its_own_root():
    assert merkleize([chunk(7)]) == chunk(7)


def test_zero_pair_root():
    assert merkleize([ZERO, ZERO]) == DEPTH_ONE_ZERO
    assert merkleize([], 2) == DEPTH_ONE_ZERO


def test_limit_pads_with_zero_chunks():
    assert merkleize([chunk(1)], 4) == merkleize([chunk(1), ZERO, ZERO, ZERO])


def test_odd_count_is_padded():
    assert merkleize([chunk(1), chunk(2), chunk(3)]) == merkleize(
        [chunk(1), chunk(2), chunk(3), ZERO]
    )


def test_limit_exceeded_raises():
    with pytest.raises(ValueError):
        merkleize([chunk(1), chunk(2), chunk(3)], 2)


def test_bad_chunk_size_raises():
    with pytest.raises(ValueError):
        merkleize([b"\x01" * 31])


def test_mix_in_zero_length():
    assert mix_in_length(ZERO, 0) == DEPTH_ONE_ZERO
    assert mix_in_length(chunk(1), 1) != mix_in_length(chunk(1), 2)


def test_uint64_root():
    assert uint64_root(1) == b"\x01" + bytes(31)
    assert uint64_root(2**64 - 1) == b"\xff" * 8 + bytes(24)
    with pytest.raises(ValueError):
        uint64_root(2**64)
    with pytest.raises(ValueError):
        uint64_root(-1)


def test_uint256_root_is_little_endian():
    root = uint256_root(2**255)
    assert root[-1] == 0x80
    assert root[:31] == bytes(31)
    with pytest.raises(ValueError):
        uint256_root(2**256)


def test_bytes_vector_root():
    assert bytes_vector_root(chunk(9)) == chunk(9)
    assert bytes_vector_root(b"\x01\x02\x03\x04") == b"\x01\x02\x03\x04" + bytes(28)
    assert bytes_vector_root(chunk(1) + chunk(2)) == merkleize([chunk(1), chunk(2)])


def test_bytes_list_root():
    assert bytes_list_root(b"", 32) == DEPTH_ONE_ZERO
    data = bytes(range(10))
    assert bytes_list_root(data, 32) == mix_in_length(data + bytes(22), 10)
    with pytest.raises(ValueError):
        bytes_list_root(bytes(33), 32)


def test_bitvector_root():
    assert bitvector_root([False] * 512) == DEPTH_ONE_ZERO
    bits = [True] + [False] * 511
    assert bitvector_root(bits) == merkleize([b"\x01" + bytes(31), ZERO])


def test_bitlist_root():
    expected = mix_in_length(merkleize([b"\x05" + bytes(31)], 8), 3)
    assert bitlist_root([True, False, True], 2048) == expected
    with pytest.raises(ValueError):
        bitlist_root([True] * 5, 4)


def test_container_root_is_merkleized_fields():
    fields = [chunk(1), chunk(2), chunk(3)]
    assert container_root(fields) == merkleize(fields)


def test_merkle_branch_round_trip():
    leaves = [chunk(1), chunk(2), chunk(3), chunk(4)]
    root = merkleize(leaves)
    branch = [chunk(4), merkleize([chunk(1), chunk(2)])]
    assert is_valid_merkle_branch(chunk(3), branch, 2, 2, root) is True
    assert is_valid_merkle_branch(chunk(3), branch, 2, 3, root) is False
    assert is_valid_merkle_branch(chunk(3), branch[:1], 2, 2, root) is False