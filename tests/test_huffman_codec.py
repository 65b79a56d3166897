import dataclasses
import random
import struct

import pytest

import huffman_codec as codec
from huffman_errors import CorruptTreeError, EmptyInputError, HuffmanError, TruncatedStreamError, UnknownSymbolError


ROUND_TRIP_INPUTS = [
    b"a",
    b"ab",
    b"abcd",
    b"aaab",
    b"aaaa",
    b"\x00" * 1000,
    b"this is an example of a huffman tree",
    bytes(range(256)),
    bytes(range(256)) * 4 + b"\xff" * 300,
]


@pytest.mark.parametrize("data", ROUND_TRIP_INPUTS)
def test_roundtrip_fixed(data):
    assert codec.decode(codec.encode(data)) == data


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_roundtrip_random(seed):
    rng = random.Random(seed)
    data = bytes(rng.getrandbits(8) for _ in range(4096))
    assert codec.decode(codec.encode(data)) == data
    assert codec.decompress(codec.compress(data)) == data


@pytest.mark.parametrize("data", ROUND_TRIP_INPUTS)
def test_leaf_count_matches_distinct_bytes(data):
    assert len(codec.encode(data).symbols) == len(set(data))


def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        codec.encode(b"")
    with pytest.raises(EmptyInputError):
        codec.compress(b"")


def test_abcd_scenario():
    file_data = codec.encode(b"abcd")
    assert file_data.symbols == b"abcd"
    assert len(file_data.tree_bits) == 6
    # four codewords of two bits each
    assert file_data.payload_bits == "00011011"
    assert codec.decode(file_data) == b"abcd"


def test_aaab_scenario():
    file_data = codec.encode(b"aaab")
    assert file_data == codec.FileData(symbols=b"ba", tree_bits="01", payload_bits="1110")
    assert codec.decode(file_data) == b"aaab"


def test_single_repeated_byte():
    file_data = codec.encode(b"aaaa")
    assert file_data == codec.FileData(symbols=b"a", tree_bits="", payload_bits="0000")
    assert codec.decode(file_data) == b"aaaa"


def test_encode_is_reproducible():
    data = b"abracadabra alakazam"
    assert codec.encode(data) == codec.encode(data)


def test_file_data_is_immutable():
    file_data = codec.encode(b"abc")
    with pytest.raises(dataclasses.FrozenInstanceError):
        file_data.payload_bits = ""


def test_decode_corrupt_tree():
    file_data = codec.encode(b"abcd")
    with pytest.raises(CorruptTreeError):
        codec.decode(dataclasses.replace(file_data, symbols=b"abc"))


def test_decode_truncated_payload():
    file_data = codec.encode(b"acab")
    with pytest.raises(TruncatedStreamError):
        codec.decode(dataclasses.replace(file_data, payload_bits=file_data.payload_bits[:-1]))


def test_errors_are_value_errors():
    assert issubclass(HuffmanError, ValueError)
    for cls in (EmptyInputError, CorruptTreeError, TruncatedStreamError, UnknownSymbolError):
        assert issubclass(cls, HuffmanError)


def test_pack_file_data_layout():
    blob = codec.pack_file_data(codec.encode(b"aaab"))
    assert blob == (
        struct.pack(">I", 2) + b"ba"
        + struct.pack(">I", 2) + b"\x40"
        + struct.pack(">Q", 4) + b"\xe0"
    )
    assert codec.unpack_file_data(blob) == codec.encode(b"aaab")


def test_pack_degenerate_has_empty_shape_region():
    blob = codec.pack_file_data(codec.encode(b"zz"))
    assert blob == struct.pack(">I", 1) + b"z" + struct.pack(">I", 0) + struct.pack(">Q", 2) + b"\x00"
    assert codec.decompress(blob) == b"zz"


def test_unpack_truncated_blob():
    blob = codec.compress(b"This is a test" * 100)
    for cut in (0, 3, 10, len(blob) - 1):
        with pytest.raises(TruncatedStreamError):
            codec.unpack_file_data(blob[:cut])


def test_unpack_trailing_bytes():
    with pytest.raises(TruncatedStreamError):
        codec.unpack_file_data(codec.compress(b"hello") + b"\x00")


def test_corrupted_header_is_rejected():
    blob = bytearray(codec.compress(b"Hello World" * 50))
    blob[3] ^= 0xFF
    with pytest.raises(HuffmanError):
        codec.decompress(bytes(blob))


def test_decode_degenerate_rejects_long_run_of_ones_quickly():
    file_data = codec.FileData(symbols=b"a", tree_bits="", payload_bits="1" * 1_000_000)
    with pytest.raises(TruncatedStreamError, match="match no codeword"):
        codec.decode(file_data)


def test_pack_file_data_rejects_non_bit_characters():
    with pytest.raises(HuffmanError):
        codec.pack_file_data(codec.FileData(symbols=b"ab", tree_bits="01", payload_bits="0x1"))
    with pytest.raises(HuffmanError):
        codec.pack_file_data(codec.FileData(symbols=b"ab", tree_bits="0?", payload_bits="01"))
