import pytest

from bitstream import decode_payload, encode_payload, pack_bits, unpack_bits
from huffman_errors import HuffmanError, TruncatedStreamError, UnknownSymbolError

CODES = {ord('a'): '0', ord('b'): '10', ord('c'): '11'}
TABLE = {code: symbol for symbol, code in CODES.items()}


def test_encode_payload_concatenates_in_input_order():
    assert encode_payload(b"acab", CODES) == "011010"


def test_encode_payload_unknown_symbol():
    with pytest.raises(UnknownSymbolError):
        encode_payload(b"abz", CODES)


def test_decode_payload():
    assert decode_payload("011010", TABLE) == b"acab"


def test_decode_empty_payload():
    assert decode_payload("", TABLE) == b""


def test_decode_degenerate_table():
    assert decode_payload("0000", {'0': ord('q')}) == b"qqqq"


def test_decode_stops_mid_codeword():
    with pytest.raises(TruncatedStreamError):
        decode_payload("0111", TABLE)


def test_decode_degenerate_rejects_one_bit():
    with pytest.raises(TruncatedStreamError):
        decode_payload("01", {'0': ord('q')})


def test_decode_rejects_non_bit_characters():
    with pytest.raises(TruncatedStreamError):
        decode_payload("0a", TABLE)


def test_pack_bits_pads_last_byte():
    assert pack_bits("101") == (b"\xa0", 5)
    assert pack_bits("11111111") == (b"\xff", 0)
    assert pack_bits("111111110") == (b"\xff\x00", 7)
    assert pack_bits("") == (b"", 0)


def test_unpack_bits_drops_padding():
    assert unpack_bits(b"\xa0", 3) == "101"
    assert unpack_bits(b"\xff\x00", 9) == "111111110"
    assert unpack_bits(b"", 0) == ""


def test_unpack_bits_more_than_available():
    with pytest.raises(TruncatedStreamError):
        unpack_bits(b"\xff", 9)


def test_decode_stops_once_no_codeword_can_match():
    with pytest.raises(TruncatedStreamError, match="match no codeword"):
        decode_payload("1" * 500_000, {'0': ord('q')})


def test_pack_bits_rejects_non_bit_characters():
    with pytest.raises(HuffmanError):
        pack_bits("0x1")
