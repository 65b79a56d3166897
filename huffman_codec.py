import logging
import struct
from dataclasses import dataclass
from typing import Tuple

from bitstream import decode_payload, encode_payload, pack_bits, unpack_bits
from huffman import build_huffman_tree, count_frequencies, generate_huffman_codes
from huffman_errors import EmptyInputError, TruncatedStreamError
from tree_codec import decode_table, deserialize_tree, serialize_tree

logger = logging.getLogger(__name__)

# Big-endian length prefixes of the persisted layout
LEAF_COUNT_FORMAT = '>I'
SHAPE_BIT_COUNT_FORMAT = '>I'
PAYLOAD_BIT_COUNT_FORMAT = '>Q'


@dataclass(frozen=True)
class FileData:
    symbols: bytes # leaf symbols in tree serialization order
    tree_bits: str # tree shape bits
    payload_bits: str # concatenated codewords of the input


def encode(data: bytes) -> FileData:
    if not data:
        raise EmptyInputError("cannot encode an empty byte sequence")

    ft = count_frequencies(data)
    tree = build_huffman_tree(ft)
    code_map = generate_huffman_codes(tree)
    symbols, tree_bits = serialize_tree(tree)
    payload_bits = encode_payload(data, code_map)

    logger.debug(
        "encoded %d bytes: %d symbols, %d shape bits, %d payload bits",
        len(data), len(symbols), len(tree_bits), len(payload_bits),
    )
    return FileData(symbols=symbols, tree_bits=tree_bits, payload_bits=payload_bits)


def decode(file_data: FileData) -> bytes:
    tree = deserialize_tree(file_data.symbols, file_data.tree_bits)
    return decode_payload(file_data.payload_bits, decode_table(tree))


# Persisted layout

def pack_file_data(file_data: FileData) -> bytes:
    """
    Lay out FileData with explicit counts, since the last byte of each bit
    region may be padded:

      [u32 leaf_count][symbols]
      [u32 shape_bit_count][shape bits, MSB-first, zero-padded]
      [u64 payload_bit_count][payload bits, MSB-first, zero-padded]
    """
    shape_packed, _ = pack_bits(file_data.tree_bits)
    payload_packed, _ = pack_bits(file_data.payload_bits)
    return b''.join((
        struct.pack(LEAF_COUNT_FORMAT, len(file_data.symbols)),
        bytes(file_data.symbols),
        struct.pack(SHAPE_BIT_COUNT_FORMAT, len(file_data.tree_bits)),
        shape_packed,
        struct.pack(PAYLOAD_BIT_COUNT_FORMAT, len(file_data.payload_bits)),
        payload_packed,
    ))


def _take(blob: bytes, offset: int, size: int, what: str) -> Tuple[bytes, int]:
    end = offset + size
    if end > len(blob):
        raise TruncatedStreamError(f"{what} needs {size} bytes at offset {offset}, blob has {len(blob)}")
    return blob[offset:end], end


def _take_bits(blob: bytes, offset: int, count_format: str, what: str) -> Tuple[str, int]:
    raw, offset = _take(blob, offset, struct.calcsize(count_format), f"{what} bit count")
    (bit_count,) = struct.unpack(count_format, raw)
    packed, offset = _take(blob, offset, (bit_count + 7) // 8, what)
    return unpack_bits(packed, bit_count), offset


def unpack_file_data(blob: bytes) -> FileData:
    raw, offset = _take(blob, 0, struct.calcsize(LEAF_COUNT_FORMAT), "leaf count")
    (leaf_count,) = struct.unpack(LEAF_COUNT_FORMAT, raw)
    symbols, offset = _take(blob, offset, leaf_count, "leaf symbols")
    tree_bits, offset = _take_bits(blob, offset, SHAPE_BIT_COUNT_FORMAT, "tree shape")
    payload_bits, offset = _take_bits(blob, offset, PAYLOAD_BIT_COUNT_FORMAT, "payload")
    if offset != len(blob):
        raise TruncatedStreamError(f"{len(blob) - offset} unexpected bytes after the payload")
    return FileData(symbols=bytes(symbols), tree_bits=tree_bits, payload_bits=payload_bits)


def compress(data: bytes) -> bytes:
    return pack_file_data(encode(data))


def decompress(blob: bytes) -> bytes:
    return decode(unpack_file_data(blob))
