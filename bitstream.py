import logging
from typing import Dict, Tuple

from huffman_errors import HuffmanError, TruncatedStreamError, UnknownSymbolError

logger = logging.getLogger(__name__)


def encode_payload(data: bytes, code_map: Dict[int, str]) -> str: # data: input bytes, code_map: dict of symbol -> codeword
    try:
        bits = ''.join(code_map[byte] for byte in data)
    except KeyError as exc:
        raise UnknownSymbolError(f"no codeword for byte {exc.args[0]}") from None
    logger.debug("encoded %d bytes into %d payload bits", len(data), len(bits))
    return bits


def decode_payload(bits: str, table: Dict[str, int]) -> bytes: # table: dict of codeword -> symbol
    """
    Walk the payload bit by bit, emitting a symbol each time the accumulated
    bits equal a codeword. The code is prefix-free, so the first match is the
    only one and nothing is ever backtracked.
    """
    decoded = bytearray()
    current_code = ''
    longest = max((len(code) for code in table), default=0)
    for bit in bits:
        if bit != '0' and bit != '1':
            raise TruncatedStreamError(f"payload contains non-bit character {bit!r}")
        current_code += bit
        symbol = table.get(current_code)
        if symbol is not None:
            decoded.append(symbol)
            current_code = ''
        elif len(current_code) >= longest:
            raise TruncatedStreamError(
                f"{len(current_code)} payload bits match no codeword (longest is {longest})"
            )

    if current_code:
        raise TruncatedStreamError(
            f"payload ends inside a codeword ({len(current_code)} unmatched bits)"
        )
    return bytes(decoded)


def pack_bits(bits: str) -> Tuple[bytes, int]:
    """
    Packs a '0'/'1' string into bytes, most significant bit first
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for ch in bits:
        if ch != '0' and ch != '1':
            raise HuffmanError(f"cannot pack non-bit character {ch!r}")
        acc = (acc << 1) | (1 if ch == '1' else 0)
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc)
            acc = 0
            acc_bits = 0

    pad_bits = 0
    if acc_bits != 0:
        pad_bits = 8 - acc_bits
        out.append(acc << pad_bits)

    return bytes(out), pad_bits


def unpack_bits(packed: bytes, bit_count: int) -> str:
    """Reads the first bit_count bits back out of packed bytes; padding is dropped."""
    if bit_count > len(packed) * 8:
        raise TruncatedStreamError(
            f"{bit_count} bits declared but only {len(packed) * 8} available"
        )
    bits = ''.join(format(byte, '08b') for byte in packed)
    return bits[:bit_count]
