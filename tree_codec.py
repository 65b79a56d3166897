import logging
from typing import Dict, List, Optional, Tuple

from huffman import HuffmanTree, Node, generate_huffman_codes
from huffman_errors import CorruptTreeError

logger = logging.getLogger(__name__)


def serialize_tree(tree: HuffmanTree) -> Tuple[bytes, str]:
    """
    Flatten a tree into (leaf symbols, shape bits).

    Depth-first, left before right: an internal node writes '0', its left
    subtree, '1', then its right subtree. Leaves write no bits; their symbols
    are listed in the order they are reached. k leaves give 2 * (k - 1) bits.
    """
    symbols = bytearray()
    bits = []
    stack = [(tree.root, False)] # (node index, write '1' before visiting it)
    while stack:
        index, after_left = stack.pop()
        if after_left:
            bits.append('1')
        node = tree.nodes[index]
        if node.is_leaf:
            symbols.append(node.symbol)
            continue
        bits.append('0')
        stack.append((node.right, True))
        stack.append((node.left, False))

    logger.debug("serialized tree: %d leaves, %d shape bits", len(symbols), len(bits))
    return bytes(symbols), ''.join(bits)


def deserialize_tree(symbols: bytes, tree_bits: str) -> HuffmanTree:
    """
    Rebuild a tree from serialize_tree output without recursion.

    Each open internal node is a frame on the stack holding its finished left
    child, or None while the left slot is still being filled. Leaf symbols are
    consumed strictly in order.
    """
    if set(tree_bits) - {'0', '1'}:
        raise CorruptTreeError("tree shape bits may only contain '0' and '1'")

    nodes: List[Node] = []
    frames: List[List[Optional[int]]] = []
    seen = set()
    pos = 0
    next_symbol = 0

    while True:
        # every '0' opens an internal node and moves into its left slot
        while pos < len(tree_bits) and tree_bits[pos] == '0':
            frames.append([None])
            pos += 1

        if next_symbol >= len(symbols):
            raise CorruptTreeError(
                f"tree shape needs more than the {len(symbols)} leaf symbols given"
            )
        symbol = symbols[next_symbol]
        if symbol in seen:
            raise CorruptTreeError(f"symbol {symbol} appears twice in the leaf list")
        seen.add(symbol)
        next_symbol += 1
        nodes.append(Node(symbol=symbol))
        child = len(nodes) - 1

        # close every node whose right slot this child completes
        while frames and frames[-1][0] is not None:
            left = frames.pop()[0]
            nodes.append(Node(left=left, right=child))
            child = len(nodes) - 1

        if not frames:
            break

        if pos >= len(tree_bits):
            raise CorruptTreeError(f"tree shape bits end with {len(frames)} node(s) still open")
        frames[-1][0] = child
        pos += 1 # the '1' that moves into the right slot

    if pos != len(tree_bits):
        raise CorruptTreeError(f"{len(tree_bits) - pos} tree shape bits left after the root closed")
    if next_symbol != len(symbols):
        raise CorruptTreeError(f"{len(symbols) - next_symbol} leaf symbols left unused")

    logger.debug("deserialized tree: %d leaves, %d nodes", len(symbols), len(nodes))
    return HuffmanTree(nodes=tuple(nodes), root=child)


def decode_table(tree: HuffmanTree) -> Dict[str, int]: # returns dict of codeword -> symbol
    return {code: symbol for symbol, code in generate_huffman_codes(tree).items()}
