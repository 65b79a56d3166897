import heapq
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from huffman_errors import EmptyInputError

logger = logging.getLogger(__name__)

# Code given to the only symbol of a one-leaf tree; a zero-length code could not be decoded
DEGENERATE_CODEWORD = '0'


@dataclass(frozen=True)
class Node: # Leaf when symbol is set, otherwise an internal node with two child indices
    symbol: Optional[int] = None
    left: int = -1
    right: int = -1

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None


@dataclass(frozen=True)
class HuffmanTree: # Arena of nodes; every child index appears under exactly one parent
    nodes: Tuple[Node, ...]
    root: int

    @property
    def is_degenerate(self) -> bool:
        return self.nodes[self.root].is_leaf

    @property
    def leaf_count(self) -> int:
        return sum(1 for node in self.nodes if node.is_leaf)


def count_frequencies(data: bytes) -> Dict[int, int]: # data: input bytes, returns dict of symbol -> count
    return dict(Counter(data))


def merge_frequencies(*tables: Dict[int, int]) -> Dict[int, int]: # combine counts taken over separate slices of the input
    merged = Counter()
    for table in tables:
        merged.update(table)
    return dict(merged)


def build_huffman_tree(frequency_table: Dict[int, int]) -> HuffmanTree:
    """
    Build the Huffman tree for a dict of symbol -> frequency.

    Equal weights are broken by an order key: leaves are seeded in ascending
    symbol order, and each merged node takes the next key after them, so the
    same table always yields the same tree. The first entry popped becomes the
    left child.
    """
    if not frequency_table:
        raise EmptyInputError("cannot build a Huffman tree from zero symbols")

    nodes: List[Node] = []
    heap = []
    for symbol in sorted(frequency_table):
        nodes.append(Node(symbol=symbol))
        heap.append((frequency_table[symbol], len(nodes) - 1, len(nodes) - 1))
    heapq.heapify(heap)

    next_order = len(nodes)
    while len(heap) > 1:
        left_weight, _, left = heapq.heappop(heap)
        right_weight, _, right = heapq.heappop(heap)
        nodes.append(Node(left=left, right=right))
        heapq.heappush(heap, (left_weight + right_weight, next_order, len(nodes) - 1))
        next_order += 1

    root = heap[0][2]
    logger.debug("built Huffman tree: %d symbols, %d nodes", len(frequency_table), len(nodes))
    return HuffmanTree(nodes=tuple(nodes), root=root)


def generate_huffman_codes(tree: HuffmanTree) -> Dict[int, str]: # returns dict of symbol -> codeword
    if tree.is_degenerate:
        return {tree.nodes[tree.root].symbol: DEGENERATE_CODEWORD}

    codes = {}
    stack = [(tree.root, '')]
    while stack:
        index, current_code = stack.pop()
        node = tree.nodes[index]
        if node.is_leaf:
            codes[node.symbol] = current_code
            continue
        # right pushed first so the left branch is visited first
        stack.append((node.right, current_code + '1'))
        stack.append((node.left, current_code + '0'))
    return codes


def code_lengths(codes: Dict[int, str]) -> Dict[int, int]:
    return {symbol: len(code) for symbol, code in codes.items()}


def weighted_path_length(tree: HuffmanTree, frequency_table: Dict[int, int]) -> int:
    """Total number of payload bits the tree spends on the counted input."""
    lengths = code_lengths(generate_huffman_codes(tree))
    return sum(frequency_table[symbol] * length for symbol, length in lengths.items())
