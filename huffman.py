import heapq
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

ALPHABET_MAX = 255 # largest symbol a byte-oriented frequency table can hold


class HuffmanError(ValueError):
    """Base class for every Huffman coding failure."""

class DegenerateAlphabet(HuffmanError):
    """Fewer than two distinct symbols, so no code of length >= 1 exists."""

class MalformedCode(HuffmanError):
    """A code table record that cannot be parsed or has an empty code."""

class AmbiguousCode(HuffmanError):
    """Two codes where one is a prefix of the other."""

class IncompleteCode(AmbiguousCode):
    """A loaded table leaves an internal node with a missing child."""

class DuplicateSymbol(HuffmanError):
    """A symbol (or a code path) is assigned twice."""

class TruncatedStream(HuffmanError):
    """The bit source ran out in the middle of a code."""


class HuffmanNode: # Node for Huffman tree
    __slots__ = ()
    is_leaf = False

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")


class Leaf(HuffmanNode):
    __slots__ = ("symbol", "weight")
    is_leaf = True

    def __init__(self, symbol: int, weight: int):
        if not 0 <= symbol <= ALPHABET_MAX:
            raise ValueError(f"symbol must be in 0..{ALPHABET_MAX}, got {symbol}")
        if weight < 0:
            raise ValueError(f"weight must be non-negative, got {weight}")
        object.__setattr__(self, "symbol", symbol)
        object.__setattr__(self, "weight", weight)

    def __repr__(self):
        return f"Leaf(symbol={self.symbol}, weight={self.weight})"


class Internal(HuffmanNode):
    __slots__ = ("weight", "zero", "one")

    def __init__(self, weight: int, zero: HuffmanNode, one: HuffmanNode):
        if weight != zero.weight + one.weight:
            raise ValueError(
                f"weight {weight} is not the sum of the child weights {zero.weight} + {one.weight}"
            )
        object.__setattr__(self, "weight", weight)
        object.__setattr__(self, "zero", zero) # path bit 0
        object.__setattr__(self, "one", one) # path bit 1

    def child(self, bit: int) -> HuffmanNode:
        if bit == 0:
            return self.zero
        if bit == 1:
            return self.one
        raise ValueError(f"bit must be 0 or 1, got {bit!r}")

    def __repr__(self):
        return f"Internal(weight={self.weight}, zero={self.zero!r}, one={self.one!r})"


def count_frequencies(data: bytes) -> Dict[int, int]:
    ft: Dict[int, int] = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    return ft


def _frequency_items(frequency_table) -> List[Tuple[int, int]]:
    # accepts a dict of symbol -> count or a count array indexed by symbol
    if hasattr(frequency_table, "items"):
        items = frequency_table.items()
    else:
        items = enumerate(frequency_table)
    out = []
    for symbol, count in items:
        if count < 0:
            raise ValueError(f"negative count {count} for symbol {symbol}")
        if count:
            out.append((symbol, count))
    out.sort()
    return out


def build_huffman_tree(frequency_table) -> Internal: # frequency_table: dict of symbol -> frequency, or count array
    """
    Merge the two lightest nodes until one remains and return it as the root.

    Ties on weight are broken by insertion order (leaves in ascending symbol
    order, then merged nodes as they are created), so the same table always
    yields the same tree.
    """
    leaves = [Leaf(symbol, count) for symbol, count in _frequency_items(frequency_table)]
    if len(leaves) < 2:
        raise DegenerateAlphabet(
            f"need at least two symbols with non-zero count, got {len(leaves)}"
        )

    priority_queue = [(leaf.weight, order, leaf) for order, leaf in enumerate(leaves)]
    heapq.heapify(priority_queue)
    order = len(priority_queue)

    while len(priority_queue) > 1:
        w0, _, zero = heapq.heappop(priority_queue)
        w1, _, one = heapq.heappop(priority_queue)
        heapq.heappush(priority_queue, (w0 + w1, order, Internal(w0 + w1, zero, one)))
        order += 1

    return priority_queue[0][2] # root of the tree


def generate_huffman_codes(root: HuffmanNode) -> List[Tuple[int, str]]: # root: root of the Huffman tree
    """Return (symbol, code) pairs in pre-order, zero branch first."""
    codes: List[Tuple[int, str]] = []

    def generate_codes_helper(node, current_code):
        # Leaf node -> assign code
        if node.is_leaf:
            codes.append((node.symbol, current_code))
            return

        generate_codes_helper(node.zero, current_code + '0')
        generate_codes_helper(node.one, current_code + '1')

    generate_codes_helper(root, '')
    return codes


def code_map(source) -> Dict[int, str]:
    """Symbol -> code lookup from a tree or from a list of (symbol, code) pairs."""
    if isinstance(source, HuffmanNode):
        source = generate_huffman_codes(source)
    return dict(source)


def format_code_table(root: HuffmanNode) -> str:
    return "".join(f"{symbol}\n{code}\n" for symbol, code in generate_huffman_codes(root))


def save_code_table(root: HuffmanNode, output) -> None:
    output.write(format_code_table(root))


class _PendingNode:
    """Mutable placeholder used only while a table is being loaded."""

    __slots__ = ("children", "symbol", "code")

    def __init__(self):
        self.children = [None, None]
        self.symbol = None
        self.code = None

    @property
    def is_leaf(self):
        return self.symbol is not None

    def extend(self, bit: int) -> "_PendingNode":
        child = self.children[bit]
        if child is None:
            child = self.children[bit] = _PendingNode()
        return child


def _insert_code(root: _PendingNode, symbol: int, code: str) -> None:
    node = root
    for depth, ch in enumerate(code):
        if node.is_leaf:
            raise AmbiguousCode(
                f"code {code!r} for symbol {symbol} extends code "
                f"{node.code!r} of symbol {node.symbol}"
            )
        bit = 0 if ch == "0" else 1
        if depth == len(code) - 1:
            existing = node.children[bit]
            if existing is not None and existing.is_leaf:
                raise DuplicateSymbol(
                    f"code {code!r} assigned to both symbol {existing.symbol} and symbol {symbol}"
                )
            if existing is not None:
                raise AmbiguousCode(
                    f"code {code!r} for symbol {symbol} is a prefix of another code"
                )
        node = node.extend(bit)
    node.symbol = symbol
    node.code = code


def _freeze(pending: _PendingNode, path: str = "") -> HuffmanNode:
    if pending.is_leaf:
        return Leaf(pending.symbol, 0)
    zero, one = pending.children
    if zero is None or one is None:
        missing = path + ("0" if zero is None else "1")
        raise IncompleteCode(f"no code starts with {missing!r}")
    return Internal(0, _freeze(zero, path + "0"), _freeze(one, path + "1"))


def load_code_table(pairs: Iterable[Tuple[int, str]]) -> Internal:
    """
    Rebuild a tree from (symbol, code) pairs given in any order.

    The tree is assembled from placeholder nodes and only converted to
    Leaf/Internal once every pair is in place and every internal node has
    both children, so a failing table never yields a tree.
    """
    root = _PendingNode()
    seen: Dict[int, str] = {}
    for symbol, code in pairs:
        if not isinstance(symbol, int) or isinstance(symbol, bool):
            raise MalformedCode(f"symbol {symbol!r} is not an integer")
        if not 0 <= symbol <= ALPHABET_MAX:
            raise MalformedCode(f"symbol {symbol} is outside 0..{ALPHABET_MAX}")
        if not code:
            raise MalformedCode(f"empty code for symbol {symbol}")
        if code.strip("01"):
            raise MalformedCode(f"code {code!r} for symbol {symbol} is not a bit string")
        if symbol in seen:
            raise DuplicateSymbol(f"symbol {symbol} has codes {seen[symbol]!r} and {code!r}")
        seen[symbol] = code
        _insert_code(root, symbol, code)

    if not seen:
        raise DegenerateAlphabet("code table is empty")
    return _freeze(root)


def parse_code_table(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    """Yield (symbol, code) records from the two-lines-per-record text format."""
    lines = [line.strip() for line in lines]
    while lines and not lines[-1]:
        lines.pop()

    for i in range(0, len(lines), 2):
        if not (lines[i].isascii() and lines[i].isdigit()):
            raise MalformedCode(f"line {i + 1}: expected a decimal symbol, got {lines[i]!r}")
        symbol = int(lines[i])
        if not 0 <= symbol <= ALPHABET_MAX:
            raise MalformedCode(f"line {i + 1}: symbol {symbol} is outside 0..{ALPHABET_MAX}")
        if i + 1 >= len(lines):
            raise MalformedCode(f"line {i + 1}: symbol {symbol} has no code line")
        yield symbol, lines[i + 1]


def read_code_table(input) -> Internal:
    return load_code_table(parse_code_table(input))


def huffman_encode(data: bytes, code_map: dict) -> str: # data: input bytes to encode, code_map: dict of symbol -> Huffman code
    return ''.join(code_map[byte] for byte in data)


def write_codes(data: Iterable[int], code_map: dict, sink) -> int:
    """Write the code of every symbol to a bit sink; return the bit count."""
    nbits = 0
    for symbol in data:
        for ch in code_map[symbol]:
            sink.write_bit(1 if ch == '1' else 0)
            nbits += 1
    return nbits


def _as_bit(bit) -> int:
    if bit == 0 or bit == '0':
        return 0
    if bit == 1 or bit == '1':
        return 1
    raise ValueError(f"bit must be 0 or 1, got {bit!r}")


def iter_decode(root: HuffmanNode, bits: Iterable) -> Iterator[int]:
    """
    Walk the tree one bit at a time, yielding a symbol at every leaf.

    The walk is a flat loop over the bits, so input length is not bounded by
    recursion depth. Raises TruncatedStream if the bits end inside a code.
    """
    if root.is_leaf:
        raise DegenerateAlphabet("cannot decode with a single-leaf tree")

    node = root
    for bit in bits:
        node = node.one if _as_bit(bit) else node.zero
        if node.is_leaf: # reached a leaf
            yield node.symbol
            node = root # reset to the root for the next symbol

    if node is not root:
        raise TruncatedStream("bit stream ended in the middle of a code")


def _bits_from(source) -> Iterator[int]:
    while source.has_next_bit():
        yield source.next_bit()


def translate(root: HuffmanNode, source, emit: Callable[[int], None]) -> int:
    """Decode every bit of source, calling emit(symbol) per decoded symbol."""
    count = 0
    for symbol in iter_decode(root, _bits_from(source)):
        emit(symbol)
        count += 1
    return count


def huffman_decode(bitstring: str, root: HuffmanNode) -> bytes: # bitstring: the encoded string of '0's and '1's, root: root of the Huffman tree
    return bytes(iter_decode(root, bitstring))
