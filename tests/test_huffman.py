import io
import random

import pytest

import huffman as huff
from bitio import BitInputStream, pack_bits

A, B, C, D = (ord(ch) for ch in "ABCD")
ABCD_FREQS = {A: 5, B: 2, C: 1, D: 1}


def _leaves(node):
    if node.is_leaf:
        return [node]
    return _leaves(node.zero) + _leaves(node.one)


def _check_weights(node):
    if node.is_leaf:
        return node.weight
    total = _check_weights(node.zero) + _check_weights(node.one)
    assert node.weight == total
    return total


def _random_table(rng):
    symbols = rng.sample(range(256), rng.randint(2, 60))
    return {s: rng.randint(1, 1000) for s in symbols}


# Node model

def test_leaf_and_internal_are_distinct_types():
    zero, one = huff.Leaf(1, 3), huff.Leaf(2, 4)
    node = huff.Internal(7, zero, one)
    assert zero.is_leaf and one.is_leaf
    assert not node.is_leaf
    assert node.child(0) is zero and node.child(1) is one
    with pytest.raises(AttributeError):
        node.symbol


def test_nodes_are_immutable():
    leaf = huff.Leaf(1, 3)
    node = huff.Internal(3, leaf, huff.Leaf(2, 0))
    with pytest.raises(AttributeError):
        leaf.symbol = 9
    with pytest.raises(AttributeError):
        node.zero = None
    with pytest.raises(AttributeError):
        del node.zero
    with pytest.raises(AttributeError):
        del leaf.weight
    assert node.zero is leaf


def test_leaf_symbol_out_of_range():
    with pytest.raises(ValueError):
        huff.Leaf(256, 1)


def test_negative_leaf_weight_rejected():
    with pytest.raises(ValueError):
        huff.Leaf(1, -1)


def test_internal_weight_must_match_children():
    with pytest.raises(ValueError):
        huff.Internal(5, huff.Leaf(1, 3), huff.Leaf(2, 4))


# Tree builder

def test_build_abcd_scenario_code_lengths():
    root = huff.build_huffman_tree(ABCD_FREQS)
    codes = huff.code_map(root)
    assert len(codes[A]) in (1, 2)
    assert len(codes[A]) <= len(codes[B]) <= len(codes[C])
    assert len(codes[C]) == len(codes[D])
    assert len(codes[C]) == max(len(c) for c in codes.values())


def test_build_is_deterministic():
    pairs = huff.generate_huffman_codes(huff.build_huffman_tree(ABCD_FREQS))
    assert pairs == [(B, "00"), (C, "010"), (D, "011"), (A, "1")]
    assert pairs == huff.generate_huffman_codes(huff.build_huffman_tree(dict(reversed(list(ABCD_FREQS.items())))))


def test_build_accepts_count_array():
    counts = [0] * 256
    for symbol, count in ABCD_FREQS.items():
        counts[symbol] = count
    assert huff.code_map(huff.build_huffman_tree(counts)) == huff.code_map(huff.build_huffman_tree(ABCD_FREQS))


def test_zero_counts_are_ignored():
    root = huff.build_huffman_tree({A: 3, B: 0, C: 1})
    assert sorted(huff.code_map(root)) == [A, C]


def test_weight_sums():
    rng = random.Random(7)
    for _ in range(20):
        ft = _random_table(rng)
        root = huff.build_huffman_tree(ft)
        assert _check_weights(root) == sum(ft.values())
        assert sorted(leaf.symbol for leaf in _leaves(root)) == sorted(ft)


def test_codes_are_prefix_free():
    rng = random.Random(11)
    for _ in range(20):
        codes = [c for _, c in huff.generate_huffman_codes(huff.build_huffman_tree(_random_table(rng)))]
        for i, c1 in enumerate(codes):
            assert c1
            for j, c2 in enumerate(codes):
                if i != j:
                    assert not c2.startswith(c1)


def test_code_lengths_are_optimal_against_known_cost():
    # classic example: weighted path length 224 for these weights
    ft = {ord(ch): w for ch, w in zip("abcdef", [45, 13, 12, 16, 9, 5])}
    codes = huff.code_map(huff.build_huffman_tree(ft))
    assert sum(ft[s] * len(codes[s]) for s in ft) == 224


@pytest.mark.parametrize("table", [{}, {A: 4}, {A: 4, B: 0}, [0] * 256])
def test_degenerate_alphabet(table):
    with pytest.raises(huff.DegenerateAlphabet):
        huff.build_huffman_tree(table)


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        huff.build_huffman_tree({A: 2, B: -1})


def test_count_frequencies():
    assert huff.count_frequencies(b"AAAAABBCD") == ABCD_FREQS
    assert huff.count_frequencies(b"") == {}


# Code table codec

def test_save_format():
    out = io.StringIO()
    huff.save_code_table(huff.build_huffman_tree(ABCD_FREQS), out)
    assert out.getvalue() == "66\n00\n67\n010\n68\n011\n65\n1\n"


def test_round_trip_through_text():
    rng = random.Random(3)
    for _ in range(20):
        root = huff.build_huffman_tree(_random_table(rng))
        out = io.StringIO()
        huff.save_code_table(root, out)
        loaded = huff.read_code_table(io.StringIO(out.getvalue()))
        assert huff.code_map(loaded) == huff.code_map(root)
        assert huff.generate_huffman_codes(loaded) == huff.generate_huffman_codes(root)


def test_load_accepts_any_order():
    pairs = huff.generate_huffman_codes(huff.build_huffman_tree(ABCD_FREQS))
    shuffled = list(reversed(pairs))
    assert huff.code_map(huff.load_code_table(shuffled)) == dict(pairs)


def test_loaded_tree_is_complete_and_immutable():
    root = huff.load_code_table([(A, "1"), (B, "00"), (C, "01")])
    assert not root.is_leaf
    assert [leaf.symbol for leaf in _leaves(root)] == [B, C, A]
    with pytest.raises(AttributeError):
        root.one = None


def test_read_tolerates_trailing_blank_lines():
    root = huff.read_code_table(io.StringIO("65\n0\n66\n1\n\n\n"))
    assert huff.code_map(root) == {A: "0", B: "1"}


def test_empty_code_is_malformed():
    with pytest.raises(huff.MalformedCode):
        huff.load_code_table([(65, ""), (66, "1")])


def test_non_binary_code_is_malformed():
    with pytest.raises(huff.MalformedCode):
        huff.load_code_table([(65, "02"), (66, "1")])


@pytest.mark.parametrize("symbol", ["65", 65.0, None, True])
def test_non_integer_symbol_is_malformed(symbol):
    with pytest.raises(huff.MalformedCode):
        huff.load_code_table([(symbol, "0"), (66, "1")])


@pytest.mark.parametrize("text", [
    "x\n0\n66\n1\n",
    "-1\n0\n66\n1\n",
    "300\n0\n66\n1\n",
    "6_5\n0\n66\n1\n",
    "+65\n0\n66\n1\n",
    "\u0666\u0665\n0\n66\n1\n",
    "65\n0\n66\n",
    "65\n\n66\n1\n",
])
def test_read_malformed_text(text):
    with pytest.raises(huff.MalformedCode):
        huff.read_code_table(io.StringIO(text))


@pytest.mark.parametrize("pairs", [
    [(65, "01"), (66, "0")],
    [(66, "0"), (65, "01")],
])
def test_prefix_code_is_ambiguous(pairs):
    with pytest.raises(huff.AmbiguousCode):
        huff.load_code_table(pairs)


def test_same_code_twice_is_duplicate():
    with pytest.raises(huff.DuplicateSymbol):
        huff.load_code_table([(65, "0"), (66, "0")])


def test_same_symbol_twice_is_duplicate():
    with pytest.raises(huff.DuplicateSymbol):
        huff.load_code_table([(65, "0"), (65, "1")])


def test_unary_node_is_incomplete():
    with pytest.raises(huff.IncompleteCode):
        huff.load_code_table([(65, "0"), (66, "10")])
    with pytest.raises(huff.IncompleteCode):
        huff.load_code_table([(65, "0")])


def test_empty_table_is_degenerate():
    with pytest.raises(huff.DegenerateAlphabet):
        huff.read_code_table(io.StringIO(""))


def test_error_taxonomy():
    assert issubclass(huff.IncompleteCode, huff.AmbiguousCode)
    for cls in (huff.DegenerateAlphabet, huff.MalformedCode, huff.AmbiguousCode,
                huff.DuplicateSymbol, huff.TruncatedStream):
        assert issubclass(cls, huff.HuffmanError)
    assert issubclass(huff.HuffmanError, ValueError)


# Decoder

def test_abcd_end_to_end():
    message = b"AAAAABBCD"
    root = huff.build_huffman_tree(huff.count_frequencies(message))
    bits = huff.huffman_encode(message, huff.code_map(root))
    assert len(bits) == 5 * 1 + 2 * 2 + 3 + 3

    loaded = huff.read_code_table(io.StringIO(huff.format_code_table(root)))
    assert huff.huffman_decode(bits, loaded) == message


def test_decode_random_messages():
    rng = random.Random(5)
    for _ in range(10):
        message = bytes(rng.choice(b"abcdefgh  \n") for _ in range(rng.randint(2, 500)))
        if len(set(message)) < 2:
            continue
        root = huff.build_huffman_tree(huff.count_frequencies(message))
        bits = huff.huffman_encode(message, huff.code_map(root))
        assert huff.huffman_decode(bits, root) == message


def test_translate_with_bit_source():
    message = b"AAAAABBCD"
    root = huff.build_huffman_tree(ABCD_FREQS)
    payload, pad_bits = pack_bits(huff.huffman_encode(message, huff.code_map(root)))
    out = []
    assert huff.translate(root, BitInputStream(payload, pad_bits), out.append) == len(message)
    assert bytes(out) == message


def test_iter_decode_accepts_int_bits():
    root = huff.build_huffman_tree(ABCD_FREQS)
    assert list(huff.iter_decode(root, [1, 0, 0, 0, 1, 1])) == [A, B, D]


def test_truncated_stream_emits_nothing():
    root = huff.build_huffman_tree(ABCD_FREQS)
    code = huff.code_map(root)[C]
    payload, pad_bits = pack_bits(code[:-1])
    out = []
    with pytest.raises(huff.TruncatedStream):
        huff.translate(root, BitInputStream(payload, pad_bits), out.append)
    assert out == []
    with pytest.raises(huff.TruncatedStream):
        huff.huffman_decode(code[:-1], root)


def test_empty_stream_decodes_to_nothing():
    root = huff.build_huffman_tree(ABCD_FREQS)
    assert huff.huffman_decode("", root) == b""


def test_decode_rejects_bad_bits():
    root = huff.build_huffman_tree(ABCD_FREQS)
    with pytest.raises(ValueError):
        huff.huffman_decode("012", root)


def test_decode_rejects_leaf_root():
    with pytest.raises(huff.DegenerateAlphabet):
        huff.huffman_decode("0", huff.Leaf(A, 1))


def test_decode_long_stream_is_iterative():
    root = huff.build_huffman_tree(ABCD_FREQS)
    message = b"ABCD" * 50_000
    bits = huff.huffman_encode(message, huff.code_map(root))
    assert huff.huffman_decode(bits, root) == message


def test_encode_unknown_symbol():
    with pytest.raises(KeyError):
        huff.huffman_encode(b"Z", huff.code_map(huff.build_huffman_tree(ABCD_FREQS)))
