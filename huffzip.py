"""
Command-line compressor built on the Huffman code table.

  compress INPUT [-o BASE]     writes BASE.code (code table) and BASE.short (bits)
  decompress BASE [-o OUTPUT]  rebuilds the tree from BASE.code and decodes BASE.short
  table INPUT                  prints the code table INPUT would be compressed with

The .short file holds one byte with the number of pad bits, then the packed
bits of the encoded input.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import huffman as huff
from bitio import BitInputStream, BitOutputStream

CODE_SUFFIX = ".code"
SHORT_SUFFIX = ".short"


def default_base(path: Path) -> Path:
    return path.with_suffix("")


def write_short(path: Path, payload: bytes, pad_bits: int) -> None:
    with path.open("wb") as f:
        f.write(bytes([pad_bits]))
        f.write(payload)


def read_short(path: Path) -> Tuple[bytes, int]:
    raw = path.read_bytes()
    if not raw:
        raise ValueError(f"{path}: missing pad-bit header")
    return raw[1:], raw[0]


def compress_file(input_path: Path, base: Path) -> Tuple[Path, Path, int]:
    data = input_path.read_bytes()
    root = huff.build_huffman_tree(huff.count_frequencies(data))

    code_path = base.with_name(base.name + CODE_SUFFIX)
    short_path = base.with_name(base.name + SHORT_SUFFIX)
    with code_path.open("w", encoding="ascii", newline="\n") as f:
        huff.save_code_table(root, f)

    out = BitOutputStream()
    nbits = huff.write_codes(data, huff.code_map(root), out)
    payload, pad_bits = out.finish()
    write_short(short_path, payload, pad_bits)
    return code_path, short_path, nbits


def decompress_file(base: Path, output_path: Path) -> int:
    code_path = base.with_name(base.name + CODE_SUFFIX)
    short_path = base.with_name(base.name + SHORT_SUFFIX)
    with code_path.open("r", encoding="ascii") as f:
        root = huff.read_code_table(f)

    payload, pad_bits = read_short(short_path)
    decoded = bytearray()
    huff.translate(root, BitInputStream(payload, pad_bits), decoded.append)
    output_path.write_bytes(bytes(decoded))
    return len(decoded)


def cmd_compress(args) -> None:
    input_path = Path(args.input)
    base = Path(args.output) if args.output else default_base(input_path)
    code_path, short_path, nbits = compress_file(input_path, base)
    size = input_path.stat().st_size
    print(f"Wrote code table to {code_path}")
    print(f"Wrote {nbits} bits ({short_path.stat().st_size} bytes) to {short_path}")
    print(f"Compression ratio: {short_path.stat().st_size / max(1, size):.3f}")


def cmd_decompress(args) -> None:
    base = Path(args.base)
    output_path = Path(args.output) if args.output else base.with_name(base.name + ".new")
    n = decompress_file(base, output_path)
    print(f"Wrote {n} bytes to {output_path}")


def cmd_table(args) -> None:
    data = Path(args.input).read_bytes()
    root = huff.build_huffman_tree(huff.count_frequencies(data))
    sys.stdout.write(huff.format_code_table(root))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffzip", description="Static Huffman compressor")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compress", help="Compress a file into BASE.code + BASE.short")
    p.add_argument("input", help="File to compress")
    p.add_argument("-o", "--output", help="Output base path (default: input without extension)")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="Restore a file from BASE.code + BASE.short")
    p.add_argument("base", help="Base path given to compress")
    p.add_argument("-o", "--output", help="Restored file (default: BASE.new)")
    p.set_defaults(func=cmd_decompress)

    p = sub.add_parser("table", help="Print the code table for a file")
    p.add_argument("input", help="File to analyse")
    p.set_defaults(func=cmd_table)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (ValueError, OSError) as e: # HuffmanError is a ValueError
        print(f"huffzip: error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
