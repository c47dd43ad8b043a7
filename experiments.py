# experiments.py

"""
Huffman codec experiments: built tree vs reloaded code table

Runs the codec over synthetic datasets, with repeated runs, and records how
long each stage takes and how close the code gets to the entropy bound.

Pipelines:
  - tree   decode with the tree returned by build_huffman_tree
  - table  save the code table to text, load it back, decode with that tree

Outputs (in --outdir):
  - metrics.csv     (raw row per run per pipeline)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --size_kb 256 --generators zipf128,english_like
  python experiments.py --outdir results --no_scaling
"""

from __future__ import annotations

import argparse
import csv
import io
import math
import random
import statistics
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt

import huffman as huff
from bitio import BitInputStream, BitOutputStream

PIPELINES = ("tree", "table")


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def entropy_bits(ft: Dict[int, int]) -> float:
    """Shannon entropy in bits per symbol of a frequency table."""
    total = sum(ft.values())
    return -sum((c / total) * math.log2(c / total) for c in ft.values() if c)

def average_code_length(ft: Dict[int, int], code_map: Dict[int, str]) -> float:
    total = sum(ft.values())
    return sum(ft[s] * len(code_map[s]) for s in ft) / total


# Synthetic dataset generators

def _sample(rng: random.Random, symbols: Sequence[int], weights: Sequence[float], size: int) -> bytes:
    return bytes(rng.choices(symbols, weights=weights, k=size))

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    spread = (1.0 - dom_frac) / len(others)
    return _sample(rng, [dominant] + others, [dom_frac] + [spread] * len(others), size)

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return _sample(rng, range(alphabet), weights, size)

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(rng, [ord(ch) for ch in chars], weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, expected one of {', '.join(GENERATOR_REGISTRY)}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    pipeline: str  # "tree" or "table"
    unique_symbols: int

    build_tree_ms: float
    table_ms: float  # save + load, 0 for the tree pipeline
    encode_ms: float
    decode_ms: float
    total_ms: float

    table_bytes: int
    compressed_bytes: int
    pad_bits: int
    compression_ratio: float

    entropy_bits: float
    avg_code_length: float
    correctness_ok: int  # 1 or 0


def run_one(data: bytes, pipeline: str) -> MetricRow:
    if pipeline not in PIPELINES:
        raise ValueError(f"pipeline must be one of {PIPELINES}")
    ft = huff.count_frequencies(data)

    t0 = now_ns()
    root = huff.build_huffman_tree(ft)
    code_map = huff.code_map(root)
    build_tree_ms = ns_to_ms(now_ns() - t0)

    table_text = huff.format_code_table(root)
    table_ms = 0.0
    decode_root = root
    if pipeline == "table":
        t1 = now_ns()
        out = io.StringIO()
        huff.save_code_table(root, out)
        decode_root = huff.read_code_table(io.StringIO(out.getvalue()))
        table_ms = ns_to_ms(now_ns() - t1)

    t2 = now_ns()
    sink = BitOutputStream()
    huff.write_codes(data, code_map, sink)
    packed, pad_bits = sink.finish()
    encode_ms = ns_to_ms(now_ns() - t2)

    t3 = now_ns()
    decoded = bytearray()
    huff.translate(decode_root, BitInputStream(packed, pad_bits), decoded.append)
    decode_ms = ns_to_ms(now_ns() - t3)

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        pipeline=pipeline,
        unique_symbols=len(ft),
        build_tree_ms=build_tree_ms,
        table_ms=table_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_tree_ms + table_ms + encode_ms + decode_ms,
        table_bytes=len(table_text),
        compressed_bytes=len(packed),
        pad_bits=pad_bits,
        compression_ratio=len(packed) / max(1, len(data)),
        entropy_bits=entropy_bits(ft),
        avg_code_length=average_code_length(ft, code_map),
        correctness_ok=1 if bytes(decoded) == data else 0,
    )


def run_dataset(exp_name: str, gen_name: str, size_b: int, runs: int, seed: int) -> List[MetricRow]:
    rows: List[MetricRow] = []
    for run_id in range(1, runs + 1):
        data = generate_dataset(gen_name, size_b, seed + run_id)
        if len(set(data)) < 2:
            print(f"Skipping {gen_name} ({size_b} bytes, run {run_id}): fewer than two distinct symbols")
            continue
        for pipeline in PIPELINES:
            row = run_one(data, pipeline)
            row.exp_name = exp_name
            row.dataset_name = gen_name
            row.run_id = run_id
            rows.append(row)
    return rows


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = (
    "compression_ratio", "avg_code_length", "entropy_bits",
    "build_tree_ms", "table_ms", "encode_ms", "decode_ms", "total_ms",
)

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.file_size_bytes, r.pipeline)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "pipeline", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b, pipeline), items in sorted(key_to.items()):
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "pipeline": pipeline,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def _mean(rows: List[MetricRow], field: str) -> float:
    vals = [getattr(r, field) for r in rows]
    return statistics.mean(vals) if vals else float("nan")

def plot_distributions(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "distribution" and r.pipeline == "tree"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))
    per = {d: [r for r in exp_rows if r.dataset_name == d] for d in datasets}

    plt.figure()
    plt.plot(x, [_mean(per[d], "avg_code_length") for d in datasets], marker="o", label="avg code length")
    plt.plot(x, [_mean(per[d], "entropy_bits") for d in datasets], marker="s", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Average Code Length vs Entropy by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "code_length_vs_entropy.png", dpi=200)
    plt.close()

    plt.figure()
    plt.bar(x, [_mean(per[d], "compression_ratio") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Compression Ratio by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "compression_ratio.png", dpi=200)
    plt.close()


def plot_scaling(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        plt.figure()
        for p in PIPELINES:
            y = [_mean([r for r in dist_rows if r.file_size_bytes == s and r.pipeline == p], "decode_ms")
                 for s in sizes]
            plt.plot(sizes, y, marker="o", label=f"decode ({p})")
        y = [_mean([r for r in dist_rows if r.file_size_bytes == s and r.pipeline == "tree"], "encode_ms")
             for s in sizes]
        plt.plot(sizes, y, marker="s", label="encode")
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Encode/Decode Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"scaling_{dist}.png", dpi=200)
        plt.close()


# Main

def main(argv: List[str] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    ap.add_argument("--no_distribution", action="store_true", help="Disable the fixed-size distribution experiment")
    ap.add_argument("--no_scaling", action="store_true", help="Disable the size scaling experiment")

    ap.add_argument("--size_kb", type=int, default=256, help="Fixed file size in KB for the distribution experiment")
    ap.add_argument("--generators", type=str, default="uniform256,uniform16,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for the distribution experiment")
    ap.add_argument("--scaling_min_kb", type=int, default=4, help="Smallest size in KB (power-of-two growth)")
    ap.add_argument("--scaling_max_kb", type=int, default=1024, help="Largest size in KB (power-of-two growth)")
    ap.add_argument("--scaling_generators", type=str, default="zipf128,english_like",
                    help="Comma-separated dataset generator names for the size scaling experiment")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)
    rows: List[MetricRow] = []

    if not args.no_distribution:
        size_b = max(1, args.size_kb) * 1024
        for gen_name in parse_csv_list(args.generators):
            rows += run_dataset("distribution", gen_name, size_b, args.runs, args.seed)

    if not args.no_scaling:
        sizes: List[int] = []
        s = max(1, args.scaling_min_kb) * 1024
        while s <= max(1, args.scaling_max_kb) * 1024:
            sizes.append(s)
            s *= 2
        for gen_name in parse_csv_list(args.scaling_generators):
            for size_b in sizes:
                rows += run_dataset("size_scaling", gen_name, size_b, args.runs, args.seed + 10_000 + size_b)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    plot_distributions(rows, outdir)
    plot_scaling(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
