#!/usr/bin/env python3
"""
Assignment strategy benchmark.

Times writing a source into views of a large dense array through the
contiguous window fast path, the gather/scatter path and the element-wise
noalias stream, so regressions in any of them show up side by side.
"""

from __future__ import annotations

import argparse
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

import numpy as np

from sliceview import ALL, DenseArray, ExecutionConfig, Keep, Range, assign, view


@dataclass
class BenchmarkResult:
    case: str
    elements: int
    min_s: float
    mean_s: float
    iterations: int

    @property
    def elements_per_s(self) -> Optional[float]:
        return self.elements / self.min_s if self.min_s > 0 else None


def bench(fn: Callable[[], Any], *, iterations: int, warmup: int) -> List[float]:
    timings = []
    for step in range(iterations + warmup):
        start = time.perf_counter()
        fn()
        elapsed = time.perf_counter() - start
        if step >= warmup:
            timings.append(elapsed)
    return timings


def build_cases(size: int, stream_size: int, seed: int):
    rng = np.random.default_rng(seed)
    base = DenseArray(rng.normal(size=(size, size)))
    small = DenseArray(rng.normal(size=(stream_size, stream_size)))
    rows = view(base, Range(0, size // 2))
    rows_source = np.asarray(view(base, Range(size // 2, 2 * (size // 2))))
    columns = view(base, ALL, Range(0, size, 2))
    picked = view(base, Keep(list(range(0, size, 3))))
    gather_cfg = ExecutionConfig(contiguous_fast_path=False)
    stream_target = view(small, Range(0, stream_size // 2))
    stream_source = view(small, Range(stream_size // 2, 2 * (stream_size // 2)))

    return [
        ("contiguous", rows.size, lambda: assign(rows, rows_source)),
        ("contiguous/no-fast-path", rows.size, lambda: assign(rows, rows_source, config=gather_cfg)),
        ("strided", columns.size, lambda: assign(columns, 1.0)),
        ("list-indexed", picked.size, lambda: assign(picked, 2.0)),
        ("alias-safe copy", stream_target.size, lambda: assign(stream_target, stream_source)),
        ("noalias stream", stream_target.size, lambda: assign(stream_target, stream_source, alias_safe=False)),
    ]


def format_results(results: Iterable[BenchmarkResult]) -> str:
    header = f"{'case':<24} {'elements':>10} {'min (ms)':>12} {'mean (ms)':>12} {'iters':>8} {'elem/s':>14}"
    rows = [header]
    for result in results:
        rate = result.elements_per_s or math.nan
        rows.append(
            f"{result.case:<24} {result.elements:10d} {result.min_s * 1e3:12.3f} "
            f"{result.mean_s * 1e3:12.3f} {result.iterations:8d} {rate:14.0f}"
        )
    return "\n".join(rows)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark sliceview assignment strategies.")
    parser.add_argument("--size", type=int, default=1024, help="Edge of the square base array (default: 1024).")
    parser.add_argument(
        "--stream-size",
        type=int,
        default=64,
        help="Edge of the array used for the element-wise stream cases (default: 64).",
    )
    parser.add_argument("--seed", type=int, default=2024, help="Random seed for inputs (default: 2024).")
    parser.add_argument("--iterations", type=int, default=20, help="Timed iterations per case (default: 20).")
    parser.add_argument("--warmup", type=int, default=3, help="Warmup iterations to discard (default: 3).")
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    results = []
    for name, elements, fn in build_cases(args.size, args.stream_size, args.seed):
        timings = bench(fn, iterations=args.iterations, warmup=args.warmup)
        results.append(
            BenchmarkResult(
                case=name,
                elements=elements,
                min_s=min(timings),
                mean_s=sum(timings) / len(timings),
                iterations=args.iterations,
            )
        )
    print(format_results(results))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
