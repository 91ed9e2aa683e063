#!/usr/bin/env python3
"""
Benchmarks for the B-tree data structure.

This script measures:
 1. Full B-tree build times for various sizes
 2. Random lookups against dict and a bisect-maintained sorted list
 3. Per-insert / per-delete latency into trees of various sizes
 4. The method-level profiling breakdown

Usage:
    python stats/benchmarks.py [--degree T] [--sizes 1000 10000 100000] [--lookups N] [--trials T]
"""
import argparse
import bisect
import random
import time
import gc
from pprint import pprint
from dataclasses import asdict

import numpy as np

from btree_map.btree_base import btree_stats_, BTreeBase, DEFAULT_MIN_DEGREE
from btree_map.factory import create_btree
from stats_btree import random_keys, random_btree_of_size


def _timed(fn) -> float:
    gc.collect()
    gc.disable()
    try:
        t0 = time.perf_counter()
        fn()
        return time.perf_counter() - t0
    finally:
        gc.enable()


def bench_build(sizes: list[int], t: int) -> None:
    """Measure sequential inserts into a B-tree, a dict and a sorted list."""
    for n in sizes:
        keys = random_keys(n, seed=n)

        tree = create_btree(t)
        def _btree():
            for k in keys:
                tree.insert(k, f"val{k}")

        table = {}
        def _dict():
            for k in keys:
                table[k] = f"val{k}"

        sorted_keys = []
        def _sorted():
            for k in keys:
                bisect.insort(sorted_keys, k)

        print(f"[bench] build n={n:<8} btree {_timed(_btree):.4f}s   "
              f"dict {_timed(_dict):.4f}s   sorted-list {_timed(_sorted):.4f}s")


def bench_lookup(n: int, t: int, lookups: int) -> None:
    """Random lookups of present keys."""
    keys = random_keys(n, seed=1)
    tree = create_btree(t)
    table = {}
    for k in keys:
        tree.insert(k, f"val{k}")
        table[k] = f"val{k}"
    sorted_keys = sorted(keys)

    rng = random.Random(42)
    probes = [rng.choice(keys) for _ in range(lookups)]

    def _btree():
        for k in probes:
            tree.search(k)

    def _dict():
        for k in probes:
            table.get(k)

    def _sorted():
        for k in probes:
            bisect.bisect_left(sorted_keys, k)

    print(f"[bench] {lookups} lookups in n={n}: btree {_timed(_btree):.4f}s   "
          f"dict {_timed(_dict):.4f}s   sorted-list {_timed(_sorted):.4f}s")


def measure_single_ops(n: int, t: int, trials: int) -> dict:
    """
    Measure per-insert and per-delete latency into a tree of exactly `n` items.
    Returns latency percentiles in microseconds.
    """
    tree = random_btree_of_size(n, t, seed=7)
    fresh = random_keys(trials, space=1 << 30, seed=11)
    fresh = [k + (1 << 24) for k in fresh]  # disjoint from the tree's key space

    insert_times = []
    for k in fresh:
        t0 = time.perf_counter()
        tree.insert(k, f"val{k}")
        insert_times.append(time.perf_counter() - t0)

    delete_times = []
    for k in fresh:
        t0 = time.perf_counter()
        tree.delete(k)
        delete_times.append(time.perf_counter() - t0)

    ins = np.array(insert_times) * 1e6
    dels = np.array(delete_times) * 1e6
    return {
        "insert_p50": float(np.percentile(ins, 50)),
        "insert_p99": float(np.percentile(ins, 99)),
        "delete_p50": float(np.percentile(dels, 50)),
        "delete_p99": float(np.percentile(dels, 99)),
    }


def bench_single_ops(sizes: list[int], t: int, trials: int) -> None:
    for n in sizes:
        res = measure_single_ops(n, t, trials)
        print(
            f"[bench] size {n:<8} insert p50 {res['insert_p50']:8.2f} µs  p99 {res['insert_p99']:8.2f} µs   "
            f"delete p50 {res['delete_p50']:8.2f} µs  p99 {res['delete_p99']:8.2f} µs"
        )


def main():
    parser = argparse.ArgumentParser(description="B-tree benchmarks")
    parser.add_argument("--degree", type=int, default=DEFAULT_MIN_DEGREE,
                        help="Minimum degree t of the benchmarked trees")
    parser.add_argument("--sizes", nargs='+', type=int, default=[1000, 10_000, 100_000],
                        help="Tree sizes for build and single-op benchmarks")
    parser.add_argument("--lookups", type=int, default=10_000,
                        help="Number of random lookups")
    parser.add_argument("--trials", type=int, default=1000,
                        help="Number of single inserts/deletes per size")
    args = parser.parse_args()

    print("\n=== Build ===")
    bench_build(args.sizes, args.degree)

    print("\n=== Random Lookup ===")
    bench_lookup(max(args.sizes), args.degree, args.lookups)

    print("\n=== Tree Stats ===")
    pprint(asdict(btree_stats_(random_btree_of_size(max(args.sizes), args.degree, seed=3))))

    print("\n=== Single-Op Latency ===")
    BTreeBase.enable_performance_tracking()
    bench_single_ops(args.sizes, args.degree, args.trials)

    print("\n=== Method-Level Performance Breakdown ===")
    print(BTreeBase.get_performance_report())
    BTreeBase.reset_performance_metrics()
    BTreeBase.disable_performance_tracking()

if __name__ == "__main__":
    main()
