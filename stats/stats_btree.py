"""Statistics for B-trees."""
# pylint: skip-file

import os
import logging
import math
import time
from statistics import mean
from typing import Any, Dict, List, Optional, Tuple
from pprint import pprint
from dataclasses import asdict
from datetime import datetime
import numpy as np

from btree_map.btree_base import (
    BTreeBase,
    btree_stats_,
    collect_keys,
    Stats,
)
from btree_map.factory import create_btree

TREE_FLAGS = (
    "leaves_same_depth",
    "keys_sorted",
    "is_search_tree",
    "child_counts_valid",
    "fill_bounds_valid",
    "values_aligned",
)

def assert_invariants(t: BTreeBase, stats: Stats) -> bool:
    """Check all invariants, but only log ERROR messages on failures."""
    ok = True
    for flag in TREE_FLAGS:
        if not getattr(stats, flag):
            logging.error("Invariant failed: %s is False", flag)
            ok = False

    if stats.item_count != len(t):
        logging.error(
            "Invariant failed: item_count=%d != len(tree)=%d",
            stats.item_count, len(t)
        )
        ok = False

    if not t.is_empty():
        if stats.least_key is None:
            logging.error("Invariant failed: least_key is None for non-empty tree")
            ok = False
        if stats.greatest_key is None:
            logging.error("Invariant failed: greatest_key is None for non-empty tree")
            ok = False
    return ok

def create_tree(items: List[Tuple[Any, Any]], t: int) -> BTreeBase:
    """Build a tree with minimum degree t by inserting each (key, value) pair in order."""
    tree = create_btree(t)
    tree_insert = tree.insert
    for key, value in items:
        tree_insert(key, value)
    return tree

def random_keys(n: int, space: int = 1 << 24, seed: Optional[int] = None) -> List[int]:
    """Draw n distinct integer keys from range(space)."""
    if space <= n:
        raise ValueError(f"Key-space too small! Required: {n + 1}, Available: {space}")
    rng = np.random.default_rng(seed)
    return [int(k) for k in rng.choice(space, size=n, replace=False)]

def random_btree_of_size(n: int, t: int, seed: Optional[int] = None) -> BTreeBase:
    """Create a random B-tree with n items and minimum degree t."""
    keys = random_keys(n, seed=seed)
    return create_tree([(key, f"val_{key}") for key in keys], t)

def check_keys_and_values(
    tree: BTreeBase,
    expected: Optional[Dict[Any, Any]] = None
) -> Tuple[List[Any], bool, bool, bool]:
    """
    Traverse the tree once and compute three checks:
      1. presence_ok: if `expected` is provided, does the tree hold exactly its keys?
                      otherwise always True.
      2. values_ok:   if `expected` is provided, does search() return the expected value
                      for every key? otherwise always True.
      3. order_ok:    are the collected keys in strictly increasing order?

    Returns:
        (keys, presence_ok, values_ok, order_ok)
    """
    keys = collect_keys(tree)
    order_ok = all(a < b for a, b in zip(keys, keys[1:]))

    presence_ok = True
    values_ok = True
    if expected is not None:
        presence_ok = len(keys) == len(expected) and set(keys) == set(expected)
        values_ok = all(tree.search(k) == v for k, v in expected.items())

    return keys, presence_ok, values_ok, order_ok

def repeated_experiment(
        size: int,
        repetitions: int,
        t: int,
    ) -> None:
    """
    Repeatedly builds random B-trees with `size` items and minimum degree t,
    then logs averaged structure statistics and timings.
    """
    t_all_0 = time.perf_counter()

    results: List[Stats] = []
    times_build = []
    times_stats = []

    for rep in range(repetitions):
        t0 = time.perf_counter()
        tree = random_btree_of_size(size, t, seed=rep)
        times_build.append(time.perf_counter() - t0)

        t0 = time.perf_counter()
        stats = btree_stats_(tree)
        times_stats.append(time.perf_counter() - t0)

        results.append(stats)
        assert_invariants(tree, stats)

    # Height bound for a B-tree: log_t((n + 1) / 2) + 1 levels
    height_bound = math.floor(math.log((size + 1) / 2, t)) + 1 if size > 0 else 1

    heights = np.array([s.height for s in results], dtype=float)
    node_counts = np.array([s.node_count for s in results], dtype=float)
    fill = np.array([s.item_count / (s.node_count * (2 * t - 1)) for s in results])

    rows = [
        ("Item count",        float(size),          0.0),
        ("Node count",        node_counts.mean(),   node_counts.var()),
        ("Height",            heights.mean(),       heights.var()),
        ("Height bound",      float(height_bound),  None),
        ("Avg node fill",     fill.mean(),          fill.var()),
    ]

    header = f"{'Metric':<20} {'Avg':>15} {'(Var)':>15}"
    sep_line = "-" * len(header)

    logging.info(header)
    logging.info(sep_line)
    for name, avg, var in rows:
        if var is None:
            logging.info(f"{name:<20} {avg:>15.2f}")
        else:
            var_str = f"({var:.2f})"
            logging.info(f"{name:<20} {avg:15.2f} {var_str:>15}")

    logging.info("")
    logging.info("Performance summary:")
    logging.info(f"{'Build time (s)':<20}{mean(times_build):13.6f}{sum(times_build):13.6f}")
    logging.info(f"{'Stats time (s)':<20}{mean(times_stats):13.6f}{sum(times_stats):13.6f}")
    logging.info(sep_line)
    logging.info("Execution time: %.3f seconds", time.perf_counter() - t_all_0)

if __name__ == "__main__":
    log_dir = os.path.join(os.getcwd(), "stats/logs")
    os.makedirs(log_dir, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = os.path.join(log_dir, f"run_{ts}.log")

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="w"),
            logging.StreamHandler()
        ]
    )

    sizes = [1000, 10_000]
    degrees = [2, 3, 16]
    repetitions = 5

    for n in sizes:
        for t in degrees:
            logging.info("")
            logging.info(f"---------------- NOW RUNNING EXPERIMENT: n = {n}, t = {t}, repetitions = {repetitions} ----------------")
            repeated_experiment(size=n, repetitions=repetitions, t=t)

    pprint(asdict(btree_stats_(random_btree_of_size(100, 3, seed=0))))
