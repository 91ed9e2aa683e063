"""Utility functions for testing B-tree invariants."""

import logging
from btree_map.btree_base import (
    BTreeBase,
    Stats
)

TREE_FLAGS = (
    "leaves_same_depth",
    "keys_sorted",
    "is_search_tree",
    "child_counts_valid",
    "fill_bounds_valid",
    "values_aligned",
)

def assert_tree_invariants_tc(tc, t: BTreeBase, stats: Stats) -> None:
    """TestCase version: use inside unittest.TestCase methods."""
    for flag in TREE_FLAGS:
        tc.assertTrue(
            getattr(stats, flag),
            f"Invariant failed: {flag} is False\n{t.print_structure()}"
        )

    tc.assertEqual(
        stats.item_count, len(t),
        f"Invariant failed: item_count={stats.item_count} ≠ len(tree)={len(t)}"
    )
    tc.assertEqual(
        stats.height, t.height(),
        f"Invariant failed: stats height={stats.height} ≠ tree height={t.height()}"
    )

    if not t.is_empty():
        tc.assertIsNotNone(
            stats.least_key,
            "Invariant failed: least_key is None for non-empty tree"
        )
        tc.assertIsNotNone(
            stats.greatest_key,
            "Invariant failed: greatest_key is None for non-empty tree"
        )
    else:
        tc.assertEqual(stats.height, 1, "An empty tree is a lone empty leaf")

class InvariantError(Exception):
    """Raised when a B-tree invariant is violated."""
    pass

def assert_tree_invariants_raise(t: BTreeBase, stats: Stats) -> None:
    """Check all invariants, raising on the first failure."""
    for flag in TREE_FLAGS:
        if not getattr(stats, flag):
            logging.error(f"Invariant failed: {flag} is False")
            raise InvariantError(f"{flag} is False")

    if stats.item_count != len(t):
        logging.error(f"Invariant failed: item_count={stats.item_count} ≠ len(tree)={len(t)}")
        raise InvariantError("item_count does not match len(tree)")
