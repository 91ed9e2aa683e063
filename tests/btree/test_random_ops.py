"""Randomised insert/delete sequences checked against a dict"""
# pylint: skip-file

import logging
import unittest

import numpy as np
from tqdm import tqdm

from btree_map.factory import create_btree
from btree_map.btree_base import btree_stats_, collect_keys
from tests.utils import assert_tree_invariants_raise

logger = logging.getLogger(__name__)


class TestRandomOperations(unittest.TestCase):
    DEGREES = [2, 3, 4, 7]
    SEEDS = range(12)
    NUM_OPS = 400
    KEY_SPACE = 150

    def _run_sequence(self, t, seed):
        rng = np.random.default_rng(seed)
        tree = create_btree(t)
        oracle = {}

        for step in range(self.NUM_OPS):
            key = int(rng.integers(self.KEY_SPACE))
            height_before = tree.height()

            if rng.random() < 0.6:
                value = f"val_{key}_{step}"
                _, inserted = tree.insert(key, value)
                self.assertEqual(inserted, key not in oracle)
                oracle[key] = value
                self.assertIn(tree.height() - height_before, (0, 1))
            else:
                _, removed = tree.delete(key)
                self.assertEqual(removed, key in oracle)
                oracle.pop(key, None)
                self.assertIn(height_before - tree.height(), (0, 1))

            assert_tree_invariants_raise(tree, btree_stats_(tree))
            self.assertEqual(len(tree), len(oracle))

        self.assertEqual(collect_keys(tree), sorted(oracle))
        for key in range(self.KEY_SPACE):
            self.assertEqual(tree.search(key), oracle.get(key))

        # Drain whatever is left
        for key in list(oracle):
            tree.delete(key)
        self.assertTrue(tree.is_empty())
        self.assertEqual(tree.height(), 1)
        assert_tree_invariants_raise(tree, btree_stats_(tree))

    def test_random_sequences(self):
        for t in self.DEGREES:
            for seed in tqdm(self.SEEDS, desc=f"Random ops t={t}", unit="seed"):
                with self.subTest(t=t, seed=seed):
                    self._run_sequence(t, seed)

    def test_sorted_fill_and_reverse_drain(self):
        for t in self.DEGREES:
            with self.subTest(t=t):
                tree = create_btree(t)
                for k in range(300):
                    tree.insert(k, k * k)
                assert_tree_invariants_raise(tree, btree_stats_(tree))
                for k in reversed(range(300)):
                    _, removed = tree.delete(k)
                    self.assertTrue(removed)
                    self.assertIsNone(tree.search(k))
                    assert_tree_invariants_raise(tree, btree_stats_(tree))
                self.assertTrue(tree.is_empty())


if __name__ == "__main__":
    unittest.main()
