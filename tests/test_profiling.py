"""Tests for the profiling utilities"""
# pylint: skip-file

import unittest

from btree_map.profiling import (
    MethodMetrics,
    PerformanceTracker,
    track_performance,
    EVENT_ROOT_GROW,
    EVENT_SPLIT,
    EVENT_MERGE,
    EVENT_ROOT_COLLAPSE,
)
from btree_map.btree_base import BTreeBase
from btree_map.factory import create_btree


class TestMethodMetrics(unittest.TestCase):
    def test_measurements(self):
        m = MethodMetrics()
        for elapsed in (0.1, 0.3, 0.2):
            m.add_measurement(elapsed)
        self.assertEqual(m.call_count, 3)
        self.assertAlmostEqual(m.total_time, 0.6)
        self.assertAlmostEqual(m.avg_time, 0.2)
        self.assertAlmostEqual(m.median_time, 0.2)
        self.assertEqual(m.min_time, 0.1)
        self.assertEqual(m.max_time, 0.3)
        self.assertIn("Calls: 3", str(m))

    def test_percentile(self):
        m = MethodMetrics()
        for elapsed in (0.4, 0.1, 0.3, 0.2):
            m.add_measurement(elapsed)
        self.assertEqual(m.percentile(50), 0.2)
        self.assertEqual(m.percentile(100), 0.4)
        self.assertEqual(m.percentile(0), 0.1)
        with self.assertRaises(ValueError):
            m.percentile(101)
        self.assertEqual(MethodMetrics().percentile(99), 0.0)

    def test_empty_metrics(self):
        m = MethodMetrics()
        self.assertEqual(m.avg_time, 0)
        self.assertEqual(m.median_time, 0)


class TestPerformanceTracker(unittest.TestCase):
    def setUp(self):
        self.tracker = PerformanceTracker.get_instance()
        self.tracker.reset()

    def tearDown(self):
        self.tracker.disable()
        self.tracker.reset()

    def test_singleton(self):
        self.assertIs(PerformanceTracker.get_instance(), self.tracker)

    def test_disabled_by_default_records_nothing(self):
        tree = create_btree(3)
        tree.insert(1, "one")
        tree.search(1)
        self.assertEqual(self.tracker.report(), "No performance data collected.")

    def test_tree_operations_are_tracked_when_enabled(self):
        BTreeBase.enable_performance_tracking()
        tree = create_btree(3)
        for k in range(10):
            tree.insert(k, k)
        tree.search(3)
        tree.delete(3)

        metrics = self.tracker.metrics
        self.assertEqual(metrics["BTreeBase.insert"].call_count, 10)
        self.assertEqual(metrics["BTreeBase.search"].call_count, 1)
        self.assertEqual(metrics["BTreeBase.delete"].call_count, 1)

        report = BTreeBase.get_performance_report()
        self.assertIn("BTreeBase.insert", report)

        BTreeBase.reset_performance_metrics()
        self.assertEqual(len(self.tracker.metrics), 0)

    def test_structural_events_are_counted(self):
        self.tracker.enable()
        tree = create_btree(2)
        for k in range(1, 11):
            tree.insert(k, k)
        # 8 nodes in 3 levels: two root growths, five splits (two at the root)
        self.assertEqual(self.tracker.events[EVENT_ROOT_GROW], 2)
        self.assertEqual(self.tracker.events[EVENT_SPLIT], 5)
        self.assertEqual(self.tracker.events[EVENT_MERGE], 0)

        for k in range(1, 11):
            tree.delete(k)
        self.assertEqual(self.tracker.events[EVENT_ROOT_COLLAPSE], 2)
        self.assertGreaterEqual(self.tracker.events[EVENT_MERGE], 2)
        self.assertIn("Structural events:", self.tracker.report())

        self.tracker.reset()
        self.assertEqual(sum(self.tracker.events.values()), 0)
        self.assertTrue(self.tracker.enabled)

    def test_failed_call_is_still_timed(self):
        self.tracker.enable()
        tree = create_btree(3)
        with self.assertRaises(ValueError):
            tree.insert(None, "x")
        self.assertEqual(self.tracker.metrics["BTreeBase.insert"].call_count, 1)

    def test_custom_tag(self):
        @track_performance(tag="custom")
        def f(x):
            return x * 2

        self.tracker.enable()
        self.assertEqual(f(21), 42)
        self.assertEqual(self.tracker.metrics["custom"].call_count, 1)

    def test_disable_stops_recording(self):
        @track_performance
        def g():
            return None

        self.tracker.enable()
        g()
        BTreeBase.disable_performance_tracking()
        g()
        self.assertEqual(self.tracker.metrics[g.__qualname__].call_count, 1)


if __name__ == "__main__":
    unittest.main()
