"""
Profiling for B-tree operations.

Two kinds of data are collected by the process-wide `PerformanceTracker`:
wall-clock timings of decorated methods, and counts of the structural events
(root growth, node splits, borrows, merges, root collapse) those methods cause.
Both are only recorded while tracking is enabled.
"""

import time
import functools
import math
import statistics
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

# Structural events reported by the tree engines
EVENT_ROOT_GROW = "root_grow"
EVENT_SPLIT = "split"
EVENT_BORROW_PREV = "borrow_prev"
EVENT_BORROW_NEXT = "borrow_next"
EVENT_MERGE = "merge"
EVENT_ROOT_COLLAPSE = "root_collapse"

STRUCTURAL_EVENTS = (
    EVENT_ROOT_GROW,
    EVENT_SPLIT,
    EVENT_BORROW_PREV,
    EVENT_BORROW_NEXT,
    EVENT_MERGE,
    EVENT_ROOT_COLLAPSE,
)


@dataclass
class MethodMetrics:
    """Timing samples of one tracked method."""
    call_count: int = 0
    total_time: float = 0.0
    min_time: float = float('inf')
    max_time: float = 0.0
    samples: List[float] = field(default_factory=list)

    def add_measurement(self, elapsed: float) -> None:
        self.call_count += 1
        self.total_time += elapsed
        if elapsed < self.min_time:
            self.min_time = elapsed
        if elapsed > self.max_time:
            self.max_time = elapsed
        self.samples.append(elapsed)

    @property
    def avg_time(self) -> float:
        if not self.call_count:
            return 0.0
        return self.total_time / self.call_count

    @property
    def median_time(self) -> float:
        if not self.samples:
            return 0.0
        return statistics.median(self.samples)

    def percentile(self, q: float) -> float:
        """
        Nearest-rank percentile of the samples.

        Parameters:
            q (float): Percentile in the range [0, 100].
        """
        if not 0 <= q <= 100:
            raise ValueError(f"percentile must be within [0, 100], got {q}")
        if not self.samples:
            return 0.0
        ordered = sorted(self.samples)
        rank = max(1, math.ceil(q / 100 * len(ordered)))
        return ordered[rank - 1]

    def __str__(self) -> str:
        return (f"Calls: {self.call_count}, "
                f"Total: {self.total_time:.6f}s, "
                f"Avg: {self.avg_time:.6f}s, "
                f"Median: {self.median_time:.6f}s, "
                f"p99: {self.percentile(99):.6f}s")


class PerformanceTracker:
    """Process-wide collector of method timings and structural event counts."""

    _instance = None

    @classmethod
    def get_instance(cls) -> 'PerformanceTracker':
        if cls._instance is None:
            cls._instance = PerformanceTracker()
        return cls._instance

    def __init__(self):
        self.metrics: Dict[str, MethodMetrics] = defaultdict(MethodMetrics)
        self.events: Counter = Counter()
        self.enabled = False

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def reset(self) -> None:
        """Drop all timings and event counts. The enabled flag is kept."""
        self.metrics.clear()
        self.events.clear()

    def add_measurement(self, method_name: str, elapsed: float) -> None:
        if self.enabled:
            self.metrics[method_name].add_measurement(elapsed)

    def count_event(self, event: str, n: int = 1) -> None:
        if self.enabled:
            self.events[event] += n

    def report(self, sort_by: str = 'total_time') -> str:
        """
        Render the collected data as a fixed-width table.

        Parameters:
            sort_by (str): A `MethodMetrics` attribute to order methods by,
                largest first.
        """
        if not self.metrics and not self.events:
            return "No performance data collected."

        width = 80
        lines = ["Performance Metrics:", "-" * width]
        lines.append(f"{'Method':<36} {'Calls':>8} {'Total (s)':>11} "
                     f"{'Avg (s)':>11} {'p99 (s)':>11}")
        lines.append("-" * width)
        ranked = sorted(self.metrics.items(),
                        key=lambda kv: getattr(kv[1], sort_by),
                        reverse=True)
        for name, m in ranked:
            lines.append(f"{name:<36} {m.call_count:>8} {m.total_time:>11.6f} "
                         f"{m.avg_time:>11.6f} {m.percentile(99):>11.6f}")

        if self.events:
            lines.append("-" * width)
            lines.append("Structural events:")
            for event in STRUCTURAL_EVENTS:
                if self.events[event]:
                    lines.append(f"  {event:<34} {self.events[event]:>8}")
        return "\n".join(lines)


def record_event(event: str) -> None:
    """Count one structural event on the shared tracker."""
    PerformanceTracker.get_instance().count_event(event)


def track_performance(method: Optional[Callable] = None, *,
                      tag: Optional[str] = None) -> Callable:
    """
    Decorator timing each call of a method while tracking is enabled.

    Usable bare (`@track_performance`) or with a custom name
    (`@track_performance(tag="...")`). Without a tag, samples are filed under
    the function's qualified name, e.g. "BTreeBase.insert".
    """
    def decorator(func):
        name = tag or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            tracker = PerformanceTracker.get_instance()
            if not tracker.enabled:
                return func(*args, **kwargs)
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                tracker.add_measurement(name, time.perf_counter() - start)
        return wrapper

    if method is None:
        return decorator
    return decorator(method)
