"""
Timing of the decoding stages.

The pipeline wraps each stage (framing, RPC reconstruction, GRE tracking)
in `monitor.measure(...)`. A replay of a large Player.log can then report
where the time went:

    monitor = get_monitor()
    with monitor.measure("gre_tracker.process_line"):
        ...
    monitor.log_report()
"""

import dataclasses
import logging
import threading
import time
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class StageStats:
    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def record(self, elapsed_ms: float):
        self.count += 1
        self.total_ms += elapsed_ms
        self.min_ms = min(self.min_ms, elapsed_ms)
        self.max_ms = max(self.max_ms, elapsed_ms)


class PerformanceMonitor:
    """
    Thread-safe singleton collecting per-stage timings.

    Only aggregates are kept (count/total/min/max), so a follower running for
    hours doesn't grow memory.
    """

    _instance: Optional['PerformanceMonitor'] = None
    _lock = threading.Lock()

    def __init__(self):
        self._stats: Dict[str, StageStats] = {}
        self._stats_lock = threading.Lock()
        self._thresholds: Dict[str, float] = {}
        self.enabled = True

    @classmethod
    def get(cls) -> 'PerformanceMonitor':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = PerformanceMonitor()
        return cls._instance

    @contextmanager
    def measure(self, name: str):
        """
        Time the enclosed block under `name`.

        Args:
            name: Stage name, e.g. "rpc.process_line"
        """
        if not self.enabled:
            yield
            return

        start_time = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000.0
            with self._stats_lock:
                self._stats.setdefault(name, StageStats()).record(elapsed_ms)

            threshold = self._thresholds.get(name)
            if threshold is not None and elapsed_ms > threshold:
                logger.warning(f"PERFORMANCE: '{name}' took {elapsed_ms:.2f}ms (threshold {threshold:.2f}ms)")

    def set_threshold(self, name: str, threshold_ms: float):
        self._thresholds[name] = threshold_ms

    def stats(self, name: str) -> Optional[StageStats]:
        with self._stats_lock:
            stats = self._stats.get(name)
            return dataclasses.replace(stats) if stats else None

    def report(self, sort_by: str = "total_ms", limit: Optional[int] = None) -> List[Tuple[str, StageStats]]:
        """
        Snapshot of all stages, sorted descending by `sort_by`
        ('total_ms', 'avg_ms', 'max_ms' or 'count').
        """
        with self._stats_lock:
            items = [(name, dataclasses.replace(stats)) for name, stats in self._stats.items()]
        items.sort(key=lambda item: getattr(item[1], sort_by, 0), reverse=True)
        return items[:limit] if limit else items

    def clear(self):
        with self._stats_lock:
            self._stats.clear()

    def log_report(self, sort_by: str = "total_ms", limit: int = 10):
        entries = self.report(sort_by=sort_by, limit=limit)
        if not entries:
            logger.info("No performance metrics recorded")
            return

        logger.info(f"Performance report (top {limit} by {sort_by})")
        for name, stats in entries:
            logger.info(
                f"{name:32s} | count {stats.count:7d} | total {stats.total_ms:9.2f}ms | "
                f"avg {stats.avg_ms:6.3f}ms | max {stats.max_ms:7.2f}ms"
            )


def get_monitor() -> PerformanceMonitor:
    """Get the global PerformanceMonitor instance."""
    return PerformanceMonitor.get()
