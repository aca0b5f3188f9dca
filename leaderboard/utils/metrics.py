"""
Metric event recording for the leaderboard query core.

The core only emits opaque counters and timings; where they end up is decided
by whoever constructs the services. ``NullMetrics`` discards everything,
``InMemoryMetrics`` keeps them for inspection in tests and local runs.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Tuple

TagKey = Tuple[Tuple[str, str], ...]


def _tag_key(tags: Dict[str, object]) -> TagKey:
    return tuple(sorted((k, str(v)) for k, v in tags.items()))


class MetricsRecorder:
    """Interface for metric sinks. The base implementation records nothing."""

    def increment(self, name: str, amount: int = 1, **tags) -> None:
        pass

    def observe(self, name: str, seconds: float, **tags) -> None:
        pass

    @contextmanager
    def timer(self, name: str, **tags) -> Iterator[None]:
        """Observe the wall time of the enclosed block, including when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, time.perf_counter() - start, **tags)


class NullMetrics(MetricsRecorder):
    """Sink used when no metrics backend is wired in."""


class InMemoryMetrics(MetricsRecorder):
    """Keeps counters and timings in process memory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[Tuple[str, TagKey], int] = defaultdict(int)
        self._timings: Dict[Tuple[str, TagKey], List[float]] = defaultdict(list)

    def increment(self, name: str, amount: int = 1, **tags) -> None:
        with self._lock:
            self._counters[(name, _tag_key(tags))] += amount

    def observe(self, name: str, seconds: float, **tags) -> None:
        with self._lock:
            self._timings[(name, _tag_key(tags))].append(seconds)

    def count(self, name: str, **tags) -> int:
        """Sum of a counter across every tag set that includes ``tags``."""
        wanted = set(_tag_key(tags))
        with self._lock:
            return sum(
                value for (counter, key), value in self._counters.items()
                if counter == name and wanted.issubset(key)
            )

    def timings(self, name: str, **tags) -> List[float]:
        wanted = set(_tag_key(tags))
        with self._lock:
            samples: List[float] = []
            for (timing, key), values in self._timings.items():
                if timing == name and wanted.issubset(key):
                    samples.extend(values)
            return samples

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()
