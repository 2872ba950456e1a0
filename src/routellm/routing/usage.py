"""Thread-safe per-strategy, per-model routing counters."""

from __future__ import annotations

import threading
from collections import defaultdict

from routellm.routing.types import ModelId


class UsageCounters:
    """``{strategy -> {model -> count}}`` guarded by a single lock.

    Every increment is a read-modify-write under the lock, so concurrent
    routings from tasks or threads never lose an update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: defaultdict[str, defaultdict[ModelId, int]] = defaultdict(
            lambda: defaultdict(int)
        )

    def increment(self, strategy_name: str, model: ModelId) -> int:
        """Add one routing to the cell and return its new value."""
        with self._lock:
            self._counts[strategy_name][model] += 1
            return self._counts[strategy_name][model]

    def get(self, strategy_name: str, model: ModelId) -> int:
        with self._lock:
            per_model = self._counts.get(strategy_name)
            return per_model.get(model, 0) if per_model else 0

    def snapshot(self) -> dict[str, dict[ModelId, int]]:
        """Consistent deep copy of all counters."""
        with self._lock:
            return {name: dict(per_model) for name, per_model in self._counts.items()}

    def total(self) -> int:
        with self._lock:
            return sum(sum(per_model.values()) for per_model in self._counts.values())

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
