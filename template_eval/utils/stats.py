"""
Thread-safe run counters.

Gauntlet evaluators may run on several threads at once; they share one
ExecutionStats for the end-of-run summary.
"""

from threading import Lock


class ExecutionStats:
    """
    Thread-safe named counters.

    Example:
        stats = ExecutionStats(stories=0, no_gold=0, unseen=0)
        stats.increment("stories")
        stats["no_gold"]  # 0
    """

    def __init__(self, **initial_values: int):
        """
        Initialize stats with any number of counters.

        Args:
            **initial_values: Initial values for counters (missing ones read as 0)
        """
        self._lock = Lock()
        self._counters: dict[str, int] = dict(initial_values)

    def increment(self, key: str, amount: int = 1) -> None:
        """Thread-safe increment of a counter."""
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def get(self, key: str, default: int = 0) -> int:
        with self._lock:
            return self._counters.get(key, default)

    def to_dict(self) -> dict[str, int]:
        """Get all counters as a dictionary."""
        with self._lock:
            return self._counters.copy()

    def summary(self) -> str:
        """Counters as 'name: value' pairs sorted by name."""
        return " | ".join(f"{k}: {v:,}" for k, v in sorted(self.to_dict().items()))

    def __getitem__(self, key: str) -> int:
        return self.get(key)

    def __repr__(self) -> str:
        with self._lock:
            items = ", ".join(f"{k}={v}" for k, v in sorted(self._counters.items()))
            return f"ExecutionStats({items})"
