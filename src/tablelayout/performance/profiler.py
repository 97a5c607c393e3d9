"""Performance profiling utilities for tablelayout.

This module provides profiling tools for measuring solve times:
- TimingStats: Rolling statistics for a series of measurements
- SolveProfiler: Track solve times per layout
- profile_solve: Decorator for timing solve functions
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import wraps
import logging
from statistics import mean, stdev
import time
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One frame at 60 FPS; a solve slower than this would stall a render loop
SLOW_SOLVE_MS = 16.0


@dataclass
class TimingStats:
    """Statistics for a series of timing measurements.

    Attributes:
        name: Name of the measured operation
        times_ms: List of timing measurements in milliseconds
        max_samples: Maximum number of samples to keep
    """

    name: str
    times_ms: list[float] = field(default_factory=list)
    max_samples: int = 1000

    def add(self, time_ms: float) -> None:
        """Add a timing measurement, dropping the oldest beyond max_samples."""
        self.times_ms.append(time_ms)
        if len(self.times_ms) > self.max_samples:
            self.times_ms = self.times_ms[-self.max_samples :]

    @property
    def count(self) -> int:
        """Number of measurements."""
        return len(self.times_ms)

    @property
    def avg_ms(self) -> float:
        """Average time in milliseconds."""
        if not self.times_ms:
            return 0.0
        return mean(self.times_ms)

    @property
    def min_ms(self) -> float:
        """Minimum time in milliseconds."""
        if not self.times_ms:
            return 0.0
        return min(self.times_ms)

    @property
    def max_ms(self) -> float:
        """Maximum time in milliseconds."""
        if not self.times_ms:
            return 0.0
        return max(self.times_ms)

    @property
    def std_ms(self) -> float:
        """Standard deviation in milliseconds."""
        if len(self.times_ms) < 2:
            return 0.0
        return stdev(self.times_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "avg_ms": round(self.avg_ms, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "std_ms": round(self.std_ms, 3),
        }


class SolveProfiler:
    """Profiler for layout solves.

    Tracks solve times per layout name and provides aggregate statistics.
    Recording is a no-op until the profiler is enabled.
    """

    def __init__(self) -> None:
        self._stats: dict[str, TimingStats] = {}
        self._enabled: bool = False

    @property
    def enabled(self) -> bool:
        """Check if profiling is enabled."""
        return self._enabled

    def enable(self) -> None:
        self._enabled = True
        logger.info("Solve profiling enabled")

    def disable(self) -> None:
        self._enabled = False
        logger.info("Solve profiling disabled")

    def record(self, layout_name: str, time_ms: float) -> None:
        """Record a solve time.

        Args:
            layout_name: Name of the solved layout
            time_ms: Solve time in milliseconds
        """
        if not self._enabled:
            return

        if layout_name not in self._stats:
            self._stats[layout_name] = TimingStats(name=layout_name)

        self._stats[layout_name].add(time_ms)

        if time_ms > SLOW_SOLVE_MS:
            logger.warning(f"Slow solve detected: {layout_name} took {time_ms:.1f}ms")

    def get_stats(self, layout_name: str) -> TimingStats | None:
        return self._stats.get(layout_name)

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of all solve timings."""
        return {
            "enabled": self._enabled,
            "layouts": {name: stats.to_dict() for name, stats in self._stats.items()},
        }

    def format_report(self) -> str:
        """Format a human-readable timing report."""
        lines = ["Solve Timing", "-" * 30]
        for name, stats in self._stats.items():
            lines.append(
                f"  {name}: avg={stats.avg_ms:.3f}ms "
                f"min={stats.min_ms:.3f}ms max={stats.max_ms:.3f}ms "
                f"(n={stats.count})"
            )
        return "\n".join(lines)


# Global profiler instance
_global_profiler: SolveProfiler | None = None


def get_profiler() -> SolveProfiler:
    """Get the global solve profiler instance."""
    global _global_profiler
    if _global_profiler is None:
        _global_profiler = SolveProfiler()
    return _global_profiler


def reset_profiler() -> None:
    """Reset the global profiler."""
    global _global_profiler
    _global_profiler = None


def profile_solve(layout_name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to time a function that solves a layout.

    Args:
        layout_name: Name to record the timings under

    Returns:
        Decorator function

    Example:
        >>> @profile_solve("dialog")
        ... def relayout(width: float, height: float) -> SolveReport:
        ...     return layout.solve(width, height)
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            profiler = get_profiler()
            if not profiler.enabled:
                return func(*args, **kwargs)

            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                profiler.record(layout_name, elapsed_ms)

        return wrapper

    return decorator
