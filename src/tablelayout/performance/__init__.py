"""Performance utilities for tablelayout.

This module provides:
- Profiling decorator for timing layout solves
- Timing statistics and reporting
"""

from tablelayout.performance.profiler import (
    SolveProfiler,
    TimingStats,
    get_profiler,
    profile_solve,
    reset_profiler,
)

__all__ = [
    "SolveProfiler",
    "TimingStats",
    "get_profiler",
    "profile_solve",
    "reset_profiler",
]
