"""
Profiling helpers for metrics runs.

`profile_block` measures one computation: wall-clock time (perf_counter), peak
Python allocations (tracemalloc), and resident memory and CPU share via psutil
when it is installed. The report runner wraps each facade call in it so the
persisted payload records how long aggregation took for the record volume.

Usage:
    from lab_metrics.utils.profiler import profile_block

    with profile_block("compute_metrics") as stats:
        result = compute_metrics(records, config)

    print(stats.duration_seconds, stats.peak_traced_bytes)
"""

from __future__ import annotations

import contextlib
import time
import tracemalloc
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Generator, Optional

try:
    import psutil
except ImportError:  # pragma: no cover - optional until dependencies are installed
    psutil = None  # type: ignore[assignment]


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    duration_seconds: float = field(default=0.0)
    peak_traced_bytes: Optional[int] = field(default=None)
    rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)

    def as_dict(self, decimals: int = 4) -> Dict[str, Any]:
        payload = asdict(self)
        payload["duration_seconds"] = round(self.duration_seconds, decimals)
        if self.cpu_percent is not None:
            payload["cpu_percent"] = round(self.cpu_percent, 1)
        return payload


@contextlib.contextmanager
def profile_block(
    label: str, enable_tracemalloc: bool = True
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    enable_tracemalloc : bool
        Whether to trace Python-level allocations. Tracing slows allocation-heavy
        code noticeably; disable it for large record volumes.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process() if psutil else None

    tracemalloc_was_running = tracemalloc.is_tracing()
    if enable_tracemalloc and not tracemalloc_was_running:
        tracemalloc.start()
    if enable_tracemalloc:
        tracemalloc.reset_peak()

    # cpu_percent needs a priming call
    if process:
        process.cpu_percent(interval=None)

    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - start

        if process:
            stats.cpu_percent = process.cpu_percent(interval=None)
            stats.rss_bytes = process.memory_info().rss

        if enable_tracemalloc:
            _, stats.peak_traced_bytes = tracemalloc.get_traced_memory()
            # Stop tracemalloc only if we started it
            if not tracemalloc_was_running:
                tracemalloc.stop()


__all__ = ["ProfileStats", "profile_block"]
