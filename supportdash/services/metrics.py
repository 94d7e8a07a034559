"""
Summary statistics for QA runs and load tests.
Pure functions: no I/O, empty inputs give zeros instead of raising.
"""
import math
from typing import List, Sequence

from supportdash.schemas.stress import StressRequestResult, StressStats
from supportdash.schemas.testing import TestMetrics, TestResult, TestStatus


def round_half_up(value: float, digits: int = 0) -> float:
    # Python's round() is banker's rounding, dashboards expect 2.5 -> 3
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def compute_test_metrics(results: Sequence[TestResult], threshold: float) -> TestMetrics:
    success = sum(1 for r in results if r.status == TestStatus.PASS)
    failed = sum(1 for r in results if r.status == TestStatus.FAIL)
    errors = sum(1 for r in results if r.status == TestStatus.ERROR)
    skipped = sum(1 for r in results if r.status == TestStatus.SKIP)

    # NO_VALIDADO, ERROR and SKIP stay out of the denominator
    validated = success + failed
    raw_rate = (success / validated) * 100 if validated > 0 else 0.0

    # Only cases that actually reached the agent carry a latency
    timed = [r.latency_ms for r in results if r.latency_ms > 0]
    avg_latency = int(round_half_up(sum(timed) / len(timed))) if timed else 0

    return TestMetrics(
        total=len(results),
        success=success,
        failed=failed,
        errors=errors,
        skipped=skipped,
        validated=validated,
        success_rate=round_half_up(raw_rate, 1),
        threshold=threshold,
        # the unrounded rate decides, only the reported one is rounded
        passed=validated > 0 and raw_rate >= threshold,
        avg_latency_ms=avg_latency,
    )


def p95_index(count: int) -> int:
    """Nearest-rank index into an ascending list of `count` values."""
    return min(math.floor(count * 0.95), count - 1)


def compute_stress_stats(results: Sequence[StressRequestResult]) -> StressStats:
    latencies: List[int] = sorted(r.latency_ms for r in results)
    if not latencies:
        return StressStats()

    return StressStats(
        total=len(results),
        success=sum(1 for r in results if r.status == "success"),
        errors=sum(1 for r in results if r.status == "error"),
        avg_latency_ms=int(round_half_up(sum(latencies) / len(latencies))),
        min_latency_ms=latencies[0],
        max_latency_ms=latencies[-1],
        p95_latency_ms=latencies[p95_index(len(latencies))],
    )
