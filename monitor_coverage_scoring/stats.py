"""Summary statistics for scored systems."""

import statistics

from .models import ScoreResult, SummaryStats

HISTOGRAM_BUCKETS = ["<60", "60-69", "70-79", "80-89", ">=90"]


def summarize(results: list[ScoreResult]) -> SummaryStats:
    """Compute aggregate statistics over a list of scored systems."""
    if not results:
        return SummaryStats(
            total_systems=0,
            mean_total=0.0,
            median_total=0.0,
            min_total=0.0,
            max_total=0.0,
            fully_covered_systems=0,
            total_histogram={b: 0 for b in HISTOGRAM_BUCKETS},
        )

    totals = [r.total for r in results]

    return SummaryStats(
        total_systems=len(results),
        mean_total=round(statistics.mean(totals), 1),
        median_total=round(statistics.median(totals), 1),
        min_total=min(totals),
        max_total=max(totals),
        fully_covered_systems=sum(1 for r in results if not r.missing_caps),
        total_histogram=_build_histogram(totals),
    )


def _build_histogram(values: list[float]) -> dict[str, int]:
    """Bucket totals into a histogram."""
    buckets = {b: 0 for b in HISTOGRAM_BUCKETS}
    for v in values:
        if v < 60:
            buckets["<60"] += 1
        elif v < 70:
            buckets["60-69"] += 1
        elif v < 80:
            buckets["70-79"] += 1
        elif v < 90:
            buckets["80-89"] += 1
        else:
            buckets[">=90"] += 1
    return buckets
