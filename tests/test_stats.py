"""Tests for summary statistics."""

from monitor_coverage_scoring.models import ScoreResult
from monitor_coverage_scoring.stats import HISTOGRAM_BUCKETS, summarize


def result(total, missing=()):
    return ScoreResult(part1=0.0, part2=0.0, part3=0.0, part4=0.0, total=total, missing_caps=missing)


class TestSummarize:
    def test_empty(self):
        stats = summarize([])
        assert stats.total_systems == 0
        assert stats.mean_total == 0.0
        assert stats.total_histogram == {b: 0 for b in HISTOGRAM_BUCKETS}

    def test_aggregates(self):
        stats = summarize([result(100.0), result(17.5, ("db",)), result(27.0, ("host",))])
        assert stats.total_systems == 3
        assert stats.mean_total == 48.2
        assert stats.median_total == 27.0
        assert stats.min_total == 17.5
        assert stats.max_total == 100.0
        assert stats.fully_covered_systems == 1

    def test_histogram_edges(self):
        stats = summarize([result(t) for t in (59.9, 60.0, 69.9, 70.0, 85.0, 90.0, 100.0)])
        assert stats.total_histogram == {"<60": 1, "60-69": 2, "70-79": 1, "80-89": 1, ">=90": 2}
