# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for statistical aggregation of repeated runs."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from passperf.common.enums import ConsistencyBasis, ConsistencyTier
from passperf.common.exceptions import AggregationError, InsufficientSamplesError
from passperf.metrics import RunMetrics
from passperf.orchestrator.aggregation import (
    StatisticalAggregator,
    aggregate,
    classify_cv,
    coefficient_of_variation,
)


def _metrics(
    throughput: float, latency: float = 5.0, total: int = 1000, successes: int = 1000
) -> RunMetrics:
    return RunMetrics(
        total_requests=total,
        successful_requests=successes,
        throughput_req_per_sec=throughput,
        mean_latency_ms=latency,
    )


class TestAggregate:
    def test_warmup_outlier_discarded(self):
        samples = [_metrics(t) for t in (40, 100, 102, 98, 100)]

        stats = aggregate(samples, discard_first_n=1)

        assert stats.sample_count == 4
        assert stats.throughput.mean == pytest.approx(100.0)
        assert stats.throughput.std == pytest.approx(math.sqrt(2))
        assert stats.throughput.cv == pytest.approx(1.414, abs=1e-3)
        assert stats.throughput.min == 98
        assert stats.throughput.max == 102
        assert stats.consistency_tier == ConsistencyTier.EXCELLENT

    def test_high_variance_is_poor(self):
        samples = [_metrics(t) for t in (50, 90, 70, 110)]

        stats = aggregate(samples, discard_first_n=0)

        assert stats.throughput.mean == pytest.approx(80.0)
        assert stats.throughput.std == pytest.approx(math.sqrt(500))
        assert stats.throughput.cv == pytest.approx(27.95, abs=0.01)
        assert stats.consistency_tier == ConsistencyTier.POOR

    def test_units(self):
        stats = aggregate([_metrics(100)])
        assert stats.throughput.unit == "requests/sec"
        assert stats.latency.unit == "ms"

    def test_single_sample_has_zero_spread(self):
        stats = aggregate([_metrics(123.0, latency=7.5)])
        assert stats.sample_count == 1
        assert stats.throughput.std == 0.0
        assert stats.throughput.cv == 0.0
        assert stats.latency.mean == 7.5
        assert stats.consistency_tier == ConsistencyTier.EXCELLENT

    def test_error_rate(self):
        samples = [
            _metrics(100, total=1000, successes=990),
            _metrics(100, total=1000, successes=970),
        ]
        stats = aggregate(samples)
        assert stats.error_rate.mean == pytest.approx(2.0)
        assert stats.error_rate.min == pytest.approx(1.0)
        assert stats.error_rate.max == pytest.approx(3.0)

    def test_zero_mean_has_zero_cv(self):
        stats = aggregate([_metrics(0.0), _metrics(0.0)])
        assert stats.throughput.cv == 0.0

    def test_empty_input_fails(self):
        with pytest.raises(InsufficientSamplesError):
            aggregate([], discard_first_n=0)

    def test_discard_covering_all_samples_fails(self):
        with pytest.raises(InsufficientSamplesError) as exc_info:
            aggregate([_metrics(100)], discard_first_n=1)
        assert exc_info.value.total_samples == 1
        assert isinstance(exc_info.value, AggregationError)

    def test_negative_discard_rejected(self):
        with pytest.raises(ValueError):
            aggregate([_metrics(100)], discard_first_n=-1)

    @given(
        throughputs=st.lists(
            st.floats(min_value=0, max_value=1e6, allow_nan=False), min_size=2, max_size=20
        ),
        data=st.data(),
    )
    def test_discard_equals_aggregating_the_suffix(self, throughputs, data):
        n = data.draw(st.integers(min_value=0, max_value=len(throughputs) - 1))
        samples = [_metrics(t) for t in throughputs]

        assert aggregate(samples, n) == aggregate(samples[n:], 0)

    def test_result_is_immutable(self):
        stats = aggregate([_metrics(100)])
        with pytest.raises(ValueError):
            stats.sample_count = 5


class TestConsistencyBasis:
    def test_throughput_basis_ignores_latency_variance(self):
        samples = [_metrics(100, latency=latency) for latency in (1.0, 10.0, 20.0)]
        stats = StatisticalAggregator(ConsistencyBasis.THROUGHPUT).aggregate(samples)
        assert stats.latency.cv > 5
        assert stats.consistency_tier == ConsistencyTier.EXCELLENT

    def test_combined_basis_uses_worse_cv(self):
        samples = [_metrics(100, latency=latency) for latency in (1.0, 10.0, 20.0)]
        stats = StatisticalAggregator(ConsistencyBasis.THROUGHPUT_AND_LATENCY).aggregate(
            samples
        )
        assert stats.consistency_tier == ConsistencyTier.POOR


@pytest.mark.parametrize(
    "cv,tier",
    [
        (0.0, ConsistencyTier.EXCELLENT),
        (2.99, ConsistencyTier.EXCELLENT),
        (3.0, ConsistencyTier.GOOD),
        (4.99, ConsistencyTier.GOOD),
        (5.0, ConsistencyTier.POOR),
        (50.0, ConsistencyTier.POOR),
    ],
)
def test_classify_cv_boundaries(cv, tier):
    assert classify_cv(cv) == tier


def test_coefficient_of_variation():
    assert coefficient_of_variation(200.0, 5.0) == pytest.approx(2.5)
    assert coefficient_of_variation(0.0, 5.0) == 0.0
