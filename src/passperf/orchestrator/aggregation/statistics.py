# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Statistical aggregation of repeated runs of one scenario."""

import logging
from collections.abc import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from passperf.common.constants import EXCELLENT_CV_THRESHOLD, GOOD_CV_THRESHOLD
from passperf.common.enums import ConsistencyBasis, ConsistencyTier
from passperf.common.exceptions import InsufficientSamplesError
from passperf.metrics import RunMetrics

logger = logging.getLogger(__name__)

__all__ = [
    "AggregateStatistics",
    "ErrorRateStatistics",
    "MetricStatistics",
    "StatisticalAggregator",
    "aggregate",
    "classify_cv",
    "coefficient_of_variation",
]

THROUGHPUT_UNIT = "requests/sec"
LATENCY_UNIT = "ms"


class MetricStatistics(BaseModel):
    """Statistics for a single metric across retained runs.

    Attributes:
        mean: Arithmetic mean
        std: Population standard deviation (ddof=0)
        cv: Coefficient of variation in percent (std/mean*100, 0 when mean is 0)
        min: Minimum value
        max: Maximum value
        unit: Unit of measurement
    """

    model_config = ConfigDict(frozen=True)

    mean: float
    std: float
    cv: float
    min: float
    max: float
    unit: str = ""


class ErrorRateStatistics(BaseModel):
    """Error rate (percent) across retained runs."""

    model_config = ConfigDict(frozen=True)

    mean: float
    std: float = 0.0
    cv: float = 0.0
    min: float
    max: float


class AggregateStatistics(BaseModel):
    """Result record of one scenario, built from its retained runs."""

    model_config = ConfigDict(frozen=True)

    sample_count: int = Field(ge=1)
    throughput: MetricStatistics
    latency: MetricStatistics
    error_rate: ErrorRateStatistics
    consistency_tier: ConsistencyTier


def coefficient_of_variation(mean: float, std: float) -> float:
    """std/mean*100, defined as 0 when the mean is 0."""
    if mean == 0:
        return 0.0
    return std / mean * 100.0


def classify_cv(cv: float) -> ConsistencyTier:
    """Map a coefficient of variation (percent) to a consistency tier.

    CV < 3 is Excellent, 3 <= CV < 5 is Good, and CV >= 5 is Poor.
    """
    if cv < EXCELLENT_CV_THRESHOLD:
        return ConsistencyTier.EXCELLENT
    if cv < GOOD_CV_THRESHOLD:
        return ConsistencyTier.GOOD
    return ConsistencyTier.POOR


def _metric_statistics(values: list[float], unit: str) -> MetricStatistics:
    mean = float(np.mean(values))
    std = float(np.std(values, ddof=0))  # Population std (N)
    return MetricStatistics(
        mean=mean,
        std=std,
        cv=coefficient_of_variation(mean, std),
        min=float(np.min(values)),
        max=float(np.max(values)),
        unit=unit,
    )


class StatisticalAggregator:
    """Aggregates the metrics of repeated runs into AggregateStatistics.

    Attributes:
        consistency_basis: Which coefficients of variation gate the tier.
            THROUGHPUT classifies on throughput CV alone; THROUGHPUT_AND_LATENCY
            classifies on the worse (larger) of throughput and latency CV.
    """

    def __init__(
        self, consistency_basis: ConsistencyBasis = ConsistencyBasis.THROUGHPUT
    ) -> None:
        self.consistency_basis = consistency_basis

    def aggregate(
        self, metrics: Sequence[RunMetrics], discard_first_n: int = 0
    ) -> AggregateStatistics:
        """Discard the warmup prefix and compute statistics over the rest.

        Args:
            metrics: Metrics of the successful runs, in run order
            discard_first_n: Number of leading samples to drop

        Returns:
            AggregateStatistics over the retained samples

        Raises:
            ValueError: If discard_first_n is negative
            InsufficientSamplesError: If no samples remain after discarding
        """
        if discard_first_n < 0:
            raise ValueError(
                f"Invalid discard count: {discard_first_n}. Must be 0 or greater."
            )

        retained = list(metrics)[discard_first_n:]
        if not retained:
            raise InsufficientSamplesError(len(metrics), discard_first_n)

        if discard_first_n:
            logger.debug(
                f"Discarded {min(discard_first_n, len(metrics))} warmup sample(s), "
                f"{len(retained)} retained"
            )

        throughput = _metric_statistics(
            [m.throughput_req_per_sec for m in retained], THROUGHPUT_UNIT
        )
        latency = _metric_statistics([m.mean_latency_ms for m in retained], LATENCY_UNIT)
        error_rates = [m.error_rate_percent for m in retained]
        error_mean = float(np.mean(error_rates))
        error_std = float(np.std(error_rates, ddof=0))
        error_rate = ErrorRateStatistics(
            mean=error_mean,
            std=error_std,
            cv=coefficient_of_variation(error_mean, error_std),
            min=float(np.min(error_rates)),
            max=float(np.max(error_rates)),
        )

        if self.consistency_basis == ConsistencyBasis.THROUGHPUT_AND_LATENCY:
            gating_cv = max(throughput.cv, latency.cv)
        else:
            gating_cv = throughput.cv

        return AggregateStatistics(
            sample_count=len(retained),
            throughput=throughput,
            latency=latency,
            error_rate=error_rate,
            consistency_tier=classify_cv(gating_cv),
        )


def aggregate(
    metrics: Sequence[RunMetrics],
    discard_first_n: int = 0,
    consistency_basis: ConsistencyBasis = ConsistencyBasis.THROUGHPUT,
) -> AggregateStatistics:
    """Aggregate with a one-off StatisticalAggregator."""
    return StatisticalAggregator(consistency_basis).aggregate(metrics, discard_first_n)
