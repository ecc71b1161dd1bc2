# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Statistical aggregation of repeated scenario runs."""

from passperf.orchestrator.aggregation.statistics import (
    AggregateStatistics,
    ErrorRateStatistics,
    MetricStatistics,
    StatisticalAggregator,
    aggregate,
    classify_cv,
    coefficient_of_variation,
)

__all__ = [
    "AggregateStatistics",
    "ErrorRateStatistics",
    "MetricStatistics",
    "StatisticalAggregator",
    "aggregate",
    "classify_cv",
    "coefficient_of_variation",
]
