# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Run metrics and report parsing."""

from passperf.metrics.extractor import MetricsExtractor, parse, to_milliseconds
from passperf.metrics.models import RunMetrics

__all__ = [
    "MetricsExtractor",
    "RunMetrics",
    "parse",
    "to_milliseconds",
]
