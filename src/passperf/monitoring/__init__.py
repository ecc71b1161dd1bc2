# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""CPU utilization monitoring."""

from passperf.monitoring.cpu_sampler import (
    CPUSample,
    CPUUsageSampler,
    SampleSeries,
    SamplerHandle,
    assess_cpu_usage,
)

__all__ = [
    "CPUSample",
    "CPUUsageSampler",
    "SampleSeries",
    "SamplerHandle",
    "assess_cpu_usage",
]
