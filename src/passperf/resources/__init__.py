# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""CPU isolation planning."""

from passperf.resources.cpu_planner import (
    CPUAllocationPlan,
    CPUAllocationPlanner,
    detect_available_cores,
    format_cpuset,
    plan,
)

__all__ = [
    "CPUAllocationPlan",
    "CPUAllocationPlanner",
    "detect_available_cores",
    "format_cpuset",
    "plan",
]
