# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Scenario orchestration: run scheduling, lifecycle state machine and aggregation."""

from passperf.orchestrator.models import RunResult, ScenarioResult, ScenarioSpec
from passperf.orchestrator.orchestrator import MatrixOrchestrator, ScenarioOrchestrator
from passperf.orchestrator.strategies import (
    ExecutionStrategy,
    FixedTrialsStrategy,
    ScenarioMatrixStrategy,
)

__all__ = [
    "ExecutionStrategy",
    "FixedTrialsStrategy",
    "MatrixOrchestrator",
    "RunResult",
    "ScenarioMatrixStrategy",
    "ScenarioOrchestrator",
    "ScenarioResult",
    "ScenarioSpec",
]
