# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data models for scenario orchestration."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from passperf.common.enums import ProcessState, RunPhaseState, ScenarioState
from passperf.metrics import RunMetrics
from passperf.orchestrator.aggregation import AggregateStatistics


class ScenarioSpec(BaseModel):
    """One (service, payload size, concurrency) combination under test."""

    model_config = ConfigDict(frozen=True)

    service: str
    payload_size: str
    concurrency: int = Field(ge=1)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. "h1c-h1c_1KB_100users"."""
        return f"{self.service}_{self.payload_size}_{self.concurrency}users"


class RunResult(BaseModel):
    """Result from executing a single measurement run.

    Attributes:
        label: Label identifying this run (e.g., "run_0001")
        run_index: Zero-based index of the run within its scenario
        success: Whether the run produced metrics
        metrics: Parsed metrics of the measurement phase
        error: Error message if the run failed
        error_kind: Exception class name if the run failed
        phases: Lifecycle phases the run went through, in order
        cpu_samples: Average CPU utilization per role (and "total") during the run
        artifacts_path: Path to run artifacts directory
    """

    label: str
    run_index: int = Field(ge=0)
    success: bool
    metrics: RunMetrics | None = None
    error: str | None = None
    error_kind: str | None = None
    phases: list[RunPhaseState] = Field(default_factory=list)
    cpu_samples: dict[str, float] = Field(default_factory=dict)
    artifacts_path: Path | None = None


class ScenarioResult(BaseModel):
    """Outcome of one scenario: its runs and, when aggregation succeeded, statistics.

    Attributes:
        scenario: The scenario that was executed
        state: Final state (TORN_DOWN on success, FAILED otherwise)
        transitions: Every state the scenario passed through, in order
        startup_phases: Dependency start phases (backend, then target)
        runs: Results of the attempted runs, in run order
        statistics: Aggregate statistics over the retained runs
        discarded_runs: Number of successful runs dropped as warmup outliers
        error: First fatal error of the scenario
        error_kind: Exception class name of the first fatal error
        dependency_failure: True when the scenario aborted while starting dependencies
        dependency_health: State of each dependency process when the startup failed
        artifacts_path: Directory holding the scenario's artifacts
    """

    scenario: ScenarioSpec
    state: ScenarioState = ScenarioState.IDLE
    transitions: list[ScenarioState] = Field(default_factory=list)
    startup_phases: list[RunPhaseState] = Field(default_factory=list)
    runs: list[RunResult] = Field(default_factory=list)
    statistics: AggregateStatistics | None = None
    discarded_runs: int = 0
    error: str | None = None
    error_kind: str | None = None
    dependency_failure: bool = False
    dependency_health: dict[str, ProcessState] = Field(default_factory=dict)
    artifacts_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.statistics is not None and self.state != ScenarioState.FAILED

    @property
    def successful_runs(self) -> list[RunResult]:
        return [r for r in self.runs if r.success]

    @property
    def failed_runs(self) -> list[RunResult]:
        return [r for r in self.runs if not r.success]
