# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for orchestrator data models."""

import pytest
from pydantic import ValidationError

from passperf.common.enums import ConsistencyTier, ScenarioState
from passperf.metrics import RunMetrics
from passperf.orchestrator.aggregation import aggregate
from passperf.orchestrator.models import RunResult, ScenarioResult, ScenarioSpec

SPEC = ScenarioSpec(service="h1c-h1c", payload_size="1KB", concurrency=100)


def _metrics(throughput: float) -> RunMetrics:
    return RunMetrics(
        total_requests=100,
        successful_requests=100,
        throughput_req_per_sec=throughput,
        mean_latency_ms=1.0,
    )


class TestScenarioSpec:
    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValidationError):
            ScenarioSpec(service="h1c-h1c", payload_size="1KB", concurrency=0)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            SPEC.concurrency = 5


class TestScenarioResult:
    def test_run_partitions(self):
        result = ScenarioResult(
            scenario=SPEC,
            runs=[
                RunResult(label="run_0001", run_index=0, success=True, metrics=_metrics(1)),
                RunResult(label="run_0002", run_index=1, success=False, error="boom"),
            ],
        )
        assert [r.label for r in result.successful_runs] == ["run_0001"]
        assert [r.label for r in result.failed_runs] == ["run_0002"]

    def test_succeeded_requires_statistics(self):
        result = ScenarioResult(scenario=SPEC, state=ScenarioState.TORN_DOWN)
        assert not result.succeeded

        result.statistics = aggregate([_metrics(100)])
        assert result.succeeded
        assert result.statistics.consistency_tier == ConsistencyTier.EXCELLENT

    def test_failed_state_is_not_success(self):
        result = ScenarioResult(
            scenario=SPEC,
            state=ScenarioState.FAILED,
            statistics=aggregate([_metrics(100)]),
        )
        assert not result.succeeded

    def test_serializes_to_json(self):
        result = ScenarioResult(scenario=SPEC, transitions=[ScenarioState.IDLE])
        data = result.model_dump(mode="json")
        assert data["scenario"]["service"] == "h1c-h1c"
        assert data["transitions"] == ["idle"]
