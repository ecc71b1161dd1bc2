# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for running the full scenario matrix."""

from unittest.mock import MagicMock

import pytest

from passperf.common.enums import Role
from passperf.common.exceptions import (
    ConfigurationError,
    InsufficientResourcesError,
    PayloadNotFoundError,
    ServiceNotFoundError,
)
from passperf.lifecycle import LocalProcessPlatform
from passperf.orchestrator import MatrixOrchestrator, ScenarioOrchestrator


@pytest.fixture
def make_matrix(config, fake_platform, fake_driver, fake_sampler):
    def _make(platform=None) -> MatrixOrchestrator:
        platform = platform or fake_platform
        scenario_orchestrator = ScenarioOrchestrator(
            config,
            platform,
            driver=fake_driver,
            sampler_factory=lambda plan: fake_sampler,
            sleep=lambda seconds: None,
        )
        return MatrixOrchestrator(
            config, platform=platform, scenario_orchestrator=scenario_orchestrator
        )

    return _make


class TestMatrixExecution:
    def test_one_result_per_scenario_in_order(self, make_matrix, config):
        config.services = "h1c-h1c,h2c-h2c"
        config.concurrency = "10,20"
        config.num_runs = 2

        results = make_matrix().execute()

        assert [r.scenario.label for r in results] == [
            "h1c-h1c_1KB_10users",
            "h1c-h1c_1KB_20users",
            "h2c-h2c_1KB_10users",
            "h2c-h2c_1KB_20users",
        ]
        assert all(r.succeeded for r in results)
        assert results[0].artifacts_path == config.results_dir / "h1c-h1c_1KB_10users"

    def test_scenarios_never_overlap(self, make_matrix, config, fake_platform):
        config.services = "h1c-h1c,h2c-h2c,h1c-h2c"
        config.num_runs = 2

        make_matrix().execute()

        # backend + target of exactly one scenario at any time
        assert fake_platform.max_concurrently_running == 2
        assert fake_platform.running == {}
        starts = [i for i, (kind, _) in enumerate(fake_platform.events) if kind == "start"]
        stops = [i for i, (kind, _) in enumerate(fake_platform.events) if kind == "stop"]
        for scenario in range(3):
            first_start, second_start = starts[2 * scenario : 2 * scenario + 2]
            first_stop, second_stop = stops[2 * scenario : 2 * scenario + 2]
            assert first_start < second_start < first_stop < second_stop
            if scenario < 2:
                assert second_stop < starts[2 * scenario + 2]

    def test_failed_scenario_does_not_stop_matrix(
        self, make_matrix, config, platform_factory
    ):
        class FlakyPlatform(platform_factory):
            def is_alive(self, handle):
                if handle.name == "backend[h2c-h2c]":
                    return False
                return super().is_alive(handle)

            def is_port_open(self, host, port):
                # h2c-h2c backend port
                return port != 8703

        config.services = "h2c-h2c,h1c-h1c"
        config.num_runs = 2
        platform = FlakyPlatform()

        results = make_matrix(platform=platform).execute()

        assert [r.succeeded for r in results] == [False, True]
        assert results[0].dependency_failure
        assert results[0].error_kind == "ProcessDiedError"
        assert platform.running == {}


class TestPreflight:
    def test_unknown_service_fails_before_any_process(self, make_matrix, config, fake_platform):
        config.services = "h1c-h1c,h9-h9"

        with pytest.raises(ServiceNotFoundError):
            make_matrix().execute()

        assert fake_platform.events == []

    def test_bad_payload_label_fails_before_any_process(self, make_matrix, config, fake_platform):
        config.payload_sizes = "1KB,huge"

        with pytest.raises(PayloadNotFoundError):
            make_matrix().execute()

        assert fake_platform.events == []

    @pytest.mark.parametrize("field", ["target_command", "backend_command"])
    def test_bad_command_template_fails_before_any_process(self, make_matrix, config, field):
        setattr(config, field, "serve {no_such_placeholder}")
        config.services = "h1c-h1c,h2c-h2c"
        platform = LocalProcessPlatform(config)
        platform.start_process = MagicMock()

        with pytest.raises(ConfigurationError, match="no_such_placeholder"):
            make_matrix(platform=platform).execute()

        platform.start_process.assert_not_called()

    def test_too_few_cores(self, make_matrix, platform_factory):
        platform = platform_factory(cores=3)

        with pytest.raises(InsufficientResourcesError):
            make_matrix(platform=platform).execute()

        assert platform.events == []

    def test_prepare_returns_plan(self, make_matrix):
        strategy, plan = make_matrix().prepare()
        assert len(strategy) == 1
        assert plan.driver_cores == frozenset({4, 5, 6, 7})

    def test_same_plan_used_for_every_scenario(self, config, fake_platform):
        config.services = "h1c-h1c,h2c-h2c"
        scenario_orchestrator = MagicMock(spec=ScenarioOrchestrator)
        scenario_orchestrator.payloads = MagicMock()
        matrix = MatrixOrchestrator(
            config, platform=fake_platform, scenario_orchestrator=scenario_orchestrator
        )

        matrix.execute()

        plans = {id(c.args[1]) for c in scenario_orchestrator.execute.call_args_list}
        assert len(plans) == 1
        assert scenario_orchestrator.execute.call_count == 2


def test_dependency_roles_started_backend_first(make_matrix, fake_platform):
    make_matrix().execute()
    assert [name for kind, name in fake_platform.events if kind == "start"] == [
        f"{Role.BACKEND.value}[h1c-h1c]",
        f"{Role.TARGET.value}[h1c-h1c]",
    ]
