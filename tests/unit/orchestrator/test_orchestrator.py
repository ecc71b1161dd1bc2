# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for the scenario state machine."""

from pathlib import Path

import orjson
import pytest

from passperf.common.enums import ProcessState, Role, RunPhaseState, ScenarioState
from passperf.common.exceptions import DriverError, DriverTimeoutError
from passperf.orchestrator import ScenarioOrchestrator, ScenarioSpec

SCENARIO = ScenarioSpec(service="h1c-h1c", payload_size="1KB", concurrency=10)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_orchestrator(config, fake_platform, fake_driver, fake_sampler, sleeps):
    def _make(platform=None, driver=None) -> ScenarioOrchestrator:
        return ScenarioOrchestrator(
            config,
            platform or fake_platform,
            driver=driver or fake_driver,
            sampler_factory=lambda plan: fake_sampler,
            sleep=sleeps.append,
        )

    return _make


@pytest.fixture
def scenario_dir(tmp_path) -> Path:
    return tmp_path / "results" / SCENARIO.label


class TestSuccessfulScenario:
    def test_all_runs_aggregated_after_discard(
        self, make_orchestrator, cpu_plan, scenario_dir, fake_driver
    ):
        result = make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert result.succeeded
        assert result.state == ScenarioState.TORN_DOWN
        assert len(result.runs) == 5
        assert result.statistics.sample_count == 4
        assert result.discarded_runs == 1
        assert result.error is None
        assert len(fake_driver.calls) == 5

    def test_state_transitions(self, make_orchestrator, config, cpu_plan, scenario_dir):
        config.num_runs = 2
        config.discard_first_n = 0

        result = make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert result.transitions == [
            ScenarioState.IDLE,
            ScenarioState.PLANNING_RESOURCES,
            ScenarioState.STARTING_DEPENDENCIES,
            ScenarioState.MEASURING,
            ScenarioState.METRICS_COLLECTED,
            ScenarioState.MEASURING,
            ScenarioState.METRICS_COLLECTED,
            ScenarioState.AGGREGATING,
            ScenarioState.REPORTING_READY,
            ScenarioState.TORN_DOWN,
        ]
        assert result.startup_phases == [
            RunPhaseState.BACKEND_STARTING,
            RunPhaseState.BACKEND_READY,
            RunPhaseState.TARGET_STARTING,
            RunPhaseState.TARGET_READY,
        ]
        assert result.runs[0].phases == [
            RunPhaseState.CONFIGURING,
            RunPhaseState.MEASURING,
            RunPhaseState.METRICS_PARSED,
            RunPhaseState.TORN_DOWN,
        ]

    def test_warmup_then_cooldown_then_measurement(
        self, make_orchestrator, config, cpu_plan, scenario_dir, fake_driver, sleeps
    ):
        config.num_runs = 1
        config.discard_first_n = 0
        config.warmup_seconds = 300
        config.cooldown_seconds = 60

        result = make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert [c["duration_seconds"] for c in fake_driver.calls] == [300, 1]
        assert sleeps == [60]
        assert result.runs[0].phases[:4] == [
            RunPhaseState.CONFIGURING,
            RunPhaseState.WARMING_UP,
            RunPhaseState.COOLING_DOWN,
            RunPhaseState.MEASURING,
        ]
        assert (scenario_dir / "run_0001" / "warmup_h2load.txt").is_file()

    def test_cooldown_between_runs_only(
        self, make_orchestrator, config, cpu_plan, scenario_dir, sleeps
    ):
        config.num_runs = 3
        config.cooldown_seconds = 5

        make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert sleeps == [5, 5]

    def test_driver_targets_profile_with_driver_cores(
        self, make_orchestrator, config, cpu_plan, scenario_dir, fake_driver
    ):
        config.num_runs = 1
        config.discard_first_n = 0

        make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        call = fake_driver.calls[0]
        assert call["target_url"] == "http://localhost:9094/passthrough"
        assert call["concurrency"] == 10
        assert call["force_http1"] is True
        assert call["pinned_cores"] == frozenset({4, 5, 6, 7})
        assert call["payload_path"] == Path(config.samples_dir) / "1KB.txt"

    def test_artifacts_written(self, make_orchestrator, config, cpu_plan, scenario_dir):
        config.num_runs = 1
        config.discard_first_n = 0

        make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert "req/s" in (scenario_dir / "run_0001" / "test_h2load.txt").read_text()
        assert (scenario_dir / "run_0001" / "cpu_usage.csv").is_file()
        run_config = orjson.loads((scenario_dir / "run_config.json").read_bytes())
        assert run_config["scenario"]["service"] == "h1c-h1c"
        assert run_config["cpu_allocation"]["driver_cores"] == [4, 5, 6, 7]
        assert run_config["profile"]["listen_port"] == 9094


class TestRunIndependence:
    def test_failed_run_is_excluded_and_later_runs_continue(
        self, make_orchestrator, driver_factory, raw_report, cpu_plan, scenario_dir
    ):
        driver = driver_factory(
            [
                raw_report(40.0),
                raw_report(100.0),
                DriverError("h2load exited with code 1"),
                raw_report(102.0),
                raw_report(98.0),
            ]
        )

        result = make_orchestrator(driver=driver).execute(SCENARIO, cpu_plan, scenario_dir)

        assert len(result.runs) == 5
        assert [r.success for r in result.runs] == [True, True, False, True, True]
        failed = result.runs[2]
        assert failed.error_kind == "DriverError"
        assert failed.metrics is None
        assert RunPhaseState.MEASUREMENT_FAILED in failed.phases
        # 4 successful runs, first discarded
        assert result.statistics.sample_count == 3
        assert result.statistics.throughput.mean == pytest.approx(100.0)
        assert result.succeeded

    def test_unexpected_error_becomes_failed_run(
        self, make_orchestrator, driver_factory, raw_report, config, cpu_plan, scenario_dir
    ):
        config.num_runs = 2
        config.discard_first_n = 0
        driver = driver_factory([RuntimeError("boom"), raw_report(100.0)])

        result = make_orchestrator(driver=driver).execute(SCENARIO, cpu_plan, scenario_dir)

        assert result.runs[0].error_kind == "RuntimeError"
        assert result.runs[1].success
        assert result.statistics.sample_count == 1

    def test_all_runs_failing_fails_scenario(
        self, make_orchestrator, driver_factory, config, cpu_plan, scenario_dir, fake_platform
    ):
        config.num_runs = 2
        driver = driver_factory([DriverTimeoutError("slow"), DriverTimeoutError("slow")])

        result = make_orchestrator(driver=driver).execute(SCENARIO, cpu_plan, scenario_dir)

        assert not result.succeeded
        assert result.state == ScenarioState.FAILED
        assert result.error_kind == "InsufficientSamplesError"
        assert result.statistics is None
        assert not result.dependency_failure
        assert fake_platform.running == {}

    def test_discard_covering_all_successes_fails_scenario(
        self, make_orchestrator, config, cpu_plan, scenario_dir
    ):
        config.num_runs = 1
        config.discard_first_n = 1

        result = make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert result.state == ScenarioState.FAILED
        assert result.error_kind == "InsufficientSamplesError"


class TestDependencyFailure:
    @pytest.mark.parametrize(
        "platform_kwargs,failed_phase,error_kind",
        [
            ({"die_on_start": {Role.BACKEND}}, RunPhaseState.BACKEND_FAILED, "ProcessDiedError"),
            (
                {"fail_ready": {Role.TARGET}},
                RunPhaseState.TARGET_FAILED,
                "StillStartingTimeoutError",
            ),
        ],
    )
    def test_aborts_before_any_run(
        self,
        make_orchestrator,
        platform_factory,
        fake_driver,
        cpu_plan,
        scenario_dir,
        platform_kwargs,
        failed_phase,
        error_kind,
    ):
        platform = platform_factory(**platform_kwargs)

        result = make_orchestrator(platform=platform).execute(SCENARIO, cpu_plan, scenario_dir)

        assert result.dependency_failure
        assert result.error_kind == error_kind
        assert result.state == ScenarioState.FAILED
        assert result.transitions[-2:] == [ScenarioState.FAILED, ScenarioState.TORN_DOWN]
        assert result.startup_phases[-1] == failed_phase
        assert result.runs == []
        assert fake_driver.calls == []
        assert platform.running == {}

    def test_dependency_health_recorded(
        self, make_orchestrator, platform_factory, cpu_plan, scenario_dir
    ):
        platform = platform_factory(fail_ready={Role.TARGET})

        result = make_orchestrator(platform=platform).execute(SCENARIO, cpu_plan, scenario_dir)

        assert result.dependency_health == {
            "backend[h1c-h1c]": ProcessState.READY,
            "target[h1c-h1c]": ProcessState.FAILED,
        }

    def test_no_dependency_health_on_success(self, make_orchestrator, cpu_plan, scenario_dir):
        result = make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)
        assert result.dependency_health == {}


class TestTeardown:
    def test_processes_stopped_in_reverse_order(
        self, make_orchestrator, config, cpu_plan, scenario_dir, fake_platform
    ):
        config.num_runs = 1
        config.discard_first_n = 0

        make_orchestrator().execute(SCENARIO, cpu_plan, scenario_dir)

        assert fake_platform.events == [
            ("start", "backend[h1c-h1c]"),
            ("start", "target[h1c-h1c]"),
            ("stop", "target[h1c-h1c]"),
            ("stop", "backend[h1c-h1c]"),
        ]

    def test_interrupt_still_tears_down(
        self, make_orchestrator, driver_factory, cpu_plan, scenario_dir, fake_platform
    ):
        driver = driver_factory([KeyboardInterrupt()])

        with pytest.raises(KeyboardInterrupt):
            make_orchestrator(driver=driver).execute(SCENARIO, cpu_plan, scenario_dir)

        assert fake_platform.running == {}

    def test_sampler_stopped_every_run(
        self, make_orchestrator, driver_factory, config, cpu_plan, scenario_dir, fake_sampler
    ):
        config.num_runs = 3
        driver = driver_factory([DriverError("x")])

        make_orchestrator(driver=driver).execute(SCENARIO, cpu_plan, scenario_dir)

        assert fake_sampler.started == fake_sampler.stopped == 3
