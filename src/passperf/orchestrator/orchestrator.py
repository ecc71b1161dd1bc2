# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Scenario and matrix orchestration for PassPerf load tests."""

import logging
import time
from collections.abc import Callable
from pathlib import Path

import orjson

from passperf.common.config import OrchestratorConfig
from passperf.common.enums import Role, RunPhaseState, ScenarioState
from passperf.common.exceptions import (
    AggregationError,
    DependencyStartError,
    MeasurementError,
)
from passperf.driver import H2LoadDriver, LoadDriverProtocol, PayloadStore
from passperf.lifecycle import (
    ProcessLifecycleController,
    ProcessPlatformProtocol,
    create_platform,
)
from passperf.metrics import MetricsExtractor, RunMetrics
from passperf.monitoring import CPUUsageSampler, assess_cpu_usage
from passperf.orchestrator.aggregation import StatisticalAggregator
from passperf.orchestrator.models import RunResult, ScenarioResult, ScenarioSpec
from passperf.orchestrator.strategies import FixedTrialsStrategy, ScenarioMatrixStrategy
from passperf.profiles import DEFAULT_REGISTRY, ServiceProfile, ServiceProfileRegistry
from passperf.resources import CPUAllocationPlan, CPUAllocationPlanner

logger = logging.getLogger(__name__)

__all__ = [
    "MatrixOrchestrator",
    "ScenarioOrchestrator",
]

WARMUP_REPORT_NAME = "warmup_h2load.txt"
TEST_REPORT_NAME = "test_h2load.txt"
CPU_USAGE_NAME = "cpu_usage.csv"
RUN_CONFIG_NAME = "run_config.json"


class ScenarioOrchestrator:
    """Drives one scenario through its state machine.

    IDLE -> PLANNING_RESOURCES -> STARTING_DEPENDENCIES ->
    (WARMING_UP -> COOLING_DOWN -> MEASURING -> METRICS_COLLECTED) per run ->
    AGGREGATING -> REPORTING_READY -> TORN_DOWN, with FAILED reachable from any
    non-terminal state.

    A dependency that fails to become ready aborts the scenario before any run.
    A failed run is recorded and excluded from aggregation; the remaining runs
    still execute. Dependencies are always torn down before ``execute`` returns.
    """

    def __init__(
        self,
        config: OrchestratorConfig,
        platform: ProcessPlatformProtocol,
        registry: ServiceProfileRegistry = DEFAULT_REGISTRY,
        driver: LoadDriverProtocol | None = None,
        extractor: MetricsExtractor | None = None,
        aggregator: StatisticalAggregator | None = None,
        payloads: PayloadStore | None = None,
        sampler_factory: Callable[[CPUAllocationPlan], CPUUsageSampler] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.platform = platform
        self.registry = registry
        self.driver = driver or H2LoadDriver(platform, config)
        self.extractor = extractor or MetricsExtractor()
        self.aggregator = aggregator or StatisticalAggregator(config.consistency_basis)
        self.payloads = payloads or PayloadStore(config.samples_dir)
        self.sampler_factory = sampler_factory or (
            lambda plan: CPUUsageSampler(plan, config.max_cpu_threshold)
        )
        self._sleep = sleep

    def execute(
        self, scenario: ScenarioSpec, plan: CPUAllocationPlan, base_dir: Path
    ) -> ScenarioResult:
        """Execute every run of a scenario and aggregate the results.

        Args:
            scenario: Scenario to execute
            plan: CPU allocation for the three roles
            base_dir: Directory for this scenario's artifacts

        Returns:
            ScenarioResult; scenario-level failures are recorded on it, not raised
        """
        base_dir = Path(base_dir)
        result = ScenarioResult(scenario=scenario, artifacts_path=base_dir)
        result.transitions.append(ScenarioState.IDLE)
        controller = ProcessLifecycleController(self.platform, self.config)
        strategy = FixedTrialsStrategy(
            num_runs=self.config.num_runs,
            cooldown_seconds=self.config.cooldown_seconds,
            discard_first_n=self.config.effective_discard_count,
        )

        try:
            self._transition(result, ScenarioState.PLANNING_RESOURCES)
            logger.info(f"[{scenario.label}] {plan.describe()}")
            profile = self.registry.resolve(scenario.service)
            payload_path = self.payloads.ensure(scenario.payload_size)
            self._write_run_config(base_dir, scenario, profile, plan)

            self._transition(result, ScenarioState.STARTING_DEPENDENCIES)
            self._start_dependencies(controller, profile, plan, result)

            self._execute_runs(scenario, profile, plan, payload_path, base_dir, strategy, result)

            self._transition(result, ScenarioState.AGGREGATING)
            self._aggregate(strategy, result)
            self._transition(result, ScenarioState.REPORTING_READY)
        except DependencyStartError as e:
            result.dependency_failure = True
            self._record_dependency_health(controller, result)
            self._fail(result, e)
        except AggregationError as e:
            self._fail(result, e)
        except Exception as e:
            logger.exception(f"[{scenario.label}] Unexpected error")
            self._fail(result, e)
        finally:
            controller.stop_all()
            failed = result.state == ScenarioState.FAILED
            self._transition(result, ScenarioState.TORN_DOWN)
            if failed:
                result.state = ScenarioState.FAILED

        return result

    def _transition(self, result: ScenarioResult, state: ScenarioState) -> None:
        logger.debug(f"[{result.scenario.label}] {result.state.value} -> {state.value}")
        result.state = state
        result.transitions.append(state)

    def _fail(self, result: ScenarioResult, error: Exception) -> None:
        if result.error is None:
            result.error = str(error)
            result.error_kind = type(error).__name__
        logger.error(f"[{result.scenario.label}] Scenario failed: {error}")
        self._transition(result, ScenarioState.FAILED)

    def _record_dependency_health(
        self, controller: ProcessLifecycleController, result: ScenarioResult
    ) -> None:
        for health in controller.health_report():
            result.dependency_health[health.name] = health.state
            if not health.healthy:
                logger.error(
                    f"[{result.scenario.label}] {health.name} is {health.state.value}"
                )

    def _start_dependencies(
        self,
        controller: ProcessLifecycleController,
        profile: ServiceProfile,
        plan: CPUAllocationPlan,
        result: ScenarioResult,
    ) -> None:
        """Start the backend, then the target, waiting for each to become ready."""
        phases = result.startup_phases
        for role, starting, ready, failed in (
            (
                Role.BACKEND,
                RunPhaseState.BACKEND_STARTING,
                RunPhaseState.BACKEND_READY,
                RunPhaseState.BACKEND_FAILED,
            ),
            (
                Role.TARGET,
                RunPhaseState.TARGET_STARTING,
                RunPhaseState.TARGET_READY,
                RunPhaseState.TARGET_FAILED,
            ),
        ):
            phases.append(starting)
            try:
                handle = controller.start(role, profile, plan)
                controller.await_ready(handle)
            except DependencyStartError:
                phases.append(failed)
                raise
            phases.append(ready)

    def _execute_runs(
        self,
        scenario: ScenarioSpec,
        profile: ServiceProfile,
        plan: CPUAllocationPlan,
        payload_path: Path,
        base_dir: Path,
        strategy: FixedTrialsStrategy,
        result: ScenarioResult,
    ) -> None:
        run_index = 0
        should_continue = strategy.should_continue(result.runs)

        while should_continue:
            label = strategy.get_run_label(run_index)
            logger.info(
                f"[{scenario.label}] [{run_index + 1}/{strategy.num_runs}] Executing {label}..."
            )

            run = self._execute_single_run(
                scenario, profile, plan, payload_path, base_dir, strategy, run_index, result
            )
            result.runs.append(run)

            if run.success:
                logger.info(
                    f"[{label}] completed: {run.metrics.throughput_req_per_sec:.2f} req/s, "
                    f"{run.metrics.mean_latency_ms:.2f} ms mean latency, "
                    f"{run.metrics.error_rate_percent:.2f}% errors"
                )
            else:
                logger.error(f"[{label}] failed: {run.error}")

            run_index += 1
            should_continue = strategy.should_continue(result.runs)

            # Apply cooldown only if there's another run coming
            if should_continue:
                cooldown = strategy.get_cooldown_seconds()
                if cooldown > 0:
                    logger.info(f"Applying cooldown between runs: {cooldown:g}s")
                    self._sleep(cooldown)

        successful = len(result.successful_runs)
        logger.info(
            f"[{scenario.label}] All runs complete: {successful}/{len(result.runs)} successful"
        )

    def _execute_single_run(
        self,
        scenario: ScenarioSpec,
        profile: ServiceProfile,
        plan: CPUAllocationPlan,
        payload_path: Path,
        base_dir: Path,
        strategy: FixedTrialsStrategy,
        run_index: int,
        result: ScenarioResult,
    ) -> RunResult:
        """Execute warmup, cooldown and measurement for one run.

        Any error is caught here and turned into a failed RunResult so that the
        remaining runs of the scenario still execute.
        """
        label = strategy.get_run_label(run_index)
        artifacts_path = strategy.get_run_path(base_dir, run_index)
        phases = [RunPhaseState.CONFIGURING]
        metrics: RunMetrics | None = None
        error: Exception | None = None

        host = self.config.target_host or self.platform.default_target_host
        target_url = profile.target_url(host, self.config.target_path)
        sampler = self.sampler_factory(plan)
        sampler_handle = sampler.start(self.config.cpu_sample_interval)

        try:
            artifacts_path.mkdir(parents=True, exist_ok=True)

            if self.config.warmup_seconds > 0:
                self._transition(result, ScenarioState.WARMING_UP)
                phases.append(RunPhaseState.WARMING_UP)
                warmup_report = self.driver.run(
                    target_url=target_url,
                    concurrency=scenario.concurrency,
                    duration_seconds=self.config.warmup_seconds,
                    payload_path=payload_path,
                    force_http1=profile.force_http1,
                    pinned_cores=plan.driver_cores,
                )
                warmup_report.write(artifacts_path / WARMUP_REPORT_NAME)

                self._transition(result, ScenarioState.COOLING_DOWN)
                phases.append(RunPhaseState.COOLING_DOWN)
                if self.config.cooldown_seconds > 0:
                    logger.info(f"[{label}] Cooling down for {self.config.cooldown_seconds:g}s")
                    self._sleep(self.config.cooldown_seconds)

            self._transition(result, ScenarioState.MEASURING)
            phases.append(RunPhaseState.MEASURING)
            report = self.driver.run(
                target_url=target_url,
                concurrency=scenario.concurrency,
                duration_seconds=self.config.measurement_seconds,
                payload_path=payload_path,
                force_http1=profile.force_http1,
                pinned_cores=plan.driver_cores,
            )
            report.write(artifacts_path / TEST_REPORT_NAME)

            metrics = self.extractor.parse(report, label)
            phases.append(RunPhaseState.METRICS_PARSED)
            self._transition(result, ScenarioState.METRICS_COLLECTED)
        except MeasurementError as e:
            error = e
            phases.append(RunPhaseState.MEASUREMENT_FAILED)
        except Exception as e:
            logger.exception(f"Error executing run {label}")
            error = e
            phases.append(RunPhaseState.MEASUREMENT_FAILED)
        finally:
            series = sampler.stop(sampler_handle)
            cpu_samples = series.role_averages()
            try:
                series.write_csv(artifacts_path / CPU_USAGE_NAME)
            except OSError as e:
                logger.warning(f"[{label}] Could not write CPU samples: {e}")
            assess_cpu_usage(cpu_samples, label)
            phases.append(RunPhaseState.TORN_DOWN)

        return RunResult(
            label=label,
            run_index=run_index,
            success=error is None,
            metrics=metrics,
            error=str(error) if error is not None else None,
            error_kind=type(error).__name__ if error is not None else None,
            phases=phases,
            cpu_samples=cpu_samples,
            artifacts_path=artifacts_path,
        )

    def _aggregate(self, strategy: FixedTrialsStrategy, result: ScenarioResult) -> None:
        metrics = [r.metrics for r in result.successful_runs]
        discard = strategy.get_discard_count()
        result.statistics = self.aggregator.aggregate(metrics, discard)
        result.discarded_runs = min(discard, len(metrics))

        stats = result.statistics
        logger.info(
            f"[{result.scenario.label}] {stats.sample_count} samples: "
            f"throughput {stats.throughput.mean:.2f} req/s (CV {stats.throughput.cv:.2f}%), "
            f"latency {stats.latency.mean:.2f} ms (CV {stats.latency.cv:.2f}%), "
            f"consistency {stats.consistency_tier.value}"
        )

    def _write_run_config(
        self,
        base_dir: Path,
        scenario: ScenarioSpec,
        profile: ServiceProfile,
        plan: CPUAllocationPlan,
    ) -> None:
        """Write the effective configuration for debugging and reproducibility."""
        base_dir.mkdir(parents=True, exist_ok=True)
        config_data = {
            "scenario": scenario.model_dump(mode="json"),
            "profile": profile.model_dump(mode="json"),
            "cpu_allocation": {
                "tier": plan.tier.value,
                "available_cores": plan.available_cores,
                "target_cores": sorted(plan.target_cores),
                "backend_cores": sorted(plan.backend_cores),
                "driver_cores": sorted(plan.driver_cores),
            },
            "config": self.config.model_dump(mode="json"),
        }
        with open(base_dir / RUN_CONFIG_NAME, "wb") as f:
            f.write(orjson.dumps(config_data, option=orjson.OPT_INDENT_2))


class MatrixOrchestrator:
    """Runs every scenario of the service x payload x concurrency matrix in sequence.

    Configuration and resource problems (unknown service, bad payload label,
    too few cores) are raised before any process is started. Once the matrix is
    running, a failed scenario is recorded and the next scenario still runs.
    Scenario i+1 only starts after scenario i has been torn down.
    """

    def __init__(
        self,
        config: OrchestratorConfig,
        platform: ProcessPlatformProtocol | None = None,
        registry: ServiceProfileRegistry = DEFAULT_REGISTRY,
        planner: CPUAllocationPlanner | None = None,
        scenario_orchestrator: ScenarioOrchestrator | None = None,
    ) -> None:
        self.config = config
        self.base_dir = Path(config.results_dir)
        self.platform = platform or create_platform(config)
        self.registry = registry
        self.planner = planner or CPUAllocationPlanner()
        self.scenario_orchestrator = scenario_orchestrator or ScenarioOrchestrator(
            config, self.platform, registry=registry
        )
        self.plan: CPUAllocationPlan | None = None

    def prepare(self) -> tuple[ScenarioMatrixStrategy, CPUAllocationPlan]:
        """Validate the matrix and compute the CPU plan without starting anything.

        Raises:
            ConfigurationError: For unknown services, unusable payload labels or
                malformed dependency command templates
            ResourceAllocationError: If too few cores are available
        """
        strategy = ScenarioMatrixStrategy(
            self.config.services, self.config.payload_sizes, self.config.concurrency
        )
        profiles = self.registry.resolve_all(self.config.services)
        for profile in profiles:
            for role in (Role.BACKEND, Role.TARGET):
                self.platform.command_for(role, profile)
        self.scenario_orchestrator.payloads.ensure_all(self.config.payload_sizes)
        self.plan = self.planner.plan(self.platform.available_cores())
        return strategy, self.plan

    def execute(self) -> list[ScenarioResult]:
        """Execute all scenarios.

        Returns:
            List of ScenarioResult, one per scenario, in matrix order
        """
        strategy, plan = self.prepare()
        results: list[ScenarioResult] = []
        index = 0

        logger.info(
            f"Starting scenario matrix: {len(strategy)} scenario(s), "
            f"{self.config.num_runs} run(s) each"
        )

        while strategy.should_continue(results):
            scenario = strategy.get_next_scenario(results)
            path = strategy.get_scenario_path(self.base_dir, index)
            logger.info(f"[{index + 1}/{len(strategy)}] Executing scenario {scenario.label}")

            result = self.scenario_orchestrator.execute(scenario, plan, path)
            results.append(result)

            if result.succeeded:
                logger.info(f"[{index + 1}/{len(strategy)}] {scenario.label} completed")
            else:
                logger.error(
                    f"[{index + 1}/{len(strategy)}] {scenario.label} failed: {result.error}"
                )
            index += 1

        succeeded = sum(1 for r in results if r.succeeded)
        logger.info(f"All scenarios complete: {succeeded}/{len(results)} successful")
        return results
