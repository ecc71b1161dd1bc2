# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
import shutil
import sys
from pathlib import Path

from passperf.common.config import OrchestratorConfig, parse_comma_separated
from passperf.common.exceptions import (
    ConfigurationError,
    PassPerfError,
    ResourceAllocationError,
)
from passperf.common.logging import setup_rich_logging
from passperf.orchestrator.models import ScenarioResult

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


def determine_exit_code(results: list[ScenarioResult]) -> int:
    """0 when at least one scenario produced statistics and none aborted at
    dependency start, 1 otherwise."""
    if any(r.dependency_failure for r in results):
        return EXIT_FAILURE
    if any(r.succeeded for r in results):
        return EXIT_SUCCESS
    return EXIT_FAILURE


def run_matrix(config: OrchestratorConfig) -> None:
    """Run the scenario matrix, export the results and exit with the matrix outcome."""
    from passperf.orchestrator import MatrixOrchestrator

    setup_rich_logging(config.effective_log_level, log_dir=config.results_dir)

    logger.info("=" * 80)
    logger.info("Starting PassPerf Scenario Matrix")
    logger.info(f"  Services: {', '.join(config.services)}")
    logger.info(f"  Payload sizes: {', '.join(config.payload_sizes)}")
    logger.info(f"  Concurrency: {', '.join(str(c) for c in config.concurrency)}")
    logger.info(
        f"  Runs per scenario: {config.num_runs} "
        f"(discarding first {config.effective_discard_count})"
    )
    logger.info(
        f"  Warmup: {config.warmup_seconds:g}s, duration: {config.measurement_seconds:g}s, "
        f"cooldown: {config.cooldown_seconds:g}s"
    )
    logger.info(f"  Platform: {config.platform.value}")
    logger.info("=" * 80)

    try:
        orchestrator = MatrixOrchestrator(config)
        results = orchestrator.execute()
    except (ConfigurationError, ResourceAllocationError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(EXIT_CONFIGURATION_ERROR)
    except Exception:
        logger.exception("Error executing scenario matrix")
        raise

    _export_results(results, config)
    _print_matrix_summary(results)
    sys.exit(determine_exit_code(results))


def _run_metadata(config: OrchestratorConfig) -> dict:
    return {
        "platform": config.platform.value,
        "num_runs": config.num_runs,
        "discard_first_n": config.effective_discard_count,
        "warmup_seconds": config.warmup_seconds,
        "measurement_seconds": config.measurement_seconds,
        "cooldown_seconds": config.cooldown_seconds,
        "consistency_basis": config.consistency_basis.value,
    }


def _export_results(results: list[ScenarioResult], config: OrchestratorConfig) -> None:
    from passperf.exporters.aggregate import (
        AggregateExporterConfig,
        MatrixComparisonCsvExporter,
        MatrixReportMarkdownExporter,
        MatrixSummaryJsonExporter,
        ScenarioSummaryCsvExporter,
        ScenarioSummaryJsonExporter,
    )
    from passperf.orchestrator import FixedTrialsStrategy

    metadata = _run_metadata(config)
    base_dir = Path(config.results_dir)
    trials = FixedTrialsStrategy(num_runs=config.num_runs)

    async def export_artifacts() -> list[Path]:
        """Export per-scenario and matrix artifacts concurrently.

        Returns:
            Paths of every written file
        """
        exporters = []
        for result in results:
            if result.artifacts_path is None:
                continue
            aggregate_dir = trials.get_aggregate_path(result.artifacts_path)
            await asyncio.to_thread(aggregate_dir.mkdir, parents=True, exist_ok=True)
            exp_config = AggregateExporterConfig(
                results=[result], output_dir=aggregate_dir, metadata=metadata
            )
            exporters.append(ScenarioSummaryJsonExporter(exp_config))
            exporters.append(ScenarioSummaryCsvExporter(exp_config))

        matrix_config = AggregateExporterConfig(
            results=results, output_dir=base_dir, metadata=metadata
        )
        exporters.append(MatrixComparisonCsvExporter(matrix_config))
        exporters.append(MatrixSummaryJsonExporter(matrix_config))
        exporters.append(MatrixReportMarkdownExporter(matrix_config))

        return list(await asyncio.gather(*(e.export() for e in exporters)))

    try:
        paths = asyncio.run(export_artifacts())
    except OSError:
        logger.exception("Error writing result artifacts")
        raise

    for path in paths:
        logger.debug(f"Wrote {path}")
    logger.info(f"Results written to: {base_dir}")


def _print_matrix_summary(results: list[ScenarioResult]) -> None:
    """Print the per-scenario outcome of the matrix."""
    succeeded = [r for r in results if r.succeeded]
    failed = [r for r in results if not r.succeeded]

    logger.info("")
    logger.info("=" * 80)
    logger.info(f"MATRIX SUMMARY: {len(succeeded)}/{len(results)} scenarios successful")
    logger.info("=" * 80)

    for result in succeeded:
        stats = result.statistics
        logger.info("")
        logger.info(f"{result.scenario.label}:")
        logger.info(
            f"  Throughput: {stats.throughput.mean:.2f} req/s "
            f"(std {stats.throughput.std:.2f}, CV {stats.throughput.cv:.2f}%)"
        )
        logger.info(
            f"  Latency:    {stats.latency.mean:.2f} ms "
            f"(std {stats.latency.std:.2f}, CV {stats.latency.cv:.2f}%)"
        )
        logger.info(f"  Error rate: {stats.error_rate.mean:.2f}%")
        logger.info(
            f"  Consistency: {stats.consistency_tier.value} "
            f"({stats.sample_count} samples, {len(result.failed_runs)} failed run(s))"
        )

    if failed:
        logger.info("")
        for result in failed:
            logger.error(
                f"{result.scenario.label} FAILED: "
                f"{result.error_kind or 'Error'}: {result.error or 'no statistics produced'}"
            )

    logger.info("")
    logger.info("=" * 80)


def run_build(config: OrchestratorConfig) -> None:
    """Build the images or binaries used by the selected platform."""
    from passperf.lifecycle import create_platform

    setup_rich_logging(config.effective_log_level)
    platform = create_platform(config)
    try:
        platform.build()
    except PassPerfError as e:
        logger.error(f"Build failed: {e}")
        sys.exit(EXIT_FAILURE)
    logger.info("Build complete")


def run_cleanup(config: OrchestratorConfig, remove_results: bool = False) -> None:
    """Stop leftover processes or containers and optionally delete the results."""
    from passperf.lifecycle import create_platform

    setup_rich_logging(config.effective_log_level)
    platform = create_platform(config)
    try:
        platform.cleanup()
    except PassPerfError as e:
        logger.error(f"Cleanup failed: {e}")
        sys.exit(EXIT_FAILURE)

    if remove_results:
        results_dir = Path(config.results_dir)
        if results_dir.exists():
            logger.info(f"Removing results directory {results_dir}")
            shutil.rmtree(results_dir)
    logger.info("Cleanup complete")


def run_samples(config: OrchestratorConfig, sizes: str | None = None) -> None:
    """Generate payload files for the given size labels (standard sizes by default)."""
    from passperf.driver import STANDARD_PAYLOAD_SIZES, PayloadStore

    setup_rich_logging(config.effective_log_level)
    labels = (
        parse_comma_separated(sizes, "--sizes") if sizes else list(STANDARD_PAYLOAD_SIZES)
    )
    store = PayloadStore(config.samples_dir)
    try:
        paths = store.ensure_all(labels)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(EXIT_CONFIGURATION_ERROR)
    for label, path in paths.items():
        logger.info(f"{label}: {path}")
