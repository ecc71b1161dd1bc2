# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Command line interface for PassPerf."""

from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

from passperf import __version__
from passperf.common.config import OrchestratorConfig, PlatformDefaults
from passperf.common.enums import PlatformType

app = App(
    name="passperf",
    help="Statistical load testing of passthrough services with CPU isolation.",
    version=__version__,
)


@app.command(name="test")
def test(
    config: Annotated[OrchestratorConfig | None, Parameter(name="*")] = None,
) -> None:
    """Run the service x payload x concurrency matrix and report statistics.

    Examples:
        passperf test --services h1c-h1c,h2c-h2c --payload-sizes 1KB,10KB --concurrency 50,100
        passperf test --platform local --runs 3 --warmup 30 --duration 60
    """
    from passperf.cli_runner import run_matrix

    run_matrix(config or OrchestratorConfig())


@app.command(name="build")
def build(
    platform: PlatformType = PlatformDefaults.PLATFORM,
    compose_file: Path | None = None,
    verbose: Annotated[bool, Parameter(name=("--verbose", "-v"), negative="")] = False,
) -> None:
    """Build the service under test, the backend and the load driver.

    Args:
        platform: Platform to build for.
        compose_file: Docker Compose file (docker platform only).
        verbose: Enable debug logging.
    """
    from passperf.cli_runner import run_build

    config = OrchestratorConfig(platform=platform, verbose=verbose)
    if compose_file is not None:
        config.compose_file = compose_file
    run_build(config)


@app.command(name="cleanup")
def cleanup(
    platform: PlatformType = PlatformDefaults.PLATFORM,
    compose_file: Path | None = None,
    results_dir: Path | None = None,
    results: Annotated[bool, Parameter(name=("--results",), negative="")] = False,
) -> None:
    """Stop everything PassPerf started and optionally delete the results.

    Args:
        platform: Platform whose processes or containers are cleaned up.
        compose_file: Docker Compose file (docker platform only).
        results_dir: Results directory (holds the local platform's pid files).
        results: Also delete the results directory.
    """
    from passperf.cli_runner import run_cleanup

    config = OrchestratorConfig(platform=platform)
    if compose_file is not None:
        config.compose_file = compose_file
    if results_dir is not None:
        config.results_dir = results_dir
    run_cleanup(config, remove_results=results)


@app.command(name="samples")
def samples(
    samples_dir: Path | None = None,
    sizes: str | None = None,
) -> None:
    """Generate payload files for the standard (or given) size labels.

    Args:
        samples_dir: Directory for the payload files.
        sizes: Comma-separated size labels, e.g. 1KB,10KB,100KB.
    """
    from passperf.cli_runner import run_samples

    config = OrchestratorConfig()
    if samples_dir is not None:
        config.samples_dir = samples_dir
    run_samples(config, sizes)


@app.default
def _default() -> None:
    app.help_print()


@app.command(name="help")
def help_() -> None:
    """Show usage information."""
    app.help_print()


def main() -> None:
    app()
