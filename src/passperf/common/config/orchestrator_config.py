# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Configuration for a PassPerf orchestrator run.

Every tunable of the engine lives here and is passed explicitly down the call
chain. The same model doubles as the CLI surface of ``passperf test``.
"""

import logging
from pathlib import Path
from typing import Annotated, Any

from cyclopts import Parameter
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from passperf.common.config.config_defaults import (
    LifecycleDefaults,
    MeasurementDefaults,
    MonitoringDefaults,
    OutputDefaults,
    PlatformDefaults,
    ScenarioDefaults,
)
from passperf.common.config.groups import Groups
from passperf.common.enums import ConsistencyBasis, PlatformType

logger = logging.getLogger(__name__)

__all__ = [
    "OrchestratorConfig",
    "parse_comma_separated",
]


def parse_comma_separated(value: Any, option: str) -> list[str]:
    """Split a comma-separated CLI value into stripped, non-empty items.

    Accepts a string ("a,b"), a list of strings (each possibly comma-separated,
    as produced by repeating the option), or a tuple.

    Raises:
        ValueError: If the value is empty or of an unsupported type
    """
    if isinstance(value, str):
        raw_items = [value]
    elif isinstance(value, list | tuple):
        raw_items = [str(item) for item in value]
    else:
        raise ValueError(
            f"Invalid value for {option}: expected a comma-separated string or a list, "
            f"got {type(value).__name__}."
        )

    items = [
        part.strip() for raw in raw_items for part in raw.split(",") if part.strip()
    ]
    if not items:
        raise ValueError(
            f"{option} requires at least one value. "
            f"Provide a comma-separated list, for example: {option} a,b,c"
        )
    return items


class OrchestratorConfig(BaseModel):
    """Complete configuration for a scenario matrix run."""

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("services", "payload_sizes", mode="before")
    @classmethod
    def parse_name_list(cls, v: Any, info) -> list[str]:
        """Parse comma-separated names such as "h1c-h1c,h2c-h2c"."""
        return parse_comma_separated(v, f"--{info.field_name.replace('_', '-')}")

    @field_validator("concurrency", mode="before")
    @classmethod
    def parse_concurrency_list(cls, v: Any) -> list[int]:
        """Parse comma-separated concurrency values from CLI input.

        Converts "50,100" into [50, 100]; a bare integer becomes a one-item list.

        Raises:
            ValueError: If any value is not a positive integer
        """
        if isinstance(v, int) and not isinstance(v, bool):
            values = [v]
        else:
            parts = parse_comma_separated(v, "--concurrency")
            values = []
            for part in parts:
                try:
                    values.append(int(part))
                except ValueError as err:
                    raise ValueError(
                        f"Invalid concurrency list: '{v}'. "
                        f"Failed to parse value: '{part}'. "
                        f"All values must be positive integers (>= 1). "
                        f"Examples: --concurrency 50,100"
                    ) from err

        for value in values:
            if value < 1:
                raise ValueError(
                    f"Invalid concurrency value: {value}. "
                    f"Must be a positive integer (>= 1)."
                )
        return values

    @model_validator(mode="after")
    def warn_on_discard_covering_all_runs(self) -> "OrchestratorConfig":
        if self.effective_discard_count >= self.num_runs:
            logger.warning(
                f"Discarding the first {self.effective_discard_count} run(s) out of "
                f"{self.num_runs} leaves no samples to aggregate. "
                "Increase --runs or lower --discard-first."
            )
        return self

    services: Annotated[
        Any,  # CLI accepts a string, validator converts to list[str]
        Field(
            description="Comma-separated service profile names to test (e.g. h1c-h1c,h2c-h2c).",
        ),
        Parameter(name=("--services", "-s"), group=Groups.SCENARIO_MATRIX),
    ] = list(ScenarioDefaults.SERVICES)

    payload_sizes: Annotated[
        Any,
        Field(
            description="Comma-separated payload size labels (e.g. 1KB,10KB,100KB). "
            "Each label maps to <samples-dir>/<label>.txt.",
        ),
        Parameter(
            name=("--payload-sizes", "--file-sizes", "-f"),
            group=Groups.SCENARIO_MATRIX,
        ),
    ] = list(ScenarioDefaults.PAYLOAD_SIZES)

    concurrency: Annotated[
        Any,
        Field(
            description="Comma-separated concurrency levels (concurrent clients) to test.",
        ),
        Parameter(name=("--concurrency", "--users", "-u"), group=Groups.SCENARIO_MATRIX),
    ] = list(ScenarioDefaults.CONCURRENCY)

    num_runs: Annotated[
        int,
        Field(ge=1, description="Number of statistical runs per scenario."),
        Parameter(name=("--runs", "-r"), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.NUM_RUNS

    discard_first_n: Annotated[
        int,
        Field(
            ge=0,
            description="Number of leading successful runs discarded as warmup outliers.",
        ),
        Parameter(name=("--discard-first",), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.DISCARD_FIRST_N

    no_discard: Annotated[
        bool,
        Field(description="Keep every run, including the first (overrides --discard-first)."),
        Parameter(name=("--no-discard",), negative="", group=Groups.MEASUREMENT),
    ] = False

    warmup_seconds: Annotated[
        float,
        Field(ge=0, description="Warmup load duration in seconds before each measurement."),
        Parameter(name=("--warmup", "-w"), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.WARMUP_SECONDS

    measurement_seconds: Annotated[
        float,
        Field(gt=0, description="Measurement load duration in seconds."),
        Parameter(name=("--duration", "-d"), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.MEASUREMENT_SECONDS

    cooldown_seconds: Annotated[
        float,
        Field(
            ge=0,
            description="Cooldown in seconds after warmup and between consecutive runs.",
        ),
        Parameter(name=("--cooldown",), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.COOLDOWN_SECONDS

    driver_timeout_grace_seconds: Annotated[
        float,
        Field(
            ge=0,
            description="Extra seconds the load driver may take beyond its duration "
            "before the run is failed.",
        ),
        Parameter(name=("--driver-timeout-grace",), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.DRIVER_TIMEOUT_GRACE_SECONDS

    consistency_basis: Annotated[
        ConsistencyBasis,
        Field(
            description="Coefficients of variation that gate the consistency tier: "
            "throughput only, or the worse of throughput and latency.",
        ),
        Parameter(name=("--consistency-basis",), group=Groups.MEASUREMENT),
    ] = MeasurementDefaults.CONSISTENCY_BASIS

    ready_timeout_seconds: Annotated[
        float,
        Field(gt=0, description="Seconds to wait for a dependency port to open."),
        Parameter(name=("--ready-timeout",), group=Groups.LIFECYCLE),
    ] = LifecycleDefaults.READY_TIMEOUT_SECONDS

    ready_poll_interval: Annotated[
        float,
        Field(gt=0, description="Seconds between readiness probes."),
        Parameter(name=("--ready-poll-interval",), group=Groups.LIFECYCLE),
    ] = LifecycleDefaults.READY_POLL_INTERVAL

    settle_seconds: Annotated[
        float,
        Field(ge=0, description="Seconds to let a dependency settle after it became ready."),
        Parameter(name=("--settle",), group=Groups.LIFECYCLE),
    ] = LifecycleDefaults.SETTLE_SECONDS

    stop_grace_seconds: Annotated[
        float,
        Field(
            ge=0,
            description="Seconds to wait after a graceful stop request before force-killing.",
        ),
        Parameter(name=("--stop-grace",), group=Groups.LIFECYCLE),
    ] = LifecycleDefaults.STOP_GRACE_SECONDS

    cpu_sample_interval: Annotated[
        float,
        Field(gt=0, description="Seconds between CPU utilization samples."),
        Parameter(name=("--cpu-sample-interval",), group=Groups.LIFECYCLE),
    ] = MonitoringDefaults.CPU_SAMPLE_INTERVAL

    max_cpu_threshold: Annotated[
        float,
        Field(
            gt=0,
            le=100,
            description="Warn when a role's sampled CPU utilization exceeds this percentage.",
        ),
        Parameter(name=("--max-cpu-threshold",), group=Groups.LIFECYCLE),
    ] = MonitoringDefaults.MAX_CPU_THRESHOLD

    platform: Annotated[
        PlatformType,
        Field(description="Where the service under test and its backend are run."),
        Parameter(name=("--platform",), group=Groups.PLATFORM),
    ] = PlatformDefaults.PLATFORM

    available_cores: Annotated[
        int | None,
        Field(
            ge=1,
            description="Override the number of usable CPU cores (auto-detected by default).",
        ),
        Parameter(name=("--available-cores",), group=Groups.PLATFORM),
    ] = None

    target_host: Annotated[
        str | None,
        Field(
            description="Host the load driver targets. Defaults to localhost for the local "
            "platform and the passthrough container name for Docker.",
        ),
        Parameter(name=("--target-host",), group=Groups.PLATFORM),
    ] = None

    target_path: Annotated[
        str,
        Field(description="URL path of the service under test."),
        Parameter(name=("--target-path",), group=Groups.PLATFORM),
    ] = PlatformDefaults.TARGET_PATH

    target_command: Annotated[
        str,
        Field(
            description="Local platform command template for the service under test. "
            "Placeholders are filled from the service profile.",
        ),
        Parameter(name=("--target-command",), group=Groups.PLATFORM),
    ] = PlatformDefaults.TARGET_COMMAND

    backend_command: Annotated[
        str,
        Field(description="Local platform command template for the backend."),
        Parameter(name=("--backend-command",), group=Groups.PLATFORM),
    ] = PlatformDefaults.BACKEND_COMMAND

    build_commands: Annotated[
        list[str],
        Field(description="Local platform commands executed by 'passperf build'."),
        Parameter(name=("--build-command",), group=Groups.PLATFORM),
    ] = list(PlatformDefaults.BUILD_COMMANDS)

    compose_file: Annotated[
        Path,
        Field(description="Docker Compose file used by the docker platform."),
        Parameter(name=("--compose-file",), group=Groups.PLATFORM),
    ] = PlatformDefaults.COMPOSE_FILE

    driver_binary: Annotated[
        str,
        Field(description="Load driver executable."),
        Parameter(name=("--driver-binary",), group=Groups.PLATFORM),
    ] = PlatformDefaults.DRIVER_BINARY

    results_dir: Annotated[
        Path,
        Field(description="Directory for raw reports, CPU samples and aggregate results."),
        Parameter(name=("--results-dir",), group=Groups.OUTPUT),
    ] = OutputDefaults.RESULTS_DIR

    samples_dir: Annotated[
        Path,
        Field(description="Directory holding payload files named <label>.txt."),
        Parameter(name=("--samples-dir",), group=Groups.OUTPUT),
    ] = OutputDefaults.SAMPLES_DIR

    log_level: Annotated[
        str,
        Field(description="Log level (DEBUG, INFO, WARNING, ERROR)."),
        Parameter(name=("--log-level",), group=Groups.OUTPUT),
    ] = OutputDefaults.LOG_LEVEL

    verbose: Annotated[
        bool,
        Field(description="Shortcut for --log-level DEBUG."),
        Parameter(name=("--verbose", "-v"), negative="", group=Groups.OUTPUT),
    ] = False

    @property
    def effective_discard_count(self) -> int:
        """Warmup discard count after applying --no-discard."""
        return 0 if self.no_discard else self.discard_first_n

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level.upper()
