# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for PassPerf.

The hierarchy mirrors the blast radius of each failure:

- ConfigurationError / ResourceAllocationError: fatal for the whole matrix,
  raised before any process is started.
- DependencyStartError: fatal for the current scenario only.
- MeasurementError: fatal for the current run only, the sample is excluded.
- AggregationError: the scenario is marked failed, the matrix continues.
"""


class PassPerfError(Exception):
    """Base class for all PassPerf errors."""


class ConfigurationError(PassPerfError):
    """Invalid configuration (unknown service name, malformed arguments)."""


class ServiceNotFoundError(ConfigurationError):
    """Service name is not present in the profile registry."""

    def __init__(self, name: str, valid_names: list[str]) -> None:
        self.name = name
        self.valid_names = list(valid_names)
        super().__init__(
            f"Unknown service: '{name}'. "
            f"Available services: {', '.join(self.valid_names)}"
        )


class PayloadNotFoundError(ConfigurationError):
    """Payload label cannot be mapped to a payload file."""


class ResourceAllocationError(PassPerfError):
    """Not enough resources to isolate the roles of a scenario."""


class InsufficientResourcesError(ResourceAllocationError):
    """Fewer usable CPU cores than the isolation floor."""

    def __init__(self, available_cores: int, required_cores: int) -> None:
        self.available_cores = available_cores
        self.required_cores = required_cores
        super().__init__(
            f"Minimum {required_cores} cores required for proper isolation. "
            f"Available: {available_cores}"
        )


class DependencyStartError(PassPerfError):
    """A dependency process (backend or target) failed to become ready."""


class StartError(DependencyStartError):
    """The platform could not launch the process at all."""


class ProcessDiedError(DependencyStartError):
    """The process exited before it became ready."""

    def __init__(self, name: str, exit_code: int | None = None) -> None:
        self.process_name = name
        self.exit_code = exit_code
        super().__init__(
            f"{name} process died unexpectedly before becoming ready"
            + (f" (exit code {exit_code})" if exit_code is not None else "")
        )


class StillStartingTimeoutError(DependencyStartError):
    """The process is alive but did not become ready within the timeout."""

    def __init__(self, name: str, port: int, timeout: float) -> None:
        self.process_name = name
        self.port = port
        self.timeout = timeout
        super().__init__(
            f"{name} is still running but port {port} did not open "
            f"within {timeout:g} seconds"
        )


class MeasurementError(PassPerfError):
    """A single measurement run failed; the run is excluded from aggregation."""


class DriverError(MeasurementError):
    """The load driver invocation failed."""


class DriverTimeoutError(DriverError):
    """The load driver did not finish within its bounded timeout."""


class ReportParseError(MeasurementError):
    """The load driver report could not be parsed at all."""


class AggregationError(PassPerfError):
    """Statistics could not be computed for a scenario."""


class InsufficientSamplesError(AggregationError):
    """No samples remain after failed runs and warmup discards are removed."""

    def __init__(self, total_samples: int, discard_first_n: int) -> None:
        self.total_samples = total_samples
        self.discard_first_n = discard_first_n
        super().__init__(
            "No usable samples remain for aggregation. "
            f"Collected samples: {total_samples}, discarded warmup samples: "
            f"{min(discard_first_n, total_samples)}. "
            "Check the run errors above, or lower --discard-first / increase --runs."
        )


class BuildError(PassPerfError):
    """A build command for the service artifacts failed."""
