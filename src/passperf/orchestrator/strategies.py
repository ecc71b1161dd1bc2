# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Execution strategies for repeated runs and scenario matrices."""

import itertools
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from passperf.orchestrator.models import RunResult, ScenarioResult, ScenarioSpec

logger = logging.getLogger(__name__)

__all__ = [
    "ExecutionStrategy",
    "FixedTrialsStrategy",
    "ScenarioMatrixStrategy",
    "sanitize_label",
]


def sanitize_label(label: str) -> str:
    """Sanitize label to prevent path traversal.

    Args:
        label: Raw label string

    Returns:
        Sanitized label safe for filesystem paths
    """
    # Remove any path separators and parent directory references
    sanitized = re.sub(r"[/\\]|\.\.", "", label)
    # Remove any other potentially dangerous characters
    sanitized = re.sub(r'[<>:"|?*]', "", sanitized)
    return sanitized


class ExecutionStrategy(ABC):
    """Base class for run execution strategies.

    Strategies decide:
    1. Whether to run another measurement
    2. How to label runs for artifact organization
    3. Where to store artifacts (path structure)
    4. Cooldown duration between runs
    5. How many leading runs are warmup outliers
    """

    @abstractmethod
    def should_continue(self, results: list[RunResult]) -> bool:
        """Decide whether to run another measurement.

        Args:
            results: Results from runs executed so far

        Returns:
            True if should run another measurement, False to stop
        """
        pass

    @abstractmethod
    def get_run_label(self, run_index: int) -> str:
        """Generate label for run at given index (e.g., "run_0001")."""
        pass

    @abstractmethod
    def get_cooldown_seconds(self) -> float:
        """Return cooldown duration between runs."""
        pass

    @abstractmethod
    def get_discard_count(self) -> int:
        """Return how many leading successful runs aggregation drops."""
        pass

    @abstractmethod
    def get_run_path(self, base_dir: Path, run_index: int) -> Path:
        """Build path for a run's artifacts."""
        pass

    @abstractmethod
    def get_aggregate_path(self, base_dir: Path) -> Path:
        """Build path for aggregate artifacts."""
        pass


class FixedTrialsStrategy(ExecutionStrategy):
    """Strategy for a fixed number of identical measurement runs.

    Every run repeats warmup, cooldown and measurement against the same
    processes; the variance across runs is what aggregation quantifies.

    Attributes:
        num_runs: Number of runs to execute
        cooldown_seconds: Sleep duration between runs
        discard_first_n: Leading successful runs treated as warmup outliers
    """

    def __init__(
        self,
        num_runs: int,
        cooldown_seconds: float = 0.0,
        discard_first_n: int = 0,
    ) -> None:
        """Initialize FixedTrialsStrategy.

        Raises:
            ValueError: If num_runs < 1, cooldown_seconds < 0 or discard_first_n < 0
        """
        if num_runs < 1:
            raise ValueError(
                f"Invalid run count: {num_runs}. At least one run is required."
            )
        if cooldown_seconds < 0:
            raise ValueError(
                f"Invalid cooldown duration: {cooldown_seconds} seconds. "
                f"Cooldown must be non-negative (0 or greater). "
                f"Use 0 for no cooldown, or a positive value like 60 for a one-minute pause between runs."
            )
        if discard_first_n < 0:
            raise ValueError(
                f"Invalid discard count: {discard_first_n}. Must be 0 or greater."
            )

        self.num_runs = num_runs
        self.cooldown_seconds = cooldown_seconds
        self.discard_first_n = discard_first_n

    def should_continue(self, results: list[RunResult]) -> bool:
        """Continue until we've attempted num_runs, regardless of failures."""
        return len(results) < self.num_runs

    def get_run_label(self, run_index: int) -> str:
        """Generate zero-padded label: run_0001, run_0002, etc."""
        return sanitize_label(f"run_{run_index + 1:04d}")

    def get_cooldown_seconds(self) -> float:
        return self.cooldown_seconds

    def get_discard_count(self) -> int:
        return self.discard_first_n

    def get_run_path(self, base_dir: Path, run_index: int) -> Path:
        """Build path for a run's artifacts.

        Directory Structure Example:
        results/h1c-h1c_1KB_100users/run_0001/
        results/h1c-h1c_1KB_100users/run_0002/
        results/h1c-h1c_1KB_100users/aggregate/
        """
        return Path(base_dir) / self.get_run_label(run_index)

    def get_aggregate_path(self, base_dir: Path) -> Path:
        return Path(base_dir) / "aggregate"


class ScenarioMatrixStrategy:
    """Strategy for walking the service x payload x concurrency cross product.

    Scenarios are produced in a fixed order: services outermost, then payload
    sizes, then concurrency levels. This strategy knows nothing about repeated
    runs; the orchestrator composes it with FixedTrialsStrategy per scenario.
    """

    def __init__(
        self,
        services: list[str],
        payload_sizes: list[str],
        concurrency: list[int],
    ) -> None:
        """Initialize the matrix.

        Raises:
            ValueError: If any dimension is empty
        """
        for name, values in (
            ("services", services),
            ("payload sizes", payload_sizes),
            ("concurrency levels", concurrency),
        ):
            if not values:
                raise ValueError(
                    f"Scenario matrix requires at least one of {name}. "
                    "Provide a comma-separated list, e.g. --services h1c-h1c,h2c-h2c"
                )
        self.scenarios = [
            ScenarioSpec(service=service, payload_size=payload, concurrency=users)
            for service, payload, users in itertools.product(
                services, payload_sizes, concurrency
            )
        ]

    def __len__(self) -> int:
        return len(self.scenarios)

    def should_continue(self, results: list[ScenarioResult]) -> bool:
        """Continue until every scenario has been attempted."""
        return len(results) < len(self.scenarios)

    def get_next_scenario(self, results: list[ScenarioResult]) -> ScenarioSpec:
        return self.scenarios[len(results)]

    def get_scenario_label(self, index: int) -> str:
        return sanitize_label(self.scenarios[index].label)

    def get_scenario_path(self, base_dir: Path, index: int) -> Path:
        """Build path for a scenario's artifacts: base_dir/<scenario_label>/."""
        return Path(base_dir) / self.get_scenario_label(index)
