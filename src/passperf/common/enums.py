# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Enumerations shared across PassPerf."""

from enum import Enum


class Role(str, Enum):
    """Process roles that receive an exclusive CPU core set."""

    TARGET = "target"
    BACKEND = "backend"
    DRIVER = "driver"


class CPUTier(str, Enum):
    """Richness of a CPU allocation plan."""

    OPTIMAL = "optimal"
    REDUCED = "reduced"
    MINIMAL = "minimal"


class ProcessState(str, Enum):
    """Lifecycle of a dependency process started by the platform."""

    STARTING = "starting"
    READY = "ready"
    FAILED = "failed"
    STOPPING = "stopping"
    STOPPED = "stopped"


class RunPhaseState(str, Enum):
    """Where a single scenario run is in its lifecycle.

    Terminal states are METRICS_PARSED (success) and any *_FAILED state.
    """

    CONFIGURING = "configuring"
    BACKEND_STARTING = "backend_starting"
    BACKEND_READY = "backend_ready"
    BACKEND_FAILED = "backend_failed"
    TARGET_STARTING = "target_starting"
    TARGET_READY = "target_ready"
    TARGET_FAILED = "target_failed"
    WARMING_UP = "warming_up"
    COOLING_DOWN = "cooling_down"
    MEASURING = "measuring"
    MEASUREMENT_FAILED = "measurement_failed"
    METRICS_PARSED = "metrics_parsed"
    TORN_DOWN = "torn_down"


class ScenarioState(str, Enum):
    """States of the per-scenario state machine."""

    IDLE = "idle"
    PLANNING_RESOURCES = "planning_resources"
    STARTING_DEPENDENCIES = "starting_dependencies"
    WARMING_UP = "warming_up"
    COOLING_DOWN = "cooling_down"
    MEASURING = "measuring"
    METRICS_COLLECTED = "metrics_collected"
    AGGREGATING = "aggregating"
    REPORTING_READY = "reporting_ready"
    TORN_DOWN = "torn_down"
    FAILED = "failed"


class ConsistencyTier(str, Enum):
    """Reproducibility classification based on the coefficient of variation."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    POOR = "Poor"


class ConsistencyBasis(str, Enum):
    """Which coefficients of variation gate the consistency classification."""

    THROUGHPUT = "throughput"
    THROUGHPUT_AND_LATENCY = "throughput_and_latency"


class PlatformType(str, Enum):
    """Process platform used to run the service under test and its backend."""

    LOCAL = "local"
    DOCKER = "docker"
