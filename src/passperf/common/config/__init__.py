# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Configuration models and defaults."""

from passperf.common.config.config_defaults import (
    LifecycleDefaults,
    MeasurementDefaults,
    MonitoringDefaults,
    OutputDefaults,
    PlatformDefaults,
    ScenarioDefaults,
)
from passperf.common.config.groups import Groups
from passperf.common.config.orchestrator_config import (
    OrchestratorConfig,
    parse_comma_separated,
)

__all__ = [
    "Groups",
    "LifecycleDefaults",
    "MeasurementDefaults",
    "MonitoringDefaults",
    "OrchestratorConfig",
    "OutputDefaults",
    "PlatformDefaults",
    "ScenarioDefaults",
    "parse_comma_separated",
]
