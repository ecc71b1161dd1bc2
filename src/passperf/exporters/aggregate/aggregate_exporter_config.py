# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Configuration for aggregate exporters."""

from dataclasses import dataclass, field
from pathlib import Path

from passperf.orchestrator.models import ScenarioResult


@dataclass(slots=True)
class AggregateExporterConfig:
    """Configuration for aggregate exporters.

    Scenario exporters read ``results[0]``; matrix exporters read every result.

    Attributes:
        results: Scenario results to export, in matrix order
        output_dir: Directory where the export file will be written
        metadata: Extra run-level information copied into JSON exports
    """

    results: list[ScenarioResult]
    output_dir: Path
    metadata: dict = field(default_factory=dict)

    @property
    def result(self) -> ScenarioResult:
        return self.results[0]
