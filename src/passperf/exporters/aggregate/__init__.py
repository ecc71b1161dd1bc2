# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Exporters for aggregated scenario and matrix results."""

from passperf.exporters.aggregate.aggregate_base_exporter import AggregateBaseExporter
from passperf.exporters.aggregate.aggregate_exporter_config import (
    AggregateExporterConfig,
)
from passperf.exporters.aggregate.matrix_comparison_csv_exporter import (
    MatrixComparisonCsvExporter,
)
from passperf.exporters.aggregate.matrix_report_markdown_exporter import (
    MatrixReportMarkdownExporter,
)
from passperf.exporters.aggregate.matrix_summary_json_exporter import (
    MatrixSummaryJsonExporter,
)
from passperf.exporters.aggregate.scenario_summary_csv_exporter import (
    ScenarioSummaryCsvExporter,
)
from passperf.exporters.aggregate.scenario_summary_json_exporter import (
    ScenarioSummaryJsonExporter,
)

__all__ = [
    "AggregateBaseExporter",
    "AggregateExporterConfig",
    "MatrixComparisonCsvExporter",
    "MatrixReportMarkdownExporter",
    "MatrixSummaryJsonExporter",
    "ScenarioSummaryCsvExporter",
    "ScenarioSummaryJsonExporter",
]
