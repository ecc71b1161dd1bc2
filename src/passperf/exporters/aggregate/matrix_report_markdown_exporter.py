# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Markdown analysis report for a complete scenario matrix."""

from datetime import datetime

from passperf.common.enums import ConsistencyTier
from passperf.exporters.aggregate.aggregate_base_exporter import AggregateBaseExporter

_TIER_NOTES = {
    ConsistencyTier.EXCELLENT: "Excellent (CV < 3%)",
    ConsistencyTier.GOOD: "Good (CV < 5%)",
    ConsistencyTier.POOR: "Poor (CV >= 5%)",
}


class MatrixReportMarkdownExporter(AggregateBaseExporter):
    """Exports ``load_test_analysis_report.md``, a human-readable report."""

    def get_file_name(self) -> str:
        return "load_test_analysis_report.md"

    def _generate_content(self) -> str:
        meta = self._config.metadata
        lines = [
            "# Load Test Analysis Report",
            f"Generated: {datetime.now().isoformat(timespec='seconds')}",
            "",
        ]

        if meta:
            lines += ["## Test Configuration"]
            lines += [f"- {key.replace('_', ' ').title()}: {value}" for key, value in meta.items()]
            lines.append("")

        lines += ["## Test Results Summary", ""]
        for result in self._results:
            lines += [f"### {result.scenario.label}", ""]
            stats = result.statistics
            if stats is None:
                lines += [f"**Failed:** {result.error or 'no statistics produced'}", ""]
                continue
            lines += [
                "| Metric | Mean | Std Dev | CV% | Min | Max |",
                "|--------|------|---------|-----|-----|-----|",
            ]
            for name, metric in (
                ("Throughput (req/s)", stats.throughput),
                ("Latency (ms)", stats.latency),
            ):
                values = " | ".join(
                    self._format_number(v, decimals=1)
                    for v in (metric.mean, metric.std, metric.cv, metric.min, metric.max)
                )
                lines.append(f"| {name} | {values} |")
            lines += [
                "",
                f"**Consistency: {_TIER_NOTES[stats.consistency_tier]}** "
                f"({stats.sample_count} samples)",
                "",
            ]

        return "\n".join(lines) + "\n"
