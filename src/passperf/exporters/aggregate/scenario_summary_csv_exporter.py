# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""CSV exporter for the statistics of one scenario."""

import csv
import io

from passperf.exporters.aggregate.aggregate_base_exporter import AggregateBaseExporter

SUMMARY_HEADER = ["metric", "mean", "stddev", "cv_percent", "min", "max", "samples"]


class ScenarioSummaryCsvExporter(AggregateBaseExporter):
    """Exports one scenario's statistics as ``<label>_summary.csv``.

    One row per metric: throughput_rps, latency_ms and error_rate_percent.
    A scenario without statistics produces the header only.
    """

    def get_file_name(self) -> str:
        return f"{self._result.scenario.label}_summary.csv"

    def _generate_content(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(SUMMARY_HEADER)

        stats = self._result.statistics
        if stats is None:
            return buf.getvalue()

        for name, metric in (
            ("throughput_rps", stats.throughput),
            ("latency_ms", stats.latency),
            ("error_rate_percent", stats.error_rate),
        ):
            writer.writerow(
                [
                    name,
                    self._format_number(metric.mean),
                    self._format_number(metric.std),
                    self._format_number(metric.cv),
                    self._format_number(metric.min),
                    self._format_number(metric.max),
                    stats.sample_count,
                ]
            )

        return buf.getvalue()
