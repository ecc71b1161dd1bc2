# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""CSV exporter comparing every scenario of a matrix side by side."""

import csv
import io

from passperf.exporters.aggregate.aggregate_base_exporter import AggregateBaseExporter

COMPARISON_HEADER = [
    "test_id",
    "service",
    "file_size",
    "users",
    "throughput_mean",
    "throughput_cv",
    "latency_mean",
    "error_rate",
    "consistency",
]


class MatrixComparisonCsvExporter(AggregateBaseExporter):
    """Exports ``configuration_comparison.csv``.

    Only scenarios that produced statistics get a row; failed scenarios are
    listed in the matrix summary JSON instead.
    """

    def get_file_name(self) -> str:
        return "configuration_comparison.csv"

    def _generate_content(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(COMPARISON_HEADER)

        for result in self._results:
            stats = result.statistics
            if stats is None:
                continue
            writer.writerow(
                [
                    result.scenario.label,
                    result.scenario.service,
                    result.scenario.payload_size,
                    result.scenario.concurrency,
                    self._format_number(stats.throughput.mean),
                    self._format_number(stats.throughput.cv),
                    self._format_number(stats.latency.mean),
                    self._format_number(stats.error_rate.mean),
                    stats.consistency_tier.value,
                ]
            )

        return buf.getvalue()
