# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""JSON exporter for a complete scenario matrix."""

import orjson

from passperf.exporters.aggregate.aggregate_base_exporter import AggregateBaseExporter
from passperf.exporters.aggregate.scenario_summary_json_exporter import (
    scenario_to_dict,
)


class MatrixSummaryJsonExporter(AggregateBaseExporter):
    """Exports ``matrix_summary.json`` with every scenario result."""

    def get_file_name(self) -> str:
        return "matrix_summary.json"

    def _generate_content(self) -> str:
        succeeded = [r for r in self._results if r.succeeded]
        output = {
            "num_scenarios": len(self._results),
            "num_successful_scenarios": len(succeeded),
            "failed_scenarios": [
                r.scenario.label for r in self._results if not r.succeeded
            ],
            "metadata": self._config.metadata,
            "scenarios": [scenario_to_dict(r) for r in self._results],
        }
        return orjson.dumps(output, option=orjson.OPT_INDENT_2).decode("utf-8")
