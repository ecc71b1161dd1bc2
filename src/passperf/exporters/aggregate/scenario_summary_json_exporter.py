# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""JSON exporter for the result of one scenario."""

import orjson

from passperf.exporters.aggregate.aggregate_base_exporter import AggregateBaseExporter
from passperf.orchestrator.models import ScenarioResult


def scenario_to_dict(result: ScenarioResult) -> dict:
    """Serializable view of a scenario result, shared with the matrix summary."""
    return {
        "label": result.scenario.label,
        "scenario": result.scenario.model_dump(mode="json"),
        "state": result.state.value,
        "succeeded": result.succeeded,
        "num_runs": len(result.runs),
        "num_successful_runs": len(result.successful_runs),
        "discarded_runs": result.discarded_runs,
        "failed_runs": [
            {"label": r.label, "error": r.error, "error_kind": r.error_kind}
            for r in result.failed_runs
        ],
        "statistics": (
            result.statistics.model_dump(mode="json")
            if result.statistics is not None
            else None
        ),
        "error": result.error,
        "error_kind": result.error_kind,
        "dependency_failure": result.dependency_failure,
        "dependency_health": {
            name: state.value for name, state in result.dependency_health.items()
        },
    }


class ScenarioSummaryJsonExporter(AggregateBaseExporter):
    """Exports one scenario as ``<label>_summary.json``.

    Output structure:
    {
        "label": "h1c-h1c_1KB_100users",
        "scenario": {...},
        "state": "torn_down",
        "statistics": {...} or null,
        "runs": [...],
        ...
    }
    """

    def get_file_name(self) -> str:
        return f"{self._result.scenario.label}_summary.json"

    def _generate_content(self) -> str:
        output = scenario_to_dict(self._result)
        output["transitions"] = [s.value for s in self._result.transitions]
        output["startup_phases"] = [p.value for p in self._result.startup_phases]
        output["runs"] = [
            run.model_dump(mode="json", exclude={"artifacts_path"})
            for run in self._result.runs
        ]
        if self._config.metadata:
            output["metadata"] = self._config.metadata

        return orjson.dumps(output, option=orjson.OPT_INDENT_2).decode("utf-8")
