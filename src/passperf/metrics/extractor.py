# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Parse h2load reports into RunMetrics.

Parsing is tolerant: a field that cannot be found defaults to 0 and is logged,
so a report in an unexpected layout yields a visibly anomalous zero sample
instead of failing the run. Only an empty report is an error.
"""

import logging
import re

from passperf.common.constants import MILLIS_PER_MICRO, MILLIS_PER_SECOND
from passperf.common.exceptions import ReportParseError
from passperf.driver.h2load import RawReport
from passperf.metrics.models import RunMetrics

logger = logging.getLogger(__name__)

__all__ = [
    "MetricsExtractor",
    "parse",
    "to_milliseconds",
]

_THROUGHPUT_PATTERN = re.compile(r"finished in\s+[\d.]+(?:us|ms|s),\s+([\d.]+)\s+req/s")
_TOTAL_PATTERN = re.compile(r"requests:\s+(\d+)\s+total")
_SUCCESS_PATTERN = re.compile(r"status codes:\s+(\d+)\s+2xx")
_DURATION = r"([\d.]+)(us|ms|s)"
# time for request:  min  max  mean  sd  +/- sd
_REQUEST_TIME_PATTERN = re.compile(
    rf"time for request:\s+{_DURATION}\s+{_DURATION}\s+{_DURATION}"
)

_UNIT_TO_MILLIS = {
    "us": MILLIS_PER_MICRO,
    "ms": 1.0,
    "s": float(MILLIS_PER_SECOND),
}


def to_milliseconds(value: float, unit: str) -> float:
    """Normalize a duration in us, ms or s to milliseconds."""
    return value * _UNIT_TO_MILLIS[unit]


class MetricsExtractor:
    """Extracts throughput, request counts and mean latency from h2load output."""

    def parse(self, raw_report: RawReport | str, label: str = "") -> RunMetrics:
        """Parse a report.

        Args:
            raw_report: Report object or its text
            label: Run label used to prefix warnings

        Raises:
            ReportParseError: If the report text is empty
        """
        text = raw_report.text if isinstance(raw_report, RawReport) else raw_report
        prefix = f"[{label}] " if label else ""
        if not text or not text.strip():
            raise ReportParseError(f"{prefix}Load driver report is empty")

        missing: list[str] = []

        throughput = self._search_float(_THROUGHPUT_PATTERN, text)
        if throughput is None:
            missing.append("throughput")

        total = self._search_int(_TOTAL_PATTERN, text)
        if total is None:
            missing.append("total requests")

        successes = self._search_int(_SUCCESS_PATTERN, text)
        if successes is None:
            missing.append("2xx responses")

        latency_ms = None
        match = _REQUEST_TIME_PATTERN.search(text)
        if match is not None:
            latency_ms = to_milliseconds(float(match.group(5)), match.group(6))
        else:
            missing.append("mean latency")

        if missing:
            logger.warning(
                f"{prefix}Could not find {', '.join(missing)} in the load driver report; "
                "defaulting to 0"
            )

        total = total or 0
        successes = successes or 0
        if successes > total:
            logger.warning(
                f"{prefix}Report lists {successes} 2xx responses but only {total} requests; "
                "using the 2xx count as the total"
            )
            total = successes

        return RunMetrics(
            total_requests=total,
            successful_requests=successes,
            throughput_req_per_sec=throughput or 0.0,
            mean_latency_ms=latency_ms or 0.0,
        )

    @staticmethod
    def _search_float(pattern: re.Pattern, text: str) -> float | None:
        match = pattern.search(text)
        return float(match.group(1)) if match else None

    @staticmethod
    def _search_int(pattern: re.Pattern, text: str) -> int | None:
        match = pattern.search(text)
        return int(match.group(1)) if match else None


_DEFAULT_EXTRACTOR = MetricsExtractor()


def parse(raw_report: RawReport | str, label: str = "") -> RunMetrics:
    """Parse with the default extractor."""
    return _DEFAULT_EXTRACTOR.parse(raw_report, label)
