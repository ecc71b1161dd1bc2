# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Base class for exporters that write aggregated scenario results."""

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from pathlib import Path

from passperf.exporters.aggregate.aggregate_exporter_config import (
    AggregateExporterConfig,
)

logger = logging.getLogger(__name__)


class AggregateBaseExporter(ABC):
    """Writes one file derived from aggregated results.

    Subclasses provide the file name and the content; the base class handles
    directory creation and writes the file off the event loop.
    """

    def __init__(self, config: AggregateExporterConfig) -> None:
        self._config = config
        self._results = config.results
        self._output_dir = Path(config.output_dir)

    @property
    def _result(self):
        return self._config.result

    @abstractmethod
    def get_file_name(self) -> str:
        """Return the name of the file written by this exporter."""

    @abstractmethod
    def _generate_content(self) -> str:
        """Return the full file content."""

    async def export(self) -> Path:
        """Generate the content and write it to ``output_dir``.

        Returns:
            Path of the written file
        """
        path = self._output_dir / self.get_file_name()
        content = self._generate_content()
        await asyncio.to_thread(self._write, path, content)
        logger.debug(f"Wrote {path}")
        return path

    @staticmethod
    def _write(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def _format_number(self, value, decimals: int = 2) -> str:
        """Format a number for CSV output; empty for None, "inf" for infinity."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return str(value)
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if math.isinf(value):
                return "inf" if value > 0 else "-inf"
            if math.isnan(value):
                return ""
            return f"{value:.{decimals}f}"
        return str(value)
