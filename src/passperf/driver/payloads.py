# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Benchmark payload files, looked up by size label.

A label such as ``10KB`` maps to ``<samples_dir>/10KB.txt``. Missing files for
parseable labels are generated on demand, filled with ``A`` bytes.
"""

import logging
import re
from pathlib import Path

from passperf.common.constants import BYTES_PER_KB, BYTES_PER_MB
from passperf.common.exceptions import PayloadNotFoundError

logger = logging.getLogger(__name__)

__all__ = [
    "PayloadStore",
    "STANDARD_PAYLOAD_SIZES",
    "parse_size_label",
]

STANDARD_PAYLOAD_SIZES = ("50B", "1KB", "10KB", "100KB", "500KB", "1MB")

_SIZE_LABEL_PATTERN = re.compile(r"^(\d+)(B|KB|MB)$", re.IGNORECASE)
_SAFE_LABEL_PATTERN = re.compile(r"^[\w.-]+$")
_UNIT_BYTES = {"B": 1, "KB": BYTES_PER_KB, "MB": BYTES_PER_MB}
_FILL_BYTE = b"A"


def parse_size_label(label: str) -> int:
    """Convert a size label such as "100KB" into a byte count (1 KB = 1024 bytes).

    Raises:
        PayloadNotFoundError: If the label is not of the form <n>B, <n>KB or <n>MB
    """
    match = _SIZE_LABEL_PATTERN.match(label.strip())
    if match is None:
        raise PayloadNotFoundError(
            f"Cannot derive a payload size from label '{label}'. "
            f"Use labels like {', '.join(STANDARD_PAYLOAD_SIZES)}, "
            "or provide the file <samples-dir>/<label>.txt yourself."
        )
    return int(match.group(1)) * _UNIT_BYTES[match.group(2).upper()]


class PayloadStore:
    """Maps payload labels to files under a samples directory."""

    def __init__(self, samples_dir: Path) -> None:
        self.samples_dir = Path(samples_dir)

    def path_for(self, label: str) -> Path:
        if not _SAFE_LABEL_PATTERN.match(label) or ".." in label:
            raise PayloadNotFoundError(f"Invalid payload label: '{label}'")
        return self.samples_dir / f"{label}.txt"

    def ensure(self, label: str) -> Path:
        """Return the payload file for ``label``, generating it if missing.

        Raises:
            PayloadNotFoundError: If the file is missing and the label has no
                derivable size
        """
        path = self.path_for(label)
        if path.is_file():
            return path

        size = parse_size_label(label)
        self.samples_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_FILL_BYTE * size)
        logger.info(f"Generated payload {path} ({size} bytes)")
        return path

    def ensure_all(self, labels: list[str]) -> dict[str, Path]:
        """Resolve every label up front so a bad label fails before any process starts."""
        return {label: self.ensure(label) for label in labels}
