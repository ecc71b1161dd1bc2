# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Logging setup for PassPerf.

Console output goes through rich so long benchmark sessions stay readable. When
a results directory is given, the same records are also written as plain text to
``passperf.log`` in that directory.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_LOG_FILE_NAME = "passperf.log"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_rich_logging(
    level: str | int = logging.INFO,
    log_dir: Path | None = None,
    console: Console | None = None,
) -> None:
    """Configure the root logger with a RichHandler and an optional file handler.

    Calling this more than once replaces handlers installed by a previous call,
    so the CLI can reconfigure after parsing arguments.

    Args:
        level: Log level name or number
        log_dir: Directory for the plain-text log file (skipped when None)
        console: Console to render to (defaults to stderr)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_passperf_handler", False):
            root.removeHandler(handler)
            handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    rich_handler._passperf_handler = True
    root.addHandler(rich_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / _LOG_FILE_NAME, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        file_handler._passperf_handler = True
        root.addHandler(file_handler)

    root.setLevel(level)
