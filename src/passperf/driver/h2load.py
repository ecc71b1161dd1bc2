# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Load driver invocation through h2load.

One call to ``run`` is one blocking benchmark invocation. Failures are raised
as DriverError and never retried: a failed invocation is a failed measurement.
"""

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from passperf.common.config import OrchestratorConfig
from passperf.common.exceptions import DriverError, DriverTimeoutError
from passperf.lifecycle.protocols import ProcessPlatformProtocol

logger = logging.getLogger(__name__)

__all__ = [
    "H2LoadDriver",
    "LoadDriverProtocol",
    "RawReport",
]

_STDERR_TAIL_CHARS = 2000


@dataclass(frozen=True, slots=True)
class RawReport:
    """Unparsed textual output of one load driver invocation."""

    text: str
    argv: tuple[str, ...]
    exit_code: int | None
    wall_time_seconds: float

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.text, encoding="utf-8")
        return path


@runtime_checkable
class LoadDriverProtocol(Protocol):
    """Protocol for load drivers issuing one benchmark invocation per call."""

    def run(
        self,
        target_url: str,
        concurrency: int,
        duration_seconds: float,
        payload_path: Path,
        force_http1: bool,
        pinned_cores: frozenset[int],
    ) -> RawReport: ...


class H2LoadDriver:
    """Runs ``h2load`` through the process platform, pinned to the driver cores.

    The worker thread count is the smaller of the concurrency and the number of
    driver cores. The invocation is bounded by its duration plus
    ``driver_timeout_grace_seconds``.
    """

    def __init__(
        self, platform: ProcessPlatformProtocol, config: OrchestratorConfig
    ) -> None:
        self.platform = platform
        self.config = config

    def build_argv(
        self,
        target_url: str,
        concurrency: int,
        duration_seconds: float,
        payload_path: Path,
        force_http1: bool,
        pinned_cores: frozenset[int],
    ) -> list[str]:
        threads = max(1, min(concurrency, len(pinned_cores) or 1))
        argv = [
            self.config.driver_binary,
            "-c",
            str(concurrency),
            "-t",
            str(threads),
            "-D",
            str(max(1, round(duration_seconds))),
            "-d",
            self.platform.driver_path(payload_path),
        ]
        if force_http1:
            argv.append("--h1")
        argv.append(target_url)
        return argv

    def run(
        self,
        target_url: str,
        concurrency: int,
        duration_seconds: float,
        payload_path: Path,
        force_http1: bool,
        pinned_cores: frozenset[int],
    ) -> RawReport:
        """Run one benchmark invocation and capture its report.

        Raises:
            DriverTimeoutError: If the driver exceeded its bounded timeout
            DriverError: If the driver could not be run or exited non-zero
        """
        argv = self.build_argv(
            target_url, concurrency, duration_seconds, payload_path, force_http1, pinned_cores
        )
        timeout = duration_seconds + self.config.driver_timeout_grace_seconds
        logger.info(
            f"Running load driver: {concurrency} users, {duration_seconds:g}s against {target_url}"
        )
        logger.debug(f"Driver command: {shlex.join(argv)}")

        try:
            result = self.platform.run_command(argv, pinned_cores=pinned_cores, timeout=timeout)
        except OSError as e:
            raise DriverError(f"Failed to run load driver '{argv[0]}': {e}") from e

        text = result.stdout
        if result.stderr:
            text = f"{text}\n{result.stderr}" if text else result.stderr

        if result.timed_out:
            raise DriverTimeoutError(
                f"Load driver did not finish within {timeout:g} seconds "
                f"(duration {duration_seconds:g}s + grace "
                f"{self.config.driver_timeout_grace_seconds:g}s)"
            )
        if result.exit_code != 0:
            error_msg = f"Load driver failed with exit code {result.exit_code}"
            if result.stderr:
                error_msg += f"\nStderr: {result.stderr[-_STDERR_TAIL_CHARS:]}"
            raise DriverError(error_msg)

        return RawReport(
            text=text,
            argv=tuple(argv),
            exit_code=result.exit_code,
            wall_time_seconds=result.wall_time_seconds,
        )
