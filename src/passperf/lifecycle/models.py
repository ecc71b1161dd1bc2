# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Handles and command results produced by process platforms."""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from passperf.common.enums import ProcessState, Role
from passperf.common.mixins import HealthCheckMixin


@dataclass(eq=False)
class ProcessHandle(HealthCheckMixin):
    """A dependency process (or container) started by a platform.

    Attributes:
        name: Display name, e.g. "backend[h1c-h1c]"
        role: Role the process plays in the scenario
        port: Port probed for readiness
        pinned_cores: Cores the process is restricted to
        state: Current lifecycle state, updated by the controller
        process: Local child process (local platform only)
        container: Container name (docker platform only)
        log_path: File receiving the process output, when captured
        exit_code: Exit code once the process is known to have exited
    """

    name: str
    role: Role
    port: int
    pinned_cores: frozenset[int] = frozenset()
    state: ProcessState = ProcessState.STARTING
    process: subprocess.Popen | None = None
    container: str | None = None
    log_path: Path | None = None
    exit_code: int | None = None

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process is not None else None


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a bounded, blocking command invocation."""

    argv: tuple[str, ...]
    exit_code: int | None
    stdout: str
    stderr: str
    wall_time_seconds: float
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.exit_code == 0
