# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from pathlib import Path
from typing import Protocol, runtime_checkable

from passperf.common.enums import Role
from passperf.lifecycle.models import CommandResult, ProcessHandle
from passperf.profiles import ServiceProfile


@runtime_checkable
class ProcessPlatformProtocol(Protocol):
    """Protocol for platforms that run the service under test, its backend and the load driver."""

    probe_host: str
    default_target_host: str
    backend_host: str

    def command_for(self, role: Role, profile: ServiceProfile) -> str: ...

    def start_process(
        self,
        role: Role,
        name: str,
        command: str,
        env: dict[str, str],
        pinned_cores: frozenset[int],
        port: int,
    ) -> ProcessHandle: ...

    def stop_process(self, handle: ProcessHandle, grace_seconds: float) -> None: ...

    def is_alive(self, handle: ProcessHandle) -> bool: ...

    def exit_code(self, handle: ProcessHandle) -> int | None: ...

    def is_port_open(self, host: str, port: int) -> bool: ...

    def run_command(
        self,
        argv: list[str],
        pinned_cores: frozenset[int] | None = None,
        timeout: float | None = None,
    ) -> CommandResult: ...

    def driver_path(self, path: Path) -> str: ...

    def available_cores(self) -> int: ...

    def build(self) -> None: ...

    def cleanup(self) -> None: ...
