# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Start, health-check and stop the dependency processes of a scenario."""

import logging
import time

from passperf.common.config import OrchestratorConfig
from passperf.common.enums import ProcessState, Role
from passperf.common.mixins import HealthCheckResult
from passperf.common.exceptions import ProcessDiedError, StillStartingTimeoutError
from passperf.lifecycle.models import ProcessHandle
from passperf.lifecycle.protocols import ProcessPlatformProtocol
from passperf.profiles import ServiceProfile
from passperf.resources import CPUAllocationPlan

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessLifecycleController",
]


class ProcessLifecycleController:
    """Owns the processes started for one scenario.

    Readiness is a bounded port probe rather than a fixed sleep. When the probe
    times out the process is inspected, so a crash (ProcessDiedError) can be
    told apart from a slow start (StillStartingTimeoutError). Stopping is always
    two-phase: a graceful termination request, a grace period, then a forced
    kill.
    """

    def __init__(
        self, platform: ProcessPlatformProtocol, config: OrchestratorConfig
    ) -> None:
        self.platform = platform
        self.config = config
        self._handles: list[ProcessHandle] = []

    @property
    def handles(self) -> list[ProcessHandle]:
        """Handles started and not yet stopped, in start order."""
        return list(self._handles)

    def start(
        self, role: Role, profile: ServiceProfile, plan: CPUAllocationPlan
    ) -> ProcessHandle:
        """Launch the process for ``role`` configured from ``profile``.

        Raises:
            StartError: If the platform cannot launch the process
        """
        if role == Role.TARGET:
            env = profile.target_env(self.platform.backend_host)
            port = profile.listen_port
        else:
            env = profile.backend_env()
            port = profile.backend_port

        name = f"{role.value}[{profile.name}]"
        logger.info(
            f"Starting {name} on port {port}, pinned to CPU cores [{plan.cpuset(role)}]"
        )
        handle = self.platform.start_process(
            role=role,
            name=name,
            command=self.platform.command_for(role, profile),
            env=env,
            pinned_cores=plan.cores_for(role),
            port=port,
        )
        self._handles.append(handle)
        return handle

    def await_ready(
        self, handle: ProcessHandle, timeout: float | None = None
    ) -> ProcessHandle:
        """Poll the handle's port until it accepts connections.

        Args:
            handle: Handle returned by ``start``
            timeout: Seconds to wait (defaults to the configured ready timeout)

        Raises:
            ProcessDiedError: If the process exited before becoming ready
            StillStartingTimeoutError: If it is alive but the port stayed closed
        """
        if handle.is_ready():
            return handle
        timeout = self.config.ready_timeout_seconds if timeout is None else timeout
        host = self.platform.probe_host
        deadline = time.monotonic() + timeout

        while True:
            if self.platform.is_port_open(host, handle.port):
                handle.state = ProcessState.READY
                logger.info(f"{handle.name} is ready on port {handle.port}")
                if self.config.settle_seconds > 0:
                    time.sleep(self.config.settle_seconds)
                return handle
            if not self.platform.is_alive(handle):
                self._fail_died(handle)
            if time.monotonic() >= deadline:
                break
            time.sleep(self.config.ready_poll_interval)

        # Probe timed out: distinguish a crash from a slow start.
        if self.platform.is_alive(handle):
            handle.state = ProcessState.FAILED
            raise StillStartingTimeoutError(handle.name, handle.port, timeout)
        self._fail_died(handle)

    def _fail_died(self, handle: ProcessHandle) -> None:
        handle.state = ProcessState.FAILED
        handle.exit_code = self.platform.exit_code(handle)
        if handle.log_path is not None:
            logger.error(f"{handle.name} exited, see {handle.log_path}")
        raise ProcessDiedError(handle.name, handle.exit_code)

    def stop(self, handle: ProcessHandle) -> None:
        """Gracefully stop the process, force-killing it after the grace period."""
        if handle.state == ProcessState.STOPPED:
            return
        logger.info(f"Stopping {handle.name}")
        handle.state = ProcessState.STOPPING
        try:
            self.platform.stop_process(handle, self.config.stop_grace_seconds)
        finally:
            handle.state = ProcessState.STOPPED
            if handle in self._handles:
                self._handles.remove(handle)

    def stop_all(self) -> None:
        """Stop every started process in reverse start order.

        A failure to stop one process is logged and does not prevent the
        remaining processes from being stopped.
        """
        for handle in reversed(self.handles):
            try:
                self.stop(handle)
            except Exception:
                logger.exception(f"Error stopping {handle.name}")

    def health_report(self) -> list[HealthCheckResult]:
        """Health details of every process still owned, in start order."""
        return [handle.get_health_details() for handle in self._handles]
