# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Health check mixin for processes managed by the lifecycle controller.

- is_healthy(): Liveness check - has the process not failed?
- is_ready(): Readiness check - is the process accepting connections?
- get_health_details(): Detailed health info for logging and failure reports
"""

from __future__ import annotations

from dataclasses import dataclass

from passperf.common.enums import ProcessState


@dataclass(frozen=True, slots=True)
class HealthCheckResult:
    """Result of the health check."""

    name: str
    state: ProcessState
    healthy: bool
    ready: bool


class HealthCheckMixin:
    """Liveness and readiness checks derived from a `state` attribute.

    The mixin expects the class to have a `state` attribute holding a
    ProcessState and a `name` attribute identifying the process.
    """

    state: ProcessState
    name: str

    def is_healthy(self) -> bool:
        """Liveness check: True unless the process is in the FAILED state."""
        return self.state != ProcessState.FAILED

    def is_ready(self) -> bool:
        """Readiness check: True only once the readiness probe has succeeded."""
        return self.state == ProcessState.READY

    def get_health_details(self) -> HealthCheckResult:
        return HealthCheckResult(
            name=getattr(self, "name", "unknown"),
            state=self.state,
            healthy=self.is_healthy(),
            ready=self.is_ready(),
        )
