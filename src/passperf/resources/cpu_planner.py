# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""CPU core isolation planning for the target, backend and load driver roles.

Each role receives an exclusive, non-empty core set. The plan is tiered by the
number of usable cores; below four cores no plan is produced at all, since the
roles would have to share cores.
"""

import logging
from dataclasses import dataclass

import psutil

from passperf.common.constants import MIN_ISOLATION_CORES
from passperf.common.enums import CPUTier, Role
from passperf.common.exceptions import InsufficientResourcesError

logger = logging.getLogger(__name__)

__all__ = [
    "CPUAllocationPlan",
    "CPUAllocationPlanner",
    "detect_available_cores",
    "format_cpuset",
    "plan",
]


def format_cpuset(cores: frozenset[int]) -> str:
    """Format a core set as a taskset/docker cpuset list, e.g. "4,5,6,7"."""
    return ",".join(str(core) for core in sorted(cores))


@dataclass(frozen=True, slots=True)
class CPUAllocationPlan:
    """Disjoint core sets for the three roles of a scenario."""

    target_cores: frozenset[int]
    backend_cores: frozenset[int]
    driver_cores: frozenset[int]
    tier: CPUTier
    available_cores: int

    def cores_for(self, role: Role) -> frozenset[int]:
        if role == Role.TARGET:
            return self.target_cores
        if role == Role.BACKEND:
            return self.backend_cores
        return self.driver_cores

    def cpuset(self, role: Role) -> str:
        return format_cpuset(self.cores_for(role))

    @property
    def all_cores(self) -> frozenset[int]:
        return self.target_cores | self.backend_cores | self.driver_cores

    def describe(self) -> str:
        return (
            f"{self.tier.value} allocation for {self.available_cores} cores: "
            f"target=[{self.cpuset(Role.TARGET)}] "
            f"backend=[{self.cpuset(Role.BACKEND)}] "
            f"driver=[{self.cpuset(Role.DRIVER)}]"
        )


class CPUAllocationPlanner:
    """Produces a CPUAllocationPlan from a count of usable cores.

    Tiers, richest first:

    - 8 or more cores: target {0,1}, backend {2,3}, driver {4,5,6,7} (optimal)
    - 6 or 7 cores: target {0,1}, backend {2,3}, driver {4,5} (reduced)
    - 4 or 5 cores: target {0}, backend {1}, driver {2,3} (minimal)
    """

    def plan(self, available_cores: int) -> CPUAllocationPlan:
        """Compute the isolation plan.

        Raises:
            InsufficientResourcesError: If fewer than four cores are available
        """
        if available_cores >= 8:
            target, backend, driver, tier = {0, 1}, {2, 3}, {4, 5, 6, 7}, CPUTier.OPTIMAL
        elif available_cores >= 6:
            target, backend, driver, tier = {0, 1}, {2, 3}, {4, 5}, CPUTier.REDUCED
        elif available_cores >= MIN_ISOLATION_CORES:
            target, backend, driver, tier = {0}, {1}, {2, 3}, CPUTier.MINIMAL
        else:
            raise InsufficientResourcesError(available_cores, MIN_ISOLATION_CORES)

        allocation = CPUAllocationPlan(
            target_cores=frozenset(target),
            backend_cores=frozenset(backend),
            driver_cores=frozenset(driver),
            tier=tier,
            available_cores=available_cores,
        )
        if tier != CPUTier.OPTIMAL:
            logger.warning(
                f"Using {allocation.describe()}. "
                "8 or more cores give the most reliable results."
            )
        else:
            logger.info(f"Using {allocation.describe()}")
        return allocation


def detect_available_cores() -> int:
    """Count the processing units this process may run on.

    Uses the CPU affinity mask where the platform exposes one, and falls back to
    the logical CPU count.
    """
    try:
        affinity = psutil.Process().cpu_affinity()
    except (AttributeError, psutil.Error, OSError):
        affinity = None
    if affinity:
        return len(affinity)
    return psutil.cpu_count(logical=True) or 1


_DEFAULT_PLANNER = CPUAllocationPlanner()


def plan(available_cores: int) -> CPUAllocationPlan:
    """Plan with the default planner."""
    return _DEFAULT_PLANNER.plan(available_cores)
