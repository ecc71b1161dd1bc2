# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Background CPU utilization sampler for the roles of a scenario.

Provides a daemon thread that samples per-core utilization at a fixed cadence
and averages it over each role's core set. The sampler is a diagnostic side
channel: sampling errors are logged and end the series early, they never fail
the run that is being observed.
"""

import csv
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import psutil

from passperf.common.enums import Role
from passperf.resources import CPUAllocationPlan

logger = logging.getLogger(__name__)

__all__ = [
    "CPUSample",
    "CPUUsageSampler",
    "SampleSeries",
    "SamplerHandle",
    "assess_cpu_usage",
]

TOTAL_KEY = "total"
HIGH_USAGE_PERCENT = 90.0
CRITICAL_USAGE_PERCENT = 95.0


@dataclass(frozen=True, slots=True)
class CPUSample:
    """One utilization sample, in percent."""

    timestamp: float
    total: float
    target: float
    backend: float
    driver: float

    def for_role(self, role: Role) -> float:
        return getattr(self, role.value)


@dataclass(slots=True)
class SampleSeries:
    """Samples collected between start and stop of one sampler."""

    samples: list[CPUSample] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)

    def role_averages(self) -> dict[str, float]:
        """Mean utilization per role plus the system total; empty when no samples."""
        if not self.samples:
            return {}
        averages = {
            role.value: float(np.mean([s.for_role(role) for s in self.samples]))
            for role in Role
        }
        averages[TOTAL_KEY] = float(np.mean([s.total for s in self.samples]))
        return averages

    def write_csv(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["timestamp", "total", "target", "backend", "driver"])
            for s in self.samples:
                writer.writerow(
                    [
                        f"{s.timestamp:.3f}",
                        f"{s.total:.2f}",
                        f"{s.target:.2f}",
                        f"{s.backend:.2f}",
                        f"{s.driver:.2f}",
                    ]
                )
        return path


@dataclass(eq=False)
class SamplerHandle:
    interval_seconds: float
    stop_event: threading.Event = field(default_factory=threading.Event)
    series: SampleSeries = field(default_factory=SampleSeries)
    thread: threading.Thread | None = None


class CPUUsageSampler:
    """Samples per-role CPU utilization in a background thread.

    Args:
        plan: CPU allocation whose core sets define the roles
        max_cpu_threshold: Warn when a role's utilization exceeds this percentage
        cpu_percent: Per-core utilization source (psutil.cpu_percent signature)
    """

    def __init__(
        self,
        plan: CPUAllocationPlan,
        max_cpu_threshold: float = HIGH_USAGE_PERCENT,
        cpu_percent: Callable[..., list[float]] = psutil.cpu_percent,
    ) -> None:
        self.plan = plan
        self.max_cpu_threshold = max_cpu_threshold
        self._cpu_percent = cpu_percent

    def start(self, interval_seconds: float) -> SamplerHandle:
        """Start sampling every ``interval_seconds`` until ``stop`` is called."""
        handle = SamplerHandle(interval_seconds=interval_seconds)
        try:
            # The first psutil reading only primes the counters.
            self._cpu_percent(percpu=True)
        except Exception as e:
            logger.warning(f"CPU sampling unavailable: {e}")
            handle.series.errors.append(str(e))
            return handle
        handle.thread = threading.Thread(
            target=self._sample_loop, args=(handle,), name="cpu-sampler", daemon=True
        )
        handle.thread.start()
        return handle

    def stop(self, handle: SamplerHandle) -> SampleSeries:
        """Stop the sampler thread, wait for it, and return what it collected."""
        handle.stop_event.set()
        if handle.thread is not None:
            handle.thread.join(timeout=handle.interval_seconds + 5.0)
            if handle.thread.is_alive():
                logger.warning("CPU sampler thread did not stop in time")
        return handle.series

    def _sample_loop(self, handle: SamplerHandle) -> None:
        while not handle.stop_event.wait(handle.interval_seconds):
            try:
                per_cpu = list(self._cpu_percent(percpu=True))
            except Exception as e:
                logger.warning(f"CPU sampling failed, series ends early: {e}")
                handle.series.errors.append(str(e))
                return
            sample = self._to_sample(per_cpu)
            handle.series.samples.append(sample)
            self._check_threshold(sample)

    def _to_sample(self, per_cpu: list[float]) -> CPUSample:
        def role_mean(role: Role) -> float:
            values = [per_cpu[core] for core in self.plan.cores_for(role) if core < len(per_cpu)]
            return float(np.mean(values)) if values else 0.0

        return CPUSample(
            timestamp=time.time(),
            total=float(np.mean(per_cpu)) if per_cpu else 0.0,
            target=role_mean(Role.TARGET),
            backend=role_mean(Role.BACKEND),
            driver=role_mean(Role.DRIVER),
        )

    def _check_threshold(self, sample: CPUSample) -> None:
        for role in Role:
            value = sample.for_role(role)
            if value > self.max_cpu_threshold:
                logger.warning(
                    f"{role.value} cores [{self.plan.cpuset(role)}] at {value:.1f}% CPU "
                    f"(threshold {self.max_cpu_threshold:g}%)"
                )


def assess_cpu_usage(averages: dict[str, float], label: str = "") -> str:
    """Classify the average total utilization of a run and log the verdict.

    Returns:
        "good" below 90%, "high" below 95%, otherwise "critical";
        "unknown" when no samples were collected
    """
    prefix = f"[{label}] " if label else ""
    total = averages.get(TOTAL_KEY)
    if total is None:
        logger.info(f"{prefix}No CPU samples collected")
        return "unknown"

    detail = ", ".join(f"{key}={value:.1f}%" for key, value in averages.items())
    if total < HIGH_USAGE_PERCENT:
        logger.info(f"{prefix}CPU usage within limits ({detail})")
        return "good"
    if total < CRITICAL_USAGE_PERCENT:
        logger.warning(f"{prefix}CPU usage high but acceptable ({detail})")
        return "high"
    logger.warning(f"{prefix}CPU usage critical, may affect results ({detail})")
    return "critical"
