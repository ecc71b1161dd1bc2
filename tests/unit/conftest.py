# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures and test doubles for the unit tests.

Nothing here starts a real process, container or load driver.
"""

from pathlib import Path

import pytest

from passperf.common.config import OrchestratorConfig
from passperf.common.enums import Role
from passperf.driver import RawReport
from passperf.lifecycle.models import CommandResult, ProcessHandle
from passperf.monitoring import SampleSeries, SamplerHandle
from passperf.resources import plan


def make_report_text(
    throughput: float = 100.0,
    total: int = 1000,
    successes: int | None = None,
    mean_latency: str = "5.50ms",
) -> str:
    """Build h2load-style output with the given figures."""
    successes = total if successes is None else successes
    return (
        "starting benchmark...\n"
        "spawning thread #0: 10 total client(s). 1000 total requests\n"
        "Application protocol: h2c\n"
        "progress: 100% done\n\n"
        f"finished in 10.00s, {throughput:.2f} req/s, 1.17MB/s\n"
        f"requests: {total} total, {total} started, {total} done, "
        f"{successes} succeeded, {total - successes} failed, 0 errored, 0 timeout\n"
        f"status codes: {successes} 2xx, 0 3xx, 0 4xx, {total - successes} 5xx\n"
        "traffic: 11.72MB (12288000) total, 30.27KB (31000) headers (space savings 95.34%)\n"
        "                     min         max         mean         sd        +/- sd\n"
        f"time for request:      1.20ms     50.10ms    {mean_latency}      2.10ms    80.00%\n"
        "time for connect:       210us      1.02ms       530us       220us    70.00%\n"
        "req/s           :      10.00       10.10       10.00        0.03    60.00%\n"
    )


def make_raw_report(throughput: float = 100.0, **kwargs) -> RawReport:
    return RawReport(
        text=make_report_text(throughput, **kwargs),
        argv=("h2load",),
        exit_code=0,
        wall_time_seconds=1.0,
    )


class FakePlatform:
    """In-memory process platform that records every start and stop.

    Args:
        fail_ready: Roles whose port never opens
        die_on_start: Roles whose process is dead right after start
        cores: Value returned by available_cores()
    """

    probe_host = "localhost"
    default_target_host = "localhost"
    backend_host = "localhost"

    def __init__(
        self,
        fail_ready: set[Role] | None = None,
        die_on_start: set[Role] | None = None,
        cores: int = 8,
    ) -> None:
        self.fail_ready = fail_ready or set()
        self.die_on_start = die_on_start or set()
        self.cores = cores
        self.running: dict[str, ProcessHandle] = {}
        self.events: list[tuple[str, str]] = []
        self.max_concurrently_running = 0
        self.commands: list[list[str]] = []
        self.command_results: list[CommandResult] = []
        self.built = False
        self.cleaned_up = False

    def command_for(self, role, profile) -> str:
        return f"{role.value}-{profile.name}"

    def start_process(self, role, name, command, env, pinned_cores, port) -> ProcessHandle:
        handle = ProcessHandle(name=name, role=role, port=port, pinned_cores=pinned_cores)
        self.running[name] = handle
        self.events.append(("start", name))
        self.max_concurrently_running = max(
            self.max_concurrently_running, len(self.running)
        )
        return handle

    def stop_process(self, handle, grace_seconds) -> None:
        self.running.pop(handle.name, None)
        self.events.append(("stop", handle.name))

    def is_alive(self, handle) -> bool:
        return handle.name in self.running and handle.role not in self.die_on_start

    def exit_code(self, handle) -> int | None:
        return 1 if handle.role in self.die_on_start else None

    def is_port_open(self, host, port) -> bool:
        return not any(
            h.port == port and (h.role in self.fail_ready or h.role in self.die_on_start)
            for h in self.running.values()
        )

    def run_command(self, argv, pinned_cores=None, timeout=None) -> CommandResult:
        self.commands.append(list(argv))
        if self.command_results:
            return self.command_results.pop(0)
        return CommandResult(
            argv=tuple(argv),
            exit_code=0,
            stdout=make_report_text(),
            stderr="",
            wall_time_seconds=0.1,
        )

    def driver_path(self, path: Path) -> str:
        return str(path)

    def available_cores(self) -> int:
        return self.cores

    def build(self) -> None:
        self.built = True

    def cleanup(self) -> None:
        self.cleaned_up = True


class FakeDriver:
    """Load driver returning queued reports; queued exceptions are raised."""

    def __init__(self, outcomes=None, default_throughput: float = 100.0) -> None:
        self.outcomes = list(outcomes or [])
        self.default_throughput = default_throughput
        self.calls: list[dict] = []

    def run(self, **kwargs) -> RawReport:
        self.calls.append(kwargs)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return make_raw_report(self.default_throughput)


class FakeSampler:
    """CPU sampler double that returns a fixed series without any thread."""

    def __init__(self, series: SampleSeries | None = None) -> None:
        self.series = series or SampleSeries()
        self.started = 0
        self.stopped = 0

    def start(self, interval_seconds: float) -> SamplerHandle:
        self.started += 1
        return SamplerHandle(interval_seconds=interval_seconds)

    def stop(self, handle: SamplerHandle) -> SampleSeries:
        self.stopped += 1
        return self.series


@pytest.fixture
def config(tmp_path: Path) -> OrchestratorConfig:
    """Small, fast configuration rooted in a temporary directory."""
    return OrchestratorConfig(
        services="h1c-h1c",
        payload_sizes="1KB",
        concurrency=10,
        num_runs=5,
        discard_first_n=1,
        warmup_seconds=0,
        measurement_seconds=1,
        cooldown_seconds=0,
        ready_timeout_seconds=0.05,
        ready_poll_interval=0.01,
        stop_grace_seconds=0.1,
        available_cores=8,
        results_dir=tmp_path / "results",
        samples_dir=tmp_path / "samples",
    )


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_sampler() -> FakeSampler:
    return FakeSampler()


@pytest.fixture
def cpu_plan():
    return plan(8)


@pytest.fixture
def report_text():
    """Factory for h2load-style report text."""
    return make_report_text


@pytest.fixture
def raw_report():
    """Factory for RawReport objects."""
    return make_raw_report


@pytest.fixture
def platform_factory():
    return FakePlatform


@pytest.fixture
def driver_factory():
    return FakeDriver
