# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for the process lifecycle controller."""

import pytest

from passperf.common.enums import ProcessState, Role
from passperf.common.exceptions import (
    DependencyStartError,
    ProcessDiedError,
    StillStartingTimeoutError,
)
from passperf.lifecycle import ProcessLifecycleController
from passperf.profiles import resolve


@pytest.fixture
def profile():
    return resolve("h1c-h1c")


class TestStart:
    def test_backend_uses_backend_port_and_cores(self, config, fake_platform, profile, cpu_plan):
        controller = ProcessLifecycleController(fake_platform, config)

        handle = controller.start(Role.BACKEND, profile, cpu_plan)

        assert handle.name == "backend[h1c-h1c]"
        assert handle.port == 8701
        assert handle.pinned_cores == frozenset({2, 3})
        assert controller.handles == [handle]

    def test_target_uses_listen_port_and_cores(self, config, fake_platform, profile, cpu_plan):
        handle = ProcessLifecycleController(fake_platform, config).start(
            Role.TARGET, profile, cpu_plan
        )
        assert handle.port == 9094
        assert handle.pinned_cores == frozenset({0, 1})


class TestAwaitReady:
    def test_ready_when_port_opens(self, config, fake_platform, profile, cpu_plan):
        controller = ProcessLifecycleController(fake_platform, config)
        handle = controller.start(Role.BACKEND, profile, cpu_plan)

        controller.await_ready(handle)

        assert handle.state == ProcessState.READY
        assert handle.is_ready()
        assert handle.is_healthy()

    def test_dead_process_raises_process_died(self, config, platform_factory, profile, cpu_plan):
        platform = platform_factory(die_on_start={Role.BACKEND})
        controller = ProcessLifecycleController(platform, config)
        handle = controller.start(Role.BACKEND, profile, cpu_plan)

        with pytest.raises(ProcessDiedError) as exc_info:
            controller.await_ready(handle)

        assert exc_info.value.exit_code == 1
        assert handle.state == ProcessState.FAILED
        assert not handle.is_healthy()
        assert isinstance(exc_info.value, DependencyStartError)

    def test_alive_but_closed_port_raises_still_starting(
        self, config, platform_factory, profile, cpu_plan
    ):
        platform = platform_factory(fail_ready={Role.TARGET})
        controller = ProcessLifecycleController(platform, config)
        handle = controller.start(Role.TARGET, profile, cpu_plan)

        with pytest.raises(StillStartingTimeoutError) as exc_info:
            controller.await_ready(handle, timeout=0.03)

        assert exc_info.value.port == 9094
        assert handle.state == ProcessState.FAILED

    def test_settle_delay_applied(self, config, fake_platform, profile, cpu_plan, monkeypatch):
        sleeps = []
        monkeypatch.setattr("passperf.lifecycle.controller.time.sleep", sleeps.append)
        config.settle_seconds = 2.0
        controller = ProcessLifecycleController(fake_platform, config)

        controller.await_ready(controller.start(Role.BACKEND, profile, cpu_plan))

        assert sleeps == [2.0]


class TestStop:
    def test_stop_marks_stopped_and_forgets_handle(self, config, fake_platform, profile, cpu_plan):
        controller = ProcessLifecycleController(fake_platform, config)
        handle = controller.start(Role.BACKEND, profile, cpu_plan)

        controller.stop(handle)

        assert handle.state == ProcessState.STOPPED
        assert controller.handles == []
        assert fake_platform.running == {}

    def test_stop_is_idempotent(self, config, fake_platform, profile, cpu_plan):
        controller = ProcessLifecycleController(fake_platform, config)
        handle = controller.start(Role.BACKEND, profile, cpu_plan)

        controller.stop(handle)
        controller.stop(handle)

        assert [e for e in fake_platform.events if e[0] == "stop"] == [
            ("stop", "backend[h1c-h1c]")
        ]

    def test_stop_all_reverse_order_and_continues_after_error(
        self, config, fake_platform, profile, cpu_plan, monkeypatch
    ):
        controller = ProcessLifecycleController(fake_platform, config)
        controller.start(Role.BACKEND, profile, cpu_plan)
        controller.start(Role.TARGET, profile, cpu_plan)
        original_stop = fake_platform.stop_process
        stopped = []

        def flaky_stop(handle, grace_seconds):
            stopped.append(handle.name)
            original_stop(handle, grace_seconds)
            if handle.role == Role.TARGET:
                raise RuntimeError("stop failed")

        monkeypatch.setattr(fake_platform, "stop_process", flaky_stop)
        controller.stop_all()

        assert stopped == ["target[h1c-h1c]", "backend[h1c-h1c]"]
        assert controller.handles == []


class TestHealthReport:
    def test_reports_owned_processes_in_start_order(
        self, config, platform_factory, profile, cpu_plan
    ):
        platform = platform_factory(fail_ready={Role.TARGET})
        controller = ProcessLifecycleController(platform, config)
        backend = controller.start(Role.BACKEND, profile, cpu_plan)
        controller.await_ready(backend)
        target = controller.start(Role.TARGET, profile, cpu_plan)
        with pytest.raises(StillStartingTimeoutError):
            controller.await_ready(target)

        report = controller.health_report()

        assert [(h.name, h.state, h.healthy, h.ready) for h in report] == [
            ("backend[h1c-h1c]", ProcessState.READY, True, True),
            ("target[h1c-h1c]", ProcessState.FAILED, False, False),
        ]

    def test_stopped_processes_are_not_reported(self, config, fake_platform, profile, cpu_plan):
        controller = ProcessLifecycleController(fake_platform, config)
        controller.start(Role.BACKEND, profile, cpu_plan)

        controller.stop_all()

        assert controller.health_report() == []

    def test_await_ready_returns_ready_handle_immediately(
        self, config, fake_platform, profile, cpu_plan, monkeypatch
    ):
        controller = ProcessLifecycleController(fake_platform, config)
        handle = controller.start(Role.BACKEND, profile, cpu_plan)
        controller.await_ready(handle)
        monkeypatch.setattr(
            fake_platform, "is_port_open", lambda host, port: pytest.fail("port checked again")
        )

        assert controller.await_ready(handle) is handle
