# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Run the service under test and its backend as local child processes."""

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path

import psutil

from passperf.common.config import OrchestratorConfig
from passperf.common.enums import Role
from passperf.common.exceptions import (
    BuildError,
    ConfigurationError,
    DriverError,
    StartError,
)
from passperf.lifecycle.commands import is_port_open, run_command
from passperf.lifecycle.models import CommandResult, ProcessHandle
from passperf.profiles import ServiceProfile
from passperf.resources.cpu_planner import detect_available_cores, format_cpuset

logger = logging.getLogger(__name__)

__all__ = [
    "LocalProcessPlatform",
]

PID_DIR_NAME = ".pids"


class LocalProcessPlatform:
    """Launches dependency processes with ``subprocess`` on this host.

    Pinning uses a ``taskset -c`` prefix when taskset is installed, and
    ``psutil.Process.cpu_affinity`` otherwise. Every started process gets a pid
    file under ``<results_dir>/.pids`` so ``cleanup`` can terminate leftovers
    from an interrupted session.
    """

    probe_host = "localhost"
    default_target_host = "localhost"
    backend_host = "localhost"

    def __init__(self, config: OrchestratorConfig) -> None:
        self.config = config
        self.results_dir = Path(config.results_dir)
        self.pid_dir = self.results_dir / PID_DIR_NAME
        self._taskset = shutil.which("taskset")
        if self._taskset is None:
            logger.debug("taskset not found, pinning falls back to psutil cpu_affinity")

    def command_for(self, role: Role, profile: ServiceProfile) -> str:
        if role == Role.TARGET:
            template = self.config.target_command
        elif role == Role.BACKEND:
            template = self.config.backend_command
        else:
            return self.config.driver_binary
        try:
            return template.format(**profile.template_values())
        except KeyError as e:
            raise ConfigurationError(
                f"Unknown placeholder {e} in {role.value} command template: '{template}'"
            ) from e

    def _pinned_argv(self, argv: list[str], pinned_cores: frozenset[int] | None) -> list[str]:
        if pinned_cores and self._taskset:
            return [self._taskset, "-c", format_cpuset(pinned_cores), *argv]
        return argv

    def _apply_affinity(self, pid: int, pinned_cores: frozenset[int]) -> None:
        psutil.Process(pid).cpu_affinity(sorted(pinned_cores))

    def start_process(
        self,
        role: Role,
        name: str,
        command: str,
        env: dict[str, str],
        pinned_cores: frozenset[int],
        port: int,
    ) -> ProcessHandle:
        argv = self._pinned_argv(shlex.split(command), pinned_cores)
        self.results_dir.mkdir(parents=True, exist_ok=True)
        log_path = self.results_dir / f"{role.value}.log"

        logger.debug(f"Launching {name}: {shlex.join(argv)}")
        try:
            with open(log_path, "ab") as log_file:
                process = subprocess.Popen(
                    argv,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    env={**os.environ, **env},
                    start_new_session=True,
                )
        except OSError as e:
            raise StartError(f"Failed to launch {name} ({argv[0]}): {e}") from e

        if pinned_cores and not self._taskset:
            try:
                self._apply_affinity(process.pid, pinned_cores)
            except (AttributeError, psutil.Error, OSError) as e:
                logger.warning(
                    f"Could not pin {name} (pid {process.pid}) to cores "
                    f"[{format_cpuset(pinned_cores)}]: {e}"
                )

        self._write_pid_file(role, process.pid)
        return ProcessHandle(
            name=name,
            role=role,
            port=port,
            pinned_cores=pinned_cores,
            process=process,
            log_path=log_path,
        )

    def stop_process(self, handle: ProcessHandle, grace_seconds: float) -> None:
        process = handle.process
        if process is None:
            return
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=grace_seconds)
            except subprocess.TimeoutExpired:
                logger.warning(
                    f"{handle.name} did not exit within {grace_seconds:g}s, killing it"
                )
                process.kill()
                process.wait()
        handle.exit_code = process.returncode
        self._remove_pid_file(handle.role)

    def is_alive(self, handle: ProcessHandle) -> bool:
        return handle.process is not None and handle.process.poll() is None

    def exit_code(self, handle: ProcessHandle) -> int | None:
        if handle.process is None:
            return None
        return handle.process.poll()

    def is_port_open(self, host: str, port: int) -> bool:
        return is_port_open(host, port)

    def run_command(
        self,
        argv: list[str],
        pinned_cores: frozenset[int] | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run the load driver to completion on its pinned cores.

        Without taskset the driver is pinned through psutil right after launch.

        Raises:
            DriverError: If the pinning cannot be applied
        """
        if not pinned_cores or self._taskset:
            return run_command(self._pinned_argv(list(argv), pinned_cores), timeout=timeout)

        def pin(pid: int) -> None:
            try:
                self._apply_affinity(pid, pinned_cores)
            except (AttributeError, psutil.Error, OSError) as e:
                raise DriverError(
                    f"Could not pin load driver '{argv[0]}' to cores "
                    f"[{format_cpuset(pinned_cores)}]: {e}"
                ) from e

        return run_command(list(argv), timeout=timeout, on_start=pin)

    def driver_path(self, path: Path) -> str:
        return str(path)

    def available_cores(self) -> int:
        if self.config.available_cores is not None:
            return self.config.available_cores
        return detect_available_cores()

    def build(self) -> None:
        for command in self.config.build_commands:
            logger.info(f"Building: {command}")
            try:
                result = run_command(shlex.split(command))
            except OSError as e:
                raise BuildError(f"Build command failed to start: '{command}': {e}") from e
            if not result.ok:
                raise BuildError(
                    f"Build command failed with exit code {result.exit_code}: '{command}'"
                    + (f"\nStderr: {result.stderr[-2000:]}" if result.stderr else "")
                )

    def cleanup(self) -> None:
        """Terminate processes left behind by previous sessions."""
        if not self.pid_dir.is_dir():
            logger.info("No recorded processes to clean up")
            return

        procs = []
        for pid_file in sorted(self.pid_dir.glob("*.pid")):
            try:
                pid = int(pid_file.read_text().strip())
                procs.append(psutil.Process(pid))
                logger.info(f"Stopping leftover {pid_file.stem} process (pid {pid})")
            except (ValueError, psutil.NoSuchProcess):
                logger.debug(f"Stale pid file {pid_file}")
            pid_file.unlink(missing_ok=True)

        for proc in procs:
            try:
                proc.terminate()
            except psutil.NoSuchProcess:
                pass
        _, alive = psutil.wait_procs(procs, timeout=self.config.stop_grace_seconds)
        for proc in alive:
            logger.warning(f"Force killing pid {proc.pid}")
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                pass

    def _write_pid_file(self, role: Role, pid: int) -> None:
        self.pid_dir.mkdir(parents=True, exist_ok=True)
        (self.pid_dir / f"{role.value}.pid").write_text(str(pid))

    def _remove_pid_file(self, role: Role) -> None:
        (self.pid_dir / f"{role.value}.pid").unlink(missing_ok=True)
