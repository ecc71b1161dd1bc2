# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Run the service under test, its backend and the load driver with Docker Compose.

Containers are started with ``docker compose up -d <service>``; the profile's
settings reach the containers through the environment used for compose variable
substitution. Core pinning is applied afterwards with
``docker update --cpuset-cpus``. The load driver runs inside its own pinned
container through ``docker compose exec -T``.
"""

import logging
from pathlib import Path

from passperf.common.config import OrchestratorConfig
from passperf.common.enums import Role
from passperf.common.exceptions import BuildError, DriverError, PassPerfError, StartError
from passperf.lifecycle.commands import is_port_open, run_command
from passperf.lifecycle.models import CommandResult, ProcessHandle
from passperf.profiles import ServiceProfile
from passperf.resources.cpu_planner import detect_available_cores, format_cpuset

logger = logging.getLogger(__name__)

__all__ = [
    "COMPOSE_SERVICES",
    "CONTAINER_NAMES",
    "DockerComposePlatform",
]

COMPOSE_SERVICES = {
    Role.TARGET: "passthrough",
    Role.BACKEND: "backend",
    Role.DRIVER: "h2load",
}
CONTAINER_NAMES = {
    Role.TARGET: "ballerina-passthrough",
    Role.BACKEND: "netty-backend",
    Role.DRIVER: "h2load-client",
}
DRIVER_SAMPLES_MOUNT = "/samples"
_DOCKER_COMMAND_TIMEOUT = 120.0


class DockerComposePlatform:
    """Process platform backed by a Docker Compose project."""

    probe_host = "localhost"
    default_target_host = COMPOSE_SERVICES[Role.TARGET]
    backend_host = CONTAINER_NAMES[Role.BACKEND]

    def __init__(self, config: OrchestratorConfig) -> None:
        self.config = config
        self.compose_file = Path(config.compose_file)
        self._driver_cores: frozenset[int] | None = None

    def _compose(self, *args: str) -> list[str]:
        return ["docker", "compose", "-f", str(self.compose_file), *args]

    def _docker(
        self,
        argv: list[str],
        env: dict[str, str] | None = None,
        timeout: float | None = _DOCKER_COMMAND_TIMEOUT,
    ) -> CommandResult:
        logger.debug(f"Running: {' '.join(argv)}")
        return run_command(argv, env=env, timeout=timeout)

    def command_for(self, role: Role, profile: ServiceProfile) -> str:
        return COMPOSE_SERVICES[role]

    def _pin(self, container: str, pinned_cores: frozenset[int]) -> CommandResult:
        return self._docker(
            ["docker", "update", f"--cpuset-cpus={format_cpuset(pinned_cores)}", container]
        )

    def start_process(
        self,
        role: Role,
        name: str,
        command: str,
        env: dict[str, str],
        pinned_cores: frozenset[int],
        port: int,
    ) -> ProcessHandle:
        container = CONTAINER_NAMES[role]
        try:
            result = self._docker(self._compose("up", "-d", "--force-recreate", command), env=env)
        except OSError as e:
            raise StartError(f"Failed to run docker for {name}: {e}") from e
        if not result.ok:
            raise StartError(
                f"docker compose up failed for {name} (exit code {result.exit_code}): "
                f"{result.stderr.strip()[-2000:]}"
            )

        if pinned_cores:
            pin = self._pin(container, pinned_cores)
            if not pin.ok:
                raise StartError(
                    f"Failed to pin {container} to cores [{format_cpuset(pinned_cores)}]: "
                    f"{pin.stderr.strip()}"
                )
            logger.info(f"{container} pinned to CPU cores [{format_cpuset(pinned_cores)}]")

        return ProcessHandle(
            name=name,
            role=role,
            port=port,
            pinned_cores=pinned_cores,
            container=container,
        )

    def stop_process(self, handle: ProcessHandle, grace_seconds: float) -> None:
        service = COMPOSE_SERVICES[handle.role]
        # compose stop sends SIGTERM and escalates to SIGKILL after the timeout
        stop = self._docker(self._compose("stop", "-t", str(int(grace_seconds)), service))
        if not stop.ok:
            logger.warning(f"docker compose stop failed for {handle.name}: {stop.stderr.strip()}")
            kill = self._docker(self._compose("kill", service))
            if not kill.ok:
                logger.error(f"docker compose kill failed for {handle.name}: {kill.stderr.strip()}")
        handle.exit_code = self.exit_code(handle)
        self._docker(self._compose("rm", "-f", service))

    def _inspect(self, container: str, field: str) -> str | None:
        result = self._docker(["docker", "inspect", "-f", f"{{{{{field}}}}}", container])
        if not result.ok:
            return None
        return result.stdout.strip()

    def is_alive(self, handle: ProcessHandle) -> bool:
        return self._inspect(handle.container or CONTAINER_NAMES[handle.role], ".State.Running") == "true"

    def exit_code(self, handle: ProcessHandle) -> int | None:
        value = self._inspect(handle.container or CONTAINER_NAMES[handle.role], ".State.ExitCode")
        try:
            return int(value) if value is not None else None
        except ValueError:
            return None

    def is_port_open(self, host: str, port: int) -> bool:
        return is_port_open(host, port)

    def _ensure_driver_container(self, pinned_cores: frozenset[int] | None) -> None:
        if self._driver_cores is not None and self._driver_cores == (pinned_cores or frozenset()):
            return
        container = CONTAINER_NAMES[Role.DRIVER]
        logger.info(f"Starting load driver container {container}")
        result = self._docker(self._compose("up", "-d", COMPOSE_SERVICES[Role.DRIVER]))
        if not result.ok:
            raise DriverError(
                f"Failed to start load driver container: {result.stderr.strip()[-2000:]}"
            )
        if pinned_cores:
            pin = self._pin(container, pinned_cores)
            if not pin.ok:
                raise DriverError(f"Failed to pin {container}: {pin.stderr.strip()}")
            logger.info(f"{container} pinned to CPU cores [{format_cpuset(pinned_cores)}]")
        self._driver_cores = pinned_cores or frozenset()

    def run_command(
        self,
        argv: list[str],
        pinned_cores: frozenset[int] | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        self._ensure_driver_container(pinned_cores)
        return run_command(
            self._compose("exec", "-T", COMPOSE_SERVICES[Role.DRIVER], *argv),
            timeout=timeout,
        )

    def driver_path(self, path: Path) -> str:
        return f"{DRIVER_SAMPLES_MOUNT}/{Path(path).name}"

    def available_cores(self) -> int:
        if self.config.available_cores is not None:
            return self.config.available_cores
        try:
            result = self._docker(["docker", "system", "info", "--format", "{{.NCPU}}"])
            if result.ok:
                return int(result.stdout.strip())
            logger.warning(f"docker system info failed: {result.stderr.strip()}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not query Docker for available cores: {e}")
        return detect_available_cores()

    def build(self) -> None:
        logger.info("Building Docker images")
        try:
            result = self._docker(self._compose("build", "--parallel"), timeout=None)
        except OSError as e:
            raise BuildError(f"Failed to run docker: {e}") from e
        if not result.ok:
            raise BuildError(
                f"docker compose build failed with exit code {result.exit_code}: "
                f"{result.stderr.strip()[-2000:]}"
            )

    def cleanup(self) -> None:
        logger.info("Stopping containers and removing volumes")
        try:
            result = self._docker(self._compose("down", "-v"))
        except OSError as e:
            raise PassPerfError(f"Failed to run docker: {e}") from e
        if not result.ok:
            logger.warning(f"docker compose down failed: {result.stderr.strip()}")
        self._driver_cores = None
