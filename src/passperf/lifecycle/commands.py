# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Blocking subprocess helpers shared by the platforms."""

import os
import socket
import subprocess
import time
from collections.abc import Callable

from passperf.lifecycle.models import CommandResult

_PROBE_TIMEOUT_SECONDS = 1.0


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def run_command(
    argv: list[str],
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_start: Callable[[int], None] | None = None,
) -> CommandResult:
    """Run a command to completion, capturing its output.

    A timeout is reported on the result (with whatever output was captured)
    rather than raised. A missing executable raises FileNotFoundError.

    Args:
        argv: Command and arguments
        env: Extra environment variables
        timeout: Seconds before the command is killed
        on_start: Called with the pid right after launch; if it raises, the
            command is killed and the error propagates
    """
    full_env = {**os.environ, **env} if env else None
    start = time.perf_counter()
    process = subprocess.Popen(
        argv,
        env=full_env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    if on_start is not None:
        try:
            on_start(process.pid)
        except BaseException:
            process.kill()
            process.communicate()
            raise

    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        stdout, stderr = process.communicate()
        return CommandResult(
            argv=tuple(argv),
            exit_code=None,
            stdout=_as_text(stdout),
            stderr=_as_text(stderr),
            wall_time_seconds=time.perf_counter() - start,
            timed_out=True,
        )
    return CommandResult(
        argv=tuple(argv),
        exit_code=process.returncode,
        stdout=_as_text(stdout),
        stderr=_as_text(stderr),
        wall_time_seconds=time.perf_counter() - start,
    )


def is_port_open(host: str, port: int, timeout: float = _PROBE_TIMEOUT_SECONDS) -> bool:
    """Return True if a TCP connection to host:port can be established."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False
