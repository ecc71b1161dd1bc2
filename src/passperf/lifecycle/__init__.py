# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Process lifecycle management for dependency processes."""

from passperf.lifecycle.controller import ProcessLifecycleController
from passperf.lifecycle.models import CommandResult, ProcessHandle
from passperf.lifecycle.platforms import (
    DockerComposePlatform,
    LocalProcessPlatform,
    create_platform,
)
from passperf.lifecycle.protocols import ProcessPlatformProtocol

__all__ = [
    "CommandResult",
    "DockerComposePlatform",
    "LocalProcessPlatform",
    "ProcessHandle",
    "ProcessLifecycleController",
    "ProcessPlatformProtocol",
    "create_platform",
]
