# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Process platforms: local child processes and Docker Compose."""

from passperf.common.config import OrchestratorConfig
from passperf.common.enums import PlatformType
from passperf.lifecycle.platforms.docker import DockerComposePlatform
from passperf.lifecycle.platforms.local import LocalProcessPlatform
from passperf.lifecycle.protocols import ProcessPlatformProtocol

__all__ = [
    "DockerComposePlatform",
    "LocalProcessPlatform",
    "create_platform",
]


def create_platform(config: OrchestratorConfig) -> ProcessPlatformProtocol:
    """Instantiate the platform selected by ``config.platform``."""
    if config.platform == PlatformType.DOCKER:
        return DockerComposePlatform(config)
    return LocalProcessPlatform(config)
