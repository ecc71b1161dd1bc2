# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Service protocol profiles."""

from passperf.profiles.registry import (
    DEFAULT_REGISTRY,
    SERVICE_PROFILES,
    ServiceProfile,
    ServiceProfileRegistry,
    resolve,
)

__all__ = [
    "DEFAULT_REGISTRY",
    "SERVICE_PROFILES",
    "ServiceProfile",
    "ServiceProfileRegistry",
    "resolve",
]
