# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from passperf.common.mixins.health_check_mixin import (
    HealthCheckMixin,
    HealthCheckResult,
)

__all__ = [
    "HealthCheckMixin",
    "HealthCheckResult",
]
