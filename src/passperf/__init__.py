# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""PassPerf - Statistical load-test orchestration for passthrough services."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("passperf")
except PackageNotFoundError:
    __version__ = "unknown"
