# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Load driver invocation and benchmark payloads."""

from passperf.driver.h2load import H2LoadDriver, LoadDriverProtocol, RawReport
from passperf.driver.payloads import (
    STANDARD_PAYLOAD_SIZES,
    PayloadStore,
    parse_size_label,
)

__all__ = [
    "H2LoadDriver",
    "LoadDriverProtocol",
    "PayloadStore",
    "RawReport",
    "STANDARD_PAYLOAD_SIZES",
    "parse_size_label",
]
