# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

MILLIS_PER_SECOND = 1000
MILLIS_PER_MICRO = 0.001
BYTES_PER_KB = 1024
BYTES_PER_MB = 1024 * 1024

# Coefficient of variation thresholds (percent) for consistency tiers.
EXCELLENT_CV_THRESHOLD = 3.0
GOOD_CV_THRESHOLD = 5.0

# Minimum cores that still guarantee one exclusive core per role.
MIN_ISOLATION_CORES = 4
