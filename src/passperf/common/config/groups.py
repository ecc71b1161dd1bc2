# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from cyclopts import Group


class Groups:
    """CLI help groups, in display order."""

    SCENARIO_MATRIX = Group.create_ordered("Scenario Matrix")
    MEASUREMENT = Group.create_ordered("Measurement")
    LIFECYCLE = Group.create_ordered("Process Lifecycle")
    PLATFORM = Group.create_ordered("Platform")
    OUTPUT = Group.create_ordered("Output")
