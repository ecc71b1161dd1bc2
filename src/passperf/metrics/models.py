# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class RunMetrics(BaseModel):
    """Measurements parsed from one load driver report.

    Attributes:
        total_requests: Requests issued by the driver
        successful_requests: Requests answered with a 2xx status
        throughput_req_per_sec: Completed requests per second
        mean_latency_ms: Mean request latency in milliseconds
    """

    model_config = ConfigDict(frozen=True)

    total_requests: int = Field(ge=0)
    successful_requests: int = Field(ge=0)
    throughput_req_per_sec: float = Field(ge=0)
    mean_latency_ms: float = Field(ge=0)

    @model_validator(mode="after")
    def check_successes_within_total(self) -> "RunMetrics":
        if self.successful_requests > self.total_requests:
            raise ValueError(
                f"successful_requests ({self.successful_requests}) cannot exceed "
                f"total_requests ({self.total_requests})"
            )
        return self

    @computed_field
    @property
    def error_rate_percent(self) -> float:
        if self.total_requests == 0:
            return 0.0
        failed = self.total_requests - self.successful_requests
        return failed / self.total_requests * 100.0
