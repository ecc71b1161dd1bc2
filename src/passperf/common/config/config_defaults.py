# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass
from pathlib import Path

from passperf.common.enums import ConsistencyBasis, PlatformType


@dataclass(frozen=True)
class ScenarioDefaults:
    SERVICES = ("h1c-h1c", "h2c-h2c", "h1c-h2c")
    PAYLOAD_SIZES = ("1KB", "10KB", "100KB")
    CONCURRENCY = (100,)


@dataclass(frozen=True)
class MeasurementDefaults:
    NUM_RUNS = 5
    DISCARD_FIRST_N = 1
    WARMUP_SECONDS = 300.0
    MEASUREMENT_SECONDS = 900.0
    COOLDOWN_SECONDS = 60.0
    DRIVER_TIMEOUT_GRACE_SECONDS = 60.0
    CONSISTENCY_BASIS = ConsistencyBasis.THROUGHPUT


@dataclass(frozen=True)
class LifecycleDefaults:
    READY_TIMEOUT_SECONDS = 30.0
    READY_POLL_INTERVAL = 0.5
    STOP_GRACE_SECONDS = 2.0
    SETTLE_SECONDS = 0.0


@dataclass(frozen=True)
class MonitoringDefaults:
    CPU_SAMPLE_INTERVAL = 5.0
    MAX_CPU_THRESHOLD = 90.0


@dataclass(frozen=True)
class PlatformDefaults:
    PLATFORM = PlatformType.LOCAL
    TARGET_PATH = "/passthrough"
    DRIVER_BINARY = "h2load"
    TARGET_COMMAND = (
        "java -jar ballerina-passthrough/target/bin/ballerina_passthrough.jar"
        " -CclientSsl={client_tls} -CserverSsl={server_tls}"
        " -CclientHttp2={client_http2} -CserverHttp2={server_http2}"
        " -CserverPort={listen_port} -CbackendPort={backend_port}"
        " -CbackendHost=localhost"
    )
    BACKEND_COMMAND = (
        "java -jar netty-backend/target/netty-http-echo-service.jar"
        " --port {backend_port} --ssl {backend_tls} --http2 {backend_http2}"
    )
    BUILD_COMMANDS = (
        "mvn -q -f netty-backend/pom.xml clean package -DskipTests",
        "bal build ballerina-passthrough",
    )
    COMPOSE_FILE = Path("docker/docker-compose.yml")


@dataclass(frozen=True)
class OutputDefaults:
    RESULTS_DIR = Path("results")
    SAMPLES_DIR = Path("samples")
    LOG_LEVEL = "INFO"
