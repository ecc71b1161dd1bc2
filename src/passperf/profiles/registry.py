# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Registry of named service protocol configurations.

A service name such as ``h2c-h1c`` identifies one passthrough configuration:
the protocol and TLS settings of the listener (server side), of the outbound
client connection, and of the echo backend, plus the ports both listen on.
"""

from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from passperf.common.exceptions import ConfigurationError, ServiceNotFoundError

__all__ = [
    "DEFAULT_REGISTRY",
    "SERVICE_PROFILES",
    "ServiceProfile",
    "ServiceProfileRegistry",
    "resolve",
]

ProtocolVersion = Literal[1, 2]


def _flag(value: bool) -> str:
    return "true" if value else "false"


class ServiceProfile(BaseModel):
    """Immutable protocol/port configuration of one service under test."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique service name, e.g. 'h1c-h2c'")
    client_protocol_version: ProtocolVersion
    client_tls: bool
    server_protocol_version: ProtocolVersion
    server_tls: bool
    listen_port: int = Field(gt=0, lt=65536)
    backend_protocol_version: ProtocolVersion
    backend_tls: bool
    backend_port: int = Field(gt=0, lt=65536)

    @property
    def scheme(self) -> str:
        return "https" if self.server_tls else "http"

    @property
    def force_http1(self) -> bool:
        """True when the listener only speaks HTTP/1.1."""
        return self.server_protocol_version == 1

    def target_url(self, host: str, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.scheme}://{host}:{self.listen_port}{path}"

    def target_env(self, backend_host: str = "localhost") -> dict[str, str]:
        """Environment for the service under test (passthrough container/process)."""
        return {
            "CLIENT_SSL": _flag(self.client_tls),
            "SERVER_SSL": _flag(self.server_tls),
            "CLIENT_HTTP2": _flag(self.client_protocol_version == 2),
            "SERVER_HTTP2": _flag(self.server_protocol_version == 2),
            "SERVER_PORT": str(self.listen_port),
            "BACKEND_PORT": str(self.backend_port),
            "BACKEND_HOST": backend_host,
        }

    def backend_env(self) -> dict[str, str]:
        """Environment for the echo backend."""
        return {
            "BACKEND_PORT": str(self.backend_port),
            "BACKEND_SSL": _flag(self.backend_tls),
            "BACKEND_HTTP2": _flag(self.backend_protocol_version == 2),
            "SSL_ENABLED": _flag(self.backend_tls),
            "HTTP2_ENABLED": _flag(self.backend_protocol_version == 2),
        }

    def template_values(self) -> dict[str, str | int]:
        """Placeholder values for local command templates."""
        return {
            "name": self.name,
            "client_tls": _flag(self.client_tls),
            "server_tls": _flag(self.server_tls),
            "client_http2": _flag(self.client_protocol_version == 2),
            "server_http2": _flag(self.server_protocol_version == 2),
            "listen_port": self.listen_port,
            "backend_port": self.backend_port,
            "backend_tls": _flag(self.backend_tls),
            "backend_http2": _flag(self.backend_protocol_version == 2),
        }


def _profile(
    name: str,
    listen_port: int,
    backend_port: int,
    *,
    client_tls: bool,
    server_tls: bool,
    client_h2: bool,
    server_h2: bool,
    backend_h2: bool,
) -> ServiceProfile:
    # The backend speaks TLS exactly when the outbound client connection does.
    return ServiceProfile(
        name=name,
        client_protocol_version=2 if client_h2 else 1,
        client_tls=client_tls,
        server_protocol_version=2 if server_h2 else 1,
        server_tls=server_tls,
        listen_port=listen_port,
        backend_protocol_version=2 if backend_h2 else 1,
        backend_tls=client_tls,
        backend_port=backend_port,
    )


# fmt: off
SERVICE_PROFILES: tuple[ServiceProfile, ...] = (
    _profile("h1-h1",   9091, 8689, client_tls=True,  server_tls=True,  client_h2=False, server_h2=False, backend_h2=False),
    _profile("h1c-h1",  9092, 8700, client_tls=True,  server_tls=False, client_h2=False, server_h2=False, backend_h2=False),
    _profile("h1-h1c",  9093, 8688, client_tls=False, server_tls=True,  client_h2=False, server_h2=False, backend_h2=False),
    _profile("h1c-h1c", 9094, 8701, client_tls=False, server_tls=False, client_h2=False, server_h2=False, backend_h2=False),
    _profile("h2-h2",   9095, 8691, client_tls=True,  server_tls=True,  client_h2=True,  server_h2=True,  backend_h2=True),
    _profile("h2c-h2",  9096, 8702, client_tls=True,  server_tls=False, client_h2=True,  server_h2=True,  backend_h2=True),
    _profile("h2-h2c",  9097, 8690, client_tls=False, server_tls=True,  client_h2=True,  server_h2=True,  backend_h2=True),
    _profile("h2c-h2c", 9098, 8703, client_tls=False, server_tls=False, client_h2=True,  server_h2=True,  backend_h2=True),
    _profile("h1-h2",   9099, 8693, client_tls=True,  server_tls=True,  client_h2=False, server_h2=False, backend_h2=True),
    _profile("h1c-h2",  9100, 8704, client_tls=True,  server_tls=False, client_h2=False, server_h2=False, backend_h2=True),
    _profile("h1-h2c",  9101, 8692, client_tls=False, server_tls=True,  client_h2=False, server_h2=False, backend_h2=True),
    _profile("h1c-h2c", 9102, 8705, client_tls=False, server_tls=False, client_h2=False, server_h2=False, backend_h2=True),
    _profile("h2-h1",   9103, 8706, client_tls=True,  server_tls=True,  client_h2=True,  server_h2=False, backend_h2=False),
    _profile("h2c-h1",  9104, 8707, client_tls=True,  server_tls=False, client_h2=True,  server_h2=False, backend_h2=False),
    _profile("h2-h1c",  9105, 8708, client_tls=False, server_tls=True,  client_h2=True,  server_h2=False, backend_h2=False),
    _profile("h2c-h1c", 9106, 8709, client_tls=False, server_tls=False, client_h2=True,  server_h2=False, backend_h2=False),
)
# fmt: on


class ServiceProfileRegistry:
    """Exact-match lookup table of service profiles.

    Port uniqueness is checked once when the registry is built: no two profiles
    may share a listen port or a backend port, and no port may be used both as
    a listen port and a backend port.

    Raises:
        ConfigurationError: If names or ports collide
    """

    def __init__(self, profiles: Iterable[ServiceProfile]) -> None:
        self._profiles: dict[str, ServiceProfile] = {}
        port_owners: dict[int, str] = {}

        for profile in profiles:
            if profile.name in self._profiles:
                raise ConfigurationError(
                    f"Duplicate service name in registry: '{profile.name}'"
                )
            for port in (profile.listen_port, profile.backend_port):
                owner = port_owners.get(port)
                if owner is not None:
                    raise ConfigurationError(
                        f"Port {port} of service '{profile.name}' is already "
                        f"used by service '{owner}'"
                    )
                port_owners[port] = profile.name
            self._profiles[profile.name] = profile

    def resolve(self, name: str) -> ServiceProfile:
        """Return the profile registered under exactly this name.

        Raises:
            ServiceNotFoundError: If no profile has this name
        """
        try:
            return self._profiles[name]
        except KeyError:
            raise ServiceNotFoundError(name, self.names()) from None

    def resolve_all(self, names: Iterable[str]) -> list[ServiceProfile]:
        """Resolve several names, failing on the first unknown one."""
        return [self.resolve(name) for name in names]

    def names(self) -> list[str]:
        return list(self._profiles)

    def __iter__(self):
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles


DEFAULT_REGISTRY = ServiceProfileRegistry(SERVICE_PROFILES)


def resolve(name: str) -> ServiceProfile:
    """Resolve a service name against the built-in registry."""
    return DEFAULT_REGISTRY.resolve(name)
