from __future__ import annotations

import socket
from dataclasses import dataclass, field
from typing import Optional, Tuple

DEFAULT_TIMEOUT_MS = 200
DEFAULT_DELAY_MS = 200


@dataclass(frozen=True)
class KnockConfig:
    family: int = socket.AF_UNSPEC
    socktype: int = socket.SOCK_STREAM
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    delay_ms: int = DEFAULT_DELAY_MS
    check_port: Optional[int] = None

    @property
    def proto_name(self) -> str:
        return "udp" if self.socktype == socket.SOCK_DGRAM else "tcp"


@dataclass(frozen=True)
class KnockTarget:
    family: int
    socktype: int
    proto: int
    sockaddr: Tuple

    def with_port(self, port: int) -> Tuple:
        # IPv6 sockaddrs carry (host, port, flowinfo, scope_id)
        return (self.sockaddr[0], port) + tuple(self.sockaddr[2:])


@dataclass(frozen=True)
class KnockAttempt:
    address: str
    port: str
    port_number: int
    transport: str
    error: Optional[str] = None
    target: Optional[KnockTarget] = field(default=None, repr=False)


@dataclass(frozen=True)
class CheckResult:
    address: str
    port: int
    is_open: bool
