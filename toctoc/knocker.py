from __future__ import annotations

import errno
import logging
import os
import select
import socket
import time
from typing import List, Optional, Sequence, Tuple

from .logger import LOGGER_NAME
from .models import CheckResult, KnockAttempt, KnockConfig, KnockTarget
from .output import print_checks, print_config, print_knock, print_target
from .ports import parse_port
from .targets import ResolveError, numeric_address, resolve_targets

CHECK_TIMEOUT_S = 2.0

logger = logging.getLogger(LOGGER_NAME)


def _seconds(ms: int) -> float:
    return max(ms, 0) / 1000.0


def _knock_tcp(sock: socket.socket, dest: Tuple, timeout_ms: int) -> Optional[str]:
    """
    Non-blocking connect, then wait (bounded) for the socket to become writable.
    Readiness and timeout are treated the same.
    """
    sock.setblocking(False)
    err = sock.connect_ex(dest)
    if err not in (0, errno.EINPROGRESS):
        msg = os.strerror(err)
        logger.error("unable to connect: %s", msg)
        return msg

    select.select([], [sock], [], _seconds(timeout_ms))
    return None


def _knock_udp(sock: socket.socket, dest: Tuple) -> Optional[str]:
    try:
        sock.sendto(b"", dest)
    except OSError as e:
        logger.error("unable to sendto: %s", e)
        return str(e)
    return None


def knock_one(target: KnockTarget, address: str, port: str, config: KnockConfig) -> Optional[KnockAttempt]:
    """
    One knock on one port. Returns None when no socket could be allocated.
    """
    try:
        sock = socket.socket(target.family, target.socktype, target.proto)
    except OSError as e:
        logger.error("unable to open allocate socket: %s", e)
        return None

    port_number = parse_port(port)
    dest = target.with_port(port_number)

    with sock:
        if target.socktype == socket.SOCK_DGRAM:
            transport = "U"
            print_knock(port, transport)
            error = _knock_udp(sock, dest)
        else:
            transport = "T"
            print_knock(port, transport)
            error = _knock_tcp(sock, dest, config.timeout_ms)

    return KnockAttempt(
        address=address,
        port=port,
        port_number=port_number,
        transport=transport,
        error=error,
        target=target,
    )


def knock(
    hostname: str,
    targets: Sequence[KnockTarget],
    ports: Sequence[str],
    config: KnockConfig,
) -> List[KnockAttempt]:
    """
    Knocks every port (input order) on every target (resolver order),
    sleeping the configured delay between ports but not after the last one.
    """
    attempts: List[KnockAttempt] = []
    last = len(ports) - 1

    for target in targets:
        try:
            address = numeric_address(target)
        except OSError as e:
            logger.error("unable to get name info: %s", e)
            continue

        print_target(hostname, address)

        for i, port in enumerate(ports):
            attempt = knock_one(target, address, port, config)
            if attempt is None:
                continue
            attempts.append(attempt)

            if i != last:
                time.sleep(_seconds(config.delay_ms))

    return attempts


def check_port(target: KnockTarget, address: str, port: int, timeout_s: float = CHECK_TIMEOUT_S) -> CheckResult:
    """
    One blocking TCP connect to the target's own sockaddr (keeps the IPv6 scope id).
    """
    try:
        with socket.socket(target.family, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout_s)
            sock.connect(target.with_port(port))
        is_open = True
    except OSError:
        is_open = False
    return CheckResult(address=address, port=port, is_open=is_open)


def check_ports(attempts: Sequence[KnockAttempt], port: int) -> List[CheckResult]:
    # once per knocked address, in knock order
    seen = {}
    for a in attempts:
        seen.setdefault(a.address, a.target)
    return [check_port(target, address, port) for address, target in seen.items()]


def run(hostname: str, ports: Sequence[str], config: KnockConfig) -> int:
    print_config(hostname, ports, config)

    try:
        targets = resolve_targets(hostname, config)
    except ResolveError as e:
        logger.error("unable to get address info: %s", e)
        return 1

    attempts = knock(hostname, targets, ports, config)

    if config.check_port is not None:
        print_checks(check_ports(attempts, config.check_port))

    return 0
