from __future__ import annotations

from typing import List, Sequence

from .models import CheckResult, KnockConfig


def format_config(hostname: str, ports: Sequence[str], config: KnockConfig) -> List[str]:
    lines = [
        f"hostname={hostname} proto={config.proto_name} "
        f"timeout={config.timeout_ms}ms delay={config.delay_ms}ms"
    ]
    lines.extend(f"port={p}" for p in ports)
    return lines


def print_config(hostname: str, ports: Sequence[str], config: KnockConfig) -> None:
    for line in format_config(hostname, ports, config):
        print(line)


def print_target(hostname: str, address: str) -> None:
    print(f"knocking hostname={hostname} address={address}")


def print_knock(port: str, transport: str) -> None:
    print(f"\tport={port}/{transport}")


def format_check(r: CheckResult) -> str:
    status = "open" if r.is_open else "closed"
    return f"check address={r.address} port={r.port} {status}"


def print_checks(results: List[CheckResult]) -> None:
    for r in results:
        print(format_check(r))
