from __future__ import annotations

import socket
from typing import List

from .models import KnockConfig, KnockTarget


class ResolveError(ValueError):
    pass


def resolve_targets(hostname: str, config: KnockConfig) -> List[KnockTarget]:
    """
    Resolves hostname into knock targets, in resolver order.
    Family and socket type come from the config (-4/-6, -u).
    """
    try:
        infos = socket.getaddrinfo(
            hostname,
            None,
            config.family,
            config.socktype,
            0,
            socket.AI_ADDRCONFIG,
        )
    except socket.gaierror as e:
        raise ResolveError(f"{hostname}: {e.strerror or e}") from e
    except UnicodeError as e:
        # idna refuses empty or over-long labels before the resolver sees them
        raise ResolveError(f"{hostname}: {e}") from e

    if not infos:
        raise ResolveError(f"{hostname}: no addresses")

    return [
        KnockTarget(family=family, socktype=socktype, proto=proto, sockaddr=tuple(sockaddr))
        for family, socktype, proto, _canonname, sockaddr in infos
    ]


def numeric_address(target: KnockTarget) -> str:
    # raises socket.gaierror / OSError when the address can't be rendered
    host, _port = socket.getnameinfo(target.sockaddr, socket.NI_NUMERICHOST)
    return host
