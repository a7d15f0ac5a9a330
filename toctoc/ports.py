from __future__ import annotations

import re

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def atoi(text: str) -> int:
    """
    Lenient integer parse, same rules as C atoi():
    leading whitespace, optional sign, longest digit prefix.
    Anything without digits is 0.
    """
    m = _LEADING_INT.match(text)
    if not m:
        return 0
    return int(m.group(1))


def parse_port(text: str) -> int:
    """
    Port string -> 16-bit port number.
    Out of range values are truncated to their low 16 bits ("70000" -> 4464).
    """
    return atoi(text) & 0xFFFF
