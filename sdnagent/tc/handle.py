"""tc qdisc handles: parsing and formatting of ``major:minor`` values."""

from __future__ import annotations

import re

TC_H_UNSPEC = 0
TC_H_ROOT = 0xFFFFFFFF
TC_H_INGRESS = 0xFFFFFFF1
TC_H_CLSACT = TC_H_INGRESS

_HEX = re.compile(r"[0-9a-fA-F]+")


def _parse_part(name: str, value: str) -> int:
    if not value:
        return 0
    if not _HEX.fullmatch(value):
        raise ValueError(f"bad {name} value {value}: invalid syntax")
    number = int(value, 16)
    if number > 0xFFFF:
        raise ValueError(f"bad {name} value {value}: value out of range")
    return number


def parse_handle(s: str) -> int:
    """Parse a handle such as ``1:``, ``ffff:fff1``, ``root`` or ``none``."""
    if s == "root":
        return TC_H_ROOT
    if s == "none":
        return TC_H_UNSPEC
    _, _, s = s.rpartition("#") if "#" in s else ("", "", s)
    parts = s.split(":", 1)
    if len(parts) != 2:
        raise ValueError(f"invalid handle {s}")
    major = _parse_part("major", parts[0])
    minor = _parse_part("minor", parts[1])
    return (major << 16) | minor


def format_handle(h: int) -> str:
    """Format a handle the way tc prints it."""
    text = f"{h >> 16:x}:"
    if h & 0xFFFF:
        text += f"{h & 0xFFFF:x}"
    return text