"""OpenFlow flows in ovs-ofctl text form, with a stable ordering."""

from __future__ import annotations

from dataclasses import dataclass, field

PORT_LOCAL = 0xFFFE

PROTOCOLS = frozenset(
    {"arp", "icmp", "icmp6", "ip", "ipv6", "tcp", "tcp6", "udp", "udp6"}
)

# matches that match everything and so say nothing
_WILDCARD_MATCHES = frozenset(
    {"nw_src=0.0.0.0/0", "nw_dst=0.0.0.0/0", "ipv6_src=::/0", "ipv6_dst=::/0"}
)


@dataclass
class Flow:
    """One flow: where it sits, what it matches and what it does."""

    priority: int = 0
    protocol: str = ""
    in_port: int = 0
    matches: list[str] = field(default_factory=list)
    table: int = 0
    idle_timeout: int = 0
    cookie: int = 0
    actions: list[str] = field(default_factory=list)

    def to_text(self) -> str:
        """Return the flow in the text form ``parse_flow`` reads."""
        parts = [f"priority={self.priority}"]
        if self.protocol:
            parts.append(self.protocol)
        if self.in_port:
            port = "LOCAL" if self.in_port == PORT_LOCAL else str(self.in_port)
            parts.append(f"in_port={port}")
        parts.extend(self.matches)
        parts.append(f"table={self.table}")
        parts.append(f"idle_timeout={self.idle_timeout}")
        if self.cookie:
            parts.append(f"cookie={self.cookie:#x}")
        parts.append("actions=" + ",".join(self.actions))
        return ",".join(parts)

    def __str__(self) -> str:
        return self.to_text()

    def _sort_key(self) -> tuple:
        matches = sorted(m for m in self.matches if m and m not in _WILDCARD_MATCHES)
        actions = [a for a in self.actions if a]
        return (
            self.table,
            -self.priority,
            self.in_port,
            self.protocol,
            (len(matches), matches),
            (len(actions), actions),
            self.idle_timeout,
            self.cookie,
        )


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise ValueError(f"unbalanced parentheses in {text!r}")
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if depth:
        raise ValueError(f"unbalanced parentheses in {text!r}")
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def _int_field(name: str, value: str, base: int = 10) -> int:
    try:
        number = int(value, base)
    except ValueError:
        raise ValueError(f"bad {name} value {value!r}") from None
    if number < 0:
        raise ValueError(f"bad {name} value {value!r}")
    return number


def _parse_in_port(value: str) -> int:
    if value.upper() == "LOCAL":
        return PORT_LOCAL
    return _int_field("in_port", value)


def parse_flow(text: str) -> Flow:
    """Parse a flow such as ``table=0,priority=10,ip,actions=drop``."""
    tokens = _split_top_level(text)
    action_index = next(
        (i for i, token in enumerate(tokens) if token.startswith("actions=")), None
    )
    if action_index is None:
        raise ValueError(f"missing actions in {text!r}")
    first_action = tokens[action_index][len("actions="):].strip()
    actions = ([first_action] if first_action else []) + tokens[action_index + 1:]
    if not actions:
        raise ValueError(f"empty actions in {text!r}")

    flow = Flow(actions=actions)
    for token in tokens[:action_index]:
        key, sep, value = token.partition("=")
        key = key.strip()
        value = value.strip()
        if not sep:
            if key in PROTOCOLS and not flow.protocol:
                flow.protocol = key
            else:
                flow.matches.append(key)
        elif key == "priority":
            flow.priority = _int_field(key, value)
        elif key == "table":
            flow.table = _int_field(key, value)
        elif key == "idle_timeout":
            flow.idle_timeout = _int_field(key, value)
        elif key == "cookie":
            flow.cookie = _int_field(key, value, 0)
        elif key == "in_port":
            flow.in_port = _parse_in_port(value)
        else:
            flow.matches.append(f"{key}={value}")
    return flow


def compare_flows(a: Flow, b: Flow) -> int:
    """Order flows by table, then higher priority first, then the rest.

    Match order does not matter, and matches that match every address are
    ignored. Returns -1, 0 or 1.
    """
    ka, kb = a._sort_key(), b._sort_key()
    return (ka > kb) - (ka < kb)


def flows_equal(a: Flow, b: Flow) -> bool:
    """Return whether two flows compare as the same flow."""
    return compare_flows(a, b) == 0