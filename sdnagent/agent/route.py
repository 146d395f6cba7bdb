"""IPv4 routes read from ``/proc/net/route`` and longest-prefix lookup."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PROC_NET_ROUTE = "/proc/net/route"

_HEX = re.compile(r"[0-9a-fA-F]+")
_DEC = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Route:
    """One IPv4 route."""

    net: ipaddress.IPv4Network
    gateway: Optional[ipaddress.IPv4Address] = None
    dev: str = ""
    metric: int = 0

    def __str__(self) -> str:
        text = str(self.net)
        if self.gateway is not None and not self.gateway.is_unspecified:
            text += f" via {self.gateway}"
        if self.dev:
            text += f" dev {self.dev}"
        if self.metric > 0:
            text += f" metric {self.metric}"
        return text


class Routes(list):
    """A routing table."""

    def __str__(self) -> str:
        return "\n".join(str(route) for route in self)

    def lookup(self, ip: str) -> Route:
        """Return the most specific route to ``ip``, lowest metric on ties."""
        try:
            address = ipaddress.ip_address(ip)
        except ValueError:
            raise LookupError(f"no route to {ip}") from None
        best: Optional[Route] = None
        best_prefix = -1
        best_metric = 10_000_000
        for route in self:
            prefix = route.net.prefixlen
            if best_prefix > prefix or address not in route.net:
                continue
            if best_prefix < prefix:
                best, best_prefix, best_metric = route, prefix, route.metric
            elif best_metric > route.metric:
                best, best_metric = route, route.metric
        if best is None:
            raise LookupError(f"no route to {ip}")
        return best


def _uint32(text: str, pattern: re.Pattern, base: int) -> Optional[int]:
    if not pattern.fullmatch(text):
        return None
    value = int(text, base)
    return value if value <= 0xFFFFFFFF else None


def _ipv4(value: int) -> ipaddress.IPv4Address:
    # /proc/net/route prints addresses in host (little endian) byte order
    return ipaddress.IPv4Address(value.to_bytes(4, "little"))


def parse_routes(text: str) -> Routes:
    """Parse the contents of ``/proc/net/route``, skipping the header line."""
    routes = Routes()
    for line in text.split("\n")[1:]:
        fields = line.split("\t")
        if len(fields) < 8:
            continue
        dest = _uint32(fields[1], _HEX, 16)
        gateway = _uint32(fields[2], _HEX, 16)
        mask = _uint32(fields[7], _HEX, 16)
        metric = _uint32(fields[6], _DEC, 10)
        if None in (dest, gateway, mask, metric):
            continue
        try:
            net = ipaddress.IPv4Network(f"{_ipv4(dest)}/{_ipv4(mask)}", strict=False)
        except ValueError:
            continue
        routes.append(Route(net=net, gateway=_ipv4(gateway), dev=fields[0], metric=metric))
    return routes


def get_routes(path=PROC_NET_ROUTE) -> Routes:
    """Read and parse the kernel routing table."""
    return parse_routes(Path(path).read_text())


def route_lookup(ip: str) -> Route:
    """Look up the route the kernel would use for ``ip``."""
    return get_routes().lookup(ip)