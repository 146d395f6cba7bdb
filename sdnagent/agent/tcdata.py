"""Traffic control settings for an interface and the qdisc tree they need."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..tc.tree import QdiscTree, qdisc_tree_from_string
from ..tc.units import print_rate, print_size

_MIN_BURST = 3400


class TcDataType(str, Enum):
    HOSTLOCAL = "hostlocal"
    GUEST = "guest"


@dataclass
class TcData:
    """Bandwidth settings of one interface."""

    type: TcDataType
    ifname: str
    ingress_mbps: int = 0
    egress_mbps: int = 0

    def __str__(self) -> str:
        if self.type is TcDataType.GUEST:
            return f"{self.type.value} {self.ifname}: ingress={self.ingress_mbps}Mbps"
        if self.type is TcDataType.HOSTLOCAL:
            return f"{self.type.value} {self.ifname}"
        return ""

    def _guest_tree(self) -> QdiscTree:
        if self.ingress_mbps == 0:
            return qdisc_tree_from_string("qdisc fq_codel root handle 1:")
        bytes_per_sec = self.ingress_mbps * 1000 * 1000 // 8
        burst = max(bytes_per_sec // 1000, _MIN_BURST)
        # tc accepts "mpu 64b" yet prints "mpu 0b" on qdisc show, so leave it out
        text = (
            f"qdisc tbf root handle 1: rate {print_rate(bytes_per_sec)} "
            f"burst {print_size(burst)} latency 100ms\n"
            "qdisc fq_codel parent 1: handle 10:\n"
        )
        return qdisc_tree_from_string(text)

    def qdisc_tree(self) -> QdiscTree:
        """Return the qdisc tree that enforces these settings."""
        if self.type is TcDataType.GUEST:
            return self._guest_tree()
        if self.type is TcDataType.HOSTLOCAL:
            return qdisc_tree_from_string("qdisc fq_codel root handle 1:\n")
        raise ValueError(f"unknown tc data type {self.type!r}")