"""Guests on this host as described by their ``desc`` files."""

from __future__ import annotations

import ipaddress
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from .tcdata import TcData, TcDataType


def _fold(data: Optional[dict]) -> dict[str, Any]:
    # JSON object keys are matched without regard to case
    return {str(key).lower(): value for key, value in (data or {}).items()}


@dataclass
class GuestNICNetworkAddress:
    type: str = ""
    ip_addr: str = ""
    masklen: int = 0
    gateway: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> GuestNICNetworkAddress:
        d = _fold(data)
        return cls(
            type=d.get("type") or "",
            ip_addr=d.get("ip_addr") or "",
            masklen=int(d.get("masklen") or 0),
            gateway=d.get("gateway") or "",
        )


@dataclass
class GuestNICVpc:
    id: str = ""
    provider: str = ""
    mapped_ip_addr: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> GuestNICVpc:
        d = _fold(data)
        return cls(
            id=d.get("id") or "",
            provider=d.get("provider") or "",
            mapped_ip_addr=d.get("mapped_ip_addr") or "",
        )


def mac_to_link_local(mac: str) -> ipaddress.IPv6Address:
    """Return the EUI-64 based IPv6 link local address of a MAC address."""
    parts = mac.split(":")
    if len(parts) != 6 or not all(len(p) == 2 for p in parts):
        raise ValueError(f"invalid mac address {mac!r}")
    try:
        octets = bytes(int(p, 16) for p in parts)
    except ValueError:
        raise ValueError(f"invalid mac address {mac!r}") from None
    eui64 = bytes([octets[0] ^ 0x02]) + octets[1:3] + b"\xff\xfe" + octets[3:]
    return ipaddress.IPv6Address(b"\xfe\x80" + b"\x00" * 6 + eui64)


@dataclass
class GuestNIC:
    """One network interface of a guest."""

    bridge: str = ""
    bw: int = 0
    dns: str = ""
    domain: str = ""
    driver: str = ""
    gateway: str = ""
    ifname_host: str = ""
    index: int = 0
    ifname_vm: str = ""
    ip: str = ""
    virtual_ips: list[str] = field(default_factory=list)
    mac: str = ""
    masklen: int = 0
    net: str = ""
    net_id: str = ""
    virtual: bool = False
    vlan: int = 0
    wire_id: str = ""
    host_id: str = ""
    vpc: GuestNICVpc = field(default_factory=GuestNICVpc)
    ip6: str = ""
    gateway6: str = ""
    masklen6: int = 0
    ct_zone_id: int = 0
    ct_zone_id_set: bool = False
    port_no: int = 0
    network_addresses: list[GuestNICNetworkAddress] = field(default_factory=list)
    port_mappings: list[dict] = field(default_factory=list)

    def enable_ipv6(self) -> bool:
        return bool(self.ip6)

    def tc_data(self) -> TcData:
        """Return the bandwidth settings of this interface."""
        return TcData(type=TcDataType.GUEST, ifname=self.ifname_host, ingress_mbps=self.bw)

    def sub_ips(self) -> list[str]:
        """Return secondary addresses: sub IPs first, then virtual IPs."""
        subs = [na.ip_addr for na in self.network_addresses if na.type == "sub_ip"]
        return subs + list(self.virtual_ips)

    def template_map(self) -> dict[str, Any]:
        """Return the values flow templates of this interface refer to."""
        values: dict[str, Any] = {
            "IP": self.ip,
            "SubIPs": self.sub_ips(),
            "MAC": self.mac,
            "VLAN": self.vlan & 0xFFF,
            "CT_ZONE": self.ct_zone_id,
            "PortNo": self.port_no,
        }
        if self.ip6:
            values["IP6"] = self.ip6
            values["IP6LOCAL"] = str(mac_to_link_local(self.mac))
        # an 802.1Q header is present only for vlans above 1
        vlan_tci = (self.vlan & 0xFFF) | 0x1000 if self.vlan > 1 else 0
        values["VLANTci"] = f"0x{vlan_tci:04x}/0x1fff"
        return values


def nic_from_dict(data: dict) -> GuestNIC:
    """Build a NIC from its entry in a guest description."""
    d = _fold(data)
    return GuestNIC(
        bridge=d.get("bridge") or "",
        bw=int(d.get("bw") or 0),
        dns=d.get("dns") or "",
        domain=d.get("domain") or "",
        driver=d.get("driver") or "",
        gateway=d.get("gateway") or "",
        ifname_host=d.get("ifname") or "",
        index=int(d.get("index") or 0),
        ifname_vm=d.get("interface") or "",
        ip=d.get("ip") or "",
        virtual_ips=list(d.get("virtual_ips") or []),
        mac=d.get("mac") or "",
        masklen=int(d.get("masklen") or 0),
        net=d.get("net") or "",
        net_id=d.get("net_id") or "",
        virtual=bool(d.get("virtual") or False),
        vlan=int(d.get("vlan") or 0),
        wire_id=d.get("wire_id") or "",
        host_id=d.get("host_id") or "",
        vpc=GuestNICVpc.from_dict(d.get("vpc")),
        ip6=d.get("ip6") or "",
        gateway6=d.get("gateway6") or "",
        masklen6=int(d.get("masklen6") or 0),
        network_addresses=[
            GuestNICNetworkAddress.from_dict(na) for na in d.get("networkaddresses") or []
        ],
        port_mappings=list(d.get("port_mappings") or []),
    )


@dataclass
class Guest:
    """A guest whose runtime files live in ``path``."""

    id: str
    path: Path
    name: str = ""
    host_id: str = ""
    security_rules: str = ""
    nics: list[GuestNIC] = field(default_factory=list)
    vpc_nics: list[GuestNIC] = field(default_factory=list)
    src_ip_check: bool = True
    src_mac_check: bool = True
    proc_root: Path = Path("/proc")
    _is_slave: bool = field(default=False, init=False, repr=False)
    _is_volatile_host: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.proc_root = Path(self.proc_root)

    def is_vm(self) -> bool:
        """Return whether the guest is a virtual machine."""
        return (self.path / "startvm").exists()

    def running(self) -> bool:
        """Return whether the guest's process is alive, erring on yes."""
        try:
            pid = (self.path / "pid").read_text()
        except FileNotFoundError:
            return False
        except OSError:
            return True
        pid = pid.strip()
        if not pid:
            return False
        try:
            return (self.proc_root / pid).stat() is not None and (self.proc_root / pid).is_dir()
        except FileNotFoundError:
            return False
        except OSError:
            return True

    def is_volatile_host(self) -> bool:
        return self._is_volatile_host or self._is_slave

    def load_desc(self) -> None:
        """Load name, NICs, checks and security rules from the ``desc`` file."""
        with open(self.path / "desc", encoding="utf-8") as desc_file:
            desc = _fold(json.load(desc_file))
        self.name = desc.get("name") or ""
        self.host_id = desc.get("host_id") or ""

        nics = [nic_from_dict(nic) for nic in desc.get("nics") or []]
        self.vpc_nics = [nic for nic in reversed(nics) if nic.vpc.provider]
        self.nics = [nic for nic in nics if not nic.vpc.provider]

        self._is_volatile_host = bool(desc.get("is_volatile_host", False))
        is_master = bool(desc.get("is_master", False))
        self._is_slave = not is_master and bool(desc.get("is_slave", False))

        self.src_ip_check = bool(desc.get("src_ip_check", True))
        self.src_mac_check = bool(desc.get("src_mac_check", True))
        if not self.src_mac_check:
            self.src_ip_check = False

        admin_rules = desc.get("admin_security_rules") or ""
        rules = desc.get("security_rules") or ""
        self.security_rules = f"{admin_rules}; {rules}"

    def needs_sync(self) -> bool:
        return not self.host_id and bool(self.vpc_nics)

    def find_nic_by_net_id_ip(self, net_id: str, ip: str) -> Optional[GuestNIC]:
        """Return the NIC on network ``net_id`` with address ``ip``, VPC NICs first."""
        candidates: Iterable[GuestNIC] = [*self.vpc_nics, *self.nics]
        return next(
            (nic for nic in candidates if nic.net_id == net_id and nic.ip == ip),
            None,
        )