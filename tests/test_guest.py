import ipaddress
import json

import pytest

from sdnagent.agent.guest import (
    Guest,
    GuestNIC,
    GuestNICNetworkAddress,
    mac_to_link_local,
    nic_from_dict,
)
from sdnagent.agent.tcdata import TcDataType

NIC_PLAIN = {
    "bridge": "br0",
    "bw": 100,
    "ifname": "vnet1-1",
    "ip": "10.0.0.5",
    "mac": "02:00:00:00:00:01",
    "net_id": "net-a",
    "vlan": 100,
    "virtual_ips": ["10.0.0.9"],
    "networkaddresses": [
        {"type": "sub_ip", "ip_addr": "10.0.0.6", "masklen": 24},
        {"type": "eip", "ip_addr": "192.0.2.1"},
    ],
}
NIC_VPC = {
    "bridge": "brvpc",
    "ifname": "vnet1-2",
    "ip": "192.168.0.3",
    "mac": "02:00:00:00:00:02",
    "net_id": "net-b",
    "vpc": {"provider": "ovn", "id": "vpc-1"},
}


def write_desc(tmp_path, **extra):
    desc = {
        "Name": "vm1",
        "nics": [NIC_PLAIN, NIC_VPC],
        "security_rules": "in:allow any",
        "admin_security_rules": "out:allow any",
    }
    desc.update(extra)
    (tmp_path / "desc").write_text(json.dumps(desc))
    return Guest(id="g1", path=tmp_path)


def test_load_desc_splits_vpc_nics(tmp_path):
    guest = write_desc(tmp_path)
    guest.load_desc()
    assert guest.name == "vm1"
    assert [n.ip for n in guest.nics] == ["10.0.0.5"]
    assert [n.ip for n in guest.vpc_nics] == ["192.168.0.3"]
    assert guest.security_rules == "out:allow any; in:allow any"
    assert guest.needs_sync() is True


def test_load_desc_defaults(tmp_path):
    guest = write_desc(tmp_path, host_id="host-1")
    guest.load_desc()
    assert guest.src_ip_check is True
    assert guest.src_mac_check is True
    assert guest.is_volatile_host() is False
    assert guest.needs_sync() is False


def test_mac_check_off_disables_ip_check(tmp_path):
    guest = write_desc(tmp_path, src_mac_check=False, src_ip_check=True)
    guest.load_desc()
    assert (guest.src_mac_check, guest.src_ip_check) == (False, False)


@pytest.mark.parametrize(
    "is_master,is_slave,volatile,expected",
    [(False, True, False, True), (True, True, False, False), (False, False, True, True)],
)
def test_volatile_host(tmp_path, is_master, is_slave, volatile, expected):
    guest = write_desc(tmp_path, is_master=is_master, is_slave=is_slave, is_volatile_host=volatile)
    guest.load_desc()
    assert guest.is_volatile_host() is expected


def test_load_desc_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Guest(id="g1", path=tmp_path).load_desc()


def test_load_desc_bad_json(tmp_path):
    (tmp_path / "desc").write_text("{not json")
    with pytest.raises(ValueError):
        Guest(id="g1", path=tmp_path).load_desc()


def test_find_nic(tmp_path):
    guest = write_desc(tmp_path)
    guest.load_desc()
    assert guest.find_nic_by_net_id_ip("net-b", "192.168.0.3").mac == "02:00:00:00:00:02"
    assert guest.find_nic_by_net_id_ip("net-a", "10.0.0.5").mac == "02:00:00:00:00:01"
    assert guest.find_nic_by_net_id_ip("net-a", "10.0.0.99") is None


def test_is_vm(tmp_path):
    guest = Guest(id="g1", path=tmp_path)
    assert guest.is_vm() is False
    (tmp_path / "startvm").write_text("#!/bin/sh\n")
    assert guest.is_vm() is True


def test_running(tmp_path):
    proc = tmp_path / "proc"
    proc.mkdir()
    guest_dir = tmp_path / "guest"
    guest_dir.mkdir()
    guest = Guest(id="g1", path=guest_dir, proc_root=proc)
    assert guest.running() is False
    (guest_dir / "pid").write_text("")
    assert guest.running() is False
    (guest_dir / "pid").write_text("1234\n")
    assert guest.running() is False
    (proc / "1234").write_text("not a dir")
    assert guest.running() is False
    (proc / "1234").unlink()
    (proc / "1234").mkdir()
    assert guest.running() is True


def test_running_unreadable_pid_is_reserved_true(tmp_path):
    (tmp_path / "pid").mkdir()
    assert Guest(id="g1", path=tmp_path, proc_root=tmp_path).running() is True


def test_nic_sub_ips_and_tc_data():
    nic = nic_from_dict(NIC_PLAIN)
    assert nic.sub_ips() == ["10.0.0.6", "10.0.0.9"]
    td = nic.tc_data()
    assert (td.type, td.ifname, td.ingress_mbps) == (TcDataType.GUEST, "vnet1-1", 100)


def test_nic_from_dict_case_insensitive():
    nic = nic_from_dict({"Bridge": "br1", "MAC": "02:00:00:00:00:03", "VLAN": 5})
    assert (nic.bridge, nic.mac, nic.vlan) == ("br1", "02:00:00:00:00:03", 5)


def test_template_map_vlan():
    values = nic_from_dict(NIC_PLAIN).template_map()
    assert values["VLAN"] == 100
    assert values["VLANTci"] == "0x1064/0x1fff"
    assert values["SubIPs"] == ["10.0.0.6", "10.0.0.9"]
    assert "IP6" not in values


def test_template_map_no_vlan_and_ipv6():
    nic = GuestNIC(mac="02:00:00:00:00:01", ip="10.0.0.1", vlan=1, ip6="fd00::5")
    values = nic.template_map()
    assert values["VLANTci"] == "0x0000/0x1fff"
    assert values["IP6"] == "fd00::5"
    assert values["IP6LOCAL"] == "fe80::ff:fe00:1"
    assert nic.enable_ipv6() is True


def test_sub_ips_ignores_other_types():
    nic = GuestNIC(network_addresses=[GuestNICNetworkAddress(type="eip", ip_addr="192.0.2.7")])
    assert nic.sub_ips() == []


def test_mac_to_link_local():
    assert mac_to_link_local("00:11:22:33:44:55") == ipaddress.IPv6Address("fe80::211:22ff:fe33:4455")


def test_mac_to_link_local_invalid():
    with pytest.raises(ValueError):
        mac_to_link_local("zz:11:22")