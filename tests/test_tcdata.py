import pytest

from sdnagent.agent.tcdata import TcData, TcDataType
from sdnagent.tc.tree import qdisc_tree_from_string


@pytest.mark.parametrize(
    "data, expected",
    [
        (
            TcData(TcDataType.HOSTLOCAL, "dummy0", ingress_mbps=999),
            "qdisc fq_codel root handle 1:\n",
        ),
        (
            TcData(TcDataType.GUEST, "dummy0", ingress_mbps=0),
            "qdisc fq_codel root handle 1:",
        ),
        (
            TcData(TcDataType.GUEST, "dummy0", ingress_mbps=1000),
            "qdisc tbf root handle 1: rate 1Gbit burst 125000b latency 100ms\n"
            "qdisc fq_codel parent 1: handle 10:\n",
        ),
        (
            TcData(TcDataType.GUEST, "dummy0", ingress_mbps=33),
            "qdisc tbf root handle 1: rate 33Mbit burst 4125b latency 100ms\n"
            "qdisc fq_codel parent 1: handle 10:\n",
        ),
    ],
    ids=["hostlocal", "0 ingress (no limit)", "1000Mbps ingress", "33Mbps ingress"],
)
def test_tcdata_qdisc_tree(data, expected):
    assert data.qdisc_tree() == qdisc_tree_from_string(expected)


def test_guest_tree_differs_by_rate():
    a = TcData(TcDataType.GUEST, "dummy0", ingress_mbps=33).qdisc_tree()
    b = TcData(TcDataType.GUEST, "dummy0", ingress_mbps=1000).qdisc_tree()
    assert a != b


def test_str_guest_and_hostlocal():
    assert str(TcData(TcDataType.GUEST, "vnet1", ingress_mbps=33)) == "guest vnet1: ingress=33Mbps"
    assert str(TcData(TcDataType.HOSTLOCAL, "br0")) == "hostlocal br0"


def test_type_values():
    assert TcDataType("guest") is TcDataType.GUEST
    assert TcDataType("hostlocal") is TcDataType.HOSTLOCAL