# sdnagent

Building blocks for a host-side SDN agent on Linux: traffic control (`tc`)
qdisc parsing and generation, OpenFlow flow parsing, ordering and flow sets,
conntrack zone allocation, kernel routing table lookup, port range masks and
guest network descriptions.

## Installation

```
pip install .
```

Tests need pytest:

```
pip install ".[test]"
pytest
```

## Traffic control

Parse the output of `tc qdisc show` and turn it into `tc -batch` input:

```python
from sdnagent.tc.tree import qdisc_tree_from_string

tree = qdisc_tree_from_string(
    "qdisc tbf handle 1: root rate 500000Kbit burst 64000b latency 100ms mpu 64b\n"
    "qdisc fq_codel handle 10: parent 1:\n"
)
for line in tree.batch_replace_lines("eth0"):
    print(line)
# qdisc replace dev eth0 root handle 1: tbf rate 500Mbit burst 64000b latency 100ms mpu 64b
# qdisc replace dev eth0 parent 1: handle 10: fq_codel
```

- `sdnagent.tc.qdisc`: `qdisc_from_string` and `parse_qdisc` return a
  `QdiscTbf`, a `QdiscFqCodel` or a plain `Qdisc`; each has `is_root`,
  `delete_line` and `replace_line`. Parse errors raise `ValueError`.
- `sdnagent.tc.tree`: `build_qdisc_tree` and `qdisc_tree_from_string` give a
  `QdiscTree` (`is_leaf`, `is_root`, `batch_replace_lines`); a missing root
  or an orphan qdisc raises `ValueError`.
- `sdnagent.tc.handle`: `parse_handle` and `format_handle` for `major:minor`
  handles.
- `sdnagent.tc.units`: `parse_rate("100Mbit")` gives bytes per second;
  `print_rate`, `parse_time`, `print_time`, `parse_size`, `print_size` and
  `tbf_burst_normalize` cover the rest. The scheduler tick rate is read from
  `/proc/net/psched` by `read_tick_in_usec`, with a fixed fallback.
- `sdnagent.tc.cli.TcCli` runs the `tc` program (`qdisc_show`, `batch`) and
  raises `TcError` when it cannot be run or exits non-zero.

The shaping an interface needs comes from `sdnagent.agent.tcdata.TcData`:

```python
from sdnagent.agent.tcdata import TcData, TcDataType

tree = TcData(type=TcDataType.GUEST, ifname="vnet0", ingress_mbps=33).qdisc_tree()
```

A guest with no ingress limit, and a `HOSTLOCAL` interface, get a single
`fq_codel` root qdisc.

## OpenFlow flows

`sdnagent.agent.flow` parses flows in `ovs-ofctl` text form with
`parse_flow`, writes them back with `Flow.to_text`, orders them with
`compare_flows` (table ascending, then priority descending, then the
remaining fields; match order and all-address matches are ignored) and tests
equality with `flows_equal`.

`sdnagent.agent.flowset.FlowSet` keeps flows sorted and free of duplicates:
`add` and `remove` return whether the set changed, `in` tests membership and
`dump_flows` gives the text of every flow, one per line.

`sdnagent.agent.portrange.port_range_to_masks(22, 3389)` splits a port range
into `(value, mask)` pairs suitable for `tp_dst=value/mask` matches.

## Other helpers

- `sdnagent.agent.ctzone.ZoneMan` hands out conntrack zone ids per MAC
  address (`allocate`, `free`) and raises `ZoneExhaustedError` when none are
  left.
- `sdnagent.agent.route` parses `/proc/net/route` (`parse_routes`,
  `get_routes`) and finds the most specific route for an address
  (`Routes.lookup`, `route_lookup`), raising `LookupError` when there is none.
- `sdnagent.agent.ovsctl.exec_ovsctl` and `run_ovsctl` run Open vSwitch
  commands and raise `OvsctlError` with the command line on failure.
- `sdnagent.agent.guest.Guest` reads a guest's `desc` file from its directory
  (`load_desc`), reports whether it is a VM (`is_vm`) or running (`running`),
  and finds NICs with `find_nic_by_net_id_ip`. `GuestNIC.template_map` gives
  the values flow templates of a NIC refer to, and `mac_to_link_local` the
  IPv6 link local address of a MAC address.

## What this package does not do

It is a library, with no command of its own and no long-running agent. It
does not build the per-host or per-guest flow tables, does not install flows
into a bridge, does not derive the addresses used for metadata traffic and
does not serve metadata. Security rules are kept as the text read from the
guest description; they are not turned into flow matches.