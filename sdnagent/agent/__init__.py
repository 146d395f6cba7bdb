"""Flow, flow set, port range, routing, conntrack zone, tc data, ovsctl and guest description helpers."""