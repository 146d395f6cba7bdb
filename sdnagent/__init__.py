"""Host-side SDN agent helpers: traffic control, OpenFlow flows, routes and guest networking."""

__version__ = "0.1.0"