"""Allocation of conntrack zone ids to MAC addresses."""

from __future__ import annotations

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_ZONE_SPACE = 1 << 16


class ZoneExhaustedError(Exception):
    """Raised when every zone id above the base is in use."""


def _fnv1_32(data: bytes) -> int:
    h = _FNV32_OFFSET
    for byte in data:
        h = (h * _FNV32_PRIME) & 0xFFFFFFFF
        h ^= byte
    return h


class ZoneMan:
    """Hands out stable 16-bit conntrack zone ids starting at ``base``."""

    def __init__(self, base: int):
        self.base = base & 0xFFFF
        self._by_mac: dict[str, int] = {}
        self._by_index: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._by_mac)

    def _zone(self, index: int) -> int:
        return (self.base + index) & 0xFFFF

    def allocate(self, mac: str) -> int:
        """Return the zone id for ``mac``, allocating one if needed."""
        index = self._by_mac.get(mac)
        if index is not None:
            return self._zone(index)
        total = _ZONE_SPACE - self.base
        if len(self._by_mac) >= total:
            raise ZoneExhaustedError("id depleted")
        start = index = _fnv1_32(mac.encode()) % total
        while True:
            if index not in self._by_index:
                self._by_index[index] = mac
                self._by_mac[mac] = index
                return self._zone(index)
            index = (index + 1) & 0xFFFF
            if index == start:
                raise ZoneExhaustedError("id depleted")

    def free(self, mac: str) -> bool:
        """Release the zone id of ``mac``; return whether it had one."""
        index = self._by_mac.pop(mac, None)
        if index is None:
            return False
        del self._by_index[index]
        return True