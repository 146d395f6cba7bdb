"""Splitting port ranges into value/mask pairs for flow matches."""

from __future__ import annotations

_PORT_MAX = 0xFFFF


def port_range_to_masks(start: int, end: int) -> list[tuple[int, int]]:
    """Return ``(value, mask)`` pairs that together match exactly ``start..end``.

    A port ``p`` matches a pair when ``p & mask == value``. A mask of 0 covers
    every port. An empty list is returned when ``start > end``.
    """
    for port in (start, end):
        if not 0 <= port <= _PORT_MAX:
            raise ValueError(f"port {port} out of range")
    if start == end:
        return [(start, _PORT_MAX)]
    masks = []
    current, stop = start, end + 1
    while current < stop:
        block = 1
        while current + block <= stop and current & (block - 1) == 0:
            block <<= 1
        block >>= 1
        masks.append((current, ~(block - 1) & _PORT_MAX))
        current += block
    return masks