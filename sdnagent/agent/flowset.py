"""An ordered set of flows without duplicates."""

from __future__ import annotations

from typing import Iterable, Iterator

from .flow import Flow, compare_flows


class FlowSet:
    """Flows kept sorted by ``compare_flows``, each flow at most once."""

    def __init__(self, flows: Iterable[Flow] = ()):
        self._flows: list[Flow] = []
        for flow in flows:
            self.add(flow)

    def _locate(self, flow: Flow) -> tuple[int, bool]:
        lo, hi = 0, len(self._flows)
        while lo < hi:
            mid = (lo + hi) // 2
            result = compare_flows(self._flows[mid], flow)
            if result < 0:
                lo = mid + 1
            elif result > 0:
                hi = mid
            else:
                return mid, True
        return lo, False

    @property
    def flows(self) -> list[Flow]:
        return list(self._flows)

    def __len__(self) -> int:
        return len(self._flows)

    def __iter__(self) -> Iterator[Flow]:
        return iter(self._flows)

    def __contains__(self, flow: object) -> bool:
        if not isinstance(flow, Flow):
            return False
        return self._locate(flow)[1]

    def add(self, flow: Flow) -> bool:
        """Insert ``flow``; return False if an equal flow is already present."""
        index, found = self._locate(flow)
        if found:
            return False
        self._flows.insert(index, flow)
        return True

    def remove(self, flow: Flow) -> bool:
        """Remove the flow equal to ``flow``; return whether one was present."""
        index, found = self._locate(flow)
        if not found:
            return False
        del self._flows[index]
        return True

    def dump_flows(self) -> str:
        """Return every flow in text form, one per line."""
        return "".join(f"{flow.to_text()}\n" for flow in self._flows)