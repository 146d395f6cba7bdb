"""Trees of qdiscs built from ``tc qdisc show`` output."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .qdisc import Qdisc, qdisc_from_string


@dataclass
class QdiscTree:
    """A qdisc with its child qdiscs keyed by handle, plus the ingress qdisc."""

    qdisc: Qdisc
    children: dict[int, QdiscTree] = field(default_factory=dict)
    ingress_qdisc: Optional[Qdisc] = None

    @property
    def root(self) -> Qdisc:
        return self.qdisc

    def is_leaf(self) -> bool:
        return not self.children

    def is_root(self) -> bool:
        return self.qdisc.is_root()

    def batch_replace_lines(self, ifname: str) -> list[str]:
        """Return ``tc -batch`` lines that install the tree, parents first."""
        lines = []
        pending = deque([self])
        while pending:
            current = pending.popleft()
            lines.append(current.qdisc.replace_line(ifname))
            pending.extend(current.children.values())
        return lines

    def __str__(self) -> str:
        return "\n".join(self.batch_replace_lines("dummy0"))


def build_qdisc_tree(qdiscs: Iterable[Qdisc]) -> QdiscTree:
    """Arrange qdiscs into a tree below the first root qdisc."""
    remaining = list(qdiscs)
    root_index = next((i for i, q in enumerate(remaining) if q.is_root()), None)
    if root_index is None:
        raise ValueError("cannot find root qdisc")
    root = QdiscTree(remaining.pop(root_index))
    root_kind = root.qdisc.kind
    root_major = root.qdisc.handle & 0xFF00

    pending = deque([root])
    while pending:
        current = pending.popleft()
        current_handle = current.qdisc.handle
        unplaced = []
        for q in remaining:
            if q.kind == "ingress":
                # ingress is a singleton attached to the root
                root.ingress_qdisc = q
                continue
            # mq is classful: its classes share the root's major number
            if q.parent == current_handle or (
                root_kind == "mq" and q.parent & 0xFF00 == root_major
            ):
                child = QdiscTree(q)
                current.children[q.handle] = child
                pending.append(child)
            else:
                unplaced.append(q)
        remaining = unplaced

    if remaining:
        raise ValueError("exist orphan qdisc without parent")
    return root


def qdisc_tree_from_string(s: str) -> QdiscTree:
    """Build a tree from the text printed by ``tc qdisc show``."""
    qdiscs = [qdisc_from_string(line.strip()) for line in s.split("\n") if line.strip()]
    return build_qdisc_tree(qdiscs)