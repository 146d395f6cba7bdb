"""Queueing disciplines as printed by ``tc qdisc show`` and fed to ``tc -batch``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .handle import TC_H_ROOT, TC_H_UNSPEC, format_handle, parse_handle
from .units import (
    parse_rate,
    parse_size,
    parse_time,
    print_rate,
    print_size,
    print_time,
    tbf_burst_normalize,
)

_DIGITS = re.compile(r"[0-9]+")


@dataclass
class Qdisc:
    """A qdisc of any kind, known by its kind, handle and parent."""

    kind: str
    handle: int = TC_H_UNSPEC
    parent: int = TC_H_UNSPEC

    def is_root(self) -> bool:
        return self.parent == TC_H_ROOT

    def _line_elements(self, action: str, ifname: str) -> list[str]:
        elements = ["qdisc", action, "dev", ifname]
        if self.is_root():
            elements.append("root")
        else:
            elements += ["parent", format_handle(self.parent)]
        elements += ["handle", format_handle(self.handle)]
        return elements

    def _replace_elements(self, ifname: str) -> list[str]:
        return [*self._line_elements("replace", ifname), self.kind]

    def delete_line(self, ifname: str) -> str:
        """Return the tc batch line that deletes this qdisc."""
        return " ".join(self._line_elements("delete", ifname))

    def replace_line(self, ifname: str) -> str:
        """Return the tc batch line that installs this qdisc."""
        return " ".join(self._replace_elements(ifname))


@dataclass
class QdiscTbf(Qdisc):
    """Token bucket filter qdisc."""

    rate: int = 0
    burst: int = 0
    cell: int = 0
    latency: int = 0
    mpu: int = 0

    def replace_line(self, ifname: str) -> str:
        elements = self._replace_elements(ifname)
        elements += ["rate", print_rate(self.rate)]
        burst_cell = print_size(self.burst)
        if self.cell > 1:
            burst_cell += f"/{self.cell}"
        elements += ["burst", burst_cell]
        if self.latency:
            elements += ["latency", print_time(self.latency)]
        if self.mpu:
            elements += ["mpu", print_size(self.mpu)]
        return " ".join(elements)

    def normalize_burst(self) -> None:
        """Round the burst to the value tc reports after storing it."""
        if self.rate == 0:
            raise ValueError("rate equals zero")
        self.burst = tbf_burst_normalize(self.rate, self.burst)


@dataclass
class QdiscFqCodel(Qdisc):
    """Fair queueing controlled delay qdisc."""


def _value_after(chunks: list[str], i: int, what: str) -> str:
    if i + 1 >= len(chunks):
        raise ValueError(f"eol getting {what}")
    return chunks[i + 1]


def _handle_from(text: str, what: str) -> int:
    try:
        return parse_handle(text)
    except ValueError as exc:
        raise ValueError(f"bad {what} {text}: {exc}") from exc


def parse_base_qdisc(chunks: list[str]) -> Qdisc:
    """Parse the kind, handle and parent out of a tokenised qdisc line."""
    kind = ""
    handle = TC_H_UNSPEC
    parent = TC_H_UNSPEC
    for i, chunk in enumerate(chunks):
        if chunk == "qdisc":
            kind = _value_after(chunks, i, "qdisc type")
        elif chunk == "root":
            parent = TC_H_ROOT
        elif chunk == "handle":
            handle = _handle_from(_value_after(chunks, i, "handle"), "handle")
        elif chunk == "parent":
            parent = _handle_from(_value_after(chunks, i, "parent handle"), "parent handle")
        elif handle == TC_H_UNSPEC and i + 1 < len(chunks) and chunks[i + 1].find(":") > 0:
            handle = _handle_from(chunks[i + 1], "handle")
    if not kind:
        raise ValueError("kind is missing")
    return Qdisc(kind=kind, handle=handle, parent=parent)


def _parse_burst(text: str) -> tuple[int, int]:
    parts = text.split("/")
    if len(parts) > 2:
        raise ValueError(f"bad burst value {text}")
    cells = parts[1] if len(parts) == 2 else "1"
    try:
        burst = parse_size(parts[0])
    except ValueError as exc:
        raise ValueError(f"invalid burst size {text}: {exc}") from exc
    if not _DIGITS.fullmatch(cells) or int(cells) > 0xFF:
        raise ValueError(f"invalid burst cell {text}")
    return burst, int(cells)


def _parse_tbf(chunks: list[str], base: Qdisc) -> QdiscTbf:
    q = QdiscTbf(kind=base.kind, handle=base.handle, parent=base.parent)
    for i, chunk in enumerate(chunks):
        if chunk == "rate":
            q.rate = parse_rate(_value_after(chunks, i, "rate"))
        elif chunk == "burst":
            q.burst, q.cell = _parse_burst(_value_after(chunks, i, "burst"))
        elif chunk in ("latency", "lat"):
            q.latency = parse_time(_value_after(chunks, i, "latency"))
        elif chunk == "mpu":
            q.mpu = parse_size(_value_after(chunks, i, "mpu"))
    q.normalize_burst()
    return q


def _parse_fq_codel(chunks: list[str], base: Qdisc) -> QdiscFqCodel:
    return QdiscFqCodel(kind=base.kind, handle=base.handle, parent=base.parent)


_PARSERS = {
    "fq_codel": _parse_fq_codel,
    "tbf": _parse_tbf,
}


def parse_qdisc(chunks: list[str]) -> Qdisc:
    """Parse a tokenised qdisc line into the most specific qdisc type known."""
    base = parse_base_qdisc(chunks)
    parser = _PARSERS.get(base.kind)
    if parser is None:
        return base
    return parser(chunks, base)


def qdisc_from_string(s: str) -> Qdisc:
    """Parse one line of ``tc qdisc show`` output."""
    return parse_qdisc(s.split(" "))