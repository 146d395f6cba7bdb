"""Parsing and formatting of tc rate, time and size values."""

from __future__ import annotations

import re
from pathlib import Path

TIME_UNIT_PER_SECOND = 1_000_000
PSCHED_PATH = "/proc/net/psched"

_DEFAULT_TICK_IN_USEC = 0x3E8 / 0x40

_RATE_SUFFIXES = {
    suffix.lower(): scale
    for suffix, scale in {
        "bit": 1,
        "Kibit": 1024,
        "kbit": 1000,
        "mibit": 1024 * 1024,
        "mbit": 1_000_000,
        "gibit": 1024 * 1024 * 1024,
        "gbit": 1_000_000_000,
        "tibit": 1024 * 1024 * 1024 * 1024,
        "tbit": 1_000_000_000_000,
        "Bps": 8,
        "KiBps": 8 * 1024,
        "KBps": 8000,
        "MiBps": 8 * 1024 * 1024,
        "MBps": 8_000_000,
        "GiBps": 8 * 1024 * 1024 * 1024,
        "GBps": 8_000_000_000,
        "TiBps": 8 * 1024 * 1024 * 1024 * 1024,
        "TBps": 8_000_000_000_000,
    }.items()
}

_TIME_SCALES = {
    "s": TIME_UNIT_PER_SECOND,
    "sec": TIME_UNIT_PER_SECOND,
    "ms": TIME_UNIT_PER_SECOND // 1000,
    "msec": TIME_UNIT_PER_SECOND // 1000,
    "msecs": TIME_UNIT_PER_SECOND // 1000,
    "us": TIME_UNIT_PER_SECOND // 1_000_000,
    "usec": TIME_UNIT_PER_SECOND // 1_000_000,
    "usecs": TIME_UNIT_PER_SECOND // 1_000_000,
}

_SIZE_SCALES = {
    "b": 1,
    "": 1,
    "kb": 1024,
    "k": 1024,
    "mb": 1024 * 1024,
    "m": 1024 * 1024,
    "gb": 1024 * 1024 * 1024,
    "g": 1024 * 1024 * 1024,
    "kbit": 1024 // 8,
    "mbit": 1024 * 1024 // 8,
    "gbit": 1024 * 1024 * 1024 // 8,
}

_PRINT_TIME_SCALES = ((1_000_000, "s"), (1000, "ms"), (1, "us"))
_RATE_UNITS = ("", "K", "M", "G", "T")

_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_LETTER = re.compile(r"[A-Za-z]")


def read_tick_in_usec(path=PSCHED_PATH) -> float:
    """Return how many scheduler ticks make one microsecond, read from psched."""
    try:
        text = Path(path).read_text()
    except OSError:
        return _DEFAULT_TICK_IN_USEC
    fields = text.split()
    if len(fields) < 4:
        return _DEFAULT_TICK_IN_USEC
    try:
        t2us, us2t, _clock_res, _buffer_hz = (int(field, 16) for field in fields[:4])
    except ValueError:
        return _DEFAULT_TICK_IN_USEC
    if us2t == 0:
        return _DEFAULT_TICK_IN_USEC
    return t2us / us2t


TICK_IN_USEC = read_tick_in_usec()


def _split_number_suffix(s: str) -> tuple[float, str]:
    if not s:
        raise ValueError("zero length rate string")
    match = _LETTER.search(s)
    if match is None:
        raise ValueError("missing unit suffix")
    number = s[: match.start()]
    if not _NUMBER.fullmatch(number):
        raise ValueError(f"invalid number {number!r}")
    return float(number), s[match.start():]


def _to_unsigned(num: float) -> int:
    if num < 0:
        raise ValueError(f"negative value {num}")
    return int(num)


def parse_rate(s: str) -> int:
    """Parse a tc rate such as ``100Mbit`` into bytes per second."""
    rate, suffix = _split_number_suffix(s)
    try:
        scale = _RATE_SUFFIXES[suffix.lower()]
    except KeyError:
        raise ValueError(f"unknown suffix {suffix}") from None
    return _to_unsigned(rate) * scale // 8


def print_rate(bytes_per_sec: int) -> str:
    """Format bytes per second the way tc prints rates."""
    bps = bytes_per_sec * 8
    unit = _RATE_UNITS[0]
    for unit in _RATE_UNITS:
        if bps < 1000:
            break
        if bps % 1000 != 0 and bps < 1000 * 1000:
            break
        if unit == _RATE_UNITS[-1]:
            break
        bps //= 1000
    return f"{bps}{unit}bit"


def parse_time(s: str) -> int:
    """Parse a tc time value such as ``100ms`` into microseconds."""
    num, suffix = _split_number_suffix(s)
    us = _to_unsigned(num)
    try:
        scale = _TIME_SCALES[suffix.lower()]
    except KeyError:
        raise ValueError(f"unknown time unit {suffix}") from None
    return us * scale


def print_time(us: int) -> str:
    """Format microseconds the way tc prints times."""
    last = len(_PRINT_TIME_SCALES) - 1
    index = next(
        (i for i, (nus, _) in enumerate(_PRINT_TIME_SCALES) if us >= nus),
        last,
    )
    nus, unit = _PRINT_TIME_SCALES[index]
    if index == last:
        return f"{us}{unit}"
    if us % nus != 0 and us < nus * 1000:
        nus, unit = _PRINT_TIME_SCALES[index + 1]
    return f"{us // nus}{unit}"


def parse_size(s: str) -> int:
    """Parse a tc size value such as ``64kb`` into bytes."""
    num, suffix = _split_number_suffix(s)
    nbytes = _to_unsigned(num)
    try:
        scale = _SIZE_SCALES[suffix.lower()]
    except KeyError:
        raise ValueError(f"unknown size suffix {suffix}") from None
    return nbytes * scale


def print_size(nbytes: int) -> str:
    """Format a byte count the way tc prints sizes."""
    mib = 1024 * 1024
    if nbytes >= mib and nbytes % mib < 1024:
        return f"{nbytes // mib}Mb"
    if nbytes >= 1024 and nbytes % 1024 < 16:
        return f"{nbytes // 1024}Kb"
    return f"{nbytes}b"


def tbf_burst_normalize(bytes_per_sec: int, burst: int) -> int:
    """Return the burst tc reports back after storing it as scheduler ticks."""
    time = int(1_000_000 * float(burst) / float(bytes_per_sec))
    buffer = int(TICK_IN_USEC * float(time))
    return bytes_per_sec * int(float(buffer) / TICK_IN_USEC) // 1_000_000