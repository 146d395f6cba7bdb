"""Running Open vSwitch control commands."""

from __future__ import annotations

import subprocess
from typing import Sequence


class OvsctlError(Exception):
    """Raised when a control command cannot be run or fails."""

    def __init__(self, message: str, command: str = "", stderr: bytes = b""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


def _format_command(args: Sequence[str]) -> str:
    return "".join(" \\\n  --" if arg == "--" else f" {arg}" for arg in args)


def exec_ovsctl(args: Sequence[str]) -> bytes:
    """Run a command and return its standard output."""
    args = list(args)
    if not args:
        raise ValueError("exec: empty args")
    try:
        proc = subprocess.run(args, capture_output=True, check=False)
    except OSError as exc:
        command = _format_command(args)
        raise OvsctlError(f"{command}: {exc}", command=command) from exc
    if proc.returncode != 0:
        command = _format_command(args)
        raise OvsctlError(
            f"{command}: exit status {proc.returncode}",
            command=command,
            stderr=proc.stderr or b"",
        )
    return proc.stdout or b""


def run_ovsctl(args: Sequence[str]) -> None:
    """Run a command, discarding its output."""
    exec_ovsctl(args)