"""Running the ``tc`` command line tool."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from .tree import QdiscTree, qdisc_tree_from_string


class TcError(Exception):
    """Raised when ``tc`` cannot be run or exits with an error."""

    def __init__(self, message: str, stderr: str = "", returncode: Optional[int] = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


@dataclass
class TcCli:
    """Options for invoking ``tc``."""

    force: bool = False
    details: bool = False
    timeout: Optional[float] = None

    def _run(self, args: Sequence[str], input_text: Optional[str] = None) -> str:
        try:
            proc = subprocess.run(
                list(args),
                input=input_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise TcError(f"{' '.join(args)}: {exc}") from exc
        if proc.returncode != 0:
            raise TcError(
                f"{' '.join(args)}: exit status {proc.returncode}",
                stderr=proc.stderr or "",
                returncode=proc.returncode,
            )
        return proc.stdout or ""

    def qdisc_show(self, ifname: str) -> QdiscTree:
        """Return the qdisc tree currently installed on an interface."""
        output = self._run(["tc", "qdisc", "show", "dev", ifname])
        return qdisc_tree_from_string(output)

    def batch(self, text: str) -> str:
        """Feed batch commands to ``tc`` and return its standard output."""
        args = ["tc"]
        if self.details:
            args.append("-details")
        if self.force:
            args.append("-force")
        args += ["-batch", "-"]
        return self._run(args, input_text=text)