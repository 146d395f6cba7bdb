import subprocess
from unittest import mock

import pytest

from sdnagent.agent.ovsctl import OvsctlError, exec_ovsctl, run_ovsctl


def _done(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


@mock.patch("sdnagent.agent.ovsctl.subprocess.run")
def test_exec_returns_stdout(run):
    run.return_value = _done(stdout=b"br0\n")
    assert exec_ovsctl(["ovs-vsctl", "list-br"]) == b"br0\n"
    assert run.call_args.args[0] == ["ovs-vsctl", "list-br"]


@mock.patch("sdnagent.agent.ovsctl.subprocess.run")
def test_run_passes_args(run):
    run.return_value = _done(stdout=b"ignored")
    assert run_ovsctl(["ovs-vsctl", "add-br", "br0"]) is None
    assert run.call_args.args[0] == ["ovs-vsctl", "add-br", "br0"]


@mock.patch("sdnagent.agent.ovsctl.subprocess.run")
def test_failure_message_formats_separators(run):
    run.return_value = _done(returncode=1, stderr=b"bad")
    with pytest.raises(OvsctlError) as info:
        exec_ovsctl(["ovs-vsctl", "add-br", "br0", "--", "set", "bridge", "br0"])
    assert info.value.command == " ovs-vsctl add-br br0 \\\n  -- set bridge br0"
    assert info.value.stderr == b"bad"
    assert str(info.value).startswith(info.value.command)


@mock.patch("sdnagent.agent.ovsctl.subprocess.run", side_effect=FileNotFoundError("ovs-vsctl"))
def test_missing_binary(run):
    with pytest.raises(OvsctlError) as info:
        run_ovsctl(["ovs-vsctl", "show"])
    assert info.value.command == " ovs-vsctl show"


def test_empty_args():
    with pytest.raises(ValueError):
        exec_ovsctl([])