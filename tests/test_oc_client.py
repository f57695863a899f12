"""Tests for `oc` helper functions."""

from __future__ import annotations

import io
import json
import subprocess
from typing import BinaryIO
from unittest.mock import patch

import pytest

from etcd_audit.infrastructure.oc_client import (
    OcError,
    oc_json,
    oc_output_size,
    oc_succeeds,
    oc_text,
)

RUN = "etcd_audit.infrastructure.oc_client.subprocess.run"
POPEN = "etcd_audit.infrastructure.oc_client.subprocess.Popen"


def _completed(stdout: str) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["oc"], returncode=0, stdout=stdout, stderr=""
    )


def test_oc_json_appends_output_flag() -> None:
    with patch(RUN, return_value=_completed(json.dumps({"items": []}))) as run:
        assert oc_json("get pods -n openshift-etcd") == {"items": []}
    args = run.call_args.args[0]
    assert args[:2] == ["oc", "get"]
    assert args[-2:] == ["-o", "json"]


def test_oc_text_accepts_argument_list() -> None:
    with patch(RUN, return_value=_completed("ok\n")) as run:
        assert oc_text(["get", "--raw", "/metrics"], binary="kubectl") == "ok\n"
    assert run.call_args.args[0] == ["kubectl", "get", "--raw", "/metrics"]


def test_oc_json_invalid_json() -> None:
    with patch(RUN, return_value=_completed("{invalid}")), pytest.raises(OcError):
        oc_json("get pods")


def test_oc_command_failure() -> None:
    error = subprocess.CalledProcessError(1, ["oc", "whoami"], stderr="Unauthorized")
    with patch(RUN, side_effect=error), pytest.raises(OcError, match="Unauthorized"):
        oc_text("whoami")


def test_missing_binary() -> None:
    with patch(RUN, side_effect=FileNotFoundError()), pytest.raises(OcError):
        oc_text("whoami")


def test_oc_succeeds() -> None:
    with patch(RUN, return_value=_completed("system:admin\n")):
        assert oc_succeeds("whoami")
    error = subprocess.CalledProcessError(1, ["oc", "whoami"], stderr="no session")
    with patch(RUN, side_effect=error):
        assert not oc_succeeds("whoami")


class FakePopen:
    """Stand-in for a streaming `oc` process."""

    def __init__(self, stdout: bytes, returncode: int = 0, stderr: bytes = b""):
        self._stdout = stdout
        self._returncode = returncode
        self._stderr = stderr
        self.args: list[str] = []

    def __call__(
        self, args: list[str], *, stdout: int, stderr: BinaryIO
    ) -> FakePopen:
        self.args = args
        self.stdout = io.BytesIO(self._stdout)
        stderr.write(self._stderr)
        return self

    def __enter__(self) -> FakePopen:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def wait(self) -> int:
        return self._returncode


def test_oc_output_size_counts_streamed_bytes() -> None:
    payload = ('{"items": ["ü"]}' * 100_000).encode("utf-8")
    fake = FakePopen(payload)
    with patch(POPEN, fake):
        assert oc_output_size(["get", "secrets", "-A"]) == len(payload)
    assert fake.args == ["oc", "get", "secrets", "-A"]


def test_oc_output_size_failure_carries_stderr() -> None:
    fake = FakePopen(b"", returncode=1, stderr=b"error: forbidden\n")
    with patch(POPEN, fake), pytest.raises(OcError, match="forbidden"):
        oc_output_size("get secrets -A")


def test_oc_output_size_missing_binary() -> None:
    with patch(POPEN, side_effect=FileNotFoundError()), pytest.raises(OcError):
        oc_output_size("get secrets -A")
