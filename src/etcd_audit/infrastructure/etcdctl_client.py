"""Read-only etcdctl access executed inside an etcd member pod."""

from __future__ import annotations

import shlex

from etcd_audit.infrastructure.oc_client import DEFAULT_BINARY, OcError, oc_text


class EtcdctlError(RuntimeError):
    """Raised when an etcdctl command fails inside the member pod."""


class EtcdUnreachableError(EtcdctlError):
    """Raised when the etcd member can no longer be reached at all."""


class EtcdctlClient:
    """Run etcdctl (API v3) through `oc exec` on one member pod."""

    def __init__(
        self,
        pod: str,
        *,
        namespace: str = "openshift-etcd",
        container: str = "etcd",
        binary: str = DEFAULT_BINARY,
    ) -> None:
        self.pod = pod
        self.namespace = namespace
        self.container = container
        self.binary = binary

    def _exec(self, shell_command: str) -> str:
        command = [
            "exec",
            "-n",
            self.namespace,
            self.pod,
            "-c",
            self.container,
            "--",
            "/bin/bash",
            "-c",
            f"set -o pipefail; export ETCDCTL_API=3; {shell_command}",
        ]
        try:
            return oc_text(command, binary=self.binary)
        except OcError as exc:
            raise EtcdctlError(f"etcdctl on {self.pod} failed: {exc}") from exc

    def list_keys(self) -> list[str]:
        """Return every key in the store (keys only, no values)."""
        output = self._exec("etcdctl get / --prefix --keys-only")
        return [line for line in output.splitlines() if line.strip()]

    def range_size(self, prefix: str) -> int:
        """Return byte count of the raw keys+values dump under prefix."""
        output = self._exec(f"etcdctl get {shlex.quote(prefix)} --prefix | wc -c")
        value = output.strip()
        if not value:
            return 0
        try:
            return int(value)
        except ValueError as exc:
            raise EtcdctlError(
                f"unexpected byte count from etcdctl: {value!r}"
            ) from exc

    def endpoint_status_json(self) -> str:
        """Return `etcdctl endpoint status -w json` output."""
        return self._exec("etcdctl endpoint status -w json")

    def is_reachable(self) -> bool:
        """Return whether the member still answers a health probe."""
        try:
            self._exec("etcdctl endpoint health")
        except EtcdctlError:
            return False
        return True
