"""Read-only control-plane API access through the `oc` CLI."""

from __future__ import annotations

from typing import Any

from etcd_audit.infrastructure.oc_client import (
    DEFAULT_BINARY,
    OcError,
    oc_json,
    oc_output_size,
    oc_succeeds,
    oc_text,
)

# `oc get` stderr for resource types the API server does not serve.
_MISSING_RESOURCE_MARKERS = (
    "the server doesn't have a resource type",
    "the server could not find the requested resource",
    "(NotFound)",
)


class ClusterApi:
    """Thin wrapper over the `oc` calls the audit needs."""

    def __init__(self, binary: str = DEFAULT_BINARY) -> None:
        self.binary = binary

    def is_logged_in(self) -> bool:
        """Return whether the current session is authenticated."""
        return oc_succeeds("whoami", binary=self.binary)

    def running_pod_name(self, namespace: str, selector: str) -> str | None:
        """Return the first running pod matching selector, if any."""
        pods = oc_json(
            [
                "get",
                "pods",
                "-n",
                namespace,
                "-l",
                selector,
                "--field-selector=status.phase=Running",
            ],
            binary=self.binary,
        )
        items = pods.get("items", [])
        if not items:
            return None
        return str(items[0]["metadata"]["name"])

    def pods(self, namespace: str, selector: str) -> list[dict[str, Any]]:
        """Return pods matching selector."""
        pods = oc_json(
            ["get", "pods", "-n", namespace, "-l", selector], binary=self.binary
        )
        return list(pods.get("items", []))

    def cluster_operator(self, name: str) -> dict[str, Any]:
        """Return a ClusterOperator object."""
        return oc_json(["get", "clusteroperator", name], binary=self.binary)

    def api_resources_text(self) -> str:
        """Return `oc api-resources --no-headers` output."""
        return oc_text(["api-resources", "--no-headers"], binary=self.binary)

    def raw_metrics(self) -> str:
        """Return the API server metrics exposition text."""
        return oc_text(["get", "--raw", "/metrics"], binary=self.binary)

    def container_logs(
        self, namespace: str, pod: str, container: str, since: str
    ) -> str:
        """Return container logs for the given window."""
        return oc_text(
            ["logs", "-n", namespace, pod, "-c", container, f"--since={since}"],
            binary=self.binary,
        )

    def collection_json_size(self, resource: str) -> int:
        """Return byte length of the JSON list of `resource` across namespaces.

        A resource type the API server does not serve counts as 0 bytes.
        """
        try:
            return oc_output_size(
                [
                    "get",
                    resource,
                    "--all-namespaces",
                    "-o",
                    "json",
                    "--ignore-not-found",
                ],
                binary=self.binary,
            )
        except OcError as exc:
            if any(marker in str(exc) for marker in _MISSING_RESOURCE_MARKERS):
                return 0
            raise


__all__ = ["ClusterApi", "OcError"]
