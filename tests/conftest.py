"""Shared fakes for the cluster collaborators."""

from __future__ import annotations

import json
from typing import Any

import pytest

METRICS_TEXT = """\
# HELP apiserver_storage_objects Number of stored objects
# TYPE apiserver_storage_objects gauge
apiserver_storage_objects{resource="secrets"} 500
apiserver_storage_objects{resource="configmaps"} 120
apiserver_storage_objects{resource="secrets"} 300
apiserver_storage_objects{resource="widgets.example.com"} 0
apiserver_request_total{resource="secrets",verb="GET"} 9999
"""

ETCD_KEYS = [
    "/kubernetes.io/secrets/ns1/a",
    "/kubernetes.io/secrets/ns1/b",
    "/kubernetes.io/secrets/ns2/c",
    "/kubernetes.io/configmaps/ns1/settings",
]

API_RESOURCES_TEXT = """\
configmaps  cm  v1  true  ConfigMap
secrets  v1  true  Secret
deployments  deploy  apps/v1  true  Deployment
"""


class FakeEtcdctl:
    """In-memory stand-in for EtcdctlClient."""

    def __init__(
        self,
        pod: str = "etcd-master-0",
        keys: list[str] | None = None,
        sizes: dict[str, int] | None = None,
        endpoint_status: list[dict[str, Any]] | None = None,
    ) -> None:
        self.pod = pod
        self.keys = list(ETCD_KEYS if keys is None else keys)
        self.sizes = sizes if sizes is not None else {}
        self.endpoint_status = endpoint_status or [
            {
                "Endpoint": "https://10.0.0.1:2379",
                "Status": {"dbSize": 2000 * 1024**2, "dbSizeInUse": 1000 * 1024**2},
            }
        ]
        self.list_calls = 0
        self.range_calls: list[str] = []

    def list_keys(self) -> list[str]:
        self.list_calls += 1
        return list(self.keys)

    def range_size(self, prefix: str) -> int:
        self.range_calls.append(prefix)
        return self.sizes.get(prefix, 0)

    def endpoint_status_json(self) -> str:
        return json.dumps(self.endpoint_status)

    def is_reachable(self) -> bool:
        return True


class FakeClusterApi:
    """In-memory stand-in for ClusterApi."""

    def __init__(self, *, logged_in: bool = True, pod: str | None = "etcd-master-0"):
        self.logged_in = logged_in
        self.pod = pod
        self.json_sizes: dict[str, int] = {"secrets": 4096, "configmaps": 2048}
        self.sized: list[str] = []

    def is_logged_in(self) -> bool:
        return self.logged_in

    def running_pod_name(self, namespace: str, selector: str) -> str | None:
        return self.pod

    def pods(self, namespace: str, selector: str) -> list[dict[str, Any]]:
        return [
            {
                "metadata": {
                    "name": "etcd-master-0",
                    "creationTimestamp": "2026-01-01T00:00:00Z",
                },
                "spec": {"nodeName": "master-0"},
                "status": {
                    "phase": "Running",
                    "podIP": "10.0.0.1",
                    "containerStatuses": [{"restartCount": 2}],
                },
            }
        ]

    def cluster_operator(self, name: str) -> dict[str, Any]:
        return {
            "status": {
                "conditions": [
                    {"type": "Available", "status": "True"},
                    {"type": "Degraded", "status": "False"},
                ]
            }
        }

    def api_resources_text(self) -> str:
        return API_RESOURCES_TEXT

    def raw_metrics(self) -> str:
        return METRICS_TEXT

    def container_logs(
        self, namespace: str, pod: str, container: str, since: str
    ) -> str:
        return "ok\napply request took too long\nok\n"

    def collection_json_size(self, resource: str) -> int:
        self.sized.append(resource)
        return self.json_sizes.get(resource, 0)


@pytest.fixture
def fake_etcdctl() -> FakeEtcdctl:
    return FakeEtcdctl(sizes={"/kubernetes.io/secrets/": 3 * 1024**2})


@pytest.fixture
def fake_api() -> FakeClusterApi:
    return FakeClusterApi()


@pytest.fixture
def make_api() -> type[FakeClusterApi]:
    return FakeClusterApi
