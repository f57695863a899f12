"""Exact single-resource size workflow."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from etcd_audit.application._audit_models import ExactSizeResult
from etcd_audit.application._audit_reports import generate_exact_csv
from etcd_audit.application.size_measurer import ExactByPrefixMeasurer
from etcd_audit.domain.api_resources import parse_api_resources, resolve_resource_alias
from etcd_audit.domain.keyspace import KeyPrefix, infer_key_prefix
from etcd_audit.infrastructure.cluster_api import ClusterApi, OcError
from etcd_audit.infrastructure.etcdctl_client import EtcdctlClient, EtcdctlError


def resolve_resource_name(api: ClusterApi, requested: str) -> str:
    """Map a user alias to the canonical plural resource name."""
    try:
        resources = parse_api_resources(api.api_resources_text())
    except OcError as exc:
        raise RuntimeError(f"Cannot list API resources: {exc}") from exc
    return resolve_resource_alias(requested, resources)


def discover_prefix(etcdctl: EtcdctlClient, resource_kind: str) -> KeyPrefix:
    """Find the etcd path holding resource_kind."""
    try:
        keys = etcdctl.list_keys()
    except EtcdctlError as exc:
        raise RuntimeError(f"Cannot list etcd keys: {exc}") from exc
    prefix = infer_key_prefix(resource_kind, keys)
    if prefix is None:
        raise ValueError(
            f"Could not find any keys for resource '{resource_kind}' in etcd."
        )
    return prefix


def measure_exact(
    etcdctl: EtcdctlClient, requested: str, prefix: KeyPrefix
) -> ExactSizeResult:
    """Read the raw range under prefix and return its size."""
    try:
        measurement = ExactByPrefixMeasurer(etcdctl).measure(prefix.scope)
    except EtcdctlError as exc:
        raise RuntimeError(f"etcd range read failed: {exc}") from exc
    return ExactSizeResult(
        requested=requested,
        resource_kind=prefix.resource_kind,
        prefix=prefix.prefix,
        measurement=measurement,
    )


def write_exact_report(result: ExactSizeResult, data_dir: str) -> None:
    """Print the exact size and write its CSV."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    print(f"Resource:   {result.requested}")
    print(f"Path:       {result.prefix}")
    print(
        f"Exact size: {result.measurement.size_mb:.2f} MB "
        f"({result.measurement.byte_count} bytes, raw protobuf/etcd storage)"
    )
    generate_exact_csv(result, timestamp, Path(data_dir))
