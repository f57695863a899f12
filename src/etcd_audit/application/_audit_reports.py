"""CSV report writers for the etcd audit workflows."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from etcd_audit.application._audit_models import (
    ConsumerRow,
    ExactSizeResult,
    ForensicScanResult,
    MemberPod,
)
from etcd_audit.config import AuditThresholds
from etcd_audit.domain.fragmentation import EndpointStatus, FragmentationPolicy
from etcd_audit.domain.severity import classify
from etcd_audit.domain.size_units import format_percent


def _write(rows: list[dict[str, Any]], columns: list[str], filename: Path) -> Path:
    pd.DataFrame(rows, columns=columns).to_csv(filename, index=False)
    print(f"  → {filename}")
    return filename


def generate_consumers_csv(
    consumers: Sequence[ConsumerRow],
    thresholds: AuditThresholds,
    timestamp: str,
    data_dir: Path,
) -> Path:
    """Write the storage-consumer listing."""
    with_estimates = any(row.estimate is not None for row in consumers)
    rows: list[dict[str, Any]] = []
    for consumer in consumers:
        count = consumer.resource.count
        row: dict[str, Any] = {
            "count": count,
            "resource": consumer.resource.kind,
            "count_severity": classify(
                count,
                warning=thresholds.count_warning,
                critical=thresholds.count_critical,
            ),
        }
        if with_estimates:
            estimate = consumer.estimate
            row["est_json_size"] = estimate.display if estimate else ""
            row["est_json_bytes"] = estimate.byte_count if estimate else ""
            row["size_severity"] = (
                classify(
                    estimate.byte_count,
                    warning=thresholds.estimated_size_warning_bytes,
                    critical=thresholds.estimated_size_critical_bytes,
                )
                if estimate
                else ""
            )
        rows.append(row)

    columns = ["count", "resource", "count_severity"]
    if with_estimates:
        columns += ["est_json_size", "est_json_bytes", "size_severity"]
    return _write(rows, columns, data_dir / f"storage_consumers_{timestamp}.csv")


def generate_endpoints_csv(
    endpoints: Sequence[EndpointStatus],
    policy: FragmentationPolicy,
    timestamp: str,
    data_dir: Path,
) -> Path:
    """Write per-member database size and fragmentation."""
    rows = [
        {
            "node_ip": status.host,
            "phys_size_mb": status.physical_size_mb,
            "used_data_mb": status.used_size_mb,
            "fragmentation": format_percent(status.fragmentation_pct),
            "high_fragmentation": policy.is_high_fragmentation(status),
            "critical_size": policy.is_critical_size(status),
        }
        for status in endpoints
    ]
    columns = [
        "node_ip",
        "phys_size_mb",
        "used_data_mb",
        "fragmentation",
        "high_fragmentation",
        "critical_size",
    ]
    return _write(rows, columns, data_dir / f"endpoint_fragmentation_{timestamp}.csv")


def generate_members_csv(
    members: Sequence[MemberPod], timestamp: str, data_dir: Path
) -> Path:
    """Write etcd member pod details."""
    rows = [
        {
            "name": member.name,
            "node": member.node,
            "status": member.phase,
            "ip": member.ip,
            "restarts": member.restarts,
            "start_time": member.start_time,
        }
        for member in members
    ]
    columns = ["name", "node", "status", "ip", "restarts", "start_time"]
    return _write(rows, columns, data_dir / f"etcd_members_{timestamp}.csv")


def generate_exact_csv(result: ExactSizeResult, timestamp: str, data_dir: Path) -> Path:
    """Write the exact single-resource measurement."""
    rows = [
        {
            "resource": result.requested,
            "resolved_kind": result.resource_kind,
            "etcd_path": result.prefix,
            "exact_size": result.measurement.display,
            "exact_bytes": result.measurement.byte_count,
            "exact_mb": result.measurement.size_mb,
        }
    ]
    columns = [
        "resource",
        "resolved_kind",
        "etcd_path",
        "exact_size",
        "exact_bytes",
        "exact_mb",
    ]
    return _write(rows, columns, data_dir / f"exact_size_{timestamp}.csv")


def generate_forensic_csv(
    result: ForensicScanResult, timestamp: str, data_dir: Path
) -> Path:
    """Write the forensic join table."""
    rows = [
        {
            "resource": row.resource_kind,
            "api_count": row.api_count,
            "etcd_keys": row.key_count_display,
            "drift": "" if row.drift is None else row.drift,
            "exact_size": row.size_display,
            "exact_bytes": row.measurement.byte_count if row.measurement else "",
            "etcd_path": row.prefix or "",
            "error": row.error or "",
        }
        for row in result.rows
    ]
    columns = [
        "resource",
        "api_count",
        "etcd_keys",
        "drift",
        "exact_size",
        "exact_bytes",
        "etcd_path",
        "error",
    ]
    return _write(rows, columns, data_dir / f"forensic_scan_{timestamp}.csv")
