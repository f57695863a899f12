"""Summary and size-estimate workflows."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from etcd_audit.application._audit_models import (
    ConsumerRow,
    MemberPod,
    OperatorHealth,
    SummarySnapshot,
)
from etcd_audit.application._audit_reports import (
    generate_consumers_csv,
    generate_endpoints_csv,
    generate_members_csv,
)
from etcd_audit.application.size_measurer import EstimatedByApiMeasurer, SizeMeasurer
from etcd_audit.config import AuditThresholds, EtcdTargetConfig
from etcd_audit.domain.fragmentation import FragmentationPolicy, parse_endpoint_status
from etcd_audit.domain.metrics_aggregation import (
    ResourceCount,
    aggregate_resource_counts,
    top_resource_counts,
)
from etcd_audit.domain.size_units import format_percent
from etcd_audit.infrastructure.cluster_api import ClusterApi, OcError
from etcd_audit.infrastructure.etcdctl_client import EtcdctlClient, EtcdctlError
from etcd_audit.infrastructure.metrics_client import MetricsSourceError

SLOW_REQUEST_MARKER = "apply request took too long"
SLOW_REQUEST_WINDOW = "1h"


def fetch_resource_counts(
    metrics_text: Callable[[], str], series: str
) -> list[ResourceCount]:
    """Scrape metrics and aggregate object counts per resource kind."""
    try:
        text = metrics_text()
    except (OcError, MetricsSourceError) as exc:
        raise RuntimeError(f"Cannot read API server metrics: {exc}") from exc
    return aggregate_resource_counts(text.splitlines(), series=series)


def _condition_status(operator: dict[str, Any], condition_type: str) -> str:
    for condition in operator.get("status", {}).get("conditions", []):
        if condition.get("type") == condition_type:
            return str(condition.get("status", ""))
    return ""


def read_operator_health(api: ClusterApi) -> OperatorHealth | None:
    """Read the etcd ClusterOperator conditions, None if unavailable."""
    try:
        operator = api.cluster_operator("etcd")
    except OcError as exc:
        print(f"⚠️  Cannot read clusteroperator/etcd: {exc}")
        return None
    return OperatorHealth(
        available=_condition_status(operator, "Available"),
        degraded=_condition_status(operator, "Degraded"),
    )


def count_slow_requests(
    api: ClusterApi, pod: str, target: EtcdTargetConfig
) -> int | None:
    """Count slow apply warnings in the member's recent logs."""
    try:
        logs = api.container_logs(
            target.namespace, pod, target.container, since=SLOW_REQUEST_WINDOW
        )
    except OcError as exc:
        print(f"⚠️  Cannot read logs of {pod}: {exc}")
        return None
    return sum(1 for line in logs.splitlines() if SLOW_REQUEST_MARKER in line)


def collect_summary(
    api: ClusterApi,
    etcdctl: EtcdctlClient,
    target: EtcdTargetConfig,
    counts: Sequence[ResourceCount],
    limit: int | None,
) -> SummarySnapshot:
    """Collect health, fragmentation and top consumers."""
    try:
        endpoints = parse_endpoint_status(etcdctl.endpoint_status_json())
    except EtcdctlError as exc:
        raise RuntimeError(f"Cannot read etcd endpoint status: {exc}") from exc

    pods = api.pods(target.namespace, target.pod_selector)
    members = tuple(MemberPod.from_pod(pod) for pod in pods)
    shown = top_resource_counts(list(counts), limit)
    return SummarySnapshot(
        pod=etcdctl.pod,
        operator=read_operator_health(api),
        members=members,
        endpoints=tuple(endpoints),
        consumers=tuple(ConsumerRow(resource=item) for item in shown),
        total_kinds=len(counts),
        slow_request_count=count_slow_requests(api, etcdctl.pod, target),
    )


def estimate_consumers(
    counts: Sequence[ResourceCount],
    measurer: SizeMeasurer,
    on_row: Callable[[int, int, ConsumerRow], None] | None = None,
) -> list[ConsumerRow]:
    """Attach an estimated JSON size to each displayed resource kind."""
    rows: list[ConsumerRow] = []
    for resource in counts:
        try:
            estimate = measurer.measure(resource.kind)
        except OcError as exc:
            raise RuntimeError(
                f"API server failed while sizing {resource.kind}: {exc}"
            ) from exc
        row = ConsumerRow(resource=resource, estimate=estimate)
        rows.append(row)
        if on_row is not None:
            on_row(len(rows), len(counts), row)
    return rows


def _print_operator(operator: OperatorHealth | None) -> None:
    print("1. Cluster Operator Health")
    if operator is None:
        print("   etcd operator status: unknown")
    elif operator.healthy:
        print("   ✅ etcd operator healthy (Available=True, Degraded=False)")
    else:
        print(
            f"   ❌ etcd operator UNHEALTHY (Available={operator.available or '?'}, "
            f"Degraded={operator.degraded or '?'})"
        )


def _print_endpoints(snapshot: SummarySnapshot, policy: FragmentationPolicy) -> None:
    print("3. Database Size & Fragmentation")
    for status in snapshot.endpoints:
        flags = []
        if policy.is_critical_size(status):
            flags.append("critical size")
        if policy.is_high_fragmentation(status):
            flags.append("high fragmentation")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(
            f"   {status.host}: {status.physical_size_mb} MB physical, "
            f"{status.used_size_mb} MB used, "
            f"{format_percent(status.fragmentation_pct)} fragmented{suffix}"
        )
    print("   Fragmentation = (Phys. Size - Used Data) / Phys. Size")


def write_summary_reports(
    snapshot: SummarySnapshot,
    thresholds: AuditThresholds,
    data_dir: str,
) -> None:
    """Print summary findings and write CSV artifacts."""
    output_dir = Path(data_dir)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    policy = FragmentationPolicy(
        high_fragmentation_pct=thresholds.fragmentation_high_pct,
        critical_size_mb=thresholds.db_size_critical_mb,
    )

    print(f"Using pod for diagnostics: {snapshot.pod}")
    _print_operator(snapshot.operator)
    print(f"2. etcd member pods: {len(snapshot.members)}")
    _print_endpoints(snapshot, policy)
    print(
        f"4. Storage consumers: showing {len(snapshot.consumers)} of "
        f"{snapshot.total_kinds} resource kinds (source: API server metrics)"
    )
    print("5. Disk Performance Check (WAL fsync)")
    if snapshot.slow_request_count is None:
        print("   Result: unknown (logs unavailable)")
    elif snapshot.slow_request_count > 0:
        print(
            f"   ❌ Found {snapshot.slow_request_count} slow requests in the last "
            f"{SLOW_REQUEST_WINDOW}. Check storage latency."
        )
    else:
        print("   ✅ No performance warnings found in logs.")

    print("📊 Generating CSV reports...")
    generate_members_csv(snapshot.members, timestamp, output_dir)
    generate_endpoints_csv(snapshot.endpoints, policy, timestamp, output_dir)
    generate_consumers_csv(snapshot.consumers, thresholds, timestamp, output_dir)


def write_estimate_reports(
    consumers: Sequence[ConsumerRow],
    total_kinds: int,
    thresholds: AuditThresholds,
    data_dir: str,
) -> None:
    """Print estimate notes and write the consumers CSV."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    print(
        f"Storage consumers: {len(consumers)} of {total_kinds} resource kinds "
        "(source: API server JSON export)"
    )
    print(
        f"⚠️  JSON size is approx. {EstimatedByApiMeasurer.inflation_factor}x "
        "larger than binary etcd storage."
    )
    print("📊 Generating CSV reports...")
    generate_consumers_csv(consumers, thresholds, timestamp, Path(data_dir))
