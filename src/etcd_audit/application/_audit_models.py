"""Data models shared by the audit workflows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from etcd_audit.domain.fragmentation import EndpointStatus
from etcd_audit.domain.metrics_aggregation import ResourceCount
from etcd_audit.domain.size_units import UNDEFINED, bytes_to_mb, format_bytes

AuditMode = Literal["summary", "size-estimate", "exact", "forensic"]
MeasurementMethod = Literal["exact", "estimated"]


@dataclass(frozen=True)
class AuditOptions:
    """Invocation options, built once by the CLI."""

    limit: int = 15
    show_all: bool = False
    estimate_sizes: bool = False
    exact_resource: str | None = None
    forensic: bool = False
    assume_yes: bool = False
    throttle_seconds: float = 1.0
    reports_root: str | None = None

    def to_inputs(self) -> dict[str, Any]:
        """Return options as manifest inputs."""
        return {
            "limit": self.limit,
            "show_all": self.show_all,
            "estimate_sizes": self.estimate_sizes,
            "exact_resource": self.exact_resource,
            "forensic": self.forensic,
            "assume_yes": self.assume_yes,
            "throttle_seconds": self.throttle_seconds,
        }


@dataclass(frozen=True)
class SizeMeasurement:
    """Byte footprint of one prefix or resource kind."""

    target: str
    byte_count: int
    method: MeasurementMethod

    @property
    def size_mb(self) -> float:
        """Size in MiB rounded to two decimals."""
        return bytes_to_mb(self.byte_count)

    @property
    def display(self) -> str:
        """Human-readable size."""
        return format_bytes(self.byte_count)


@dataclass(frozen=True)
class ConsumerRow:
    """One storage-consumer listing row."""

    resource: ResourceCount
    estimate: SizeMeasurement | None = None


@dataclass(frozen=True)
class MemberPod:
    """etcd member pod details."""

    name: str
    node: str
    phase: str
    ip: str
    restarts: int
    start_time: str

    @classmethod
    def from_pod(cls, pod: dict[str, Any]) -> MemberPod:
        """Build from a pod object."""
        metadata = pod.get("metadata", {})
        spec = pod.get("spec", {})
        status = pod.get("status", {})
        container_statuses = status.get("containerStatuses") or [{}]
        return cls(
            name=metadata.get("name", ""),
            node=spec.get("nodeName", ""),
            phase=status.get("phase", ""),
            ip=status.get("podIP", ""),
            restarts=int(container_statuses[0].get("restartCount", 0)),
            start_time=metadata.get("creationTimestamp", ""),
        )


@dataclass(frozen=True)
class OperatorHealth:
    """etcd ClusterOperator Available/Degraded conditions."""

    available: str
    degraded: str

    @property
    def healthy(self) -> bool:
        """Return whether the operator is Available and not Degraded."""
        return self.available == "True" and self.degraded == "False"


@dataclass(frozen=True)
class SummarySnapshot:
    """Everything the summary workflow collected."""

    pod: str
    operator: OperatorHealth | None
    members: tuple[MemberPod, ...]
    endpoints: tuple[EndpointStatus, ...]
    consumers: tuple[ConsumerRow, ...]
    total_kinds: int
    slow_request_count: int | None


@dataclass(frozen=True)
class ExactSizeResult:
    """Exact size of one resource kind."""

    requested: str
    resource_kind: str
    prefix: str
    measurement: SizeMeasurement


@dataclass(frozen=True)
class ForensicRow:
    """API object count joined with physical key count and exact size.

    `physical_key_count` is None when no prefix could be inferred;
    `measurement` is None when the size could not be read.
    """

    resource_kind: str
    api_count: int
    physical_key_count: int | None
    measurement: SizeMeasurement | None
    prefix: str | None = None
    error: str | None = None

    @property
    def key_count_display(self) -> str:
        """Key count, or `?` when unresolved."""
        if self.physical_key_count is None:
            return "?"
        return str(self.physical_key_count)

    @property
    def size_display(self) -> str:
        """Size, or the undefined marker when unmeasured."""
        if self.measurement is None:
            return UNDEFINED
        return self.measurement.display

    @property
    def drift(self) -> int | None:
        """Physical keys minus API objects, when both are known."""
        if self.physical_key_count is None:
            return None
        return self.physical_key_count - self.api_count


@dataclass(frozen=True)
class ForensicScanResult:
    """Rows produced by a forensic scan."""

    rows: tuple[ForensicRow, ...]
    total_keys: int
    cancelled: bool = False

    @property
    def total_bytes(self) -> int:
        """Sum of measured bytes."""
        return sum(row.measurement.byte_count for row in self.rows if row.measurement)

    @property
    def unresolved(self) -> tuple[str, ...]:
        """Resource kinds whose prefix could not be inferred."""
        return tuple(
            row.resource_kind
            for row in self.rows
            if row.physical_key_count is None and row.api_count > 0
        )
