"""Full-catalog exact size scan, throttled and confirmation-gated."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Sequence
from datetime import datetime
from pathlib import Path
from typing import Protocol

from etcd_audit.application._audit_models import (
    ForensicRow,
    ForensicScanResult,
    SizeMeasurement,
)
from etcd_audit.application._audit_reports import generate_forensic_csv
from etcd_audit.application.size_measurer import ExactByPrefixMeasurer, SizeMeasurer
from etcd_audit.domain.confirmation import FORENSIC_TOKEN, ConfirmationGate
from etcd_audit.domain.keyspace import count_keys_under, infer_key_prefix
from etcd_audit.domain.metrics_aggregation import ResourceCount
from etcd_audit.domain.size_units import format_bytes
from etcd_audit.infrastructure.etcdctl_client import EtcdctlError

FORENSIC_WARNING = (
    "Forensic mode reads the raw content of EVERY resource kind from etcd. "
    "This generates sustained I/O load on the cluster datastore."
)


class ForensicScanAborted(RuntimeError):
    """etcd became unreachable during the scan."""

    def __init__(self, message: str, completed_rows: int) -> None:
        super().__init__(f"{message} (completed rows: {completed_rows})")
        self.completed_rows = completed_rows


class KeyStore(Protocol):
    """etcd operations the scan needs."""

    def list_keys(self) -> list[str]:
        """Return every key in the store."""

    def range_size(self, prefix: str) -> int:
        """Return byte count of keys+values under prefix."""

    def is_reachable(self) -> bool:
        """Return whether etcd still answers."""


class ForensicScanner:
    """Join API object counts with etcd key counts and exact sizes.

    Kinds are processed one at a time, largest first, against a single
    keys-only snapshot taken at scan start.
    """

    def __init__(
        self,
        store: KeyStore,
        *,
        measurer: SizeMeasurer | None = None,
        throttle_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if throttle_seconds < 0:
            raise ValueError(f"throttle must be >= 0, got {throttle_seconds}")
        self.store = store
        self.measurer = measurer or ExactByPrefixMeasurer(store)
        self.throttle_seconds = throttle_seconds
        self.sleep = sleep
        self.cancel_event = cancel_event or threading.Event()
        self.cancelled = False

    def scan(
        self,
        load_counts: Callable[[], Sequence[ResourceCount]],
        gate: ConfirmationGate,
        on_row: Callable[[int, int, ForensicRow], None] | None = None,
    ) -> ForensicScanResult | None:
        """Run the scan after the operator types the forensic token.

        Returns None when the operator declines. Nothing is read before
        confirmation.
        """
        print(FORENSIC_WARNING)
        if not gate.confirm_token("Start forensic scan?", FORENSIC_TOKEN):
            return None

        counts = load_counts()
        keys = self.snapshot_keys()
        rows: list[ForensicRow] = []
        for row in self.iter_rows(counts, keys):
            rows.append(row)
            if on_row is not None:
                on_row(len(rows), len(counts), row)
        return ForensicScanResult(
            rows=tuple(rows), total_keys=len(keys), cancelled=self.cancelled
        )

    def snapshot_keys(self) -> list[str]:
        """Download the keys-only listing once."""
        try:
            return self.store.list_keys()
        except EtcdctlError as exc:
            raise RuntimeError(f"Cannot snapshot etcd key index: {exc}") from exc

    def iter_rows(
        self, counts: Sequence[ResourceCount], keys: Sequence[str]
    ) -> Iterator[ForensicRow]:
        """Yield one row per resource kind, largest count first."""
        ordered = sorted(counts, key=lambda item: item.count, reverse=True)
        completed = 0
        for index, resource in enumerate(ordered):
            if self.cancel_event.is_set():
                self.cancelled = True
                return
            row = self._scan_one(resource, keys, completed)
            completed += 1
            yield row
            measured = row.measurement is not None and row.api_count > 0
            if measured and index < len(ordered) - 1 and self.throttle_seconds:
                self.sleep(self.throttle_seconds)

    def _scan_one(
        self, resource: ResourceCount, keys: Sequence[str], completed: int
    ) -> ForensicRow:
        if resource.count == 0:
            return ForensicRow(
                resource_kind=resource.kind,
                api_count=0,
                physical_key_count=0,
                measurement=SizeMeasurement(
                    target=resource.kind, byte_count=0, method="exact"
                ),
            )

        prefix = infer_key_prefix(resource.kind, keys)
        if prefix is None:
            return ForensicRow(
                resource_kind=resource.kind,
                api_count=resource.count,
                physical_key_count=None,
                measurement=None,
                error="prefix not found",
            )

        key_count = count_keys_under(prefix, keys)
        try:
            measurement = self.measurer.measure(prefix.scope)
        except EtcdctlError as exc:
            if not self.store.is_reachable():
                raise ForensicScanAborted(
                    f"etcd became unreachable while measuring {resource.kind}",
                    completed_rows=completed,
                ) from exc
            return ForensicRow(
                resource_kind=resource.kind,
                api_count=resource.count,
                physical_key_count=key_count,
                measurement=None,
                prefix=prefix.prefix,
                error=str(exc),
            )
        return ForensicRow(
            resource_kind=resource.kind,
            api_count=resource.count,
            physical_key_count=key_count,
            measurement=measurement,
            prefix=prefix.prefix,
        )


def write_forensic_report(result: ForensicScanResult, data_dir: str) -> None:
    """Print scan totals and write the forensic CSV."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    print(f"Key index snapshot: {result.total_keys} keys")
    print(f"Resource kinds scanned: {len(result.rows)}")
    print(f"Total measured size: {format_bytes(result.total_bytes)}")
    if result.unresolved:
        print(f"⚠️  No etcd path found for: {', '.join(result.unresolved)}")
    if result.cancelled:
        print("⚠️  Scan cancelled before completion; rows are partial.")
    print("📊 Generating CSV reports...")
    generate_forensic_csv(result, timestamp, Path(data_dir))
