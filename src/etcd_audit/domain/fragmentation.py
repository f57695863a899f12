"""Parse etcd endpoint status and derive database fragmentation."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from etcd_audit.domain.size_units import BYTES_IN_MB


@dataclass(frozen=True)
class EndpointStatus:
    """Physical and in-use database bytes for one etcd member."""

    endpoint: str
    physical_size_bytes: int
    used_size_bytes: int

    @property
    def host(self) -> str:
        """Return endpoint host without scheme and port."""
        target = self.endpoint if "//" in self.endpoint else f"//{self.endpoint}"
        return urlsplit(target).hostname or self.endpoint

    @property
    def physical_size_mb(self) -> int:
        """Physical database size in whole MiB."""
        return self.physical_size_bytes // BYTES_IN_MB

    @property
    def used_size_mb(self) -> int:
        """In-use database size in whole MiB."""
        return self.used_size_bytes // BYTES_IN_MB

    @property
    def fragmentation_pct(self) -> int | None:
        """Unused share of the physical size as integer percent.

        None when the physical size is zero.
        """
        if self.physical_size_bytes <= 0:
            return None
        unused = self.physical_size_bytes - self.used_size_bytes
        return unused * 100 // self.physical_size_bytes


@dataclass(frozen=True)
class FragmentationPolicy:
    """Flag thresholds for endpoint status rows."""

    high_fragmentation_pct: int = 45
    critical_size_mb: int = 1500

    def is_high_fragmentation(self, status: EndpointStatus) -> bool:
        """Return whether fragmentation exceeds the high threshold."""
        pct = status.fragmentation_pct
        return pct is not None and pct > self.high_fragmentation_pct

    def is_critical_size(self, status: EndpointStatus) -> bool:
        """Return whether physical size exceeds the critical threshold."""
        return status.physical_size_mb > self.critical_size_mb


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _records(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if isinstance(payload, dict):
        return [payload]
    return []


def parse_endpoint_status(raw: str) -> list[EndpointStatus]:
    """Parse `etcdctl endpoint status -w json` output.

    Missing byte counters are read as 0.
    """
    text = raw.strip()
    if not text:
        return []
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"endpoint status is not valid JSON: {exc}") from exc

    statuses: list[EndpointStatus] = []
    for record in _records(payload):
        endpoint = str(record.get("Endpoint", ""))
        if not endpoint:
            continue
        status = record.get("Status") or {}
        statuses.append(
            EndpointStatus(
                endpoint=endpoint,
                physical_size_bytes=_as_int(status.get("dbSize")),
                used_size_bytes=_as_int(status.get("dbSizeInUse")),
            )
        )
    return statuses
