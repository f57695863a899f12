"""Exact and estimated byte-size measurement strategies."""

from __future__ import annotations

from typing import Protocol

from etcd_audit.application._audit_models import SizeMeasurement


class SizeMeasurer(Protocol):
    """Measure the stored size of one target."""

    def measure(self, target: str) -> SizeMeasurement:
        """Return the size of target."""


class RangeReader(Protocol):
    """Storage engine capable of sizing a key range."""

    def range_size(self, prefix: str) -> int:
        """Return byte count of keys+values under prefix."""


class CollectionReader(Protocol):
    """Control-plane API capable of sizing a JSON collection."""

    def collection_json_size(self, resource: str) -> int:
        """Return byte length of the JSON list of resource."""


class ExactByPrefixMeasurer:
    """Ground-truth size from a raw etcd range read.

    Transfers every matching key and value, so it is I/O heavy on etcd.
    """

    def __init__(self, reader: RangeReader) -> None:
        self.reader = reader

    def measure(self, target: str) -> SizeMeasurement:
        """Measure bytes stored under the key prefix `target`."""
        byte_count = self.reader.range_size(target) or 0
        return SizeMeasurement(target=target, byte_count=byte_count, method="exact")


class EstimatedByApiMeasurer:
    """Cheap order-of-magnitude size from the API server's JSON output.

    JSON is roughly 3x larger than etcd's protobuf encoding.
    """

    inflation_factor = 3

    def __init__(self, reader: CollectionReader) -> None:
        self.reader = reader

    def measure(self, target: str) -> SizeMeasurement:
        """Measure JSON bytes of all `target` objects across namespaces."""
        byte_count = self.reader.collection_json_size(target) or 0
        return SizeMeasurement(
            target=target, byte_count=byte_count, method="estimated"
        )
