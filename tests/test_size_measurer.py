"""Tests for size measurement strategies."""

from __future__ import annotations

from unittest.mock import Mock, patch

from etcd_audit.application.size_measurer import (
    EstimatedByApiMeasurer,
    ExactByPrefixMeasurer,
)
from etcd_audit.application.summary_service import estimate_consumers
from etcd_audit.domain.metrics_aggregation import ResourceCount
from etcd_audit.infrastructure.cluster_api import ClusterApi
from etcd_audit.infrastructure.oc_client import OcError


def test_exact_measurement_reads_prefix() -> None:
    reader = Mock()
    reader.range_size.return_value = 4096
    measurement = ExactByPrefixMeasurer(reader).measure("/kubernetes.io/secrets")
    reader.range_size.assert_called_once_with("/kubernetes.io/secrets")
    assert measurement.byte_count == 4096
    assert measurement.method == "exact"
    assert measurement.display == "4 KB"


def test_exact_measurement_of_empty_range_is_zero() -> None:
    reader = Mock()
    reader.range_size.return_value = 0
    measurement = ExactByPrefixMeasurer(reader).measure("/kubernetes.io/nothing")
    assert measurement.byte_count == 0
    assert measurement.display == "0 B"


def test_estimated_measurement_of_missing_collection_is_zero() -> None:
    reader = Mock()
    reader.collection_json_size.return_value = 0
    measurement = EstimatedByApiMeasurer(reader).measure("widgets")
    assert measurement.byte_count == 0
    assert measurement.method == "estimated"


def test_estimated_measurement_reads_collection() -> None:
    reader = Mock()
    reader.collection_json_size.return_value = 5 * 1024**2
    measurement = EstimatedByApiMeasurer(reader).measure("secrets")
    reader.collection_json_size.assert_called_once_with("secrets")
    assert measurement.size_mb == 5.0


def test_estimate_of_unserved_resource_type_does_not_abort_listing() -> None:
    def sizes(command: list[str], *, binary: str) -> int:
        if command[1] == "widgets.example.com":
            raise OcError(
                "oc command failed: error: the server doesn't have a resource "
                'type "widgets.example.com"'
            )
        return 2048

    counts = [ResourceCount("secrets", 10), ResourceCount("widgets.example.com", 5)]
    with patch(
        "etcd_audit.infrastructure.cluster_api.oc_output_size", side_effect=sizes
    ):
        rows = estimate_consumers(counts, EstimatedByApiMeasurer(ClusterApi()))
    assert [row.estimate.byte_count for row in rows if row.estimate] == [2048, 0]
