"""Tests for endpoint status parsing and fragmentation."""

from __future__ import annotations

import json

import pytest

from etcd_audit.domain.fragmentation import (
    EndpointStatus,
    FragmentationPolicy,
    parse_endpoint_status,
)

MB = 1024**2


def test_fifty_percent_is_flagged_high() -> None:
    status = EndpointStatus("https://10.0.0.1:2379", 2000 * MB, 1000 * MB)
    policy = FragmentationPolicy()
    assert status.fragmentation_pct == 50
    assert policy.is_high_fragmentation(status)
    assert policy.is_critical_size(status)


def test_zero_physical_size_is_undefined() -> None:
    status = EndpointStatus("https://10.0.0.2:2379", 0, 0)
    assert status.fragmentation_pct is None
    assert not FragmentationPolicy().is_high_fragmentation(status)


def test_threshold_is_strictly_greater() -> None:
    status = EndpointStatus("10.0.0.3:2379", 100 * MB, 55 * MB)
    assert status.fragmentation_pct == 45
    assert not FragmentationPolicy().is_high_fragmentation(status)
    assert not FragmentationPolicy().is_critical_size(status)


def test_host_strips_scheme_and_port() -> None:
    assert EndpointStatus("https://10.0.0.1:2379", 1, 1).host == "10.0.0.1"
    assert EndpointStatus("10.0.0.9:2379", 1, 1).host == "10.0.0.9"


def test_parse_endpoint_status_list() -> None:
    raw = json.dumps(
        [
            {
                "Endpoint": "https://10.0.0.1:2379",
                "Status": {"dbSize": 300, "dbSizeInUse": 100, "leader": 1},
            },
            {"Endpoint": "https://10.0.0.2:2379", "Status": {"dbSize": 400}},
            {"Status": {"dbSize": 1}},
        ]
    )
    statuses = parse_endpoint_status(raw)
    assert statuses == [
        EndpointStatus("https://10.0.0.1:2379", 300, 100),
        EndpointStatus("https://10.0.0.2:2379", 400, 0),
    ]


def test_parse_endpoint_status_empty_and_invalid() -> None:
    assert parse_endpoint_status("  ") == []
    with pytest.raises(ValueError):
        parse_endpoint_status("{not json")
