"""Tests for control-plane API wrapper."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from etcd_audit.infrastructure.cluster_api import ClusterApi
from etcd_audit.infrastructure.oc_client import OcError

MODULE = "etcd_audit.infrastructure.cluster_api"


def test_running_pod_name() -> None:
    payload = {"items": [{"metadata": {"name": "etcd-master-1"}}]}
    with patch(f"{MODULE}.oc_json", return_value=payload) as oc_json:
        assert ClusterApi().running_pod_name("openshift-etcd", "app=etcd") == (
            "etcd-master-1"
        )
    assert "--field-selector=status.phase=Running" in oc_json.call_args.args[0]


def test_running_pod_name_none() -> None:
    with patch(f"{MODULE}.oc_json", return_value={"items": []}):
        assert ClusterApi().running_pod_name("openshift-etcd", "app=etcd") is None


def test_collection_json_size_streams_byte_count() -> None:
    with patch(f"{MODULE}.oc_output_size", return_value=4096) as size:
        assert ClusterApi().collection_json_size("secrets") == 4096
    command = size.call_args.args[0]
    assert command[:2] == ["get", "secrets"]
    assert "--all-namespaces" in command
    assert "--ignore-not-found" in command


def test_collection_json_size_unserved_resource_type_is_zero() -> None:
    error = OcError(
        'oc command failed: error: the server doesn\'t have a resource type '
        '"widgets.example.com"'
    )
    with patch(f"{MODULE}.oc_output_size", side_effect=error):
        assert ClusterApi().collection_json_size("widgets.example.com") == 0


def test_collection_json_size_connectivity_error_is_fatal() -> None:
    error = OcError("oc command failed: Unable to connect to the server: EOF")
    with patch(f"{MODULE}.oc_output_size", side_effect=error):
        with pytest.raises(OcError, match="Unable to connect"):
            ClusterApi().collection_json_size("secrets")
