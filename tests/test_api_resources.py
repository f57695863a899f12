"""Tests for API resource alias resolution."""

from __future__ import annotations

from etcd_audit.domain.api_resources import (
    parse_api_resources,
    resolve_resource_alias,
)

TEXT = """\
configmaps  cm  v1  true  ConfigMap
secrets  v1  true  Secret
routes  route.openshift.io/v1  true  Route
"""


def test_parse_rows_with_and_without_short_names() -> None:
    resources = parse_api_resources(TEXT + "garbage line\n")
    assert [r.name for r in resources] == ["configmaps", "secrets", "routes"]
    assert resources[0].short_names == ("cm",)
    assert resources[1].short_names == ()
    assert resources[2].kind == "Route"
    assert resources[2].namespaced


def test_resolve_by_name_short_name_and_kind() -> None:
    resources = parse_api_resources(TEXT)
    assert resolve_resource_alias("CM", resources) == "configmaps"
    assert resolve_resource_alias("Secret", resources) == "secrets"
    assert resolve_resource_alias("routes.route.openshift.io", resources) == "routes"


def test_unknown_alias_falls_back_to_stripped_name() -> None:
    assert resolve_resource_alias("widgets.example.com", []) == "widgets"
