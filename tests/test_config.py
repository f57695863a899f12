"""Tests for application config."""

from __future__ import annotations

from pathlib import Path

import pytest

from etcd_audit.config import EtcdAuditConfig, MetricsSourceConfig, load_config

_KEYS = (
    "ETCD_AUDIT_CLI",
    "ETCD_NAMESPACE",
    "ETCD_AUDIT_METRICS_URL",
    "ETCD_AUDIT_THROTTLE_SECONDS",
    "ETCD_AUDIT_LIMIT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Register every key so values loaded from .env files are undone too.
    for key in _KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.env")
    assert cfg.cli_binary == "oc"
    assert cfg.etcd.namespace == "openshift-etcd"
    assert cfg.metrics.series == "apiserver_storage_objects"
    assert cfg.throttle_seconds == 1.0
    assert cfg.default_limit == 15
    assert cfg.thresholds.fragmentation_high_pct == 45
    assert not cfg.has_direct_metrics


def test_env_file_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "ETCD_AUDIT_CLI=kubectl\n"
        "ETCD_AUDIT_THROTTLE_SECONDS=0.5\n"
        "ETCD_AUDIT_LIMIT=30\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ETCD_NAMESPACE", "etcd-system")
    cfg = load_config(env_file)
    assert cfg.cli_binary == "kubectl"
    assert cfg.throttle_seconds == 0.5
    assert cfg.default_limit == 30
    assert cfg.etcd.namespace == "etcd-system"


def test_invalid_number(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ETCD_AUDIT_THROTTLE_SECONDS", "slow")
    with pytest.raises(ValueError, match="ETCD_AUDIT_THROTTLE_SECONDS"):
        load_config(tmp_path / "missing.env")


def test_has_direct_metrics() -> None:
    cfg = EtcdAuditConfig(metrics=MetricsSourceConfig(url="https://api:6443"))
    assert cfg.has_direct_metrics
