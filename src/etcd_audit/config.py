"""Application configuration and environment loading."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class EtcdTargetConfig:
    """Where the etcd members live and how to reach them."""

    namespace: str = "openshift-etcd"
    pod_selector: str = "app=etcd"
    container: str = "etcd"


@dataclass(frozen=True)
class MetricsSourceConfig:
    """API server metrics scrape settings."""

    series: str = "apiserver_storage_objects"
    url: str | None = None
    token: str | None = None
    verify_tls: bool = True


@dataclass(frozen=True)
class AuditThresholds:
    """Policy thresholds used to flag report rows."""

    fragmentation_high_pct: int = 45
    db_size_critical_mb: int = 1500
    count_warning: int = 10_000
    count_critical: int = 20_000
    estimated_size_warning_bytes: int = 50 * 1024 * 1024
    estimated_size_critical_bytes: int = 100 * 1024 * 1024


@dataclass(frozen=True)
class EtcdAuditConfig:
    """Top-level config for the etcd audit."""

    cli_binary: str = "oc"
    etcd: EtcdTargetConfig = field(default_factory=EtcdTargetConfig)
    metrics: MetricsSourceConfig = field(default_factory=MetricsSourceConfig)
    thresholds: AuditThresholds = field(default_factory=AuditThresholds)
    default_limit: int = 15
    throttle_seconds: float = 1.0

    @property
    def has_direct_metrics(self) -> bool:
        """Return whether metrics should be scraped over HTTP instead of `oc`."""
        return bool(self.metrics.url)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def load_config(env_path: Path = Path(".env")) -> EtcdAuditConfig:
    """Load config from environment and optional .env file."""
    load_dotenv(env_path, override=False)
    return EtcdAuditConfig(
        cli_binary=os.getenv("ETCD_AUDIT_CLI", "oc"),
        etcd=EtcdTargetConfig(
            namespace=os.getenv("ETCD_NAMESPACE", "openshift-etcd"),
            pod_selector=os.getenv("ETCD_POD_SELECTOR", "app=etcd"),
            container=os.getenv("ETCD_CONTAINER", "etcd"),
        ),
        metrics=MetricsSourceConfig(
            series=os.getenv("ETCD_AUDIT_METRICS_SERIES", "apiserver_storage_objects"),
            url=os.getenv("ETCD_AUDIT_METRICS_URL"),
            token=os.getenv("ETCD_AUDIT_METRICS_TOKEN"),
            verify_tls=os.getenv("ETCD_AUDIT_METRICS_INSECURE", "").lower()
            not in {"1", "true", "yes"},
        ),
        default_limit=_env_int("ETCD_AUDIT_LIMIT", 15),
        throttle_seconds=_env_float("ETCD_AUDIT_THROTTLE_SECONDS", 1.0),
    )
