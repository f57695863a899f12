"""Application facade exports for stable use-case API."""

from etcd_audit.application._audit_models import (
    AuditOptions,
    ForensicRow,
    ForensicScanResult,
    SizeMeasurement,
)
from etcd_audit.application.audit_orchestrator import (
    AuditDependencies,
    build_dependencies,
    execute_audit,
    select_mode,
)
from etcd_audit.application.forensic_scanner import (
    ForensicScanAborted,
    ForensicScanner,
)
from etcd_audit.application.run_writer import RunResult
from etcd_audit.application.size_measurer import (
    EstimatedByApiMeasurer,
    ExactByPrefixMeasurer,
)

__all__ = [
    "AuditDependencies",
    "AuditOptions",
    "EstimatedByApiMeasurer",
    "ExactByPrefixMeasurer",
    "ForensicRow",
    "ForensicScanAborted",
    "ForensicScanResult",
    "ForensicScanner",
    "RunResult",
    "SizeMeasurement",
    "build_dependencies",
    "execute_audit",
    "select_mode",
]
