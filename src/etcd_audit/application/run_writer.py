"""Persist audit runs as `<root>/<mode>/<run_id>/` directories.

Each run holds the CSV reports of one audit mode plus `summary.md` and
`manifest.json`. The manifest records which etcd member was read and how
many rows each report carries, so runs can be compared without opening
the CSVs.
"""

import csv
import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

TOOL_NAME = "etcd-audit"
REPORT_SUFFIX = ".csv"


@dataclass(frozen=True)
class RunResult:
    """Result of a persisted audit run."""

    run_id: str
    mode: str
    output_dir: Path
    manifest_path: Path
    summary_path: Path
    output_files: tuple[Path, ...]


@dataclass(frozen=True)
class RunContext:
    """Run directory and the audit it belongs to."""

    run_id: str
    mode: str
    etcd_pod: str
    output_dir: Path
    started_at: str
    options: dict[str, Any]


@dataclass(frozen=True)
class ReportFile:
    """One CSV report of a run and its data row count."""

    path: Path
    rows: int


@dataclass(frozen=True)
class AuditSummary:
    """Headline, findings and warnings rendered into summary.md."""

    title: str
    findings: list[str] | None = None
    warnings: list[str] | None = None


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def create_run(
    mode: str,
    *,
    etcd_pod: str,
    options: dict[str, Any],
    reports_root: str = "reports",
    now: datetime | None = None,
) -> RunContext:
    """Create the run directory; a second run in the same second gets a suffix."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    base = Path(reports_root) / mode
    run_id = stamp
    suffix = 1
    while (base / run_id).exists():
        suffix += 1
        run_id = f"{stamp}_{suffix}"
    output_dir = base / run_id
    output_dir.mkdir(parents=True)
    return RunContext(
        run_id=run_id,
        mode=mode,
        etcd_pod=etcd_pod,
        output_dir=output_dir,
        started_at=_utc_now_iso(),
        options=options,
    )


def list_output_files(output_dir: Path) -> tuple[Path, ...]:
    """List report artifacts under output directory."""
    return tuple(sorted(p for p in output_dir.rglob("*") if p.is_file()))


def collect_reports(output_files: tuple[Path, ...]) -> tuple[ReportFile, ...]:
    """Count data rows (header excluded) of every CSV report."""
    reports = []
    for path in output_files:
        if path.suffix != REPORT_SUFFIX:
            continue
        with path.open(newline="", encoding="utf-8") as handle:
            rows = sum(1 for _ in csv.reader(handle))
        reports.append(ReportFile(path=path, rows=max(rows - 1, 0)))
    return tuple(reports)


def build_summary_lines(
    ctx: RunContext,
    summary: AuditSummary,
    reports: tuple[ReportFile, ...],
) -> list[str]:
    """Render summary.md for one audit run."""
    lines = [
        f"# {summary.title}",
        "",
        f"Mode `{ctx.mode}` against etcd member `{ctx.etcd_pod}`, "
        f"started {ctx.started_at}.",
        "",
        "## Options",
    ]
    options = {k: v for k, v in sorted(ctx.options.items()) if v is not None}
    lines.extend(f"- `{key}`: `{value}`" for key, value in options.items())
    if not options:
        lines.append("- defaults")

    lines.extend(["", "## Reports"])
    lines.extend(f"- `{r.path.name}`: {r.rows} rows" for r in reports)
    if not reports:
        lines.append("- no CSV reports were written")

    lines.extend(["", "## Findings"])
    lines.extend(f"- {item}" for item in summary.findings or [])
    if not summary.findings:
        lines.append("- Nothing notable.")

    lines.extend(["", "## Warnings"])
    lines.extend(f"- {item}" for item in summary.warnings or [])
    if not summary.warnings:
        lines.append("- None.")

    lines.extend(["", "_Read-only audit: no etcd or cluster state was modified._"])
    return lines


def finalize_run(
    ctx: RunContext,
    *,
    status: str,
    summary: AuditSummary,
    error: str | None = None,
) -> RunResult:
    """Write summary.md and manifest.json and return run result."""
    reports = collect_reports(list_output_files(ctx.output_dir))
    summary_path = ctx.output_dir / "summary.md"
    summary_path.write_text(
        "\n".join(build_summary_lines(ctx, summary, reports)) + "\n",
        encoding="utf-8",
    )

    manifest_path = ctx.output_dir / "manifest.json"
    manifest_payload = {
        "tool": TOOL_NAME,
        "run_id": ctx.run_id,
        "mode": ctx.mode,
        "etcd_pod": ctx.etcd_pod,
        "started_at": ctx.started_at,
        "finished_at": _utc_now_iso(),
        "status": status,
        "read_only": True,
        "options": ctx.options,
        "reports": [{"file": r.path.name, "rows": r.rows} for r in reports],
        "warnings": summary.warnings or [],
        "error": error,
    }
    manifest_path.write_text(
        json.dumps(manifest_payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )

    return RunResult(
        run_id=ctx.run_id,
        mode=ctx.mode,
        output_dir=ctx.output_dir,
        manifest_path=manifest_path,
        summary_path=summary_path,
        output_files=tuple(r.path for r in reports) + (summary_path, manifest_path),
    )
