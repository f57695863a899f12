"""Shared helpers for use-case stdout mode and run finalization."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Any

from etcd_audit.application.run_writer import (
    AuditSummary,
    RunContext,
    RunResult,
    create_run,
    finalize_run,
    list_output_files,
)
from etcd_audit.application.stdout_renderer import render_stdout_report


def render_stdout_with_tempdir(
    *,
    title: str,
    temp_prefix: str,
    runner: Callable[[str], Any],
) -> None:
    """Execute runner in temporary directory and render artifacts to stdout."""
    with TemporaryDirectory(prefix=temp_prefix) as tmp_dir:
        buffer = StringIO()
        with redirect_stdout(buffer):
            runner(tmp_dir)
        render_stdout_report(
            title=title,
            captured_stdout=buffer.getvalue(),
            output_files=list_output_files(Path(tmp_dir)),
        )


def finalize_success_run(ctx: RunContext, *, summary: AuditSummary) -> RunResult:
    """Finalize a completed audit run."""
    return finalize_run(ctx, status="success", summary=summary)


def run_or_render(
    *,
    title: str,
    mode: str,
    etcd_pod: str,
    options: dict[str, Any],
    reports_root: str | None,
    runner: Callable[[str], Any],
    findings: list[str] | None = None,
    warnings: list[str] | None = None,
) -> RunResult | None:
    """Render to stdout when reports_root is None, else persist a run."""
    if reports_root is None:
        render_stdout_with_tempdir(
            title=title,
            temp_prefix=f"etcd_audit_{mode.replace('-', '_')}_",
            runner=runner,
        )
        return None

    ctx = create_run(
        mode, etcd_pod=etcd_pod, options=options, reports_root=reports_root
    )
    runner(str(ctx.output_dir))
    return finalize_success_run(
        ctx,
        summary=AuditSummary(title=title, findings=findings, warnings=warnings),
    )
