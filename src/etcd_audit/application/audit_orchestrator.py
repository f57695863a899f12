"""Select and run exactly one etcd audit workflow per invocation."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from rich.console import Console

from etcd_audit.application._audit_models import (
    AuditMode,
    AuditOptions,
    ConsumerRow,
    ForensicRow,
    SummarySnapshot,
)
from etcd_audit.application.exact_size_service import (
    discover_prefix,
    measure_exact,
    resolve_resource_name,
    write_exact_report,
)
from etcd_audit.application.forensic_scanner import (
    ForensicScanner,
    write_forensic_report,
)
from etcd_audit.application.run_writer import RunResult
from etcd_audit.application.size_measurer import EstimatedByApiMeasurer
from etcd_audit.application.summary_service import (
    collect_summary,
    estimate_consumers,
    fetch_resource_counts,
    write_estimate_reports,
    write_summary_reports,
)
from etcd_audit.application.use_case_utils import run_or_render
from etcd_audit.config import EtcdAuditConfig, load_config
from etcd_audit.domain.confirmation import ConfirmationGate, Prompt
from etcd_audit.domain.fragmentation import FragmentationPolicy
from etcd_audit.domain.metrics_aggregation import top_resource_counts
from etcd_audit.infrastructure.cluster_api import ClusterApi, OcError
from etcd_audit.infrastructure.etcdctl_client import EtcdctlClient
from etcd_audit.infrastructure.metrics_client import MetricsClient, MetricsClientConfig


@dataclass(frozen=True)
class AuditDependencies:
    """External collaborators used by the workflows."""

    api: ClusterApi
    metrics_text: Callable[[], str]
    etcdctl_factory: Callable[[str], EtcdctlClient]
    prompt: Prompt
    sleep: Callable[[float], None] = time.sleep


def build_dependencies(config: EtcdAuditConfig, prompt: Prompt) -> AuditDependencies:
    """Wire real `oc`, etcdctl and metrics clients from config."""
    api = ClusterApi(binary=config.cli_binary)

    def scrape_metrics() -> str:
        with MetricsClient(
            config.metrics.url or "",
            token=config.metrics.token,
            config=MetricsClientConfig(verify_tls=config.metrics.verify_tls),
        ) as client:
            return client.fetch()

    def etcdctl_factory(pod: str) -> EtcdctlClient:
        return EtcdctlClient(
            pod,
            namespace=config.etcd.namespace,
            container=config.etcd.container,
            binary=config.cli_binary,
        )

    return AuditDependencies(
        api=api,
        metrics_text=scrape_metrics if config.has_direct_metrics else api.raw_metrics,
        etcdctl_factory=etcdctl_factory,
        prompt=prompt,
    )


def select_mode(options: AuditOptions) -> AuditMode:
    """Pick the most specific requested workflow.

    Precedence: forensic > exact > size-estimate > summary.
    """
    if options.forensic:
        return "forensic"
    if options.exact_resource:
        return "exact"
    if options.estimate_sizes:
        return "size-estimate"
    return "summary"


def _connect(
    deps: AuditDependencies, config: EtcdAuditConfig, console: Console
) -> EtcdctlClient:
    if not deps.api.is_logged_in():
        raise RuntimeError(
            f"Not logged in. Run '{config.cli_binary} login' first."
        )
    try:
        pod = deps.api.running_pod_name(
            config.etcd.namespace, config.etcd.pod_selector
        )
    except OcError as exc:
        raise RuntimeError(f"Cannot list etcd pods: {exc}") from exc
    if pod is None:
        raise RuntimeError(
            f"No running etcd pods found in {config.etcd.namespace} "
            f"(selector {config.etcd.pod_selector}). Cannot proceed."
        )
    console.print(f"Using etcd member pod [yellow]{pod}[/yellow]")
    return deps.etcdctl_factory(pod)


def _declined(console: Console) -> None:
    console.print("Aborted.")
    return None


def _summary_findings(
    snapshot: SummarySnapshot, policy: FragmentationPolicy
) -> tuple[list[str], list[str]]:
    findings = [f"Resource kinds reported by metrics: {snapshot.total_kinds}."]
    if snapshot.consumers:
        top = snapshot.consumers[0].resource
        findings.append(f"Largest consumer by count: `{top.kind}` ({top.count}).")
    warnings: list[str] = []
    if snapshot.operator is not None and not snapshot.operator.healthy:
        warnings.append("etcd cluster operator is not healthy.")
    for status in snapshot.endpoints:
        if policy.is_critical_size(status):
            warnings.append(
                f"{status.host}: database size {status.physical_size_mb} MB."
            )
        if policy.is_high_fragmentation(status):
            warnings.append(
                f"{status.host}: fragmentation {status.fragmentation_pct}%."
            )
    if snapshot.slow_request_count:
        warnings.append(f"{snapshot.slow_request_count} slow apply requests in logs.")
    return findings, warnings


def _run_summary(
    options: AuditOptions,
    config: EtcdAuditConfig,
    deps: AuditDependencies,
    etcdctl: EtcdctlClient,
) -> RunResult | None:
    counts = fetch_resource_counts(deps.metrics_text, config.metrics.series)
    snapshot = collect_summary(
        deps.api,
        etcdctl,
        config.etcd,
        counts,
        None if options.show_all else options.limit,
    )
    policy = FragmentationPolicy(
        high_fragmentation_pct=config.thresholds.fragmentation_high_pct,
        critical_size_mb=config.thresholds.db_size_critical_mb,
    )
    findings, warnings = _summary_findings(snapshot, policy)
    return run_or_render(
        title="etcd Audit Summary",
        mode="summary",
        etcd_pod=etcdctl.pod,
        options=options.to_inputs(),
        reports_root=options.reports_root,
        runner=lambda data_dir: write_summary_reports(
            snapshot, config.thresholds, data_dir
        ),
        findings=findings,
        warnings=warnings or None,
    )


def _run_size_estimate(
    options: AuditOptions,
    config: EtcdAuditConfig,
    deps: AuditDependencies,
    pod: str,
    gate: ConfirmationGate,
    console: Console,
) -> RunResult | None:
    console.print(
        "[red]Calculating sizes via API generates CPU load on the API server.[/red]"
    )
    if not gate.confirm("Are you sure?"):
        return _declined(console)
    counts = fetch_resource_counts(deps.metrics_text, config.metrics.series)
    if options.show_all:
        total_objects = sum(item.count for item in counts)
        console.print(
            f"[red]Estimating ALL {len(counts)} resource kinds reads "
            f"{total_objects} objects through the API server.[/red]"
        )
        if not gate.confirm("Estimate every resource kind?"):
            return _declined(console)
    shown = top_resource_counts(counts, None if options.show_all else options.limit)

    def progress(index: int, total: int, row: ConsumerRow) -> None:
        estimate = row.estimate.display if row.estimate else "?"
        console.print(f"[dim][{index}/{total}] {row.resource.kind}: {estimate}[/dim]")

    consumers = estimate_consumers(
        shown, EstimatedByApiMeasurer(deps.api), on_row=progress
    )
    largest = max(
        consumers,
        key=lambda row: row.estimate.byte_count if row.estimate else 0,
        default=None,
    )
    findings = [f"Estimated JSON size for {len(consumers)} resource kinds."]
    if largest is not None and largest.estimate is not None:
        findings.append(
            f"Largest JSON footprint: `{largest.resource.kind}` "
            f"({largest.estimate.display})."
        )
    return run_or_render(
        title="etcd Storage Consumers (Estimated JSON Size)",
        mode="size-estimate",
        etcd_pod=pod,
        options=options.to_inputs(),
        reports_root=options.reports_root,
        runner=lambda data_dir: write_estimate_reports(
            consumers, len(counts), config.thresholds, data_dir
        ),
        findings=findings,
        warnings=[
            f"JSON size is approx. {EstimatedByApiMeasurer.inflation_factor}x "
            "larger than binary etcd storage."
        ],
    )


def _run_exact(
    options: AuditOptions,
    deps: AuditDependencies,
    etcdctl: EtcdctlClient,
    gate: ConfirmationGate,
    console: Console,
) -> RunResult | None:
    requested = options.exact_resource or ""
    console.print(f"[bold]Exact etcd size calculation for '{requested}'[/bold]")
    resource_kind = resolve_resource_name(deps.api, requested)
    console.print("[yellow]Scanning etcd keys to discover storage path...[/yellow]")
    prefix = discover_prefix(etcdctl, resource_kind)
    console.print(f"Identified etcd path: [green]{prefix.prefix}[/green]")
    console.print("[bold red]!!! CRITICAL WARNING !!![/bold red]")
    console.print(
        f"You are about to perform a full raw data dump of '{prefix.prefix}'."
    )
    if not gate.confirm("Proceed with exact calculation?"):
        return _declined(console)

    console.print("Calculating...")
    result = measure_exact(etcdctl, requested, prefix)
    return run_or_render(
        title=f"Exact etcd Size: {requested}",
        mode="exact-size",
        etcd_pod=etcdctl.pod,
        options=options.to_inputs(),
        reports_root=options.reports_root,
        runner=lambda data_dir: write_exact_report(result, data_dir),
        findings=[
            f"`{result.prefix}` holds {result.measurement.size_mb:.2f} MB "
            "of raw etcd data.",
        ],
    )


def _run_forensic(
    options: AuditOptions,
    config: EtcdAuditConfig,
    deps: AuditDependencies,
    etcdctl: EtcdctlClient,
    gate: ConfirmationGate,
    console: Console,
    cancel_event: threading.Event | None,
) -> RunResult | None:
    scanner = ForensicScanner(
        etcdctl,
        throttle_seconds=options.throttle_seconds,
        sleep=deps.sleep,
        cancel_event=cancel_event,
    )

    def progress(index: int, total: int, row: ForensicRow) -> None:
        console.print(
            f"[dim][{index}/{total}] {row.resource_kind}: {row.api_count} objects, "
            f"{row.key_count_display} keys, {row.size_display}[/dim]"
        )

    result = scanner.scan(
        lambda: fetch_resource_counts(deps.metrics_text, config.metrics.series),
        gate,
        on_row=progress,
    )
    if result is None:
        return _declined(console)

    warnings: list[str] = []
    if result.unresolved:
        warnings.append(f"No etcd path found for: {', '.join(result.unresolved)}.")
    if result.cancelled:
        warnings.append("Scan was cancelled; results are partial.")
    return run_or_render(
        title="etcd Forensic Scan",
        mode="forensic-scan",
        etcd_pod=etcdctl.pod,
        options=options.to_inputs(),
        reports_root=options.reports_root,
        runner=lambda data_dir: write_forensic_report(result, data_dir),
        findings=[
            f"Scanned {len(result.rows)} resource kinds against "
            f"{result.total_keys} etcd keys.",
        ],
        warnings=warnings or None,
    )


def execute_audit(
    options: AuditOptions,
    *,
    config: EtcdAuditConfig | None = None,
    deps: AuditDependencies | None = None,
    console: Console | None = None,
    cancel_event: threading.Event | None = None,
) -> RunResult | None:
    """Run the selected workflow.

    Returns None in stdout mode or when the operator declines a
    confirmation.
    """
    if options.limit < 1:
        raise ValueError(f"--number must be >= 1, got {options.limit}")
    if options.throttle_seconds < 0:
        raise ValueError(f"--throttle must be >= 0, got {options.throttle_seconds}")

    config = config or load_config()
    console = console or Console(stderr=True)
    deps = deps or build_dependencies(config, console.input)
    gate = ConfirmationGate(deps.prompt, assume_yes=options.assume_yes)
    mode = select_mode(options)

    console.print("[bold blue]>>> Starting etcd audit...[/bold blue]")
    etcdctl = _connect(deps, config, console)

    if mode == "forensic":
        return _run_forensic(
            options, config, deps, etcdctl, gate, console, cancel_event
        )
    if mode == "exact":
        return _run_exact(options, deps, etcdctl, gate, console)
    if mode == "size-estimate":
        return _run_size_estimate(options, config, deps, etcdctl.pod, gate, console)
    return _run_summary(options, config, deps, etcdctl)
