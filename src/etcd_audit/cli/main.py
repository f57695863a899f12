"""CLI entrypoint for etcd audit tooling."""

import signal
import threading
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path
from types import FrameType

import typer
from rich.console import Console

from etcd_audit.application import AuditOptions, execute_audit
from etcd_audit.config import load_config

app = typer.Typer(
    name="etcd-audit",
    help="OpenShift etcd storage audit toolkit",
    no_args_is_help=True,
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


def _resolve_version() -> str:
    """Return installed package version or local fallback."""
    try:
        return package_version("etcd-audit")
    except PackageNotFoundError:
        return "0.1.0"


@app.callback()
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
    ),
) -> None:
    """Handle global CLI options."""
    if version:
        console.print(f"etcd-audit {_resolve_version()}")
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=0)


def _handle_error(exc: Exception) -> None:
    """Convert domain exceptions to CLI exit codes."""
    if isinstance(exc, ValueError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    if isinstance(exc, RuntimeError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    raise exc


def _install_cancel_handler(event: threading.Event) -> None:
    """First Ctrl-C stops the forensic scan after the current resource."""

    def _handler(signum: int, frame: FrameType | None) -> None:
        if event.is_set():
            raise KeyboardInterrupt
        event.set()
        console.print(
            "[yellow]Cancelling after the current resource "
            "(Ctrl-C again to abort)...[/yellow]"
        )

    signal.signal(signal.SIGINT, _handler)


@app.command("audit")
def audit_command(
    number: int | None = typer.Option(
        None,
        "--number",
        "-n",
        help="Show top <number> storage consumers (default: 15).",
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show ALL storage consumers.",
    ),
    size: bool = typer.Option(
        False,
        "--size",
        "-s",
        help=(
            "Estimate JSON size via the API server. "
            "JSON is approx. 3x larger than binary etcd storage."
        ),
    ),
    exact: str | None = typer.Option(
        None,
        "--exact",
        "-e",
        help="Calculate EXACT etcd size for ONE resource. High I/O load on etcd!",
    ),
    forensic: bool = typer.Option(
        False,
        "--forensic",
        "-f",
        help=(
            "Exact etcd size for EVERY resource kind, throttled. "
            "Always asks for a typed confirmation."
        ),
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip y/N confirmations (never skips the forensic confirmation).",
    ),
    throttle: float | None = typer.Option(
        None,
        "--throttle",
        help="Seconds to pause between forensic measurements (default: 1).",
    ),
    report: str | None = typer.Option(
        None,
        "--report",
        "-r",
        help=(
            "Persist report files under this directory. "
            "If omitted, prints stdout preview only."
        ),
    ),
    env_file: Path = typer.Option(
        Path(".env"),
        "--env-file",
        help="Optional .env file with ETCD_AUDIT_* settings.",
    ),
) -> None:
    """Audit etcd health, size, fragmentation and object distribution.

    Runs one workflow: --forensic, else --exact, else --size, else summary.
    """
    try:
        config = load_config(env_file)
        options = AuditOptions(
            limit=config.default_limit if number is None else number,
            show_all=show_all,
            estimate_sizes=size,
            exact_resource=exact,
            forensic=forensic,
            assume_yes=yes,
            throttle_seconds=config.throttle_seconds if throttle is None else throttle,
            reports_root=report,
        )
        cancel_event = threading.Event()
        if forensic:
            _install_cancel_handler(cancel_event)
        run = execute_audit(options, config=config, cancel_event=cancel_event)
        if run is not None:
            console.print(f"[green]Run:[/green] {run.output_dir}")
    except (ValueError, RuntimeError) as exc:  # pragma: no cover
        _handle_error(exc)


def main() -> None:
    """Project entrypoint for `etcd-audit` script."""
    app()


if __name__ == "__main__":
    main()
