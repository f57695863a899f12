"""Render temporary report artifacts to stdout using rich."""

import csv
from collections.abc import Iterable
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

_MAX_PREVIEW_ROWS = 200

# Columns whose values decide the row style.
_STYLE_COLUMNS = ("count_severity", "size_severity")
_FLAG_COLUMNS = ("high_fragmentation", "critical_size")
_SEVERITY_STYLES = {"critical": "red", "warning": "yellow"}


def _is_numeric_column(values: Iterable[str]) -> bool:
    seen = False
    for raw in values:
        value = raw.strip()
        if not value:
            continue
        seen = True
        try:
            float(value.replace("%", ""))
        except ValueError:
            return False
    return seen


def _row_style(headers: list[str], row: list[str]) -> str | None:
    cells = dict(zip(headers, row, strict=False))
    styles = [_SEVERITY_STYLES.get(cells.get(col, "")) for col in _STYLE_COLUMNS]
    if any(cells.get(col) == "True" for col in _FLAG_COLUMNS):
        styles.append("red")
    if cells.get("etcd_keys") == "?" or cells.get("error"):
        styles.append("yellow")
    if "red" in styles:
        return "red"
    if "yellow" in styles:
        return "yellow"
    return None


def _render_csv(console: Console, file_path: Path) -> None:
    with file_path.open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))

    if not rows:
        console.print(f"[yellow]{file_path.name} is empty[/yellow]")
        return

    headers, body = rows[0], rows[1:]
    visible = [
        idx
        for idx, header in enumerate(headers)
        if header not in _STYLE_COLUMNS + _FLAG_COLUMNS
    ]
    table = Table(title=file_path.name, expand=True, box=box.SIMPLE_HEAVY)
    for idx in visible:
        column = [row[idx] if idx < len(row) else "" for row in body]
        justify = "right" if _is_numeric_column(column) else "left"
        table.add_column(headers[idx], overflow="fold", justify=justify)

    for row in body[:_MAX_PREVIEW_ROWS]:
        padded = row + [""] * (len(headers) - len(row))
        table.add_row(
            *(padded[idx] for idx in visible), style=_row_style(headers, padded)
        )

    console.print(table)
    if not body:
        console.print("[dim]No rows.[/dim]")
    if len(body) > _MAX_PREVIEW_ROWS:
        console.print(
            f"[dim]Showing first {_MAX_PREVIEW_ROWS} of {len(body)} rows.[/dim]"
        )


def _render_text_like(console: Console, file_path: Path) -> None:
    text = file_path.read_text(encoding="utf-8")
    lexer = "json" if file_path.suffix == ".json" else "markdown"
    console.print(
        Panel(
            Syntax(text, lexer=lexer, line_numbers=False, word_wrap=True),
            title=file_path.name,
        )
    )


def render_stdout_report(
    *,
    title: str,
    captured_stdout: str,
    output_files: tuple[Path, ...],
    console: Console | None = None,
) -> None:
    """Render execution log and artifact previews."""
    console = console or Console()
    console.print(f"[bold cyan]{title}[/bold cyan]")

    if captured_stdout.strip():
        console.print(
            Panel(captured_stdout.strip(), title="Execution Log", border_style="blue")
        )

    if not output_files:
        console.print("[dim]No output files were generated.[/dim]")
        return

    for file_path in output_files:
        suffix = file_path.suffix.lower()
        if suffix == ".csv":
            _render_csv(console, file_path)
        elif suffix in {".md", ".txt", ".json"}:
            _render_text_like(console, file_path)
        else:
            console.print(f"[dim]Generated file: {file_path.name}[/dim]")
