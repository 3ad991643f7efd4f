from __future__ import annotations

from typing import Any, Dict, List

from rich import box
from rich.console import Console
from rich.table import Table

from ..analyzer import AnalysisRun

_COUNTER_COLUMNS = (
    ("Scripts", "script"),
    ("Pages", "page"),
    ("Thumbnails", "thumbnail"),
    ("Rules", "rule-document"),
    ("Bindings", "binding-document"),
)


def build_summary_table(run: AnalysisRun) -> Table:
    table = Table(title="Bundles", box=box.ROUNDED)
    table.add_column("Label", style="green")
    for title, _ in _COUNTER_COLUMNS:
        table.add_column(title, justify="right")
    table.add_column("Issues", justify="right", style="red")

    for bundle in run.bundles:
        counts = [str(bundle.summary.get(key, 0)) for _, key in _COUNTER_COLUMNS]
        table.add_row(bundle.label or ".", *counts, str(len(bundle.issues)))
    return table


def render_run(run: AnalysisRun, console: Console | None = None) -> None:
    console = console or Console()
    if run.bundles:
        console.print(build_summary_table(run))
    else:
        console.print("[dim]No bundles were scanned.[/dim]")

    issues = run.issues + [issue for bundle in run.bundles for issue in bundle.issues]
    if issues:
        table = Table(title="Issues", box=box.ROUNDED)
        table.add_column("Path", style="yellow")
        table.add_column("Code", style="cyan")
        table.add_column("Message", style="white")
        for issue in issues:
            table.add_row(issue.path, issue.code, issue.message)
        console.print(table)

    console.print(f"Analysis complete. Results written to: {run.log_path}")
    if run.report_path is not None:
        console.print(f"HTML report generated at: {run.report_path}")
    console.print(f"Found files copied to: {run.result_dir}")


def run_to_payload(run: AnalysisRun) -> Dict[str, Any]:
    bundles: List[Dict[str, Any]] = []
    for bundle in run.bundles:
        bundles.append(
            {
                "label": bundle.label,
                "root": str(bundle.root),
                "summary": dict(bundle.summary),
                "placed": [str(item.destination) for item in bundle.placed],
                "issues": [
                    {"path": issue.path, "code": issue.code, "message": issue.message}
                    for issue in bundle.issues
                ],
            }
        )
    return {
        "result_dir": str(run.result_dir),
        "log_path": str(run.log_path),
        "report_path": str(run.report_path) if run.report_path else None,
        "files_placed": run.files_placed,
        "bundles": bundles,
        "issues": [
            {"path": issue.path, "code": issue.code, "message": issue.message}
            for issue in run.issues
        ],
    }
