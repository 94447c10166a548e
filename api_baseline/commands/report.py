"""Evidence report commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from api_baseline.config import get_settings
from api_baseline.errors import ReportError
from api_baseline.loader import list_reports, load_report, validate_report
from api_baseline.renderer import render_evidence_summary

app = typer.Typer(help="Inspect recorded evidence reports")
console = Console()


@app.command("list")
def list_report_files(
    reports_dir: Path = typer.Option(
        None, "--dir", "-d", help="Reports directory (default: settings reports_dir)"
    ),
):
    """List recorded evidence reports."""
    reports_dir = reports_dir or get_settings().reports_dir
    paths = list_reports(reports_dir)

    if not paths:
        console.print(f"No reports found in {reports_dir}", style="yellow", markup=False)
        return

    table = Table(title="Evidence Reports")
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Timestamp")
    table.add_column("Environment")
    table.add_column("Tests", justify="right")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("API Calls", justify="right")

    for path in paths:
        try:
            report = load_report(path)
        except ReportError:
            table.add_row(Text(path.name), "[red]invalid[/red]", "", "", "", "", "")
            continue

        meta = report.metadata
        table.add_row(
            Text(path.name),
            Text(meta.timestamp),
            Text(meta.environment),
            str(meta.total_tests),
            str(meta.passed_tests),
            str(meta.failed_tests),
            str(report.total_api_calls),
        )

    console.print(table)


@app.command("summary")
def show_summary(
    report: Path = typer.Argument(
        None, help="Report file (default: <reports-dir>/baseline-latest.json)"
    ),
    top: int = typer.Option(None, "--top", "-n", help="Number of top endpoints to show"),
):
    """Show status code distribution and top endpoints for a report."""
    settings = get_settings()
    path = report or settings.latest_report_path

    try:
        evidence = load_report(path)
    except ReportError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(e.exit_code)

    if top is None:
        top = settings.top_endpoints
    print(render_evidence_summary(evidence, top=top))


@app.command("validate")
def validate_report_file(
    report: Path = typer.Argument(..., help="Report file to validate"),
):
    """Validate the structure of a report file."""
    errors = validate_report(report)

    if errors:
        console.print(f"[red]Validation failed with {len(errors)} error(s):[/red]")
        for error in errors:
            console.print(f"  - {error}", markup=False)
        raise typer.Exit(1)

    console.print(f"Report file is valid: {report}", style="green", markup=False)
