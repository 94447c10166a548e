"""Compare baseline reports command."""

from enum import Enum
from pathlib import Path

import typer
from rich.console import Console

from api_baseline.clock import file_timestamp
from api_baseline.comparator import compare_reports
from api_baseline.config import configure_logging, get_settings
from api_baseline.errors import MalformedReportError, NotFoundError
from api_baseline.loader import list_reports, load_report
from api_baseline.renderer import render_markdown, render_text
from api_baseline.types import ComparisonResult, EvidenceReport

app = typer.Typer(help="Compare API baseline reports", add_completion=False)
console = Console()


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"


@app.command("compare", context_settings={"help_option_names": ["-h", "--help"]})
def compare_baselines(
    baseline: Path = typer.Argument(
        None, help="Baseline report (default: <reports-dir>/baseline-latest.json)"
    ),
    current: Path = typer.Argument(
        None, help="Current report (default: <reports-dir>/baseline-latest.json)"
    ),
    output_dir: Path = typer.Option(
        None, "--output-dir", "-d", help="Where to save results (default: <reports-dir>/comparisons)"
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TEXT, "--output", "-o", help="Output format: text, json, markdown"
    ),
    save: bool = typer.Option(True, "--save/--no-save", help="Write JSON and text results"),
    fail_on_warning: bool = typer.Option(
        False, "--fail-on-warning", "-w", help="Exit 1 if warnings are found"
    ),
):
    """Compare a baseline report with a current report.

    Exits 1 if any critical difference is found or a report is missing.

    Examples:
        # Compare a pre-deploy baseline with the latest run
        api-baseline compare api-baseline-reports/baseline-before-deploy.json

        # Compare two specific reports
        api-baseline compare before.json after.json --no-save
    """
    configure_logging()
    settings = get_settings()

    baseline_path = (baseline or settings.latest_report_path).resolve()
    current_path = (current or settings.latest_report_path).resolve()

    baseline_report = _load_or_exit(baseline_path, "Baseline", settings.reports_dir)
    current_report = _load_or_exit(current_path, "Current", None)

    if output == OutputFormat.TEXT:
        console.print("[bold]Starting API baseline comparison...[/bold]")
        console.print(f"  Baseline: {baseline_path}", markup=False, highlight=False)
        console.print(f"  Current: {current_path}\n", markup=False, highlight=False)

    result = compare_reports(baseline_report, current_report)
    text_report = render_text(result)

    saved: tuple[Path, Path] | None = None
    if save:
        saved = _save_results(result, text_report, output_dir or settings.comparisons_dir)

    if output == OutputFormat.JSON:
        print(result.to_json())
    elif output == OutputFormat.MARKDOWN:
        print(render_markdown(result))
    else:
        print(text_report)
        if saved:
            console.print(f"Detailed comparison: {saved[0]}", style="dim", markup=False)
            console.print(f"Text report: {saved[1]}", style="dim", markup=False)

    _exit_for(result, fail_on_warning=fail_on_warning, quiet=output != OutputFormat.TEXT)


def _load_or_exit(path: Path, label: str, reports_dir: Path | None) -> EvidenceReport:
    """Load a report, turning load errors into a CLI exit."""
    try:
        return load_report(path)
    except NotFoundError as e:
        console.print(f"{label} file not found: {e.path}", style="red", markup=False)
        if reports_dir is not None:
            available = list_reports(reports_dir)
            if available:
                console.print("\nAvailable baseline files:")
                for report_path in available:
                    console.print(f"  - {report_path}", markup=False)
        raise typer.Exit(e.exit_code)
    except MalformedReportError as e:
        console.print(f"{label} report is invalid: {e.path}", style="red", markup=False)
        for error in e.errors:
            console.print(f"  - {error}", markup=False)
        raise typer.Exit(e.exit_code)


def _save_results(
    result: ComparisonResult, text_report: str, output_dir: Path
) -> tuple[Path, Path]:
    """Write the JSON result and the text report."""
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = file_timestamp()
    json_path = output_dir / f"comparison-{stamp}.json"
    text_path = output_dir / f"comparison-{stamp}.txt"
    json_path.write_text(result.to_json(), encoding="utf-8")
    text_path.write_text(text_report, encoding="utf-8")
    return json_path, text_path


def _exit_for(result: ComparisonResult, fail_on_warning: bool, quiet: bool) -> None:
    if result.has_critical:
        if not quiet:
            console.print("\n[red]Critical differences detected![/red]")
        raise typer.Exit(1)

    if result.has_warnings:
        if not quiet:
            console.print("\n[yellow]Warnings detected, but no critical issues.[/yellow]")
        if fail_on_warning:
            raise typer.Exit(1)
        return

    if not quiet:
        console.print("\n[green]All checks passed![/green]")


def main() -> None:
    """Entry point for the standalone ``compare-baselines`` script."""
    app()
