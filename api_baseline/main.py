"""API Baseline CLI - Main entry point."""

from pathlib import Path

import typer
from rich.console import Console

from api_baseline.commands import compare, report
from api_baseline.config import PROJECT_FILE, configure_logging, get_settings

app = typer.Typer(
    name="api-baseline",
    help="API baseline CLI - Record, compare, and gate API behavior across deploys",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

# Add commands
app.command("compare")(compare.compare_baselines)
app.add_typer(report.app, name="report", help="Inspect recorded evidence reports")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Record, compare, and gate API behavior across deploys."""
    configure_logging(verbose)


@app.command()
def version():
    """Show version information."""
    from api_baseline import __version__

    console.print(f"api-baseline version {__version__}")


@app.command()
def init(
    path: str = typer.Argument(".", help="Directory to initialize"),
):
    """Initialize API baseline tracking in a directory."""
    settings = get_settings()
    target = Path(path)
    config_file = target / PROJECT_FILE
    reports_dir = target / settings.reports_dir

    if config_file.exists():
        console.print(
            f"Directory already initialized: {config_file}", style="yellow", markup=False
        )
        return

    reports_dir.mkdir(parents=True, exist_ok=True)
    config_file.write_text(
        f"""\
# API baseline settings
# Environment variables (API_BASELINE_*) override these values.

reports_dir: {settings.reports_dir.as_posix()}
latest_report_name: {settings.latest_report_name}
comparisons_subdir: {settings.comparisons_subdir}

environment: {settings.environment}

top_endpoints: {settings.top_endpoints}
log_level: {settings.log_level}
"""
    )

    console.print(f"Initialized API baseline tracking in {target}", style="green", markup=False)
    console.print(f"  Created: {reports_dir}/", markup=False)
    console.print(f"  Created: {config_file}", markup=False)
    console.print("\n[dim]Next steps:[/dim]")
    console.print("  1. Record a run with EvidenceRecorder before deploying")
    console.print("  2. Record again after deploying")
    console.print("  3. Run: api-baseline compare <before.json> <after.json>")


if __name__ == "__main__":
    app()
