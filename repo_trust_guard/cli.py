"""
Command-line interface for Repo Trust Guard.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from repo_trust_guard.config import CollectorConfig, load_collector_config
from repo_trust_guard.core import (
    ADMISSION_THRESHOLD,
    RepoDataResult,
    is_admissible,
    score_repository,
)
from repo_trust_guard.report import append_record, read_urls, to_ndjson_line

# --- Typer App ---
app = typer.Typer(help="Score repositories for package registry admission.")
# Diagnostics go to stderr; stdout carries records and the summary table
console = Console(stderr=True)
report_console = Console()

# --- Helper Functions ---


def load_config(insecure: bool) -> CollectorConfig:
    """Load the collector configuration or exit when no token is available."""
    config = load_collector_config(verify_ssl=False if insecure else None)
    if not config.token:
        console.print(
            "[bold red]Error: GITHUB_TOKEN environment variable is not set.[/bold red]"
        )
        console.print(
            "Please set it to a valid GitHub personal access token with 'public_repo' scope."
        )
        raise typer.Exit(code=1)
    return config


def display_results(results: list[RepoDataResult]) -> None:
    """Display scoring results in a rich table."""
    table = Table(title="Repo Trust Guard Report")
    table.add_column("Repository", justify="left", style="cyan", no_wrap=True)
    table.add_column("NetScore", justify="center", style="magenta")
    table.add_column("Admission", justify="left")

    for result in results:
        score_color = "green" if is_admissible(result) else "red"
        admission = (
            "[green]Admitted ✓[/green]"
            if is_admissible(result)
            else f"[red]Rejected (< {ADMISSION_THRESHOLD})[/red]"
        )
        table.add_row(
            result.url,
            f"[{score_color}]{result.net_score:.2f}[/{score_color}]",
            admission,
        )

    report_console.print(table)


# --- Commands ---


@app.command()
def score(
    url: str = typer.Argument(
        ..., help="Repository URL (https://github.com/owner/repo) or npm package URL."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print pipeline stages."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", help="Disable SSL certificate verification."
    ),
):
    """Score a single repository and print its NDJSON record."""
    config = load_config(insecure)
    result = score_repository(url, config, verbose)
    if result is None:
        console.print(f"[red]No result for {url}[/red]")
        raise typer.Exit(code=1)
    typer.echo(to_ndjson_line(result))


@app.command()
def batch(
    url_file: Path = typer.Argument(
        ..., help="File with one repository or package URL per line."
    ),
    output: Path = typer.Option(
        Path("output.json"),
        "--output",
        "-o",
        help="NDJSON file the records are appended to.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print pipeline stages."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", help="Disable SSL certificate verification."
    ),
):
    """Score every URL of a file, appending one NDJSON record per scored URL."""
    if not url_file.is_file():
        console.print(f"[yellow]⚠️  URL file not found: {url_file}[/yellow]")
        raise typer.Exit(code=1)

    config = load_config(insecure)
    urls = read_urls(url_file)
    console.print(f"🔍 Scoring {len(urls)} URL(s)...")

    results: list[RepoDataResult] = []
    for url in urls:
        try:
            result = score_repository(url, config, verbose)
        except Exception as e:
            console.print(f"  [yellow]⚠️  Unexpected error for {url}: {e}[/yellow]")
            continue
        if result is None:
            console.print(f"  [dim]Skipped {url} (no result)[/dim]")
            continue
        append_record(output, result)
        results.append(result)

    if results:
        display_results(results)
    console.print(f"[green]✨ Wrote {len(results)} record(s) to {output}[/green]")


if __name__ == "__main__":
    app()
