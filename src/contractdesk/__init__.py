"""contractdesk CLI - offline contract analysis and the ingestion API server"""

__version__ = "0.1.0"

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from contractdesk.core.config import load_pipeline_config
from contractdesk.models.analysis import AnalysisResult
from contractdesk.models.document import SourceDocument
from contractdesk.services.factory import ContractIngestionServiceFactory
from contractdesk.utils.settings.factory import settings_factory

# Initialize Typer app and Rich console
app = typer.Typer(
    name="contractdesk",
    help="Contract document analysis and CRM ingestion",
    add_completion=False
)
console = Console()


def configure_logging(level: str) -> None:
    """Route loguru to stderr at ``level``"""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def display_analysis(analysis: AnalysisResult) -> None:
    """Render classification, fields and warnings"""
    classification = analysis.classification
    console.print(Panel(
        f"[bold]{classification.type}[/bold] (confidence {classification.confidence:.2f})\n"
        f"Monetary values: {'excluded' if classification.exclude_monetary else 'included'}\n"
        f"Overrides: {', '.join(classification.applied_overrides) or 'none'}\n"
        f"Extraction method: {analysis.extraction_method}",
        title=analysis.file_name,
        box=box.ROUNDED,
        border_style="blue",
    ))

    fields = analysis.fields
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("Field")
    table.add_column("Value")
    table.add_column("Confidence", justify="right")
    table.add_column("Source", style="dim")
    for name, value in fields.model_dump(exclude={"confidence", "warnings", "sources", "overall_confidence"}).items():
        if value in (None, [], False):
            continue
        confidence = fields.confidence.get(name)
        table.add_row(
            name,
            ", ".join(value) if isinstance(value, list) else str(value),
            f"{confidence:.2f}" if confidence is not None else "",
            fields.sources.get(name, ""),
        )
    console.print(table)
    console.print(f"Overall confidence: [green]{analysis.overall_confidence:.2f}[/green]")

    for warning in fields.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")


@app.callback()
def _main(
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
) -> None:
    configure_logging(log_level)


@app.command()
def analyze(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Contract document to analyze"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON pipeline configuration"),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis output as JSON"),
) -> None:
    """
    Analyze a contract document offline (no CRM lookups)
    """
    config = load_pipeline_config(config_path)
    service = ContractIngestionServiceFactory.create_offline(config)
    document = SourceDocument.from_path(file)

    with console.status(f"[cyan]Analyzing {file.name}...[/cyan]"):
        result = asyncio.run(service.analyze_document(document))

    if result.is_err():
        error = result.unwrap_err()
        console.print(f"[red]Analysis failed: {error}[/red]")
        raise typer.Exit(1)

    analysis = result.unwrap()
    if as_json:
        console.print_json(json.dumps(analysis.to_output(), default=str))
    else:
        display_analysis(analysis)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: APP_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default: APP_PORT)"),
) -> None:
    """Run the HTTP API"""
    import uvicorn
    app_settings = settings_factory.create_app_settings()
    uvicorn.run("contractdesk.api.main:app", host=host or app_settings.host, port=port or app_settings.port)


@app.command()
def version() -> None:
    """Show contractdesk version"""
    console.print(f"[bold blue]contractdesk[/bold blue] version [green]{__version__}[/green]")


def main() -> None:
    """Entry point for the CLI application"""
    app()


if __name__ == "__main__":
    main()
