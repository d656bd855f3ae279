"""
CLI Main - Typer-based command-line interface.

Usage:
    collegematch search "a.j" --catalog colleges.json --abbreviation
    collegematch load colleges.json
    collegematch search "bengaluru" --location
    collegematch serve
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from collegematch.config.errors import CollegeMatchError

app = typer.Typer(
    name="collegematch",
    help="CollegeMatch - Fuzzy search for college catalogs",
    add_completion=False,
)
console = Console()


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    catalog: Path | None = typer.Option(None, "--catalog", "-c", help="JSON catalog file"),
    db: Path | None = typer.Option(None, "--db", help="SQLite catalog (default from settings)"),
    fields: list[str] = typer.Option([], "--field", "-f", help="Field to search (repeatable)"),
    fuzzy: bool = typer.Option(False, "--fuzzy", help="Character-overlap matching"),
    phonetic: bool = typer.Option(False, "--phonetic", help="Sound-alike matching"),
    location: bool = typer.Option(False, "--location", help="Place-name variants and location bonus"),
    abbreviation: bool = typer.Option(False, "--abbreviation", help="A.J. / A J / AJ variants"),
    wildcard: bool = typer.Option(False, "--wildcard", help="Treat * and ? as globs"),
    synonyms: bool = typer.Option(False, "--synonyms", help="Degree and institution synonyms"),
    semantic: bool = typer.Option(False, "--semantic", help="Word-similarity matching"),
    relevance: bool = typer.Option(False, "--relevance", help="BM25 keyword relevance across the catalog"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of results"),
    strict: bool = typer.Option(False, "--strict", help="Fail on invalid queries"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Search a college catalog."""
    options = {
        "fuzzy": fuzzy,
        "phonetic": phonetic,
        "location": location,
        "abbreviation": abbreviation,
        "wildcard": wildcard,
        "synonyms": synonyms,
        "semantic": semantic,
        "relevance": relevance,
    }

    try:
        results = asyncio.run(_search_async(query, catalog, db, fields, options, strict))
    except CollegeMatchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    shown = results[:limit]

    if as_json:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": r.record.id,
                        "score": r.composite_score,
                        "strategies": [s.value for s in r.matched_strategies],
                        "matched_fields": list(r.matched_fields),
                        "fields": dict(r.record.fields),
                    }
                    for r in shown
                ],
                indent=2,
            )
        )
        return

    if not shown:
        console.print(f"[yellow]No matches for:[/yellow] {query}")
        return

    table = Table(title=f"Results for '{query}' ({len(results)} total)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Score", style="green", justify="right")
    table.add_column("College", style="cyan")
    table.add_column("Strategies")
    table.add_column("Fields", style="dim")

    for rank, result in enumerate(shown, 1):
        table.add_row(
            str(rank),
            f"{result.composite_score:.1f}",
            _display_name(result.record.fields, result.record.id),
            ", ".join(s.value for s in result.matched_strategies),
            ", ".join(result.matched_fields),
        )

    console.print(table)


async def _search_async(
    query: str,
    catalog: Path | None,
    db: Path | None,
    fields: list[str],
    options: dict[str, bool],
    strict: bool,
):
    """Load the corpus and run one search."""
    from collegematch.adapters import CollegeRepository, load_corpus_file
    from collegematch.config import get_settings
    from collegematch.domains.search import CollegeSearchEngine

    settings = get_settings()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Loading catalog...", total=None)

        if catalog is not None:
            corpus = load_corpus_file(catalog)
        else:
            repo = CollegeRepository(db or settings.db_path)
            try:
                await repo.initialize()
                corpus = await repo.list_records()
            finally:
                await repo.close()

        progress.update(task, description="Searching...")
        engine = CollegeSearchEngine.from_settings(settings)
        return await engine.search(
            query,
            corpus,
            fields=fields,
            options=options,
            strict=strict or settings.search_strict_validation,
        )


def _display_name(fields: Mapping[str, Any], record_id: int | str) -> str:
    name = fields.get("name")
    if not name:
        return str(record_id)
    place = ", ".join(str(fields[key]) for key in ("city", "state") if fields.get(key))
    return f"{name} ({place})" if place else str(name)


@app.command()
def load(
    catalog: Path = typer.Argument(..., help="JSON or JSONL catalog file"),
    db: Path | None = typer.Option(None, "--db", help="SQLite catalog (default from settings)"),
) -> None:
    """Seed the SQLite catalog from a JSON file."""
    try:
        inserted, total = asyncio.run(_load_async(catalog, db))
    except CollegeMatchError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    console.print(f"[green]Loaded {inserted} colleges[/green] [dim]({total} in catalog)[/dim]")


async def _load_async(catalog: Path, db: Path | None) -> tuple[int, int]:
    """Async catalog import."""
    from collegematch.adapters import CollegeRepository, read_catalog_rows
    from collegematch.config import get_settings

    rows = read_catalog_rows(catalog)
    repo = CollegeRepository(db or get_settings().db_path)
    try:
        await repo.initialize()
        inserted = await repo.insert_colleges(rows)
        total = await repo.count()
    finally:
        await repo.close()
    return inserted, total


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    from collegematch.config import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting CollegeMatch API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "collegematch.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from collegematch import __version__

    console.print(f"CollegeMatch v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
