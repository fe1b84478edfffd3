import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
import typer
from rich.console import Console
from rich.json import JSON
from rich.logging import RichHandler
from rich.table import Table
from .class_scanner import DEFAULT_TOP, scan_image_classes
from .config import HarvesterConfig
from .errors import HarvesterError
from .export import export_filename, to_tsv, write_csv, write_json
from .fetcher import PageFetcher
from .models import ExtractionMode, ExtractionRequest, ExtractionResult, Project
from .parser import SelectorEngine
from .store import ProjectStore, generate_id


app = typer.Typer(help="Extract links, images and text from HTML with CSS selectors")
projects_app = typer.Typer(help="Manage saved extraction projects")
app.add_typer(projects_app, name="projects")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")
):
    config = HarvesterConfig.from_env()
    level = logging.DEBUG if verbose else config.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True
    )


@app.command()
def extract(
    source: str = typer.Argument(..., help="HTML file to read, or - for stdin"),
    selector: str = typer.Option("", "--selector", "-s", help="CSS selector (blank uses the mode default)"),
    mode: ExtractionMode = typer.Option(ExtractionMode.AUTO, "--mode", "-m", case_sensitive=False),
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Maximum number of records"),
    lazy_images: bool = typer.Option(
        False,
        "--lazy-images",
        help="Read data-src/srcset when src is missing or a placeholder"
    ),
    output_format: str = typer.Option("table", "--format", "-f", help="table, json, tsv or csv"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write json/csv output to this file"),
    project_name: Optional[str] = typer.Option(None, "--project", "-p", help="Save the run as a named project")
):
    """Extract records from an HTML document."""

    request = ExtractionRequest(
        html=_read_source(source),
        selector=selector,
        mode=mode,
        limit=limit,
        resolve_lazy_images=lazy_images
    )
    result = SelectorEngine().extract(request)
    _emit_result(result, output_format, output, default_name=project_name)

    if project_name:
        store = ProjectStore(HarvesterConfig.from_env().projects_file)
        project = Project(id=generate_id(), name=project_name, config=request, last_result=result)
        store.save(project)
        console.print(f"[green]Saved project '{project_name}' ({project.id})[/green]")


@app.command()
def scan(
    source: str = typer.Argument(..., help="HTML file to read, or - for stdin"),
    top: int = typer.Option(DEFAULT_TOP, "--top", "-t", min=1, help="Number of candidates to show")
):
    """Suggest image selectors from the most frequent <img> classes."""

    candidates = scan_image_classes(_read_source(source), top=top)
    if not candidates:
        console.print("[yellow]No classed images found[/yellow]")
        return

    table = Table(title="Candidate image selectors")
    table.add_column("Selector", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Type")
    table.add_column("Example", overflow="fold")
    for candidate in candidates:
        table.add_row(candidate.selector, str(candidate.count), candidate.type, candidate.example)
    console.print(table)


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL of the page to download"),
    proxy: Optional[List[str]] = typer.Option(
        None,
        "--proxy",
        help="Fallback proxy template containing {url}; repeatable"
    ),
    use_browser: bool = typer.Option(False, "--browser", "-b", help="Render the page with a headless browser"),
    wait_for: Optional[str] = typer.Option(None, "--wait-for", help="CSS selector to wait for in browser mode"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Save HTML to this file")
):
    """Download a page so it can be fed to extract or scan."""

    config = HarvesterConfig.from_env()
    fetcher = PageFetcher(
        proxies=proxy or config.proxies,
        timeout=config.timeout,
        use_browser=use_browser,
        wait_for_selector=wait_for
    )
    html = _run(fetcher.fetch(url))

    if output:
        Path(output).write_text(html, encoding="utf-8")
        console.print(f"[green]Saved {len(html)} characters to {output}[/green]")
    else:
        sys.stdout.write(html)


@app.command()
def suggest(
    source: str = typer.Argument(..., help="HTML file to read, or - for stdin"),
    description: str = typer.Argument(..., help="What to extract, e.g. 'product titles'"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="OpenAI API key")
):
    """Ask a language model for a selector matching a description."""
    from .llm import LLMSelectorInference

    config = HarvesterConfig.from_env()
    try:
        llm = LLMSelectorInference(
            api_key=api_key or config.openai_api_key,
            model=config.model,
            max_html_chars=config.max_suggestion_chars
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    selector = _run(llm.suggest_selector(_read_source(source), description))
    console.print(selector)


@projects_app.command("list")
def list_projects():
    """List saved projects, newest first."""
    projects = ProjectStore(HarvesterConfig.from_env().projects_file).list()
    if not projects:
        console.print("[yellow]No saved projects[/yellow]")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Mode")
    table.add_column("Selector")
    table.add_column("Records", justify="right")
    for project in projects:
        records = str(len(project.last_result.items)) if project.last_result else "-"
        table.add_row(project.id, project.name, project.config.mode.value, project.config.selector, records)
    console.print(table)


@projects_app.command("show")
def show_project(project_id: str = typer.Argument(...)):
    """Print a saved project as JSON."""
    project = _get_project(project_id)
    console.print(JSON(project.model_dump_json(by_alias=True, exclude={"config": {"html"}})))


@projects_app.command("run")
def run_project(
    project_id: str = typer.Argument(...),
    output_format: str = typer.Option("table", "--format", "-f", help="table, json, tsv or csv"),
    output: Optional[str] = typer.Option(None, "--output", "-o")
):
    """Re-run a saved project and store the new result."""
    store = ProjectStore(HarvesterConfig.from_env().projects_file)
    project = _get_project(project_id, store)
    result = SelectorEngine().extract(project.config)
    store.save(project.model_copy(update={"last_result": result}))
    _emit_result(result, output_format, output, default_name=project.name)


@projects_app.command("delete")
def delete_project(project_id: str = typer.Argument(...)):
    """Delete a saved project."""
    store = ProjectStore(HarvesterConfig.from_env().projects_file)
    _get_project(project_id, store)
    store.delete(project_id)
    console.print(f"[green]Deleted project {project_id}[/green]")


def _read_source(source: str) -> str:
    """Read HTML from a file path or stdin."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        console.print(f"[red]Error: file not found: {source}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8", errors="replace")


def _get_project(project_id: str, store: Optional[ProjectStore] = None) -> Project:
    store = store or ProjectStore(HarvesterConfig.from_env().projects_file)
    try:
        return store.get(project_id)
    except HarvesterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _run(coro):
    try:
        return asyncio.run(coro)
    except HarvesterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _emit_result(
    result: ExtractionResult,
    output_format: str,
    output: Optional[str],
    default_name: Optional[str] = None
):
    """Print or save a result in the requested format.

    json and csv go to `<name>_export.<format>` when a project name is known
    and no output path was given.
    """
    output_format = output_format.lower()
    if not output and default_name and output_format in ("json", "csv"):
        output = export_filename(default_name, output_format)

    if output_format == "json":
        if output:
            write_json(result.items, output)
            console.print(f"[green]Saved {len(result.items)} records to {output}[/green]")
        else:
            sys.stdout.write(json.dumps(result.model_dump(by_alias=True, exclude_none=True), indent=2) + "\n")
        return

    if output_format == "csv":
        if not output:
            console.print("[red]Error: --output or --project is required for csv[/red]")
            raise typer.Exit(1)
        write_csv(result.items, output)
        console.print(f"[green]Saved {len(result.items)} records to {output}[/green]")
        return

    if output_format == "tsv":
        sys.stdout.write(to_tsv(result.items) + "\n")
        return

    if output_format != "table":
        console.print(f"[red]Error: unknown format '{output_format}'[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{len(result.items)} of {result.total_found} matched elements")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Link", style="cyan", overflow="fold")
    table.add_column("Image", style="magenta", overflow="fold")
    for item in result.items:
        table.add_row(str(item.id), item.name or "", item.href or "", item.src or "")
    console.print(table)
    console.print(result.message)


if __name__ == "__main__":
    app()
