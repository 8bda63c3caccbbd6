"""
Cookbook - CLI Entry Point.

Usage:
    cookbook ingest URL              Extract a recipe from a page and save it
    cookbook preview URL             Extract without saving
    cookbook batch URL [URL ...]     Ingest several URLs
    cookbook document FILE           Extract recipes from a text document
    cookbook import FILE             Import recipes (format auto-detected)
    cookbook export                  Export recipes as JSON, text or PDF
    cookbook backup / restore FILE   Full backup and restore
    cookbook scale ID SERVINGS       Show a recipe scaled to new servings
    cookbook search QUERY            Search saved recipes
    cookbook domains                 List supported sites

Recipes are kept in a local JSON file (STORE_PATH setting).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cookbook.config import settings
from cookbook.ingestion import DocumentIngestionService, WebScrapingService
from cookbook.ingestion.models import IngestionError
from cookbook.ingestion.url_ingestion import UrlIngestionService
from cookbook.models import Recipe
from cookbook.recipes import RecipeService
from cookbook.repository import JsonFileRecipeRepository
from cookbook.transfer import (
    ExportFormat,
    ExportOptions,
    ExportService,
    ImportFormat,
    ImportOptions,
    ImportResult,
    ImportService,
)
from cookbook.transfer.exporter import ingredient_line

app = typer.Typer(
    name="cookbook",
    help="Personal cookbook - collect recipes from the web, videos and documents.",
    add_completion=False,
)
console = Console()

UserOption = typer.Option(None, "--user", "-u", help="User id (defaults to DEV_USER_ID)")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    setup_logging(verbose)


def _repository() -> JsonFileRecipeRepository:
    return JsonFileRecipeRepository(settings.store_path)


def _user(user: str | None) -> str:
    return user or settings.dev_user_id


def _fail(message: str, details: dict | None = None) -> None:
    console.print(f"[red]FAIL[/red] {message}")
    for key, value in (details or {}).items():
        console.print(f"   [dim]{key}: {value}[/dim]")
    raise typer.Exit(1)


def _fail_ingestion(error: IngestionError | None) -> None:
    if error is None:
        _fail("Unknown error")
    _fail(f"[{error.type.value}] {error.message}", error.details)


def _show_recipe(recipe, notes: str | None = None) -> None:
    lines = [f"[bold green]{recipe.title}[/bold green]"]
    if recipe.description:
        lines.append(f"[dim]{recipe.description}[/dim]")
    facts = []
    if recipe.servings:
        facts.append(f"serves {recipe.servings}")
    if recipe.prep_time:
        facts.append(f"prep {recipe.prep_time} min")
    if recipe.cooking_time:
        facts.append(f"cook {recipe.cooking_time} min")
    if recipe.difficulty:
        facts.append(recipe.difficulty)
    if facts:
        lines.append(" | ".join(facts))

    lines.append("\n[bold]Ingredients[/bold]")
    lines.extend(f"  • {ingredient_line(i)}" for i in recipe.ingredients)
    lines.append("\n[bold]Instructions[/bold]")
    lines.extend(f"  {s.step_number}. {s.description}" for s in recipe.instructions)
    if notes:
        lines.append(f"\n[bold]Notes[/bold]\n{notes}")
    if recipe.source_url:
        lines.append(f"\n[dim]{recipe.source_url}[/dim]")

    console.print(Panel.fit("\n".join(lines), border_style="green"))


def _show_import(result: ImportResult) -> None:
    if not result.success and result.progress.total_items == 0:
        _fail(result.error or "Import failed")

    console.print(
        f"\n[bold]Imported {result.imported_count}[/bold], "
        f"skipped {result.skipped_count}, errors {result.error_count} "
        f"(of {result.progress.total_items})"
    )
    for conflict in result.conflicts:
        console.print(
            f"  [yellow]DUPLICATE[/yellow] {conflict.incoming_title} "
            f"({conflict.conflict_type.value}, existing {conflict.existing_recipe_id})"
        )
    for item_error in result.progress.errors:
        color = "red" if item_error.severity.value == "error" else "yellow"
        console.print(f"  [{color}]{item_error.severity.value.upper()}[/{color}] {item_error.item}: {item_error.error}")

    if not result.success:
        _fail(result.error or "Import failed")


# =============================================================================
# URL ingestion
# =============================================================================


def _url_service() -> UrlIngestionService:
    return UrlIngestionService(WebScrapingService(), RecipeService(_repository()))


@app.command()
def ingest(
    url: str = typer.Argument(..., help="Recipe page or video URL"),
    user: Optional[str] = UserOption,
    skip_validation: bool = typer.Option(False, "--skip-validation", help="Save even if validation fails"),
) -> None:
    """Extract a recipe from a URL and save it."""
    result = _url_service().ingest_from_url(url, _user(user), skip_validation=skip_validation)
    if not result.success:
        if result.validation:
            for message in result.validation.errors:
                console.print(f"  [red]-[/red] {message}")
        _fail_ingestion(result.error)

    _show_recipe(result.recipe, result.recipe.personal_notes)
    if result.placeholder:
        console.print("[yellow]WARN[/yellow] No recipe found in the video description; saved a placeholder")
    console.print(f"[green]OK[/green] Saved as {result.recipe.id}")


@app.command()
def preview(url: str = typer.Argument(..., help="Recipe page or video URL")) -> None:
    """Extract a recipe from a URL without saving it."""
    result = _url_service().preview_from_url(url)
    if not result.success:
        _fail_ingestion(result.error)

    _show_recipe(result.preview)
    for message in result.validation.errors:
        console.print(f"[red]ERROR[/red] {message}")
    for message in result.validation.warnings:
        console.print(f"[yellow]WARN[/yellow] {message}")


@app.command()
def batch(
    urls: list[str] = typer.Argument(..., help="URLs to ingest"),
    user: Optional[str] = UserOption,
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="URLs fetched at once"),
) -> None:
    """Ingest several URLs at once."""
    result = _url_service().ingest_batch(urls, _user(user), max_concurrent=concurrency)
    for item in result.results:
        if item.success:
            console.print(f"  [green]OK[/green] {item.recipe.title} [dim]{item.url}[/dim]")
        else:
            console.print(f"  [red]FAIL[/red] {item.url}: {item.error.message}")

    if not result.success:
        _fail_ingestion(result.error)
    console.print(f"\n[bold]{result.succeeded} saved[/bold], {result.failed} failed")


@app.command()
def domains() -> None:
    """List supported sites and the adapter that handles them."""
    table = Table(title="Supported sources")
    table.add_column("Adapter")
    table.add_column("Domains")
    for info in WebScrapingService().get_adapter_info():
        table.add_row(info["name"], ", ".join(info["domains"]))
    console.print(table)


# =============================================================================
# Documents
# =============================================================================


@app.command()
def document(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Text document with recipes"),
    user: Optional[str] = UserOption,
    save: bool = typer.Option(True, "--save/--no-save", help="Save extracted recipes"),
) -> None:
    """Extract recipes from a document."""
    result = DocumentIngestionService().process_document(path.read_bytes(), path.name)
    if not result.success:
        _fail_ingestion(result.error)

    service = RecipeService(_repository())
    for recipe in result.recipes:
        _show_recipe(recipe)
        if save:
            saved = service.create_recipe(_user(user), recipe)
            if not saved.success:
                console.print(f"[red]FAIL[/red] {recipe.title}: {saved.error.message}")

    console.print(
        f"\n[bold]{len(result.recipes)} recipes[/bold] found, "
        f"{result.skipped_sections} sections skipped"
    )


# =============================================================================
# Import / export
# =============================================================================


@app.command("import")
def import_(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or CSV file"),
    user: Optional[str] = UserOption,
    fmt: Optional[ImportFormat] = typer.Option(None, "--format", "-f", help="Skip format detection"),
    strict: bool = typer.Option(False, "--strict", help="Reject recipes that fail validation"),
) -> None:
    """Import recipes from a file."""
    service = ImportService(_repository())
    options = ImportOptions(validate_strict=strict)
    payload = path.read_bytes()

    if fmt is None:
        result = service.import_auto(_user(user), payload, path.name, options)
    elif fmt == ImportFormat.CSV:
        result = service.import_from_csv(_user(user), payload, options)
    elif fmt in (ImportFormat.JSON, ImportFormat.BACKUP):
        result = service.import_from_json(_user(user), payload, options)
    else:
        result = service.import_from_external_format(_user(user), payload, fmt, options)
    _show_import(result)


def _write(data: str | bytes, path: Path) -> None:
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data, encoding="utf-8")
    console.print(f"[green]OK[/green] Wrote {path}")


@app.command()
def export(
    user: Optional[str] = UserOption,
    fmt: ExportFormat = typer.Option(ExportFormat.JSON, "--format", "-f"),
    out_dir: Path = typer.Option(Path("."), "--out", "-o", file_okay=False),
    notes: bool = typer.Option(True, "--notes/--no-notes", help="Include personal notes"),
    metadata: bool = typer.Option(True, "--metadata/--no-metadata", help="Include timestamps"),
    recipe_id: Optional[list[str]] = typer.Option(None, "--id", help="Only these recipes"),
) -> None:
    """Export recipes."""
    options = ExportOptions(format=fmt, include_personal_notes=notes, include_metadata=metadata)
    result = ExportService(_repository()).export_recipes(_user(user), options, recipe_id or None)
    if not result.success:
        _fail(result.error)
    _write(result.data, out_dir / result.filename)


@app.command()
def backup(
    user: Optional[str] = UserOption,
    out_dir: Path = typer.Option(Path("."), "--out", "-o", file_okay=False),
) -> None:
    """Write a full backup of your recipes."""
    result = ExportService(_repository()).create_backup(_user(user))
    _write(result.data, out_dir / result.filename)
    console.print(f"   {result.recipe_count} recipes")


@app.command()
def restore(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Backup file"),
    user: Optional[str] = UserOption,
) -> None:
    """Restore recipes from a backup; existing recipes are skipped."""
    result = ExportService(_repository()).restore_from_backup(_user(user), path.read_bytes())
    _show_import(result)


# =============================================================================
# Saved recipes
# =============================================================================


@app.command()
def scale(
    recipe_id: str = typer.Argument(...),
    servings: int = typer.Argument(..., help="New number of servings"),
    user: Optional[str] = UserOption,
) -> None:
    """Show a recipe scaled to a new number of servings."""
    result = RecipeService(_repository()).scale_recipe(recipe_id, servings, _user(user))
    if not result.success:
        _fail(result.error.message)

    scaled = result.value
    console.print(
        f"[dim]Scaled from {scaled.original_servings} to {scaled.servings} servings "
        f"(x{scaled.scale_factor:.2f})[/dim]"
    )
    _show_recipe(scaled)


@app.command()
def search(
    query: str = typer.Argument("", help="Text to look for; empty lists everything"),
    user: Optional[str] = UserOption,
) -> None:
    """Search saved recipes."""
    recipes: list[Recipe] = RecipeService(_repository()).search_recipes(_user(user), query)
    if not recipes:
        console.print("[dim]No recipes found.[/dim]")
        return

    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Servings", justify="right")
    table.add_column("Source")
    for recipe in recipes:
        table.add_row(
            recipe.id,
            recipe.title,
            str(recipe.servings or ""),
            recipe.source_type,
        )
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from cookbook import __version__

    console.print(f"Cookbook version {__version__}")


if __name__ == "__main__":
    app()
