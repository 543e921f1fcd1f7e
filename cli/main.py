"""Book Card Creator CLI, the entry-point for creating notes from URLs.

Usage:
    python cli/main.py --help

Commands:
    create    -> fetch a product / article page and write a note from the template
    extract   -> fetch and print the extracted fields without writing anything
    classify  -> show whether a URL is handled as a product or an article
    vault     -> list templates and output folders in the vault
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from bookcard.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import dataclasses
from typing import Optional

import typer

from bookcard.config import Settings, settings
from bookcard.errors import BookCardError
from bookcard.notes import LocalVault
from bookcard.scraper.classifier import classify_url, find_url_near, validate_url
from bookcard.scraper.models import SourceKind
from cli.commands.vault import vault_app

app = typer.Typer(
    name="bookcard",
    help="Create book cards and article notes from web pages.",
    no_args_is_help=True,
)
app.add_typer(vault_app, name="vault")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _config(
    template: Optional[str] = None,
    output: Optional[str] = None,
    vault_dir: Optional[Path] = None,
) -> Settings:
    """Return ``settings`` with any command-line overrides applied."""
    overrides: dict = {}
    if template is not None:
        overrides["template_path"] = template
    if output is not None:
        overrides["output_folder"] = output
    if vault_dir is not None:
        overrides["vault_dir"] = vault_dir
    return dataclasses.replace(settings, **overrides) if overrides else settings


def _resolve_url(url: Optional[str], from_file: Optional[Path], position: int) -> str:
    """Return *url*, or the URL nearest *position* inside *from_file*."""
    if url:
        return url
    if from_file is None:
        typer.echo("[create] Please enter a URL (or use --from-file).")
        raise typer.Exit(1)
    try:
        text = from_file.read_text(encoding="utf-8")
    except OSError as exc:
        typer.echo(f"[create] Could not read {from_file}: {exc}")
        raise typer.Exit(1)
    found = find_url_near(text, position)
    if found is None:
        typer.echo(f"[create] No URL found near position {position} in {from_file}.")
        raise typer.Exit(1)
    return found


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("create")
def create(
    url: Optional[str] = typer.Argument(None, help="Product or article URL."),
    from_file: Optional[Path] = typer.Option(
        None, "--from-file", help="Take the URL from this text file instead."
    ),
    position: int = typer.Option(
        0, "--position", help="Cursor offset in --from-file; the nearest URL is used."
    ),
    template: Optional[str] = typer.Option(None, "--template", help="Vault path of the template."),
    output: Optional[str] = typer.Option(None, "--output", help="Vault folder for the new note."),
    vault_dir: Optional[Path] = typer.Option(None, "--vault", help="Vault root directory."),
) -> None:
    """Fetch a page, fill the template and create a new note."""
    from bookcard.pipeline import create_card

    target = _resolve_url(url, from_file, position)
    config = _config(template, output, vault_dir)
    vault = LocalVault(config.vault_dir, notify=lambda msg: typer.echo(f"[notice] {msg}"))

    typer.echo(f"[create] {target}")
    try:
        path = asyncio.run(create_card(target, config, vault))
    except BookCardError as exc:
        typer.echo(f"[create] Error: {exc}")
        raise typer.Exit(1)
    typer.echo(f"[create] Note written to {path}")


@app.command("extract")
def extract(
    url: str = typer.Argument(..., help="Product or article URL."),
) -> None:
    """Fetch a page and print the extracted fields to stdout."""
    from bookcard.pipeline import build_record

    config = _config()
    try:
        request = validate_url(url)
        typer.echo(f"[extract] Fetching {url!r} as {request.source_kind.value} …")
        record = asyncio.run(build_record(request, config))
    except BookCardError as exc:
        typer.echo(f"[extract] Error: {exc}")
        raise typer.Exit(1)

    typer.echo(f"[extract] Title    : {record.title}")
    if record.kind is SourceKind.COMMERCE:
        typer.echo(f"[extract] Author   : {record.author}")
        typer.echo(f"[extract] Genre    : {record.category}")
        typer.echo(f"[extract] Genre URL: {record.category_url or '(none)'}")
        typer.echo("")
        typer.echo(record.description)
    else:
        typer.echo("")
        typer.echo(record.summary)


@app.command("classify")
def classify(
    url: str = typer.Argument(..., help="URL to classify."),
) -> None:
    """Print ``commerce`` or ``article`` for a URL."""
    typer.echo(classify_url(url).value)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
