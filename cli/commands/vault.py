"""Vault commands for finding templates and output folders."""

from pathlib import Path
from typing import Optional

import typer

from bookcard.config import settings
from bookcard.notes import LocalVault
from bookcard.render import TEMPLATE_FIELDS

vault_app = typer.Typer(help="Inspect templates and folders in the vault.")


def _vault(root: Optional[Path]) -> LocalVault:
    return LocalVault(root if root is not None else settings.vault_dir, notify=typer.echo)


@vault_app.command("templates")
def vault_templates(
    root: Optional[Path] = typer.Option(None, "--vault", help="Vault root directory."),
) -> None:
    """List markdown files that can be used as a template."""
    files = _vault(root).list_files()
    if not files:
        typer.echo("No markdown files found.")
        return
    for path in files:
        marker = "*" if path == settings.template_path else " "
        typer.echo(f"{marker} {path}")


@vault_app.command("folders")
def vault_folders(
    root: Optional[Path] = typer.Option(None, "--vault", help="Vault root directory."),
) -> None:
    """List folders that can receive new notes."""
    for path in _vault(root).list_folders():
        marker = "*" if path == settings.output_folder.strip("/") else " "
        typer.echo(f"{marker} {path or '/'}")


@vault_app.command("fields")
def vault_fields() -> None:
    """Show the placeholders a template can use."""
    for namespace, fields in TEMPLATE_FIELDS.items():
        typer.echo(f"{namespace}:")
        for field in fields:
            typer.echo(f"  {{{{{namespace}:{field}}}}}")
