"""Note persistence against a host "vault".

The pipeline only needs five things from its host: read a file, list files,
list folders, create a new file and notify the user.  :class:`Vault` is that
contract; :class:`LocalVault` implements it on a plain directory tree, which
is what the CLI uses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Callable

from bookcard.config import Settings
from bookcard.errors import PersistenceError
from bookcard.render import render, sanitize_filename
from bookcard.scraper.models import ExtractedRecord

TEMPLATE_MISSING = "Template file not found. Please check your settings."
FOLDER_MISSING = "Output folder not found. Please check your settings."


# ---------------------------------------------------------------------------
# Host contract
# ---------------------------------------------------------------------------

class Vault(ABC):
    """Abstract host file store.  Paths are ``/``-separated and vault-relative."""

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """Return ``True`` if *path* names an existing file."""

    @abstractmethod
    def is_folder(self, path: str) -> bool:
        """Return ``True`` if *path* names an existing folder."""

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the text content of *path*."""

    @abstractmethod
    def list_files(self, suffix: str = ".md") -> list[str]:
        """Return every file path ending in *suffix*, sorted."""

    @abstractmethod
    def list_folders(self) -> list[str]:
        """Return every folder path (the root is ``""``), sorted."""

    @abstractmethod
    def create(self, path: str, content: str) -> None:
        """Create *path* with *content*.  Must fail if *path* already exists."""

    @abstractmethod
    def notify(self, message: str) -> None:
        """Show a transient message to the user."""


class LocalVault(Vault):
    """A :class:`Vault` backed by a directory on disk."""

    def __init__(self, root: Path, notify: Callable[[str], None] = print) -> None:
        self.root = Path(root)
        self._notify = notify

    def _resolve(self, path: str) -> Path:
        return self.root.joinpath(*PurePosixPath(path).parts) if path else self.root

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def is_file(self, path: str) -> bool:
        return bool(path) and self._resolve(path).is_file()

    def is_folder(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def read(self, path: str) -> str:
        return self._resolve(path).read_text(encoding="utf-8")

    def list_files(self, suffix: str = ".md") -> list[str]:
        return sorted(
            self._relative(p)
            for p in self.root.rglob(f"*{suffix}")
            if p.is_file() and not _is_hidden(self._relative(p))
        )

    def list_folders(self) -> list[str]:
        folders = [""]
        folders.extend(
            self._relative(p)
            for p in self.root.rglob("*")
            if p.is_dir() and not _is_hidden(self._relative(p))
        )
        return sorted(folders)

    def create(self, path: str, content: str) -> None:
        # "x" mode refuses to overwrite an existing note.
        with self._resolve(path).open("x", encoding="utf-8") as fh:
            fh.write(content)

    def notify(self, message: str) -> None:
        self._notify(message)


def _is_hidden(relative: str) -> bool:
    return any(part.startswith(".") for part in relative.split("/"))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def check_preconditions(config: Settings, vault: Vault) -> str:
    """Return the template text once template and output folder are confirmed.

    Raises:
        PersistenceError: If the template file or the output folder is missing.
    """
    if not vault.is_file(config.template_path):
        raise PersistenceError(TEMPLATE_MISSING)
    if not vault.is_folder(config.output_folder):
        raise PersistenceError(FOLDER_MISSING)
    try:
        return vault.read(config.template_path)
    except OSError as exc:
        raise PersistenceError(f"Could not read template: {exc}") from exc


def note_path(output_folder: str, title: str) -> str:
    """Vault-relative path of the note for *title* inside *output_folder*."""
    file_name = sanitize_filename(title)
    folder = output_folder.strip("/")
    return f"{folder}/{file_name}" if folder else file_name


def create_note(
    record: ExtractedRecord,
    template: str,
    config: Settings,
    vault: Vault,
) -> str:
    """Render *record* into *template*, write it to the vault and notify.

    Returns:
        The vault-relative path of the new note.

    Raises:
        PersistenceError: If a note with the same name already exists or the
            write fails.
    """
    path = note_path(config.output_folder, record.title)
    content = render(template, record)
    try:
        vault.create(path, content)
    except FileExistsError as exc:
        raise PersistenceError(f"Error creating note: {path} already exists") from exc
    except OSError as exc:
        raise PersistenceError(f"Error creating note: {exc}") from exc
    vault.notify(f"Book card created: {PurePosixPath(path).name}")
    return path
