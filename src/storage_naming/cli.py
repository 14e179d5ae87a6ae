from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .backends import LocalFileStorage
from .config import NamingSettings, get_settings
from .core.paths import get_target_dir
from .models import FileDescriptor
from .storage import StorageError

app = typer.Typer(help="Generate safe, unique storage paths for uploaded files.")
logger = logging.getLogger(__name__)
logging.basicConfig(level=get_settings().LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def name(
    filename: str = typer.Argument(..., help="Original name of the uploaded file"),
    target_dir: str = typer.Option("", "--target-dir", "-d", help="Directory to place the file in"),
    suffix: Optional[str] = typer.Option(None, help="Marker kept after the hash, e.g. _o"),
    max_bytes: Optional[int] = typer.Option(None, "--max-bytes", help="Filename byte limit"),
    dated: bool = typer.Option(False, "--dated", help="Append a YYYY/MM folder to the target dir"),
) -> None:
    """Print the hashed storage path for FILENAME."""

    storage = LocalFileStorage(get_settings().STORAGE_PATH, naming=_naming(max_bytes))
    directory = get_target_dir(target_dir or None) if dated else target_dir
    typer.echo(storage.get_unique_pathname(FileDescriptor(name=filename, suffix=suffix), directory))


@app.command()
def store(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to copy into storage"),
    storage_path: Optional[Path] = typer.Option(None, "--storage-path", "-s", help="Storage root"),
    suffix: Optional[str] = typer.Option(None, help="Marker kept after the hash, e.g. _o"),
) -> None:
    """Copy SOURCE into the local store and print its stored path."""

    root = storage_path or get_settings().ensure_storage_path()
    storage = LocalFileStorage(root)
    file = FileDescriptor(name=source.name, suffix=suffix, path=source)
    try:
        stored = asyncio.run(storage.save(file))
    except StorageError as exc:
        logger.error("Failed to store %s: %s", source, exc)
        raise typer.Exit(code=1) from exc
    typer.echo(stored)


def _naming(max_bytes: Optional[int]) -> NamingSettings:
    naming = get_settings().naming
    if max_bytes is None:
        return naming
    try:
        return NamingSettings(**{**naming.model_dump(), "max_filename_bytes": max_bytes})
    except ValidationError as exc:
        raise typer.BadParameter(f"--max-bytes: {exc.errors()[0]['msg']}") from exc


if __name__ == "__main__":
    app()
