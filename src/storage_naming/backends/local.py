from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional

from fastapi.staticfiles import StaticFiles

from ..config import NamingSettings
from ..core.paths import PathLike
from ..models import FileDescriptor
from ..storage import StorageBackend, StorageError

logger = logging.getLogger(__name__)


class LocalFileStorage(StorageBackend):
    """Stores files under ``storage_path`` in ``YYYY/MM`` folders."""

    def __init__(self, storage_path: PathLike, naming: Optional[NamingSettings] = None) -> None:
        super().__init__(naming)
        self.storage_path = Path(storage_path).resolve()

    async def exists(self, filename: str, target_dir: PathLike) -> bool:
        return await asyncio.to_thread((self._directory(target_dir) / filename).exists)

    async def save(self, file: FileDescriptor, target_dir: Optional[PathLike] = None) -> str:
        if file.path is None or not file.path.is_file():
            raise StorageError(f"No source file to save for {file.name!r}")

        directory = self._directory(target_dir) if target_dir else self.get_target_dir(self.storage_path)
        target_file = Path(self.get_unique_pathname(file, directory))
        await asyncio.to_thread(self._copy, file.path, target_file)
        logger.info("Saved %s", target_file)
        return self._relative(target_file)

    def serve(self) -> StaticFiles:
        return StaticFiles(directory=self.storage_path, check_dir=False)

    async def delete(self, filename: str, target_dir: PathLike) -> None:
        target_file = self._directory(target_dir) / filename
        try:
            await asyncio.to_thread(target_file.unlink)
        except FileNotFoundError:
            logger.debug("Nothing to delete at %s", target_file)
            return
        logger.info("Deleted %s", target_file)

    async def read(self, path: PathLike) -> bytes:
        target_file = self._resolve(path)
        try:
            return await asyncio.to_thread(target_file.read_bytes)
        except FileNotFoundError as exc:
            raise StorageError(f"File not found: {path}") from exc

    # --- internal helpers -------------------------------------------------
    @staticmethod
    def _copy(source: Path, target_file: Path) -> None:
        target_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target_file)

    def _directory(self, target_dir: PathLike) -> Path:
        # Relative directories live under the storage root.
        return self.storage_path / target_dir

    def _resolve(self, path: PathLike) -> Path:
        candidate = (self.storage_path / path).resolve()
        if candidate != self.storage_path and self.storage_path not in candidate.parents:
            raise StorageError(f"Path escapes storage root: {path}")
        return candidate

    def _relative(self, target_file: Path) -> str:
        try:
            return target_file.resolve().relative_to(self.storage_path).as_posix()
        except ValueError:
            return target_file.as_posix()
