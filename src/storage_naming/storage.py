from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from .config import NamingSettings, get_settings
from .core.paths import PathLike, build_path, get_target_dir
from .models import FileDescriptor
from .utils import filenames

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class UniqueNameExhaustedError(StorageError):
    """Raised when the sequential naming path runs out of attempts."""

    def __init__(self, name: str, attempts: int) -> None:
        super().__init__(f"No free filename for {name!r} after {attempts} attempts")
        self.name = name
        self.attempts = attempts


class StorageBackend(ABC):
    """Base class for storage backends.

    Subclasses supply the persistence operations; the base class owns file
    naming. Naming limits come from ``naming`` so backends with different
    limits can live in the same process.
    """

    def __init__(self, naming: Optional[NamingSettings] = None) -> None:
        self.naming = naming or get_settings().naming

    # --- persistence contract -------------------------------------------
    @abstractmethod
    async def exists(self, filename: str, target_dir: PathLike) -> bool:
        ...

    @abstractmethod
    async def save(self, file: FileDescriptor, target_dir: Optional[PathLike] = None) -> str:
        ...

    @abstractmethod
    def serve(self) -> Any:
        ...

    @abstractmethod
    async def delete(self, filename: str, target_dir: PathLike) -> None:
        ...

    @abstractmethod
    async def read(self, path: PathLike) -> bytes:
        ...

    # --- naming -----------------------------------------------------------
    def get_target_dir(self, base_dir: Optional[PathLike] = None) -> str:
        return get_target_dir(base_dir)

    def sanitize_basename(self, name: str) -> str:
        return filenames.sanitize_basename(name)

    def get_extension(self, filename: str) -> str:
        return filenames.resolve_extension(filename)

    def get_suffix(self, filename: str, ext: str, suffix: Optional[str] = None) -> str:
        candidate = self.naming.suffix if suffix is None else suffix
        return filenames.resolve_suffix(filename, ext, candidate)

    def generate_secure_hash(self) -> str:
        return filenames.generate_secure_hash()

    def generate_filename(self, stem: str, hash: str, suffix: str = "", ext: str = "") -> str:
        return filenames.generate_filename(
            stem, hash, suffix, ext, max_bytes=self.naming.max_filename_bytes
        )

    def get_unique_pathname(self, file: FileDescriptor, target_dir: PathLike) -> str:
        """Return ``target_dir/stem-<hash>[suffix][ext]`` for ``file``."""

        sanitized = self.sanitize_basename(file.basename)
        ext = self.get_extension(sanitized)
        suffix = self.get_suffix(sanitized, ext, file.suffix)
        stem = sanitized[: len(sanitized) - len(ext) - len(suffix)]
        filename = self.generate_filename(stem, self.generate_secure_hash(), suffix, ext)
        return build_path(target_dir, filename)

    async def get_unique_file_name(self, file: FileDescriptor, target_dir: PathLike) -> str:
        """Deprecated sequential naming: ``name``, ``name-1``, ``name-2`` ...

        Each candidate costs one ``exists`` round-trip and the check races
        with concurrent writers. Prefer :meth:`get_unique_pathname`.
        """

        sanitized = self.sanitize_basename(file.basename)
        ext = self.get_extension(sanitized)
        name = sanitized[: len(sanitized) - len(ext)]
        max_attempts = self.naming.legacy_max_attempts

        for attempt in range(max_attempts):
            append = f"-{attempt}" if attempt else ""
            filename = f"{name}{append}{ext}"
            if not await self.exists(filename, target_dir):
                return build_path(target_dir, filename)
            logger.debug("Candidate %s already exists in %s", filename, target_dir)

        logger.warning("Gave up naming %s in %s after %s attempts", name, target_dir, max_attempts)
        raise UniqueNameExhaustedError(name, max_attempts)
