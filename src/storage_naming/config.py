from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .utils.filenames import DEFAULT_SUFFIX, MAX_FILENAME_BYTES


class NamingSettings(BaseModel):
    # Some backends rewrite the suffix after saving and use 253 for headroom.
    max_filename_bytes: int = Field(default=MAX_FILENAME_BYTES, gt=32, le=4096)
    suffix: str = DEFAULT_SUFFIX
    # Cap for the deprecated sequential naming path.
    legacy_max_attempts: int = Field(default=1000, ge=1)


class Settings(BaseSettings):
    # Local backend
    STORAGE_PATH: Path = Path("content/files")

    LOG_LEVEL: str = "INFO"

    naming: NamingSettings = NamingSettings()

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_nested_delimiter = "__"

    def ensure_storage_path(self) -> Path:
        self.STORAGE_PATH.mkdir(parents=True, exist_ok=True)
        return self.STORAGE_PATH


@lru_cache()
def get_settings() -> Settings:
    return Settings()
