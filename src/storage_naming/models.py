from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class FileDescriptor(BaseModel):
    name: str
    # None falls back to the backend's configured marker, "" disables it.
    suffix: Optional[str] = None
    path: Optional[Path] = None

    @property
    def basename(self) -> str:
        return os.path.basename(self.name)
