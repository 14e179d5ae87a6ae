from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


def build_path(target_dir: PathLike, filename: str) -> str:
    """Join ``target_dir`` and ``filename``; the directory is not checked."""

    directory = os.path.normpath(str(target_dir)) if str(target_dir) else ""
    return os.path.join(directory, filename)


def get_target_dir(base_dir: Optional[PathLike] = None, now: Optional[datetime] = None) -> str:
    """Return ``base_dir/YYYY/MM`` for the current (or given) date."""

    date = now or datetime.now()
    year = date.strftime("%Y")
    month = date.strftime("%m")
    if base_dir:
        return os.path.join(str(base_dir), year, month)
    return os.path.join(year, month)
