from __future__ import annotations

import logging
import os
import re
import secrets

logger = logging.getLogger(__name__)

MAX_FILENAME_BYTES = 255
DEFAULT_SUFFIX = "_o"

_UNSAFE_CHARS = re.compile(r"[^\w@.]", re.ASCII)
_VALID_EXTENSION = re.compile(r"(\.[a-z0-9]{2,10})+$", re.IGNORECASE)
_NUMERIC_EXTENSION = re.compile(r"\.\d+$")
_HASH_BYTES = 8


def sanitize_basename(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_@.]`` with ``-``.

    Works per character, so a multi-byte character becomes a single dash.
    """

    return _UNSAFE_CHARS.sub("-", name)


def resolve_extension(filename: str) -> str:
    """Return the trailing extension of ``filename`` or ``""``.

    Numeric-only groups such as ``.1`` and groups outside 2-10 alphanumerics
    are not treated as extensions.
    """

    ext = os.path.splitext(filename)[1]
    if ext and _VALID_EXTENSION.match(ext) and not _NUMERIC_EXTENSION.match(ext):
        return ext
    return ""


def resolve_suffix(filename: str, ext: str = "", suffix: str = DEFAULT_SUFFIX) -> str:
    """Return ``suffix`` when the stem (``filename`` minus ``ext``) ends with it."""

    if not suffix:
        return ""
    stem = filename[: len(filename) - len(ext)] if ext and filename.endswith(ext) else filename
    return suffix if stem.endswith(suffix) else ""


def generate_secure_hash() -> str:
    return secrets.token_hex(_HASH_BYTES)


def generate_filename(
    stem: str,
    hash: str,
    suffix: str = "",
    ext: str = "",
    *,
    max_bytes: int = MAX_FILENAME_BYTES,
) -> str:
    """Compose ``stem-hash{suffix}{ext}`` within ``max_bytes`` UTF-8 bytes.

    Only the stem is shortened. It is cut on a character boundary, so the
    result may land a few bytes under the limit for multi-byte stems. A
    suffix that leaves no room for ``-hash{ext}`` is dropped.
    """

    tail = f"-{hash}{suffix}{ext}"
    filename = f"{stem}{tail}"
    if len(filename.encode("utf-8")) <= max_bytes:
        return filename

    budget = max_bytes - len(tail.encode("utf-8"))
    if budget < 0:
        if suffix:
            logger.warning("Suffix %r does not fit in %s bytes; dropping it", suffix, max_bytes)
            return generate_filename(stem, hash, "", ext, max_bytes=max_bytes)
        logger.warning("Filename tail %r alone exceeds %s bytes; keeping its end", tail, max_bytes)
        return tail.encode("utf-8")[-max_bytes:].decode("utf-8", errors="ignore")

    # Dropping the incomplete trailing sequence keeps only whole characters.
    truncated = stem.encode("utf-8")[:budget].decode("utf-8", errors="ignore")
    logger.debug("Truncated stem from %s to %s characters", len(stem), len(truncated))
    return f"{truncated}{tail}"
