"""Cached enrichment databases.

The checker downloads an ASN and a geolocation MaxMind database on first use
and keeps them, with ETag sidecars, in its cache directory. Clearing them
forces a fresh download on the next run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from checker_console.models.responses import CacheClearResult, CacheFileStatus, CacheStatus

logger = logging.getLogger(__name__)

DATABASE_FILES: tuple[str, ...] = (
    "asn_database.mmdb",
    "geolocation_database.mmdb",
)

CACHE_FILES: tuple[str, ...] = (
    "asn_database.mmdb",
    "asn_database.mmdb.etag",
    "geolocation_database.mmdb",
    "geolocation_database.mmdb.etag",
)

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_bytes(size: int) -> str:
    """Human readable size: ``0 Bytes``, ``512 Bytes``, ``1.5 KB``, ``2 MB``."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[exponent]}"


class CacheManager:
    """Inspect and remove the statically-known cache files.

    Parameters
    ----------
    cache_dir:
        Directory path, or a zero-argument callable returning it.
    """

    def __init__(self, cache_dir: str | Callable[[], str]) -> None:
        self._cache_dir = cache_dir

    @property
    def cache_dir(self) -> Path:
        raw = self._cache_dir() if callable(self._cache_dir) else self._cache_dir
        return Path(raw).expanduser()

    def clear(self) -> CacheClearResult:
        """Delete every known cache file that exists.

        Missing files are skipped. A failed deletion is recorded and the
        remaining files are still processed. Safe to call repeatedly.
        """
        cache_dir = self.cache_dir
        files_deleted: list[str] = []
        errors: list[str] = []

        for name in CACHE_FILES:
            path = cache_dir / name
            try:
                if path.exists():
                    path.unlink()
                    files_deleted.append(name)
                    logger.info("Deleted cache file: %s", path, extra={"cache_file": name})
            except OSError as exc:
                errors.append(f"Failed to delete {name}: {exc}")
                logger.error(
                    "Failed to delete cache file %s: %s", path, exc, extra={"cache_file": name}
                )

        if errors:
            message = f"Cleared {len(files_deleted)} files with {len(errors)} errors"
        else:
            message = f"Cleared {len(files_deleted)} cache files"

        return CacheClearResult(
            success=not errors,
            message=message,
            files_deleted=files_deleted,
            errors=errors,
        )

    def status(self) -> CacheStatus:
        """Live existence, size and mtime of the two database files."""
        cache_dir = self.cache_dir
        files: list[CacheFileStatus] = []

        for name in DATABASE_FILES:
            path = cache_dir / name
            try:
                stat = path.stat()
            except OSError:
                files.append(CacheFileStatus(file=name, exists=False))
                continue
            files.append(
                CacheFileStatus(
                    file=name,
                    exists=True,
                    size=stat.st_size,
                    modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )

        total_size = sum(f.size for f in files)
        return CacheStatus(
            has_cached_data=any(f.exists for f in files),
            total_size=total_size,
            total_size_formatted=format_bytes(total_size),
            files=files,
            cache_dir=str(cache_dir),
        )
