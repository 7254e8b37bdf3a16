"""File system utilities for per-day analytics files."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import aiofiles

from pageviews.domain.analytics.models import parse_day


def day_file_path(directory: Path, name: str, day: str) -> Path:
    """
    Path of the file holding ``day``: {directory}/{YYYY}/{MM}/{DD}/{name}{day}.

    The directory segments are taken from the same day-string as the file
    name suffix, so a bucket never lands in another day's folder.
    """
    parsed = parse_day(day)
    return (
        Path(directory)
        / f"{parsed.year:04d}"
        / f"{parsed.month:02d}"
        / f"{parsed.day:02d}"
        / f"{name}{day}"
    )


def ensure_directory(path: Path) -> None:
    """Create the storage root if it is missing."""
    Path(path).mkdir(parents=True, exist_ok=True)


def read_bytes(path: Path) -> Optional[bytes]:
    """Read a file; None when it does not exist."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        return None


def write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` atomically, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                pass


# Async wrapper to avoid blocking event loop
async def read_bytes_async(path: Path) -> Optional[bytes]:
    """Read a file asynchronously; None when it does not exist."""
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except FileNotFoundError:
        return None
