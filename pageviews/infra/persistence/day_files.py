"""Per-day file storage for analytics buckets."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pageviews.domain.analytics.models import DayBucket
from pageviews.infra.persistence.codec import decode_bucket, encode_bucket
from pageviews.infra.storage.fs import day_file_path, read_bytes, read_bytes_async, write_bytes
from pageviews.shared.logging import get_logger

logger = get_logger(__name__)


class DayFileStore:
    """
    Reads and writes one compressed file per day-string.

    Read failures degrade to an empty bucket. Write failures propagate to
    the caller (the flush loop), which logs them and retries on the next tick.
    """

    def __init__(self, directory: Path, name: str, log: Optional[logging.Logger] = None) -> None:
        self.directory = Path(directory)
        self.name = name
        self._log = log or logger

    def path_for(self, day: str) -> Path:
        return day_file_path(self.directory, self.name, day)

    def load(self, day: str) -> DayBucket:
        """Load the bucket for ``day``; empty when missing or unreadable."""
        path = self.path_for(day)
        try:
            raw = read_bytes(path)
        except OSError as exc:
            self._log.error("Failed to read %s: %s", path, exc)
            return {}
        return decode_bucket(raw, self._log)

    async def aload(self, day: str) -> DayBucket:
        """Async variant of load() that reads through aiofiles."""
        path = self.path_for(day)
        try:
            raw = await read_bytes_async(path)
        except OSError as exc:
            self._log.error("Failed to read %s: %s", path, exc)
            return {}
        return decode_bucket(raw, self._log)

    def save(self, day: str, bucket: DayBucket) -> Path:
        """Encode and write ``bucket``, replacing any previous file for ``day``."""
        path = self.path_for(day)
        write_bytes(path, encode_bucket(bucket))
        return path
