"""Periodic flush of the aggregation store to day files."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from pageviews.domain.analytics.models import count_actions
from pageviews.infra.persistence.day_files import DayFileStore
from pageviews.infra.persistence.store_memory import AggregationStore
from pageviews.shared import metrics
from pageviews.shared.errors import ConfigurationError
from pageviews.shared.logging import get_logger

logger = get_logger(__name__)


def flush_store(store: AggregationStore, files: DayFileStore, log: Optional[logging.Logger] = None) -> Dict[str, int]:
    """
    Write every resident bucket to its day file.

    The snapshot is copied under the store lock; the writes happen after it
    is released. A failed day is logged and skipped. Returns the action count
    written per day.
    """
    log = log or logger
    snapshot = store.snapshot_all()
    written: Dict[str, int] = {}
    for day, bucket in snapshot.items():
        try:
            files.save(day, bucket)
        except (OSError, ValueError, TypeError) as exc:
            log.error("Failed to write analytics for %s: %s", day, exc)
            metrics.incr("flush_failed")
            continue
        written[day] = count_actions(bucket)
        metrics.incr("flush_ok")
    store.release_flushed(written)
    log.debug("Flushed %d of %d day buckets", len(written), len(snapshot))
    return written


class FlushScheduler:
    """Background task that flushes the store every ``interval`` seconds."""

    def __init__(
        self,
        store: AggregationStore,
        files: DayFileStore,
        interval: float,
        log: Optional[logging.Logger] = None,
    ) -> None:
        if interval <= 0:
            raise ConfigurationError(f"flush interval must be positive, got {interval}")
        self._store = store
        self._files = files
        self.interval = interval
        self._log = log or logger
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def flush(self) -> Dict[str, int]:
        return flush_store(self._store, self._files, self._log)

    async def _run(self) -> None:
        assert self._stop_event is not None
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                    return
                except asyncio.TimeoutError:
                    pass
                try:
                    await asyncio.to_thread(self.flush)
                except Exception:  # pylint: disable=broad-exception-caught
                    self._log.exception("Flush tick failed")
        except asyncio.CancelledError:
            self._log.info("Flush loop cancelled; exiting")

    def start(self) -> None:
        """Start the loop on the running event loop (no-op when already running)."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())
        self._log.info("Flush scheduler started (every %ss)", self.interval)

    async def stop(self, final_flush: bool = True, timeout: float = 5.0) -> None:
        """Signal the loop, wait for it, then write what was recorded since the last tick."""
        if self._task is not None and self._stop_event is not None:
            self._stop_event.set()
            try:
                await asyncio.wait_for(self._task, timeout=timeout)
            except asyncio.TimeoutError:
                # A flush that hangs on disk must not block shutdown
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            self._task = None
            self._stop_event = None
        if final_flush:
            try:
                await asyncio.to_thread(self.flush)
            except Exception:  # pylint: disable=broad-exception-caught
                self._log.exception("Final flush failed")
        self._log.info("Flush scheduler stopped")
