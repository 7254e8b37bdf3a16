"""In-memory aggregation store for page views."""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from pageviews.domain.analytics.models import Action, DayBucket, copy_bucket, count_actions, day_string
from pageviews.domain.analytics.visitor import visitor_key
from pageviews.infra.persistence.day_files import DayFileStore
from pageviews.shared.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class AggregationStore:
    """
    Day-string -> visitor key -> actions, guarded by a single lock.

    Every read and write of the resident buckets goes through ``_lock``;
    nothing under the lock touches the disk.
    """

    def __init__(
        self,
        files: DayFileStore,
        hash_secret: str = "",
        log: Optional[logging.Logger] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self._files = files
        self._hash_secret = hash_secret
        self._log = log or logger
        self._clock = clock
        self._lock = threading.RLock()
        self._buckets: Dict[str, DayBucket] = {}

        # Після рестарту продовжуємо сьогоднішній день з диску
        today = self.today()
        self._buckets[today] = self._files.load(today)
        if self._buckets[today]:
            self._log.info(
                "Restored %d visitors for %s from %s",
                len(self._buckets[today]), today, self._files.path_for(today),
            )

    def today(self) -> str:
        return day_string(self._clock())

    def insert(self, address: str, action: Action) -> None:
        """Append ``action`` for ``address`` to today's bucket. Never raises."""
        try:
            with self._lock:
                day = self.today()
                key = visitor_key(day, address, self._hash_secret, self._log)
                bucket = self._buckets.setdefault(day, {})
                bucket.setdefault(key, []).append(action)
        except Exception:  # pylint: disable=broad-exception-caught
            self._log.exception("Failed to record page view for %s", action.page)

    def snapshot_all(self) -> Dict[str, DayBucket]:
        """Copy of every resident bucket, independent of later inserts."""
        with self._lock:
            return {day: copy_bucket(bucket) for day, bucket in self._buckets.items()}

    def snapshot_day(self, day: str) -> DayBucket:
        """Copy of one resident bucket; empty when the day is not resident."""
        with self._lock:
            return copy_bucket(self._buckets.get(day, {}))

    def days(self) -> List[str]:
        with self._lock:
            return sorted(self._buckets)

    def release_flushed(self, flushed: Dict[str, int]) -> List[str]:
        """
        Drop past-day buckets that were written and have not changed since.

        ``flushed`` maps day-string to the action count that was written.
        Today's bucket always stays resident.
        """
        dropped: List[str] = []
        with self._lock:
            today = self.today()
            for day, written in flushed.items():
                if day >= today:
                    continue
                bucket = self._buckets.get(day)
                if bucket is not None and count_actions(bucket) == written:
                    del self._buckets[day]
                    dropped.append(day)
        for day in dropped:
            self._log.info("Released flushed bucket for %s from memory", day)
        return dropped
