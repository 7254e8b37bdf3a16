"""Dashboard report: session count and hits grouped by URL segment."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, Tuple

from pageviews.domain.analytics.models import Action, DayBucket, Report, day_string
from pageviews.infra.persistence.day_files import DayFileStore
from pageviews.infra.persistence.store_memory import AggregationStore

ROOT_GROUP = ""


def split_page(page: str, group_by: int, entries_by: int) -> Tuple[str, str]:
    """
    Return (group, entry) for ``page``.

    ``page`` is split on "/"; the group is the segment at ``group_by`` and
    the entry is every segment from ``entries_by`` on, joined by "/".
    A page too short for ``group_by`` falls into the root group "", and one
    too short for ``entries_by`` gets the entry "".
    """
    parts = page.split("/")
    group = parts[group_by] if group_by < len(parts) else ROOT_GROUP
    entry = "/".join(parts[entries_by:])
    return group, entry


def group_hits(actions: Iterable[Action], group_by: int, entries_by: int) -> Dict[str, Dict[str, int]]:
    hits: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for action in actions:
        group, entry = split_page(action.page, group_by, entries_by)
        hits[group][entry] += 1
    return {group: dict(entries) for group, entries in hits.items()}


def build_report(day: str, bucket: DayBucket, group_by: int, entries_by: int) -> Report:
    actions = (action for visitor_actions in bucket.values() for action in visitor_actions)
    return Report(
        date=day,
        session_count=len(bucket),
        url_hits=group_hits(actions, group_by, entries_by),
    )


class ReportEngine:
    """Builds reports from the live store (today) or the day files (past days).

    Buckets reloaded from disk belong to the report only; they are never
    merged back into the store.
    """

    def __init__(self, store: AggregationStore, files: DayFileStore, group_by: int, entries_by: int) -> None:
        self._store = store
        self._files = files
        self.group_by = group_by
        self.entries_by = entries_by

    def _is_today(self, wanted: str) -> bool:
        return wanted == self._store.today()

    def report(self, day: date) -> Report:
        wanted = day_string(day)
        if self._is_today(wanted):
            bucket = self._store.snapshot_day(wanted)
        else:
            bucket = self._files.load(wanted)
        return build_report(wanted, bucket, self.group_by, self.entries_by)

    async def areport(self, day: date) -> Report:
        """Like report(), reading past days asynchronously.

        Today's snapshot holds the store lock only for the copy, so it is
        taken inline.
        """
        wanted = day_string(day)
        if self._is_today(wanted):
            bucket = self._store.snapshot_day(wanted)
        else:
            bucket = await self._files.aload(wanted)
        return build_report(wanted, bucket, self.group_by, self.entries_by)
