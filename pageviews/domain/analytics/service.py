"""Recorder facade wiring store, day files, scheduler and reports together."""
from __future__ import annotations

import hmac
import logging
from datetime import date, datetime
from typing import Optional

from pageviews.domain.analytics.filters import is_blacklisted
from pageviews.domain.analytics.models import Action, Report, RequestInfo, parse_day
from pageviews.domain.analytics.report import ReportEngine
from pageviews.domain.analytics.scheduler import FlushScheduler
from pageviews.infra.config.settings import AnalyticsConfig
from pageviews.infra.persistence.day_files import DayFileStore
from pageviews.infra.persistence.store_memory import AggregationStore, Clock
from pageviews.infra.storage.fs import ensure_directory
from pageviews.shared import metrics
from pageviews.shared.errors import InvalidDateError, UnauthorizedError
from pageviews.shared.logging import get_logger, set_address_redaction

logger = get_logger(__name__)


class Analytics:
    """
    One recorder instance: owns its store and flush scheduler.

    Construct it explicitly and hand it to the transport layer; there is no
    module-level instance.
    """

    def __init__(
        self,
        config: AnalyticsConfig,
        log: Optional[logging.Logger] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.config = config
        self._log = log or logger
        if config.hashing_enabled:
            # Маскування глобальне для процесу: інший рекордер його не вимикає
            set_address_redaction(True)
        try:
            ensure_directory(config.directory)
        except OSError as exc:
            # Reads degrade to empty buckets and flushes retry every tick
            self._log.error("Cannot create analytics directory %s: %s", config.directory, exc)

        self.files = DayFileStore(config.directory, config.name, self._log)
        self.store = AggregationStore(self.files, config.hash_secret, self._log, clock)
        self.reports = ReportEngine(self.store, self.files, config.group_by, config.entries_by)
        self.scheduler = FlushScheduler(
            self.store, self.files, config.flush_interval_seconds, self._log,
        )

    # ──────────────────────────────────────────────────────────────────
    # Recording
    # ──────────────────────────────────────────────────────────────────

    def insert_request(self, request: RequestInfo) -> bool:
        """Record a page view unless the user agent is blacklisted.

        Returns True when the view was recorded.
        """
        if is_blacklisted(request.user_agent, self.config.user_agent_blacklist):
            metrics.incr("blocked")
            return False
        self.store.insert(request.address, Action(page=request.path, query=request.query))
        metrics.incr("recorded")
        return True

    # ──────────────────────────────────────────────────────────────────
    # Dashboard
    # ──────────────────────────────────────────────────────────────────

    def check_access(self, key: Optional[str]) -> None:
        """Raise UnauthorizedError unless ``key`` matches the configured password."""
        password = self.config.password
        if not password:
            return
        if not key or not hmac.compare_digest(key.encode("utf-8"), password.encode("utf-8")):
            self._log.warning("Unauthorized dashboard access attempt")
            raise UnauthorizedError("Unauthorized")

    def resolve_date(self, value: Optional[str]) -> date:
        """Parse the dashboard date parameter; missing or empty means today."""
        if not value:
            return parse_day(self.store.today())
        try:
            return parse_day(value)
        except ValueError as exc:
            self._log.info("Rejected dashboard date %r: %s", value, exc)
            raise InvalidDateError(f"Invalid date {value!r}, expected YYYY-MM-DD", value) from exc

    def report(self, key: Optional[str] = None, day: Optional[str] = None) -> Report:
        self.check_access(key)
        return self.reports.report(self.resolve_date(day))

    async def areport(self, key: Optional[str] = None, day: Optional[str] = None) -> Report:
        self.check_access(key)
        return await self.reports.areport(self.resolve_date(day))

    # ──────────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────────

    def start(self) -> None:
        self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop(final_flush=True)
