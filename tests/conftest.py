"""Pytest configuration and fixtures for test suite."""
# pylint: disable=redefined-outer-name,protected-access
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Додаємо корінь проєкту в sys.path, щоб імпорти pageviews.* працювали без інсталяції пакету
PROJECT_ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(PROJECT_ROOT)
if ROOT_STR in sys.path:
    sys.path.remove(ROOT_STR)
sys.path.insert(0, ROOT_STR)

from pageviews.infra.config.settings import AnalyticsConfig  # noqa: E402
from pageviews.shared import logging as common_logging  # noqa: E402
from pageviews.shared import metrics  # noqa: E402


class FakeClock:
    """Callable clock whose current time tests can move."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _reset_shared_state():
    metrics._reset_for_tests()
    common_logging._state.redact_addresses = False
    yield
    common_logging._state.redact_addresses = False


@pytest.fixture
def clock():
    """Clock pinned to 2024-05-17 12:00 local time."""
    return FakeClock(datetime(2024, 5, 17, 12, 0, 0))


@pytest.fixture
def tmp_config(tmp_path):
    """Config storing day files under a temporary directory."""
    return AnalyticsConfig(
        directory=tmp_path / "analytics",
        name="site-",
        group_by=1,
        entries_by=2,
        flush_interval_seconds=60,
    )


@pytest.fixture
def analytics(tmp_config, clock):
    # pylint: disable=import-outside-toplevel
    from pageviews.domain.analytics.service import Analytics

    return Analytics(tmp_config, clock=clock)
