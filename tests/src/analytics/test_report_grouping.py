"""Tests for URL grouping and the report engine."""
from datetime import date

import pytest

from pageviews.domain.analytics.models import Action
from pageviews.domain.analytics.report import ReportEngine, build_report, group_hits, split_page
from pageviews.infra.persistence.day_files import DayFileStore
from pageviews.infra.persistence.store_memory import AggregationStore


def test_split_page_group_and_entry():
    assert split_page("/blog/2024/post-1", 1, 2) == ("blog", "2024/post-1")


def test_split_page_same_index_for_group_and_entry():
    assert split_page("/blog/2024/post-1", 1, 1) == ("blog", "blog/2024/post-1")


@pytest.mark.parametrize(
    "page, expected",
    [
        ("/", ("", "")),
        ("/about", ("about", "")),
        ("", ("", "")),
    ],
)
def test_split_page_short_paths_do_not_raise(page, expected):
    assert split_page(page, 1, 2) == expected


def test_split_page_group_index_past_the_end_is_root_group():
    assert split_page("/about", 5, 6) == ("", "")


def test_group_hits_counts_repeated_pages():
    hits = group_hits([Action("/blog/2024/post-1"), Action("/blog/2024/post-1"), Action("/docs/intro")], 1, 2)
    assert hits == {"blog": {"2024/post-1": 2}, "docs": {"intro": 1}}


def test_build_report_counts_sessions_and_hits():
    bucket = {
        "a": [Action("/blog/x/y"), Action("/blog/x/y")],
        "b": [Action("/blog/x/z")],
        "c": [],
    }
    report = build_report("2024-05-17", bucket, 1, 2)
    assert report.session_count == 3
    assert report.url_hits == {"blog": {"x/y": 2, "x/z": 1}}
    assert report.total_hits == 3


class _SpyFiles(DayFileStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.loaded = []

    def load(self, day):
        self.loaded.append(day)
        return super().load(day)


def test_engine_reads_today_from_memory(tmp_path, clock):
    files = _SpyFiles(tmp_path, "site-")
    store = AggregationStore(files, clock=clock)
    files.loaded.clear()
    store.insert("a", Action("/blog/2024/post-1"))
    engine = ReportEngine(store, files, 1, 2)
    report = engine.report(date(2024, 5, 17))
    assert files.loaded == []
    assert report.url_hits == {"blog": {"2024/post-1": 1}}


def test_engine_reads_past_day_from_disk_without_touching_store(tmp_path, clock):
    files = _SpyFiles(tmp_path, "site-")
    files.save("2024-05-10", {"a": [Action("/docs/a/b")], "b": [Action("/docs/a/b")]})
    store = AggregationStore(files, clock=clock)
    engine = ReportEngine(store, files, 1, 2)
    report = engine.report(date(2024, 5, 10))
    assert report.session_count == 2
    assert report.url_hits == {"docs": {"a/b": 2}}
    assert "2024-05-10" not in store.days()


def test_engine_past_day_without_file_is_empty(tmp_path, clock):
    files = DayFileStore(tmp_path, "site-")
    engine = ReportEngine(AggregationStore(files, clock=clock), files, 1, 2)
    report = engine.report(date(2020, 1, 1))
    assert report.session_count == 0
    assert report.url_hits == {}


@pytest.mark.asyncio
async def test_engine_async_report_reads_past_day(tmp_path, clock):
    files = DayFileStore(tmp_path, "site-")
    files.save("2024-05-10", {"a": [Action("/docs/a/b")]})
    engine = ReportEngine(AggregationStore(files, clock=clock), files, 1, 2)
    report = await engine.areport(date(2024, 5, 10))
    assert report.url_hits == {"docs": {"a/b": 1}}
