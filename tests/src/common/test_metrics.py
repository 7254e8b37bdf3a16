from concurrent.futures import ThreadPoolExecutor

from pageviews.shared import metrics


def test_incr_and_snapshot():
    metrics.incr("recorded")
    metrics.incr("recorded", 2)
    snap = metrics.snapshot()
    assert snap["recorded"] == 3
    snap["recorded"] = 100
    assert metrics.snapshot()["recorded"] == 3


def test_record_request_keys():
    metrics.record_request("get", "/blog", 200)
    snap = metrics.snapshot()
    assert snap["GET /blog 200"] == 1
    assert snap["ALL ALL 200"] == 1


def test_concurrent_increments():
    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lambda _: metrics.incr("n"), range(1000)))
    assert metrics.snapshot()["n"] == 1000
