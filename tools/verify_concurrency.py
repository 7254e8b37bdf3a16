"""Stress script: concurrent inserts racing with repeated flushes."""
import sys
import tempfile
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from pageviews.domain.analytics.models import Action  # noqa: E402
from pageviews.domain.analytics.scheduler import flush_store  # noqa: E402
from pageviews.infra.persistence.day_files import DayFileStore  # noqa: E402
from pageviews.infra.persistence.store_memory import AggregationStore  # noqa: E402


def worker(store: AggregationStore, visitor: int, hits: int) -> int:
    """Insert ``hits`` page views for one visitor."""
    for i in range(hits):
        store.insert(f"10.0.{visitor // 256}.{visitor % 256}", Action(f"/stress/{visitor}/{i}"))
    return hits


def run_stress(visitors: int = 200, hits: int = 50) -> bool:
    """Run inserts on many threads while another thread keeps flushing."""
    print(f"--- Stress: {visitors} visitors x {hits} hits with concurrent flushes ---")
    with tempfile.TemporaryDirectory() as tmp:
        files = DayFileStore(Path(tmp), "stress-")
        store = AggregationStore(files)
        stop = threading.Event()
        flushes = []

        def flusher():
            while not stop.is_set():
                flushes.append(flush_store(store, files))
                time.sleep(0.005)

        flush_thread = threading.Thread(target=flusher)
        flush_thread.start()
        started = time.time()
        with ThreadPoolExecutor(max_workers=32) as executor:
            total = sum(executor.map(lambda v: worker(store, v, hits), range(visitors)))
        stop.set()
        flush_thread.join()
        flush_store(store, files)
        elapsed = time.time() - started

        day = store.today()
        on_disk = files.load(day)
        in_memory = store.snapshot_day(day)
        ok = True

        if len(on_disk) != visitors:
            print(f"❌ Expected {visitors} visitors on disk, found {len(on_disk)}")
            ok = False
        if sum(len(a) for a in on_disk.values()) != total:
            print(f"❌ Expected {total} actions on disk, found {sum(len(a) for a in on_disk.values())}")
            ok = False
        if on_disk != in_memory:
            print("❌ Disk snapshot differs from memory after final flush")
            ok = False
        for key, actions in on_disk.items():
            pages = [a.page for a in actions]
            if pages != sorted(pages, key=lambda p: int(p.rsplit("/", 1)[1])):
                print(f"❌ Actions for {key} are out of arrival order")
                ok = False
                break

        if ok:
            print(f"✅ {total} actions from {visitors} visitors intact after {len(flushes)} flushes ({elapsed:.2f}s)")
        return ok


if __name__ == "__main__":
    sys.exit(0 if run_stress() else 1)
