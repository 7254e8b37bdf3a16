"""Simple in-memory recorder and request metrics."""
from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict

_counters: Dict[str, int] = defaultdict(int)
_lock = threading.Lock()


def _key(method: str, path: str, status: int | str) -> str:
    """Build a metrics key from method, path and status."""
    return f"{method.upper()} {path} {status}"


def incr(name: str, amount: int = 1) -> None:
    """Bump a named counter (best effort, never raises)."""
    try:
        with _lock:
            _counters[name] += amount
    except (KeyError, TypeError):
        pass


def record_request(method: str, path: str, status: int) -> None:
    """Record a request metric (best effort, never raises)."""
    try:
        with _lock:
            _counters[_key(method, path, status)] += 1
            _counters[_key("ALL", "ALL", status)] += 1
    except (KeyError, TypeError):
        pass


def snapshot() -> Dict[str, int]:
    """Return a snapshot of current metrics."""
    with _lock:
        return dict(_counters)


def _reset_for_tests() -> None:
    with _lock:
        _counters.clear()
