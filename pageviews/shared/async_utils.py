"""Async utility functions."""
from __future__ import annotations

from typing import Any, Callable, TypeVar

from fastapi.concurrency import run_in_threadpool

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Execute a blocking function in the threadpool and await the result.
    Use this to call lock-holding store operations from async endpoints.
    """
    return await run_in_threadpool(func, *args, **kwargs)
