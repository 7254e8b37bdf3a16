"""Visitor key derivation.

With a hash secret configured, the key for an address is the raw SHA-256
digest of ``day + address + secret``. The day is part of the input, so the same
address produces a different key every day and stored keys cannot be linked
across days. The per-day session count is therefore a count of distinct daily
hashes, not of people.

The 32 digest bytes are carried in a ``str`` with one code point per byte
(latin-1). That keeps the raw digest lossless while staying usable as a JSON
object key in the day files.
"""
from __future__ import annotations

import hashlib
import logging
from typing import Optional

from pageviews.shared.logging import get_logger

logger = get_logger(__name__)


def visitor_key(
    day: str,
    address: str,
    secret: str,
    log: Optional[logging.Logger] = None,
) -> str:
    """Return the key actions for ``address`` on ``day`` are stored under."""
    if not secret:
        return address
    try:
        digest = hashlib.sha256(f"{day}{address}{secret}".encode("utf-8")).digest()
    except (UnicodeEncodeError, ValueError, TypeError) as exc:
        # Запис не повинен зриватися: лишаємо сиру адресу
        (log or logger).error("visitor key hashing failed, storing raw address: %s", exc)
        return address
    return digest.decode("latin-1")
