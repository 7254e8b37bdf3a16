"""Day bucket serialization: JSON compressed with zlib.

Layout of the decompressed payload::

    {"<visitor key>": [{"Page": "/blog/x", "Query": "a=1"}, ...], ...}
"""
from __future__ import annotations

import json
import logging
import zlib
from typing import Optional

from pageviews.domain.analytics.models import Action, DayBucket
from pageviews.shared import metrics
from pageviews.shared.logging import get_logger

logger = get_logger(__name__)


def encode_bucket(bucket: DayBucket) -> bytes:
    """Serialize and compress a bucket."""
    payload = {
        key: [action.to_dict() for action in actions]
        for key, actions in bucket.items()
    }
    # ensure_ascii keeps latin-1 carried digests as \u00XX escapes
    data = json.dumps(payload, ensure_ascii=True, separators=(",", ":"))
    return zlib.compress(data.encode("utf-8"))


def decode_bucket(raw: Optional[bytes], log: Optional[logging.Logger] = None) -> DayBucket:
    """
    Decompress and parse a bucket.

    Missing input (None) is an empty bucket. Malformed input is logged and
    also yields an empty bucket; it never raises.
    """
    log = log or logger
    if raw is None:
        return {}
    try:
        payload = json.loads(zlib.decompress(raw).decode("utf-8"))
    except (zlib.error, UnicodeDecodeError, ValueError) as exc:
        log.warning("Failed to decode day bucket (%d bytes): %s", len(raw), exc)
        metrics.incr("decode_failed")
        return {}

    if not isinstance(payload, dict):
        log.warning("Day bucket payload is %s, expected an object", type(payload).__name__)
        metrics.incr("decode_failed")
        return {}

    bucket: DayBucket = {}
    try:
        for key, actions in payload.items():
            # null is accepted as an empty action list
            bucket[str(key)] = [Action.from_dict(item) for item in (actions or [])]
    except (AttributeError, TypeError) as exc:
        log.warning("Day bucket has malformed actions: %s", exc)
        metrics.incr("decode_failed")
        return {}
    return bucket
