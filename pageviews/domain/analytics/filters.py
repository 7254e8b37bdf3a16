"""User-agent blacklist matching."""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

DEFAULT_USER_AGENT_BLACKLIST: Tuple[str, ...] = (
    "wget", "python", "perl", "msnbot", "netresearch", "bot",
    "archive", "crawl", "googlebot", "msn", "php",
    "panscient", "berry", "yandex", "bing", "fluffy",
)


def is_blacklisted(user_agent: Optional[str], terms: Iterable[str]) -> bool:
    """True when any lower-cased term is a substring of the lower-cased user agent."""
    ua = (user_agent or "").lower()
    return any(term.lower() in ua for term in terms if term)
