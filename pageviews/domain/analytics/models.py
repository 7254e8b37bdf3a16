from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

DAY_FORMAT = "%Y-%m-%d"
_DAY_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True)
class Action:
    # Один перегляд сторінки: шлях + сирий query string
    page: str
    query: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"Page": self.page, "Query": self.query}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Action":
        return cls(page=str(data.get("Page", "")), query=str(data.get("Query", "")))


# visitor key -> actions in arrival order
DayBucket = Dict[str, List[Action]]


@dataclass(frozen=True)
class RequestInfo:
    """Transport-agnostic view of an inbound request."""

    address: str
    user_agent: str = ""
    path: str = "/"
    query: str = ""


@dataclass
class Report:
    date: str
    session_count: int = 0
    # group segment -> remaining path -> hits
    url_hits: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def total_hits(self) -> int:
        return sum(sum(entries.values()) for entries in self.url_hits.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "session_count": self.session_count,
            "total_hits": self.total_hits,
            "url_hits": {group: dict(entries) for group, entries in self.url_hits.items()},
        }


def day_string(moment: Optional[datetime | date] = None) -> str:
    """Local calendar day as YYYY-MM-DD."""
    if moment is None:
        moment = datetime.now()
    # strftime("%Y") drops the zero padding for years below 1000
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"


def parse_day(value: str) -> date:
    """Parse YYYY-MM-DD; raises ValueError on anything else."""
    if not _DAY_RE.fullmatch(value):
        raise ValueError(f"{value!r} is not in YYYY-MM-DD form")
    return datetime.strptime(value, DAY_FORMAT).date()


def copy_bucket(bucket: DayBucket) -> DayBucket:
    # Action is frozen, so copying the lists is enough.
    return {key: list(actions) for key, actions in bucket.items()}


def count_actions(bucket: DayBucket) -> int:
    return sum(len(actions) for actions in bucket.values())
