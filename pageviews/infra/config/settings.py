from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

from pageviews.domain.analytics.filters import DEFAULT_USER_AGENT_BLACKLIST
from pageviews.shared.errors import ConfigurationError


BASE_DIR = Path(__file__).resolve().parents[3]

# Variables from the process environment win over .env (override=False).
load_dotenv(BASE_DIR / ".env")


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _list_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class AnalyticsConfig:
    """Immutable recorder configuration.

    ``group_by`` / ``entries_by`` index into ``page.split("/")``; for a page
    like ``/blog/2024/post`` index 0 is the empty string before the first slash.
    """

    directory: Path
    name: str = "analytics-"
    hash_secret: str = ""
    password: str = ""
    group_by: int = 1
    entries_by: int = 1
    flush_interval_seconds: float = 60
    user_agent_blacklist: Tuple[str, ...] = field(default=DEFAULT_USER_AGENT_BLACKLIST)

    def __post_init__(self) -> None:
        if not str(self.directory):
            raise ConfigurationError("directory must not be empty")
        if self.flush_interval_seconds <= 0:
            raise ConfigurationError(
                f"flush_interval_seconds must be positive, got {self.flush_interval_seconds}"
            )
        if self.group_by < 0 or self.entries_by < 0:
            raise ConfigurationError("group_by and entries_by must be non-negative")
        # Normalise so callers may pass lists and mixed case.
        object.__setattr__(self, "directory", Path(self.directory))
        object.__setattr__(
            self,
            "user_agent_blacklist",
            tuple(term.lower() for term in self.user_agent_blacklist if term),
        )

    @property
    def hashing_enabled(self) -> bool:
        return bool(self.hash_secret)

    def describe(self) -> dict:
        """Printable view of the configuration with secrets masked."""
        return {
            "directory": str(self.directory),
            "name": self.name,
            "hash_secret": "***" if self.hash_secret else "",
            "password": "***" if self.password else "",
            "group_by": self.group_by,
            "entries_by": self.entries_by,
            "flush_interval_seconds": self.flush_interval_seconds,
            "user_agent_blacklist": list(self.user_agent_blacklist),
        }


class Settings:
    def __init__(self) -> None:
        self.env: str = os.getenv("ENV", "dev").lower()
        self.is_prod: bool = self.env in {"prod", "production"}
        self.is_dev: bool = not self.is_prod

        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Сховище щоденних файлів: {directory}/{YYYY}/{MM}/{DD}/{name}{YYYY-MM-DD}
        self.analytics_directory: Path = Path(
            os.getenv("ANALYTICS_DIRECTORY") or BASE_DIR / "data" / "analytics"
        )
        self.analytics_name: str = os.getenv("ANALYTICS_NAME", "analytics-")
        self.hash_secret: str = os.getenv("ANALYTICS_HASH_SECRET", "")
        self.dashboard_password: str = os.getenv("ANALYTICS_PASSWORD", "")
        self.group_by: int = _int_env("ANALYTICS_GROUP_BY", 1)
        self.entries_by: int = _int_env("ANALYTICS_ENTRIES_BY", 1)
        self.flush_interval_seconds: int = _int_env("ANALYTICS_FLUSH_SECONDS", 60)
        self.user_agent_blacklist: Tuple[str, ...] = _list_env(
            "ANALYTICS_UA_BLACKLIST", DEFAULT_USER_AGENT_BLACKLIST
        )

        self.dashboard_path: str = "/" + os.getenv("ANALYTICS_DASHBOARD_PATH", "/analytics").strip("/")
        # Behind a reverse proxy the client address arrives in X-Forwarded-For.
        self.trust_forwarded: bool = (
            os.getenv("ANALYTICS_RECORD_TRUST_FORWARDED", "false").lower() == "true"
        )

    def analytics_config(self) -> AnalyticsConfig:
        return AnalyticsConfig(
            directory=self.analytics_directory,
            name=self.analytics_name,
            hash_secret=self.hash_secret,
            password=self.dashboard_password,
            group_by=self.group_by,
            entries_by=self.entries_by,
            flush_interval_seconds=self.flush_interval_seconds,
            user_agent_blacklist=self.user_agent_blacklist,
        )


settings = Settings()
