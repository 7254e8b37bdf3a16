"""Logging configuration and utilities."""
from __future__ import annotations

import logging
import os
import re


class _LoggingState:
    """
    Module-level logging state container.

    Tracks whether the root handler is configured and whether client
    addresses must be masked in log output.
    """

    configured: bool = False
    redact_addresses: bool = False

    def reset(self) -> None:
        """Reset state for testing."""
        self.configured = False
        self.redact_addresses = False


_state = _LoggingState()

_IPV4_RE = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")
# Full eight-group form, or any compressed form containing "::".
_IPV6_RE = re.compile(
    r"(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}"
    r"|(?:[0-9a-fA-F]{0,4}:){1,7}:[0-9a-fA-F:]*[0-9a-fA-F]"
)


class AddressRedactionFilter(logging.Filter):
    """
    Маскує IP-адреси у тексті логів.

    Активний лише коли увімкнено хешування відвідувачів: якщо адреси
    анонімізуються у сховищі, вони не повинні з'являтися і в логах.
    Якщо щось іде не так, лог не змінюється.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not _state.redact_addresses:
            return True
        try:
            msg = record.getMessage()
            masked = _IPV6_RE.sub("[ADDR]", _IPV4_RE.sub("[ADDR]", msg))
            if masked != msg:
                record.msg = masked
                record.args = ()
        except (TypeError, ValueError):
            pass
        return True

    def __repr__(self) -> str:
        return "AddressRedactionFilter()"


class ColorFormatter(logging.Formatter):
    """
    Додає кольори до рівнів логування для виводу в термінал.
    Працює як звичайний Formatter, але підміняє record.levelname.
    """

    RESET = "\033[0m"
    COLORS = {
        "DEBUG": "\033[36m",  # cyan
        "INFO": "\033[32m",  # green
        "WARNING": "\033[33m",  # yellow
        "ERROR": "\033[31m",  # red
        "CRITICAL": "\033[35m",  # magenta
    }

    def format(self, record: logging.LogRecord) -> str:
        original_levelname = record.levelname
        color = self.COLORS.get(original_levelname, "")
        if color:
            record.levelname = f"{color}{original_levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def set_address_redaction(enabled: bool) -> None:
    """
    Turn address masking on or off for every configured handler.

    The setting is process-wide, shared by every recorder in the process.
    """
    _state.redact_addresses = bool(enabled)


def setup_logging(default_level: int = logging.INFO) -> None:
    """
    Налаштовує єдиний root-логгер.
    Викликається один раз; усі інші логгери (у тому числі uvicorn)
    використовують той самий формат і хендлери.
    """
    root_logger = logging.getLogger()
    # Якщо хендлерів немає (pytest очистив), переналаштовуємо.
    if _state.configured and root_logger.handlers:
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, default_level)
    if not isinstance(level, int):
        level = default_level

    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.addFilter(AddressRedactionFilter())
    handler.setFormatter(
        ColorFormatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )
    root_logger.addHandler(handler)

    # Менше шуму від HTTP-доступів, але залишаємо помилки uvicorn
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _state.configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    setup_logging()
    return logging.getLogger(name)
