"""Custom exception classes for the application."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when the recorder configuration is invalid."""


class InvalidDateError(ValueError):
    """Raised when a dashboard date parameter is not YYYY-MM-DD."""
    def __init__(self, message: str, value: str | None = None) -> None:
        super().__init__(message)
        self.value = value


class UnauthorizedError(Exception):
    """Raised when the dashboard access key is missing or wrong."""
