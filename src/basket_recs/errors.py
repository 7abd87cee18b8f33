"""
errors.py

Exception hierarchy for the recommendation layer.

Propagation policy:
  - MalformedRecord is recovered per row by the retriever (skip and count).
  - StoreUnavailable / StoreTimeout / UnknownMethod reach the caller unmodified.
  - Nothing here is retried; retry policy belongs to the caller.
"""
from __future__ import annotations

from typing import Any, Optional


class RecommendationError(Exception):
    """Base class for every error raised by basket_recs."""


class StoreUnavailable(RecommendationError):
    """A rule or top-item query failed, or returned something that is not a list of rows."""

    def __init__(self, message: str, *, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.table = table


class StoreTimeout(StoreUnavailable):
    """A store query timed out or was cancelled before returning."""


class MalformedRecord(RecommendationError):
    """A single stored rule row could not be decoded."""

    def __init__(self, message: str, *, raw: Any = None) -> None:
        super().__init__(message)
        self.raw = raw


class ConfigurationError(RecommendationError):
    """Missing or inconsistent configuration."""


class UnknownMethod(ConfigurationError):
    """A mining method identifier that has no table pair."""

    def __init__(self, method: Any) -> None:
        super().__init__(f"Unknown mining method: {method!r}")
        self.method = method
