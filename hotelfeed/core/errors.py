"""HOTELFEED — Feed Error Taxonomy."""

from typing import Optional


class FeedError(Exception):
    """Base class for activity feed failures."""


class SourceUnavailableError(FeedError):
    """Raised when a backing-store fetch for one source fails or times out."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(message)


class MalformedRowError(FeedError):
    """Raised when a single source row cannot be normalized."""

    def __init__(self, reason: str, source: str = "", row: Optional[dict] = None):
        self.source = source
        self.reason = reason
        self.row = row or {}
        super().__init__(f"{source or 'unknown'} row malformed: {reason}")


class FilterValidationError(FeedError):
    """Raised when a filter selection cannot be turned into a FilterState."""


class AggregationError(FeedError):
    """Raised when a full merge fails. The feed is never partially built."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(message)
