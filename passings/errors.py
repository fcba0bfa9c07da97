from __future__ import annotations
from typing import Any, Optional

class PassingsError(Exception):
    pass

class TransientFetchError(PassingsError):
    """Bulk fetch failed or returned a non-success status. Safe to retry."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class StreamError(PassingsError):
    """The push channel delivered an error payload or an undecodable message."""

class MalformedEvent(PassingsError):
    """A record is missing id, timestamp or category, or one of them is invalid."""

    def __init__(self, message: str, record: Any = None):
        super().__init__(message)
        self.record = record
