"""
Exceptions shared across the project.

Every failure the record client or the dashboard can raise derives from
YogaStudioError, so the UI layers only need a single except clause.
"""

from __future__ import annotations

from typing import Optional


class YogaStudioError(Exception):
    """Base class for all project errors."""


class TransportError(YogaStudioError):
    """The request never produced an HTTP response (DNS, connection, timeout)."""


class RecordStoreError(YogaStudioError):
    """
    The record store answered with a non-2xx status.

    The message is the raw response body, exactly as the server sent it.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(YogaStudioError):
    """A form was submitted with missing required fields."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))
