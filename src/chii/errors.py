"""Exception types raised by the caching and trending core.

Absent entities are not errors: fetchers return ``None`` or leave the id out
of the result map. A busy trending lock is not an error either.
"""

from __future__ import annotations


class ChiiError(Exception):
    """Base class for errors raised by chii."""


class InvalidPeriodError(ChiiError, ValueError):
    """Raised when a trending period has no known duration."""

    def __init__(self, period: object):
        self.period = period
        super().__init__(f"Invalid trending period: {period!r}")


class StoreError(ChiiError):
    """Raised when the relational store fails to answer a query."""
