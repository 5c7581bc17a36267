from __future__ import annotations


class TimestackError(Exception):
    pass


class InvalidCalendarValueError(TimestackError, ValueError):
    """Raised when a field set or zone cannot produce a calendar date-time."""


class UnknownLocaleError(TimestackError, ValueError):
    pass
