"""Shared date helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def today() -> date:
    """Return the current local calendar date."""

    return date.today()


def days_before(reference: date, days: int) -> date:
    """Return the date `days` calendar days before `reference`."""

    return reference - timedelta(days=days)
