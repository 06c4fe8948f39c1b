"""Shared datetime helpers for enforcing UTC awareness."""

from __future__ import annotations

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def utc_today() -> date:
    """Return the current calendar date in UTC."""

    return utc_now().date()


def parse_iso_date(value: str | date) -> date:
    """Parse a ``yyyy-MM-dd`` string (or pass a date through unchanged)."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])
