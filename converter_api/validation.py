"""Validation helpers for request parameters."""

from __future__ import annotations

from collections.abc import Iterable

from converter_api.errors import InvalidArgumentError


def parse_symbols(raw: str | Iterable[str] | None) -> list[str] | None:
    """Split a comma-separated symbol list into trimmed upper-case codes.

    Returns None when no symbols were supplied so callers can treat the
    request as "all currencies".
    """

    if raw is None:
        return None
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    symbols = [str(part).strip().upper() for part in parts if str(part).strip()]
    return symbols or None


def validate_currency_code(value: str | None, *, field: str = "currency_code") -> str:
    """Ensure a currency code is present and plain ASCII letters."""

    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"'{field}' is required.", payload={"field": field})

    normalized = str(value).strip().upper()
    if not (normalized.isascii() and normalized.isalpha()):
        raise InvalidArgumentError(
            f"Unsupported currency code '{normalized}'. Please use a valid ISO 4217 code.",
            payload={"field": field, "code": normalized},
        )
    return normalized
