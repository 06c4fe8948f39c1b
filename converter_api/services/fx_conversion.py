"""Shared decimal helpers for currency conversion and rate rebasing."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, getcontext, localcontext
from typing import Dict, Mapping, MutableMapping


ROUNDING_PRECISION = 28


def get_decimal_context():
    """Return the shared Decimal context used across conversions."""

    context = getcontext().copy()
    context.prec = ROUNDING_PRECISION
    context.rounding = ROUND_HALF_EVEN
    return context


def normalize_currency(code: str) -> str:
    """Normalize a currency code to canonical uppercase form."""

    if code is None or not str(code).strip():
        raise ValueError("Currency code cannot be blank.")
    normalized = str(code).strip().upper()
    if not normalized.isascii():
        raise ValueError(f"Currency code must be ASCII: {code!r}")
    return normalized


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert input into a Decimal using the shared context."""

    context = get_decimal_context()
    with localcontext(context):
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid decimal value: {value!r}") from exc


class RebaseError(ValueError):
    """Raised when rebasing rates fails due to missing data."""


def rebase_rates(rates: Mapping[str, Decimal], new_base: str) -> Dict[str, Decimal]:
    """Rebase a mapping of rates expressed against one base onto ``new_base``.

    The mapping must contain ``new_base`` itself (and the original base with
    a rate of 1 if it should survive the rebase).
    """

    normalized_rates: MutableMapping[str, Decimal] = {}
    for code, value in rates.items():
        normalized_rates[normalize_currency(code)] = to_decimal(value)

    target_base = normalize_currency(new_base)

    if target_base not in normalized_rates:
        raise RebaseError(f"Missing rate for {target_base} when rebasing rates.")

    base_rate = normalized_rates[target_base]
    if base_rate == 0:
        raise RebaseError(f"Cannot rebase using {target_base} with zero rate.")

    context = get_decimal_context()
    with localcontext(context):
        rebased: Dict[str, Decimal] = {}
        for code, value in normalized_rates.items():
            rebased[code] = value / base_rate

    return rebased


def convert_amount(amount: Decimal | int | float | str, rate: Decimal | int | float | str) -> Decimal:
    """Convert ``amount`` of the source currency using ``rate`` units per source unit."""

    context = get_decimal_context()
    with localcontext(context):
        return to_decimal(amount) * to_decimal(rate)
