"""Dataclasses describing normalized exchange-rate provider payloads."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict

from converter_api.utils.datetime import parse_iso_date


def _normalize_code(code: str) -> str:
    normalized = str(code).strip().upper()
    if not normalized.isascii():
        raise ValueError(f"Currency code must be ASCII: {code!r}")
    return normalized


def normalize_rates(rates: Mapping[str, Decimal | float | int | str]) -> Dict[str, Decimal]:
    """Return a copy of ``rates`` with upper-case codes and Decimal values."""

    normalized: Dict[str, Decimal] = {}
    for code, value in rates.items():
        normalized[_normalize_code(code)] = Decimal(str(value))
    return normalized


@dataclass
class ExchangeRateSet:
    """Rates for one base currency on one effective date.

    The ``rates`` mapping is the only mutable part; the service strips
    restricted currencies from it before the set is cached or returned.
    """

    base: str
    date: date
    rates: Dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.base = _normalize_code(self.base)
        self.date = parse_iso_date(self.date)
        self.rates = normalize_rates(self.rates)

    def without(self, codes: Iterable[str]) -> "ExchangeRateSet":
        """Remove ``codes`` from the rate mapping in place and return self."""

        for code in codes:
            self.rates.pop(_normalize_code(code), None)
        return self


@dataclass
class HistoricalRateSet:
    """Rates for one base currency across a date range, keyed by ISO date."""

    base: str
    start_date: date
    end_date: date
    rates: Dict[str, Dict[str, Decimal]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.base = _normalize_code(self.base)
        self.start_date = parse_iso_date(self.start_date)
        self.end_date = parse_iso_date(self.end_date)
        self.rates = {
            parse_iso_date(day).isoformat(): normalize_rates(day_rates)
            for day, day_rates in self.rates.items()
        }

    def without(self, codes: Iterable[str]) -> "HistoricalRateSet":
        """Remove ``codes`` from every date's rate mapping in place."""

        normalized = [_normalize_code(code) for code in codes]
        for day_rates in self.rates.values():
            for code in normalized:
                day_rates.pop(code, None)
        return self
