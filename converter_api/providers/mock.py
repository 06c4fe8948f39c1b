"""Mock provider implementation for testing and local development."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal

from converter_api.services.fx_conversion import RebaseError, rebase_rates
from converter_api.utils.datetime import utc_today

from .base import BaseRateProvider, ProviderError
from .schemas import ExchangeRateSet, HistoricalRateSet

# Units of each currency per 1 EUR.
EUR_REFERENCE_RATES: dict[str, Decimal] = {
    "EUR": Decimal("1"),
    "USD": Decimal("1.08"),
    "GBP": Decimal("0.85"),
    "JPY": Decimal("162.5"),
    "CHF": Decimal("0.95"),
    "CAD": Decimal("1.47"),
    "TRY": Decimal("35.1"),
    "PLN": Decimal("4.32"),
    "THB": Decimal("38.9"),
    "MXN": Decimal("19.8"),
}


class MockRateProvider(BaseRateProvider):
    """Deterministic provider returning synthetic ECB-style data.

    Weekend dates roll back to the preceding Friday, mirroring how the real
    upstream reports the last published trading day.
    """

    name = "mock"

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    def get_latest(self, base: str, symbols: Sequence[str] | None = None) -> ExchangeRateSet:
        effective = self._trading_day(self._today or utc_today())
        return ExchangeRateSet(base=base, date=effective, rates=self._rates_for(base, symbols))

    def get_by_date(
        self, on_date: date, base: str, symbols: Sequence[str] | None = None
    ) -> ExchangeRateSet:
        effective = self._trading_day(on_date)
        return ExchangeRateSet(base=base, date=effective, rates=self._rates_for(base, symbols))

    def get_range(
        self,
        start_date: date,
        end_date: date,
        base: str,
        symbols: Sequence[str] | None = None,
    ) -> HistoricalRateSet:
        if start_date > end_date:
            raise ProviderError("start_date must not be after end_date")

        rates: dict[str, dict[str, Decimal]] = {}
        current = start_date
        while current <= end_date:
            if current.weekday() < 5:
                rates[current.isoformat()] = self._rates_for(base, symbols)
            current += timedelta(days=1)

        return HistoricalRateSet(base=base, start_date=start_date, end_date=end_date, rates=rates)

    @staticmethod
    def _rates_for(base: str, symbols: Sequence[str] | None) -> dict[str, Decimal]:
        target_base = str(base).strip().upper()
        try:
            rebased = rebase_rates(EUR_REFERENCE_RATES, target_base)
        except RebaseError as exc:
            raise ProviderError(str(exc)) from exc

        rebased.pop(target_base, None)
        if symbols:
            wanted = {str(code).strip().upper() for code in symbols}
            rebased = {code: value for code, value in rebased.items() if code in wanted}
        return rebased

    @staticmethod
    def _trading_day(value: date) -> date:
        while value.weekday() >= 5:
            value -= timedelta(days=1)
        return value
