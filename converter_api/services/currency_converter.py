"""Currency conversion and exchange-rate lookups with caching.

The service sits between the HTTP layer and the rate providers. Every public
operation follows the same flow: validate input, derive a cache key, serve
from cache when possible, otherwise ask the selected provider and cache the
result. Restricted currencies are rejected for conversions and stripped from
every rate map handed back to callers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from time import perf_counter
from typing import Dict, List, Tuple

from converter_api.errors import (
    InvalidArgumentError,
    OperationNotAllowedError,
    RateUnavailableError,
)
from converter_api.logging import rate_log_extra
from converter_api.providers.base import BaseRateProvider
from converter_api.providers.registry import ProviderRegistry
from converter_api.providers.schemas import ExchangeRateSet

from .cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL, InMemoryRateCache, RateCache
from .fx_conversion import convert_amount, to_decimal
from .pagination import PaginatedResult, PaginationParams, paginate

logger = logging.getLogger(__name__)

DEFAULT_RESTRICTED_CURRENCIES: Tuple[str, ...] = ("TRY", "PLN", "THB", "MXN")
ALL_SYMBOLS = "all"

HistoricalEntry = Tuple[str, Dict[str, Decimal]]


@dataclass(frozen=True)
class ConversionRequest:
    """Amount to convert between two currencies, optionally at a past date."""

    from_currency: str
    to_currency: str
    amount: Decimal
    date: date | None = None


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: Decimal
    converted_amount: Decimal
    exchange_rate: Decimal
    date: date


def symbols_key(symbols: Iterable[str] | None) -> str:
    """Deterministic cache-key fragment for a symbol set."""

    normalized = _normalize_symbols(symbols)
    if not normalized:
        return ALL_SYMBOLS
    return "_".join(normalized)


def conversion_cache_key(from_currency: str, to_currency: str, on_date: date | None) -> str:
    if on_date is None:
        return f"latest_{from_currency}_{to_currency}"
    return f"historical_{on_date.isoformat()}_{from_currency}_{to_currency}"


def latest_rates_cache_key(base: str, symbols: Iterable[str] | None) -> str:
    return f"latest_rates_{base}_{symbols_key(symbols)}"


def historical_cache_key(
    start_date: date,
    end_date: date,
    base: str,
    symbols: Iterable[str] | None,
    pagination: PaginationParams,
) -> str:
    return (
        f"historical_period_{start_date.isoformat()}_{end_date.isoformat()}_{base}_"
        f"{symbols_key(symbols)}_page{pagination.page_number}_size{pagination.page_size}"
    )


class CurrencyConverterService:
    """Resolve conversions and rate queries through a cache and a provider."""

    def __init__(
        self,
        providers: ProviderRegistry,
        cache: RateCache | None = None,
        *,
        restricted_currencies: Iterable[str] = DEFAULT_RESTRICTED_CURRENCIES,
        cache_ttl: timedelta = DEFAULT_TTL,
        provider_name: str | None = None,
    ) -> None:
        if cache_ttl <= timedelta(0):
            raise ValueError("cache_ttl must be positive")
        self._providers = providers
        self._cache: RateCache = cache if cache is not None else InMemoryRateCache()
        self._restricted: Tuple[str, ...] = tuple(
            dict.fromkeys(code.strip().upper() for code in restricted_currencies if code.strip())
        )
        self._cache_ttl = cache_ttl
        self._provider_name = provider_name

    @property
    def restricted_currencies(self) -> Tuple[str, ...]:
        return self._restricted

    def is_restricted(self, code: str) -> bool:
        return code.strip().upper() in self._restricted

    def convert(self, request: ConversionRequest | None) -> ConversionResult:
        """Convert ``request.amount`` using the latest or date-specific rate."""

        if request is None:
            raise InvalidArgumentError("Conversion request must be provided")
        if not _is_present(request.from_currency) or not _is_present(request.to_currency):
            raise InvalidArgumentError("From currency and To currency must be specified")

        from_currency = request.from_currency.strip().upper()
        to_currency = request.to_currency.strip().upper()
        if self.is_restricted(from_currency) or self.is_restricted(to_currency):
            raise OperationNotAllowedError(
                "Currency conversion involving restricted currencies "
                f"({', '.join(self._restricted)}) is not allowed"
            )
        amount = self._validate_amount(request.amount)

        key = conversion_cache_key(from_currency, to_currency, request.date)
        rate_set = self._cache.get(key)
        if rate_set is not None:
            logger.info(
                "Serving %s->%s rate from cache",
                from_currency,
                to_currency,
                extra=rate_log_extra(event="rates.convert", base=from_currency, cache="hit", key=key),
            )
        else:
            provider = self._provider()
            start = perf_counter()
            if request.date is not None:
                rate_set = provider.get_by_date(request.date, from_currency, [to_currency])
            else:
                rate_set = provider.get_latest(from_currency, [to_currency])
            rate_set = self._filter_rate_set(rate_set)
            self._cache.set(key, rate_set, self._cache_ttl)
            logger.info(
                "Fetched %s->%s rate from provider",
                from_currency,
                to_currency,
                extra=rate_log_extra(
                    event="rates.convert",
                    base=from_currency,
                    cache="miss",
                    provider=provider.name,
                    key=key,
                    duration_ms=(perf_counter() - start) * 1000,
                ),
            )

        rate = rate_set.rates.get(to_currency)
        if rate is None:
            raise RateUnavailableError(
                f"Exchange rate from {from_currency} to {to_currency} not available"
            )

        converted = convert_amount(amount, rate)
        logger.info("Converted %s %s to %s %s at rate %s", amount, from_currency, converted, to_currency, rate)
        return ConversionResult(
            from_currency=from_currency,
            to_currency=to_currency,
            amount=amount,
            converted_amount=converted,
            exchange_rate=rate,
            date=rate_set.date,
        )

    def get_latest_rates(self, base_currency: str, symbols: Sequence[str] | None = None) -> ExchangeRateSet:
        """Return the latest rates for ``base_currency``, optionally limited to ``symbols``."""

        if not _is_present(base_currency):
            raise InvalidArgumentError("Base currency must be specified")

        base = base_currency.strip().upper()
        targets = _normalize_symbols(symbols) or None
        key = latest_rates_cache_key(base, targets)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info(
                "Retrieved latest exchange rates for %s from cache",
                base,
                extra=rate_log_extra(event="rates.latest", base=base, cache="hit", key=key),
            )
            return cached

        provider = self._provider()
        start = perf_counter()
        result = self._filter_rate_set(provider.get_latest(base, targets))
        self._cache.set(key, result, self._cache_ttl)
        logger.info(
            "Fetched latest exchange rates for %s from provider",
            base,
            extra=rate_log_extra(
                event="rates.latest",
                base=base,
                cache="miss",
                provider=provider.name,
                symbols=targets,
                key=key,
                duration_ms=(perf_counter() - start) * 1000,
            ),
        )
        return result

    def get_historical_rates(
        self,
        start_date: date,
        end_date: date,
        base_currency: str,
        symbols: Sequence[str] | None = None,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResult[HistoricalEntry]:
        """Return one page of date entries between two dates, newest first."""

        if not _is_present(base_currency):
            raise InvalidArgumentError("Base currency must be specified")
        if start_date > end_date:
            raise InvalidArgumentError("Start date must be before or equal to end date")

        base = base_currency.strip().upper()
        targets = _normalize_symbols(symbols) or None
        page = pagination or PaginationParams(page_number=1, page_size=10)
        key = historical_cache_key(start_date, end_date, base, targets, page)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info(
                "Retrieved historical rates for %s from %s to %s from cache",
                base,
                start_date,
                end_date,
                extra=rate_log_extra(event="rates.historical", base=base, cache="hit", key=key),
            )
            return cached

        provider = self._provider()
        start = perf_counter()
        history = provider.get_range(start_date, end_date, base, targets)
        history.without(self._restricted)

        entries: List[HistoricalEntry] = sorted(
            history.rates.items(), key=lambda item: item[0], reverse=True
        )
        result = paginate(entries, page)
        self._cache.set(key, result, self._cache_ttl)
        logger.info(
            "Retrieved %s days of historical rates for %s",
            result.total_count,
            base,
            extra=rate_log_extra(
                event="rates.historical",
                base=base,
                cache="miss",
                provider=provider.name,
                symbols=targets,
                key=key,
                duration_ms=(perf_counter() - start) * 1000,
            ),
        )
        return result

    def _provider(self) -> BaseRateProvider:
        return self._providers.resolve(self._provider_name)

    def _filter_rate_set(self, rate_set: ExchangeRateSet) -> ExchangeRateSet:
        return rate_set.without(self._restricted)

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        try:
            value = to_decimal(amount)
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid amount: {amount!r}") from exc
        if not value.is_finite() or value <= 0:
            raise InvalidArgumentError("Amount must be greater than zero")
        return value


def _is_present(value: str | None) -> bool:
    return value is not None and bool(str(value).strip())


def _normalize_symbols(symbols: Iterable[str] | None) -> List[str]:
    if not symbols:
        return []
    return sorted({str(code).strip().upper() for code in symbols if str(code).strip()})


def init_currency_converter(app) -> CurrencyConverterService:
    """Build the rate service from app config and attach it to the Flask app."""

    providers: ProviderRegistry | None = app.extensions.get("provider_registry")  # type: ignore[assignment]
    if providers is None:
        from converter_api.providers.registry import init_provider_registry

        providers = init_provider_registry(app)

    service = CurrencyConverterService(
        providers,
        InMemoryRateCache(max_entries=int(app.config.get("RATE_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES))),
        restricted_currencies=app.config.get("RESTRICTED_CURRENCIES", DEFAULT_RESTRICTED_CURRENCIES),
        cache_ttl=timedelta(seconds=int(app.config.get("RATE_CACHE_TTL_SECONDS", 1800))),
    )
    app.extensions["currency_converter"] = service
    return service
