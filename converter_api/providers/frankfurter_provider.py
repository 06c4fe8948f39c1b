"""ECB reference rates provider backed by the Frankfurter API."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from converter_api.providers.base import BaseRateProvider, ProviderError
from converter_api.providers.schemas import ExchangeRateSet, HistoricalRateSet

from .frankfurter_client import FrankfurterAPIError, FrankfurterClient, FrankfurterClientConfig

logger = logging.getLogger(__name__)


class FrankfurterProvider(BaseRateProvider):
    """Provider that fetches ECB rates via the Frankfurter API."""

    name = "frankfurter"

    def __init__(self, client: FrankfurterClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> FrankfurterProvider:
        client_config = FrankfurterClientConfig(
            base_url=str(config.get("FRANKFURTER_API_BASE_URL", "https://api.frankfurter.app")),
            timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 5)),
            max_retries=int(config.get("FRANKFURTER_API_MAX_RETRIES", 3)),
            backoff_seconds=float(config.get("FRANKFURTER_API_BACKOFF_SECONDS", 0.5)),
            default_base=str(config.get("FRANKFURTER_DEFAULT_BASE", "EUR")),
        )
        return cls(FrankfurterClient(client_config))

    def get_latest(self, base: str, symbols: Sequence[str] | None = None) -> ExchangeRateSet:
        logger.info("Fetching latest exchange rates for %s from Frankfurter", base)
        try:
            payload = self._client.latest(base, symbols)
        except FrankfurterAPIError as exc:
            raise ProviderError(str(exc)) from exc
        return self._to_rate_set(payload, base)

    def get_by_date(
        self, on_date: date, base: str, symbols: Sequence[str] | None = None
    ) -> ExchangeRateSet:
        logger.info("Fetching exchange rates for %s on %s from Frankfurter", base, on_date)
        try:
            payload = self._client.on_date(on_date, base, symbols)
        except FrankfurterAPIError as exc:
            raise ProviderError(str(exc)) from exc
        return self._to_rate_set(payload, base)

    def get_range(
        self,
        start_date: date,
        end_date: date,
        base: str,
        symbols: Sequence[str] | None = None,
    ) -> HistoricalRateSet:
        logger.info(
            "Fetching exchange rates for %s from %s to %s from Frankfurter",
            base,
            start_date.isoformat(),
            end_date.isoformat(),
        )
        try:
            payload = self._client.time_series(start_date, end_date, base, symbols)
        except FrankfurterAPIError as exc:
            raise ProviderError(str(exc)) from exc

        rates = payload.get("rates")
        if not isinstance(rates, Mapping):
            raise ProviderError("Frankfurter time series 'rates' must be an object")

        # The upstream trims the range to published trading days; keep the requested bounds.
        try:
            return HistoricalRateSet(
                base=payload.get("base") or base,
                start_date=start_date,
                end_date=end_date,
                rates=dict(rates),
            )
        except (AttributeError, TypeError, ValueError, ArithmeticError) as exc:
            raise ProviderError(f"Malformed Frankfurter time series payload: {exc}") from exc

    @staticmethod
    def _to_rate_set(payload: Mapping[str, Any], requested_base: str) -> ExchangeRateSet:
        try:
            return ExchangeRateSet(
                base=payload.get("base") or requested_base,
                date=payload["date"],
                rates=payload["rates"],
            )
        except (KeyError, AttributeError, TypeError, ValueError, ArithmeticError) as exc:
            raise ProviderError(f"Malformed Frankfurter rates payload: {exc}") from exc
