"""Abstract interface for exchange-rate providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from .schemas import ExchangeRateSet, HistoricalRateSet


class ProviderError(Exception):
    """Raised when an upstream provider cannot fulfill a request."""


class BaseRateProvider(ABC):
    """Defines the interface all exchange-rate providers must implement."""

    name: str

    @abstractmethod
    def get_latest(self, base: str, symbols: Sequence[str] | None = None) -> ExchangeRateSet:
        """Retrieve the most recent rates for ``base``, optionally limited to ``symbols``."""

    @abstractmethod
    def get_by_date(
        self, on_date: date, base: str, symbols: Sequence[str] | None = None
    ) -> ExchangeRateSet:
        """Retrieve the rates published for ``on_date``."""

    @abstractmethod
    def get_range(
        self,
        start_date: date,
        end_date: date,
        base: str,
        symbols: Sequence[str] | None = None,
    ) -> HistoricalRateSet:
        """Retrieve a time series of rates between two dates, inclusive."""
