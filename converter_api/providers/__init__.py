"""Provider interfaces and data structures for exchange-rate sources."""

from .base import BaseRateProvider, ProviderError
from .frankfurter_client import (
    FrankfurterAPIError,
    FrankfurterClient,
    FrankfurterClientConfig,
)
from .registry import ProviderConfigurationError, ProviderRegistry, build_registry
from .schemas import ExchangeRateSet, HistoricalRateSet

__all__ = [
    "BaseRateProvider",
    "ProviderError",
    "ProviderConfigurationError",
    "ProviderRegistry",
    "build_registry",
    "ExchangeRateSet",
    "HistoricalRateSet",
    "FrankfurterClient",
    "FrankfurterClientConfig",
    "FrankfurterAPIError",
]
