"""Registry and selector for exchange-rate providers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, Dict, List

from .base import BaseRateProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], BaseRateProvider]

DEFAULT_PROVIDER_NAME = "frankfurter"


class ProviderConfigurationError(RuntimeError):
    """Raised when the configured default provider is not registered."""


class ProviderRegistry:
    """Maps provider names to factories and resolves them at call time.

    Names are case-insensitive. Unknown names fall back to the default
    provider; a missing default is a configuration error.
    """

    def __init__(self, default_name: str = DEFAULT_PROVIDER_NAME) -> None:
        if not default_name or not default_name.strip():
            raise ValueError("Default provider name cannot be empty.")
        self._default_name = default_name.strip().lower()
        self._factories: Dict[str, ProviderFactory] = {}
        self._instances: Dict[str, BaseRateProvider] = {}
        self._lock = threading.Lock()

    @property
    def default_name(self) -> str:
        return self._default_name

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register a provider factory under ``name``; later registrations win."""

        if not name or not name.strip():
            raise ValueError("Provider name cannot be empty.")
        normalized = name.strip().lower()
        if normalized in self._factories:
            logger.info("Replacing registration for currency provider '%s'", normalized)
        with self._lock:
            self._factories[normalized] = factory
            self._instances.pop(normalized, None)
        logger.debug("Registered currency provider: %s", normalized)

    def unregister(self, name: str) -> None:
        """Remove a provider registration; primarily for testing."""

        normalized = name.strip().lower()
        with self._lock:
            self._factories.pop(normalized, None)
            self._instances.pop(normalized, None)

    def names(self) -> List[str]:
        """Return the registered provider identifiers."""

        return sorted(self._factories.keys())

    def resolve(self, name: str | None = None) -> BaseRateProvider:
        """Return the provider registered as ``name`` or the configured default."""

        requested = (name or self._default_name).strip().lower()
        if requested in self._factories:
            return self._instantiate(requested)

        logger.warning(
            "Currency provider '%s' not found, using default provider '%s'",
            requested,
            self._default_name,
        )
        if self._default_name not in self._factories:
            raise ProviderConfigurationError(
                f"Default currency provider '{self._default_name}' is not registered."
            )
        return self._instantiate(self._default_name)

    def _instantiate(self, name: str) -> BaseRateProvider:
        with self._lock:
            provider = self._instances.get(name)
            if provider is None:
                provider = self._factories[name]()
                self._instances[name] = provider
            return provider


def build_registry(config: Mapping[str, Any]) -> ProviderRegistry:
    """Create a registry with every built-in provider registered explicitly."""

    from .frankfurter_provider import FrankfurterProvider
    from .mock import MockRateProvider

    registry = ProviderRegistry(
        default_name=str(config.get("DEFAULT_CURRENCY_PROVIDER") or DEFAULT_PROVIDER_NAME)
    )

    def frankfurter_factory() -> FrankfurterProvider:
        return FrankfurterProvider.from_config(config)

    registry.register(FrankfurterProvider.name, frankfurter_factory)
    registry.register(MockRateProvider.name, MockRateProvider)
    return registry


def init_provider_registry(app) -> ProviderRegistry:
    """Attach the provider registry to the Flask app, failing fast on bad config."""

    registry = build_registry(app.config)
    registry.resolve()
    app.extensions["provider_registry"] = registry
    logger.info(
        "Currency providers registered: %s (default: %s)",
        ", ".join(registry.names()),
        registry.default_name,
    )
    return registry
