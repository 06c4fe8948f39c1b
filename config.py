"""Application configuration classes."""

from __future__ import annotations

import os

SUPPORTED_CURRENCY_PROVIDERS = {"frankfurter", "mock"}
PROVIDER_ALIASES = {"ecb": "frankfurter", "frankfurter_ecb": "frankfurter"}


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _split_codes(raw: str) -> tuple[str, ...]:
    return tuple(code.strip().upper() for code in raw.split(",") if code.strip())


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "currency-converter-api"
    SECRET_KEY = _get_env("SECRET_KEY", "change-me")
    REQUEST_TIMEOUT_SECONDS = int(_get_env("REQUEST_TIMEOUT_SECONDS", "5"))
    DEFAULT_CURRENCY_PROVIDER = _get_env("DEFAULT_CURRENCY_PROVIDER", "frankfurter")
    FRANKFURTER_API_BASE_URL = _get_env("FRANKFURTER_API_BASE_URL", "https://api.frankfurter.app")
    FRANKFURTER_DEFAULT_BASE = _get_env("FRANKFURTER_DEFAULT_BASE", "EUR")
    FRANKFURTER_API_MAX_RETRIES = int(_get_env("FRANKFURTER_API_MAX_RETRIES", "3"))
    FRANKFURTER_API_BACKOFF_SECONDS = float(_get_env("FRANKFURTER_API_BACKOFF_SECONDS", "0.5"))
    RATE_CACHE_TTL_SECONDS = int(_get_env("RATE_CACHE_TTL_SECONDS", "1800"))
    RATE_CACHE_MAX_ENTRIES = int(_get_env("RATE_CACHE_MAX_ENTRIES", "1024"))
    RESTRICTED_CURRENCIES = _split_codes(_get_env("RESTRICTED_CURRENCIES", "TRY,PLN,THB,MXN"))
    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test suite; never talks to the network."""

    DEBUG = False
    TESTING = True
    DEFAULT_CURRENCY_PROVIDER = "mock"
    FRANKFURTER_API_MAX_RETRIES = 1
    FRANKFURTER_API_BACKOFF_SECONDS = 0.0


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If the configured provider or cache settings are invalid.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_provider(config_cls)
    _validate_cache(config_cls)
    return config_cls


def _validate_provider(config_cls: type[BaseConfig]) -> None:
    normalized = _normalize_provider(config_cls.DEFAULT_CURRENCY_PROVIDER)
    if normalized not in SUPPORTED_CURRENCY_PROVIDERS:
        raise ValueError(
            f"Unsupported DEFAULT_CURRENCY_PROVIDER '{config_cls.DEFAULT_CURRENCY_PROVIDER}'. "
            f"Allowed values: {sorted(SUPPORTED_CURRENCY_PROVIDERS)}"
        )
    config_cls.DEFAULT_CURRENCY_PROVIDER = normalized


def _validate_cache(config_cls: type[BaseConfig]) -> None:
    if config_cls.RATE_CACHE_TTL_SECONDS <= 0:
        raise ValueError("RATE_CACHE_TTL_SECONDS must be a positive integer")
    if config_cls.RATE_CACHE_MAX_ENTRIES <= 0:
        raise ValueError("RATE_CACHE_MAX_ENTRIES must be a positive integer")


def _normalize_provider(value: str | None) -> str:
    if not value:
        return ""
    normalized = value.strip().lower()
    return PROVIDER_ALIASES.get(normalized, normalized)
