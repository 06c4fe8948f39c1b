from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from converter_api.providers.http_client import HTTPClient, HTTPClientConfig, HTTPClientError

logger = logging.getLogger(__name__)

FRANKFURTER_DEFAULT_BASE = "EUR"


class FrankfurterAPIError(RuntimeError):
    """Raised when the Frankfurter API returns an error response."""


class FrankfurterClientConfig:
    """Configuration parameters for the Frankfurter client."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        default_base: str = FRANKFURTER_DEFAULT_BASE,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.default_base = default_base.upper()


class FrankfurterClient:
    """HTTP client for Frankfurter built on the shared wrapper."""

    def __init__(
        self,
        config: FrankfurterClientConfig,
        client: HTTPClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or HTTPClient(
            HTTPClientConfig(
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
            )
        )

    def latest(self, base: str | None = None, symbols: Sequence[str] | None = None) -> dict[str, Any]:
        return self.get("latest", params=self.build_params(base, symbols))

    def on_date(
        self,
        on_date: date,
        base: str | None = None,
        symbols: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        return self.get(on_date.isoformat(), params=self.build_params(base, symbols))

    def time_series(
        self,
        start_date: date,
        end_date: date,
        base: str | None = None,
        symbols: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        path = f"{start_date.isoformat()}..{end_date.isoformat()}"
        return self.get(path, params=self.build_params(base, symbols))

    def build_params(
        self, base: str | None = None, symbols: Sequence[str] | None = None
    ) -> dict[str, str]:
        """Build query parameters; ``base`` is omitted when it is the API default."""

        params: dict[str, str] = {}
        if base and base.strip().upper() != self._config.default_base:
            params["base"] = base.strip().upper()
        if symbols:
            params["symbols"] = ",".join(symbols)
        return params

    def get(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        logger.debug("Requesting Frankfurter %s with params %s", path, dict(params or {}))
        try:
            payload = self._client.get(path, params=params or None)
        except HTTPClientError as exc:
            logger.error("Frankfurter request %s failed: %s", path, exc)
            raise FrankfurterAPIError(str(exc)) from exc

        if "error" in payload:
            raise FrankfurterAPIError(f"Frankfurter API error payload: {payload['error']}")

        if "rates" not in payload:
            raise FrankfurterAPIError("Frankfurter API response missing 'rates' field")

        return payload
