"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from converter_api import create_app  # noqa: E402
from converter_api.providers import (  # noqa: E402
    BaseRateProvider,
    ExchangeRateSet,
    HistoricalRateSet,
    ProviderRegistry,
)
from converter_api.services.currency_converter import CurrencyConverterService  # noqa: E402


@dataclass(slots=True)
class ProviderCall:
    """Record of a provider interaction captured for assertions."""

    method: str
    base: str
    symbols: tuple[str, ...] | None = None
    on_date: date | None = None
    start_date: date | None = None
    end_date: date | None = None


class StubRateProvider(BaseRateProvider):
    """Provider returning canned rates and recording every call.

    ``error`` is raised from every method while set.
    """

    def __init__(
        self,
        name: str = "stub",
        latest: Mapping[str, Decimal | float | str] | None = None,
        effective_date: date = date(2024, 3, 8),
        history: Mapping[str, Mapping[str, Decimal | float | str]] | None = None,
    ) -> None:
        self.name = name
        self.latest = dict(latest or {"EUR": Decimal("0.85"), "GBP": Decimal("0.78")})
        self.effective_date = effective_date
        self.history = {day: dict(rates) for day, rates in (history or {}).items()}
        self.error: Exception | None = None
        self.calls: list[ProviderCall] = []

    def get_latest(self, base: str, symbols: Sequence[str] | None = None) -> ExchangeRateSet:
        self.calls.append(ProviderCall("get_latest", base, _as_tuple(symbols)))
        self._maybe_raise()
        return ExchangeRateSet(base=base, date=self.effective_date, rates=self._pick(symbols))

    def get_by_date(
        self, on_date: date, base: str, symbols: Sequence[str] | None = None
    ) -> ExchangeRateSet:
        self.calls.append(ProviderCall("get_by_date", base, _as_tuple(symbols), on_date=on_date))
        self._maybe_raise()
        return ExchangeRateSet(base=base, date=self.effective_date, rates=self._pick(symbols))

    def get_range(
        self,
        start_date: date,
        end_date: date,
        base: str,
        symbols: Sequence[str] | None = None,
    ) -> HistoricalRateSet:
        self.calls.append(
            ProviderCall(
                "get_range",
                base,
                _as_tuple(symbols),
                start_date=start_date,
                end_date=end_date,
            )
        )
        self._maybe_raise()
        return HistoricalRateSet(
            base=base,
            start_date=start_date,
            end_date=end_date,
            rates={day: dict(rates) for day, rates in self.history.items()},
        )

    def _pick(self, symbols: Sequence[str] | None) -> dict[str, Decimal | float | str]:
        if not symbols:
            return dict(self.latest)
        return {code: rate for code, rate in self.latest.items() if code in symbols}

    def _maybe_raise(self) -> None:
        if self.error is not None:
            raise self.error


def _as_tuple(symbols: Sequence[str] | None) -> tuple[str, ...] | None:
    return tuple(symbols) if symbols is not None else None


def consecutive_days(start: date, count: int, rates: Mapping[str, Decimal | float | str]):
    """History mapping with ``count`` consecutive days starting at ``start``."""

    return {
        (start + timedelta(days=offset)).isoformat(): dict(rates) for offset in range(count)
    }


@pytest.fixture()
def app():
    """Flask application wired to the mock provider."""

    flask_app = create_app("testing")
    yield flask_app


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture()
def stub_provider() -> StubRateProvider:
    return StubRateProvider()


@pytest.fixture()
def provider_registry(stub_provider) -> ProviderRegistry:
    registry = ProviderRegistry(default_name="stub")
    registry.register("stub", lambda: stub_provider)
    return registry


@pytest.fixture()
def service(provider_registry) -> CurrencyConverterService:
    return CurrencyConverterService(provider_registry)


@pytest.fixture()
def stubbed_app(app, service):
    """Application whose rate service talks to ``stub_provider``."""

    app.extensions["currency_converter"] = service
    return app


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Return the path to bundled JSON fixtures."""

    return ROOT_DIR / "tests" / "fixtures"


@pytest.fixture()
def load_json_fixture(fixtures_dir: Path) -> Callable[[str], dict]:
    """Load a JSON fixture by filename."""

    def _loader(filename: str) -> dict:
        path = fixtures_dir / filename
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    return _loader
