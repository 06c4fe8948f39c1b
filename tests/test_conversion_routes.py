from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from converter_api.providers import ProviderError

CONVERT_URL = "/api/v1/currency-conversion/convert"


@pytest.fixture()
def stub_client(stubbed_app):
    with stubbed_app.test_client() as client:
        yield client


def test_convert_get_returns_result(stub_client):
    response = stub_client.get(CONVERT_URL, query_string={"from": "usd", "to": "EUR", "amount": "100"})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["from_currency"] == "USD"
    assert payload["to_currency"] == "EUR"
    assert Decimal(payload["amount"]) == Decimal("100")
    assert Decimal(payload["converted_amount"]) == Decimal("85")
    assert Decimal(payload["exchange_rate"]) == Decimal("0.85")
    assert payload["date"] == "2024-03-08"


def test_convert_post_accepts_json_body(stub_client, stub_provider):
    response = stub_client.post(
        CONVERT_URL,
        json={
            "from_currency": "USD",
            "to_currency": "GBP",
            "amount": "10",
            "date": "2024-03-10",
        },
    )

    assert response.status_code == 200
    assert Decimal(response.get_json()["converted_amount"]) == Decimal("7.8")
    assert stub_provider.calls[0].method == "get_by_date"
    assert stub_provider.calls[0].on_date == date(2024, 3, 10)


def test_convert_restricted_currency_is_rejected(stub_client, stub_provider):
    response = stub_client.get(CONVERT_URL, query_string={"from": "USD", "to": "TRY", "amount": "5"})

    assert response.status_code == 400
    message = response.get_json()["message"]
    assert "restricted currencies" in message
    assert "TRY" in message
    assert stub_provider.calls == []


def test_convert_unknown_target_returns_not_found(stub_client):
    response = stub_client.get(CONVERT_URL, query_string={"from": "USD", "to": "CHF", "amount": "5"})

    assert response.status_code == 404
    assert "not available" in response.get_json()["message"]


def test_convert_upstream_failure_returns_bad_gateway(stub_client, stub_provider):
    stub_provider.error = ProviderError("connection refused")

    response = stub_client.get(CONVERT_URL, query_string={"from": "USD", "to": "EUR", "amount": "5"})

    assert response.status_code == 502
    payload = response.get_json()
    assert payload["message"] == "Upstream provider unavailable."
    assert "connection refused" in payload["detail"]


def test_convert_invalid_code_returns_bad_request(stub_client):
    response = stub_client.get(CONVERT_URL, query_string={"from": "U5D", "to": "EUR", "amount": "5"})

    assert response.status_code == 400
    assert response.get_json()["field"] == "from_currency"


@pytest.mark.parametrize(
    "query",
    [
        {"from": "USD", "to": "EUR"},
        {"from": "USD", "to": "EUR", "amount": "0"},
        {"from": "USD", "to": "EUR", "amount": "-1"},
        {"from": "USD", "to": "EUR", "amount": "abc"},
        {"to": "EUR", "amount": "1"},
    ],
)
def test_convert_schema_errors_return_unprocessable(stub_client, query):
    response = stub_client.get(CONVERT_URL, query_string=query)

    assert response.status_code == 422


def test_convert_with_mock_provider(client):
    response = client.get(CONVERT_URL, query_string={"from": "EUR", "to": "USD", "amount": "2"})

    assert response.status_code == 200
    assert Decimal(response.get_json()["converted_amount"]) == Decimal("2.16")


def test_response_carries_request_id(stub_client):
    response = stub_client.get(
        CONVERT_URL,
        query_string={"from": "USD", "to": "EUR", "amount": "1"},
        headers={"X-Request-ID": "req-42"},
    )

    assert response.headers["X-Request-ID"] == "req-42"
