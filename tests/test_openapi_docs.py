from __future__ import annotations


def test_docs_swagger_ui(client):
    response = client.get("/docs/")
    assert response.status_code == 200
    assert b"Swagger" in response.data


def test_openapi_spec_lists_endpoints(client):
    response = client.get("/docs/openapi.json")
    assert response.status_code == 200
    data = response.get_json()
    assert data["info"]["title"] == "Currency Converter API"
    assert "/health" in data["paths"]
    assert "/api/v1/currency-conversion/convert" in data["paths"]
    assert {"get", "post"} <= set(data["paths"]["/api/v1/currency-conversion/convert"])
    assert "/api/v1/exchange-rates/latest" in data["paths"]
    assert "/api/v1/exchange-rates/historical" in data["paths"]
    assert "502" in data["paths"]["/api/v1/exchange-rates/latest"]["get"]["responses"]
