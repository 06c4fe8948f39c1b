"""Route handlers for latest and historical exchange rates."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from converter_api.schemas import (
    ErrorMessageSchema,
    ExchangeRateSetSchema,
    HistoricalRatesPageSchema,
    HistoricalRatesQuerySchema,
    LatestRatesQuerySchema,
)
from converter_api.services.currency_converter import CurrencyConverterService
from converter_api.services.pagination import PaginationParams
from converter_api.utils.datetime import utc_today
from converter_api.validation import validate_currency_code

from . import blp


def _service() -> CurrencyConverterService:
    return current_app.extensions["currency_converter"]


@blp.route("/latest")
class LatestRates(MethodView):
    @blp.arguments(LatestRatesQuerySchema, location="query")
    @blp.response(200, ExchangeRateSetSchema())
    @blp.alt_response(502, schema=ErrorMessageSchema, description="Upstream provider unavailable")
    def get(self, query_params):
        base = validate_currency_code(query_params["base"], field="base")
        return _service().get_latest_rates(base, query_params.get("symbols"))


@blp.route("/historical")
class HistoricalRates(MethodView):
    @blp.arguments(HistoricalRatesQuerySchema, location="query")
    @blp.response(200, HistoricalRatesPageSchema())
    @blp.alt_response(400, schema=ErrorMessageSchema, description="Invalid currency or date range")
    @blp.alt_response(502, schema=ErrorMessageSchema, description="Upstream provider unavailable")
    def get(self, query_params):
        base = validate_currency_code(query_params["base"], field="base")
        start_date = query_params["start_date"]
        end_date = query_params.get("end_date") or utc_today()
        pagination = PaginationParams(
            page_number=query_params["page_number"],
            page_size=query_params["page_size"],
        )

        page = _service().get_historical_rates(
            start_date,
            end_date,
            base,
            query_params.get("symbols"),
            pagination,
        )
        return {
            "base": base,
            "start_date": start_date,
            "end_date": end_date,
            "items": [{"date": day, "rates": rates} for day, rates in page.items],
            "page_number": page.page_number,
            "page_size": page.page_size,
            "total_count": page.total_count,
            "total_pages": page.total_pages,
        }
