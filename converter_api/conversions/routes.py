"""Route handlers for currency conversion."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from converter_api.schemas import (
    ConversionQuerySchema,
    ConversionRequestSchema,
    ConversionResultSchema,
    ErrorMessageSchema,
)
from converter_api.services.currency_converter import (
    ConversionRequest,
    ConversionResult,
    CurrencyConverterService,
)
from converter_api.validation import validate_currency_code

from . import blp


def _service() -> CurrencyConverterService:
    return current_app.extensions["currency_converter"]


def _convert(data) -> ConversionResult:
    request = ConversionRequest(
        from_currency=validate_currency_code(data.get("from_currency"), field="from_currency"),
        to_currency=validate_currency_code(data.get("to_currency"), field="to_currency"),
        amount=data["amount"],
        date=data.get("date"),
    )
    return _service().convert(request)


@blp.route("/convert")
class Conversion(MethodView):
    @blp.arguments(ConversionQuerySchema, location="query")
    @blp.response(200, ConversionResultSchema())
    @blp.alt_response(400, schema=ErrorMessageSchema, description="Invalid or restricted currency")
    @blp.alt_response(404, schema=ErrorMessageSchema, description="Rate not available")
    @blp.alt_response(502, schema=ErrorMessageSchema, description="Upstream provider unavailable")
    def get(self, query_params):
        """Convert an amount using query parameters."""
        return _convert(query_params)

    @blp.arguments(ConversionRequestSchema)
    @blp.response(200, ConversionResultSchema())
    @blp.alt_response(400, schema=ErrorMessageSchema, description="Invalid or restricted currency")
    @blp.alt_response(404, schema=ErrorMessageSchema, description="Rate not available")
    @blp.alt_response(502, schema=ErrorMessageSchema, description="Upstream provider unavailable")
    def post(self, payload):
        """Convert an amount described by a JSON body."""
        return _convert(payload)
