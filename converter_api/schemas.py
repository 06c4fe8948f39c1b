"""Marshmallow schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load
from marshmallow.validate import Length

from converter_api.services.pagination import DEFAULT_PAGE_NUMBER, DEFAULT_PAGE_SIZE
from converter_api.validation import parse_symbols


def _require_positive(value):
    if value is not None and value <= 0:
        raise ValidationError("Amount must be greater than zero.")


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()
    default_provider = fields.String()
    providers = fields.List(fields.String())


class ConversionQuerySchema(Schema):
    """Query parameters for ``GET /convert``."""

    class Meta:
        unknown = EXCLUDE

    from_currency = fields.String(required=True, data_key="from", validate=Length(min=1))
    to_currency = fields.String(required=True, data_key="to", validate=Length(min=1))
    amount = fields.Decimal(required=True, allow_nan=False, validate=_require_positive)
    date = fields.Date(load_default=None)


class ConversionRequestSchema(Schema):
    """JSON body for ``POST /convert``."""

    from_currency = fields.String(required=True, validate=Length(min=1))
    to_currency = fields.String(required=True, validate=Length(min=1))
    amount = fields.Decimal(required=True, allow_nan=False, validate=_require_positive)
    date = fields.Date(load_default=None, allow_none=True)


class ConversionResultSchema(Schema):
    from_currency = fields.String(required=True)
    to_currency = fields.String(required=True)
    amount = fields.Decimal(required=True, as_string=True)
    converted_amount = fields.Decimal(required=True, as_string=True)
    exchange_rate = fields.Decimal(required=True, as_string=True)
    date = fields.Date(required=True)


class SymbolsQuerySchema(Schema):
    """Comma-separated ``symbols`` parameter split into a list."""

    symbols = fields.String(load_default=None)

    @post_load
    def split_symbols(self, data, **kwargs):
        data["symbols"] = parse_symbols(data.get("symbols"))
        return data


class LatestRatesQuerySchema(SymbolsQuerySchema):
    """Query parameters for ``GET /latest``."""

    class Meta:
        unknown = EXCLUDE

    base = fields.String(load_default="EUR", validate=Length(min=1))


class HistoricalRatesQuerySchema(SymbolsQuerySchema):
    """Query parameters for ``GET /historical``."""

    class Meta:
        unknown = EXCLUDE

    start_date = fields.Date(required=True)
    end_date = fields.Date(load_default=None)
    base = fields.String(load_default="EUR", validate=Length(min=1))
    page_number = fields.Integer(load_default=DEFAULT_PAGE_NUMBER)
    # Out-of-range values are clamped by PaginationParams rather than rejected.
    page_size = fields.Integer(load_default=DEFAULT_PAGE_SIZE)


class ExchangeRateSetSchema(Schema):
    base = fields.String(required=True)
    date = fields.Date(required=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Decimal(as_string=True), required=True)


class HistoricalEntrySchema(Schema):
    date = fields.String(required=True)
    rates = fields.Dict(keys=fields.String(), values=fields.Decimal(as_string=True), required=True)


class HistoricalRatesPageSchema(Schema):
    """Envelope for a paginated list of historical rate days."""

    base = fields.String(required=True)
    start_date = fields.Date(required=True)
    end_date = fields.Date(required=True)
    items = fields.List(fields.Nested(HistoricalEntrySchema), required=True)
    page_number = fields.Integer(required=True)
    page_size = fields.Integer(required=True)
    total_count = fields.Integer(required=True)
    total_pages = fields.Integer(required=True)


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)
