from __future__ import annotations

import json
import logging
from contextlib import contextmanager

import pytest
from flask import Flask

from converter_api.logging import (
    PLAIN_LOG_FORMAT,
    JSONLogFormatter,
    RequestContextFilter,
    init_request_logging,
    rate_log_extra,
    setup_logging,
)


class _MemoryHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@contextmanager
def isolate_logging():
    root = logging.getLogger()
    previous_handlers = root.handlers[:]
    previous_level = root.level
    try:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        yield root
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)


def test_json_log_formatter_renders_basic_fields():
    formatter = JSONLogFormatter()
    record = logging.LogRecord(
        name="converter_api.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg="Hello %s",
        args=("world",),
        exc_info=None,
    )
    record.request_id = "req-123"
    record.cache = "hit"

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "Hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "converter_api.test"
    assert "timestamp" in payload
    assert payload["request_id"] == "req-123"
    assert payload["cache"] == "hit"
    assert "lineno" not in payload


def test_setup_logging_enables_json_formatter_when_configured():
    app = Flask(__name__)
    app.config["LOG_JSON_ENABLED"] = True
    app.config["LOG_LEVEL"] = "DEBUG"

    with isolate_logging():
        setup_logging(app)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert app.logger.level == logging.DEBUG
        assert root.handlers, "Expected handler to be registered on root logger"
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JSONLogFormatter)


def test_setup_logging_uses_plain_formatter_by_default():
    app = Flask(__name__)
    app.config["LOG_JSON_ENABLED"] = False
    app.config["LOG_LEVEL"] = "WARNING"

    with isolate_logging():
        setup_logging(app)
        root = logging.getLogger()
        assert root.level == logging.WARNING
        handler = root.handlers[0]
        assert handler.formatter._style._fmt == PLAIN_LOG_FORMAT
        assert any(isinstance(f, RequestContextFilter) for f in handler.filters)


def test_request_context_filter_marks_lines_outside_requests():
    record = logging.makeLogRecord({"msg": "startup"})

    assert RequestContextFilter().filter(record) is True
    assert record.request_id == "-"
    assert "[-] startup" in logging.Formatter(PLAIN_LOG_FORMAT).format(record)


def test_json_log_formatter_adds_app_and_skips_placeholder_request_id():
    record = logging.makeLogRecord({"name": "converter_api", "msg": "ready", "request_id": "-"})

    payload = json.loads(JSONLogFormatter(app_name="currency-converter-api").format(record))

    assert payload["app"] == "currency-converter-api"
    assert "request_id" not in payload


def _make_test_app():
    app = Flask(__name__)
    app.config["TESTING"] = True

    @app.route("/ok")
    def ok():  # pragma: no cover - invoked via test client
        return "ok", 200

    @app.route("/boom")
    def boom():  # pragma: no cover - invoked via test client
        raise RuntimeError("boom")

    return app


def test_request_logging_emits_correlation_fields():
    app = _make_test_app()
    app.config["LOG_JSON_ENABLED"] = False

    with isolate_logging():
        setup_logging(app)
        init_request_logging(app)
        handler = _MemoryHandler()
        handler.setLevel(logging.INFO)
        logging.getLogger().addHandler(handler)
        client = app.test_client()
        response = client.get("/ok")

    records = [record for record in handler.records if record.message == "Request handled"]
    assert records
    record = records[-1]
    assert record.event == "request.completed"
    assert record.method == "GET"
    assert record.path == "/ok"
    assert record.status == 200
    assert record.request_id == response.headers["X-Request-ID"]
    assert record.duration_ms is not None and record.duration_ms >= 0
    assert record.route == "/ok"


def test_request_logging_reuses_incoming_request_id():
    app = _make_test_app()

    with isolate_logging():
        setup_logging(app)
        init_request_logging(app)
        response = app.test_client().get("/ok", headers={"X-Request-ID": "abc"})

    assert response.headers["X-Request-ID"] == "abc"


def test_request_logging_captures_errors():
    app = _make_test_app()

    with isolate_logging():
        setup_logging(app)
        init_request_logging(app)
        handler = _MemoryHandler()
        handler.setLevel(logging.INFO)
        logging.getLogger().addHandler(handler)
        client = app.test_client()
        with pytest.raises(RuntimeError):
            client.get("/boom")

    records = [record for record in handler.records if record.message == "Request failed"]
    assert records
    record = records[-1]
    assert record.event == "request.failed"
    assert record.status == 500
    assert record.request_id
    assert record.duration_ms is not None and record.duration_ms >= 0
    assert "boom" in record.error


def test_rate_log_extra_drops_empty_fields():
    extra = rate_log_extra(
        event="rates.latest",
        base="USD",
        cache="miss",
        provider="frankfurter",
        symbols=["EUR", "GBP"],
        duration_ms=1.23456,
    )

    assert extra == {
        "event": "rates.latest",
        "base": "USD",
        "cache": "miss",
        "provider": "frankfurter",
        "symbols": "EUR,GBP",
        "duration_ms": 1.235,
    }


def test_service_logs_cache_outcome(service, caplog):
    with caplog.at_level(logging.INFO, logger="converter_api.services.currency_converter"):
        service.get_latest_rates("USD")
        service.get_latest_rates("USD")

    outcomes = [
        record.cache for record in caplog.records if getattr(record, "event", None) == "rates.latest"
    ]
    assert outcomes == ["miss", "hit"]


def test_request_logging_reports_currencies_and_cache_outcome(stubbed_app, caplog):
    client = stubbed_app.test_client()
    url = "/api/v1/currency-conversion/convert"
    query = {"from": "usd", "to": "EUR", "amount": "1"}

    with caplog.at_level(logging.INFO, logger=stubbed_app.logger.name):
        client.get(url, query_string=query)
        client.get(url, query_string=query)

    handled = [record for record in caplog.records if record.getMessage() == "Request handled"]
    assert [record.cache for record in handled] == ["miss", "hit"]
    assert all(record.currencies == "USD,EUR" for record in handled)


def test_request_logging_reads_currencies_from_json_body(stubbed_app, caplog):
    client = stubbed_app.test_client()

    with caplog.at_level(logging.INFO, logger=stubbed_app.logger.name):
        client.post(
            "/api/v1/currency-conversion/convert",
            json={"from_currency": "gbp", "to_currency": "EUR", "amount": "1"},
        )

    handled = [record for record in caplog.records if record.getMessage() == "Request handled"]
    assert handled[-1].currencies == "GBP,EUR"
