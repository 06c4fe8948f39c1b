"""Logging setup and request correlation for the converter API.

Every handler installed here carries a :class:`RequestContextFilter`, so each
line (plain or JSON) names the ``X-Request-ID`` it belongs to. Rate-service
lines add structured fields through :func:`rate_log_extra`; the outcome of the
last cache lookup is also remembered on ``g`` and reported on the per-request
summary line.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from flask import g, has_request_context, request
from werkzeug.exceptions import HTTPException

REQUEST_ID_HEADER = "X-Request-ID"
NO_REQUEST_ID = "-"

PLAIN_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"

LOGGING_CONFIG_FLAG = "_logging_configured"
REQUEST_LOGGING_FLAG = "_request_logging_configured"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_CURRENCY_ARGS = ("from", "to", "base", "from_currency", "to_currency")


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` onto records that do not already carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = _current_request_id() or NO_REQUEST_ID
        return True


class JSONLogFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def __init__(self, app_name: str | None = None) -> None:
        super().__init__()
        self._app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._app_name:
            payload["app"] = self._app_name
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if payload.get("request_id") == NO_REQUEST_ID:
            del payload["request_id"]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def setup_logging(app) -> None:
    """Install a single root handler configured from ``LOG_LEVEL``/``LOG_JSON_ENABLED``."""

    if app.config.get(LOGGING_CONFIG_FLAG):
        return

    level = _resolve_level(app.config.get("LOG_LEVEL"))
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if app.config.get("LOG_JSON_ENABLED"):
        handler.setFormatter(JSONLogFormatter(app.config.get("APP_NAME")))
    else:
        handler.setFormatter(logging.Formatter(PLAIN_LOG_FORMAT))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    app.logger.handlers = []
    app.logger.setLevel(level)
    app.logger.propagate = True

    app.config[LOGGING_CONFIG_FLAG] = True


def init_request_logging(app) -> None:
    """Assign request ids and log one summary line per request."""

    if app.config.get(REQUEST_LOGGING_FLAG):
        return

    @app.before_request
    def _start_request_logging():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        g.request_start = time.perf_counter()
        g._request_logged = False

    @app.after_request
    def _log_request(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)

        app.logger.info(
            "Request handled",
            extra=_request_log_extra(event="request.completed", status=response.status_code),
        )
        g._request_logged = True
        return response

    @app.teardown_request
    def _log_teardown(exc: BaseException | None):
        if exc is None or getattr(g, "_request_logged", False):
            return

        status = exc.code if isinstance(exc, HTTPException) and exc.code else 500
        app.logger.error(
            "Request failed",
            extra=_request_log_extra(event="request.failed", status=status, error=str(exc)),
        )
        g._request_logged = True

    app.config[REQUEST_LOGGING_FLAG] = True


def rate_log_extra(
    *,
    event: str,
    base: str,
    cache: str,
    provider: str | None = None,
    symbols: Iterable[str] | None = None,
    key: str | None = None,
    duration_ms: float | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Structured fields attached to rate-service log lines."""

    if has_request_context():
        g.rate_cache = cache

    return _drop_none(
        {
            "event": event,
            "base": base,
            "cache": cache,
            "provider": provider,
            "symbols": ",".join(symbols) if symbols else None,
            "cache_key": key,
            "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
            "error": error,
        }
    )


def _request_log_extra(*, event: str, status: int, error: str | None = None) -> dict[str, Any]:
    start = getattr(g, "request_start", None)
    duration_ms = (time.perf_counter() - start) * 1000 if start is not None else None
    currencies = _requested_currencies()
    return _drop_none(
        {
            "event": event,
            "route": request.url_rule.rule if request.url_rule else request.path,
            "method": request.method,
            "path": request.path,
            "status": status,
            "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
            "request_id": getattr(g, "request_id", None),
            "client_ip": request.remote_addr,
            "currencies": ",".join(currencies) if currencies else None,
            "cache": getattr(g, "rate_cache", None),
            "error": error,
        }
    )


def _requested_currencies() -> list[str]:
    """Currency codes named by the query string or JSON body, in request order."""

    sources: list[Any] = [request.args]
    if request.is_json:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            sources.append(body)

    codes: list[str] = []
    for source in sources:
        for name in _CURRENCY_ARGS:
            value = source.get(name)
            if isinstance(value, str) and value.strip():
                code = value.strip().upper()
                if code not in codes:
                    codes.append(code)
    return codes


def _current_request_id() -> str | None:
    if not has_request_context():
        return None
    return getattr(g, "request_id", None)


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _resolve_level(level_name: Any) -> int:
    if isinstance(level_name, int):
        return level_name
    level = logging.getLevelName(str(level_name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO
