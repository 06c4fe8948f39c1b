"""Application-wide error types and Flask error handlers."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify

from converter_api.providers.base import ProviderError
from converter_api.providers.registry import ProviderConfigurationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for API-level errors."""

    status_code: int = 400

    def __init__(
        self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}


class InvalidArgumentError(APIError, ValueError):
    """Caller-supplied input failed a precondition."""

    status_code = 400


class OperationNotAllowedError(APIError):
    """A business rule forbids the requested operation."""

    status_code = 400


class RateUnavailableError(APIError):
    """The upstream answered but has no rate for the requested pair."""

    status_code = 404


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    422: "Submitted data is invalid.",
    500: "An unexpected error occurred.",
    502: "Upstream provider unavailable.",
}


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        message = error.message or DEFAULT_STATUS_MESSAGES.get(error.status_code, "Request failed.")
        logger.warning("Request rejected: %s", message, extra={"status": error.status_code})

        response = {"message": message}
        if error.payload:
            response.update(error.payload)
        return jsonify(response), error.status_code

    @app.errorhandler(ProviderError)
    def handle_provider_error(error: ProviderError):
        logger.error("Upstream provider failure: %s", error, extra={"status": 502})
        return jsonify({"message": DEFAULT_STATUS_MESSAGES[502], "detail": str(error)}), 502

    @app.errorhandler(ProviderConfigurationError)
    def handle_configuration_error(error: ProviderConfigurationError):
        logger.error("Provider misconfiguration: %s", error, extra={"status": 500})
        return jsonify({"message": DEFAULT_STATUS_MESSAGES[500]}), 500
