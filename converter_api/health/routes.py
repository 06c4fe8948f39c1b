"""Route handlers for health checks."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from converter_api.providers.registry import ProviderRegistry
from converter_api.schemas import HealthStatusSchema

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    def get(self):
        registry: ProviderRegistry | None = current_app.extensions.get("provider_registry")  # type: ignore[assignment]
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "currency-converter-api"),
            "default_provider": registry.default_name if registry else None,
            "providers": registry.names() if registry else [],
        }
