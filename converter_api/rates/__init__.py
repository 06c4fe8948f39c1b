"""Exchange-rate query blueprint."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("ExchangeRates", __name__, description="Latest and historical exchange rates")

from . import routes  # noqa: E402,F401
