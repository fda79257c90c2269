"""Currencies blueprint serving cached CBAR rates."""

from __future__ import annotations

from flask_smorest import Blueprint

blp = Blueprint("Currencies", __name__, description="CBAR daily exchange rates")

from . import routes  # noqa: E402,F401
