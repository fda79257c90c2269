"""Route handlers for rate lookups and cache maintenance."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from cbar_rates.errors import ValidationError
from cbar_rates.schemas import (
    CacheStatusSchema,
    CleanupQuerySchema,
    CleanupResultSchema,
    CurrencyRecordSchema,
    DateQuerySchema,
    RateQuerySchema,
)
from cbar_rates.services import get_coordinator, get_sweeper

from . import blp


@blp.route("")
class CurrencyList(MethodView):
    @blp.arguments(DateQuerySchema, location="query")
    @blp.response(200, CurrencyRecordSchema(many=True))
    def get(self, args):
        """List every currency rate published for a date."""
        current_app.logger.info("Received request for currencies on date: %s", args["date"])
        return get_coordinator(current_app).get_rates(args["date"])


@blp.route("/rate")
class CurrencyRate(MethodView):
    @blp.arguments(RateQuerySchema, location="query")
    @blp.response(200, CurrencyRecordSchema())
    def get(self, args):
        """Return the rate of one currency for a date."""
        code = args["currency"].strip()
        if not code:
            raise ValidationError("'currency' is required.", payload={"field": "currency"})
        return get_coordinator(current_app).get_rate(args["date"], code)


@blp.route("/cache/status")
class CacheStatusView(MethodView):
    @blp.arguments(DateQuerySchema, location="query")
    @blp.response(200, CacheStatusSchema())
    def get(self, args):
        status = get_coordinator(current_app).cache_status(args["date"])
        return {
            "date": status.date.isoformat(),
            "isCached": status.is_cached,
            "cachedCount": status.cached_count,
            "cacheSource": "database" if status.is_cached else "CBAR API",
        }


@blp.route("/cache/cleanup")
class CacheCleanup(MethodView):
    @blp.arguments(CleanupQuerySchema, location="query")
    @blp.response(200, CleanupResultSchema())
    def post(self, args):
        """Delete cached snapshots older than `daysToKeep` days."""
        sweeper = get_sweeper(current_app)
        days = args.get("daysToKeep")
        if days is None:
            days = sweeper.default_retention_days
        current_app.logger.info("Manual cache cleanup requested for data older than %s days", days)
        deleted = sweeper.sweep(days)
        return {
            "message": "Cache cleanup completed successfully",
            "daysKept": str(days),
            "deleted": deleted,
        }
