"""Schemas for API requests and responses."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()


class DateQuerySchema(Schema):
    date = fields.Date(required=True, format="%Y-%m-%d")


class RateQuerySchema(DateQuerySchema):
    currency = fields.String(required=True, validate=validate.Length(min=1, max=10))


class CleanupQuerySchema(Schema):
    daysToKeep = fields.Integer(
        load_default=None, validate=validate.Range(min=0)
    )


class CurrencyRecordSchema(Schema):
    code = fields.String(required=True)
    name = fields.String(required=True)
    rate = fields.Float(required=True)


class CacheStatusSchema(Schema):
    date = fields.String(required=True)
    isCached = fields.Boolean(required=True)
    cachedCount = fields.Integer(allow_none=True)
    cacheSource = fields.String(required=True)


class CleanupResultSchema(Schema):
    message = fields.String(required=True)
    daysKept = fields.String(required=True)
    deleted = fields.Integer(required=True)


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)
