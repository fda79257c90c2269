"""Logging setup, JSON formatter and request correlation for the rates service."""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import UTC, date, datetime
from typing import Any

from flask import Flask, g, has_request_context, request
from werkzeug.exceptions import HTTPException

REQUEST_ID_HEADER = "X-Request-ID"
LOGGING_CONFIG_FLAG = "_logging_configured"
REQUEST_LOGGING_FLAG = "_request_logging_configured"

# Attributes every LogRecord carries; anything else on a record came in through `extra=`.
RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class JSONLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = _json_safe(value)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def setup_logging(app: Flask) -> None:
    """Install one stream handler on the root logger according to app config."""

    if app.config.get(LOGGING_CONFIG_FLAG):
        return

    level = _resolve_level(app.config.get("LOG_LEVEL", "INFO"))
    handler = logging.StreamHandler()
    handler.setLevel(level)
    if app.config.get("LOG_JSON_ENABLED", False):
        handler.setFormatter(JSONLogFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                app.config.get("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")
            )
        )

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    logging.getLogger("werkzeug").setLevel(level)
    app.logger.handlers = []
    app.logger.setLevel(level)
    app.logger.propagate = True

    app.config[LOGGING_CONFIG_FLAG] = True


def init_request_logging(app: Flask) -> None:
    """Attach request lifecycle logging with correlation IDs."""

    if app.config.get(REQUEST_LOGGING_FLAG):
        return

    @app.before_request
    def _start_request_logging():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        g.request_start = time.perf_counter()

    @app.after_request
    def _log_request(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)

        app.logger.info(
            "Request handled",
            extra={
                "event": "request.completed",
                "route": request.url_rule.rule if request.url_rule else request.path,
                "method": request.method,
                "status": response.status_code,
                "duration_ms": _request_duration_ms(),
                "request_id": request_id,
            },
        )
        g._request_logged = True
        return response

    @app.teardown_request
    def _log_failure(exc: BaseException | None):
        if exc is None or getattr(g, "_request_logged", False):
            return

        app.logger.error(
            "Request failed",
            extra={
                "event": "request.failed",
                "route": request.url_rule.rule if request.url_rule else request.path,
                "method": request.method,
                "status": getattr(exc, "code", 500) if isinstance(exc, HTTPException) else 500,
                "duration_ms": _request_duration_ms(),
                "request_id": getattr(g, "request_id", None),
                "error": str(exc),
            },
        )
        g._request_logged = True

    app.config[REQUEST_LOGGING_FLAG] = True


def feed_log_extra(
    *,
    event: str,
    feed_date: date,
    status: str,
    duration_ms: float | None = None,
    count: int | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Build the structured `extra` mapping attached to feed fetch log lines."""

    payload: dict[str, Any] = {
        "event": event,
        "feed_date": feed_date.isoformat(),
        "status": status,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "count": count,
        "request_id": _current_request_id(),
        "source": "cbar",
    }
    if error:
        payload["error"] = error
    return {key: value for key, value in payload.items() if value is not None}


def _request_duration_ms() -> float | None:
    start = getattr(g, "request_start", None)
    if start is None:
        return None
    return round((time.perf_counter() - start) * 1000, 3)


def _current_request_id() -> str | None:
    if not has_request_context():
        return None
    return getattr(g, "request_id", None)


def _json_safe(value: Any) -> Any:
    if isinstance(value, str | int | float | bool) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set):
        return [_json_safe(item) for item in value]
    return str(value)


def _resolve_level(level_name: Any) -> int:
    if isinstance(level_name, int):
        return level_name
    if not level_name:
        return logging.INFO
    return getattr(logging, str(level_name).upper(), logging.INFO)
