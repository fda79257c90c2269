"""Application-wide error types and Flask handlers."""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify


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


class ValidationError(APIError):
    """Error raised for request validation failures."""

    status_code = 422


class FutureDateRejected(APIError):
    """Raised before any I/O when rates are requested for a date after today."""

    status_code = 400


class CurrencyNotFound(APIError):
    """Raised when a code is absent from a successfully fetched snapshot."""

    status_code = 404


class UpstreamUnavailable(APIError):
    """Raised when the CBAR feed cannot be reached or answers with a non-2xx status.

    Transient; never cached, callers may retry.
    """

    status_code = 503


class MalformedFeed(APIError):
    """Raised when the CBAR feed is not well-formed or lacks the expected sections."""

    status_code = 502


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    422: "Submitted data is invalid.",
    502: "Upstream feed is malformed.",
    503: "Upstream feed unavailable. Please retry in a moment.",
}


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        message = error.message or DEFAULT_STATUS_MESSAGES.get(error.status_code, "Request failed.")

        response: dict[str, Any] = {"message": message}
        if error.payload:
            response.update(error.payload)

        field = error.payload.get("field")
        if field and "field_errors" not in response:
            response["field_errors"] = {str(field): [message]}

        return jsonify(response), error.status_code
