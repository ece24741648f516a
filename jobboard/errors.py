"""Error taxonomy and the JSON error handlers: ``{"error", "message", "details"?}``."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

log = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    kind = "server_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ApiError):
    """Malformed, missing or out-of-enum fields; ``details`` maps field -> reason."""

    status_code = 400
    kind = "validation_error"

    def __init__(self, errors: Dict[str, str], message: str = "Validation error"):
        super().__init__(message, details=dict(errors))
        self.errors = dict(errors)


class Unauthorized(ApiError):
    status_code = 401
    kind = "unauthorized"


class Forbidden(ApiError):
    status_code = 403
    kind = "forbidden"


class NotFound(ApiError):
    status_code = 404
    kind = "not_found"


class Conflict(ApiError):
    status_code = 409
    kind = "conflict"


class ServiceUnavailable(ApiError):
    status_code = 503
    kind = "service_unavailable"


class ReferencePropagationError(Exception):
    """A secondary back-reference write failed after its primary write succeeded."""


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(err: ApiError):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"error": (err.name or "error").lower().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        log.exception("Unhandled error: %s", err)
        return jsonify({"error": "server_error", "message": "Server error"}), 500
