from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .pagination import Page
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (ConflictError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def status_for(error: DomainError) -> int:
    for error_cls, status in _STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status
    return 400


def ok(data: Any = None, *, status: int = 200, count: Optional[int] = None, message: Optional[str] = None, page: Optional[Page] = None):
    body: dict[str, Any] = {"success": True}
    if count is not None:
        body["count"] = count
    if page is not None:
        body["pagination"] = page.pagination()
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _handle_domain_error(err: DomainError):
        status = status_for(err)
        if status >= 403:
            logger.info("%s: %s", type(err).__name__, err)
        return fail(str(err), status)

    @app.errorhandler(404)
    def _handle_not_found(err):
        return fail("Route not found", 404)

    @app.errorhandler(405)
    def _handle_method_not_allowed(err):
        return fail("Method not allowed", 405)

    @app.errorhandler(Exception)
    def _handle_unexpected(err: Exception):
        if isinstance(err, HTTPException):
            return fail(err.description or err.name, err.code or 500)
        logger.exception("Unhandled error")
        return fail("Server Error", 500)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
