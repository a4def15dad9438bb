"""Helpers shared by the Flask controllers.

Authentication itself is handled elsewhere; it leaves user_id, organization_id
and role in the session, and the controllers turn them into an explicit Actor.
"""

from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..employees.model import Actor
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (AuthorizationError, 403),
    (ConfigurationError, 501),
)


def current_actor() -> Actor:
    try:
        role = Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role")
    return Actor(
        user_id=int(session["user_id"]),
        organization_id=int(session["organization_id"]),
        role=role,
    )


def error_response(exc: DomainError):
    for exc_type, code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return jsonify({"success": False, "message": str(exc)}), code
    return jsonify({"success": False, "message": str(exc)}), 400


def api_login_required(view):
    """Reject anonymous callers and translate domain errors to JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session or "organization_id" not in session:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            logger.info("%s %s rejected: %s", request.method, request.path, e)
            return error_response(e)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def optional_date(value):
    return parse_iso_date(value) if value else None


def ok(payload=None, code: int = 200):
    body = {"success": True}
    if payload is not None:
        body["data"] = payload
    return jsonify(body), code
