"""Small helpers shared by the JSON controllers."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping, Optional

from flask import current_app, jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    InternalError,
    MissingCredentialError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Query parameter aliases kept for existing dashboard clients.
_ALIASES = {
    "month": ("month", "bulan"),
    "year": ("year", "tahun"),
    "category": ("category", "jabatan"),
}


def json_ok(data: Any = None, *, status: int = 200, **extra: Any):
    body = {"success": True, "data": data}
    body.update(extra)
    return jsonify(body), status


def json_error(message: str, status: int, **extra: Any):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def status_for(exc: DomainError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, MissingCredentialError):
        return 401
    if isinstance(exc, AuthenticationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    return 500


def domain_error_response(exc: DomainError):
    status = status_for(exc)
    if isinstance(exc, ConflictError):
        return json_error(str(exc), status, code=exc.kind.value)
    if isinstance(exc, InternalError) or status == 500:
        return json_error("Internal server error", 500)
    return json_error(str(exc), status)


def unexpected_error_response(exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    if current_app.config.get("EXPOSE_ERRORS"):
        return json_error("Internal server error", 500, error=str(exc))
    return json_error("Internal server error", 500)


def current_operator() -> Optional[str]:
    operator = session.get("operator_id")
    return str(operator) if operator not in (None, "") else None


def operator_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_operator() is None:
            return json_error("Authentication required", 401)
        return view(*args, **kwargs)

    return wrapper


def query_value(args: Mapping[str, Any], name: str) -> Optional[str]:
    """Read a query parameter, honouring the Indonesian aliases."""

    for key in _ALIASES.get(name, (name,)):
        value = args.get(key)
        if value not in (None, ""):
            return value
    return None


def client_ip() -> str:
    # ProxyFix (when enabled) has already rewritten remote_addr.
    return request.remote_addr or ""


def normalized_args(args: Mapping[str, Any]) -> dict:
    """Query parameters as a plain dict with aliases folded into canonical names."""

    out = {key: args.get(key) for key in args.keys()}
    for name, keys in _ALIASES.items():
        out[name] = query_value(args, name)
        for alias in keys[1:]:
            out.pop(alias, None)
    return out
