"""JSON response envelope and bearer-auth helpers shared by controllers."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from flask import g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..core.result import ErrorKind, Result
from .tokens import TokenClaims, TokenService

STATUS_BY_ERROR: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.PRECONDITION_FAILED: 422,
    ErrorKind.DEPENDENCY_FAILURE: 503,
}


def api_response(message: str, data: Any = None, *, status: int = 200):
    body = {
        "success": 200 <= status < 400,
        "status": status,
        "message": message,
        "data": data,
    }
    return jsonify(body), status


def error_response(kind: ErrorKind, message: str):
    return api_response(message, None, status=STATUS_BY_ERROR[kind])


def result_response(result: Result, serialize: Optional[Callable[[Any], Any]] = None):
    if not result.ok:
        return error_response(result.error or ErrorKind.INVALID_INPUT, result.message)

    data = result.value
    if serialize is not None and data is not None:
        data = serialize(data)
    return api_response(result.message, data, status=201 if result.created else 200)


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def current_user() -> TokenClaims:
    return g.current_user


def make_bearer_required(tokens: TokenService):
    """Build a view decorator that requires `Authorization: Bearer <JWT>`."""

    def bearer_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            scheme, _, token = header.partition(" ")
            if scheme.lower() != "bearer" or not token.strip():
                return error_response(ErrorKind.UNAUTHORIZED, "Missing bearer token")
            try:
                g.current_user = tokens.decode(token.strip())
            except AuthenticationError as e:
                return error_response(ErrorKind.UNAUTHORIZED, str(e))
            return view(*args, **kwargs)

        return wrapper

    return bearer_required


def admin_required(view):
    """Must be stacked under a bearer_required decorator."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user().role != Role.ADMIN:
            return error_response(ErrorKind.FORBIDDEN, "Admin access required")
        return view(*args, **kwargs)

    return wrapper


def can_act_for(user_id: int) -> bool:
    claims = current_user()
    return claims.role == Role.ADMIN or claims.user_id == user_id
