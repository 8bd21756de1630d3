"""Flask request helpers shared by the JSON controllers.

Controllers speak camelCase on the wire; services take snake_case keyword
arguments and change mappings. Everything here converts between the two and
turns domain errors into a uniform JSON error body.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterable, Mapping, Optional

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from ..auth.context import PermissionContext
from ..auth.tokens import TokenVerifier
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime
from .validators import optional_uuid, require_known_fields

logger = logging.getLogger(__name__)

TOKEN_VERIFIER_KEY = "hr_workflow.tokens"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def current_context() -> PermissionContext:
    """Resolve the caller from ``Authorization: Bearer <token>``."""

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Bearer token required")
    verifier: TokenVerifier = current_app.extensions[TOKEN_VERIFIER_KEY]
    return verifier.verify(token.strip())


def read_json() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def as_date(value: Any):
    return parse_iso_date(value) if value not in (None, "") else None


def as_datetime(value: Any):
    return parse_iso_datetime(value) if value not in (None, "") else None


def as_bool(value: Any) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    raise ValidationError(f"Invalid boolean: {value!r}")


def field_parser(field_name: str) -> Callable[[Any], Any]:
    """Wire value parser for a snake_case field name, chosen by suffix."""

    if field_name.endswith("_id"):
        label = field_name[:-3].replace("_", " ").capitalize()
        return lambda v: optional_uuid(v, label)
    if field_name.endswith("_date"):
        return as_date
    if field_name.endswith("_at"):
        return as_datetime
    if field_name.startswith("eligible_") or field_name.startswith("include_"):
        return as_bool
    return lambda v: v


def parse_body(payload: Mapping[str, Any], *, aliases: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """camelCase JSON object -> snake_case dict with ids, dates and instants parsed.

    A body "id" is ignored; the path carries the id. ``aliases`` renames wire
    fields whose snake_case form differs from the service argument name.
    """

    aliases = aliases or {}
    out: dict[str, Any] = {}
    for key, value in payload.items():
        name = to_snake(key)
        if name == "id":
            continue
        name = aliases.get(name, name)
        out[name] = field_parser(name)(value)
    return out


def service_kwargs(body: Mapping[str, Any], *, required: Iterable[str], optional: Iterable[str] = ()) -> dict[str, Any]:
    """Keyword arguments for a create call; required fields default to None."""

    required, optional = tuple(required), tuple(optional)
    require_known_fields(body, required + optional)
    out = {name: body.get(name) for name in required}
    out.update({name: body[name] for name in optional if name in body})
    return out


def query_uuid(name: str):
    return optional_uuid(request.args.get(name), name)


def query_bool(name: str) -> bool:
    return bool(as_bool(request.args.get(name)))


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": {"code": code, "message": message}}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return jsonify(error_body(e.code, str(e))), e.http_status

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        code = (e.name or "http_error").lower().replace(" ", "_")
        return jsonify(error_body(code, e.description or e.name)), e.code

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error_body("internal_error", "An unexpected error occurred.")), 500
