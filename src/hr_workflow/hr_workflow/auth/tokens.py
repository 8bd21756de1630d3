from __future__ import annotations

from typing import Any, Iterable, Optional
from uuid import UUID

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS, DEFAULT_TOKEN_SALT
from ..core.exceptions import AuthenticationError
from .context import PermissionContext


class TokenVerifier:
    """Validates bearer tokens minted by the authentication service.

    The payload is ``{"employee_id", "permissions", "roles"}`` signed with the
    shared secret. ``issue`` is the same codec in the other direction.
    """

    def __init__(self, secret_key: str, *, salt: str = DEFAULT_TOKEN_SALT, max_age: int = DEFAULT_TOKEN_MAX_AGE_SECONDS):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=salt)
        self._max_age = int(max_age)

    def issue(
        self,
        *,
        employee_id: Optional[UUID] = None,
        permissions: Iterable[str] = (),
        roles: Iterable[str] = (),
    ) -> str:
        return self._serializer.dumps(
            {
                "employee_id": str(employee_id) if employee_id else None,
                "permissions": sorted(permissions),
                "roles": sorted(roles),
            }
        )

    def verify(self, token: str) -> PermissionContext:
        try:
            payload = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise AuthenticationError("Token expired")
        except BadSignature:
            raise AuthenticationError("Invalid token")
        return self._to_context(payload)

    @staticmethod
    def _to_context(payload: Any) -> PermissionContext:
        if not isinstance(payload, dict):
            raise AuthenticationError("Malformed token payload")
        permissions = payload.get("permissions") or []
        roles = payload.get("roles") or []
        if not isinstance(permissions, list) or not isinstance(roles, list):
            raise AuthenticationError("Malformed token payload")

        raw_id = payload.get("employee_id")
        try:
            employee_id = UUID(raw_id) if raw_id else None
        except (TypeError, ValueError):
            raise AuthenticationError("Malformed token payload")

        return PermissionContext.of(
            employee_id=employee_id,
            permissions=(str(p) for p in permissions),
            roles=(str(r) for r in roles),
        )
