"""Authorization decision: does a caller's context satisfy a requirement?

A requirement may name acceptable exact permissions, a permission prefix
(area-level access), and acceptable roles. The branches are independent:
satisfying any one specified branch grants access, and a requirement that
specifies nothing is open to every authenticated caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional
from uuid import UUID

from ..core.exceptions import AuthorizationError
from .context import PermissionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requirement:
    permissions: frozenset[str] = field(default_factory=frozenset)
    prefix: Optional[str] = None
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        *permissions: str,
        prefix: Optional[str] = None,
        roles: Iterable[str] = (),
    ) -> "Requirement":
        return cls(permissions=frozenset(permissions), prefix=prefix, roles=frozenset(roles))

    @property
    def is_open(self) -> bool:
        return not self.permissions and not self.prefix and not self.roles

    def describe(self) -> str:
        parts = sorted(self.permissions)
        if self.prefix:
            parts.append(f"{self.prefix}.*")
        parts.extend(f"role:{r}" for r in sorted(self.roles))
        return " | ".join(parts) or "authenticated"


def is_allowed(requirement: Requirement, context: PermissionContext) -> bool:
    if requirement.is_open:
        return True
    if any(context.has_permission(p) for p in requirement.permissions):
        return True
    if requirement.prefix and context.has_permission_prefix(requirement.prefix):
        return True
    return bool(requirement.roles & context.roles)


def authorize(requirement: Requirement, context: PermissionContext, *, action: str) -> None:
    """Raise AuthorizationError unless ``context`` satisfies ``requirement``."""
    if is_allowed(requirement, context):
        return
    logger.warning(
        "Denied %s for employee=%s (requires %s)",
        action,
        context.employee_id,
        requirement.describe(),
    )
    raise AuthorizationError(f"Not allowed to {action}")


def authorize_self_or(
    requirement: Requirement,
    context: PermissionContext,
    *,
    employee_id: Optional[UUID],
    action: str,
) -> None:
    """Self-service variant: the employee acting on their own record passes."""
    if context.is_employee(employee_id):
        return
    authorize(requirement, context, action=action)
