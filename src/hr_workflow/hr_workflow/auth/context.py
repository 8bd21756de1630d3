from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional
from uuid import UUID

from ..core.constants import PERMISSION_SEPARATOR


@dataclass(frozen=True)
class PermissionContext:
    """Permissions and roles of the authenticated caller.

    Resolved per request by the authentication collaborator and passed
    explicitly into every service call; never stored.
    """

    employee_id: Optional[UUID] = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        *,
        employee_id: Optional[UUID] = None,
        permissions: Iterable[str] = (),
        roles: Iterable[str] = (),
    ) -> "PermissionContext":
        return cls(employee_id=employee_id, permissions=frozenset(permissions), roles=frozenset(roles))

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def has_permission_prefix(self, prefix: str) -> bool:
        # 'hr' matches 'hr.employees.manage' but neither 'hr' nor 'hrx.read'.
        lead = prefix.rstrip(PERMISSION_SEPARATOR) + PERMISSION_SEPARATOR
        return any(p.startswith(lead) for p in self.permissions)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_employee(self, employee_id: Optional[UUID]) -> bool:
        return employee_id is not None and self.employee_id == employee_id
