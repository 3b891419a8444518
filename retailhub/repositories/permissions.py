"""Permission store: role lookups and role-permission joins for the authorization gate."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy.orm import Session

from retailhub.models import EmployeeAccount, Permission, Role, RolePermission


@dataclass(frozen=True)
class PermissionGrant:
    id: int
    code: str
    name: str


@dataclass(frozen=True)
class RoleRecord:
    id: int
    code: str
    name: str
    permission_codes: tuple[str, ...] = field(default_factory=tuple)


class PermissionStore(Protocol):
    def find_role_id_for_account(self, account_id: int) -> int | None: ...

    def find_permissions_for_role(self, role_id: int, codes: Sequence[str]) -> list[PermissionGrant]: ...

    def list_roles(self) -> list[RoleRecord]: ...


class SqlAlchemyPermissionStore:
    """PermissionStore backed by a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_role_id_for_account(self, account_id: int) -> int | None:
        row = (
            self.db.query(EmployeeAccount.role_id)
            .filter(EmployeeAccount.id == account_id)
            .first()
        )
        return row[0] if row is not None else None

    def find_permissions_for_role(self, role_id: int, codes: Sequence[str]) -> list[PermissionGrant]:
        """Permissions assigned to the role, restricted to the given codes."""
        if not codes:
            return []
        rows = (
            self.db.query(Permission.id, Permission.code, Permission.name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(RolePermission.role_id == role_id, Permission.code.in_(list(codes)))
            .order_by(Permission.id)
            .all()
        )
        return [PermissionGrant(id=r.id, code=r.code, name=r.name) for r in rows]

    def list_roles(self) -> list[RoleRecord]:
        roles = self.db.query(Role).order_by(Role.id).all()
        assigned = (
            self.db.query(RolePermission.role_id, Permission.code)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .order_by(Permission.code)
            .all()
        )
        codes_by_role: dict[int, list[str]] = {}
        for role_id, code in assigned:
            codes_by_role.setdefault(role_id, []).append(code)
        return [
            RoleRecord(
                id=r.id,
                code=r.code,
                name=r.name,
                permission_codes=tuple(codes_by_role.get(r.id, [])),
            )
            for r in roles
        ]
