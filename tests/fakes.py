"""In-memory account/permission stores and a controllable clock for auth tests."""

from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import bcrypt

from retailhub.core.security import normalize_username
from retailhub.repositories.accounts import AccountRecord
from retailhub.repositories.permissions import PermissionGrant, RoleRecord
from retailhub.services.permissions import PERMISSIONS

TEST_JWT_SECRET = "test-process-secret-with-at-least-32-bytes"


def fast_hash(password: str) -> str:
    """bcrypt hash with the minimum cost so tests stay fast."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


class FakeClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class FakeAccountStore:
    def __init__(self) -> None:
        self.accounts: dict[int, AccountRecord] = {}
        self.employees: dict[int, bool] = {}
        self.roles: set[int] = set()
        self.find_by_id_calls = 0

    def add(
        self,
        username: str,
        password: str,
        *,
        role_id: int = 1,
        employee_id: int | None = None,
        active: bool = True,
        secret: str = "a" * 128,
    ) -> AccountRecord:
        account_id = len(self.accounts) + 1
        employee_id = employee_id or 100 + account_id
        self.employees[employee_id] = active
        self.roles.add(role_id)
        record = AccountRecord(
            id=account_id,
            username=normalize_username(username),
            password_hash=fast_hash(password),
            secret=secret,
            role_id=role_id,
            employee_id=employee_id,
            role_code=f"role-{role_id}",
            role_name=f"Role {role_id}",
            employee_first_name="Test",
            employee_last_name=username.title(),
            employee_active=active,
            branch_id=1,
            branch_name="Main",
        )
        self.accounts[account_id] = record
        return record

    def set(self, account_id: int, **changes: object) -> None:
        self.accounts[account_id] = replace(self.accounts[account_id], **changes)

    def find_by_username(self, username: str) -> AccountRecord | None:
        wanted = normalize_username(username)
        for record in self.accounts.values():
            if record.username == wanted:
                return record
        return None

    def find_by_id(self, account_id: int) -> AccountRecord | None:
        self.find_by_id_calls += 1
        return self.accounts.get(account_id)

    def update_secret(self, account_id: int, secret: str) -> bool:
        if account_id not in self.accounts:
            return False
        self.set(account_id, secret=secret)
        return True

    def username_exists(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def employee_available(self, employee_id: int) -> bool:
        if employee_id not in self.employees:
            return False
        return all(r.employee_id != employee_id for r in self.accounts.values())

    def role_exists(self, role_id: int) -> bool:
        return role_id in self.roles

    def create(
        self,
        *,
        username: str,
        password_hash: str,
        secret: str,
        role_id: int,
        employee_id: int,
    ) -> AccountRecord:
        account_id = len(self.accounts) + 1
        record = AccountRecord(
            id=account_id,
            username=normalize_username(username),
            password_hash=password_hash,
            secret=secret,
            role_id=role_id,
            employee_id=employee_id,
            employee_active=self.employees.get(employee_id, True),
        )
        self.accounts[account_id] = record
        return record


class FakePermissionStore:
    """Role assignments keyed by role id; permission ids follow PERMISSIONS order."""

    def __init__(self) -> None:
        self.account_roles: dict[int, int] = {}
        self.role_permissions: dict[int, set[str]] = {}
        self.permission_ids = {code: i for i, code in enumerate(PERMISSIONS, start=1)}
        self.queries: list[tuple[int, tuple[str, ...]]] = []

    def grant(self, role_id: int, *codes: str) -> None:
        self.role_permissions.setdefault(role_id, set()).update(codes)

    def revoke(self, role_id: int, code: str) -> None:
        self.role_permissions.get(role_id, set()).discard(code)

    def find_role_id_for_account(self, account_id: int) -> int | None:
        return self.account_roles.get(account_id)

    def find_permissions_for_role(self, role_id: int, codes: Sequence[str]) -> list[PermissionGrant]:
        self.queries.append((role_id, tuple(codes)))
        granted = self.role_permissions.get(role_id, set())
        return [
            PermissionGrant(id=self.permission_ids.get(code, 0), code=code, name=PERMISSIONS.get(code, code))
            for code in codes
            if code in granted
        ]

    def list_roles(self) -> list[RoleRecord]:
        return [
            RoleRecord(id=role_id, code=f"role-{role_id}", name=f"Role {role_id}", permission_codes=tuple(sorted(codes)))
            for role_id, codes in sorted(self.role_permissions.items())
        ]
