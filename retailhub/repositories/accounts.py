"""Account store: the employee_accounts queries the auth services depend on."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from retailhub.core.errors import ConflictError, InternalError
from retailhub.core.security import normalize_username
from retailhub.models import Branch, Employee, EmployeeAccount, Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountRecord:
    """Account row joined with its role, employee and branch. Holds the secret; keep it in the auth core."""

    id: int
    username: str
    password_hash: str
    secret: str
    role_id: int
    employee_id: int
    role_code: str | None = None
    role_name: str | None = None
    employee_first_name: str | None = None
    employee_last_name: str | None = None
    employee_active: bool = True
    employee_photo_path: str | None = None
    branch_id: int | None = None
    branch_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AccountStore(Protocol):
    def find_by_username(self, username: str) -> AccountRecord | None: ...

    def find_by_id(self, account_id: int) -> AccountRecord | None: ...

    def update_secret(self, account_id: int, secret: str) -> bool: ...

    def username_exists(self, username: str) -> bool: ...

    def employee_available(self, employee_id: int) -> bool: ...

    def role_exists(self, role_id: int) -> bool: ...

    def create(
        self,
        *,
        username: str,
        password_hash: str,
        secret: str,
        role_id: int,
        employee_id: int,
    ) -> AccountRecord: ...


def _to_record(account: EmployeeAccount, role: Role, employee: Employee, branch: Branch) -> AccountRecord:
    return AccountRecord(
        id=account.id,
        username=account.username,
        password_hash=account.password_hash,
        secret=account.secret,
        role_id=account.role_id,
        employee_id=account.employee_id,
        role_code=role.code,
        role_name=role.name,
        employee_first_name=employee.first_name,
        employee_last_name=employee.last_name,
        employee_active=bool(employee.active),
        employee_photo_path=employee.photo_path,
        branch_id=branch.id,
        branch_name=branch.name,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


class SqlAlchemyAccountStore:
    """AccountStore backed by a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _joined(self):
        return (
            self.db.query(EmployeeAccount, Role, Employee, Branch)
            .join(Role, Role.id == EmployeeAccount.role_id)
            .join(Employee, Employee.id == EmployeeAccount.employee_id)
            .join(Branch, Branch.id == Employee.branch_id)
        )

    def find_by_username(self, username: str) -> AccountRecord | None:
        row = (
            self._joined()
            .filter(func.lower(EmployeeAccount.username) == normalize_username(username))
            .first()
        )
        return _to_record(*row) if row is not None else None

    def find_by_id(self, account_id: int) -> AccountRecord | None:
        row = self._joined().filter(EmployeeAccount.id == account_id).first()
        return _to_record(*row) if row is not None else None

    def update_secret(self, account_id: int, secret: str) -> bool:
        """Replace the account secret in one statement. Returns False when the account does not exist."""
        try:
            updated = (
                self.db.query(EmployeeAccount)
                .filter(EmployeeAccount.id == account_id)
                .update(
                    {EmployeeAccount.secret: secret, EmployeeAccount.updated_at: func.now()},
                    synchronize_session=False,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Secret update failed", extra={"account_id": account_id})
            raise InternalError() from e
        return updated > 0

    def username_exists(self, username: str) -> bool:
        found = (
            self.db.query(EmployeeAccount.id)
            .filter(func.lower(EmployeeAccount.username) == normalize_username(username))
            .first()
        )
        return found is not None

    def employee_available(self, employee_id: int) -> bool:
        """True when the employee exists and has no account yet."""
        has_account = (
            self.db.query(EmployeeAccount.id)
            .filter(EmployeeAccount.employee_id == Employee.id)
            .exists()
        )
        found = (
            self.db.query(Employee.id)
            .filter(Employee.id == employee_id, ~has_account)
            .first()
        )
        return found is not None

    def role_exists(self, role_id: int) -> bool:
        return self.db.query(Role.id).filter(Role.id == role_id).first() is not None

    def create(
        self,
        *,
        username: str,
        password_hash: str,
        secret: str,
        role_id: int,
        employee_id: int,
    ) -> AccountRecord:
        account = EmployeeAccount(
            username=normalize_username(username),
            password_hash=password_hash,
            secret=secret,
            role_id=role_id,
            employee_id=employee_id,
        )
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Username or employee already has an account.") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Account insert failed", extra={"employee_id": employee_id})
            raise InternalError() from e
        created = self.find_by_id(account.id)
        if created is None:
            raise InternalError()
        return created
