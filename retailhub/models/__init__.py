"""SQLAlchemy ORM models."""

from retailhub.models.account import EmployeeAccount
from retailhub.models.base import Base
from retailhub.models.employee import Branch, Employee
from retailhub.models.role import Permission, Role, RolePermission

__all__ = [
    "Base",
    "Branch",
    "Employee",
    "EmployeeAccount",
    "Permission",
    "Role",
    "RolePermission",
]
