"""Pydantic request/response schemas."""

from retailhub.schemas.auth import (
    AccountSummary,
    CurrentAccount,
    EmployeeSummary,
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    RoleItem,
    RolesListResponse,
)
from retailhub.schemas.health import HealthResponse

__all__ = [
    "AccountSummary",
    "CurrentAccount",
    "EmployeeSummary",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "RefreshResponse",
    "RegisterRequest",
    "RoleItem",
    "RolesListResponse",
]
