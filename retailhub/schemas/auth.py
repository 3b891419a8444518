"""Request/response schemas for auth endpoints."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from retailhub.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)

_USERNAME_RE = re.compile(r"^[a-zA-Z]+$")


def _check_username(v: str) -> str:
    if not _USERNAME_RE.match(v):
        raise ValueError("Username must contain only letters")
    return v


def _check_password(v: str) -> str:
    if any(c.isspace() for c in v):
        raise ValueError("Password must not contain whitespace")
    if not any(c.isalpha() for c in v) or not any(c.isdigit() for c in v):
        raise ValueError("Password must contain letters and numbers")
    return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _check_username(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class RegisterRequest(LoginRequest):
    """New account for an existing employee who has none yet."""

    role_id: int = Field(..., gt=0, description="Role assigned to the account")
    employee_id: int = Field(..., gt=0, description="Employee that owns the account")


class EmployeeSummary(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    active: bool = True
    photo_path: str | None = None


class AccountSummary(BaseModel):
    """Public view of an employee account (no password hash, no secret)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role_id: int
    role_code: str | None = None
    employee_id: int
    employee: EmployeeSummary
    branch_id: int | None = None
    branch_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoginResponse(BaseModel):
    """Access token and account summary; the refresh token travels in an HTTP-only cookie."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    account: AccountSummary


class RefreshResponse(BaseModel):
    access_token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    account_id: int


class CurrentAccount(BaseModel):
    """Authenticated account (from a verified access token) for dependency injection."""

    id: int
    role_id: int
    employee_id: int


class RoleItem(BaseModel):
    id: int
    code: str
    name: str
    permission_codes: list[str]


class RolesListResponse(BaseModel):
    """Response for GET /roles."""

    roles: list[RoleItem]
