"""
Account authentication: login, refresh, registration, secret rotation and session lookup.

Credential and refresh-token failures collapse to one UnauthorizedError message
per flow so callers cannot tell an unknown username from a wrong password, or a
missing account from a forged or expired token. The internal reason is logged.
"""

import logging
from dataclasses import dataclass

from retailhub.core.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from retailhub.core.security import hash_password, normalize_username, verify_password
from retailhub.core.tokens import (
    REFRESH_TOKEN_TYPE,
    AuthPayload,
    InvalidTokenError,
    TokenCodec,
    account_id_from_claims,
)
from retailhub.repositories.accounts import AccountRecord, AccountStore
from retailhub.schemas.auth import AccountSummary, EmployeeSummary

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."
INVALID_REFRESH_TOKEN = "Invalid refresh token"
ACCOUNT_DISABLED = "Account is disabled. Contact an administrator to enable it."


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    account: AccountSummary


@dataclass(frozen=True)
class RefreshResult:
    access_token: str
    account_id: int


def account_summary(record: AccountRecord) -> AccountSummary:
    """Public view of an account; never includes the password hash or secret."""
    return AccountSummary(
        id=record.id,
        username=record.username,
        role_id=record.role_id,
        role_code=record.role_code,
        employee_id=record.employee_id,
        employee=EmployeeSummary(
            first_name=record.employee_first_name,
            last_name=record.employee_last_name,
            active=record.employee_active,
            photo_path=record.employee_photo_path,
        ),
        branch_id=record.branch_id,
        branch_name=record.branch_name,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def auth_payload(record: AccountRecord) -> AuthPayload:
    return AuthPayload(
        account_id=record.id,
        role_id=record.role_id,
        employee_id=record.employee_id,
    )


def _issue_token_pair(codec: TokenCodec, record: AccountRecord) -> tuple[str, str]:
    access_token = codec.sign_access_token(auth_payload(record))
    refresh_token = codec.sign_refresh_token(record.id, secret=record.secret).token
    return access_token, refresh_token


class AccountAuthenticator:
    """Username/password login issuing an access and refresh token pair."""

    def __init__(self, accounts: AccountStore, codec: TokenCodec) -> None:
        self.accounts = accounts
        self.codec = codec

    def login(self, username: str, password: str) -> LoginResult:
        record = self.accounts.find_by_username(normalize_username(username))
        if record is None:
            logger.info("Login rejected: unknown username")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not verify_password(password, record.password_hash):
            logger.info("Login rejected: password mismatch", extra={"account_id": record.id})
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not record.employee_active:
            logger.info("Login rejected: employee deactivated", extra={"account_id": record.id})
            raise UnauthorizedError(ACCOUNT_DISABLED)

        access_token, refresh_token = _issue_token_pair(self.codec, record)
        logger.info("Login succeeded", extra={"account_id": record.id})
        return LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            account=account_summary(record),
        )


class TokenRefresher:
    """Mints a new access token from a refresh token signed with the account's current secret."""

    def __init__(self, accounts: AccountStore, codec: TokenCodec) -> None:
        self.accounts = accounts
        self.codec = codec

    def refresh(self, refresh_token: str) -> RefreshResult:
        """
        Decode (untrusted) to find the account, verify against its secret, re-issue.

        Role and employee come from the freshly loaded row, not the old token, so
        a role change applies on the next refresh. The refresh token is not renewed.
        """
        claims = self.codec.decode(refresh_token)
        account_id = account_id_from_claims(claims)
        if account_id is None:
            logger.info("Refresh rejected: undecodable token or missing account id")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        record = self.accounts.find_by_id(account_id)
        if record is None:
            logger.info("Refresh rejected: account not found", extra={"account_id": account_id})
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        try:
            self.codec.verify(refresh_token, record.secret, token_type=REFRESH_TOKEN_TYPE)
        except InvalidTokenError as e:
            logger.warning(
                "Refresh rejected: %s",
                e.message,
                extra={"account_id": account_id},
            )
            raise UnauthorizedError(INVALID_REFRESH_TOKEN) from e

        access_token = self.codec.sign_access_token(auth_payload(record))
        return RefreshResult(access_token=access_token, account_id=record.id)


class AccountRegistrar:
    """Creates an account for an employee, with a fresh per-account secret."""

    def __init__(self, accounts: AccountStore, codec: TokenCodec) -> None:
        self.accounts = accounts
        self.codec = codec

    def register(self, username: str, password: str, role_id: int, employee_id: int) -> LoginResult:
        username = normalize_username(username)
        if self.accounts.username_exists(username):
            raise ConflictError(f"Username '{username}' is already taken.")
        if not self.accounts.employee_available(employee_id):
            raise BadRequestError("The employee does not exist or already has an account.")
        if not self.accounts.role_exists(role_id):
            raise BadRequestError("The role you tried to assign does not exist.")

        record = self.accounts.create(
            username=username,
            password_hash=hash_password(password),
            secret=self.codec.random_secret(),
            role_id=role_id,
            employee_id=employee_id,
        )
        access_token, refresh_token = _issue_token_pair(self.codec, record)
        logger.info(
            "Account registered",
            extra={"account_id": record.id, "employee_id": employee_id, "role_id": role_id},
        )
        return LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            account=account_summary(record),
        )


class SecretRotator:
    """Replaces an account's secret, revoking every refresh token issued for it."""

    def __init__(self, accounts: AccountStore, codec: TokenCodec) -> None:
        self.accounts = accounts
        self.codec = codec

    def rotate(self, account_id: int) -> None:
        if not self.accounts.update_secret(account_id, self.codec.random_secret()):
            raise NotFoundError(f"Account {account_id} not found.")
        logger.info("Account secret rotated", extra={"account_id": account_id})


class SessionInspector:
    """Current account summary for an authenticated request."""

    def __init__(self, accounts: AccountStore) -> None:
        self.accounts = accounts

    def current(self, account_id: int) -> AccountSummary:
        record = self.accounts.find_by_id(account_id)
        if record is None:
            raise UnauthorizedError("Account does not exist.")
        if not record.employee_active:
            raise UnauthorizedError(ACCOUNT_DISABLED)
        return account_summary(record)
