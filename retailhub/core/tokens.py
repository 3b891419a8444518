"""
JWT access and refresh tokens.

Access tokens carry {account id, role id, employee id} and are signed with the
process-wide JWT_SECRET. Refresh tokens carry only the account id and are signed
with the account's own secret, so rotating that secret revokes every refresh
token issued for the account.
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

if TYPE_CHECKING:
    from retailhub.core.config import Settings

Clock = Callable[[], datetime]

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Per-account secrets: 64 random bytes, hex encoded.
ACCOUNT_SECRET_BYTES = 64

# Longest decimal `sub` accepted; fits a signed 64-bit id.
MAX_ACCOUNT_ID_DIGITS = 18

DEFAULT_ACCESS_TTL = timedelta(minutes=30)
DEFAULT_REFRESH_TTL = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(UTC)


class InvalidTokenError(Exception):
    """Signature mismatch, expired token or malformed payload. Never leaves the auth services."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class AuthPayload:
    """Claims asserted by an access token."""

    account_id: int
    role_id: int
    employee_id: int


@dataclass(frozen=True)
class SignedRefreshToken:
    token: str
    secret: str


def account_id_from_claims(claims: Any) -> int | None:
    """Return the positive integer account id in `sub`, or None when absent or malformed."""
    if not isinstance(claims, dict):
        return None
    sub = claims.get("sub")
    if isinstance(sub, bool):
        return None
    if isinstance(sub, int):
        return sub if sub > 0 else None
    if isinstance(sub, str) and len(sub) <= MAX_ACCOUNT_ID_DIGITS and sub.isascii() and sub.isdigit():
        value = int(sub)
        return value if value > 0 else None
    return None


def _int_claim(claims: dict[str, Any], name: str) -> int | None:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class TokenCodec:
    """Signs, decodes and verifies access and refresh tokens against an injectable clock."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings", clock: Clock = utc_now) -> "TokenCodec":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS),
            refresh_ttl=timedelta(seconds=settings.REFRESH_TOKEN_EXPIRE_SECONDS),
            clock=clock,
        )

    @staticmethod
    def random_secret() -> str:
        """Cryptographically strong per-account signing key."""
        return secrets.token_hex(ACCOUNT_SECRET_BYTES)

    def _encode(self, claims: dict[str, Any], ttl: timedelta, secret: str, token_type: str) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            **claims,
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def sign_access_token(self, payload: AuthPayload, ttl: timedelta | None = None) -> str:
        claims = {
            "sub": str(payload.account_id),
            "role_id": payload.role_id,
            "employee_id": payload.employee_id,
        }
        return self._encode(claims, ttl or self.access_ttl, self._secret, ACCESS_TOKEN_TYPE)

    def sign_refresh_token(
        self,
        account_id: int,
        ttl: timedelta | None = None,
        secret: str | None = None,
    ) -> SignedRefreshToken:
        """
        Sign a refresh token with the account's secret.
        When no secret is given a fresh one is generated and returned with the token.
        """
        account_secret = secret or self.random_secret()
        token = self._encode(
            {"sub": str(account_id)},
            ttl or self.refresh_ttl,
            account_secret,
            REFRESH_TOKEN_TYPE,
        )
        return SignedRefreshToken(token=token, secret=account_secret)

    def decode(self, token: Any) -> dict[str, Any] | None:
        """
        Read the claims without checking the signature. Never raises.

        Only for finding out which account's secret to verify against; the
        claims are untrusted until verify() succeeds.
        """
        if not isinstance(token, str) or not token:
            return None
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except (jwt.PyJWTError, TypeError, ValueError):
            return None
        return claims if isinstance(claims, dict) else None

    def verify(self, token: str, secret: str, token_type: str | None = None) -> dict[str, Any]:
        """
        Validate signature, expiry and payload shape; return the claims.
        Raises InvalidTokenError on any failure.
        """
        if not isinstance(token, str) or not token:
            raise InvalidTokenError("Token must be a non-empty string")
        if not secret:
            raise InvalidTokenError("No secret to verify against")
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["exp", "iat", "sub"],
                    # Expiry is checked against the injected clock below.
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_sub": False,
                },
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidTokenError("Invalid token: exp must be a number")
        if self._clock().timestamp() >= exp:
            raise InvalidTokenError("Token expired")
        if account_id_from_claims(claims) is None:
            raise InvalidTokenError("Invalid token: sub must be a positive account id")
        if token_type is not None and claims.get("type") != token_type:
            raise InvalidTokenError(f"Invalid token: expected a {token_type} token")
        return claims

    def verify_access_token(self, token: str) -> AuthPayload:
        """Verify a bearer token against the process secret and return its payload."""
        claims = self.verify(token, self._secret, token_type=ACCESS_TOKEN_TYPE)
        role_id = _int_claim(claims, "role_id")
        employee_id = _int_claim(claims, "employee_id")
        if role_id is None or employee_id is None:
            raise InvalidTokenError("Invalid token: role_id and employee_id are required")
        return AuthPayload(
            account_id=account_id_from_claims(claims),
            role_id=role_id,
            employee_id=employee_id,
        )
