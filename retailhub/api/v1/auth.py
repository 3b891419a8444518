"""Login, refresh and account routes, plus the bearer-token and permission dependencies."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from retailhub.core.config import Settings, get_settings
from retailhub.core.database import get_db
from retailhub.core.errors import AuthError, ForbiddenError
from retailhub.core.tokens import InvalidTokenError, TokenCodec
from retailhub.repositories.accounts import AccountStore, SqlAlchemyAccountStore
from retailhub.repositories.permissions import SqlAlchemyPermissionStore
from retailhub.schemas.auth import (
    AccountSummary,
    CurrentAccount,
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
)
from retailhub.services.auth import (
    INVALID_REFRESH_TOKEN,
    AccountAuthenticator,
    AccountRegistrar,
    LoginResult,
    SecretRotator,
    SessionInspector,
    TokenRefresher,
)
from retailhub.services.permissions import AuthorizationGate, PermissionCodes, PermissionResolver

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def _http_error(e: AuthError) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if e.status_code == status.HTTP_401_UNAUTHORIZED else None
    return HTTPException(status_code=e.status_code, detail=e.message, headers=headers)


def get_token_codec(settings: Annotated[Settings, Depends(get_settings)]) -> TokenCodec:
    return TokenCodec.from_settings(settings)


def get_account_store(db: Annotated[Session, Depends(get_db)]) -> AccountStore:
    return SqlAlchemyAccountStore(db)


def get_authorization_gate(db: Annotated[Session, Depends(get_db)]) -> AuthorizationGate:
    return AuthorizationGate(PermissionResolver(SqlAlchemyPermissionStore(db)))


def get_current_account(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> CurrentAccount:
    """Dependency: require a valid Bearer access token. Stateless; no store lookup. Raises 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = codec.verify_access_token(credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentAccount(
        id=payload.account_id,
        role_id=payload.role_id,
        employee_id=payload.employee_id,
    )


def require_permissions(*codes: str):
    """
    Dependency factory: allow the request when the account's role holds any of `codes`.

    Usage:
        @router.get("/roles")
        def list_roles(_account: Annotated[CurrentAccount, Depends(require_permissions("roles-cuentas:get-any"))]):
            ...

    The matching permission codes are stored on request.state.permissions.
    """

    def permission_checker(
        request: Request,
        current: Annotated[CurrentAccount, Depends(get_current_account)],
        gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
    ) -> CurrentAccount:
        try:
            grants = gate.authorize(current.id, codes)
        except ForbiddenError as e:
            raise _http_error(e) from e
        request.state.permissions = [g.code for g in grants]
        return current

    return permission_checker


def _set_refresh_cookie(response: Response, refresh_token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.REFRESH_TOKEN_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_SECONDS,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def _login_response(result: LoginResult, response: Response, settings: Settings) -> LoginResponse:
    response.headers["Authorization"] = f"Bearer {result.access_token}"
    _set_refresh_cookie(response, result.refresh_token, settings)
    return LoginResponse(access_token=result.access_token, account=result.account)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    response: Response,
    accounts: Annotated[AccountStore, Depends(get_account_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """
    Authenticate with username and password.

    Returns the access token (also in the Authorization response header) and sets
    the refresh token as an HTTP-only cookie. Send the access token on later
    requests as: Authorization: Bearer <access_token>
    """
    try:
        result = AccountAuthenticator(accounts, codec).login(body.username, body.password)
    except AuthError as e:
        raise _http_error(e) from e
    return _login_response(result, response, settings)


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    request: Request,
    response: Response,
    accounts: Annotated[AccountStore, Depends(get_account_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RefreshResponse:
    """Issue a new access token from the refresh-token cookie. The cookie itself is left unchanged."""
    refresh_token = request.cookies.get(settings.REFRESH_TOKEN_COOKIE_NAME)
    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_REFRESH_TOKEN,
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        result = TokenRefresher(accounts, codec).refresh(refresh_token)
    except AuthError as e:
        raise _http_error(e) from e
    response.headers["Authorization"] = f"Bearer {result.access_token}"
    return RefreshResponse(access_token=result.access_token, account_id=result.account_id)


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    _account: Annotated[
        CurrentAccount,
        Depends(require_permissions(PermissionCodes.CUENTAS_EMPLEADOS_CREATE_ANY)),
    ],
    accounts: Annotated[AccountStore, Depends(get_account_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginResponse:
    """Create an account for an employee that has none; returns the new account's tokens."""
    try:
        result = AccountRegistrar(accounts, codec).register(
            body.username,
            body.password,
            role_id=body.role_id,
            employee_id=body.employee_id,
        )
    except AuthError as e:
        raise _http_error(e) from e
    return _login_response(result, response, settings)


@router.get("/session", response_model=AccountSummary)
def get_session(
    current: Annotated[CurrentAccount, Depends(get_current_account)],
    accounts: Annotated[AccountStore, Depends(get_account_store)],
) -> AccountSummary:
    """Return the authenticated account; 401 if it no longer exists or was deactivated."""
    try:
        return SessionInspector(accounts).current(current.id)
    except AuthError as e:
        raise _http_error(e) from e


@router.post(
    "/accounts/{account_id}/rotate-secret",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def rotate_secret(
    account_id: int,
    request: Request,
    current: Annotated[
        CurrentAccount,
        Depends(
            require_permissions(
                PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_ANY,
                PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_SELF,
            )
        ),
    ],
    accounts: Annotated[AccountStore, Depends(get_account_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> Response:
    """
    Rotate the account's secret, revoking all of its refresh tokens.
    With only the update-self permission an account may rotate its own secret.
    """
    granted = set(request.state.permissions)
    if PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_ANY not in granted and account_id != current.id:
        raise _http_error(ForbiddenError())
    try:
        SecretRotator(accounts, codec).rotate(account_id)
    except AuthError as e:
        raise _http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
