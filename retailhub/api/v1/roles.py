"""Account roles and the permission codes assigned to each."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retailhub.api.v1.auth import require_permissions
from retailhub.core.database import get_db
from retailhub.repositories.permissions import PermissionStore, SqlAlchemyPermissionStore
from retailhub.schemas.auth import CurrentAccount, RoleItem, RolesListResponse
from retailhub.services.permissions import PermissionCodes

router = APIRouter()


def get_permission_store(db: Annotated[Session, Depends(get_db)]) -> PermissionStore:
    return SqlAlchemyPermissionStore(db)


@router.get("", response_model=RolesListResponse)
def list_roles(
    _account: Annotated[
        CurrentAccount,
        Depends(require_permissions(PermissionCodes.ROLES_CUENTAS_GET_ANY)),
    ],
    store: Annotated[PermissionStore, Depends(get_permission_store)],
) -> RolesListResponse:
    """List roles with their permission codes."""
    return RolesListResponse(
        roles=[
            RoleItem(
                id=r.id,
                code=r.code,
                name=r.name,
                permission_codes=list(r.permission_codes),
            )
            for r in store.list_roles()
        ]
    )
