"""
Role-based authorization: permission catalog, resolver and the any-of gate.

An account's effective permissions are exactly those assigned to its role.
Every check reads the current assignment from the store; nothing is cached.
"""

import logging
from collections.abc import Iterable, Sequence

from retailhub.core.errors import ForbiddenError
from retailhub.repositories.permissions import PermissionGrant, PermissionStore

logger = logging.getLogger(__name__)


class PermissionCodes:
    """Permission codes referenced by routes and services."""

    ARCHIVOS_GET_ANY = "archivos:get-any"
    ARCHIVOS_GET_VISIBLE = "archivos:get-visible"
    ARCHIVOS_CREATE_ANY = "archivos:create-any"
    ARCHIVOS_DELETE_ANY = "archivos:delete-any"

    CUENTAS_EMPLEADOS_CREATE_ANY = "cuentas-empleados:create-any"
    CUENTAS_EMPLEADOS_GET_ANY = "cuentas-empleados:get-any"
    CUENTAS_EMPLEADOS_GET_RELATED = "cuentas-empleados:get-related"
    CUENTAS_EMPLEADOS_UPDATE_ANY = "cuentas-empleados:update-any"
    CUENTAS_EMPLEADOS_UPDATE_SELF = "cuentas-empleados:update-self"
    CUENTAS_EMPLEADOS_DELETE_ANY = "cuentas-empleados:delete-any"

    ROLES_CUENTAS_GET_ANY = "roles-cuentas:get-any"


# code -> human-readable name (seeded into the permissions table).
PERMISSIONS: dict[str, str] = {
    PermissionCodes.ARCHIVOS_GET_ANY: "View any file",
    PermissionCodes.ARCHIVOS_GET_VISIBLE: "View files shared with the account",
    PermissionCodes.ARCHIVOS_CREATE_ANY: "Upload files",
    PermissionCodes.ARCHIVOS_DELETE_ANY: "Delete any file",
    PermissionCodes.CUENTAS_EMPLEADOS_CREATE_ANY: "Create employee accounts",
    PermissionCodes.CUENTAS_EMPLEADOS_GET_ANY: "View any employee account",
    PermissionCodes.CUENTAS_EMPLEADOS_GET_RELATED: "View employee accounts of the own branch",
    PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_ANY: "Update any employee account",
    PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_SELF: "Update the own employee account",
    PermissionCodes.CUENTAS_EMPLEADOS_DELETE_ANY: "Delete any employee account",
    "empleados:get-any": "View any employee",
    "empleados:update-any": "Update any employee",
    "empleados:update-self": "Update the own employee record",
    "facturacion:declare-any": "Declare any sale to the invoicing service",
    "facturacion:declare-related": "Declare sales of the own branch",
    "facturacion:cancel-any": "Cancel any invoicing document",
    "facturacion:cancel-related": "Cancel invoicing documents of the own branch",
    "facturacion:sync-any": "Sync any invoicing document",
    "facturacion:sync-related": "Sync invoicing documents of the own branch",
    "inventarios:add-any": "Add stock at any branch",
    "inventarios:add-related": "Add stock at the own branch",
    "productos:create-any": "Create products at any branch",
    "productos:create-related": "Create products at the own branch",
    "productos:get-any": "View products of any branch",
    "productos:get-related": "View products of the own branch",
    "productos:update-any": "Update products of any branch",
    "productos:update-related": "Update products of the own branch",
    "proformas-venta:update-any": "Update any sale quote",
    "proformas-venta:update-related": "Update sale quotes of the own branch",
    "proformas-venta:delete-any": "Delete any sale quote",
    "proformas-venta:delete-related": "Delete sale quotes of the own branch",
    PermissionCodes.ROLES_CUENTAS_GET_ANY: "View account roles",
    "sucursales:get-any": "View any branch",
    "sucursales:get-related": "View the own branch",
    "transferencias-inventario:create-any": "Create transfers between any branches",
    "transferencias-inventario:create-related": "Create transfers from the own branch",
    "transferencias-inventario:update-any": "Update any transfer",
    "transferencias-inventario:update-related": "Update transfers of the own branch",
    "transferencias-inventario:send-any": "Send any transfer",
    "transferencias-inventario:send-related": "Send transfers of the own branch",
    "transferencias-inventario:receive-any": "Receive any transfer",
    "transferencias-inventario:receive-related": "Receive transfers at the own branch",
    "transferencias-inventario:cancel-any": "Cancel any transfer",
    "transferencias-inventario:cancel-related": "Cancel transfers of the own branch",
    "transferencias-inventario:delete-any": "Delete any transfer",
    "transferencias-inventario:delete-related": "Delete transfers of the own branch",
    "ventas:create-any": "Register sales at any branch",
    "ventas:create-related": "Register sales at the own branch",
    "ventas:get-any": "View sales of any branch",
    "ventas:get-related": "View sales of the own branch",
    "ventas:cancel-any": "Cancel sales of any branch",
    "ventas:cancel-related": "Cancel sales of the own branch",
}


class PermissionResolver:
    """Looks up which of a set of permission codes an account's role holds."""

    def __init__(self, store: PermissionStore) -> None:
        self.store = store

    def resolve(self, account_id: int, codes: Sequence[str]) -> list[PermissionGrant]:
        """
        Return the grants of the account's role among `codes`.

        An unknown account resolves to no permissions rather than an error.
        """
        wanted = list(dict.fromkeys(codes))
        if not wanted:
            return []
        role_id = self.store.find_role_id_for_account(account_id)
        if role_id is None:
            return []
        return self.store.find_permissions_for_role(role_id, wanted)


class AuthorizationGate:
    """Allows an operation when the account holds any one of its declared permission codes."""

    def __init__(self, resolver: PermissionResolver) -> None:
        self.resolver = resolver

    def authorize(self, account_id: int, required_codes: Iterable[str]) -> list[PermissionGrant]:
        """
        Return the matching grants, or raise ForbiddenError.

        An empty requirement list denies. The error never names the missing codes.
        """
        required = list(dict.fromkeys(required_codes))
        if not required:
            logger.warning(
                "Authorization denied: operation declares no permission codes",
                extra={"account_id": account_id},
            )
            raise ForbiddenError()

        required_set = set(required)
        grants = [
            g for g in self.resolver.resolve(account_id, required) if g.code in required_set
        ]
        if not grants:
            logger.info(
                "Authorization denied",
                extra={"account_id": account_id, "required_count": len(required)},
            )
            raise ForbiddenError()
        return grants
