"""
Seed the permission catalog and default roles. Safe to run repeatedly. Run from project root:
  python -m retailhub.scripts.seed_access

The first default role is the administrator and receives every permission.
"""
import logging
import sys

from sqlalchemy.orm import Session

from retailhub.core.database import SessionLocal
from retailhub.models import Permission, Role, RolePermission
from retailhub.services.permissions import PERMISSIONS, PermissionCodes

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

# (code, name); order matters: the first role is the administrator.
DEFAULT_ROLES = (
    ("admin", "Administrator"),
    ("seller", "Seller"),
    ("terminal", "Point-of-sale terminal"),
)

SELLER_PERMISSIONS = (
    PermissionCodes.ARCHIVOS_GET_VISIBLE,
    PermissionCodes.CUENTAS_EMPLEADOS_GET_RELATED,
    PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_SELF,
    "empleados:update-self",
    "facturacion:declare-related",
    "productos:get-related",
    "proformas-venta:update-related",
    "sucursales:get-related",
    "transferencias-inventario:receive-related",
    "ventas:create-related",
    "ventas:get-related",
)

TERMINAL_PERMISSIONS = (
    "productos:get-related",
    "ventas:create-related",
)


def default_role_permissions() -> dict[str, tuple[str, ...]]:
    """Role code -> permission codes for the default roles."""
    admin_code = DEFAULT_ROLES[0][0]
    return {
        admin_code: tuple(PERMISSIONS),
        "seller": SELLER_PERMISSIONS,
        "terminal": TERMINAL_PERMISSIONS,
    }


def seed_access(db: Session) -> tuple[int, int, int]:
    """
    Insert missing permissions, roles and role assignments.
    Returns (permissions_created, roles_created, assignments_created).
    """
    existing_permissions = {p.code: p for p in db.query(Permission).all()}
    permissions_created = 0
    for code, name in PERMISSIONS.items():
        if code not in existing_permissions:
            permission = Permission(code=code, name=name)
            db.add(permission)
            existing_permissions[code] = permission
            permissions_created += 1

    existing_roles = {r.code: r for r in db.query(Role).all()}
    roles_created = 0
    for code, name in DEFAULT_ROLES:
        if code not in existing_roles:
            role = Role(code=code, name=name)
            db.add(role)
            existing_roles[code] = role
            roles_created += 1
    db.flush()

    assigned = {(rp.role_id, rp.permission_id) for rp in db.query(RolePermission).all()}
    assignments_created = 0
    for role_code, codes in default_role_permissions().items():
        role = existing_roles[role_code]
        for code in codes:
            key = (role.id, existing_permissions[code].id)
            if key not in assigned:
                db.add(RolePermission(role_id=key[0], permission_id=key[1]))
                assigned.add(key)
                assignments_created += 1

    db.commit()
    return permissions_created, roles_created, assignments_created


def main() -> int:
    db = SessionLocal()
    try:
        permissions_created, roles_created, assignments_created = seed_access(db)
        logger.info(
            "Seed completed: permissions_created=%s roles_created=%s assignments_created=%s",
            permissions_created,
            roles_created,
            assignments_created,
        )
        return 0
    except Exception as e:
        db.rollback()
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
