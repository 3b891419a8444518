"""Data access for the auth core: account and permission stores."""

from retailhub.repositories.accounts import AccountRecord, AccountStore, SqlAlchemyAccountStore
from retailhub.repositories.permissions import (
    PermissionGrant,
    PermissionStore,
    RoleRecord,
    SqlAlchemyPermissionStore,
)

__all__ = [
    "AccountRecord",
    "AccountStore",
    "PermissionGrant",
    "PermissionStore",
    "RoleRecord",
    "SqlAlchemyAccountStore",
    "SqlAlchemyPermissionStore",
]
