"""ORM models for roles, permissions and the role-permission assignment table."""

from sqlalchemy import Column, ForeignKey, Integer, String

from retailhub.models.base import Base


class Role(Base):
    """Named bundle of permissions assigned to employee accounts."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False, unique=True)


class Permission(Base):
    """Granted capability, identified by a short code such as 'archivos:get-any'."""

    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(128), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, unique=True)


class RolePermission(Base):
    __tablename__ = "role_permissions"

    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    permission_id = Column(
        Integer,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    )
