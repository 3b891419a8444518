"""ORM model for employee login accounts."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from retailhub.models.base import Base


class EmployeeAccount(Base):
    """
    Login identity bound to one employee.

    username: stored lowercased; unique case-insensitively.
    secret: per-account key that signs this account's refresh tokens. Rotating it
    revokes every refresh token issued so far. Never returned by the API.
    """

    __tablename__ = "employee_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    secret = Column(Text, nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)
    employee_id = Column(
        Integer,
        ForeignKey("employees.id"),
        nullable=False,
        unique=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
