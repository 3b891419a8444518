"""ORM models for branches and the employees who work at them."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from retailhub.models.base import Base


class Branch(Base):
    """Store location (sucursal). Employees belong to exactly one branch."""

    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)


class Employee(Base):
    """
    Person employed at a branch. May own at most one employee account.

    active: deactivated employees cannot log in.
    """

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True, server_default="true")
    photo_path = Column(String(1024), nullable=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
