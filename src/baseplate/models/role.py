from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from src.baseplate.models.base import Base


class Role(Base):
    """Role granting a set of permissions. Ids up to the system range are system roles."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    is_system_role = Column(Boolean, default=False, nullable=False)

    # Relationships
    users = relationship("User", back_populates="role")
    role_permissions = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
    permissions = relationship("Permission", secondary="role_permissions", back_populates="roles", viewonly=True)


class Permission(Base):
    """Permission seeded from the system module registry, named ``Module:action``."""
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    label = Column(String, nullable=False)

    # Relationships
    role_permissions = relationship("RolePermission", back_populates="permission")
    roles = relationship("Role", secondary="role_permissions", back_populates="permissions", viewonly=True)
