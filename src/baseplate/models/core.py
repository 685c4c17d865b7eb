from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Uuid as SQLUUID
from sqlalchemy.orm import relationship

from .base import Base
from src.baseplate.schemas.enums import UserStatus


class Customer(Base):
    """Tenant. ``owner_id`` is a weak reference to the owning user."""
    __tablename__ = "customers"

    name = Column(String, nullable=False)
    owner_id = Column(SQLUUID, nullable=True, index=True)

    # Relationships
    users = relationship("User", back_populates="customer")


class User(Base):
    """Application user, linked to the identity provider by ``auth_uid``."""
    __tablename__ = "users"

    auth_uid = Column(String, nullable=True, unique=True, index=True)
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_id = Column(SQLUUID, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    is_superadmin = Column(Boolean, default=False, nullable=False)
    is_customer_success = Column(Boolean, default=False, nullable=False)
    status = Column(String, default=UserStatus.INACTIVE.value, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    role = relationship("Role", back_populates="users")
    customer = relationship("Customer", back_populates="users")


class CustomerSuccessOwnedCustomer(Base):
    """Assignment of a customer-success user to a customer they look after."""
    __tablename__ = "customer_success_owned_customers"

    user_id = Column(SQLUUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(SQLUUID, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
