from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from helpdesk.core.database import Base

ROLES = ("user", "admin")


class User(Base):
    __tablename__ = "users"
    # Email is unique per tenant, not globally.
    __table_args__ = (UniqueConstraint("email", "tenant_id", name="uq_users_email_tenant"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    email = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="users")
    tickets = relationship("Ticket", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
