from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.database.base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from marketplace.models.enums import UserRole

if TYPE_CHECKING:
    from marketplace.models.vehicle import Vehicle
    from marketplace.models.vehicle_follow import VehicleFollow


class User(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "users"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(180), unique=True, nullable=False)
    password: Mapped[str | None] = mapped_column(String(255))
    roles: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false", nullable=False)
    activation_token: Mapped[str | None] = mapped_column(String(128), unique=True)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    vehicles: Mapped[list[Vehicle]] = relationship("Vehicle", back_populates="merchant")
    vehicle_follows: Mapped[list[VehicleFollow]] = relationship(
        "VehicleFollow", back_populates="user", cascade="all, delete-orphan"
    )

    def get_roles(self) -> list[str]:
        """Stored roles, de-duplicated; every user is at least a buyer."""
        roles = list(self.roles or [])
        if not roles:
            roles.append(UserRole.BUYER.value)
        return list(dict.fromkeys(roles))

    def has_role(self, role: UserRole | str) -> bool:
        value = role.value if isinstance(role, UserRole) else role
        return value in self.get_roles()

    @property
    def is_merchant(self) -> bool:
        return self.has_role(UserRole.MERCHANT)

    @property
    def is_buyer(self) -> bool:
        return self.has_role(UserRole.BUYER)
