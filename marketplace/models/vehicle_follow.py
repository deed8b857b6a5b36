from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.database.base import Base, IntegerPrimaryKeyMixin, utcnow

if TYPE_CHECKING:
    from marketplace.models.user import User
    from marketplace.models.vehicle import Vehicle


class VehicleFollow(IntegerPrimaryKeyMixin, Base):
    __tablename__ = "vehicle_follows"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vehicle_id: Mapped[int] = mapped_column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    followed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="vehicle_follows")
    vehicle: Mapped[Vehicle] = relationship("Vehicle", back_populates="follows")

    __table_args__ = (
        UniqueConstraint("user_id", "vehicle_id", name="unique_user_vehicle_follow"),
        Index("ix_vehicle_follows_vehicle_id", "vehicle_id"),
    )
