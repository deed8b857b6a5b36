"""Vehicle listings, mapped with single-table inheritance on ``type``.

Type-specific columns come from small mixins shared between subclasses;
``use_existing_column`` lets two subclasses declare the same column.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.database.base import Base, IntegerPrimaryKeyMixin, TimestampMixin
from marketplace.models.enums import CarCategory, VehicleType

if TYPE_CHECKING:
    from marketplace.models.user import User
    from marketplace.models.vehicle_follow import VehicleFollow


class Vehicle(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vehicles"

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, server_default="0", nullable=False)
    merchant_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    merchant: Mapped[User] = relationship("User", back_populates="vehicles")
    follows: Mapped[list[VehicleFollow]] = relationship(
        "VehicleFollow", back_populates="vehicle", cascade="all, delete-orphan"
    )

    __mapper_args__ = {"polymorphic_on": "type", "with_polymorphic": "*"}

    __table_args__ = (
        Index("ix_vehicles_merchant_id", "merchant_id"),
        Index("ix_vehicles_type", "type"),
    )

    @property
    def vehicle_type(self) -> VehicleType:
        return VehicleType(self.type)


class ColouredMixin:
    colour: Mapped[str | None] = mapped_column(String(50), nullable=True, use_existing_column=True)


class EngineMixin:
    engine_capacity: Mapped[Decimal | None] = mapped_column(
        Numeric(8, 2), nullable=True, use_existing_column=True
    )


class PermittedMaxMassMixin:
    permitted_maximum_mass: Mapped[int | None] = mapped_column(
        Integer, nullable=True, use_existing_column=True
    )


class LoadCapacityMixin:
    load_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True, use_existing_column=True)


class Motorcycle(ColouredMixin, EngineMixin, Vehicle):
    __mapper_args__ = {"polymorphic_identity": VehicleType.MOTORCYCLE.value}


class Car(ColouredMixin, EngineMixin, PermittedMaxMassMixin, Vehicle):
    number_of_doors: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category: Mapped[CarCategory | None] = mapped_column(
        SAEnum(
            CarCategory,
            native_enum=False,
            length=20,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=True,
    )

    __mapper_args__ = {"polymorphic_identity": VehicleType.CAR.value}


class Truck(ColouredMixin, EngineMixin, PermittedMaxMassMixin, Vehicle):
    number_of_beds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __mapper_args__ = {"polymorphic_identity": VehicleType.TRUCK.value}


class Trailer(LoadCapacityMixin, PermittedMaxMassMixin, Vehicle):
    number_of_axles: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __mapper_args__ = {"polymorphic_identity": VehicleType.TRAILER.value}


class Cart(ColouredMixin, LoadCapacityMixin, PermittedMaxMassMixin, Vehicle):
    __mapper_args__ = {"polymorphic_identity": VehicleType.CART.value}
