# Import all models so SQLAlchemy metadata is populated for Alembic autogenerate
from marketplace.models.enums import CarCategory, UserRole, VehicleType
from marketplace.models.refresh_token import RefreshToken
from marketplace.models.user import User
from marketplace.models.vehicle import Car, Cart, Motorcycle, Trailer, Truck, Vehicle
from marketplace.models.vehicle_follow import VehicleFollow

__all__ = [
    "CarCategory",
    "UserRole",
    "VehicleType",
    "RefreshToken",
    "User",
    "Vehicle",
    "Motorcycle",
    "Car",
    "Truck",
    "Trailer",
    "Cart",
    "VehicleFollow",
]
