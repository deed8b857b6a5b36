"""Building, updating and serializing vehicle entities."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from marketplace.models.enums import VehicleType
from marketplace.models.vehicle import (
    Car,
    Cart,
    ColouredMixin,
    EngineMixin,
    LoadCapacityMixin,
    Motorcycle,
    PermittedMaxMassMixin,
    Trailer,
    Truck,
    Vehicle,
)
from marketplace.modules.vehicle.constants import (
    DATETIME_FORMAT,
    DEFAULT_ENGINE_CAPACITY,
    DEFAULT_LOAD_CAPACITY,
    DEFAULT_NUMBER_OF_AXLES,
    DEFAULT_NUMBER_OF_BEDS,
    DEFAULT_NUMBER_OF_DOORS,
    DEFAULT_PERMITTED_MAXIMUM_MASS,
)
from marketplace.modules.vehicle.schemas import VehicleCreate, VehicleUpdate

VEHICLE_CLASSES: dict[VehicleType, type[Vehicle]] = {
    VehicleType.MOTORCYCLE: Motorcycle,
    VehicleType.CAR: Car,
    VehicleType.TRUCK: Truck,
    VehicleType.TRAILER: Trailer,
    VehicleType.CART: Cart,
}

_BASE_FIELDS = ("brand", "model", "price", "quantity")


def _type_fields(vehicle_cls: type[Vehicle]) -> tuple[str, ...]:
    """Attribute names a vehicle class carries beyond the shared ones."""
    fields: list[str] = []
    if issubclass(vehicle_cls, ColouredMixin):
        fields.append("colour")
    if issubclass(vehicle_cls, EngineMixin):
        fields.append("engine_capacity")
    if issubclass(vehicle_cls, LoadCapacityMixin):
        fields.append("load_capacity")
    if issubclass(vehicle_cls, PermittedMaxMassMixin):
        fields.append("permitted_maximum_mass")
    if issubclass(vehicle_cls, Car):
        fields.extend(("number_of_doors", "category"))
    if issubclass(vehicle_cls, Truck):
        fields.append("number_of_beds")
    if issubclass(vehicle_cls, Trailer):
        fields.append("number_of_axles")
    return tuple(fields)


_DEFAULTS: dict[str, Any] = {
    "colour": "",
    "engine_capacity": Decimal(DEFAULT_ENGINE_CAPACITY),
    "load_capacity": DEFAULT_LOAD_CAPACITY,
    "permitted_maximum_mass": DEFAULT_PERMITTED_MAXIMUM_MASS,
    "number_of_doors": DEFAULT_NUMBER_OF_DOORS,
    "category": None,
    "number_of_beds": DEFAULT_NUMBER_OF_BEDS,
    "number_of_axles": DEFAULT_NUMBER_OF_AXLES,
}


def create_vehicle_by_type(request: VehicleCreate) -> Vehicle:
    """Instantiate the subclass for ``request.type``.

    Fields the type does not carry are ignored; omitted type fields get their
    defaults, which entity validation may then reject.
    """
    vehicle_cls = VEHICLE_CLASSES[request.type]
    values = {name: getattr(request, name) for name in _BASE_FIELDS}
    for name in _type_fields(vehicle_cls):
        value = getattr(request, name)
        values[name] = _DEFAULTS[name] if value is None else value
    return vehicle_cls(**values)


def update_vehicle_with_data(vehicle: Vehicle, request: VehicleUpdate) -> list[str]:
    """Copy the fields the client actually sent onto *vehicle*.

    Returns the attribute names that were changed.
    """
    allowed = _BASE_FIELDS + _type_fields(type(vehicle))
    changed: list[str] = []
    for name in allowed:
        if name not in request.model_fields_set:
            continue
        value = getattr(request, name)
        if value is None and name in _BASE_FIELDS:
            continue
        setattr(vehicle, name, value)
        changed.append(name)
    return changed


def _decimal(value: Decimal | None) -> str | None:
    return None if value is None else f"{value:.2f}"


def _timestamp(value) -> str | None:
    return value.strftime(DATETIME_FORMAT) if value is not None else None


def format_vehicle(vehicle: Vehicle) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": vehicle.id,
        "type": vehicle.type,
        "brand": vehicle.brand,
        "model": vehicle.model,
        "price": _decimal(vehicle.price),
        "quantity": vehicle.quantity,
        "createdAt": _timestamp(vehicle.created_at),
        "updatedAt": _timestamp(vehicle.updated_at),
        "followersCount": len(vehicle.follows),
    }

    merchant = vehicle.merchant
    if merchant is not None:
        data["merchant"] = {"id": merchant.id, "fullName": merchant.full_name, "email": merchant.email}

    if isinstance(vehicle, ColouredMixin):
        data["colour"] = vehicle.colour
    if isinstance(vehicle, EngineMixin):
        data["engineCapacity"] = _decimal(vehicle.engine_capacity)
    if isinstance(vehicle, LoadCapacityMixin):
        data["loadCapacity"] = vehicle.load_capacity
    if isinstance(vehicle, PermittedMaxMassMixin):
        data["permittedMaximumMass"] = vehicle.permitted_maximum_mass
    if isinstance(vehicle, Car):
        data["numberOfDoors"] = vehicle.number_of_doors
        data["category"] = vehicle.category.value if vehicle.category is not None else None
    if isinstance(vehicle, Truck):
        data["numberOfBeds"] = vehicle.number_of_beds
    if isinstance(vehicle, Trailer):
        data["numberOfAxles"] = vehicle.number_of_axles

    return data
