"""Entity-level rules checked after a vehicle has been built or updated.

Request schemas catch malformed input; these rules catch combinations that
only make sense for a given vehicle type, including values filled in from
defaults.
"""

from __future__ import annotations

from marketplace.models.vehicle import (
    Car,
    ColouredMixin,
    EngineMixin,
    LoadCapacityMixin,
    PermittedMaxMassMixin,
    Trailer,
    Truck,
    Vehicle,
)
from marketplace.modules.vehicle.constants import (
    AXLE_CHOICES,
    BED_CHOICES,
    DOOR_CHOICES,
    MAX_COLOUR_LENGTH,
    MAX_SEARCH_LENGTH,
    MIN_SEARCH_LENGTH,
)


def _choices(values: tuple[int, ...]) -> str:
    if len(values) == 2:
        return f"{values[0]} or {values[1]}"
    return ", ".join(str(v) for v in values[:-1]) + f", or {values[-1]}"


def validate_vehicle(vehicle: Vehicle) -> dict[str, str]:
    """Return ``{field: message}`` for every rule *vehicle* breaks."""
    errors: dict[str, str] = {}

    if not (vehicle.brand or "").strip():
        errors["brand"] = "Brand is required"
    if not (vehicle.model or "").strip():
        errors["model"] = "Model is required"
    if vehicle.price is None or vehicle.price <= 0:
        errors["price"] = "Price must be positive"
    if vehicle.quantity is None or vehicle.quantity < 0:
        errors["quantity"] = "Quantity cannot be negative"

    if isinstance(vehicle, EngineMixin):
        if vehicle.engine_capacity is None or vehicle.engine_capacity <= 0:
            errors["engineCapacity"] = "Engine capacity must be positive"

    if isinstance(vehicle, ColouredMixin):
        colour = (vehicle.colour or "").strip()
        if not colour:
            errors["colour"] = "Colour is required"
        elif len(colour) > MAX_COLOUR_LENGTH:
            errors["colour"] = f"Colour cannot be longer than {MAX_COLOUR_LENGTH} characters"

    if isinstance(vehicle, PermittedMaxMassMixin):
        if vehicle.permitted_maximum_mass is None or vehicle.permitted_maximum_mass <= 0:
            errors["permittedMaximumMass"] = "Permitted maximum mass must be positive"

    if isinstance(vehicle, LoadCapacityMixin):
        if vehicle.load_capacity is None or vehicle.load_capacity <= 0:
            errors["loadCapacity"] = "Load capacity must be positive"

    if isinstance(vehicle, Car):
        if vehicle.number_of_doors not in DOOR_CHOICES:
            errors["numberOfDoors"] = f"Number of doors must be {_choices(DOOR_CHOICES)}"
        if vehicle.category is None:
            errors["category"] = "Car category is required"
    elif isinstance(vehicle, Truck):
        if vehicle.number_of_beds not in BED_CHOICES:
            errors["numberOfBeds"] = f"Number of beds must be {_choices(BED_CHOICES)}"
    elif isinstance(vehicle, Trailer):
        if vehicle.number_of_axles not in AXLE_CHOICES:
            errors["numberOfAxles"] = f"Number of axles must be {_choices(AXLE_CHOICES)}"

    return errors


def validate_search_term(term: str) -> str | None:
    """Return an error message for an unusable search term, else ``None``."""
    if not term:
        return "Search term is required"
    if len(term) < MIN_SEARCH_LENGTH:
        return f"Search term must be at least {MIN_SEARCH_LENGTH} characters long"
    if len(term) > MAX_SEARCH_LENGTH:
        return f"Search term cannot be longer than {MAX_SEARCH_LENGTH} characters"
    return None
