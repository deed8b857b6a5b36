"""Pydantic request schemas for the vehicle module.

Fields use snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from marketplace.config import settings
from marketplace.models.enums import CarCategory, VehicleType
from marketplace.modules.vehicle.constants import (
    MAX_BRAND_LENGTH,
    MAX_COLOUR_LENGTH,
    MAX_MODEL_LENGTH,
)


class _VehicleModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class VehicleCreate(_VehicleModel):
    type: VehicleType
    brand: str = Field(..., min_length=1, max_length=MAX_BRAND_LENGTH)
    model: str = Field(..., min_length=1, max_length=MAX_MODEL_LENGTH)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., ge=0, strict=True)

    colour: str | None = Field(None, max_length=MAX_COLOUR_LENGTH)
    engine_capacity: Decimal | None = Field(None, ge=0, max_digits=8, decimal_places=2)
    number_of_doors: int | None = None
    category: CarCategory | None = None
    number_of_beds: int | None = None
    number_of_axles: int | None = None
    load_capacity: int | None = Field(None, ge=0)
    permitted_maximum_mass: int | None = Field(None, ge=0)


class VehicleUpdate(_VehicleModel):
    brand: str | None = Field(None, min_length=1, max_length=MAX_BRAND_LENGTH)
    model: str | None = Field(None, min_length=1, max_length=MAX_MODEL_LENGTH)
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    quantity: int | None = Field(None, ge=0, strict=True)

    colour: str | None = Field(None, max_length=MAX_COLOUR_LENGTH)
    engine_capacity: Decimal | None = Field(None, ge=0, max_digits=8, decimal_places=2)
    number_of_doors: int | None = None
    category: CarCategory | None = None
    number_of_beds: int | None = None
    number_of_axles: int | None = None
    load_capacity: int | None = Field(None, ge=0)
    permitted_maximum_mass: int | None = Field(None, ge=0)


class _PageQuery(_VehicleModel):
    page: int = Field(1, ge=1)
    limit: int = Field(default_factory=lambda: settings.default_page_size, ge=1)

    @field_validator("limit")
    @classmethod
    def cap_limit(cls, value: int) -> int:
        if value > settings.max_page_size:
            raise PydanticCustomError(
                "limit_too_large",
                "Limit cannot be greater than {max_size}",
                {"max_size": settings.max_page_size},
            )
        return value


class VehicleListQuery(_PageQuery):
    brand: str | None = Field(None, max_length=MAX_BRAND_LENGTH)
    model: str | None = Field(None, max_length=MAX_MODEL_LENGTH)
    colour: str | None = Field(None, max_length=MAX_COLOUR_LENGTH)
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)
    in_stock: bool = True
    type: VehicleType | None = None

    @field_validator("max_price")
    @classmethod
    def max_not_below_min(cls, value: Decimal | None, info: ValidationInfo) -> Decimal | None:
        min_price = info.data.get("min_price")
        if value is not None and min_price is not None and value < min_price:
            raise PydanticCustomError(
                "price_range",
                "Maximum price must be greater than or equal to minimum price",
            )
        return value


class VehicleSearchQuery(_PageQuery):
    q: str = ""
