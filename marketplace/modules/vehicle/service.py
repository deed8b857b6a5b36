"""Vehicle service — listings, search, merchant inventory and follows."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from marketplace.api.pagination import build_listing, clamp_page, last_page_for
from marketplace.api.requests import errors_from_validation
from marketplace.config import settings
from marketplace.models.user import User
from marketplace.models.vehicle import Vehicle
from marketplace.models.vehicle_follow import VehicleFollow
from marketplace.modules.vehicle.factory import (
    create_vehicle_by_type,
    format_vehicle,
    update_vehicle_with_data,
)
from marketplace.modules.vehicle.schemas import (
    VehicleCreate,
    VehicleListQuery,
    VehicleSearchQuery,
    VehicleUpdate,
)
from marketplace.modules.vehicle.validators import validate_search_term, validate_vehicle
from marketplace.schemas.responses import ServiceResult, not_found

logger = logging.getLogger(__name__)

_vehicles_table = Vehicle.__table__


def _with_relations(query: Select) -> Select:
    return query.options(selectinload(Vehicle.merchant), selectinload(Vehicle.follows))


class VehicleService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_vehicles(self, params: Mapping[str, Any]) -> ServiceResult:
        """Paginated listing, newest first, in-stock only unless ``inStock=false``."""
        try:
            query = VehicleListQuery.model_validate(dict(params))
        except ValidationError as exc:
            return ServiceResult.invalid(errors_from_validation(exc))

        conditions = []
        if query.in_stock:
            conditions.append(Vehicle.quantity > 0)
        if query.brand:
            conditions.append(Vehicle.brand.ilike(f"%{query.brand}%"))
        if query.model:
            conditions.append(Vehicle.model.ilike(f"%{query.model}%"))
        if query.colour:
            conditions.append(_vehicles_table.c.colour.ilike(f"%{query.colour}%"))
        if query.min_price is not None:
            conditions.append(Vehicle.price >= query.min_price)
        if query.max_price is not None:
            conditions.append(Vehicle.price <= query.max_price)
        if query.type is not None:
            conditions.append(Vehicle.type == query.type.value)

        return await self._paginate(conditions, query.page, query.limit)

    async def search_vehicles(self, params: Mapping[str, Any]) -> ServiceResult:
        """Case-insensitive brand/model search among in-stock vehicles."""
        try:
            query = VehicleSearchQuery.model_validate(dict(params))
        except ValidationError as exc:
            return ServiceResult.invalid(errors_from_validation(exc))

        term = query.q.strip()
        error = validate_search_term(term)
        if error is not None:
            return ServiceResult.fail(error)

        pattern = f"%{term.lower()}%"
        conditions = [
            Vehicle.quantity > 0,
            or_(func.lower(Vehicle.brand).like(pattern), func.lower(Vehicle.model).like(pattern)),
        ]
        return await self._paginate(conditions, query.page, query.limit)

    async def list_merchant_vehicles(self, merchant: User) -> ServiceResult:
        result = await self._session.execute(
            _with_relations(select(Vehicle))
            .where(Vehicle.merchant_id == merchant.id)
            .order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
        )
        vehicles = result.scalars().all()
        return ServiceResult.ok({"vehicles": [format_vehicle(v) for v in vehicles]})

    async def list_followed_vehicles(self, buyer: User) -> ServiceResult:
        result = await self._session.execute(
            _with_relations(select(Vehicle))
            .join(VehicleFollow, VehicleFollow.vehicle_id == Vehicle.id)
            .where(VehicleFollow.user_id == buyer.id)
            .order_by(VehicleFollow.followed_at.desc())
        )
        vehicles = result.scalars().all()
        return ServiceResult.ok({"vehicles": [format_vehicle(v) for v in vehicles]})

    # ------------------------------------------------------------------
    # Single vehicle
    # ------------------------------------------------------------------

    async def get_vehicle_details(self, vehicle_id: int, viewer: User | None = None) -> ServiceResult:
        vehicle = await self._get_vehicle(vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")

        data: dict[str, Any] = {"vehicle": format_vehicle(vehicle)}
        if viewer is not None and viewer.is_buyer:
            data["isFollowed"] = await self._find_follow(viewer, vehicle) is not None
        return ServiceResult.ok(data)

    async def create_vehicle(self, data: dict[str, Any], merchant: User) -> ServiceResult:
        if not merchant.is_merchant:
            return ServiceResult.fail("Only merchants can create vehicles")

        try:
            request = VehicleCreate.model_validate(data)
        except ValidationError as exc:
            return ServiceResult.invalid(errors_from_validation(exc))

        vehicle = create_vehicle_by_type(request)
        errors = validate_vehicle(vehicle)
        if errors:
            return ServiceResult.invalid(errors)

        # A rollback expires the merchant; read its id first
        merchant_id = merchant.id
        vehicle.merchant = merchant
        vehicle.follows = []
        self._session.add(vehicle)
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Vehicle creation failed for merchant id=%s", merchant_id)
            return ServiceResult.fail(f"Failed to create vehicle: {exc.__class__.__name__}")

        logger.info("Merchant id=%s created %s id=%s", merchant_id, vehicle.type, vehicle.id)
        return ServiceResult.ok({"message": "Vehicle created successfully", "vehicle": format_vehicle(vehicle)})

    async def update_vehicle(self, vehicle_id: int, data: dict[str, Any], merchant: User) -> ServiceResult:
        vehicle = await self._get_vehicle(vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")
        if vehicle.merchant_id != merchant.id:
            return ServiceResult.fail("You can only update your own vehicles")

        try:
            request = VehicleUpdate.model_validate(data)
        except ValidationError as exc:
            return ServiceResult.invalid(errors_from_validation(exc))

        changed = update_vehicle_with_data(vehicle, request)
        if not changed:
            return ServiceResult.ok({"message": "Vehicle updated successfully", "vehicle": format_vehicle(vehicle)})

        errors = validate_vehicle(vehicle)
        if errors:
            # Drop the in-memory edits so the request commit leaves the row untouched
            await self._session.rollback()
            return ServiceResult.invalid(errors)

        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Vehicle update failed for id=%s", vehicle_id)
            return ServiceResult.fail(f"Failed to update vehicle: {exc.__class__.__name__}")

        return ServiceResult.ok({"message": "Vehicle updated successfully", "vehicle": format_vehicle(vehicle)})

    async def delete_vehicle(self, vehicle_id: int, merchant: User) -> ServiceResult:
        vehicle = await self._get_vehicle(vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")
        if vehicle.merchant_id != merchant.id:
            return ServiceResult.fail("You can only delete your own vehicles")

        try:
            await self._session.delete(vehicle)
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Vehicle deletion failed for id=%s", vehicle_id)
            return ServiceResult.fail(f"Failed to delete vehicle: {exc.__class__.__name__}")

        logger.info("Merchant id=%s deleted vehicle id=%s", merchant.id, vehicle_id)
        return ServiceResult.ok({"message": "Vehicle deleted successfully"})

    # ------------------------------------------------------------------
    # Follows
    # ------------------------------------------------------------------

    async def follow_vehicle(self, vehicle_id: int, buyer: User) -> ServiceResult:
        if not buyer.is_buyer:
            return ServiceResult.fail("Only buyers can follow vehicles")

        vehicle = await self._get_vehicle(vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")
        if await self._find_follow(buyer, vehicle) is not None:
            return ServiceResult.fail("You are already following this vehicle")

        self._session.add(VehicleFollow(user_id=buyer.id, vehicle=vehicle))
        try:
            await self._session.flush()
        except IntegrityError:
            # A concurrent request inserted the same follow first
            await self._session.rollback()
            return ServiceResult.fail("You are already following this vehicle")
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Follow failed for vehicle id=%s", vehicle_id)
            return ServiceResult.fail(f"Failed to follow vehicle: {exc.__class__.__name__}")

        return ServiceResult.ok(
            {"message": "Vehicle followed successfully", "followersCount": len(vehicle.follows)}
        )

    async def unfollow_vehicle(self, vehicle_id: int, buyer: User) -> ServiceResult:
        vehicle = await self._get_vehicle(vehicle_id)
        if vehicle is None:
            return not_found("Vehicle")

        follow = await self._find_follow(buyer, vehicle)
        if follow is None:
            return ServiceResult.fail("You are not following this vehicle")

        try:
            await self._session.delete(follow)
            await self._session.flush()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Unfollow failed for vehicle id=%s", vehicle_id)
            return ServiceResult.fail(f"Failed to unfollow vehicle: {exc.__class__.__name__}")

        return ServiceResult.ok({"message": "Vehicle unfollowed successfully"})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _paginate(self, conditions: list, page: int, limit: int) -> ServiceResult:
        count_result = await self._session.execute(
            select(func.count()).select_from(Vehicle).where(*conditions)
        )
        total = count_result.scalar() or 0

        current_page = clamp_page(page, last_page_for(total, limit))
        result = await self._session.execute(
            _with_relations(select(Vehicle))
            .where(*conditions)
            .order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
            .offset((current_page - 1) * limit)
            .limit(limit)
        )
        vehicles = [format_vehicle(v) for v in result.scalars().all()]

        listing = build_listing(
            vehicles,
            total,
            limit,
            current_page,
            max_visible=settings.max_visible_pages,
            items_key="vehicles",
        )
        return ServiceResult.ok(listing)

    async def _get_vehicle(self, vehicle_id: int) -> Vehicle | None:
        result = await self._session.execute(_with_relations(select(Vehicle)).where(Vehicle.id == vehicle_id))
        return result.scalar_one_or_none()

    async def _find_follow(self, user: User, vehicle: Vehicle) -> VehicleFollow | None:
        result = await self._session.execute(
            select(VehicleFollow).where(
                VehicleFollow.user_id == user.id,
                VehicleFollow.vehicle_id == vehicle.id,
            )
        )
        return result.scalar_one_or_none()
