"""Vehicle API router — public listings plus merchant and buyer actions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.requests import read_json_object
from marketplace.api.responses import create_api_response
from marketplace.app import limiter
from marketplace.database.session import get_db
from marketplace.models.user import User
from marketplace.modules.auth.auth import get_optional_user, require_buyer, require_merchant
from marketplace.modules.vehicle.service import VehicleService

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

# Static paths are registered before /{vehicle_id} so they are matched first.


@router.get("")
@limiter.limit("60/minute")
async def list_vehicles(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.list_vehicles(request.query_params))


@router.get("/search")
@limiter.limit("60/minute")
async def search_vehicles(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.search_vehicles(request.query_params))


@router.get("/my-vehicles")
@limiter.limit("60/minute")
async def list_my_vehicles(
    request: Request,
    db: AsyncSession = Depends(get_db),
    merchant: User = Depends(require_merchant),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.list_merchant_vehicles(merchant))


@router.get("/followed")
@limiter.limit("60/minute")
async def list_followed_vehicles(
    request: Request,
    db: AsyncSession = Depends(get_db),
    buyer: User = Depends(require_buyer),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.list_followed_vehicles(buyer))


@router.post("")
@limiter.limit("30/minute")
async def create_vehicle(
    request: Request,
    db: AsyncSession = Depends(get_db),
    merchant: User = Depends(require_merchant),
) -> JSONResponse:
    body = await read_json_object(request)
    if not body.success:
        return create_api_response(body)

    svc = VehicleService(db)
    return create_api_response(await svc.create_vehicle(body.data, merchant), 201)


@router.get("/{vehicle_id}")
@limiter.limit("60/minute")
async def get_vehicle(
    request: Request,
    vehicle_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.get_vehicle_details(vehicle_id, viewer))


@router.api_route("/{vehicle_id}", methods=["PUT", "PATCH"])
@limiter.limit("30/minute")
async def update_vehicle(
    request: Request,
    vehicle_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    merchant: User = Depends(require_merchant),
) -> JSONResponse:
    body = await read_json_object(request)
    if not body.success:
        return create_api_response(body)

    svc = VehicleService(db)
    return create_api_response(await svc.update_vehicle(vehicle_id, body.data, merchant))


@router.delete("/{vehicle_id}")
@limiter.limit("30/minute")
async def delete_vehicle(
    request: Request,
    vehicle_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    merchant: User = Depends(require_merchant),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.delete_vehicle(vehicle_id, merchant))


@router.post("/{vehicle_id}/follow")
@limiter.limit("30/minute")
async def follow_vehicle(
    request: Request,
    vehicle_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    buyer: User = Depends(require_buyer),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.follow_vehicle(vehicle_id, buyer))


@router.delete("/{vehicle_id}/unfollow")
@limiter.limit("30/minute")
async def unfollow_vehicle(
    request: Request,
    vehicle_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    buyer: User = Depends(require_buyer),
) -> JSONResponse:
    svc = VehicleService(db)
    return create_api_response(await svc.unfollow_vehicle(vehicle_id, buyer))
