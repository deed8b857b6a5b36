"""Auth module API routers — registration, login, tokens and the user profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.requests import read_json_object
from marketplace.api.responses import create_api_response
from marketplace.app import limiter
from marketplace.database.session import get_db
from marketplace.models.user import User
from marketplace.modules.auth.auth import get_current_user
from marketplace.modules.auth.profile_service import ProfileService
from marketplace.modules.auth.schemas import ActivateAccountRequest, LoginRequest, RefreshTokenRequest
from marketplace.modules.auth.service import AuthService

# ====================================================================
# Auth Router
# ====================================================================

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register")
@limiter.limit("10/minute")
async def register(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    body = await read_json_object(request)
    if not body.success:
        return create_api_response(body)

    svc = AuthService(db)
    result = await svc.register(body.data)
    return create_api_response(result, 201)


@auth_router.post("/activate")
@limiter.limit("10/minute")
async def activate_account(
    request: Request,
    data: ActivateAccountRequest,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    svc = AuthService(db)
    result = await svc.activate(data.token)
    return create_api_response(result)


@auth_router.post("/login")
@limiter.limit("10/minute")
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    svc = AuthService(db)
    return await svc.login(data.email, data.password)


@auth_router.post("/token/refresh")
@limiter.limit("30/minute")
async def refresh_token(
    request: Request,
    data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    svc = AuthService(db)
    return await svc.refresh(data.refresh_token)


# ====================================================================
# User Profile Router
# ====================================================================

user_router = APIRouter(prefix="/user", tags=["user"])


@user_router.get("/profile")
@limiter.limit("60/minute")
async def get_profile(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    svc = ProfileService(db)
    return create_api_response(svc.get_profile(user))


@user_router.put("/update")
@limiter.limit("30/minute")
async def update_profile(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    body = await read_json_object(request)
    if not body.success:
        return create_api_response(body)

    svc = ProfileService(db)
    return create_api_response(await svc.update_profile(user, body.data))


@user_router.post("/change-password")
@limiter.limit("10/minute")
async def change_password(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> JSONResponse:
    body = await read_json_object(request)
    if not body.success:
        return create_api_response(body)

    svc = ProfileService(db)
    return create_api_response(await svc.change_password(user, body.data))
