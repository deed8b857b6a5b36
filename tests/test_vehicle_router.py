"""Tests for the /api/vehicles endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from marketplace.models.user import User
from marketplace.schemas.responses import ServiceResult, not_found


def _merchant() -> User:
    return User(id=10, email="dealer@example.com", full_name="Dealer", roles=["ROLE_MERCHANT"], is_active=True)


def _buyer() -> User:
    return User(id=20, email="buyer@example.com", full_name="Buyer", roles=["ROLE_BUYER"], is_active=True)


@pytest.fixture
def mock_svc():
    with patch("marketplace.modules.vehicle.router.VehicleService") as mock_svc_cls:
        svc = AsyncMock()
        mock_svc_cls.return_value = svc
        yield svc


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_list_vehicles_passes_query_params(async_client, mock_svc):
    listing = {"vehicles": [], "pagination": {"currentPage": 2}, "pages": [1, 2]}
    mock_svc.list_vehicles.return_value = ServiceResult.ok(listing)

    response = await async_client.get("/api/vehicles", params={"page": "2", "brand": "bmw"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": listing}
    params = mock_svc.list_vehicles.call_args[0][0]
    assert params["page"] == "2"
    assert params["brand"] == "bmw"


@pytest.mark.asyncio
async def test_list_vehicles_invalid_filters_are_422(async_client, mock_svc):
    mock_svc.list_vehicles.return_value = ServiceResult.invalid({"minPrice": "Input should be a valid decimal"})

    response = await async_client.get("/api/vehicles", params={"minPrice": "abc"})

    assert response.status_code == 422
    assert response.json()["errors"] == {"minPrice": "Input should be a valid decimal"}


@pytest.mark.asyncio
async def test_search_short_term_is_400(async_client, mock_svc):
    mock_svc.search_vehicles.return_value = ServiceResult.fail("Search term must be at least 2 characters long")

    response = await async_client.get("/api/vehicles/search", params={"q": "a"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Search term must be at least 2 characters long"}


@pytest.mark.asyncio
async def test_vehicle_details_not_found(async_client, mock_svc):
    mock_svc.get_vehicle_details.return_value = not_found("Vehicle")

    response = await async_client.get("/api/vehicles/999")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Vehicle not found"}
    mock_svc.get_vehicle_details.assert_awaited_once_with(999, None)


@pytest.mark.asyncio
async def test_vehicle_details_passes_logged_in_viewer(async_client, mock_svc, login_as):
    buyer = _buyer()
    login_as(buyer)
    mock_svc.get_vehicle_details.return_value = ServiceResult.ok({"vehicle": {"id": 1}, "isFollowed": False})

    response = await async_client.get("/api/vehicles/1")

    assert response.status_code == 200
    assert response.json()["data"]["isFollowed"] is False
    mock_svc.get_vehicle_details.assert_awaited_once_with(1, buyer)


@pytest.mark.asyncio
async def test_non_numeric_id_uses_error_envelope(async_client):
    response = await async_client.get("/api/vehicles/abc", headers={"X-Request-ID": "req-123"})

    assert response.status_code == 422
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["requestId"] == "req-123"
    assert body["error"]["details"][0]["field"] == "path.vehicle_id"
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_my_vehicles_requires_authentication(async_client):
    response = await async_client.get("/api/vehicles/my-vehicles")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_my_vehicles_forbidden_for_buyers(async_client, login_as):
    login_as(_buyer())

    response = await async_client.get("/api/vehicles/my-vehicles")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_my_vehicles_for_merchant(async_client, mock_svc, login_as):
    merchant = _merchant()
    login_as(merchant)
    mock_svc.list_merchant_vehicles.return_value = ServiceResult.ok({"vehicles": []})

    response = await async_client.get("/api/vehicles/my-vehicles")

    assert response.status_code == 200
    mock_svc.list_merchant_vehicles.assert_awaited_once_with(merchant)
    mock_svc.get_vehicle_details.assert_not_called()


@pytest.mark.asyncio
async def test_create_vehicle_returns_201(async_client, mock_svc, login_as):
    merchant = _merchant()
    login_as(merchant)
    payload = {"type": "cart", "brand": "Club", "model": "Car", "price": 100, "quantity": 1}
    mock_svc.create_vehicle.return_value = ServiceResult.ok({"vehicle": {"id": 5}})

    response = await async_client.post("/api/vehicles", json=payload)

    assert response.status_code == 201
    assert response.json()["data"] == {"vehicle": {"id": 5}}
    mock_svc.create_vehicle.assert_awaited_once_with(payload, merchant)


@pytest.mark.asyncio
async def test_create_vehicle_entity_errors_are_422(async_client, mock_svc, login_as):
    login_as(_merchant())
    mock_svc.create_vehicle.return_value = ServiceResult.invalid({"category": "Car category is required"})

    response = await async_client.post("/api/vehicles", json={"type": "car"})

    assert response.status_code == 422
    assert response.json() == {"success": False, "errors": {"category": "Car category is required"}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "message"),
    [
        (b"", "Request body cannot be empty"),
        (b"[1, 2]", "Request data must be a JSON object"),
    ],
)
async def test_create_vehicle_rejects_unusable_body(async_client, mock_svc, login_as, body, message):
    login_as(_merchant())

    response = await async_client.post(
        "/api/vehicles", content=body, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": message}
    mock_svc.create_vehicle.assert_not_called()


@pytest.mark.asyncio
async def test_create_vehicle_rejects_malformed_json(async_client, mock_svc, login_as):
    login_as(_merchant())

    response = await async_client.post(
        "/api/vehicles", content=b"{broken", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid JSON")


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["PUT", "PATCH"])
async def test_update_vehicle_accepts_put_and_patch(async_client, mock_svc, login_as, method):
    merchant = _merchant()
    login_as(merchant)
    mock_svc.update_vehicle.return_value = ServiceResult.fail("You can only update your own vehicles")

    response = await async_client.request(method, "/api/vehicles/3", json={"price": 10})

    assert response.status_code == 400
    mock_svc.update_vehicle.assert_awaited_once_with(3, {"price": 10}, merchant)


@pytest.mark.asyncio
async def test_delete_vehicle(async_client, mock_svc, login_as):
    merchant = _merchant()
    login_as(merchant)
    mock_svc.delete_vehicle.return_value = ServiceResult.ok({"message": "Vehicle deleted successfully"})

    response = await async_client.delete("/api/vehicles/3")

    assert response.status_code == 200
    mock_svc.delete_vehicle.assert_awaited_once_with(3, merchant)


@pytest.mark.asyncio
async def test_follow_and_unfollow_for_buyer(async_client, mock_svc, login_as):
    buyer = _buyer()
    login_as(buyer)
    mock_svc.follow_vehicle.return_value = ServiceResult.ok({"message": "Vehicle followed successfully"})
    mock_svc.unfollow_vehicle.return_value = ServiceResult.fail("You are not following this vehicle")

    followed = await async_client.post("/api/vehicles/4/follow")
    unfollowed = await async_client.delete("/api/vehicles/4/unfollow")

    assert followed.status_code == 200
    assert unfollowed.status_code == 400
    mock_svc.follow_vehicle.assert_awaited_once_with(4, buyer)


@pytest.mark.asyncio
async def test_followed_list_forbidden_for_merchant_only_account(async_client, login_as):
    login_as(_merchant())

    response = await async_client.get("/api/vehicles/followed")

    assert response.status_code == 403
