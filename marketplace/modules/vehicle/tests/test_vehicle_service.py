"""Tests for VehicleService — listings, merchant inventory and follows."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.api.responses import resolve_status_code
from marketplace.database.base import Base
from marketplace.models.enums import CarCategory
from marketplace.models.user import User
from marketplace.models.vehicle import Car, Motorcycle, Vehicle
from marketplace.models.vehicle_follow import VehicleFollow
from marketplace.modules.vehicle.service import VehicleService

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _make_user(user_id: int = 1, roles: list[str] | None = None) -> User:
    return User(
        id=user_id,
        email=f"user{user_id}@example.com",
        full_name=f"User {user_id}",
        roles=roles if roles is not None else ["ROLE_BUYER"],
        is_active=True,
    )


def _make_car(vehicle_id: int = 1, merchant: User | None = None, **overrides) -> Car:
    merchant = merchant or _make_user(99, ["ROLE_MERCHANT"])
    values = dict(
        id=vehicle_id,
        brand="Toyota",
        model="Corolla",
        price=Decimal("18000.00"),
        quantity=3,
        colour="Red",
        engine_capacity=Decimal("1.80"),
        permitted_maximum_mass=1800,
        number_of_doors=4,
        category=CarCategory.SEDAN,
        created_at=NOW - timedelta(days=vehicle_id),
        merchant_id=merchant.id,
    )
    values.update(overrides)
    car = Car(**values)
    car.merchant = merchant
    return car


def _one(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _count(total: int):
    result = MagicMock()
    result.scalar.return_value = total
    return result


def _many(items: list):
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    return result


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.add = MagicMock()
    session.flush = AsyncMock()
    return session


@pytest.fixture
def vehicle_service(mock_session):
    return VehicleService(mock_session)


# ── Listing and search ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_vehicles_returns_page_with_metadata(vehicle_service, mock_session):
    cars = [_make_car(i) for i in range(1, 4)]
    mock_session.execute.side_effect = [_count(25), _many(cars)]

    result = await vehicle_service.list_vehicles({"page": "2", "limit": "10"})

    assert resolve_status_code(result) == 200
    assert [v["id"] for v in result.data["vehicles"]] == [1, 2, 3]
    assert result.data["pagination"] == {
        "currentPage": 2,
        "lastPage": 3,
        "totalResults": 25,
        "hasPreviousPage": True,
        "hasNextPage": True,
        "previousPage": 1,
        "nextPage": 3,
        "hasToPaginate": True,
    }
    assert result.data["pages"] == [1, 2, 3]


@pytest.mark.asyncio
async def test_list_vehicles_clamps_page_past_the_end(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_count(5), _many([_make_car()])]

    result = await vehicle_service.list_vehicles({"page": "40"})

    pagination = result.data["pagination"]
    assert pagination["currentPage"] == 1
    assert pagination["lastPage"] == 1
    assert pagination["hasToPaginate"] is False
    assert result.data["pages"] == [1]


@pytest.mark.asyncio
async def test_list_vehicles_with_no_results_has_one_empty_page(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_count(0), _many([])]

    result = await vehicle_service.list_vehicles({})

    assert result.data["vehicles"] == []
    assert result.data["pagination"]["lastPage"] == 1
    assert result.data["pagination"]["totalResults"] == 0


@pytest.mark.asyncio
async def test_list_vehicles_rejects_invalid_filters(vehicle_service, mock_session):
    result = await vehicle_service.list_vehicles({"minPrice": "abc", "type": "spaceship", "page": "0"})

    assert resolve_status_code(result) == 422
    assert set(result.errors) == {"minPrice", "type", "page"}
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_search_requires_usable_term(vehicle_service, mock_session):
    result = await vehicle_service.search_vehicles({"q": " b "})

    assert result.error == "Search term must be at least 2 characters long"
    assert resolve_status_code(result) == 400
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_search_paginates_matches(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_count(1), _many([_make_car()])]

    result = await vehicle_service.search_vehicles({"q": "toyo"})

    assert result.success is True
    assert result.data["vehicles"][0]["brand"] == "Toyota"
    assert result.data["pagination"]["totalResults"] == 1


# ── Details ───────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_details_for_unknown_vehicle_is_not_found(vehicle_service, mock_session):
    mock_session.execute.return_value = _one(None)

    result = await vehicle_service.get_vehicle_details(404)

    assert result.error == "Vehicle not found"
    assert resolve_status_code(result) == 404


@pytest.mark.asyncio
async def test_details_tell_a_buyer_whether_they_follow(vehicle_service, mock_session):
    buyer = _make_user(5)
    car = _make_car()
    mock_session.execute.side_effect = [_one(car), _one(VehicleFollow(user_id=5, vehicle_id=1))]

    result = await vehicle_service.get_vehicle_details(1, buyer)

    assert result.data["isFollowed"] is True
    assert result.data["vehicle"]["id"] == 1


@pytest.mark.asyncio
async def test_details_omit_follow_flag_for_anonymous_and_merchants(vehicle_service, mock_session):
    car = _make_car()
    mock_session.execute.return_value = _one(car)

    anonymous = await vehicle_service.get_vehicle_details(1)
    merchant_view = await vehicle_service.get_vehicle_details(1, _make_user(2, ["ROLE_MERCHANT"]))

    assert "isFollowed" not in anonymous.data
    assert "isFollowed" not in merchant_view.data
    assert mock_session.execute.await_count == 2


# ── Create / update / delete ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_vehicle_for_merchant(vehicle_service, mock_session):
    merchant = _make_user(7, ["ROLE_MERCHANT"])

    result = await vehicle_service.create_vehicle(
        {
            "type": "motorcycle",
            "brand": "Ducati",
            "model": "Monster",
            "price": 12500,
            "quantity": 2,
            "colour": "Red",
            "engineCapacity": 0.94,
        },
        merchant,
    )

    assert resolve_status_code(result, 201) == 201
    created = mock_session.add.call_args[0][0]
    assert isinstance(created, Motorcycle)
    assert created.merchant is merchant
    assert result.data["vehicle"]["merchant"]["id"] == 7
    assert result.data["vehicle"]["engineCapacity"] == "0.94"
    assert result.data["vehicle"]["followersCount"] == 0


@pytest.mark.asyncio
async def test_create_vehicle_reports_entity_rule_violations(vehicle_service, mock_session):
    merchant = _make_user(7, ["ROLE_MERCHANT"])

    result = await vehicle_service.create_vehicle(
        {"type": "car", "brand": "Fiat", "model": "Panda", "price": 9000, "quantity": 1},
        merchant,
    )

    assert resolve_status_code(result, 201) == 422
    assert result.errors["category"] == "Car category is required"
    assert result.errors["engineCapacity"] == "Engine capacity must be positive"
    assert result.errors["colour"] == "Colour is required"
    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_create_vehicle_requires_merchant(vehicle_service, mock_session):
    result = await vehicle_service.create_vehicle({"type": "cart"}, _make_user(3))

    assert result.error == "Only merchants can create vehicles"


@pytest.mark.asyncio
async def test_create_vehicle_rolls_back_on_database_error(vehicle_service, mock_session):
    mock_session.flush.side_effect = OperationalError("INSERT", {}, Exception("db down"))

    result = await vehicle_service.create_vehicle(
        {
            "type": "cart",
            "brand": "Club",
            "model": "Car",
            "price": 4000,
            "quantity": 1,
            "colour": "White",
            "loadCapacity": 200,
            "permittedMaximumMass": 600,
        },
        _make_user(7, ["ROLE_MERCHANT"]),
    )

    assert result.error == "Failed to create vehicle: OperationalError"
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_vehicle_rejects_other_merchants(vehicle_service, mock_session):
    mock_session.execute.return_value = _one(_make_car(merchant=_make_user(99, ["ROLE_MERCHANT"])))

    result = await vehicle_service.update_vehicle(1, {"price": 1}, _make_user(8, ["ROLE_MERCHANT"]))

    assert result.error == "You can only update your own vehicles"
    assert resolve_status_code(result) == 400


@pytest.mark.asyncio
async def test_update_vehicle_applies_changes(vehicle_service, mock_session):
    merchant = _make_user(99, ["ROLE_MERCHANT"])
    car = _make_car(merchant=merchant)
    mock_session.execute.return_value = _one(car)

    result = await vehicle_service.update_vehicle(1, {"price": 17500, "numberOfDoors": 3}, merchant)

    assert result.success is True
    assert car.price == Decimal("17500")
    assert car.number_of_doors == 3
    assert result.data["vehicle"]["price"] == "17500.00"
    mock_session.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_vehicle_discards_invalid_entity(vehicle_service, mock_session):
    merchant = _make_user(99, ["ROLE_MERCHANT"])
    mock_session.execute.return_value = _one(_make_car(merchant=merchant))

    result = await vehicle_service.update_vehicle(1, {"numberOfDoors": 7}, merchant)

    assert result.errors == {"numberOfDoors": "Number of doors must be 3, 4, or 5"}
    mock_session.rollback.assert_awaited_once()
    mock_session.flush.assert_not_called()


@pytest.mark.asyncio
async def test_update_vehicle_without_applicable_fields_skips_flush(vehicle_service, mock_session):
    merchant = _make_user(99, ["ROLE_MERCHANT"])
    car = _make_car(merchant=merchant)
    mock_session.execute.return_value = _one(car)

    # Cars have no beds, so nothing on the entity changes
    result = await vehicle_service.update_vehicle(1, {"numberOfBeds": 2}, merchant)

    assert result.success is True
    assert result.data["vehicle"]["price"] == "18000.00"
    mock_session.flush.assert_not_called()
    mock_session.rollback.assert_not_called()


@pytest.mark.asyncio
async def test_delete_vehicle_by_owner(vehicle_service, mock_session):
    merchant = _make_user(99, ["ROLE_MERCHANT"])
    car = _make_car(merchant=merchant)
    mock_session.execute.return_value = _one(car)

    result = await vehicle_service.delete_vehicle(1, merchant)

    assert result.data == {"message": "Vehicle deleted successfully"}
    mock_session.delete.assert_awaited_once_with(car)


@pytest.mark.asyncio
async def test_delete_vehicle_rejects_other_merchants(vehicle_service, mock_session):
    mock_session.execute.return_value = _one(_make_car())

    result = await vehicle_service.delete_vehicle(1, _make_user(8, ["ROLE_MERCHANT"]))

    assert result.error == "You can only delete your own vehicles"
    mock_session.delete.assert_not_called()


# ── Follows ───────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_follow_vehicle(vehicle_service, mock_session):
    car = _make_car()
    mock_session.execute.side_effect = [_one(car), _one(None)]

    result = await vehicle_service.follow_vehicle(1, _make_user(5))

    assert result.data == {"message": "Vehicle followed successfully", "followersCount": 1}
    follow = mock_session.add.call_args[0][0]
    assert isinstance(follow, VehicleFollow)
    assert follow.user_id == 5
    assert follow.vehicle is car


@pytest.mark.asyncio
async def test_follow_vehicle_twice_is_rejected(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_one(_make_car()), _one(VehicleFollow(user_id=5, vehicle_id=1))]

    result = await vehicle_service.follow_vehicle(1, _make_user(5))

    assert result.error == "You are already following this vehicle"
    mock_session.add.assert_not_called()


@pytest.mark.asyncio
async def test_follow_race_on_unique_constraint(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_one(_make_car()), _one(None)]
    mock_session.flush.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    result = await vehicle_service.follow_vehicle(1, _make_user(5))

    assert result.error == "You are already following this vehicle"
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_only_buyers_follow(vehicle_service, mock_session):
    result = await vehicle_service.follow_vehicle(1, _make_user(2, ["ROLE_MERCHANT"]))

    assert result.error == "Only buyers can follow vehicles"
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_unfollow_without_follow_is_rejected(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_one(_make_car()), _one(None)]

    result = await vehicle_service.unfollow_vehicle(1, _make_user(5))

    assert result.error == "You are not following this vehicle"
    assert resolve_status_code(result) == 400


@pytest.mark.asyncio
async def test_unfollow_vehicle(vehicle_service, mock_session):
    follow = VehicleFollow(user_id=5, vehicle_id=1)
    mock_session.execute.side_effect = [_one(_make_car()), _one(follow)]

    result = await vehicle_service.unfollow_vehicle(1, _make_user(5))

    assert result.success is True
    mock_session.delete.assert_awaited_once_with(follow)


@pytest.mark.asyncio
async def test_followed_and_merchant_lists(vehicle_service, mock_session):
    mock_session.execute.side_effect = [_many([_make_car(2), _make_car(1)]), _many([_make_car(3)])]

    followed = await vehicle_service.list_followed_vehicles(_make_user(5))
    mine = await vehicle_service.list_merchant_vehicles(_make_user(99, ["ROLE_MERCHANT"]))

    assert [v["id"] for v in followed.data["vehicles"]] == [2, 1]
    assert [v["id"] for v in mine.data["vehicles"]] == [3]


# ── Rollback on a real session ────────────────────────────────────────────

# Use SQLite for lightweight in-process testing
SQLITE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def sqlite_session():
    engine = create_async_engine(SQLITE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


async def _load_merchant(session: AsyncSession) -> User:
    session.add(
        User(
            email="dealer@example.com",
            full_name="Dealer",
            password="x",
            roles=["ROLE_MERCHANT"],
            is_active=True,
        )
    )
    await session.commit()
    # Reloading opens the transaction a request would be running in
    result = await session.execute(select(User).where(User.email == "dealer@example.com"))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_create_vehicle_database_error_after_rollback_expires_merchant(sqlite_session):
    merchant = await _load_merchant(sqlite_session)
    service = VehicleService(sqlite_session)
    failure = OperationalError("INSERT INTO vehicles", {}, Exception("disk I/O error"))

    with patch.object(sqlite_session, "flush", AsyncMock(side_effect=failure)):
        result = await service.create_vehicle(
            {
                "type": "cart",
                "brand": "Club",
                "model": "Car",
                "price": 4000,
                "quantity": 1,
                "colour": "White",
                "loadCapacity": 200,
                "permittedMaximumMass": 600,
            },
            merchant,
        )

    assert result.error == "Failed to create vehicle: OperationalError"
    assert resolve_status_code(result, 201) == 400
    assert inspect(merchant).expired

    count = await sqlite_session.execute(select(func.count()).select_from(Vehicle))
    assert count.scalar() == 0


@pytest.mark.asyncio
async def test_update_vehicle_rule_failure_leaves_stored_row(sqlite_session):
    merchant = await _load_merchant(sqlite_session)
    service = VehicleService(sqlite_session)

    created = await service.create_vehicle(
        {
            "type": "car",
            "brand": "Toyota",
            "model": "Corolla",
            "price": 18000,
            "quantity": 3,
            "colour": "Red",
            "engineCapacity": 1.8,
            "permittedMaximumMass": 1800,
            "numberOfDoors": 4,
            "category": "sedan",
        },
        merchant,
    )
    assert created.success is True, created.errors
    vehicle_id = created.data["vehicle"]["id"]
    await sqlite_session.commit()

    merchant = (await sqlite_session.execute(select(User).where(User.email == "dealer@example.com"))).scalar_one()
    result = await service.update_vehicle(vehicle_id, {"numberOfDoors": 7}, merchant)

    assert result.errors == {"numberOfDoors": "Number of doors must be 3, 4, or 5"}
    doors = await sqlite_session.execute(select(Car.number_of_doors).where(Car.id == vehicle_id))
    assert doors.scalar_one() == 4
