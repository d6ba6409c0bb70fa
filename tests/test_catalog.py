"""Tests for dish catalog management"""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.models.menu import DishStatus
from app.schemas.menu import DishStockUpdate, DishVariantCreate
from app.services import catalog


@pytest.mark.asyncio
async def test_create_dish(manager_client: AsyncClient):
    response = await manager_client.post(
        "/dishes",
        json={
            "name": "Lasagna",
            "price": "14.50",
            "allergens": ["gluten", "dairy"],
            "tags": ["baked"],
            "stock_quantity": 6,
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Lasagna"
    assert Decimal(data["price"]) == Decimal("14.50")
    assert data["status"] == "available"
    assert data["stock_quantity"] == 6
    assert data["variants"] == []


@pytest.mark.asyncio
async def test_create_dish_with_zero_stock_is_out_of_stock(manager_client: AsyncClient):
    response = await manager_client.post(
        "/dishes",
        json={"name": "Soup of the day", "price": "6.00", "stock_quantity": 0},
    )

    assert response.status_code == 201
    assert response.json()["status"] == "out_of_stock"


@pytest.mark.asyncio
async def test_create_dish_requires_positive_price(manager_client: AsyncClient):
    response = await manager_client.post("/dishes", json={"name": "Free", "price": "0"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_employee_cannot_create_dish(authenticated_client: AsyncClient):
    response = await authenticated_client.post("/dishes", json={"name": "Lasagna", "price": "14.50"})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_dishes_is_public(client: AsyncClient, test_dish, untracked_dish):
    response = await client.get("/dishes")

    assert response.status_code == 200
    names = [dish["name"] for dish in response.json()]
    assert names == ["Caesar Salad", "Margherita Pizza"]


@pytest.mark.asyncio
async def test_list_dishes_filters(client: AsyncClient, test_dish, untracked_dish):
    response = await client.get("/dishes", params={"tag": "vegetarian"})
    assert [dish["name"] for dish in response.json()] == ["Margherita Pizza"]

    response = await client.get("/dishes", params={"status": "out_of_stock"})
    assert response.json() == []


@pytest.mark.asyncio
async def test_get_unknown_dish(client: AsyncClient):
    response = await client.get(f"/dishes/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["code"] == "dish_not_found"


@pytest.mark.asyncio
async def test_new_default_variant_replaces_previous(test_db, test_dish):
    first = await catalog.create_dish_variant(
        test_db, test_dish.id, DishVariantCreate(name="Regular", is_default=True)
    )
    second = await catalog.create_dish_variant(
        test_db,
        test_dish.id,
        DishVariantCreate(name="Large", price_modifier=Decimal("4.00"), is_default=True),
    )

    await test_db.refresh(first)
    assert first.is_default is False
    assert second.is_default is True

    dish = await catalog.get_dish(test_db, test_dish.id)
    assert [variant.name for variant in dish.variants if variant.is_default] == ["Large"]


@pytest.mark.asyncio
async def test_variant_for_unknown_dish(manager_client: AsyncClient):
    response = await manager_client.post(f"/dishes/{uuid4()}/variants", json={"name": "Large"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stock_update_to_zero_marks_out_of_stock(test_db, test_dish):
    dish = await catalog.update_dish_stock(test_db, test_dish.id, DishStockUpdate(stock_quantity=0))

    assert dish.stock_quantity == 0
    assert dish.status == DishStatus.OUT_OF_STOCK


@pytest.mark.asyncio
async def test_restock_revives_out_of_stock_dish(test_db, test_dish):
    await catalog.update_dish_stock(test_db, test_dish.id, DishStockUpdate(stock_quantity=0))
    dish = await catalog.update_dish_stock(test_db, test_dish.id, DishStockUpdate(stock_quantity=5))

    assert dish.status == DishStatus.AVAILABLE


@pytest.mark.asyncio
async def test_restock_leaves_unavailable_dish_alone(test_db, test_dish):
    test_dish.status = DishStatus.UNAVAILABLE
    await test_db.commit()

    dish = await catalog.update_dish_stock(test_db, test_dish.id, DishStockUpdate(stock_quantity=5))

    assert dish.status == DishStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_explicit_status_wins(authenticated_client: AsyncClient, test_dish):
    response = await authenticated_client.patch(
        f"/dishes/{test_dish.id}/stock",
        json={"stock_quantity": 0, "status": "unavailable"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "unavailable"
    assert response.json()["stock_quantity"] == 0


@pytest.mark.asyncio
async def test_stock_can_be_untracked(authenticated_client: AsyncClient, test_dish):
    response = await authenticated_client.patch(
        f"/dishes/{test_dish.id}/stock",
        json={"stock_quantity": None},
    )

    assert response.status_code == 200
    assert response.json()["stock_quantity"] is None


@pytest.mark.asyncio
async def test_negative_stock_rejected(authenticated_client: AsyncClient, test_dish):
    response = await authenticated_client.patch(
        f"/dishes/{test_dish.id}/stock",
        json={"stock_quantity": -1},
    )

    assert response.status_code == 422
