"""Cart editing and checkout into per-restaurant orders."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from palate.core.config import settings
from palate.models.cart import CartItem
from palate.models.order import Order
from palate.schema.order import CheckoutRequest
from palate.services import cart_service, order_service
from palate.tests.utils import make_dish, make_restaurant, make_user, register_and_login


@pytest.mark.asyncio
async def test_adding_the_same_dish_twice_bumps_quantity(session):
    owner = await make_user(session)
    diner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    ramen = await make_dish(session, restaurant, "Ramen", price=12.5)
    gyoza = await make_dish(session, restaurant, "Gyoza", price=6.0)

    await cart_service.add_item(session, diner.id, ramen.id)
    await cart_service.add_item(session, diner.id, gyoza.id)
    cart = await cart_service.add_item(session, diner.id, ramen.id)

    assert [(line.dish.name, line.quantity) for line in cart.items] == [("Ramen", 2), ("Gyoza", 1)]
    assert cart.item_count == 3
    assert cart.subtotal == 31.0
    assert cart.items[0].restaurant.name == restaurant.name
    rows = await session.scalar(select(func.count()).select_from(CartItem))
    assert rows == 2


@pytest.mark.asyncio
async def test_adding_unknown_dish_is_not_found(session):
    diner = await make_user(session)

    with pytest.raises(HTTPException) as excinfo:
        await cart_service.add_item(session, diner.id, uuid.uuid4())

    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_quantity_zero_removes_the_line(session):
    owner = await make_user(session)
    diner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    dish = await make_dish(session, restaurant, "Bao", price=4.0)
    await cart_service.add_item(session, diner.id, dish.id)

    cart = await cart_service.update_quantity(session, diner.id, dish.id, 4)
    assert cart.items[0].quantity == 4
    assert cart.subtotal == 16.0

    cart = await cart_service.update_quantity(session, diner.id, dish.id, 0)
    assert cart.items == []
    assert cart.item_count == 0

    # Updating a dish that is not in the cart leaves it untouched.
    cart = await cart_service.update_quantity(session, diner.id, uuid.uuid4(), 3)
    assert cart.items == []


@pytest.mark.asyncio
async def test_carts_are_kept_per_user(session):
    owner = await make_user(session)
    first = await make_user(session)
    second = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    dish = await make_dish(session, restaurant, "Dumplings", price=8.0)

    await cart_service.add_item(session, first.id, dish.id)
    await cart_service.clear_cart(session, second.id)

    assert (await cart_service.get_cart(session, first.id)).item_count == 1
    assert (await cart_service.get_cart(session, second.id)).item_count == 0


@pytest.mark.asyncio
async def test_checkout_splits_orders_by_restaurant_and_empties_cart(session, monkeypatch):
    monkeypatch.setattr(settings, "delivery_fee", 2.5)
    owner = await make_user(session)
    other_owner = await make_user(session)
    diner = await make_user(session)
    noodles = await make_restaurant(session, owner, name="Noodle Bar")
    tacos = await make_restaurant(session, other_owner, name="Taco Stand")
    ramen = await make_dish(session, noodles, "Ramen", price=12.0)
    gyoza = await make_dish(session, noodles, "Gyoza", price=5.5)
    taco = await make_dish(session, tacos, "Al Pastor", price=3.0)
    for dish_id in (ramen.id, gyoza.id, taco.id, taco.id):
        await cart_service.add_item(session, diner.id, dish_id)

    orders = await order_service.checkout(
        session,
        diner.id,
        CheckoutRequest(delivery_address="5 Elm Row", special_instructions={ramen.id: "extra chilli"}),
    )

    by_name = {order.restaurant_name: order for order in orders}
    assert set(by_name) == {"Noodle Bar", "Taco Stand"}
    noodle_order = by_name["Noodle Bar"]
    assert noodle_order.restaurant_id == noodles.id
    assert noodle_order.total == 20.0
    assert noodle_order.delivery_fee == 2.5
    assert noodle_order.status.value == "pending"
    assert {line["dish_name"]: line["special_instructions"] for line in noodle_order.items} == {
        "Ramen": "extra chilli",
        "Gyoza": None,
    }
    assert by_name["Taco Stand"].items[0]["quantity"] == 2
    assert by_name["Taco Stand"].total == 8.5

    assert (await cart_service.get_cart(session, diner.id)).items == []

    # Orders keep the price they were placed at.
    ramen.price = 20.0
    await session.commit()
    stored = await order_service.list_for_user(session, diner.id)
    assert sorted(order.total for order in stored) == [8.5, 20.0]


@pytest.mark.asyncio
async def test_pickup_orders_carry_no_delivery_fee(session, monkeypatch):
    monkeypatch.setattr(settings, "delivery_fee", 2.5)
    owner = await make_user(session)
    diner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    dish = await make_dish(session, restaurant, "Pho")
    await cart_service.add_item(session, diner.id, dish.id)

    [order] = await order_service.checkout(session, diner.id, CheckoutRequest())

    assert order.delivery_fee is None
    assert order.delivery_address is None
    # Unpriced dishes count as free.
    assert order.total == 0.0


@pytest.mark.asyncio
async def test_checkout_rejects_empty_cart(session):
    diner = await make_user(session)

    with pytest.raises(HTTPException) as excinfo:
        await order_service.checkout(session, diner.id, CheckoutRequest())

    assert excinfo.value.status_code == 400
    assert await session.scalar(select(func.count()).select_from(Order)) == 0


@pytest.mark.asyncio
async def test_checkout_rejects_unavailable_dishes_and_keeps_cart(session):
    owner = await make_user(session)
    diner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    fine = await make_dish(session, restaurant, "Udon", price=9.0)
    sold_out = await make_dish(session, restaurant, "Tempura", price=7.0)
    await cart_service.add_item(session, diner.id, fine.id)
    await cart_service.add_item(session, diner.id, sold_out.id)
    sold_out.is_available = False
    await session.commit()

    with pytest.raises(HTTPException) as excinfo:
        await order_service.checkout(session, diner.id, CheckoutRequest())

    assert excinfo.value.status_code == 409
    assert "Tempura" in excinfo.value.detail
    assert (await cart_service.get_cart(session, diner.id)).item_count == 2
    assert await session.scalar(select(func.count()).select_from(Order)) == 0


@pytest.mark.asyncio
async def test_orders_are_listed_newest_first(session):
    owner = await make_user(session)
    diner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    dish = await make_dish(session, restaurant, "Katsu", price=11.0)

    await cart_service.add_item(session, diner.id, dish.id)
    [older] = await order_service.checkout(session, diner.id, CheckoutRequest())
    older.placed_at = datetime.utcnow() - timedelta(days=1)
    await session.commit()
    await cart_service.add_item(session, diner.id, dish.id)
    [newer] = await order_service.checkout(session, diner.id, CheckoutRequest())

    orders = await order_service.list_for_user(session, diner.id)

    assert [order.id for order in orders] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_cart_and_checkout_over_http(client, session):
    anonymous = await client.get("/api/me/cart")
    assert anonymous.status_code == 401

    diner = await register_and_login(client, prefix="diner")
    owner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    dish = await make_dish(session, restaurant, "Laksa", price=13.0)

    res = await client.post("/api/me/cart/items", json={"dish_id": str(dish.id)}, headers=diner.headers)
    assert res.status_code == 200
    assert res.json()["item_count"] == 1

    res = await client.patch(f"/api/me/cart/items/{dish.id}", json={"quantity": 3}, headers=diner.headers)
    assert res.json()["subtotal"] == 39.0

    missing = await client.post("/api/me/cart/items", json={"dish_id": str(uuid.uuid4())}, headers=diner.headers)
    assert missing.status_code == 404

    res = await client.post("/api/me/orders", json={"delivery_address": "9 Quay"}, headers=diner.headers)
    assert res.status_code == 201
    [order] = res.json()
    assert order["restaurant_name"] == restaurant.name
    assert order["items"][0]["dish_id"] == str(dish.id)
    assert order["items"][0]["quantity"] == 3

    listed = await client.get("/api/me/orders", headers=diner.headers)
    assert [item["id"] for item in listed.json()] == [order["id"]]

    empty = await client.post("/api/me/orders", json={}, headers=diner.headers)
    assert empty.status_code == 400


@pytest.mark.asyncio
async def test_cart_line_removal_and_clear_over_http(client, session):
    diner = await register_and_login(client, prefix="diner")
    owner = await make_user(session)
    restaurant = await make_restaurant(session, owner)
    first = await make_dish(session, restaurant, "Satay", price=6.0)
    second = await make_dish(session, restaurant, "Rendang", price=14.0)
    for dish in (first, second):
        await client.post("/api/me/cart/items", json={"dish_id": str(dish.id)}, headers=diner.headers)

    res = await client.delete(f"/api/me/cart/items/{first.id}", headers=diner.headers)
    assert [line["dish_id"] for line in res.json()["items"]] == [str(second.id)]

    res = await client.delete("/api/me/cart", headers=diner.headers)
    assert res.status_code == 204
    cart = await client.get("/api/me/cart", headers=diner.headers)
    assert cart.json() == {"items": [], "item_count": 0, "subtotal": 0.0}
