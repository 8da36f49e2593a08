from datetime import datetime, timezone
from decimal import Decimal

import pytest

from conftest import ADMIN_ID, CUSTOMER_ID, make_campaign
from storefront.exceptions import (
    AuthorizationError, CheckoutError, EmptyCartError, NotFoundError, ValidationError
)
from storefront.services.order_service import OrderService

ADDRESS = {
    "line1": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62701",
    "country": "US",
}

CART_ID = 7


def cart_rows():
    return [
        {"cart_item_id": 1, "product_id": 10, "quantity": 2, "name": "Kettle",
         "price": Decimal("40.00"), "category_id": 5},
        {"cart_item_id": 2, "product_id": 11, "quantity": 1, "name": "Mug",
         "price": Decimal("8.50"), "category_id": 6},
    ]


def stock_cart(conn, rows=None):
    conn.on("fetchval", "SELECT cart_id FROM carts", CART_ID)
    conn.on("fetch", "FROM cart_items ci", rows if rows is not None else cart_rows())
    conn.on("fetchval", "INSERT INTO addresses", 3)
    conn.on("fetchval", "INSERT INTO orders", 100)
    conn.on("execute", "UPDATE products", "UPDATE 1")


def running_campaign(**overrides):
    return make_campaign(
        start_date=datetime(2000, 1, 1, tzinfo=timezone.utc),
        end_date=datetime(2100, 1, 1, tzinfo=timezone.utc),
        **overrides
    )


class TestCheckout:
    @pytest.mark.asyncio
    async def test_empty_cart_writes_nothing(self, db, conn):
        conn.on("fetchval", "SELECT cart_id FROM carts", CART_ID)

        with pytest.raises(EmptyCartError):
            await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "card")

        assert not conn.find("INSERT INTO")
        assert not conn.find("DELETE FROM cart_items")
        assert conn.rolled_back

    @pytest.mark.asyncio
    async def test_missing_cart_is_empty(self, db, conn):
        with pytest.raises(EmptyCartError):
            await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "card")

        assert not conn.find("FROM cart_items ci")

    @pytest.mark.asyncio
    async def test_places_order_atomically(self, db, conn):
        stock_cart(conn)

        result = await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "card")

        assert result == {"order_id": 100, "total": Decimal("88.50")}
        for fragment in ("INSERT INTO addresses", "INSERT INTO orders", "INSERT INTO payments"):
            calls = conn.find(fragment)
            assert len(calls) == 1
            assert calls[0]["in_transaction"]

        items = conn.find("INSERT INTO order_items")[0]
        assert items["in_transaction"]
        assert items["args"][0] == [
            (100, 10, 2, Decimal("40.00"), None),
            (100, 11, 1, Decimal("8.50"), None),
        ]

        payment = conn.find("INSERT INTO payments")[0]
        assert payment["args"] == (100, Decimal("88.50"), "PENDING", "card")

        cleared = conn.find("DELETE FROM cart_items")
        assert len(cleared) == 1
        assert cleared[0]["args"] == ([1, 2],)
        assert "cart_item_id = ANY" in cleared[0]["query"]
        assert cleared[0]["in_transaction"]
        assert conn.transactions_started == 1
        assert conn.committed and not conn.rolled_back

    @pytest.mark.asyncio
    async def test_order_captures_campaign_price_and_usage(self, db, conn):
        stock_cart(conn)
        conn.on("fetch", "WHERE c.status = $1", [running_campaign(campaign_id=4, category_ids=[5])])

        result = await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "cash_on_delivery")

        assert result["total"] == Decimal("72.50")
        items = conn.find("INSERT INTO order_items")[0]["args"][0]
        assert items[0] == (100, 10, 2, Decimal("32.00"), 4)
        assert items[1] == (100, 11, 1, Decimal("8.50"), None)

        usage = conn.find("SET usage_count = usage_count + 1")
        assert usage[0]["args"] == ([4],)
        assert usage[0]["in_transaction"]

    @pytest.mark.asyncio
    async def test_stock_shortage_rolls_back(self, db, conn):
        stock_cart(conn)
        conn.handlers.insert(0, ("execute", "UPDATE products", "UPDATE 0"))

        with pytest.raises(ValidationError, match="Not enough stock for Kettle"):
            await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "card")

        assert not conn.find("INSERT INTO orders")
        assert conn.rolled_back

    @pytest.mark.asyncio
    async def test_database_failure_becomes_checkout_error(self, db, conn):
        stock_cart(conn)
        conn.handlers.insert(0, ("execute", "INSERT INTO payments", RuntimeError("connection lost")))

        with pytest.raises(CheckoutError):
            await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "card")

        assert conn.rolled_back
        assert not conn.find("DELETE FROM cart_items")

    @pytest.mark.asyncio
    async def test_unknown_payment_method(self, db, conn):
        stock_cart(conn)

        with pytest.raises(ValidationError, match="Unsupported payment method"):
            await OrderService(db).checkout(CUSTOMER_ID, ADDRESS, "bitcoin")

        assert conn.transactions_started == 0

    @pytest.mark.asyncio
    async def test_incomplete_address(self, db, conn):
        with pytest.raises(ValidationError, match="city"):
            await OrderService(db).checkout(CUSTOMER_ID, {**ADDRESS, "city": ""}, "card")


class TestOrderAccess:
    def order_rows(self, conn, owner):
        conn.on("fetchrow", "FROM orders o", {
            "order_id": 100, "user_id": owner, "address_id": 3,
            "status": "PENDING", "total": Decimal("88.50"), "username": "bob",
        })
        conn.on("fetch", "FROM order_items oi", [
            {"product_id": 10, "quantity": 2, "price": Decimal("40.00"),
             "campaign_id": None, "name": "Kettle"},
        ])

    @pytest.mark.asyncio
    async def test_owner_sees_order(self, db, conn, roles):
        self.order_rows(conn, CUSTOMER_ID)

        order = await OrderService(db).get_order(CUSTOMER_ID, 100)

        assert order["items"][0]["name"] == "Kettle"
        assert order["address"] is None

    @pytest.mark.asyncio
    async def test_admin_sees_any_order(self, db, conn, roles):
        self.order_rows(conn, CUSTOMER_ID)
        assert (await OrderService(db).get_order(ADMIN_ID, 100))["order_id"] == 100

    @pytest.mark.asyncio
    async def test_other_customer_is_refused(self, db, conn, roles):
        self.order_rows(conn, 99)

        with pytest.raises(AuthorizationError):
            await OrderService(db).get_order(CUSTOMER_ID, 100)

    @pytest.mark.asyncio
    async def test_missing_order(self, db, roles):
        with pytest.raises(NotFoundError):
            await OrderService(db).get_order(CUSTOMER_ID, 100)

    @pytest.mark.asyncio
    async def test_listing_requires_admin(self, db, roles):
        with pytest.raises(AuthorizationError):
            await OrderService(db).get_paginated(CUSTOMER_ID)


class TestOrderStatus:
    @pytest.mark.asyncio
    async def test_update(self, db, conn, roles):
        conn.on("fetchval", "SELECT status FROM orders", "PENDING")

        result = await OrderService(db).update_order_status(ADMIN_ID, 100, "SHIPPED")

        assert result == {"order_id": 100, "status": "SHIPPED"}
        assert conn.find("UPDATE orders")[0]["args"] == ("SHIPPED", 100)

    @pytest.mark.asyncio
    async def test_completed_orders_are_frozen(self, db, conn, roles):
        conn.on("fetchval", "SELECT status FROM orders", "DELIVERED")

        with pytest.raises(ValidationError):
            await OrderService(db).update_order_status(ADMIN_ID, 100, "CANCELLED")

        assert not conn.find("UPDATE orders")

    @pytest.mark.asyncio
    async def test_unknown_status(self, db, roles):
        with pytest.raises(ValidationError):
            await OrderService(db).update_order_status(ADMIN_ID, 100, "LOST")

    @pytest.mark.asyncio
    async def test_customer_cannot_change_status(self, db, conn, roles):
        with pytest.raises(AuthorizationError):
            await OrderService(db).update_order_status(CUSTOMER_ID, 100, "SHIPPED")
