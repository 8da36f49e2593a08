from datetime import datetime, timezone
from decimal import Decimal

import asyncpg
import pytest

from conftest import CUSTOMER_ID, make_campaign
from storefront.exceptions import NotFoundError, ValidationError
from storefront.services.cart_service import CartService


@pytest.fixture
def cart(conn):
    conn.on("fetchval", "INSERT INTO carts", 7)
    return conn


class TestCartService:
    @pytest.mark.asyncio
    async def test_add_merges_into_existing_line(self, db, cart):
        cart.on("fetchval", "SELECT 1 FROM products", 1)
        cart.on("fetchrow", "INSERT INTO cart_items", lambda cart_id, product_id, quantity: {
            "cart_item_id": 3, "cart_id": cart_id, "product_id": product_id, "quantity": quantity + 1,
        })

        item = await CartService(db).add_to_cart(CUSTOMER_ID, 10, 2)

        assert item == {"cart_item_id": 3, "cart_id": 7, "product_id": 10, "quantity": 3}
        assert "ON CONFLICT (cart_id, product_id)" in cart.find("INSERT INTO cart_items")[0]["query"]

    @pytest.mark.asyncio
    async def test_add_unknown_product(self, db, cart):
        with pytest.raises(NotFoundError):
            await CartService(db).add_to_cart(CUSTOMER_ID, 404)

        assert not cart.find("INSERT INTO cart_items")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_quantity_must_be_positive(self, db, cart, quantity):
        service = CartService(db)

        with pytest.raises(ValidationError):
            await service.add_to_cart(CUSTOMER_ID, 10, quantity)
        with pytest.raises(ValidationError):
            await service.update_quantity(CUSTOMER_ID, 1, quantity)

        assert not cart.calls

    @pytest.mark.asyncio
    async def test_update_is_scoped_to_owner(self, db, cart):
        with pytest.raises(NotFoundError):
            await CartService(db).update_quantity(CUSTOMER_ID, 99, 2)

        call = cart.find("UPDATE cart_items ci")[0]
        assert call["args"] == (2, 99, CUSTOMER_ID)

    @pytest.mark.asyncio
    async def test_remove_missing_item(self, db, cart):
        cart.on("execute", "DELETE FROM cart_items ci", "DELETE 0")

        with pytest.raises(NotFoundError):
            await CartService(db).remove_from_cart(CUSTOMER_ID, 5)

    @pytest.mark.asyncio
    async def test_remove_item(self, db, cart):
        cart.on("execute", "DELETE FROM cart_items ci", "DELETE 1")
        assert await CartService(db).remove_from_cart(CUSTOMER_ID, 5)

    @pytest.mark.asyncio
    async def test_item_count_without_cart(self, db, cart):
        assert await CartService(db).get_item_count(CUSTOMER_ID) == 0

    @pytest.mark.asyncio
    async def test_summary_applies_campaigns(self, db, cart):
        cart.on("fetch", "FROM cart_items ci", [
            {"cart_item_id": 1, "cart_id": 7, "product_id": 10, "quantity": 1,
             "name": "Lamp", "price": Decimal("60.00"), "category_id": 2},
        ])
        campaign = make_campaign(
            2, type="FIXED_AMOUNT_DISCOUNT", product_ids=[10], discount_value=Decimal("15"),
            start_date=datetime(2000, 1, 1, tzinfo=timezone.utc),
            end_date=datetime(2100, 1, 1, tzinfo=timezone.utc),
        )

        summary = await CartService(db).get_cart_summary(CUSTOMER_ID, [campaign])

        assert summary["cart_id"] == 7
        assert summary["subtotal"] == Decimal("45.00")
        assert summary["lines"][0]["badges"] == ["$15 OFF"]

    @pytest.mark.asyncio
    async def test_summary_of_empty_cart(self, db, cart):
        summary = await CartService(db).get_cart_summary(CUSTOMER_ID)

        assert summary["items"] == []
        assert summary["lines"] == []
        assert summary["subtotal"] == Decimal("0")


class TestUnknownUser:
    @pytest.fixture
    def orphan(self, conn):
        conn.on("fetchval", "INSERT INTO carts", asyncpg.ForeignKeyViolationError("carts_user_id_fkey"))
        return conn

    @pytest.mark.asyncio
    async def test_add_before_registration(self, db, orphan):
        orphan.on("fetchval", "SELECT 1 FROM products", 1)

        with pytest.raises(NotFoundError, match="/start"):
            await CartService(db).add_to_cart(CUSTOMER_ID, 10)

        assert not orphan.find("INSERT INTO cart_items")

    @pytest.mark.asyncio
    async def test_view_before_registration(self, db, orphan):
        with pytest.raises(NotFoundError, match="/start"):
            await CartService(db).get_cart(CUSTOMER_ID)
