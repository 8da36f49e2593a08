# storefront/services/cart_service.py
import logging
import asyncpg
from typing import Any, Dict, Iterable, List, Optional
from ..exceptions import NotFoundError, ValidationError
from . import pricing

class CartService:
    """Per-user shopping cart"""

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def _ensure_cart(self, conn, user_id: int) -> int:
        """Cart id for the user, creating the cart on first use"""
        try:
            return await conn.fetchval("""
                INSERT INTO carts (user_id)
                VALUES ($1)
                ON CONFLICT (user_id) DO UPDATE SET user_id = EXCLUDED.user_id
                RETURNING cart_id
            """, user_id)
        except asyncpg.ForeignKeyViolationError:
            raise NotFoundError("Unknown user, please send /start first")

    async def _fetch_items(self, conn, cart_id: int) -> List[Dict[str, Any]]:
        items = await conn.fetch("""
            SELECT ci.cart_item_id, ci.cart_id, ci.product_id, ci.quantity,
                p.name, p.price, p.category_id
            FROM cart_items ci
            JOIN products p ON p.product_id = ci.product_id
            WHERE ci.cart_id = $1
            ORDER BY ci.cart_item_id
        """, cart_id)
        return [dict(item) for item in items]

    async def get_cart(self, user_id: int) -> Dict[str, Any]:
        """The user's cart with its items, created if missing"""
        async with self.db.pool.acquire() as conn:
            cart_id = await self._ensure_cart(conn, user_id)
            items = await self._fetch_items(conn, cart_id)
        return {"cart_id": cart_id, "user_id": user_id, "items": items}

    async def add_to_cart(self, user_id: int, product_id: int, quantity: int = 1) -> Dict[str, Any]:
        """Add a product, merging into an existing line for the same product"""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        async with self.db.pool.acquire() as conn:
            exists = await conn.fetchval("""
                SELECT 1 FROM products WHERE product_id = $1
            """, product_id)
            if not exists:
                raise NotFoundError("Product not found")

            cart_id = await self._ensure_cart(conn, user_id)
            item = await conn.fetchrow("""
                INSERT INTO cart_items (cart_id, product_id, quantity)
                VALUES ($1, $2, $3)
                ON CONFLICT (cart_id, product_id)
                DO UPDATE SET quantity = cart_items.quantity + EXCLUDED.quantity
                RETURNING cart_item_id, cart_id, product_id, quantity
            """, cart_id, product_id, quantity)
            return dict(item)

    async def update_quantity(self, user_id: int, cart_item_id: int, quantity: int) -> Dict[str, Any]:
        """Set the quantity of one of the user's cart lines"""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        async with self.db.pool.acquire() as conn:
            item = await conn.fetchrow("""
                UPDATE cart_items ci
                SET quantity = $1
                FROM carts c
                WHERE ci.cart_item_id = $2
                AND c.cart_id = ci.cart_id
                AND c.user_id = $3
                RETURNING ci.cart_item_id, ci.cart_id, ci.product_id, ci.quantity
            """, quantity, cart_item_id, user_id)
        if not item:
            raise NotFoundError("Cart item not found")
        return dict(item)

    async def remove_from_cart(self, user_id: int, cart_item_id: int) -> bool:
        """Remove one of the user's cart lines"""
        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM cart_items ci
                USING carts c
                WHERE ci.cart_item_id = $1
                AND c.cart_id = ci.cart_id
                AND c.user_id = $2
            """, cart_item_id, user_id)
        if result != "DELETE 1":
            raise NotFoundError("Cart item not found")
        return True

    async def get_item_count(self, user_id: int) -> int:
        """Sum of quantities, 0 when the user has no cart"""
        async with self.db.pool.acquire() as conn:
            count = await conn.fetchval("""
                SELECT COALESCE(SUM(ci.quantity), 0)
                FROM carts c
                JOIN cart_items ci ON ci.cart_id = c.cart_id
                WHERE c.user_id = $1
            """, user_id)
            return int(count or 0)

    async def get_cart_summary(self, user_id: int,
                               campaigns: Optional[Iterable[Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Cart with campaign pricing applied to every line"""
        cart = await self.get_cart(user_id)
        priced = pricing.price_cart_lines(cart['items'], campaigns or [])
        return {**cart, **priced}
