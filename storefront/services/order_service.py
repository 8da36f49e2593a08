# storefront/services/order_service.py
import logging
from typing import Dict, List, Optional, Any
from ..exceptions import (
    AuthorizationError, CheckoutError, EmptyCartError, NotFoundError,
    ShopError, ValidationError
)
from ..models.order import AddressInput, OrderStatus, PaymentMethod, PaymentStatus
from ..utils.pagination import page_bounds, page_result
from ..utils.validation import parse_input
from . import pricing
from .auth_service import AuthService
from .campaign_service import CampaignService

class OrderService:
    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.campaign_service = CampaignService(db)
        self.logger = logging.getLogger(__name__)

    async def checkout(self, user_id: int, address_data: Dict[str, Any],
                       payment_method: Any) -> Dict[str, Any]:
        """Turn the user's cart into an order.

        Address, order, order items and payment are written and the cart is
        emptied in one transaction; either all of it happens or none of it.
        """
        address = parse_input(AddressInput, address_data)
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError(f"Unsupported payment method: {payment_method}")

        campaigns = await self.campaign_service.list_active_campaigns()

        try:
            async with self.db.pool.acquire() as conn:
                async with conn.transaction():
                    cart_id = await conn.fetchval("""
                        SELECT cart_id FROM carts WHERE user_id = $1
                    """, user_id)
                    items = []
                    if cart_id is not None:
                        items = await conn.fetch("""
                            SELECT ci.cart_item_id, ci.product_id, ci.quantity,
                                p.name, p.price, p.category_id
                            FROM cart_items ci
                            JOIN products p ON p.product_id = ci.product_id
                            WHERE ci.cart_id = $1
                            ORDER BY ci.cart_item_id
                            FOR UPDATE OF ci
                        """, cart_id)
                    if not items:
                        raise EmptyCartError("Cart is empty")

                    priced = pricing.price_cart_lines([dict(i) for i in items], campaigns)

                    # Reserve stock
                    for line in priced['lines']:
                        result = await conn.execute("""
                            UPDATE products
                            SET quantity = quantity - $1
                            WHERE product_id = $2 AND quantity >= $1
                        """, line['quantity'], line['product_id'])
                        if result != "UPDATE 1":
                            raise ValidationError(f"Not enough stock for {line['name']}")

                    address_id = await conn.fetchval("""
                        INSERT INTO addresses (
                            user_id, line1, line2, city, state, postal_code, country
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                        RETURNING address_id
                    """,
                        user_id,
                        address.line1,
                        address.line2,
                        address.city,
                        address.state,
                        address.postal_code,
                        address.country
                    )

                    order_id = await conn.fetchval("""
                        INSERT INTO orders (
                            user_id, address_id, status, total
                        ) VALUES ($1, $2, $3, $4)
                        RETURNING order_id
                    """, user_id, address_id, OrderStatus.PENDING.value, priced['subtotal'])

                    await conn.executemany("""
                        INSERT INTO order_items (
                            order_id, product_id, quantity, price, campaign_id
                        ) VALUES ($1, $2, $3, $4, $5)
                    """, [
                        (order_id, line['product_id'], line['quantity'],
                         line['effective_price'], line['campaign_id'])
                        for line in priced['lines']
                    ])

                    await conn.execute("""
                        INSERT INTO payments (
                            order_id, amount, status, method
                        ) VALUES ($1, $2, $3, $4)
                    """, order_id, priced['subtotal'], PaymentStatus.PENDING.value, method.value)

                    await self.campaign_service.record_usage(
                        conn,
                        [line['campaign_id'] for line in priced['lines'] if line['campaign_id']]
                    )

                    # Only the lines that were ordered; later additions stay in the cart
                    await conn.execute("""
                        DELETE FROM cart_items WHERE cart_item_id = ANY($1::int[])
                    """, [line['cart_item_id'] for line in priced['lines']])

        except ShopError:
            raise
        except Exception as e:
            self.logger.error(f"Checkout failed for user {user_id}: {e}", exc_info=True)
            raise CheckoutError("Checkout failed, nothing was charged") from e

        self.logger.info(f"Order {order_id} placed by {user_id} total {priced['subtotal']}")
        return {"order_id": order_id, "total": priced['subtotal']}

    async def _load_order(self, conn, order_id: int) -> Optional[Dict[str, Any]]:
        order = await conn.fetchrow("""
            SELECT o.*, u.username
            FROM orders o
            LEFT JOIN users u ON u.user_id = o.user_id
            WHERE o.order_id = $1
        """, order_id)
        if not order:
            return None

        order = dict(order)
        items = await conn.fetch("""
            SELECT oi.product_id, oi.quantity, oi.price, oi.campaign_id, p.name
            FROM order_items oi
            JOIN products p ON p.product_id = oi.product_id
            WHERE oi.order_id = $1
            ORDER BY oi.order_item_id
        """, order_id)
        address = await conn.fetchrow("""
            SELECT * FROM addresses WHERE address_id = $1
        """, order['address_id'])
        payment = await conn.fetchrow("""
            SELECT * FROM payments WHERE order_id = $1
        """, order_id)

        order['items'] = [dict(item) for item in items]
        order['address'] = dict(address) if address else None
        order['payment'] = dict(payment) if payment else None
        return order

    async def get_order(self, actor_id: int, order_id: int) -> Dict[str, Any]:
        """Order with items, address and payment; owner or admin only"""
        async with self.db.pool.acquire() as conn:
            order = await self._load_order(conn, order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order['user_id'] != actor_id and not await self.auth.is_admin(actor_id):
            raise AuthorizationError("You can only view your own orders")
        return order

    async def get_user_orders(self, user_id: int, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent orders of a user"""
        async with self.db.pool.acquire() as conn:
            orders = await conn.fetch("""
                SELECT o.*,
                    (SELECT COALESCE(SUM(oi.quantity), 0)
                     FROM order_items oi
                     WHERE oi.order_id = o.order_id) as item_count
                FROM orders o
                WHERE o.user_id = $1
                ORDER BY o.created_at DESC
                LIMIT $2
            """, user_id, limit)
            return [dict(order) for order in orders]

    async def get_paginated(self, actor_id: int, page: int = 1,
                            page_size: Optional[int] = None) -> Dict[str, Any]:
        """All orders, newest first; admin only"""
        await self.auth.require_admin(actor_id, "list orders")
        limit, offset = page_bounds(page, page_size)

        async with self.db.pool.acquire() as conn:
            orders = await conn.fetch("""
                SELECT o.*, u.username, p.status as payment_status, p.method as payment_method
                FROM orders o
                LEFT JOIN users u ON u.user_id = o.user_id
                LEFT JOIN payments p ON p.order_id = o.order_id
                ORDER BY o.created_at DESC, o.order_id DESC
                LIMIT $1 OFFSET $2
            """, limit, offset)
            total = await conn.fetchval("SELECT COUNT(*) FROM orders")

        return page_result("orders", [dict(o) for o in orders], total or 0, page, limit)

    async def update_order_status(self, actor_id: int, order_id: int, status: Any) -> Dict[str, Any]:
        """Change an order's status; completed orders are frozen"""
        await self.auth.require_admin(actor_id, "update order status")
        try:
            status = OrderStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {status}")

        async with self.db.pool.acquire() as conn:
            current = await conn.fetchval("""
                SELECT status FROM orders WHERE order_id = $1
            """, order_id)
            if current is None:
                raise NotFoundError("Order not found")
            if OrderStatus(current) in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
                raise ValidationError(f"Order is already {current}")

            await conn.execute("""
                UPDATE orders
                SET status = $1, updated_at = CURRENT_TIMESTAMP
                WHERE order_id = $2
            """, status.value, order_id)

        self.logger.info(f"Order {order_id} status {current} -> {status.value} by {actor_id}")
        return {"order_id": order_id, "status": status.value}
