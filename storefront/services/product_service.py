# storefront/services/product_service.py
import logging
from typing import List, Dict, Optional, Any
from ..exceptions import NotFoundError
from ..models.product import ProductInput
from ..utils.pagination import page_bounds, page_result
from ..utils.validation import parse_input
from .auth_service import AuthService

class ProductService:
    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.logger = logging.getLogger(__name__)

    async def get_paginated(self, page: int = 1, page_size: Optional[int] = None) -> Dict[str, Any]:
        """Newest products first, with their category name"""
        limit, offset = page_bounds(page, page_size)
        async with self.db.pool.acquire() as conn:
            products = await conn.fetch("""
                SELECT p.*, c.name as category_name
                FROM products p
                LEFT JOIN categories c ON c.category_id = p.category_id
                ORDER BY p.created_at DESC, p.product_id DESC
                LIMIT $1 OFFSET $2
            """, limit, offset)
            total = await conn.fetchval("SELECT COUNT(*) FROM products")
        return page_result("products", [dict(p) for p in products], total or 0, page, limit)

    async def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        """Product with its category name"""
        async with self.db.pool.acquire() as conn:
            product = await conn.fetchrow("""
                SELECT p.*, c.name as category_name
                FROM products p
                LEFT JOIN categories c ON c.category_id = p.category_id
                WHERE p.product_id = $1
            """, product_id)
            return dict(product) if product else None

    async def get_product_price(self, product_id: int) -> Dict[str, Any]:
        """Minimal projection used for pricing"""
        async with self.db.pool.acquire() as conn:
            product = await conn.fetchrow("""
                SELECT product_id, price, category_id
                FROM products
                WHERE product_id = $1
            """, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return dict(product)

    async def get_category_products(self, category_id: int) -> List[Dict[str, Any]]:
        """Products of one category"""
        async with self.db.pool.acquire() as conn:
            products = await conn.fetch("""
                SELECT p.*, c.name as category_name
                FROM products p
                LEFT JOIN categories c ON c.category_id = p.category_id
                WHERE p.category_id = $1
                ORDER BY p.name
            """, category_id)
            return [dict(p) for p in products]

    async def add_product(self, actor_id: int, product_data: Dict[str, Any]) -> int:
        """Create a product"""
        await self.auth.require_admin(actor_id, "create products")
        product = parse_input(ProductInput, product_data)

        async with self.db.pool.acquire() as conn:
            product_id = await conn.fetchval("""
                INSERT INTO products (
                    category_id, name, description, price,
                    quantity, brand, image_url
                ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING product_id
            """,
                product.category_id,
                product.name,
                product.description,
                product.price,
                product.quantity,
                product.brand,
                product.image_url
            )
        self.logger.info(f"Product {product_id} created by {actor_id}")
        return product_id

    async def update_product(self, actor_id: int, product_id: int, product_data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace a product's fields"""
        await self.auth.require_admin(actor_id, "update products")
        product = parse_input(ProductInput, product_data)

        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                UPDATE products
                SET category_id = $1, name = $2, description = $3,
                    price = $4, quantity = $5, brand = $6,
                    image_url = $7, updated_at = CURRENT_TIMESTAMP
                WHERE product_id = $8
            """,
                product.category_id,
                product.name,
                product.description,
                product.price,
                product.quantity,
                product.brand,
                product.image_url,
                product_id
            )
        if result != "UPDATE 1":
            raise NotFoundError("Product not found")
        return await self.get_product(product_id)

    async def delete_product(self, actor_id: int, product_id: int) -> bool:
        """Delete a product"""
        await self.auth.require_admin(actor_id, "delete products")
        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM products
                WHERE product_id = $1
            """, product_id)
        if result != "DELETE 1":
            raise NotFoundError("Product not found")
        self.logger.info(f"Product {product_id} deleted by {actor_id}")
        return True
