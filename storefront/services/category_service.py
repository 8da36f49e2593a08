# storefront/services/category_service.py
import logging
from typing import List, Dict, Optional, Any
from ..exceptions import NotFoundError, ValidationError
from .auth_service import AuthService

class CategoryService:
    """Category management"""

    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.logger = logging.getLogger(__name__)

    async def add_category(self, actor_id: int, name: str) -> int:
        """Create a category"""
        await self.auth.require_admin(actor_id, "create categories")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")

        async with self.db.pool.acquire() as conn:
            category_id = await conn.fetchval("""
                INSERT INTO categories (name)
                VALUES ($1)
                RETURNING category_id
            """, name)
        self.logger.info(f"Category {category_id} created by {actor_id}")
        return category_id

    async def get_category(self, category_id: int) -> Optional[Dict[str, Any]]:
        async with self.db.pool.acquire() as conn:
            category = await conn.fetchrow("""
                SELECT *
                FROM categories
                WHERE category_id = $1
            """, category_id)
            return dict(category) if category else None

    async def get_all_categories(self) -> List[Dict[str, Any]]:
        """All categories ordered by name"""
        async with self.db.pool.acquire() as conn:
            categories = await conn.fetch("""
                SELECT category_id, name
                FROM categories
                ORDER BY name
            """)
            return [dict(category) for category in categories]

    async def rename_category(self, actor_id: int, category_id: int, name: str) -> bool:
        await self.auth.require_admin(actor_id, "update categories")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")

        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                UPDATE categories
                SET name = $1
                WHERE category_id = $2
            """, name, category_id)
        if result != "UPDATE 1":
            raise NotFoundError("Category not found")
        return True

    async def delete_category(self, actor_id: int, category_id: int) -> bool:
        """Delete an empty category"""
        await self.auth.require_admin(actor_id, "delete categories")
        if await self.get_products_count(category_id):
            raise ValidationError("Category still has products")

        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                DELETE FROM categories
                WHERE category_id = $1
            """, category_id)
        if result != "DELETE 1":
            raise NotFoundError("Category not found")
        return True

    async def get_products_count(self, category_id: int) -> int:
        """Number of products in a category"""
        async with self.db.pool.acquire() as conn:
            count = await conn.fetchval("""
                SELECT COUNT(*)
                FROM products
                WHERE category_id = $1
            """, category_id)
            return count or 0
