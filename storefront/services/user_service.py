# storefront/services/user_service.py
import logging
from typing import Dict, Optional, Any
from ..config import Config
from ..exceptions import NotFoundError, ValidationError
from ..models.user import UserRole
from ..utils.pagination import page_bounds, page_result
from .auth_service import AuthService

class UserService:
    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.logger = logging.getLogger(__name__)

    async def register_user(self, user_id: int, username: Optional[str],
                          first_name: Optional[str], last_name: Optional[str]) -> Dict[str, Any]:
        """Insert or refresh a user from their Telegram profile.

        Ids listed in ADMIN_IDS are promoted to admin; nobody is demoted here.
        """
        role = UserRole.ADMIN.value if user_id in Config.ADMIN_IDS else UserRole.USER.value
        async with self.db.pool.acquire() as conn:
            user = await conn.fetchrow("""
                INSERT INTO users (user_id, username, first_name, last_name, role)
                VALUES ($1, $2, $3, $4, $5)
                ON CONFLICT (user_id)
                DO UPDATE SET
                    username = EXCLUDED.username,
                    first_name = EXCLUDED.first_name,
                    last_name = EXCLUDED.last_name,
                    role = CASE WHEN EXCLUDED.role = 'admin' THEN 'admin' ELSE users.role END,
                    updated_at = CURRENT_TIMESTAMP
                RETURNING *
            """, user_id, username, first_name, last_name, role)
            return dict(user)

    async def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        async with self.db.pool.acquire() as conn:
            user = await conn.fetchrow("""
                SELECT * FROM users WHERE user_id = $1
            """, user_id)
            return dict(user) if user else None

    async def get_paginated(self, actor_id: int, page: int = 1,
                            page_size: Optional[int] = None) -> Dict[str, Any]:
        """Users with their order counts; admin only"""
        await self.auth.require_admin(actor_id, "list users")
        limit, offset = page_bounds(page, page_size)

        async with self.db.pool.acquire() as conn:
            users = await conn.fetch("""
                SELECT u.*,
                    (SELECT COUNT(*) FROM orders o WHERE o.user_id = u.user_id) as order_count
                FROM users u
                ORDER BY u.created_at DESC, u.user_id
                LIMIT $1 OFFSET $2
            """, limit, offset)
            total = await conn.fetchval("SELECT COUNT(*) FROM users")

        return page_result("users", [dict(u) for u in users], total or 0, page, limit)

    async def get_user_detail(self, actor_id: int, user_id: int) -> Dict[str, Any]:
        """User with orders and saved addresses; admin only"""
        await self.auth.require_admin(actor_id, "view users")

        async with self.db.pool.acquire() as conn:
            user = await conn.fetchrow("""
                SELECT * FROM users WHERE user_id = $1
            """, user_id)
            if not user:
                raise NotFoundError("User not found")

            orders = await conn.fetch("""
                SELECT o.*,
                    (SELECT COALESCE(SUM(oi.quantity), 0)
                     FROM order_items oi
                     WHERE oi.order_id = o.order_id) as item_count
                FROM orders o
                WHERE o.user_id = $1
                ORDER BY o.created_at DESC
            """, user_id)
            addresses = await conn.fetch("""
                SELECT * FROM addresses
                WHERE user_id = $1
                ORDER BY created_at DESC
            """, user_id)

        user = dict(user)
        user['orders'] = [dict(o) for o in orders]
        user['addresses'] = [dict(a) for a in addresses]
        return user

    async def update_role(self, actor_id: int, user_id: int, role: Any) -> Dict[str, Any]:
        """Promote or demote a user"""
        await self.auth.require_admin(actor_id, "change user roles")
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationError(f"Unknown role: {role}")

        async with self.db.pool.acquire() as conn:
            user = await conn.fetchrow("""
                UPDATE users
                SET role = $1, updated_at = CURRENT_TIMESTAMP
                WHERE user_id = $2
                RETURNING *
            """, role.value, user_id)
        if not user:
            raise NotFoundError("User not found")

        self.logger.info(f"User {user_id} role set to {role.value} by {actor_id}")
        return dict(user)
