# storefront/services/auth_service.py
import logging
from typing import Optional
from ..exceptions import AuthorizationError
from ..models.user import UserRole

class AuthService:
    """Role checks for admin-gated operations.

    The role is read from storage on every call so a demoted admin loses
    access immediately.
    """

    def __init__(self, db):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def get_role(self, user_id: int) -> Optional[str]:
        """Current role of a user, None for unknown users"""
        async with self.db.pool.acquire() as conn:
            return await conn.fetchval("""
                SELECT role FROM users WHERE user_id = $1
            """, user_id)

    async def is_admin(self, user_id: int) -> bool:
        return await self.get_role(user_id) == UserRole.ADMIN.value

    async def require_admin(self, user_id: int, action: str = "perform this action") -> None:
        """Raise AuthorizationError unless the user is an admin"""
        if not await self.is_admin(user_id):
            self.logger.warning(f"User {user_id} denied: {action}")
            raise AuthorizationError(f"Only admins can {action}")
