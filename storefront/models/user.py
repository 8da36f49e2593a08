# storefront/models/user.py
from enum import Enum
from typing import Optional
from .base import TimeStampedModel

class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"

class User(TimeStampedModel):
    """User model for storing Telegram user information"""
    user_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
