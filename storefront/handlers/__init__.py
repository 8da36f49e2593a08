"""Telegram handlers"""
from .admin_handlers import AdminHandler
from .base_handler import BaseHandler
from .cart_handlers import CartHandler
from .user_handlers import UserHandler

__all__ = [
    'AdminHandler',
    'BaseHandler',
    'CartHandler',
    'UserHandler',
]
