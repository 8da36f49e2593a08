"""Service layer: one class per area, each holding the shared Database"""
from .auth_service import AuthService
from .campaign_service import CampaignService
from .cart_service import CartService
from .category_service import CategoryService
from .order_service import OrderService
from .product_service import ProductService
from .report_service import ReportService
from .user_service import UserService

__all__ = [
    'AuthService',
    'CampaignService',
    'CartService',
    'CategoryService',
    'OrderService',
    'ProductService',
    'ReportService',
    'UserService',
]
