from .campaign import Campaign, CampaignCreate, CampaignStatus, CampaignType, CampaignUpdate
from .cart import Cart, CartItem
from .category import Category
from .order import Address, AddressInput, Order, OrderItem, OrderStatus, Payment, PaymentMethod, PaymentStatus
from .product import Product, ProductInput
from .user import User, UserRole

__all__ = [
    'Address',
    'AddressInput',
    'Campaign',
    'CampaignCreate',
    'CampaignStatus',
    'CampaignType',
    'CampaignUpdate',
    'Cart',
    'CartItem',
    'Category',
    'Order',
    'OrderItem',
    'OrderStatus',
    'Payment',
    'PaymentMethod',
    'PaymentStatus',
    'Product',
    'ProductInput',
    'User',
    'UserRole',
]
