# storefront/models/order.py
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from typing import List, Optional
from .base import TimeStampedModel

class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

class PaymentMethod(str, Enum):
    CARD = "card"
    CASH_ON_DELIVERY = "cash_on_delivery"
    BANK_TRANSFER = "bank_transfer"

class AddressInput(BaseModel):
    """Shipping address collected at checkout"""
    line1: str = Field(min_length=1)
    line2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)

class Address(TimeStampedModel, AddressInput):
    address_id: int
    user_id: int

class OrderItem(BaseModel):
    """Individual item in an order, priced at order time"""
    product_id: int
    quantity: int
    price: Decimal
    name: Optional[str] = None
    campaign_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class Payment(TimeStampedModel):
    payment_id: int
    order_id: int
    amount: Decimal
    status: PaymentStatus = PaymentStatus.PENDING
    method: str

class Order(TimeStampedModel):
    """Order snapshot created at checkout"""
    order_id: int
    user_id: int
    address_id: int
    status: OrderStatus = OrderStatus.PENDING
    total: Decimal
    items: List[OrderItem] = []
