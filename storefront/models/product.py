# storefront/models/product.py
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from .base import TimeStampedModel

class Product(TimeStampedModel):
    """Product model for catalog items"""
    product_id: int
    category_id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity: int = 0
    brand: Optional[str] = None
    image_url: Optional[str] = None

    # Populated by joins, not stored on the row
    category_name: Optional[str] = None

class ProductInput(BaseModel):
    """Payload accepted when creating or replacing a product"""
    name: str = Field(min_length=2)
    description: str = Field(min_length=10)
    price: Decimal = Field(ge=Decimal("0.01"))
    quantity: int = Field(ge=0)
    brand: str = Field(min_length=2)
    image_url: str = Field(pattern=r"^https?://")
    category_id: int
