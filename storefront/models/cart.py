# storefront/models/cart.py
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict

class CartItem(BaseModel):
    """A product line in a user's cart"""
    cart_item_id: int
    cart_id: int
    product_id: int
    quantity: int

    # Joined from products
    name: Optional[str] = None
    price: Optional[Decimal] = None
    category_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class Cart(BaseModel):
    """One cart per user"""
    cart_id: int
    user_id: int
    items: List[CartItem] = []

    model_config = ConfigDict(from_attributes=True)
