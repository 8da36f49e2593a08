# storefront/models/category.py
from .base import TimeStampedModel

class Category(TimeStampedModel):
    """Category model for product categorization"""
    category_id: int
    name: str
