# storefront/models/campaign.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, Field, model_validator
from .base import TimeStampedModel

def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

class CampaignType(str, Enum):
    """Promotion kinds"""
    PERCENTAGE_DISCOUNT = "PERCENTAGE_DISCOUNT"
    FIXED_AMOUNT_DISCOUNT = "FIXED_AMOUNT_DISCOUNT"
    BUY_ONE_GET_ONE = "BUY_ONE_GET_ONE"
    FREE_SHIPPING = "FREE_SHIPPING"
    FLAT_PRICE = "FLAT_PRICE"

class CampaignStatus(str, Enum):
    """Lifecycle states"""
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ENDED = "ENDED"  # terminal

class Campaign(TimeStampedModel):
    """Campaign model"""
    campaign_id: int
    name: str
    description: Optional[str] = None
    type: CampaignType
    status: CampaignStatus = CampaignStatus.DRAFT
    start_date: datetime
    end_date: datetime
    apply_to_all_products: bool = False
    discount_value: Optional[Decimal] = None  # percent or fixed amount
    maximum_discount_amount: Optional[Decimal] = None
    buy_quantity: Optional[int] = None
    get_quantity: Optional[int] = None
    flat_price: Optional[Decimal] = None
    minimum_order_amount: Optional[Decimal] = None
    max_usage: Optional[int] = None
    usage_count: int = 0
    created_by: Optional[int] = None

    # Scope, loaded from the association tables
    product_ids: List[int] = []
    category_ids: List[int] = []

class CampaignCreate(BaseModel):
    """Payload accepted when creating a campaign"""
    name: str = Field(min_length=1)
    description: str = ""
    type: CampaignType
    status: CampaignStatus = CampaignStatus.DRAFT
    start_date: UtcDatetime
    end_date: UtcDatetime
    apply_to_all_products: bool = False
    discount_value: Optional[Decimal] = None
    maximum_discount_amount: Optional[Decimal] = None
    buy_quantity: Optional[int] = None
    get_quantity: Optional[int] = None
    flat_price: Optional[Decimal] = None
    minimum_order_amount: Optional[Decimal] = None
    max_usage: Optional[int] = None
    product_ids: Optional[List[int]] = None
    category_ids: Optional[List[int]] = None

class CampaignUpdate(BaseModel):
    """Partial update; unset fields keep their stored value"""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[CampaignType] = None
    status: Optional[CampaignStatus] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    apply_to_all_products: Optional[bool] = None
    discount_value: Optional[Decimal] = None
    maximum_discount_amount: Optional[Decimal] = None
    buy_quantity: Optional[int] = None
    get_quantity: Optional[int] = None
    flat_price: Optional[Decimal] = None
    minimum_order_amount: Optional[Decimal] = None
    max_usage: Optional[int] = None
    product_ids: Optional[List[int]] = None
    category_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def required_columns_stay_set(self):
        # NOT NULL columns may be omitted but not cleared
        for field in ("name", "type", "status", "start_date", "end_date", "apply_to_all_products"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be empty")
        return self
