# storefront/services/pricing.py
"""Campaign discount rules.

Every surface that shows or charges a price goes through this module so the
catalog, the cart and checkout agree on the same number. Functions accept
either pydantic models or plain dicts (asyncpg rows converted with ``dict``)
and never raise for missing optional fields: a campaign that lacks the value
its type needs simply gives no discount.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from ..config import Config
from ..models.campaign import CampaignStatus, CampaignType

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _as_aware(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _money(value: Decimal) -> Decimal:
    return max(ZERO, value).quantize(CENT, rounding=ROUND_HALF_UP)


def _plain(value: Any) -> str:
    """Render a number the way a shopper reads it: 20, 9.99, 12.5"""
    number = _to_decimal(value)
    if number is None:
        return str(value)
    text = format(number.normalize(), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def is_campaign_active(campaign: Any, now: Optional[datetime] = None) -> bool:
    """ACTIVE status and ``now`` inside [start_date, end_date]"""
    if _enum_value(_get(campaign, "status")) != CampaignStatus.ACTIVE.value:
        return False

    start = _as_aware(_get(campaign, "start_date"))
    end = _as_aware(_get(campaign, "end_date"))
    if start is None or end is None:
        return False

    now = _as_aware(now) or datetime.now(timezone.utc)
    return start <= now <= end


def campaign_applies_to(campaign: Any, product: Any) -> bool:
    """Scope check: store-wide flag, explicit product or product's category"""
    if _get(campaign, "apply_to_all_products"):
        return True
    if _get(product, "product_id") in (_get(campaign, "product_ids") or []):
        return True
    category_id = _get(product, "category_id")
    return category_id is not None and category_id in (_get(campaign, "category_ids") or [])


def applicable_campaigns(product: Any, campaigns: Iterable[Any],
                         now: Optional[datetime] = None) -> List[Any]:
    """Active campaigns whose scope includes the product, in input order"""
    return [
        campaign for campaign in campaigns
        if is_campaign_active(campaign, now) and campaign_applies_to(campaign, product)
    ]


def _discounted(price: Decimal, campaign: Any) -> Optional[Decimal]:
    """Adjusted price for one campaign, or None when it does not change the price"""
    campaign_type = _enum_value(_get(campaign, "type"))

    if campaign_type == CampaignType.PERCENTAGE_DISCOUNT.value:
        percent = _to_decimal(_get(campaign, "discount_value"))
        if not percent or percent < 0:
            return None
        discount = price * percent / 100
        cap = _to_decimal(_get(campaign, "maximum_discount_amount"))
        if cap is not None and cap > 0:
            discount = min(discount, cap)
        return price - discount

    if campaign_type == CampaignType.FIXED_AMOUNT_DISCOUNT.value:
        amount = _to_decimal(_get(campaign, "discount_value"))
        if not amount or amount < 0:
            return None
        return price - amount

    if campaign_type == CampaignType.FLAT_PRICE.value:
        flat_price = _to_decimal(_get(campaign, "flat_price"))
        if not flat_price:
            return None
        return flat_price

    # BUY_ONE_GET_ONE and FREE_SHIPPING leave the unit price alone
    return None


def pricing_campaign(product: Any, campaigns: Iterable[Any],
                     now: Optional[datetime] = None) -> Optional[Any]:
    """The campaign that decides the product's price: the first applicable one"""
    applicable = applicable_campaigns(product, campaigns, now)
    return applicable[0] if applicable else None


def effective_price(product: Any, campaigns: Iterable[Any],
                    now: Optional[datetime] = None) -> Decimal:
    """Price after at most one campaign, never below zero"""
    price = _to_decimal(_get(product, "price"))
    if price is None:
        return ZERO

    campaign = pricing_campaign(product, campaigns, now)
    if campaign is None:
        return _money(price)

    adjusted = _discounted(price, campaign)
    if adjusted is None:
        return _money(price)
    return _money(adjusted)


def badge_label(campaign: Any) -> str:
    """Human readable promotion text"""
    campaign_type = _enum_value(_get(campaign, "type"))
    currency = Config.CURRENCY_SYMBOL

    if campaign_type == CampaignType.PERCENTAGE_DISCOUNT.value:
        return f"{_plain(_get(campaign, 'discount_value'))}% OFF"
    if campaign_type == CampaignType.FIXED_AMOUNT_DISCOUNT.value:
        return f"{currency}{_plain(_get(campaign, 'discount_value'))} OFF"
    if campaign_type == CampaignType.BUY_ONE_GET_ONE.value:
        return (
            f"BOGO: Buy {_plain(_get(campaign, 'buy_quantity'))} "
            f"Get {_plain(_get(campaign, 'get_quantity'))}"
        )
    if campaign_type == CampaignType.FREE_SHIPPING.value:
        return "FREE SHIPPING"
    if campaign_type == CampaignType.FLAT_PRICE.value:
        return f"FLAT PRICE: {currency}{_plain(_get(campaign, 'flat_price'))}"
    return _get(campaign, "name") or "SPECIAL OFFER"


def price_cart_lines(items: Iterable[Any], campaigns: Iterable[Any],
                     now: Optional[datetime] = None) -> Dict[str, Any]:
    """Effective unit price and total for every cart line plus the subtotal"""
    campaigns = list(campaigns)
    lines = []
    subtotal = ZERO

    for item in items:
        unit_price = _money(_to_decimal(_get(item, "price")) or ZERO)
        unit_effective = effective_price(item, campaigns, now)
        quantity = int(_get(item, "quantity") or 0)
        line_total = unit_effective * quantity

        campaign = pricing_campaign(item, campaigns, now)
        discounted = campaign is not None and unit_effective != unit_price

        lines.append({
            "cart_item_id": _get(item, "cart_item_id"),
            "product_id": _get(item, "product_id"),
            "name": _get(item, "name"),
            "quantity": quantity,
            "unit_price": unit_price,
            "effective_price": unit_effective,
            "line_total": line_total,
            "campaign_id": _get(campaign, "campaign_id") if discounted else None,
            "badges": [badge_label(c) for c in applicable_campaigns(item, campaigns, now)],
        })
        subtotal += line_total

    return {"lines": lines, "subtotal": subtotal}
