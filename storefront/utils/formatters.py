# storefront/utils/formatters.py
from datetime import datetime
import pytz
from decimal import Decimal
from ..config import Config

def format_price(amount: Decimal) -> str:
    """Price with currency symbol and two decimals"""
    return f"{Config.CURRENCY_SYMBOL}{Decimal(amount or 0):,.2f}"

def format_datetime(dt: datetime) -> str:
    """Date and time in the configured timezone"""
    if dt is None:
        return "-"
    local_tz = pytz.timezone(Config.TIMEZONE)
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(local_tz).strftime("%Y-%m-%d %H:%M")
