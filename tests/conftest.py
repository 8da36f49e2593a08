from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fakes import FakeConnection, FakeDatabase

ADMIN_ID = 1
CUSTOMER_ID = 2
NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def db(conn):
    return FakeDatabase(conn)


def grant_roles(conn, roles):
    """Answer role lookups from a {user_id: role} mapping"""
    conn.on("fetchval", "SELECT role FROM users", lambda user_id: roles.get(user_id))


@pytest.fixture
def roles(conn):
    mapping = {ADMIN_ID: "admin", CUSTOMER_ID: "user"}
    grant_roles(conn, mapping)
    return mapping


def make_campaign(campaign_id=1, **overrides):
    campaign = {
        "campaign_id": campaign_id,
        "name": f"Campaign {campaign_id}",
        "description": "",
        "type": "PERCENTAGE_DISCOUNT",
        "status": "ACTIVE",
        "start_date": NOW - timedelta(days=1),
        "end_date": NOW + timedelta(days=1),
        "apply_to_all_products": False,
        "discount_value": Decimal("20"),
        "maximum_discount_amount": None,
        "buy_quantity": None,
        "get_quantity": None,
        "flat_price": None,
        "minimum_order_amount": None,
        "max_usage": None,
        "usage_count": 0,
        "product_ids": [],
        "category_ids": [],
    }
    campaign.update(overrides)
    return campaign


def make_product(product_id=10, price="100.00", category_id=5, **overrides):
    product = {
        "product_id": product_id,
        "name": f"Product {product_id}",
        "price": Decimal(price),
        "category_id": category_id,
        "quantity": 3,
    }
    product.update(overrides)
    return product
