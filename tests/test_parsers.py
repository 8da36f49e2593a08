from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.exceptions import ValidationError
from storefront.models.campaign import CampaignCreate, CampaignType
from storefront.utils.formatters import format_price
from storefront.utils.parsers import parse_address_text, parse_campaign_text
from storefront.utils.validation import parse_input


class TestCampaignText:
    def test_parses_admin_input(self):
        data = parse_campaign_text(
            "name=Summer; type=percentage_discount; value=20; all=yes; "
            "start=2026-06-01; end=2026-06-30T23:59:00; categories=3, 4"
        )

        assert data == {
            "name": "Summer",
            "type": "PERCENTAGE_DISCOUNT",
            "discount_value": "20",
            "apply_to_all_products": True,
            "start_date": "2026-06-01T00:00:00",
            "end_date": "2026-06-30T23:59:00",
            "category_ids": [3, 4],
        }

    def test_parsed_input_fits_campaign_schema(self):
        campaign = parse_input(CampaignCreate, parse_campaign_text(
            "name=Flat; type=FLAT_PRICE; flat=9.99; start=2026-06-01; end=2026-06-30"
        ))

        assert campaign.type == CampaignType.FLAT_PRICE
        assert campaign.flat_price == Decimal("9.99")
        assert campaign.start_date == datetime(2026, 6, 1, tzinfo=timezone.utc)
        assert campaign.end_date == datetime(2026, 6, 30, 23, 59, 59, tzinfo=timezone.utc)

    @pytest.mark.parametrize("text", [
        "name Summer",
        "colour=red",
        "products=1,two",
    ])
    def test_rejects_bad_input(self, text):
        with pytest.raises(ValidationError):
            parse_campaign_text(text)


class TestAddressText:
    def test_without_line2(self):
        assert parse_address_text("1 Main St, Springfield, IL, 62701, US") == {
            "line1": "1 Main St",
            "line2": None,
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
            "country": "US",
        }

    def test_with_line2(self):
        address = parse_address_text("1 Main St, Apt 2, Springfield, IL, 62701, US")
        assert address["line2"] == "Apt 2"
        assert address["city"] == "Springfield"

    def test_blank_line2(self):
        assert parse_address_text("1 Main St, , Springfield, IL, 62701, US")["line2"] is None

    def test_too_few_parts(self):
        with pytest.raises(ValidationError):
            parse_address_text("1 Main St, Springfield")

    def test_blank_required_part(self):
        with pytest.raises(ValidationError, match="city"):
            parse_address_text("1 Main St, , IL, 62701, US")


def test_format_price():
    assert format_price(Decimal("1234.5")) == "$1,234.50"
    assert format_price(None) == "$0.00"
