# storefront/utils/parsers.py
import re
from typing import Any, Dict, List
from ..constants import ADDRESS_FIELDS, ADDRESS_FIELDS_WITH_LINE2, CAMPAIGN_INPUT_KEYS
from ..exceptions import ValidationError
from ..models.order import AddressInput
from .validation import parse_input

_TRUE = {"1", "yes", "true", "y", "on"}

# A bare date covers the whole day
_DAY_BOUNDS = {"start_date": "T00:00:00", "end_date": "T23:59:59"}
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

def _id_list(value: str) -> List[int]:
    ids = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit():
            raise ValidationError(f"Invalid id: {part}")
        ids.append(int(part))
    return ids

def parse_campaign_text(text: str) -> Dict[str, Any]:
    """Parse 'key=value; key=value' admin input into campaign fields.

    Numbers and dates are left as strings; the campaign schema parses them.
    """
    data: Dict[str, Any] = {}
    for chunk in text.split(";"):
        if not chunk.strip():
            continue
        if "=" not in chunk:
            raise ValidationError(f"Expected key=value, got: {chunk.strip()}")
        key, value = (part.strip() for part in chunk.split("=", 1))
        field = CAMPAIGN_INPUT_KEYS.get(key.lower())
        if field is None:
            raise ValidationError(f"Unknown campaign field: {key}")

        if field in ("product_ids", "category_ids"):
            data[field] = _id_list(value)
        elif field == "apply_to_all_products":
            data[field] = value.lower() in _TRUE
        elif field in ("type", "status"):
            data[field] = value.upper()
        elif field in _DAY_BOUNDS and _DATE_ONLY.match(value):
            data[field] = value + _DAY_BOUNDS[field]
        else:
            data[field] = value
    return data

def parse_address_text(text: str) -> Dict[str, Any]:
    """Split and validate a comma separated address; line2 is optional"""
    parts = [part.strip() for part in text.split(",")]
    if len(parts) == len(ADDRESS_FIELDS):
        address = dict(zip(ADDRESS_FIELDS, parts))
    elif len(parts) == len(ADDRESS_FIELDS_WITH_LINE2):
        address = dict(zip(ADDRESS_FIELDS_WITH_LINE2, parts))
        if not address['line2']:
            address['line2'] = None
    else:
        raise ValidationError(
            "Address must be: street, [apartment,] city, state, postal code, country"
        )
    return parse_input(AddressInput, address).model_dump()
