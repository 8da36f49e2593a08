# storefront/utils/pagination.py
import math
from typing import Any, Dict, List, Optional, Tuple
from ..config import Config
from ..exceptions import ValidationError

def page_bounds(page: int, page_size: Optional[int] = None) -> Tuple[int, int]:
    """Return (limit, offset) for a 1-based page"""
    page_size = page_size or Config.PAGE_SIZE
    if page < 1:
        raise ValidationError("Page must be 1 or greater")
    if page_size < 1 or page_size > Config.MAX_PAGE_SIZE:
        raise ValidationError(f"Page size must be between 1 and {Config.MAX_PAGE_SIZE}")
    return page_size, (page - 1) * page_size

def page_result(key: str, rows: List[Dict[str, Any]], total: int,
                page: int, page_size: int) -> Dict[str, Any]:
    """Shape a page of rows the same way for every listing"""
    return {
        key: rows,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0
    }
