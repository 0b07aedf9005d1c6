"""Page/limit helpers shared by the list endpoints"""

import math

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def clamp_page(page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    page = max(1, page)
    limit = min(max(1, limit), MAX_PAGE_SIZE)
    return page, limit


def paginate(query, page: int, limit: int):
    """Apply offset/limit to a query. Returns (items, total)"""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total


def pagination_meta(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if limit else 0,
    }
