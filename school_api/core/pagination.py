# school_api/core/pagination.py
import math
from typing import Optional, Tuple

from school_api.models.responses import PaginationMeta

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def get_pagination(page: Optional[int] = None, limit: Optional[int] = None) -> Tuple[int, int, int]:
    """
    Normalises ``page``/``limit`` query values and returns ``(page, limit, skip)``.
    Missing or non-positive values fall back to the defaults; limit is capped.
    """
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)
    skip = (page - 1) * limit
    return page, limit, skip


def get_pagination_meta(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit) if limit else 0
    return PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
