import math
from typing import List, Tuple

from sqlalchemy.orm import Query

from app.core.config import settings


def paginate(query: Query, page: int = 1, size: int = None) -> Tuple[List, dict]:
    """Apply offset/limit to an already ordered query and build pagination metadata."""
    size = size or settings.default_page_size
    size = min(size, settings.max_page_size)
    page = max(page, 1)

    # Get total count
    total = query.order_by(None).count()

    # Apply pagination
    offset = (page - 1) * size
    items = query.offset(offset).limit(size).all()

    total_pages = math.ceil(total / size) if size > 0 else 0
    pagination = {
        "total": total,
        "page": page,
        "size": size,
        "total_pages": total_pages,
    }

    return items, pagination
