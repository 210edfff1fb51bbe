# vendoriq/utils/pagination.py
import math


def calculate_offset(page: int = 1, limit: int = 10) -> int:
    return (page - 1) * limit


def format_paginated_response(data: list, total: int, page: int = 1, limit: int = 10) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "data": data,
        "pagination": {
            "current_page": page,
            "per_page": limit,
            "total_items": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }
