from __future__ import annotations

import math
from typing import Any, Optional

from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def to_number(value: Any, field_name: str, *, default: float = 0.0) -> float:
    """Coerce a request value into a float; blank means ``default``."""
    if value is None or value == "":
        return float(default)
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_non_negative(value: Any, field_name: str, *, default: float = 0.0) -> float:
    number = to_number(value, field_name, default=default)
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def parse_pagination(page: Any, limit: Any, *, default_limit: int = DEFAULT_PAGE_LIMIT) -> tuple[int, int]:
    try:
        page_num = int(page) if page not in (None, "") else 1
        limit_num = int(limit) if limit not in (None, "") else default_limit
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page_num < 1:
        raise ValidationError("page must be >= 1")
    if limit_num < 1:
        raise ValidationError("limit must be >= 1")
    return page_num, min(limit_num, MAX_PAGE_LIMIT)
