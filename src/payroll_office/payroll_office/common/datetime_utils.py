from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime coming from a request body.

    DATETIME columns carry no offset, so values with one are converted to
    naive local time.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def require_month(value: Optional[str]) -> str:
    """Validate a payroll month key (YYYY-MM)."""
    v = (value or "").strip()
    if not v:
        raise ValidationError("Month is required")
    if not _MONTH_RE.match(v):
        raise ValidationError("Month must be in YYYY-MM format")
    return v


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
