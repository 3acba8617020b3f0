from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..common.validators import require_non_negative, to_number
from ..core.constants import DEFAULT_TOTAL_WORKING_DAYS
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceInput:
    """Attendance counts supplied by the caller for one employee-month.

    Counts are not derived here; the attendance module (or the operator)
    provides them.
    """

    present_days: float = 0.0
    absent_days: float = 0.0
    half_days: float = 0.0
    leaves: float = 0.0
    total_working_days: float = DEFAULT_TOTAL_WORKING_DAYS

    @classmethod
    def from_payload(
        cls,
        payload: Optional[Mapping[str, Any]],
        *,
        default_working_days: float = DEFAULT_TOTAL_WORKING_DAYS,
    ) -> "AttendanceInput":
        """Build from a camelCase request payload.

        Missing counts default to 0; a missing ``totalWorkingDays`` takes the
        configured default. A ``totalWorkingDays`` <= 0 is kept as given and
        means "no daily rate".
        """

        if payload is not None and not isinstance(payload, Mapping):
            raise ValidationError("Attendance must be an object with presentDays, absentDays, halfDays, leaves")
        data = payload or {}
        return cls(
            present_days=require_non_negative(data.get("presentDays"), "presentDays"),
            absent_days=require_non_negative(data.get("absentDays"), "absentDays"),
            half_days=require_non_negative(data.get("halfDays"), "halfDays"),
            leaves=require_non_negative(data.get("leaves"), "leaves"),
            total_working_days=to_number(data.get("totalWorkingDays"), "totalWorkingDays", default=default_working_days),
        )
