from __future__ import annotations

from enum import Enum


class ProcessingStatus(str, Enum):
    """Whether a payroll figure has been computed and persisted."""

    PENDING = "pending"
    PROCESSED = "processed"


class PaymentStatus(str, Enum):
    """Disbursement state of a processed payroll record."""

    PENDING = "pending"
    HOLD = "hold"
    PART_PAID = "part-paid"
    PAID = "paid"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    LEFT = "left"
