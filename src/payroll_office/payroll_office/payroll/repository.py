from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentStatus
from .model import NewPayroll, Payroll, PayrollFilters


class PayrollRepository(Protocol):
    def insert(self, record: NewPayroll) -> int:
        """Persist a computed payroll and return its id.

        Raises ConflictError when (employee_id, month) already exists; the
        store's unique index is the authoritative guard.
        """

        raise NotImplementedError

    def get_by_id(self, payroll_id: int, *, for_update: bool = False) -> Optional[Payroll]:
        raise NotImplementedError

    def get_by_employee_and_month(self, employee_id: str, month: str) -> Optional[Payroll]:
        raise NotImplementedError

    def list(
        self,
        filters: PayrollFilters,
        *,
        limit: int,
        offset: int,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> Sequence[Payroll]:
        raise NotImplementedError

    def count(self, filters: PayrollFilters) -> int:
        raise NotImplementedError

    def list_for_summary(self, *, month: Optional[str] = None) -> Sequence[Payroll]:
        raise NotImplementedError

    def update_payment(
        self,
        payroll_id: int,
        *,
        payment_status: PaymentStatus,
        paid_amount: float,
        payment_date: Optional[datetime],
        notes: Optional[str],
        actor: str,
    ) -> bool:
        raise NotImplementedError

    def delete(self, payroll_id: int) -> bool:
        raise NotImplementedError
