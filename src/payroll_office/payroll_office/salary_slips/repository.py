from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import NewSalarySlip, SalarySlip, SlipFilters


class SalarySlipRepository(Protocol):
    def insert(self, slip: NewSalarySlip) -> int:
        """Insert a slip.

        Raises ConflictError when the payroll already has a slip and
        SlipNumberTakenError when the slip number was claimed concurrently.
        """

        raise NotImplementedError

    def highest_number_with_prefix(self, prefix: str) -> Optional[str]:
        raise NotImplementedError

    def get_by_id(self, slip_id: int) -> Optional[SalarySlip]:
        raise NotImplementedError

    def get_by_employee_and_month(self, employee_id: str, month: str) -> Optional[SalarySlip]:
        raise NotImplementedError

    def exists_for_payroll(self, payroll_id: int) -> bool:
        raise NotImplementedError

    def list(self, filters: SlipFilters, *, limit: int, offset: int) -> Sequence[SalarySlip]:
        raise NotImplementedError

    def count(self, filters: SlipFilters) -> int:
        raise NotImplementedError

    def update_details(
        self,
        slip_id: int,
        *,
        notes: Optional[str],
        download_url: Optional[str],
        actor: str,
    ) -> bool:
        raise NotImplementedError

    def mark_emailed(self, slip_id: int, *, sent_at: datetime, actor: str) -> bool:
        raise NotImplementedError

    def delete(self, slip_id: int) -> bool:
        raise NotImplementedError
