from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local, require_month
from ..common.pagination import Page
from ..common.validators import parse_pagination, require_non_empty
from ..core.constants import SLIP_NUMBER_MAX_ATTEMPTS
from ..core.exceptions import (
    ConflictError,
    EmployeeNotFoundError,
    NotFoundError,
    SlipNumberTakenError,
    StoreContentionError,
    ValidationError,
)
from ..database.unit_of_work import UnitOfWorkFactory
from .model import NewSalarySlip, SalarySlip, SlipFilters
from .numbering import next_slip_number, slip_number_prefix

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("notes", "downloadUrl", "emailSent")


def _parse_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in ("true", "1"):
        return True
    if v in ("false", "0"):
        return False
    raise ValidationError(f"{field_name} must be true or false")


class SalarySlipIssuer:
    """Issues one numbered slip per payroll and manages its delivery fields.

    Slip numbers follow ``SS/YYYY/MM/NNNN`` where year and month come from the
    generation date, not the payroll month.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        clock: Callable[[], datetime] = now_local,
        max_attempts: int = SLIP_NUMBER_MAX_ATTEMPTS,
    ):
        self._uow_factory = uow_factory
        self._clock = clock
        self._max_attempts = max_attempts

    def generate(self, payroll_id: Any, *, actor: str) -> SalarySlip:
        if payroll_id in (None, ""):
            raise ValidationError("Payroll ID is required")
        try:
            pid = int(payroll_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid payroll ID")
        actor = require_non_empty(actor, "Actor")

        for attempt in range(1, self._max_attempts + 1):
            try:
                slip = self._generate_once(pid, actor=actor)
            except SlipNumberTakenError:
                logger.warning("slip number collision for payroll=%s (attempt %d)", pid, attempt)
                continue
            except StoreContentionError:
                # Two first-of-month generators deadlock on the empty number range.
                logger.warning("slip numbering lock conflict for payroll=%s (attempt %d)", pid, attempt)
                continue
            logger.info("salary slip %s issued payroll=%s actor=%s", slip.slip_number, pid, actor)
            return slip

        raise ConflictError("Could not allocate a salary slip number, please retry")

    def _generate_once(self, payroll_id: int, *, actor: str) -> SalarySlip:
        with self._uow_factory() as uow:
            payroll = uow.payrolls.get_by_id(payroll_id)
            if not payroll:
                raise NotFoundError("Payroll record not found")
            if uow.slips.exists_for_payroll(payroll_id):
                raise ConflictError("Salary slip already exists for this payroll")
            if not uow.employees.find_by_employee_id(payroll.employee_id):
                raise EmployeeNotFoundError("Employee not found")

            generated_at = self._clock()
            highest = uow.slips.highest_number_with_prefix(slip_number_prefix(generated_at))
            slip_id = uow.slips.insert(
                NewSalarySlip(
                    payroll_id=payroll.payroll_id,
                    employee_id=payroll.employee_id,
                    month=payroll.month,
                    slip_number=next_slip_number(generated_at, highest),
                    basic_salary=payroll.basic_salary,
                    allowances=payroll.allowances,
                    deductions=payroll.deductions,
                    net_salary=payroll.net_salary,
                    present_days=payroll.present_days,
                    absent_days=payroll.absent_days,
                    half_days=payroll.half_days,
                    leaves=payroll.leaves,
                    generated_at=generated_at,
                    created_by=actor,
                )
            )
            slip = uow.slips.get_by_id(slip_id)
            if not slip:
                raise NotFoundError("Salary slip not found after insert")
            return slip

    def get_by_id(self, slip_id: int) -> SalarySlip:
        with self._uow_factory() as uow:
            slip = uow.slips.get_by_id(int(slip_id))
        if not slip:
            raise NotFoundError("Salary slip not found")
        return slip

    def get_by_employee_and_month(self, employee_id: str, month: str) -> Optional[SalarySlip]:
        employee_id = require_non_empty(employee_id, "Employee ID")
        month = require_month(month)
        with self._uow_factory() as uow:
            return uow.slips.get_by_employee_and_month(employee_id, month)

    def list(
        self,
        *,
        month: Optional[str] = None,
        employee_id: Optional[str] = None,
        email_sent: Any = None,
        page=None,
        limit=None,
    ) -> Page[SalarySlip]:
        page_num, limit_num = parse_pagination(page, limit)
        filters = SlipFilters(
            month=require_month(month) if month else None,
            employee_id=(employee_id or "").strip() or None,
            email_sent=_parse_bool(email_sent, "emailSent"),
        )
        with self._uow_factory() as uow:
            total = uow.slips.count(filters)
            items = uow.slips.list(filters, limit=limit_num, offset=(page_num - 1) * limit_num)
        return Page(items=list(items), page=page_num, limit=limit_num, total=total)

    def update(self, slip_id: int, payload: Mapping[str, Any], *, actor: str) -> SalarySlip:
        """Change delivery fields only; identity and money fields are ignored."""

        actor = require_non_empty(actor, "Actor")
        ignored = sorted(k for k in payload if k not in EDITABLE_FIELDS)
        if ignored:
            logger.debug("salary slip %s update ignores fields: %s", slip_id, ", ".join(ignored))
        email_sent = _parse_bool(payload.get("emailSent"), "emailSent")

        with self._uow_factory() as uow:
            current = uow.slips.get_by_id(int(slip_id))
            if not current:
                raise NotFoundError("Salary slip not found")

            uow.slips.update_details(
                current.slip_id,
                notes=payload["notes"] if "notes" in payload else current.notes,
                download_url=payload["downloadUrl"] if "downloadUrl" in payload else current.download_url,
                actor=actor,
            )
            if email_sent and not current.email_sent:
                uow.slips.mark_emailed(current.slip_id, sent_at=self._clock(), actor=actor)
            updated = uow.slips.get_by_id(current.slip_id)
            if not updated:
                raise NotFoundError("Salary slip not found")
        return updated

    def mark_emailed(self, slip_id: int, *, actor: str) -> SalarySlip:
        actor = require_non_empty(actor, "Actor")
        with self._uow_factory() as uow:
            if not uow.slips.get_by_id(int(slip_id)):
                raise NotFoundError("Salary slip not found")
            uow.slips.mark_emailed(int(slip_id), sent_at=self._clock(), actor=actor)
            slip = uow.slips.get_by_id(int(slip_id))
            if not slip:
                raise NotFoundError("Salary slip not found")
        logger.info("salary slip %s marked as emailed actor=%s", slip.slip_number, actor)
        return slip

    def delete(self, slip_id: int, *, actor: str) -> None:
        with self._uow_factory() as uow:
            if not uow.slips.delete(int(slip_id)):
                raise NotFoundError("Salary slip not found")
        logger.info("salary slip deleted id=%s actor=%s", slip_id, actor)
