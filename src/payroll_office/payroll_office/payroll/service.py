from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..common.datetime_utils import require_month
from ..common.pagination import Page
from ..common.validators import parse_pagination, require_non_empty
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.enums import PaymentStatus, ProcessingStatus
from ..core.exceptions import (
    ConflictError,
    EmployeeNotFoundError,
    NotFoundError,
    PreconditionFailedError,
    SalaryStructureNotFoundError,
    ValidationError,
)
from ..database.unit_of_work import UnitOfWorkFactory
from .attendance import AttendanceInput
from .calculator.base import PayrollCalculation, PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payroll, PayrollFilters

logger = logging.getLogger(__name__)

LEGACY_PAYMENT_STATUSES = frozenset(s.value for s in PaymentStatus if s != PaymentStatus.PENDING)

SORT_KEYS = {
    "createdAt": "created_at",
    "month": "month",
    "netSalary": "net_salary",
    "employeeId": "employee_id",
    "paymentStatus": "payment_status",
}


@dataclass(frozen=True)
class ProcessedPayroll:
    payroll: Payroll
    calculation: PayrollCalculation
    employee_name: str


@dataclass(frozen=True)
class PayrollListing:
    page: Page[Payroll]
    summary: dict


def summarize(records: Iterable[Payroll]) -> dict:
    """Aggregate payroll records into payment-status buckets.

    Part-paid records count their paid share under ``partPaidAmount`` and
    the remainder under ``pendingAmount``.
    """

    out = {
        "totalAmount": 0.0,
        "paidAmount": 0.0,
        "pendingAmount": 0.0,
        "holdAmount": 0.0,
        "partPaidAmount": 0.0,
        "processedCount": 0,
        "pendingCount": 0,
        "paidCount": 0,
        "holdCount": 0,
        "partPaidCount": 0,
        "totalRecords": 0,
    }
    for p in records:
        out["totalRecords"] += 1
        out["totalAmount"] += p.net_salary
        if p.status == ProcessingStatus.PROCESSED:
            out["processedCount"] += 1

        if p.payment_status == PaymentStatus.PAID:
            out["paidCount"] += 1
            out["paidAmount"] += p.paid_amount
        elif p.payment_status == PaymentStatus.HOLD:
            out["holdCount"] += 1
            out["holdAmount"] += p.net_salary
        elif p.payment_status == PaymentStatus.PART_PAID:
            out["partPaidCount"] += 1
            out["partPaidAmount"] += p.paid_amount
            out["pendingAmount"] += p.outstanding_amount
        else:
            out["pendingCount"] += 1
            out["pendingAmount"] += p.net_salary
    return out


class PayrollService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        calculator: Optional[PayrollCalculator] = None,
        default_working_days: float = 22,
    ):
        self._uow_factory = uow_factory
        self._calculator = calculator or StandardPayrollCalculator()
        self._default_working_days = default_working_days

    @property
    def default_working_days(self) -> float:
        return self._default_working_days

    def attendance_from_payload(self, payload: Optional[dict]) -> AttendanceInput:
        return AttendanceInput.from_payload(payload, default_working_days=self._default_working_days)

    def process(
        self,
        *,
        employee_id: str,
        month: str,
        attendance: AttendanceInput,
        actor: str,
    ) -> ProcessedPayroll:
        """Compute and persist the payroll for one employee-month.

        Everything runs in a single unit of work. The unique index on
        (employee_id, month) backs the existence check, so a concurrent
        duplicate still ends in ConflictError.
        """

        employee_id = require_non_empty(employee_id, "Employee ID")
        month = require_month(month)
        actor = require_non_empty(actor, "Actor")

        with self._uow_factory() as uow:
            employee = uow.employees.find_by_employee_id(employee_id)
            if not employee:
                raise EmployeeNotFoundError("Employee not found")

            structure = uow.structures.get_active_for_employee(employee_id)
            if not structure:
                raise SalaryStructureNotFoundError("Active salary structure not found")

            if uow.payrolls.get_by_employee_and_month(employee_id, month):
                raise ConflictError("Payroll already exists for this month")

            record, calculation = self._calculator.build_payroll(
                employee=employee,
                structure=structure,
                month=month,
                attendance=attendance,
                actor=actor,
            )
            payroll_id = uow.payrolls.insert(record)
            payroll = uow.payrolls.get_by_id(payroll_id)
            if not payroll:
                raise NotFoundError("Payroll not found after insert")

        logger.info(
            "payroll processed employee=%s month=%s net=%.2f actor=%s",
            employee_id,
            month,
            payroll.net_salary,
            actor,
        )
        return ProcessedPayroll(payroll=payroll, calculation=calculation, employee_name=employee.name)

    def get_by_id(self, payroll_id: int) -> Payroll:
        with self._uow_factory() as uow:
            payroll = uow.payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll not found")
        return payroll

    def get_by_employee_and_month(self, employee_id: str, month: str) -> Optional[Payroll]:
        employee_id = require_non_empty(employee_id, "Employee ID")
        month = require_month(month)
        with self._uow_factory() as uow:
            return uow.payrolls.get_by_employee_and_month(employee_id, month)

    def list(
        self,
        *,
        month: Optional[str] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
        page=None,
        limit=None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> PayrollListing:
        page_num, limit_num = parse_pagination(page, limit, default_limit=DEFAULT_PAGE_LIMIT)
        # paid / hold / part-paid used to be values of a single status column
        legacy = (status or "").strip()
        if legacy in LEGACY_PAYMENT_STATUSES:
            if (payment_status or "").strip() not in ("", "all", legacy):
                raise ValidationError(f"status {legacy} conflicts with paymentStatus {payment_status}")
            status, payment_status = None, legacy
        filters = PayrollFilters(
            month=require_month(month) if month else None,
            status=self._parse_enum(ProcessingStatus, status, "status"),
            payment_status=self._parse_enum(PaymentStatus, payment_status, "paymentStatus"),
            department=(department or "").strip() or None,
            search=(search or "").strip() or None,
        )
        sort_column = SORT_KEYS.get(sort_by or "createdAt")
        if sort_column is None:
            raise ValidationError(f"Cannot sort by {sort_by!r}")
        descending = (sort_order or "desc").lower() != "asc"

        with self._uow_factory() as uow:
            total = uow.payrolls.count(filters)
            items = uow.payrolls.list(
                filters,
                limit=limit_num,
                offset=(page_num - 1) * limit_num,
                sort_by=sort_column,
                descending=descending,
            )

        return PayrollListing(
            page=Page(items=list(items), page=page_num, limit=limit_num, total=total),
            summary=summarize(items),
        )

    def summary(self, *, month: Optional[str] = None) -> dict:
        month = require_month(month) if month else None
        with self._uow_factory() as uow:
            records = uow.payrolls.list_for_summary(month=month)
            active_employees = uow.employees.count_active()
            with_structure = len(uow.structures.list_active())

        out = summarize(records)
        out["totalEmployees"] = out["totalRecords"]
        out["activeEmployees"] = active_employees
        out["employeesWithStructure"] = with_structure
        out["employeesWithoutStructure"] = max(0, active_employees - with_structure)
        out["payrollMonth"] = month or "All"
        return out

    def delete(self, payroll_id: int, *, actor: str) -> None:
        with self._uow_factory() as uow:
            payroll = uow.payrolls.get_by_id(int(payroll_id), for_update=True)
            if not payroll:
                raise NotFoundError("Payroll not found")
            if uow.slips.exists_for_payroll(payroll.payroll_id):
                raise PreconditionFailedError("Cannot delete payroll with a generated salary slip")
            uow.payrolls.delete(payroll.payroll_id)

        logger.info(
            "payroll deleted id=%s employee=%s month=%s actor=%s",
            payroll.payroll_id,
            payroll.employee_id,
            payroll.month,
            actor,
        )

    @staticmethod
    def _parse_enum(enum_cls, value: Optional[str], field_name: str):
        v = (value or "").strip()
        if not v or v == "all":
            return None
        try:
            return enum_cls(v)
        except ValueError:
            raise ValidationError(f"Invalid {field_name}: {v}")
