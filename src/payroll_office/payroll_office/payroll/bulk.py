from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..common.datetime_utils import require_month
from ..common.validators import require_non_empty
from ..core.exceptions import (
    ConflictError,
    DomainError,
    EmployeeNotFoundError,
    SalaryStructureNotFoundError,
    ValidationError,
)
from .service import PayrollService

logger = logging.getLogger(__name__)


@dataclass
class BulkOutcome:
    results: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def summary(self) -> dict:
        return {
            "processed": len(self.results),
            "failed": len(self.errors),
            "total": len(self.results) + len(self.errors),
        }

    def to_dict(self) -> dict:
        return {"results": self.results, "errors": self.errors, "summary": self.summary}


def _error_code(error: Exception) -> str:
    if isinstance(error, ConflictError):
        return "already_processed"
    if isinstance(error, EmployeeNotFoundError):
        return "employee_not_found"
    if isinstance(error, SalaryStructureNotFoundError):
        return "structure_not_found"
    if isinstance(error, ValidationError):
        return "invalid_attendance"
    return "store_error"


class BulkPayrollRunner:
    """Process a month's payroll for many employees.

    Every employee goes through ``PayrollService.process`` in its own unit of
    work, so one failure never undoes another employee's committed record.
    """

    def __init__(self, payroll_service: PayrollService):
        self._payrolls = payroll_service

    def run(
        self,
        *,
        month: str,
        employee_ids: Any,
        attendance_map: Optional[Mapping[str, Any]] = None,
        actor: str,
    ) -> BulkOutcome:
        if not month or employee_ids is None or not isinstance(employee_ids, (list, tuple)):
            raise ValidationError("Month and employeeIds array are required")
        month = require_month(month)
        actor = require_non_empty(actor, "Actor")
        if attendance_map is not None and not isinstance(attendance_map, Mapping):
            raise ValidationError("attendanceMap must be an object keyed by employeeId")
        attendance_map = attendance_map or {}

        outcome = BulkOutcome()
        for raw_id in employee_ids:
            employee_id = str(raw_id).strip() if raw_id is not None else ""
            try:
                attendance = self._payrolls.attendance_from_payload(attendance_map.get(employee_id))
                processed = self._payrolls.process(
                    employee_id=employee_id,
                    month=month,
                    attendance=attendance,
                    actor=actor,
                )
            except DomainError as e:
                outcome.errors.append({"employeeId": employee_id, "error": str(e), "code": _error_code(e)})
                continue
            except Exception as e:
                logger.exception("bulk payroll failed employee=%s month=%s", employee_id, month)
                outcome.errors.append({"employeeId": employee_id, "error": str(e), "code": "store_error"})
                continue

            payroll = processed.payroll
            outcome.results.append(
                {
                    "employeeId": employee_id,
                    "payrollId": payroll.payroll_id,
                    "name": processed.employee_name,
                    "netSalary": payroll.net_salary,
                    "accountNumber": payroll.employee_details.account_number,
                    "ifscCode": payroll.employee_details.ifsc_code,
                }
            )

        logger.info(
            "bulk payroll month=%s processed=%d failed=%d actor=%s",
            month,
            len(outcome.results),
            len(outcome.errors),
            actor,
        )
        return outcome
