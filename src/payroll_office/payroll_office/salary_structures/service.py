from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.pagination import Page
from ..common.validators import parse_pagination, require_non_empty
from ..core.exceptions import (
    ConflictError,
    EmployeeNotFoundError,
    NotFoundError,
    SalaryStructureNotFoundError,
    ValidationError,
)
from ..database.unit_of_work import UnitOfWorkFactory
from ..employees.model import Employee
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from .model import COMPONENT_FIELDS, SalaryComponents, SalaryStructure

logger = logging.getLogger(__name__)


class SalaryStructureService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._uow_factory = uow_factory
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock

    def _effective_date(self, value: Any) -> date:
        if value in (None, ""):
            return self._clock().date()
        if isinstance(value, date):
            return value
        try:
            return parse_iso_date(str(value)[:10])
        except ValueError:
            raise ValidationError("effectiveFrom must be in YYYY-MM-DD format")

    def create(self, payload: Mapping[str, Any], *, actor: str) -> SalaryStructure:
        employee_id = str(payload.get("employeeId") or "").strip()
        if not employee_id or payload.get("basicSalary") in (None, ""):
            raise ValidationError("Employee ID and Basic Salary are required")
        components = SalaryComponents.from_payload(payload)
        if components.basic_salary <= 0:
            raise ValidationError("Basic salary must be greater than 0")
        effective_from = self._effective_date(payload.get("effectiveFrom"))
        actor = require_non_empty(actor, "Actor")

        with self._uow_factory() as uow:
            if not uow.employees.find_by_employee_id(employee_id):
                raise EmployeeNotFoundError("Employee not found")
            if uow.structures.get_active_for_employee(employee_id):
                raise ConflictError("Active salary structure already exists for this employee")

            structure_id = uow.structures.create(
                employee_id=employee_id,
                components=components,
                effective_from=effective_from,
                actor=actor,
            )
            structure = uow.structures.get_by_id(structure_id)
            if not structure:
                raise NotFoundError("Salary structure not found after insert")

        logger.info("salary structure created id=%s employee=%s actor=%s", structure_id, employee_id, actor)
        return structure

    def get_by_id(self, structure_id: int) -> SalaryStructure:
        with self._uow_factory() as uow:
            structure = uow.structures.get_by_id(int(structure_id))
        if not structure:
            raise NotFoundError("Salary structure not found")
        return structure

    def get_active_for_employee(self, employee_id: str) -> SalaryStructure:
        employee_id = require_non_empty(employee_id, "Employee ID")
        with self._uow_factory() as uow:
            structure = uow.structures.get_active_for_employee(employee_id)
        if not structure:
            raise SalaryStructureNotFoundError("Salary structure not found for this employee")
        return structure

    def history(self, employee_id: str, *, page=None, limit=None) -> Page[SalaryStructure]:
        employee_id = require_non_empty(employee_id, "Employee ID")
        page_num, limit_num = parse_pagination(page, limit, default_limit=10)
        with self._uow_factory() as uow:
            if not uow.employees.find_by_employee_id(employee_id):
                raise EmployeeNotFoundError("Employee not found")
            total = uow.structures.count_history(employee_id)
            items = uow.structures.list_history(employee_id, limit=limit_num, offset=(page_num - 1) * limit_num)
        return Page(items=list(items), page=page_num, limit=limit_num, total=total)

    def list(
        self,
        *,
        active_only: bool = True,
        search: Optional[str] = None,
        page=None,
        limit=None,
    ) -> Page[SalaryStructure]:
        page_num, limit_num = parse_pagination(page, limit)
        search = (search or "").strip() or None
        with self._uow_factory() as uow:
            total = uow.structures.count(active_only=active_only, search=search)
            items = uow.structures.list(
                active_only=active_only,
                search=search,
                limit=limit_num,
                offset=(page_num - 1) * limit_num,
            )
        return Page(items=list(items), page=page_num, limit=limit_num, total=total)

    def update(self, structure_id: int, payload: Mapping[str, Any], *, actor: str) -> SalaryStructure:
        """Edit amounts or ``effectiveFrom`` of a version in place.

        ``employeeId`` and the interval end are not editable here; closing a
        version goes through ``deactivate``.
        """

        actor = require_non_empty(actor, "Actor")
        with self._uow_factory() as uow:
            current = uow.structures.get_by_id(int(structure_id), for_update=True)
            if not current:
                raise NotFoundError("Salary structure not found")

            components = SalaryComponents.from_payload(payload, base=current.components)
            if components.basic_salary <= 0:
                raise ValidationError("Basic salary must be greater than 0")
            effective_from = (
                self._effective_date(payload["effectiveFrom"]) if payload.get("effectiveFrom") else current.effective_from
            )
            if current.effective_to and effective_from > current.effective_to:
                raise ValidationError("effectiveFrom cannot be after effectiveTo")

            uow.structures.update(current.structure_id, components=components, effective_from=effective_from, actor=actor)
            updated = uow.structures.get_by_id(current.structure_id)
            if not updated:
                raise NotFoundError("Salary structure not found after update")

        changed = [f for f in COMPONENT_FIELDS if getattr(current.components, f) != getattr(components, f)]
        logger.info("salary structure updated id=%s fields=%s actor=%s", structure_id, ",".join(changed) or "-", actor)
        return updated

    def deactivate(self, structure_id: int, *, actor: str) -> SalaryStructure:
        actor = require_non_empty(actor, "Actor")
        with self._uow_factory() as uow:
            current = uow.structures.get_by_id(int(structure_id), for_update=True)
            if not current:
                raise NotFoundError("Salary structure not found")
            if not current.is_active:
                raise ConflictError("Salary structure is already inactive")

            effective_to = max(self._clock().date(), current.effective_from)
            uow.structures.close(current.structure_id, effective_to=effective_to, actor=actor)
            updated = uow.structures.get_by_id(current.structure_id)
            if not updated:
                raise NotFoundError("Salary structure not found after update")

        logger.info("salary structure deactivated id=%s employee=%s actor=%s", structure_id, current.employee_id, actor)
        return updated

    def delete(self, structure_id: int, *, actor: str) -> None:
        with self._uow_factory() as uow:
            if not uow.structures.delete(int(structure_id)):
                raise NotFoundError("Salary structure not found")
        logger.info("salary structure deleted id=%s actor=%s", structure_id, actor)

    def summary(self) -> dict:
        with self._uow_factory() as uow:
            active = list(uow.structures.list_active())
            total_employees = uow.employees.count_active()

        active_count = len(active)
        without = max(0, total_employees - active_count)
        total_basic = sum(s.components.basic_salary for s in active)
        total_allowances = sum(s.components.total_allowances for s in active)
        totals = {
            "totalBasic": total_basic,
            "totalHRA": sum(s.components.hra for s in active),
            "totalDA": sum(s.components.da for s in active),
            "totalAllowances": total_allowances,
            "totalDeductions": sum(s.components.total_deductions for s in active),
            "totalCTC": round(total_basic + total_allowances),
        }

        def pct(part: int) -> str:
            return f"{part / total_employees * 100:.1f}" if total_employees > 0 else "0"

        return {
            "activeStructures": active_count,
            "totalEmployees": total_employees,
            "employeesWithoutStructure": without,
            "avgBasicSalary": round(total_basic / active_count) if active_count else 0,
            "totals": totals,
            "percentages": {"withStructure": pct(active_count), "withoutStructure": pct(without)},
        }

    def breakdown(self, employee_id: str) -> dict:
        employee_id = require_non_empty(employee_id, "Employee ID")
        with self._uow_factory() as uow:
            structure = uow.structures.get_active_for_employee(employee_id)
            if not structure:
                raise SalaryStructureNotFoundError("Active salary structure not found for this employee")
            employee = uow.employees.find_by_employee_id(employee_id)
            if not employee:
                raise EmployeeNotFoundError("Employee not found")

        return {
            "employee": {**employee.to_summary(), "salary": employee.salary},
            "salaryStructure": structure.to_dict(),
            "breakdown": self._calculator.breakdown(structure.components),
        }

    def employees_without_structure(self, *, search: Optional[str] = None, page=None, limit=None) -> Page[Employee]:
        page_num, limit_num = parse_pagination(page, limit)
        search = (search or "").strip() or None
        with self._uow_factory() as uow:
            total = uow.employees.count_active_without_structure(search=search)
            items = uow.employees.list_active_without_structure(
                search=search,
                limit=limit_num,
                offset=(page_num - 1) * limit_num,
            )
        return Page(items=list(items), page=page_num, limit=limit_num, total=total)
