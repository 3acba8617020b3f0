from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...employees.model import Employee
from ...salary_structures.model import ALLOWANCE_FIELDS, DEDUCTION_FIELDS, JSON_KEYS, SalaryComponents, SalaryStructure
from ..attendance import AttendanceInput
from ..model import NewPayroll


@dataclass(frozen=True)
class PayrollCalculation:
    daily_rate: float
    half_day_rate: float
    earned_basic: float
    salary_loss: float
    net_basic: float
    total_allowances: float
    total_deductions: float
    net_salary: float

    def to_dict(self) -> dict:
        return {
            "dailyRate": self.daily_rate,
            "halfDayRate": self.half_day_rate,
            "earnedBasicSalary": self.earned_basic,
            "salaryLoss": self.salary_loss,
            "netBasicSalary": self.net_basic,
            "totalAllowances": self.total_allowances,
            "totalDeductions": self.total_deductions,
            "netSalary": self.net_salary,
        }


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, components: SalaryComponents, attendance: AttendanceInput) -> PayrollCalculation:
        raise NotImplementedError

    def build_payroll(
        self,
        *,
        employee: Employee,
        structure: SalaryStructure,
        month: str,
        attendance: AttendanceInput,
        actor: str,
    ) -> tuple[NewPayroll, PayrollCalculation]:
        """Compute and assemble an unsaved payroll record. No I/O."""

        calc = self.calculate(structure.components, attendance)
        record = NewPayroll(
            employee_id=employee.employee_id,
            month=month,
            basic_salary=structure.components.basic_salary,
            allowances=calc.total_allowances,
            deductions=calc.total_deductions,
            net_salary=calc.net_salary,
            present_days=attendance.present_days,
            absent_days=attendance.absent_days,
            half_days=attendance.half_days,
            leaves=attendance.leaves,
            total_working_days=attendance.total_working_days,
            components=structure.components.to_json(),
            employee_details=employee.snapshot(),
            created_by=actor,
        )
        return record, calc

    def breakdown(self, components: SalaryComponents) -> dict:
        """Monthly earnings/deductions split of a structure, before attendance."""

        values = components.to_json()
        total_allowances = components.total_allowances
        total_deductions = components.total_deductions
        gross = components.basic_salary + total_allowances
        net = gross - total_deductions

        def share(part: float) -> str:
            return f"{part / gross * 100:.2f}" if part > 0 and gross > 0 else "0"

        earnings = {JSON_KEYS[f]: values[JSON_KEYS[f]] for f in ("basic_salary",) + ALLOWANCE_FIELDS}
        earnings["total"] = total_allowances
        deductions = {JSON_KEYS[f]: values[JSON_KEYS[f]] for f in DEDUCTION_FIELDS}
        deductions["total"] = total_deductions

        return {
            "earnings": earnings,
            "deductions": deductions,
            "summary": {"grossSalary": gross, "totalDeductions": total_deductions, "netSalary": net},
            "percentages": {
                "basicPercentage": share(components.basic_salary),
                "allowancesPercentage": share(total_allowances),
                "deductionsPercentage": share(total_deductions),
            },
        }
