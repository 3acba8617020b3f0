from __future__ import annotations

from ...salary_structures.model import SalaryComponents
from ..attendance import AttendanceInput
from .base import PayrollCalculation, PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: prorate basic by attendance, add allowances, subtract deductions.

    Absences can reduce basic to 0 but never below it, and the net figure is
    never negative.
    """

    def calculate(self, components: SalaryComponents, attendance: AttendanceInput) -> PayrollCalculation:
        basic = components.basic_salary or 0.0
        twd = attendance.total_working_days

        daily_rate = basic / twd if twd > 0 else 0.0
        half_day_rate = daily_rate / 2

        earned_basic = (attendance.present_days * daily_rate) + (attendance.half_days * half_day_rate)
        salary_loss = (attendance.absent_days * daily_rate) + (attendance.leaves * daily_rate)
        net_basic = max(0.0, earned_basic - salary_loss)

        total_allowances = components.total_allowances
        total_deductions = components.total_deductions
        net_salary = max(0.0, net_basic + total_allowances - total_deductions)

        return PayrollCalculation(
            daily_rate=daily_rate,
            half_day_rate=half_day_rate,
            earned_basic=earned_basic,
            salary_loss=salary_loss,
            net_basic=net_basic,
            total_allowances=total_allowances,
            total_deductions=total_deductions,
            net_salary=net_salary,
        )
