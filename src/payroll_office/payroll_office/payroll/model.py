from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import PaymentStatus, ProcessingStatus
from ..employees.model import EmployeeDetails


@dataclass(frozen=True)
class NewPayroll:
    """A computed payroll figure that has not been persisted yet."""

    employee_id: str
    month: str
    basic_salary: float
    allowances: float
    deductions: float
    net_salary: float
    present_days: float
    absent_days: float
    half_days: float
    leaves: float
    total_working_days: float
    components: dict[str, float]
    employee_details: EmployeeDetails
    created_by: str
    status: ProcessingStatus = ProcessingStatus.PROCESSED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    paid_amount: float = 0.0


@dataclass(frozen=True)
class Payroll:
    """The system-of-record fact: one row per (employee_id, month)."""

    payroll_id: int
    employee_id: str
    month: str
    basic_salary: float
    allowances: float
    deductions: float
    net_salary: float
    status: ProcessingStatus
    payment_status: PaymentStatus
    paid_amount: float
    present_days: float
    absent_days: float
    half_days: float
    leaves: float
    total_working_days: float
    employee_details: EmployeeDetails
    components: dict[str, float] = field(default_factory=dict)
    payment_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def outstanding_amount(self) -> float:
        return self.net_salary - self.paid_amount

    def to_dict(self) -> dict:
        return {
            "id": self.payroll_id,
            "employeeId": self.employee_id,
            "month": self.month,
            "basicSalary": self.basic_salary,
            "allowances": self.allowances,
            "deductions": self.deductions,
            "netSalary": self.net_salary,
            "status": self.status.value,
            "paymentStatus": self.payment_status.value,
            "paidAmount": self.paid_amount,
            "paymentDate": self.payment_date.isoformat() if self.payment_date else None,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "halfDays": self.half_days,
            "leaves": self.leaves,
            "totalWorkingDays": self.total_working_days,
            "components": dict(self.components),
            "employeeDetails": self.employee_details.to_dict(),
            "notes": self.notes,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class PayrollFilters:
    month: Optional[str] = None
    status: Optional[ProcessingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    department: Optional[str] = None
    search: Optional[str] = None
