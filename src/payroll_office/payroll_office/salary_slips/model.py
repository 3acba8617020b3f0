from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class NewSalarySlip:
    payroll_id: int
    employee_id: str
    month: str
    slip_number: str
    basic_salary: float
    allowances: float
    deductions: float
    net_salary: float
    present_days: float
    absent_days: float
    half_days: float
    leaves: float
    generated_at: datetime
    created_by: str


@dataclass(frozen=True)
class SalarySlip:
    """Immutable-money snapshot of a payroll, issued once per payroll."""

    slip_id: int
    payroll_id: int
    employee_id: str
    month: str
    slip_number: str
    basic_salary: float
    allowances: float
    deductions: float
    net_salary: float
    present_days: float
    absent_days: float
    half_days: float
    leaves: float
    generated_at: datetime
    download_url: Optional[str] = None
    notes: Optional[str] = None
    email_sent: bool = False
    email_sent_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.slip_id,
            "payrollId": self.payroll_id,
            "employeeId": self.employee_id,
            "month": self.month,
            "slipNumber": self.slip_number,
            "basicSalary": self.basic_salary,
            "allowances": self.allowances,
            "deductions": self.deductions,
            "netSalary": self.net_salary,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "halfDays": self.half_days,
            "leaves": self.leaves,
            "generatedAt": self.generated_at.isoformat() if self.generated_at else None,
            "downloadUrl": self.download_url,
            "notes": self.notes,
            "emailSent": self.email_sent,
            "emailSentAt": self.email_sent_at.isoformat() if self.email_sent_at else None,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class SlipFilters:
    month: Optional[str] = None
    employee_id: Optional[str] = None
    email_sent: Optional[bool] = None
