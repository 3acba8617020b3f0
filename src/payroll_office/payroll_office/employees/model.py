from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class EmployeeDetails:
    """Bank/identity snapshot copied onto a payroll record at processing time.

    Later edits to the employee profile never reach an existing snapshot.
    """

    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_branch: Optional[str] = None
    bank_name: Optional[str] = None
    aadhar_number: Optional[str] = None
    pan_number: Optional[str] = None
    esic_number: Optional[str] = None
    uan_number: Optional[str] = None
    permanent_address: Optional[str] = None
    local_address: Optional[str] = None
    salary: Optional[float] = None
    monthly_salary: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "accountNumber": self.account_number,
            "ifscCode": self.ifsc_code,
            "bankBranch": self.bank_branch,
            "bankName": self.bank_name,
            "aadharNumber": self.aadhar_number,
            "panNumber": self.pan_number,
            "esicNumber": self.esic_number,
            "uanNumber": self.uan_number,
            "permanentAddress": self.permanent_address,
            "localAddress": self.local_address,
            "salary": self.salary,
            "monthlySalary": self.monthly_salary,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EmployeeDetails":
        return cls(
            account_number=data.get("accountNumber"),
            ifsc_code=data.get("ifscCode"),
            bank_branch=data.get("bankBranch"),
            bank_name=data.get("bankName"),
            aadhar_number=data.get("aadharNumber"),
            pan_number=data.get("panNumber"),
            esic_number=data.get("esicNumber"),
            uan_number=data.get("uanNumber"),
            permanent_address=data.get("permanentAddress"),
            local_address=data.get("localAddress"),
            salary=data.get("salary"),
            monthly_salary=data.get("monthlySalary"),
        )


@dataclass(frozen=True)
class Employee:
    """Read-only view of the employee directory (owned by the HR module)."""

    employee_id: str
    name: str
    department: Optional[str] = None
    position: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    salary: Optional[float] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_branch: Optional[str] = None
    bank_name: Optional[str] = None
    aadhar_number: Optional[str] = None
    pan_number: Optional[str] = None
    esic_number: Optional[str] = None
    uan_number: Optional[str] = None
    permanent_address: Optional[str] = None
    local_address: Optional[str] = None

    def snapshot(self) -> EmployeeDetails:
        return EmployeeDetails(
            account_number=self.account_number,
            ifsc_code=(self.ifsc_code or "").upper() or None,
            bank_branch=self.bank_branch,
            bank_name=self.bank_name,
            aadhar_number=self.aadhar_number,
            pan_number=(self.pan_number or "").upper() or None,
            esic_number=self.esic_number,
            uan_number=self.uan_number,
            permanent_address=self.permanent_address,
            local_address=self.local_address,
            salary=self.salary,
            monthly_salary=self.salary,
        )

    def to_summary(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "department": self.department,
            "position": self.position,
            "status": self.status.value,
        }
