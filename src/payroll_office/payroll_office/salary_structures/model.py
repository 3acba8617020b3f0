from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.validators import require_non_negative

ALLOWANCE_FIELDS = (
    "hra",
    "da",
    "special_allowance",
    "conveyance",
    "medical_allowance",
    "other_allowances",
    "leave_encashment",
    "arrears",
)

DEDUCTION_FIELDS = (
    "provident_fund",
    "professional_tax",
    "income_tax",
    "other_deductions",
    "esic",
    "advance",
    "mlwf",
)

COMPONENT_FIELDS = ("basic_salary",) + ALLOWANCE_FIELDS + DEDUCTION_FIELDS

# snake_case field -> camelCase JSON key
JSON_KEYS = {
    "basic_salary": "basicSalary",
    "hra": "hra",
    "da": "da",
    "special_allowance": "specialAllowance",
    "conveyance": "conveyance",
    "medical_allowance": "medicalAllowance",
    "other_allowances": "otherAllowances",
    "leave_encashment": "leaveEncashment",
    "arrears": "arrears",
    "provident_fund": "providentFund",
    "professional_tax": "professionalTax",
    "income_tax": "incomeTax",
    "other_deductions": "otherDeductions",
    "esic": "esic",
    "advance": "advance",
    "mlwf": "mlwf",
}


@dataclass(frozen=True)
class SalaryComponents:
    """Compensation template values (all non-negative amounts per month)."""

    basic_salary: float
    hra: float = 0.0
    da: float = 0.0
    special_allowance: float = 0.0
    conveyance: float = 0.0
    medical_allowance: float = 0.0
    other_allowances: float = 0.0
    leave_encashment: float = 0.0
    arrears: float = 0.0
    provident_fund: float = 0.0
    professional_tax: float = 0.0
    income_tax: float = 0.0
    other_deductions: float = 0.0
    esic: float = 0.0
    advance: float = 0.0
    mlwf: float = 0.0

    @property
    def total_allowances(self) -> float:
        return (
            self.hra
            + self.da
            + self.special_allowance
            + self.conveyance
            + self.medical_allowance
            + self.other_allowances
            + self.leave_encashment
            + self.arrears
        )

    @property
    def total_deductions(self) -> float:
        return (
            self.provident_fund
            + self.professional_tax
            + self.income_tax
            + self.other_deductions
            + self.esic
            + self.advance
            + self.mlwf
        )

    def as_dict(self) -> dict[str, float]:
        return {f.name: float(getattr(self, f.name)) for f in fields(SalaryComponents)}

    def to_json(self) -> dict[str, float]:
        return {JSON_KEYS[k]: v for k, v in self.as_dict().items()}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, base: Optional["SalaryComponents"] = None) -> "SalaryComponents":
        """Read camelCase amounts; fields absent from ``payload`` keep ``base`` values (or 0)."""

        start = base or cls(basic_salary=0.0)
        changes = {}
        for name in COMPONENT_FIELDS:
            key = JSON_KEYS[name]
            if key in payload and payload[key] not in (None, ""):
                changes[name] = require_non_negative(payload[key], key)
        return replace(start, **changes)


@dataclass(frozen=True)
class SalaryStructure:
    """One version of an employee's compensation template.

    A version is active while its interval is open (``effective_to`` is None).
    At most one open version exists per employee.
    """

    structure_id: int
    employee_id: str
    components: SalaryComponents
    effective_from: date
    effective_to: Optional[date] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.effective_to is None

    @property
    def basic_salary(self) -> float:
        return self.components.basic_salary

    def to_dict(self) -> dict:
        out = {
            "id": self.structure_id,
            "employeeId": self.employee_id,
            **self.components.to_json(),
            "totalAllowances": self.components.total_allowances,
            "totalDeductions": self.components.total_deductions,
            "effectiveFrom": self.effective_from.isoformat(),
            "effectiveTo": self.effective_to.isoformat() if self.effective_to else None,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        return out
