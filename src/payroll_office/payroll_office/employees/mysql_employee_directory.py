from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus
from ..database.mysql_base import fetchall, fetchone
from .model import Employee
from .repository import EmployeeDirectory

_COLUMNS = """
    employee_id, name, department, position, status, salary,
    account_number, ifsc_code, bank_branch, bank_name,
    aadhar_number, pan_number, esic_number, uan_number,
    permanent_address, local_address
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=str(r["employee_id"]),
        name=r["name"],
        department=r.get("department"),
        position=r.get("position"),
        status=EmployeeStatus(r.get("status") or EmployeeStatus.ACTIVE.value),
        salary=float(r["salary"]) if r.get("salary") is not None else None,
        account_number=r.get("account_number"),
        ifsc_code=r.get("ifsc_code"),
        bank_branch=r.get("bank_branch"),
        bank_name=r.get("bank_name"),
        aadhar_number=r.get("aadhar_number"),
        pan_number=r.get("pan_number"),
        esic_number=r.get("esic_number"),
        uan_number=r.get("uan_number"),
        permanent_address=r.get("permanent_address"),
        local_address=r.get("local_address"),
    )


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, cur):
        self._cur = cur

    def find_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
        r = fetchone(self._cur)
        return _to_employee(r) if r else None

    def count_active(self) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM employees WHERE status=%s", (EmployeeStatus.ACTIVE.value,))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def _without_structure_where(self, search: Optional[str]) -> tuple[str, list[object]]:
        clauses = [
            "e.status=%s",
            "NOT EXISTS (SELECT 1 FROM salary_structures s WHERE s.employee_id=e.employee_id AND s.effective_to IS NULL)",
        ]
        params: list[object] = [EmployeeStatus.ACTIVE.value]
        if search:
            like = f"%{search}%"
            clauses.append("(e.name LIKE %s OR e.employee_id LIKE %s OR e.department LIKE %s OR e.position LIKE %s)")
            params.extend([like, like, like, like])
        return " AND ".join(clauses), params

    def list_active_without_structure(self, *, search: Optional[str] = None, limit: int = 100, offset: int = 0) -> Sequence[Employee]:
        where, params = self._without_structure_where(search)
        cols = ", ".join(f"e.{c.strip()}" for c in _COLUMNS.split(","))
        self._cur.execute(
            f"""
            SELECT {cols}
            FROM employees e
            WHERE {where}
            ORDER BY e.name ASC
            LIMIT %s OFFSET %s
            """,
            tuple(params + [int(limit), int(offset)]),
        )
        return [_to_employee(r) for r in fetchall(self._cur)]

    def count_active_without_structure(self, *, search: Optional[str] = None) -> int:
        where, params = self._without_structure_where(search)
        self._cur.execute(f"SELECT COUNT(*) AS n FROM employees e WHERE {where}", tuple(params))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0
