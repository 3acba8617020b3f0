from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import PaymentStatus, ProcessingStatus
from ..core.exceptions import ConflictError
from ..database.mysql_base import fetchall, fetchone, from_json, is_duplicate_key, to_json
from ..employees.model import EmployeeDetails
from .model import NewPayroll, Payroll, PayrollFilters
from .repository import PayrollRepository

EMPLOYEE_MONTH_KEY = "uq_payrolls_employee_month"

# API sort key -> column
SORTABLE_COLUMNS = {
    "created_at": "created_at",
    "month": "month",
    "net_salary": "net_salary",
    "employee_id": "employee_id",
    "payment_status": "payment_status",
}

_COLUMNS = """
    p.payroll_id, p.employee_id, p.month, p.basic_salary, p.allowances, p.deductions,
    p.net_salary, p.status, p.payment_status, p.paid_amount, p.payment_date,
    p.present_days, p.absent_days, p.half_days, p.leaves, p.total_working_days,
    p.components, p.employee_details, p.notes,
    p.created_by, p.updated_by, p.created_at, p.updated_at
"""


def _to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=str(r["employee_id"]),
        month=r["month"],
        basic_salary=float(r["basic_salary"]),
        allowances=float(r["allowances"]),
        deductions=float(r["deductions"]),
        net_salary=float(r["net_salary"]),
        status=ProcessingStatus(r["status"]),
        payment_status=PaymentStatus(r["payment_status"]),
        paid_amount=float(r["paid_amount"]),
        payment_date=r.get("payment_date"),
        present_days=float(r["present_days"]),
        absent_days=float(r["absent_days"]),
        half_days=float(r["half_days"]),
        leaves=float(r["leaves"]),
        total_working_days=float(r["total_working_days"]),
        components=from_json(r.get("components")),
        employee_details=EmployeeDetails.from_dict(from_json(r.get("employee_details"))),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, cur):
        self._cur = cur

    def insert(self, record: NewPayroll) -> int:
        try:
            self._cur.execute(
                """
                INSERT INTO payrolls(
                    employee_id, month, basic_salary, allowances, deductions, net_salary,
                    status, payment_status, paid_amount,
                    present_days, absent_days, half_days, leaves, total_working_days,
                    components, employee_details, created_by, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.employee_id,
                    record.month,
                    record.basic_salary,
                    record.allowances,
                    record.deductions,
                    record.net_salary,
                    record.status.value,
                    record.payment_status.value,
                    record.paid_amount,
                    record.present_days,
                    record.absent_days,
                    record.half_days,
                    record.leaves,
                    record.total_working_days,
                    to_json(record.components),
                    to_json(record.employee_details.to_dict()),
                    record.created_by,
                    record.created_by,
                ),
            )
        except mysql.connector.errors.IntegrityError as e:
            if is_duplicate_key(e, EMPLOYEE_MONTH_KEY):
                raise ConflictError("Payroll already exists for this month") from e
            raise
        return int(self._cur.lastrowid)

    def get_by_id(self, payroll_id: int, *, for_update: bool = False) -> Optional[Payroll]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(f"SELECT {_COLUMNS} FROM payrolls p WHERE p.payroll_id=%s{lock}", (int(payroll_id),))
        r = fetchone(self._cur)
        return _to_payroll(r) if r else None

    def get_by_employee_and_month(self, employee_id: str, month: str) -> Optional[Payroll]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM payrolls p WHERE p.employee_id=%s AND p.month=%s",
            (employee_id, month),
        )
        r = fetchone(self._cur)
        return _to_payroll(r) if r else None

    def _where(self, filters: PayrollFilters) -> tuple[str, list[object]]:
        clauses = ["1=1"]
        params: list[object] = []

        if filters.month:
            clauses.append("p.month=%s")
            params.append(filters.month)
        if filters.status is not None:
            clauses.append("p.status=%s")
            params.append(filters.status.value)
        if filters.payment_status is not None:
            clauses.append("p.payment_status=%s")
            params.append(filters.payment_status.value)
        if filters.department:
            clauses.append("e.department LIKE %s")
            params.append(f"%{filters.department}%")
        if filters.search:
            clauses.append("(e.name LIKE %s OR p.employee_id LIKE %s)")
            params.extend([f"%{filters.search}%", f"%{filters.search}%"])

        return " AND ".join(clauses), params

    def list(
        self,
        filters: PayrollFilters,
        *,
        limit: int,
        offset: int,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> Sequence[Payroll]:
        where, params = self._where(filters)
        column = SORTABLE_COLUMNS.get(sort_by, "created_at")
        direction = "DESC" if descending else "ASC"
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM payrolls p
            LEFT JOIN employees e ON e.employee_id = p.employee_id
            WHERE {where}
            ORDER BY p.{column} {direction}, p.payroll_id {direction}
            LIMIT %s OFFSET %s
            """,
            tuple(params + [int(limit), int(offset)]),
        )
        return [_to_payroll(r) for r in fetchall(self._cur)]

    def count(self, filters: PayrollFilters) -> int:
        where, params = self._where(filters)
        self._cur.execute(
            f"""
            SELECT COUNT(*) AS n
            FROM payrolls p
            LEFT JOIN employees e ON e.employee_id = p.employee_id
            WHERE {where}
            """,
            tuple(params),
        )
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def list_for_summary(self, *, month: Optional[str] = None) -> Sequence[Payroll]:
        if month:
            self._cur.execute(f"SELECT {_COLUMNS} FROM payrolls p WHERE p.month=%s", (month,))
        else:
            self._cur.execute(f"SELECT {_COLUMNS} FROM payrolls p")
        return [_to_payroll(r) for r in fetchall(self._cur)]

    def update_payment(
        self,
        payroll_id: int,
        *,
        payment_status: PaymentStatus,
        paid_amount: float,
        payment_date: Optional[datetime],
        notes: Optional[str],
        actor: str,
    ) -> bool:
        self._cur.execute(
            """
            UPDATE payrolls
            SET payment_status=%s, paid_amount=%s, payment_date=%s, notes=%s, updated_by=%s
            WHERE payroll_id=%s
            """,
            (payment_status.value, paid_amount, payment_date, notes, actor, int(payroll_id)),
        )
        return self._cur.rowcount > 0

    def delete(self, payroll_id: int) -> bool:
        self._cur.execute("DELETE FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
        return self._cur.rowcount > 0
