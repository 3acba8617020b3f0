from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError, SlipNumberTakenError
from ..database.mysql_base import fetchall, fetchone, is_duplicate_key
from .model import NewSalarySlip, SalarySlip, SlipFilters
from .repository import SalarySlipRepository

PAYROLL_KEY = "uq_salary_slips_payroll"
SLIP_NUMBER_KEY = "uq_salary_slips_number"

_COLUMNS = """
    slip_id, payroll_id, employee_id, month, slip_number,
    basic_salary, allowances, deductions, net_salary,
    present_days, absent_days, half_days, leaves,
    generated_at, download_url, notes, email_sent, email_sent_at,
    created_by, updated_by, created_at, updated_at
"""


def _to_slip(r: dict) -> SalarySlip:
    return SalarySlip(
        slip_id=int(r["slip_id"]),
        payroll_id=int(r["payroll_id"]),
        employee_id=str(r["employee_id"]),
        month=r["month"],
        slip_number=r["slip_number"],
        basic_salary=float(r["basic_salary"]),
        allowances=float(r["allowances"]),
        deductions=float(r["deductions"]),
        net_salary=float(r["net_salary"]),
        present_days=float(r["present_days"]),
        absent_days=float(r["absent_days"]),
        half_days=float(r["half_days"]),
        leaves=float(r["leaves"]),
        generated_at=r["generated_at"],
        download_url=r.get("download_url"),
        notes=r.get("notes"),
        email_sent=bool(r.get("email_sent")),
        email_sent_at=r.get("email_sent_at"),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLSalarySlipRepository(SalarySlipRepository):
    def __init__(self, cur):
        self._cur = cur

    def insert(self, slip: NewSalarySlip) -> int:
        try:
            self._cur.execute(
                """
                INSERT INTO salary_slips(
                    payroll_id, employee_id, month, slip_number,
                    basic_salary, allowances, deductions, net_salary,
                    present_days, absent_days, half_days, leaves,
                    generated_at, created_by, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    slip.payroll_id,
                    slip.employee_id,
                    slip.month,
                    slip.slip_number,
                    slip.basic_salary,
                    slip.allowances,
                    slip.deductions,
                    slip.net_salary,
                    slip.present_days,
                    slip.absent_days,
                    slip.half_days,
                    slip.leaves,
                    slip.generated_at,
                    slip.created_by,
                    slip.created_by,
                ),
            )
        except mysql.connector.errors.IntegrityError as e:
            if is_duplicate_key(e, PAYROLL_KEY):
                raise ConflictError("Salary slip already generated for this payroll") from e
            if is_duplicate_key(e, SLIP_NUMBER_KEY):
                raise SlipNumberTakenError(f"Slip number {slip.slip_number} is already taken") from e
            raise
        return int(self._cur.lastrowid)

    def highest_number_with_prefix(self, prefix: str) -> Optional[str]:
        # Numeric ordering so SS/.../10000 sorts after SS/.../9999.
        self._cur.execute(
            """
            SELECT slip_number
            FROM salary_slips
            WHERE slip_number LIKE %s
            ORDER BY CAST(SUBSTRING_INDEX(slip_number, '/', -1) AS UNSIGNED) DESC
            LIMIT 1
            FOR UPDATE
            """,
            (f"{prefix}%",),
        )
        r = fetchone(self._cur)
        return r["slip_number"] if r else None

    def get_by_id(self, slip_id: int) -> Optional[SalarySlip]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM salary_slips WHERE slip_id=%s", (int(slip_id),))
        r = fetchone(self._cur)
        return _to_slip(r) if r else None

    def get_by_employee_and_month(self, employee_id: str, month: str) -> Optional[SalarySlip]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM salary_slips WHERE employee_id=%s AND month=%s ORDER BY slip_id DESC LIMIT 1",
            (employee_id, month),
        )
        r = fetchone(self._cur)
        return _to_slip(r) if r else None

    def exists_for_payroll(self, payroll_id: int) -> bool:
        self._cur.execute("SELECT 1 AS ok FROM salary_slips WHERE payroll_id=%s LIMIT 1", (int(payroll_id),))
        return fetchone(self._cur) is not None

    def _where(self, filters: SlipFilters) -> tuple[str, list[object]]:
        clauses = ["1=1"]
        params: list[object] = []
        if filters.month:
            clauses.append("month=%s")
            params.append(filters.month)
        if filters.employee_id:
            clauses.append("employee_id=%s")
            params.append(filters.employee_id)
        if filters.email_sent is not None:
            clauses.append("email_sent=%s")
            params.append(1 if filters.email_sent else 0)
        return " AND ".join(clauses), params

    def list(self, filters: SlipFilters, *, limit: int, offset: int) -> Sequence[SalarySlip]:
        where, params = self._where(filters)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM salary_slips
            WHERE {where}
            ORDER BY generated_at DESC, slip_id DESC
            LIMIT %s OFFSET %s
            """,
            tuple(params + [int(limit), int(offset)]),
        )
        return [_to_slip(r) for r in fetchall(self._cur)]

    def count(self, filters: SlipFilters) -> int:
        where, params = self._where(filters)
        self._cur.execute(f"SELECT COUNT(*) AS n FROM salary_slips WHERE {where}", tuple(params))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def update_details(
        self,
        slip_id: int,
        *,
        notes: Optional[str],
        download_url: Optional[str],
        actor: str,
    ) -> bool:
        self._cur.execute(
            "UPDATE salary_slips SET notes=%s, download_url=%s, updated_by=%s WHERE slip_id=%s",
            (notes, download_url, actor, int(slip_id)),
        )
        return self._cur.rowcount > 0

    def mark_emailed(self, slip_id: int, *, sent_at: datetime, actor: str) -> bool:
        self._cur.execute(
            "UPDATE salary_slips SET email_sent=1, email_sent_at=%s, updated_by=%s WHERE slip_id=%s",
            (sent_at, actor, int(slip_id)),
        )
        return self._cur.rowcount > 0

    def delete(self, slip_id: int) -> bool:
        self._cur.execute("DELETE FROM salary_slips WHERE slip_id=%s", (int(slip_id),))
        return self._cur.rowcount > 0
