from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.mysql_base import fetchall, fetchone, is_duplicate_key
from .model import COMPONENT_FIELDS, SalaryComponents, SalaryStructure
from .repository import SalaryStructureRepository

OPEN_STRUCTURE_KEY = "uq_salary_structures_open"

_COLUMNS = ", ".join(
    ("structure_id", "employee_id")
    + COMPONENT_FIELDS
    + ("effective_from", "effective_to", "created_by", "updated_by", "created_at", "updated_at")
)


def _to_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        structure_id=int(r["structure_id"]),
        employee_id=str(r["employee_id"]),
        components=SalaryComponents(**{f: float(r.get(f) or 0) for f in COMPONENT_FIELDS}),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, cur):
        self._cur = cur

    def create(self, *, employee_id: str, components: SalaryComponents, effective_from: date, actor: str) -> int:
        values = components.as_dict()
        cols = ", ".join(("employee_id",) + COMPONENT_FIELDS + ("effective_from", "created_by", "updated_by"))
        placeholders = ",".join(["%s"] * (len(COMPONENT_FIELDS) + 4))
        try:
            self._cur.execute(
                f"INSERT INTO salary_structures({cols}) VALUES({placeholders})",
                (employee_id, *[values[f] for f in COMPONENT_FIELDS], effective_from, actor, actor),
            )
        except mysql.connector.errors.IntegrityError as e:
            if is_duplicate_key(e, OPEN_STRUCTURE_KEY):
                raise ConflictError("Active salary structure already exists for this employee") from e
            raise
        return int(self._cur.lastrowid)

    def get_by_id(self, structure_id: int, *, for_update: bool = False) -> Optional[SalaryStructure]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE structure_id=%s{lock}", (int(structure_id),))
        r = fetchone(self._cur)
        return _to_structure(r) if r else None

    def get_active_for_employee(self, employee_id: str) -> Optional[SalaryStructure]:
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM salary_structures WHERE employee_id=%s AND effective_to IS NULL",
            (employee_id,),
        )
        r = fetchone(self._cur)
        return _to_structure(r) if r else None

    def list_history(self, employee_id: str, *, limit: int, offset: int) -> Sequence[SalaryStructure]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS} FROM salary_structures
            WHERE employee_id=%s
            ORDER BY effective_from DESC, updated_at DESC
            LIMIT %s OFFSET %s
            """,
            (employee_id, int(limit), int(offset)),
        )
        return [_to_structure(r) for r in fetchall(self._cur)]

    def count_history(self, employee_id: str) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM salary_structures WHERE employee_id=%s", (employee_id,))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def _where(self, *, active_only: bool, search: Optional[str]) -> tuple[str, list[object]]:
        clauses = ["1=1"]
        params: list[object] = []
        if active_only:
            clauses.append("s.effective_to IS NULL")
        if search:
            like = f"%{search}%"
            clauses.append("(s.employee_id LIKE %s OR e.name LIKE %s OR e.department LIKE %s)")
            params.extend([like, like, like])
        return " AND ".join(clauses), params

    def list(self, *, active_only: bool, search: Optional[str], limit: int, offset: int) -> Sequence[SalaryStructure]:
        where, params = self._where(active_only=active_only, search=search)
        cols = ", ".join(f"s.{c.strip()}" for c in _COLUMNS.split(","))
        self._cur.execute(
            f"""
            SELECT {cols}
            FROM salary_structures s
            LEFT JOIN employees e ON e.employee_id = s.employee_id
            WHERE {where}
            ORDER BY s.created_at DESC, s.structure_id DESC
            LIMIT %s OFFSET %s
            """,
            tuple(params + [int(limit), int(offset)]),
        )
        return [_to_structure(r) for r in fetchall(self._cur)]

    def count(self, *, active_only: bool, search: Optional[str]) -> int:
        where, params = self._where(active_only=active_only, search=search)
        self._cur.execute(
            f"""
            SELECT COUNT(*) AS n
            FROM salary_structures s
            LEFT JOIN employees e ON e.employee_id = s.employee_id
            WHERE {where}
            """,
            tuple(params),
        )
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def update(self, structure_id: int, *, components: SalaryComponents, effective_from: date, actor: str) -> bool:
        values = components.as_dict()
        assignments = ", ".join(f"{f}=%s" for f in COMPONENT_FIELDS)
        self._cur.execute(
            f"""
            UPDATE salary_structures
            SET {assignments}, effective_from=%s, updated_by=%s
            WHERE structure_id=%s
            """,
            (*[values[f] for f in COMPONENT_FIELDS], effective_from, actor, int(structure_id)),
        )
        return self._cur.rowcount > 0

    def close(self, structure_id: int, *, effective_to: date, actor: str) -> bool:
        self._cur.execute(
            """
            UPDATE salary_structures
            SET effective_to=%s, updated_by=%s
            WHERE structure_id=%s AND effective_to IS NULL
            """,
            (effective_to, actor, int(structure_id)),
        )
        return self._cur.rowcount > 0

    def delete(self, structure_id: int) -> bool:
        self._cur.execute("DELETE FROM salary_structures WHERE structure_id=%s", (int(structure_id),))
        return self._cur.rowcount > 0

    def list_active(self) -> Sequence[SalaryStructure]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM salary_structures WHERE effective_to IS NULL")
        return [_to_structure(r) for r in fetchall(self._cur)]
