"""In-memory stand-ins for the MySQL repositories.

``InMemoryStore`` keeps all tables; every ``InMemoryUnitOfWork`` snapshots
them on enter and restores the snapshot when the block raises, so services
see the same commit/rollback behaviour as with ``db_cursor``. Unique keys
raise the same domain errors as the MySQL repositories.
"""

from __future__ import annotations

import copy
import re
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from src.payroll_office.payroll_office.core.enums import EmployeeStatus, PaymentStatus
from src.payroll_office.payroll_office.core.exceptions import ConflictError, SlipNumberTakenError
from src.payroll_office.payroll_office.employees.model import Employee
from src.payroll_office.payroll_office.payroll.model import NewPayroll, Payroll, PayrollFilters
from src.payroll_office.payroll_office.salary_slips.model import NewSalarySlip, SalarySlip, SlipFilters
from src.payroll_office.payroll_office.salary_slips.numbering import parse_sequence
from src.payroll_office.payroll_office.salary_structures.model import SalaryComponents, SalaryStructure


class InMemoryStore:
    def __init__(self):
        self.employees: dict[str, Employee] = {}
        self.structures: dict[int, SalaryStructure] = {}
        self.payrolls: dict[int, Payroll] = {}
        self.slips: dict[int, SalarySlip] = {}
        self.next_ids = {"structure": 0, "payroll": 0, "slip": 0}
        self.commits = 0
        self.rollbacks = 0
        self._tick = datetime(2024, 1, 1, 9, 0, 0)

        # Test hooks, called inside the unit of work.
        self.before_payroll_insert: Optional[Callable[[NewPayroll], None]] = None
        self.before_slip_insert: Optional[Callable[[NewSalarySlip], None]] = None

    def now(self) -> datetime:
        self._tick += timedelta(seconds=1)
        return self._tick

    def next_id(self, kind: str) -> int:
        self.next_ids[kind] += 1
        return self.next_ids[kind]

    def snapshot(self):
        return copy.deepcopy((self.employees, self.structures, self.payrolls, self.slips, self.next_ids))

    def restore(self, snap) -> None:
        self.employees, self.structures, self.payrolls, self.slips, self.next_ids = copy.deepcopy(snap)

    def add_employee(self, employee_id: str, name: str = "", **kwargs) -> Employee:
        employee = Employee(employee_id=employee_id, name=name or employee_id, **kwargs)
        self.employees[employee_id] = employee
        return employee

    def add_structure(
        self,
        employee_id: str,
        *,
        basic_salary: float,
        effective_from: date = date(2024, 1, 1),
        effective_to: Optional[date] = None,
        **components,
    ) -> SalaryStructure:
        sid = self.next_id("structure")
        now = self.now()
        structure = SalaryStructure(
            structure_id=sid,
            employee_id=employee_id,
            components=SalaryComponents(basic_salary=basic_salary, **components),
            effective_from=effective_from,
            effective_to=effective_to,
            created_by="seed",
            updated_by="seed",
            created_at=now,
            updated_at=now,
        )
        self.structures[sid] = structure
        return structure


class InMemoryEmployees:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def find_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        return self._s.employees.get(employee_id)

    def count_active(self) -> int:
        return sum(1 for e in self._s.employees.values() if e.status == EmployeeStatus.ACTIVE)

    def _without(self, search):
        open_ids = {s.employee_id for s in self._s.structures.values() if s.is_active}
        out = [
            e
            for e in self._s.employees.values()
            if e.status == EmployeeStatus.ACTIVE and e.employee_id not in open_ids
        ]
        if search:
            needle = search.lower()
            out = [e for e in out if needle in e.name.lower() or needle in e.employee_id.lower()]
        return sorted(out, key=lambda e: e.name)

    def list_active_without_structure(self, *, search=None, limit=100, offset=0):
        return self._without(search)[offset : offset + limit]

    def count_active_without_structure(self, *, search=None) -> int:
        return len(self._without(search))


class InMemoryStructures:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def create(self, *, employee_id, components, effective_from, actor) -> int:
        # uq_salary_structures_open
        if any(s.employee_id == employee_id and s.is_active for s in self._s.structures.values()):
            raise ConflictError("Active salary structure already exists for this employee")
        sid = self._s.next_id("structure")
        now = self._s.now()
        self._s.structures[sid] = SalaryStructure(
            structure_id=sid,
            employee_id=employee_id,
            components=components,
            effective_from=effective_from,
            created_by=actor,
            updated_by=actor,
            created_at=now,
            updated_at=now,
        )
        return sid

    def get_by_id(self, structure_id, *, for_update=False):
        return self._s.structures.get(int(structure_id))

    def get_active_for_employee(self, employee_id):
        for s in self._s.structures.values():
            if s.employee_id == employee_id and s.is_active:
                return s
        return None

    def _history(self, employee_id):
        items = [s for s in self._s.structures.values() if s.employee_id == employee_id]
        return sorted(items, key=lambda s: (s.effective_from, s.updated_at), reverse=True)

    def list_history(self, employee_id, *, limit, offset):
        return self._history(employee_id)[offset : offset + limit]

    def count_history(self, employee_id) -> int:
        return len(self._history(employee_id))

    def _filtered(self, active_only, search):
        items = list(self._s.structures.values())
        if active_only:
            items = [s for s in items if s.is_active]
        if search:
            needle = search.lower()
            items = [
                s
                for s in items
                if needle in s.employee_id.lower()
                or needle in (getattr(self._s.employees.get(s.employee_id), "name", "") or "").lower()
            ]
        return sorted(items, key=lambda s: s.created_at, reverse=True)

    def list(self, *, active_only, search, limit, offset):
        return self._filtered(active_only, search)[offset : offset + limit]

    def count(self, *, active_only, search) -> int:
        return len(self._filtered(active_only, search))

    def update(self, structure_id, *, components, effective_from, actor) -> bool:
        current = self._s.structures.get(int(structure_id))
        if not current:
            return False
        self._s.structures[current.structure_id] = replace(
            current, components=components, effective_from=effective_from, updated_by=actor, updated_at=self._s.now()
        )
        return True

    def close(self, structure_id, *, effective_to, actor) -> bool:
        current = self._s.structures.get(int(structure_id))
        if not current or not current.is_active:
            return False
        self._s.structures[current.structure_id] = replace(
            current, effective_to=effective_to, updated_by=actor, updated_at=self._s.now()
        )
        return True

    def delete(self, structure_id) -> bool:
        return self._s.structures.pop(int(structure_id), None) is not None

    def list_active(self):
        return [s for s in self._s.structures.values() if s.is_active]


class InMemoryPayrolls:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def insert(self, record: NewPayroll) -> int:
        if self._s.before_payroll_insert:
            self._s.before_payroll_insert(record)
        if any((p.employee_id, p.month) == (record.employee_id, record.month) for p in self._s.payrolls.values()):
            raise ConflictError("Payroll already exists for this month")
        pid = self._s.next_id("payroll")
        now = self._s.now()
        self._s.payrolls[pid] = Payroll(
            payroll_id=pid,
            employee_id=record.employee_id,
            month=record.month,
            basic_salary=record.basic_salary,
            allowances=record.allowances,
            deductions=record.deductions,
            net_salary=record.net_salary,
            status=record.status,
            payment_status=record.payment_status,
            paid_amount=record.paid_amount,
            present_days=record.present_days,
            absent_days=record.absent_days,
            half_days=record.half_days,
            leaves=record.leaves,
            total_working_days=record.total_working_days,
            employee_details=record.employee_details,
            components=dict(record.components),
            created_by=record.created_by,
            updated_by=record.created_by,
            created_at=now,
            updated_at=now,
        )
        return pid

    def get_by_id(self, payroll_id, *, for_update=False):
        return self._s.payrolls.get(int(payroll_id))

    def get_by_employee_and_month(self, employee_id, month):
        for p in self._s.payrolls.values():
            if p.employee_id == employee_id and p.month == month:
                return p
        return None

    def _filtered(self, f: PayrollFilters):
        out = []
        for p in self._s.payrolls.values():
            emp = self._s.employees.get(p.employee_id)
            if f.month and p.month != f.month:
                continue
            if f.status is not None and p.status != f.status:
                continue
            if f.payment_status is not None and p.payment_status != f.payment_status:
                continue
            if f.department and f.department.lower() not in ((emp.department if emp else "") or "").lower():
                continue
            if f.search:
                needle = f.search.lower()
                if needle not in p.employee_id.lower() and needle not in ((emp.name if emp else "") or "").lower():
                    continue
            out.append(p)
        return out

    def list(self, filters, *, limit, offset, sort_by="created_at", descending=True):
        items = sorted(
            self._filtered(filters),
            key=lambda p: (getattr(p, sort_by), p.payroll_id),
            reverse=descending,
        )
        return items[offset : offset + limit]

    def count(self, filters) -> int:
        return len(self._filtered(filters))

    def list_for_summary(self, *, month=None):
        return [p for p in self._s.payrolls.values() if not month or p.month == month]

    def update_payment(self, payroll_id, *, payment_status, paid_amount, payment_date, notes, actor) -> bool:
        current = self._s.payrolls.get(int(payroll_id))
        if not current:
            return False
        assert 0 <= paid_amount <= current.net_salary, "paid_amount out of range"
        self._s.payrolls[current.payroll_id] = replace(
            current,
            payment_status=PaymentStatus(payment_status),
            paid_amount=paid_amount,
            payment_date=payment_date,
            notes=notes,
            updated_by=actor,
            updated_at=self._s.now(),
        )
        return True

    def delete(self, payroll_id) -> bool:
        return self._s.payrolls.pop(int(payroll_id), None) is not None


class InMemorySlips:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def insert(self, slip: NewSalarySlip) -> int:
        if self._s.before_slip_insert:
            self._s.before_slip_insert(slip)
        if any(s.payroll_id == slip.payroll_id for s in self._s.slips.values()):
            raise ConflictError("Salary slip already generated for this payroll")
        if any(s.slip_number == slip.slip_number for s in self._s.slips.values()):
            raise SlipNumberTakenError(f"Slip number {slip.slip_number} is already taken")
        sid = self._s.next_id("slip")
        now = self._s.now()
        self._s.slips[sid] = SalarySlip(
            slip_id=sid,
            payroll_id=slip.payroll_id,
            employee_id=slip.employee_id,
            month=slip.month,
            slip_number=slip.slip_number,
            basic_salary=slip.basic_salary,
            allowances=slip.allowances,
            deductions=slip.deductions,
            net_salary=slip.net_salary,
            present_days=slip.present_days,
            absent_days=slip.absent_days,
            half_days=slip.half_days,
            leaves=slip.leaves,
            generated_at=slip.generated_at,
            created_by=slip.created_by,
            updated_by=slip.created_by,
            created_at=now,
            updated_at=now,
        )
        return sid

    def highest_number_with_prefix(self, prefix):
        numbers = [s.slip_number for s in self._s.slips.values() if s.slip_number.startswith(prefix)]
        if not numbers:
            return None
        return max(numbers, key=lambda n: parse_sequence(n) or 0)

    def get_by_id(self, slip_id):
        return self._s.slips.get(int(slip_id))

    def get_by_employee_and_month(self, employee_id, month):
        for s in sorted(self._s.slips.values(), key=lambda s: s.slip_id, reverse=True):
            if s.employee_id == employee_id and s.month == month:
                return s
        return None

    def exists_for_payroll(self, payroll_id) -> bool:
        return any(s.payroll_id == int(payroll_id) for s in self._s.slips.values())

    def _filtered(self, f: SlipFilters):
        out = list(self._s.slips.values())
        if f.month:
            out = [s for s in out if s.month == f.month]
        if f.employee_id:
            out = [s for s in out if s.employee_id == f.employee_id]
        if f.email_sent is not None:
            out = [s for s in out if s.email_sent == f.email_sent]
        return sorted(out, key=lambda s: (s.generated_at, s.slip_id), reverse=True)

    def list(self, filters, *, limit, offset):
        return self._filtered(filters)[offset : offset + limit]

    def count(self, filters) -> int:
        return len(self._filtered(filters))

    def update_details(self, slip_id, *, notes, download_url, actor) -> bool:
        current = self._s.slips.get(int(slip_id))
        if not current:
            return False
        self._s.slips[current.slip_id] = replace(
            current, notes=notes, download_url=download_url, updated_by=actor, updated_at=self._s.now()
        )
        return True

    def mark_emailed(self, slip_id, *, sent_at, actor) -> bool:
        current = self._s.slips.get(int(slip_id))
        if not current:
            return False
        self._s.slips[current.slip_id] = replace(
            current, email_sent=True, email_sent_at=sent_at, updated_by=actor, updated_at=self._s.now()
        )
        return True

    def delete(self, slip_id) -> bool:
        return self._s.slips.pop(int(slip_id), None) is not None


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self._snap = None
        self.employees = InMemoryEmployees(store)
        self.structures = InMemoryStructures(store)
        self.payrolls = InMemoryPayrolls(store)
        self.slips = InMemorySlips(store)

    def __enter__(self):
        self._snap = self._store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self._store.commits += 1
        else:
            self._store.restore(self._snap)
            self._store.rollbacks += 1
        self._snap = None
        return None


def uow_factory(store: InMemoryStore):
    return lambda: InMemoryUnitOfWork(store)


def parse_slip_number(number: str) -> tuple[int, int, int]:
    m = re.match(r"^SS/(\d{4})/(\d{2})/(\d+)$", number)
    assert m, number
    return int(m.group(1)), int(m.group(2)), int(m.group(3))
