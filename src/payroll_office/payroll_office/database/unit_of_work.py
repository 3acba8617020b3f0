from __future__ import annotations

from contextlib import ExitStack
from typing import Callable, Optional, Protocol

from ..employees.mysql_employee_directory import MySQLEmployeeDirectory
from ..employees.repository import EmployeeDirectory
from ..payroll.mysql_payroll_repository import MySQLPayrollRepository
from ..payroll.repository import PayrollRepository
from ..salary_slips.mysql_salary_slip_repository import MySQLSalarySlipRepository
from ..salary_slips.repository import SalarySlipRepository
from ..salary_structures.mysql_salary_structure_repository import MySQLSalaryStructureRepository
from ..salary_structures.repository import SalaryStructureRepository
from .connection import DatabaseConnection
from .mysql_base import db_cursor


class UnitOfWork(Protocol):
    """One store transaction with every repository bound to it.

    Leaving the ``with`` block normally commits; an exception rolls back
    everything written inside it.
    """

    employees: EmployeeDirectory
    structures: SalaryStructureRepository
    payrolls: PayrollRepository
    slips: SalarySlipRepository

    def __enter__(self) -> "UnitOfWork":
        raise NotImplementedError

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], UnitOfWork]


class MySQLUnitOfWork:
    def __init__(self, conn: DatabaseConnection):
        self._conn = conn
        self._stack: Optional[ExitStack] = None

    def __enter__(self) -> "MySQLUnitOfWork":
        stack = ExitStack()
        _, cur = stack.enter_context(db_cursor(self._conn))
        self._stack = stack

        self.employees = MySQLEmployeeDirectory(cur)
        self.structures = MySQLSalaryStructureRepository(cur)
        self.payrolls = MySQLPayrollRepository(cur)
        self.slips = MySQLSalarySlipRepository(cur)
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        stack, self._stack = self._stack, None
        assert stack is not None, "unit of work was not entered"
        return stack.__exit__(exc_type, exc, tb)


def mysql_uow_factory(conn: DatabaseConnection) -> UnitOfWorkFactory:
    return lambda: MySQLUnitOfWork(conn)
