from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only lookup into the employee directory.

    Employee CRUD lives outside the payroll core; the payroll services only
    read through this interface.
    """

    def find_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError

    def list_active_without_structure(self, *, search: Optional[str] = None, limit: int = 100, offset: int = 0) -> Sequence[Employee]:
        raise NotImplementedError

    def count_active_without_structure(self, *, search: Optional[str] = None) -> int:
        raise NotImplementedError
