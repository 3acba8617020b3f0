from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import SalaryComponents, SalaryStructure


class SalaryStructureRepository(Protocol):
    def create(
        self,
        *,
        employee_id: str,
        components: SalaryComponents,
        effective_from: date,
        actor: str,
    ) -> int:
        """Insert an open-ended (active) version.

        Raises ConflictError when the employee already has an active version.
        """

        raise NotImplementedError

    def get_by_id(self, structure_id: int, *, for_update: bool = False) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def get_active_for_employee(self, employee_id: str) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def list_history(self, employee_id: str, *, limit: int, offset: int) -> Sequence[SalaryStructure]:
        raise NotImplementedError

    def count_history(self, employee_id: str) -> int:
        raise NotImplementedError

    def list(self, *, active_only: bool, search: Optional[str], limit: int, offset: int) -> Sequence[SalaryStructure]:
        raise NotImplementedError

    def count(self, *, active_only: bool, search: Optional[str]) -> int:
        raise NotImplementedError

    def update(
        self,
        structure_id: int,
        *,
        components: SalaryComponents,
        effective_from: date,
        actor: str,
    ) -> bool:
        raise NotImplementedError

    def close(self, structure_id: int, *, effective_to: date, actor: str) -> bool:
        """End the version's interval (deactivate)."""

        raise NotImplementedError

    def delete(self, structure_id: int) -> bool:
        raise NotImplementedError

    def list_active(self) -> Sequence[SalaryStructure]:
        raise NotImplementedError
