from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import DEFAULT_TOTAL_WORKING_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import UnitOfWorkFactory, mysql_uow_factory
from .payroll.bulk import BulkPayrollRunner
from .payroll.payments import PaymentStatusManager
from .payroll.service import PayrollService
from .salary_slips.service import SalarySlipIssuer
from .salary_structures.service import SalaryStructureService


@dataclass(frozen=True)
class Container:
    uow_factory: UnitOfWorkFactory

    payroll_service: PayrollService
    bulk_runner: BulkPayrollRunner
    payment_manager: PaymentStatusManager
    structure_service: SalaryStructureService
    slip_issuer: SalarySlipIssuer

    conn: Optional[DatabaseConnection] = None


def build_services(
    uow_factory: UnitOfWorkFactory,
    *,
    default_working_days: float = DEFAULT_TOTAL_WORKING_DAYS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    payroll_service = PayrollService(uow_factory, default_working_days=default_working_days)
    return Container(
        uow_factory=uow_factory,
        payroll_service=payroll_service,
        bulk_runner=BulkPayrollRunner(payroll_service),
        payment_manager=PaymentStatusManager(uow_factory),
        structure_service=SalaryStructureService(uow_factory),
        slip_issuer=SalarySlipIssuer(uow_factory),
        conn=conn,
    )


def build_container(*, db_config: dict, default_working_days: float = DEFAULT_TOTAL_WORKING_DAYS) -> Container:
    conn = DatabaseConnection(DBConfig.from_settings(db_config))
    return build_services(mysql_uow_factory(conn), default_working_days=default_working_days, conn=conn)
