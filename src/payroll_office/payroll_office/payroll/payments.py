from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_local, parse_optional_datetime
from ..common.validators import require_non_empty, to_number
from ..core.enums import PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWorkFactory
from .model import Payroll

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentUpdate:
    payroll: Payroll
    requested_amount: Optional[float] = None
    clamped: bool = False
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            **self.payroll.to_dict(),
            "requestedAmount": self.requested_amount,
            "clamped": self.clamped,
            "warnings": list(self.warnings),
        }


def parse_payment_status(value: Any) -> PaymentStatus:
    v = str(value or "").strip()
    if not v:
        raise ValidationError("Payment status is required")
    try:
        return PaymentStatus(v)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise ValidationError(f"Invalid payment status: {v}. Allowed: {allowed}")


class PaymentStatusManager:
    """Moves a processed payroll between payment states.

    | status    | paid amount               | payment date     |
    |-----------|---------------------------|------------------|
    | paid      | net salary                | given date / now |
    | part-paid | requested, clamped to net | given date / now |
    | hold      | 0                         | cleared          |
    | pending   | 0                         | cleared          |
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, *, clock: Callable[[], datetime] = now_local):
        self._uow_factory = uow_factory
        self._clock = clock

    def update_payment_status(
        self,
        payroll_id: int,
        *,
        status: Any,
        actor: str,
        paid_amount: Any = None,
        payment_date: Any = None,
        notes: Optional[str] = None,
    ) -> PaymentUpdate:
        target = parse_payment_status(status)
        actor = require_non_empty(actor, "Actor")
        given_date = parse_optional_datetime(payment_date)
        requested = to_number(paid_amount, "paidAmount") if paid_amount not in (None, "") else None

        with self._uow_factory() as uow:
            payroll = uow.payrolls.get_by_id(int(payroll_id), for_update=True)
            if not payroll:
                raise NotFoundError("Payroll not found")

            net = payroll.net_salary
            warnings: list[str] = []
            clamped = False

            if target == PaymentStatus.PAID:
                amount = net
                when: Optional[datetime] = given_date or self._clock()
                if requested is not None and requested != net:
                    warnings.append(f"paidAmount {requested} ignored; paid records carry the full net salary {net}")
            elif target == PaymentStatus.PART_PAID:
                value = requested if requested is not None else 0.0
                amount = min(max(value, 0.0), net)
                clamped = amount != value
                if value < 0:
                    warnings.append(f"paidAmount {value} is negative; stored as 0")
                elif value > net:
                    warnings.append(f"paidAmount {value} exceeds net salary {net}; stored as {net}")
                when = given_date or self._clock()
            else:
                amount = 0.0
                when = None
                if requested:
                    warnings.append(f"paidAmount {requested} ignored for status {target.value}")

            uow.payrolls.update_payment(
                payroll.payroll_id,
                payment_status=target,
                paid_amount=amount,
                payment_date=when,
                notes=notes if notes is not None else payroll.notes,
                actor=actor,
            )
            updated = uow.payrolls.get_by_id(payroll.payroll_id)
            if not updated:
                raise NotFoundError("Payroll not found")

        if warnings:
            logger.warning("payroll %s payment update: %s", payroll.payroll_id, "; ".join(warnings))
        logger.info(
            "payroll payment status id=%s %s->%s paid=%.2f actor=%s",
            payroll.payroll_id,
            payroll.payment_status.value,
            target.value,
            amount,
            actor,
        )
        return PaymentUpdate(payroll=updated, requested_amount=requested, clamped=clamped, warnings=warnings)
