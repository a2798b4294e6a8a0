"""
Module: payroll_modules.payroll.selectors
Responsibility: Read-only access to payroll records for the history screen
    and for the runner's at-most-once check.
Architecture position: Modules > Selectors.  Builds on
    ``payroll_kernel.selectors.base``.

Invariants enforced:
    - Read-only: no mutations performed on any queried data.
    - DTO convention: every public method returns ``PayrollRecord`` DTOs.
    - Deterministic ordering: newest ``run_timestamp`` first, ties broken
      by record id.

Failure modes:
    - Returns None or an empty list when nothing matches (never raises on
      absence of data).
"""

from uuid import UUID

from sqlalchemy import select

from payroll_kernel.domain.values import EmployeeKind, PayPeriod, to_employee_kind
from payroll_kernel.selectors.base import BaseSelector
from payroll_kernel.utils.idempotency import generate_payroll_run_key
from payroll_modules.payroll.models import PayrollRecord
from payroll_modules.payroll.orm import PayrollRecordModel


class PayrollHistorySelector(BaseSelector[PayrollRecordModel]):
    """Selector for payroll record queries."""

    def get(self, record_id: UUID) -> PayrollRecord | None:
        model = self.session.get(PayrollRecordModel, record_id)
        return model.to_dto() if model is not None else None

    def records_for_employee(
        self,
        employee_id: UUID,
        employee_kind: EmployeeKind | str,
        limit: int | None = None,
    ) -> list[PayrollRecord]:
        """All records of one employee, most recent run first."""
        stmt = (
            select(PayrollRecordModel)
            .where(
                PayrollRecordModel.employee_id == employee_id,
                PayrollRecordModel.employee_kind == to_employee_kind(employee_kind).value,
            )
            .order_by(
                PayrollRecordModel.run_timestamp.desc(),
                PayrollRecordModel.id,
            )
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [m.to_dto() for m in self.session.execute(stmt).scalars()]

    def find_for_period(
        self,
        employee_id: UUID,
        employee_kind: EmployeeKind | str,
        period: PayPeriod | str,
    ) -> PayrollRecord | None:
        """The record of one employee and period, if the run happened."""
        key = generate_payroll_run_key(
            to_employee_kind(employee_kind), employee_id, PayPeriod.parse(period).code
        )
        model = self.session.execute(
            select(PayrollRecordModel).where(PayrollRecordModel.idempotency_key == key)
        ).scalar_one_or_none()
        return model.to_dto() if model is not None else None

    def records_for_period(self, period: PayPeriod | str) -> list[PayrollRecord]:
        """Every record of a period, grouped by employee kind then id."""
        stmt = (
            select(PayrollRecordModel)
            .where(PayrollRecordModel.period == PayPeriod.parse(period).code)
            .order_by(
                PayrollRecordModel.employee_kind,
                PayrollRecordModel.employee_id,
            )
        )
        return [m.to_dto() for m in self.session.execute(stmt).scalars()]
