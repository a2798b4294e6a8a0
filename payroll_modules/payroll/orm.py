"""
Payroll Record ORM Model (``payroll_modules.payroll.orm``).

Responsibility
--------------
SQLAlchemy persistence for payroll records.  Rows are append-only: the
immutability listeners reject every UPDATE and DELETE.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``payroll_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``payroll_kernel``.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString


class PayrollRecordModel(TrackedBase):
    """
    ORM model for payroll records.

    Guarantees:
        - idempotency_key is unique (uq_payroll_records_idempotency_key),
          so one employee and period is recorded at most once.
        - period stored as its "YYYY-MM" code.
    """

    __tablename__ = "payroll_records"

    __table_args__ = (
        UniqueConstraint("idempotency_key", name="uq_payroll_records_idempotency_key"),
        Index("idx_payroll_records_employee", "employee_kind", "employee_id"),
        Index("idx_payroll_records_period", "period"),
    )

    employee_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    employee_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(nullable=False)
    ostie_amount: Mapped[Decimal] = mapped_column(nullable=False)
    cnaps_amount: Mapped[Decimal] = mapped_column(nullable=False)
    taxable_income: Mapped[Decimal] = mapped_column(nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(nullable=False)
    minimum_tax_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    advance_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)
    negative_net: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    run_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    idempotency_key: Mapped[str] = mapped_column(String(120), nullable=False)

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from payroll_kernel.domain.values import EmployeeKind
        from payroll_modules.payroll.models import PayrollRecord

        return PayrollRecord(
            id=self.id,
            employee_id=self.employee_id,
            employee_kind=EmployeeKind(self.employee_kind),
            period=self.period,
            gross_salary=self.gross_salary,
            ostie_amount=self.ostie_amount,
            cnaps_amount=self.cnaps_amount,
            taxable_income=self.taxable_income,
            tax_amount=self.tax_amount,
            minimum_tax_applied=self.minimum_tax_applied,
            advance_deduction=self.advance_deduction,
            net_salary=self.net_salary,
            negative_net=self.negative_net,
            run_timestamp=self.run_timestamp,
            idempotency_key=self.idempotency_key,
            created_by_id=self.created_by_id,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PayrollRecordModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            employee_id=dto.employee_id,
            employee_kind=dto.employee_kind.value,
            period=dto.period,
            gross_salary=dto.gross_salary,
            ostie_amount=dto.ostie_amount,
            cnaps_amount=dto.cnaps_amount,
            taxable_income=dto.taxable_income,
            tax_amount=dto.tax_amount,
            minimum_tax_applied=dto.minimum_tax_applied,
            advance_deduction=dto.advance_deduction,
            net_salary=dto.net_salary,
            negative_net=dto.negative_net,
            run_timestamp=dto.run_timestamp,
            idempotency_key=dto.idempotency_key,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PayrollRecordModel {self.idempotency_key} net={self.net_salary}>"
