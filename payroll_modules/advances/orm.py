"""
Salary Advance ORM Model (``payroll_modules.advances.orm``).

Responsibility
--------------
SQLAlchemy persistence for salary advances.  Maps the frozen
``SalaryAdvance`` dataclass to the ``salary_advances`` table.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``payroll_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``payroll_kernel``.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase, UUIDString


class SalaryAdvanceModel(TrackedBase):
    """
    ORM model for salary advances.

    Guarantees:
        - status stored as the string enum value.
        - repayment_months constrained to a positive integer.
        - Amounts stored with ExactDecimal (no float rounding).
    """

    __tablename__ = "salary_advances"

    __table_args__ = (
        Index("idx_salary_advances_employee", "employee_kind", "employee_id"),
        Index("idx_salary_advances_status", "status"),
        CheckConstraint("repayment_months > 0", name="ck_salary_advances_months"),
    )

    employee_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    employee_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    requested_amount: Mapped[Decimal] = mapped_column(nullable=False)
    request_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason_text: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    repayment_months: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_balance: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    approval_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    base_salary_at_request: Mapped[Decimal] = mapped_column(nullable=False)
    decided_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from payroll_kernel.domain.values import EmployeeKind
        from payroll_modules.advances.models import AdvanceStatus, SalaryAdvance

        return SalaryAdvance(
            id=self.id,
            employee_id=self.employee_id,
            employee_kind=EmployeeKind(self.employee_kind),
            requested_amount=self.requested_amount,
            request_date=self.request_date,
            reason_text=self.reason_text,
            repayment_months=self.repayment_months,
            remaining_balance=self.remaining_balance,
            status=AdvanceStatus(self.status),
            approval_date=self.approval_date,
            base_salary_at_request=self.base_salary_at_request,
            decided_by_id=self.decided_by_id,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "SalaryAdvanceModel":
        """Create ORM model from frozen dataclass."""
        return cls(
            id=dto.id,
            employee_id=dto.employee_id,
            employee_kind=dto.employee_kind.value,
            requested_amount=dto.requested_amount,
            request_date=dto.request_date,
            reason_text=dto.reason_text,
            repayment_months=dto.repayment_months,
            remaining_balance=dto.remaining_balance,
            status=dto.status.value,
            approval_date=dto.approval_date,
            base_salary_at_request=dto.base_salary_at_request,
            decided_by_id=dto.decided_by_id,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<SalaryAdvanceModel {self.id} {self.status} "
            f"{self.remaining_balance}/{self.requested_amount}>"
        )
