"""
Salary Advance Ledger (``payroll_modules.advances.service``).

Responsibility
--------------
Owns the lifecycle of salary advances: request with the salary cap check,
approve/reject decision, withdrawal of pending requests, and amortization
of approved advances through payroll deductions.

Architecture position
---------------------
**Modules layer** -- ``AdvanceLedger`` is the sole public entry point for
advance operations.  Pure installment arithmetic is delegated to
``payroll_engines.amortization``; state changes are checked against
``SALARY_ADVANCE_WORKFLOW``.

Invariants enforced
-------------------
* ``requested_amount <= cap_ratio * base_salary`` at creation.
* ``remaining_balance`` never increases and never drops below zero.
* ``remaining_balance == 0`` iff status is ``repaid``.
* Each public method owns the transaction boundary (``commit`` on
  success, ``rollback`` on failure) unless ``auto_commit=False``, in which
  case the caller (``PayrollRunner``) owns it and the ledger only flushes.

Failure modes
-------------
* Invalid arguments  -> ``InvalidInputError``.
* Amount over the cap  -> ``LimitExceededError``.
* Transition not in the workflow  -> ``InvalidStateError``.
* Unknown id  -> ``AdvanceNotFoundError``.

Audit relevance
---------------
Structured log events at operation start and completion, carrying advance
id, employee, amounts and statuses.  ``created_by_id``, ``updated_by_id``
and ``decided_by_id`` record the actor of every change.

Usage::

    ledger = AdvanceLedger(session, clock=clock)
    advance = ledger.request(
        employee_id=teacher_id, employee_kind="teacher",
        amount=Decimal("200000"), repayment_months=2,
        employee_base_salary=Decimal("500000"), actor_id=clerk_id,
    )
    ledger.decide(advance.id, approve=True, actor_id=director_id)
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from payroll_config.schema import AdvancePolicy
from payroll_engines.amortization import (
    apply_installment,
    monthly_installment,
)
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.values import EmployeeKind, to_decimal, to_employee_kind
from payroll_kernel.exceptions import (
    AdvanceNotFoundError,
    InvalidInputError,
    InvalidStateError,
    LimitExceededError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_modules.advances.models import (
    ActiveDeduction,
    AdvanceStatus,
    SalaryAdvance,
)
from payroll_modules.advances.orm import SalaryAdvanceModel
from payroll_modules.advances.workflows import (
    SALARY_ADVANCE_WORKFLOW,
    WITHDRAWABLE_STATES,
)

logger = get_logger("modules.advances.service")

_ENTITY = "SalaryAdvance"
ZERO = Decimal("0")


class AdvanceLedger:
    """
    Records salary advances and amortizes them through payroll.

    Contract
    --------
    * Mutating methods return the resulting ``SalaryAdvance`` snapshot
      (``withdraw`` returns None; the advance no longer exists).
    * Read methods never mutate.

    Guarantees
    ----------
    * With ``auto_commit=True`` (default) the session is committed on
      success and rolled back on any exception.
    * With ``auto_commit=False`` changes are flushed but never committed or
      rolled back here.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT check who may request or approve; callers perform
      capability checks before calling.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: AdvancePolicy | None = None,
        auto_commit: bool = True,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._policy = policy or AdvancePolicy()
        self._auto_commit = auto_commit

    @property
    def policy(self) -> AdvancePolicy:
        return self._policy

    # =========================================================================
    # Transaction helpers
    # =========================================================================

    def _finish(self) -> None:
        if self._auto_commit:
            self._session.commit()
        else:
            self._session.flush()

    def _abort(self) -> None:
        if self._auto_commit:
            self._session.rollback()

    def _load(self, advance_id: UUID, for_update: bool = False) -> SalaryAdvanceModel:
        stmt = select(SalaryAdvanceModel).where(SalaryAdvanceModel.id == advance_id)
        if for_update:
            stmt = stmt.with_for_update()
        model = self._session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise AdvanceNotFoundError(str(advance_id))
        return model

    def _transition(
        self, model: SalaryAdvanceModel, action: str, actor_id: UUID
    ) -> str:
        transition = SALARY_ADVANCE_WORKFLOW.find_transition(model.status, action)
        if transition is None:
            logger.warning("advance_transition_rejected", extra={
                "advance_id": str(model.id),
                "status": model.status,
                "action": action,
                "allowed_actions": list(
                    SALARY_ADVANCE_WORKFLOW.allowed_actions(model.status)
                ),
            })
            raise InvalidStateError(_ENTITY, str(model.id), model.status, action)
        previous = model.status
        model.status = transition.to_state
        model.updated_by_id = actor_id
        return previous

    # =========================================================================
    # Request / decision / withdrawal
    # =========================================================================

    def request(
        self,
        employee_id: UUID,
        employee_kind: EmployeeKind | str,
        amount: Decimal,
        repayment_months: int,
        employee_base_salary: Decimal,
        actor_id: UUID,
        reason_text: str | None = None,
        request_date: date | None = None,
    ) -> SalaryAdvance:
        """
        Record a new salary-advance request.

        Preconditions:
            - ``amount`` > 0 and ``employee_base_salary`` > 0.
            - ``repayment_months`` in the policy's allowed months.
        Postconditions:
            - A ``pending`` advance exists with remaining == amount.
        Raises:
            InvalidInputError: on any invalid argument.
            LimitExceededError: iff amount > cap_ratio * base salary.
        """
        kind = to_employee_kind(employee_kind)
        amount = to_decimal(amount, "amount")
        base_salary = to_decimal(employee_base_salary, "employee_base_salary")

        with LogContext.bind(employee_id=employee_id, actor_id=actor_id):
            logger.info("advance_request_started", extra={
                "employee_kind": kind.value,
                "amount": str(amount),
                "repayment_months": repayment_months,
            })
            if amount <= ZERO:
                raise InvalidInputError("amount", amount, "must be positive")
            if base_salary <= ZERO:
                raise InvalidInputError(
                    "employee_base_salary", base_salary, "must be positive"
                )
            if (
                isinstance(repayment_months, bool)
                or not isinstance(repayment_months, int)
                or repayment_months not in self._policy.allowed_repayment_months
            ):
                raise InvalidInputError(
                    "repayment_months",
                    repayment_months,
                    f"must be one of {list(self._policy.allowed_repayment_months)}",
                )

            limit = self._policy.cap_ratio * base_salary
            if amount > limit:
                logger.warning("advance_limit_exceeded", extra={
                    "amount": str(amount),
                    "limit": str(limit),
                })
                raise LimitExceededError(str(employee_id), str(amount), str(limit))

            try:
                advance = SalaryAdvance(
                    id=uuid4(),
                    employee_id=employee_id,
                    employee_kind=kind,
                    requested_amount=amount,
                    request_date=request_date or self._clock.today(),
                    reason_text=reason_text,
                    repayment_months=repayment_months,
                    remaining_balance=amount,
                    status=AdvanceStatus.PENDING,
                    base_salary_at_request=base_salary,
                )
                self._session.add(
                    SalaryAdvanceModel.from_dto(advance, created_by_id=actor_id)
                )
                self._finish()
            except Exception:
                self._abort()
                raise

            logger.info("advance_requested", extra={
                "advance_id": str(advance.id),
                "amount": str(amount),
                "limit": str(limit),
                "status": advance.status.value,
            })
            return advance

    def decide(
        self,
        advance_id: UUID,
        approve: bool,
        actor_id: UUID,
        decision_date: date | None = None,
    ) -> SalaryAdvance:
        """
        Approve or reject a pending advance.

        Postconditions:
            - status is ``approved`` or ``rejected``; approval_date stamped.
        Raises:
            AdvanceNotFoundError: unknown id.
            InvalidStateError: the advance is not pending.
        """
        action = "approve" if approve else "reject"
        with LogContext.bind(advance_id=advance_id, actor_id=actor_id):
            logger.info("advance_decision_started", extra={"action": action})
            try:
                model = self._load(advance_id, for_update=True)
                previous = self._transition(model, action, actor_id)
                model.approval_date = decision_date or self._clock.today()
                model.decided_by_id = actor_id
                self._finish()
            except Exception:
                self._abort()
                raise

            result = model.to_dto()
            logger.info("advance_decided", extra={
                "from_status": previous,
                "to_status": result.status.value,
                "approval_date": result.approval_date,
            })
            return result

    def withdraw(self, advance_id: UUID, actor_id: UUID) -> None:
        """
        Delete a pending advance at the requester's demand.

        Raises:
            AdvanceNotFoundError: unknown id.
            InvalidStateError: the advance is no longer pending.
        """
        with LogContext.bind(advance_id=advance_id, actor_id=actor_id):
            try:
                model = self._load(advance_id, for_update=True)
                if model.status not in WITHDRAWABLE_STATES:
                    raise InvalidStateError(
                        _ENTITY, str(advance_id), model.status, "withdraw"
                    )
                requested_amount = model.requested_amount
                self._session.delete(model)
                self._finish()
            except Exception:
                self._abort()
                raise
            logger.info("advance_withdrawn", extra={
                "requested_amount": str(requested_amount),
            })

    # =========================================================================
    # Amortization
    # =========================================================================

    def active_deductions(
        self,
        employee_id: UUID,
        employee_kind: EmployeeKind | str,
        for_update: bool = False,
    ) -> list[ActiveDeduction]:
        """
        Approved advances with a positive balance, oldest request first.

        ``monthly_deduction`` is ``requested_amount / repayment_months``
        rounded up to the policy quantum.  It is the same every month,
        whatever the remaining balance; ``apply_deduction`` clamps the last
        one at zero.
        With ``for_update=True`` the rows are locked until the caller's
        transaction ends.
        """
        kind = to_employee_kind(employee_kind)
        stmt = (
            select(SalaryAdvanceModel)
            .where(
                SalaryAdvanceModel.employee_id == employee_id,
                SalaryAdvanceModel.employee_kind == kind.value,
                SalaryAdvanceModel.status == AdvanceStatus.APPROVED.value,
            )
            .order_by(
                SalaryAdvanceModel.request_date,
                SalaryAdvanceModel.created_at,
                SalaryAdvanceModel.id,
            )
        )
        if for_update:
            stmt = stmt.with_for_update()

        quantum = self._policy.installment_quantum
        deductions: list[ActiveDeduction] = []
        # Money columns are strings on SQLite, so the > 0 filter runs here.
        for model in self._session.execute(stmt).scalars():
            if model.remaining_balance <= ZERO:
                continue
            deductions.append(
                ActiveDeduction(
                    advance_id=model.id,
                    requested_amount=model.requested_amount,
                    remaining_balance=model.remaining_balance,
                    repayment_months=model.repayment_months,
                    monthly_deduction=monthly_installment(
                        model.requested_amount,
                        model.repayment_months,
                        quantum,
                    ),
                    request_date=model.request_date,
                )
            )
        return deductions

    def apply_deduction(
        self, advance_id: UUID, amount: Decimal, actor_id: UUID
    ) -> SalaryAdvance:
        """
        Reduce the remaining balance of an approved advance.

        The reduction is clamped at zero; reaching zero moves the advance
        to ``repaid``.

        Raises:
            InvalidInputError: amount <= 0.
            AdvanceNotFoundError: unknown id.
            InvalidStateError: the advance is not approved.
        """
        amount = to_decimal(amount, "amount")
        if amount <= ZERO:
            raise InvalidInputError("amount", amount, "must be positive")

        with LogContext.bind(advance_id=advance_id, actor_id=actor_id):
            try:
                model = self._load(advance_id, for_update=True)
                if model.status != AdvanceStatus.APPROVED.value:
                    raise InvalidStateError(
                        _ENTITY, str(advance_id), model.status, "apply_deduction"
                    )
                before = model.remaining_balance
                outcome = apply_installment(before, amount)
                model.remaining_balance = outcome.remaining
                model.updated_by_id = actor_id
                if outcome.is_settled:
                    self._transition(model, "repay", actor_id)
                self._finish()
            except Exception:
                self._abort()
                raise

            result = model.to_dto()
            logger.info("advance_deduction_applied", extra={
                "requested": str(amount),
                "applied": str(outcome.applied),
                "balance_before": str(before),
                "balance_after": str(outcome.remaining),
                "status": result.status.value,
            })
            return result

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, advance_id: UUID) -> SalaryAdvance:
        """Raises AdvanceNotFoundError for an unknown id."""
        return self._load(advance_id).to_dto()

    def list_advances(
        self,
        employee_id: UUID,
        employee_kind: EmployeeKind | str,
        status: AdvanceStatus | str | None = None,
    ) -> list[SalaryAdvance]:
        """All advances of one employee, newest request first."""
        kind = to_employee_kind(employee_kind)
        stmt = select(SalaryAdvanceModel).where(
            SalaryAdvanceModel.employee_id == employee_id,
            SalaryAdvanceModel.employee_kind == kind.value,
        )
        if status is not None:
            stmt = stmt.where(SalaryAdvanceModel.status == AdvanceStatus(status).value)
        stmt = stmt.order_by(
            SalaryAdvanceModel.request_date.desc(),
            SalaryAdvanceModel.created_at.desc(),
            SalaryAdvanceModel.id,
        )
        return [m.to_dto() for m in self._session.execute(stmt).scalars()]

    def outstanding_balance(
        self, employee_id: UUID, employee_kind: EmployeeKind | str
    ) -> Decimal:
        """Sum of remaining balances over approved advances."""
        return sum(
            (d.remaining_balance for d in self.active_deductions(employee_id, employee_kind)),
            ZERO,
        )
