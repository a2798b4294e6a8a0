"""
Tests for the kernel database layer: exact decimal columns and
commit-or-rollback session scope.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from payroll_kernel.db.engine import get_session, session_scope
from payroll_kernel.db.types import round_up_to_quantum
from payroll_kernel.domain.values import EmployeeKind
from payroll_modules.advances.orm import SalaryAdvanceModel
from payroll_modules.advances.service import AdvanceLedger


def _request(session, employee_id, amount="66666.666666"):
    ledger = AdvanceLedger(session, auto_commit=False)
    return ledger.request(
        employee_id=employee_id,
        employee_kind=EmployeeKind.STAFF,
        amount=Decimal(amount),
        repayment_months=3,
        employee_base_salary=Decimal("400000"),
        actor_id=uuid4(),
    )


class TestExactDecimal:

    def test_amount_round_trips_exactly(self, session):
        advance = _request(session, uuid4())
        session.flush()
        session.expire_all()

        stored = session.get(SalaryAdvanceModel, advance.id)
        assert stored.requested_amount == Decimal("66666.666666")
        assert isinstance(stored.remaining_balance, Decimal)


class TestSessionScope:

    def test_commits_on_success(self, committing_session_factory):
        employee_id = uuid4()
        with session_scope() as session:
            advance = _request(session, employee_id, "1000")

        check = get_session()
        try:
            assert check.get(SalaryAdvanceModel, advance.id) is not None
        finally:
            check.close()

    def test_rolls_back_on_error(self, committing_session_factory):
        employee_id = uuid4()
        with pytest.raises(RuntimeError, match="boom"):
            with session_scope() as session:
                _request(session, employee_id, "1000")
                raise RuntimeError("boom")

        check = get_session()
        try:
            rows = check.execute(
                select(SalaryAdvanceModel).where(SalaryAdvanceModel.employee_id == employee_id)
            ).scalars().all()
            assert rows == []
        finally:
            check.close()


@pytest.mark.parametrize(
    "value,expected",
    [
        ("66666.6666", "66666.67"),
        ("100000", "100000"),
        ("0.001", "0.01"),
    ],
)
def test_round_up_to_quantum(value, expected):
    assert round_up_to_quantum(Decimal(value), Decimal("0.01")) == Decimal(expected)


def test_round_up_rejects_non_positive_quantum():
    with pytest.raises(ValueError):
        round_up_to_quantum(Decimal("1"), Decimal("0"))
