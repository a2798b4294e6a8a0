"""
Module: payroll_kernel.db.types
Responsibility: Column types and rounding helpers for monetary amounts.
    Centralizes precision so that every model and service stores and rounds
    amounts the same way.
Architecture position: Kernel > DB.  May be imported by models, domain and
    services.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere.  ExactDecimal stores Decimal as NUMERIC(38, 9) on
      PostgreSQL and as a canonical string on SQLite, whose NUMERIC affinity
      would otherwise round-trip amounts through binary floating point.
    - round_up_to_quantum() is the only sanctioned rounding for installments.

Failure modes:
    - decimal.InvalidOperation when a non-numeric string is stored.
"""

from decimal import ROUND_UP, Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator


class ExactDecimal(TypeDecorator):
    """
    Decimal column that round-trips exactly on every supported backend.

    Contract:
        Python values are always ``Decimal`` (or None).

    Guarantees:
        - PostgreSQL: NUMERIC(38, 9), handled natively by the driver.
        - SQLite: VARCHAR(64) holding ``str(value)``; read back with
          ``Decimal(text)`` so no precision is lost.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = Numeric(38, 9)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(64))
        return dialect.type_descriptor(Numeric(38, 9, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value)) if not isinstance(value, Decimal) else value


def round_up_to_quantum(value: Decimal, quantum: Decimal) -> Decimal:
    """
    Round ``value`` up (away from zero) to a multiple of ``quantum``.

    Preconditions: quantum > 0.
    Postconditions: result >= value for value >= 0, and
        result - value < quantum.

    Example:
        round_up_to_quantum(Decimal("66666.6666"), Decimal("0.01"))
        -> Decimal("66666.67")
    """
    if quantum <= 0:
        raise ValueError("quantum must be positive")
    return (value / quantum).quantize(Decimal("1"), rounding=ROUND_UP) * quantum
