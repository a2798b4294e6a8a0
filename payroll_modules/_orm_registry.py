"""
Module ORM Registry (``payroll_modules._orm_registry``).

Responsibility
--------------
Ensure every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` contains its table definition before tables are
created.  ``create_all_tables()`` is the one way for scripts and
``tests/conftest.py`` to get a complete schema.

Architecture position
---------------------
**Modules layer** -- utility.  Imports sibling ORM modules and
``payroll_kernel.db.engine`` (allowed: modules -> kernel).
MUST NOT be imported by ``payroll_kernel``.
"""


def import_all_orm_models() -> None:
    """Import every ``payroll_modules.*.orm`` module.  Idempotent."""
    # fmt: off
    import payroll_modules.advances.orm  # noqa: F401
    import payroll_modules.payroll.orm  # noqa: F401
    # fmt: on


def create_all_tables(install_listeners: bool = True) -> None:
    """Register all ORM models, then create every table.

    Args:
        install_listeners: Also register the immutability listeners.
    """
    import_all_orm_models()

    from payroll_kernel.db.engine import create_tables

    create_tables()

    if install_listeners:
        from payroll_modules.immutability import register_immutability_listeners

        register_immutability_listeners()
