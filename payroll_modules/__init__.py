"""
payroll_modules -- stateful payroll services on top of the kernel.

    advances   salary-advance ledger (request, decide, amortize, withdraw)
    payroll    payroll runner, records and history selector

``_orm_registry.create_all_tables()`` builds the full schema;
``immutability.register_immutability_listeners()`` installs the ORM
persistence rules.
"""
