"""
Per-employee in-process locks.

A payroll run reads the employee's active advances, applies their
installments and writes the payroll record.  Two runs for the same
employee inside one process are serialized here; runs from different
processes are caught by the database (row locks on PostgreSQL and the
unique idempotency key everywhere).
"""

import threading
from contextlib import contextmanager
from typing import Iterator

from payroll_kernel.logging_config import get_logger

logger = get_logger("utils.locks")


class EmployeeLockRegistry:
    """
    Lazily created ``threading.Lock`` per employee key.

    Guarantees:
        - Callers holding or waiting on a key share the same lock.
        - A lock is dropped once no caller holds or waits on it, so the
          registry only tracks employees with a run in progress.
        - ``hold`` never blocks longer than ``timeout`` seconds.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # key -> [lock, number of callers holding or waiting]
        self._entries: dict[str, list] = {}

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: str, timeout: float) -> Iterator[bool]:
        """
        Acquire the lock for ``key``; yields True if acquired, False on timeout.

        The lock is released on exit only if it was acquired.
        """
        lock = self._checkout(key)
        try:
            acquired = lock.acquire(timeout=timeout)
            if not acquired:
                logger.warning(
                    "employee_lock_timeout",
                    extra={"lock_key": key, "timeout_seconds": timeout},
                )
            try:
                yield acquired
            finally:
                if acquired:
                    lock.release()
        finally:
            self._checkin(key)


# Process-wide registry shared by every PayrollRunner instance.
employee_locks = EmployeeLockRegistry()
