"""Test helpers for Numu integration tests.

This module re-exports the data factories for convenient imports:

    from tests.helpers import make_system, make_task, make_test, stamp

See individual modules for full documentation:
- factories.py: Storage-shaped systems, tasks, tests and entries
"""

from tests.helpers.factories import (
    SYSTEM_ID,
    cadence,
    make_storage,
    make_system,
    make_task,
    make_test,
    stamp,
)

__all__ = [
    "SYSTEM_ID",
    "cadence",
    "make_storage",
    "make_system",
    "make_task",
    "make_test",
    "stamp",
]
