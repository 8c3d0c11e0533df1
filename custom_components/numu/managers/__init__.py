"""Stateful write managers for Numu.

Managers own every mutation of stored data and announce it through
instance-scoped dispatcher signals; the pure engines never write.
"""

from .base_manager import BaseManager
from .habit_manager import HabitManager

__all__ = ["BaseManager", "HabitManager"]
