# File: utils/__init__.py
"""Pure Python utilities for Numu.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed in this module.

Submodules:
    - dt_utils: Date normalization, week boundaries, date windows
    - math_utils: Rate rounding, safe ratios, percentages

Usage:
    from . import dt_utils
    from .math_utils import safe_ratio
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
