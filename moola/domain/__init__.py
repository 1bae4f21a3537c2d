"""Domain models and types for moola.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from moola.domain.models import DateStr, Frequency, Money, Period

__all__ = ["DateStr", "Frequency", "Money", "Period"]
