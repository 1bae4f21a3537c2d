"""Domain type definitions for moola.

These types provide semantic clarity and help with type checking:
- Money: Amount in cents (minor units)
- DateStr: Calendar date in YYYY-MM-DD format
- Frequency: Step size of a recurring expense
- Period: Rolling window used by the summary views
"""

from enum import Enum
from typing import NewType

# Money amounts are stored as cents (minor units) to avoid floating point errors
Money = NewType("Money", int)

# Dates are always YYYY-MM-DD so string order matches calendar order
DateStr = NewType("DateStr", str)


class Frequency(str, Enum):
    """How often a recurring expense repeats."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Period(str, Enum):
    """Summary window, always ending on (and including) today."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
