"""Pure functions for displaying money amounts.

All monetary amounts are in cents (Money type).
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from moola.domain.models import Money


@dataclass(frozen=True)
class AmountParts:
    """Large-amount display split into styled parts."""

    whole: str
    decimal: str | None
    separator: str | None


def _group_thousands(whole: int, use_eu_format: bool) -> str:
    grouped = f"{whole:,}"
    return grouped.replace(",", ".") if use_eu_format else grouped


def _split(amount: Money) -> tuple[int, str]:
    cents = abs(amount)
    return cents // 100, f"{cents % 100:02d}"


def _round_whole(amount: Money) -> int:
    return int((Decimal(abs(amount)) / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(
    amount: Money,
    symbol: str = "$",
    use_eu_format: bool = False,
    hide_decimals: bool = False,
    show_symbol: bool = True,
) -> str:
    """Format money amount for display.

    Args:
        amount: Amount in cents.
        symbol: Currency symbol to prefix.
        use_eu_format: Use "." for thousands and "," for decimals.
        hide_decimals: Round to whole units.
        show_symbol: Whether to include the currency symbol.

    Returns:
        Formatted string (e.g., "$1,234.50" or "€1.234,50").
    """
    if hide_decimals:
        formatted = _group_thousands(_round_whole(amount), use_eu_format)
    else:
        whole, cents = _split(amount)
        separator = "," if use_eu_format else "."
        formatted = f"{_group_thousands(whole, use_eu_format)}{separator}{cents}"

    if amount < 0:
        formatted = f"-{formatted}"

    return f"{symbol}{formatted}" if show_symbol else formatted


def format_large_amount(amount: Money, use_eu_format: bool = False, hide_decimals: bool = False) -> AmountParts:
    """Split an amount into whole/decimal parts for the headline total."""
    if hide_decimals:
        return AmountParts(whole=_group_thousands(_round_whole(amount), use_eu_format), decimal=None, separator=None)

    whole, cents = _split(amount)
    return AmountParts(
        whole=_group_thousands(whole, use_eu_format),
        decimal=cents,
        separator="," if use_eu_format else ".",
    )


def format_export_amount(amount: Money, use_eu_format: bool = False) -> str:
    """Two-decimal amount without grouping, as written to CSV exports."""
    whole, cents = _split(amount)
    separator = "," if use_eu_format else "."
    sign = "-" if amount < 0 else ""
    return f"{sign}{whole}{separator}{cents}"
