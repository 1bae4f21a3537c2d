"""Pure functions for ledger records, period views and recurring projections.

This module contains the functional core for expense operations:
- No I/O operations (no stores, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in cents (Money type).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from moola.dates import days_in_month, days_in_year, format_date, parse_date, period_range, step_date
from moola.domain.models import DateStr, Frequency, Money, Period
from moola.errors import InvalidAmount, InvalidDate, InvalidFrequency

CENT = Decimal("0.01")


@dataclass(frozen=True)
class ExpenseInput:
    """Raw add/edit form values, not yet validated."""

    amount: str | int | float | Decimal
    date: str
    note: str = ""
    recurring: bool = False
    freq: Frequency | str | None = None


@dataclass(frozen=True)
class ExpenseRecord:
    """Immutable expense record."""

    id: int
    amount: Money
    date: DateStr
    note: str = ""
    recurring: bool = False
    freq: Frequency | None = None
    next_due: DateStr | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON object stored in the general store."""
        return {
            "id": self.id,
            "amount": format_money(self.amount),
            "note": self.note,
            "date": self.date,
            "recurring": self.recurring,
            "freq": self.freq.value if self.freq else None,
            "nextDue": self.next_due,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ExpenseRecord":
        """Decode a stored record, re-validating every field.

        The stored ``nextDue`` is ignored and recomputed, so a record can never
        come back with a projection that disagrees with its date.

        Raises:
            ValidationError: If any field fails validation.
            KeyError: If a required field is missing.
        """
        data = ExpenseInput(
            amount=raw["amount"],
            date=raw["date"],
            note=raw.get("note") or "",
            recurring=bool(raw.get("recurring", False)),
            freq=raw.get("freq"),
        )
        return build_record(int(raw["id"]), data)


@dataclass(frozen=True)
class PeriodView:
    """Records inside a period window and their total."""

    items: tuple[ExpenseRecord, ...]
    total: Money

    @property
    def spending_total(self) -> Money:
        """Total of one-off (non-recurring) records."""
        return sum_amounts(r for r in self.items if not r.recurring)

    @property
    def recurring_total(self) -> Money:
        """Total of recurring records."""
        return sum_amounts(r for r in self.items if r.recurring)


@dataclass(frozen=True)
class DateGroup:
    """Records sharing a single date."""

    date: DateStr
    items: list[ExpenseRecord] = field(default_factory=list)
    total: Money = Money(0)


def parse_amount(value: str | int | float | Decimal) -> Money:
    """Parse a positive monetary amount into cents.

    Args:
        value: Amount in major units (e.g. "12.5", 12.5, Decimal("12.50")).

    Returns:
        Amount in cents, rounded half-up to the nearest cent.

    Raises:
        InvalidAmount: If the value is not a positive finite number.
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid amount: {value!r}")

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Invalid amount: {value!r}") from None

    if not amount.is_finite():
        raise InvalidAmount(f"Amount must be finite: {value!r}")

    try:
        cents = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Amount is too large: {value!r}") from None

    if cents <= 0:
        raise InvalidAmount("Amount must be positive")

    return Money(int(cents * 100))


def format_money(amount: Money) -> str:
    """Format cents as a plain decimal string with two fractional digits."""
    return str((Decimal(amount) / 100).quantize(CENT))


def validate_date(value: str) -> DateStr:
    """Validate a YYYY-MM-DD date string.

    Raises:
        InvalidDate: If the string is not a real calendar date.
    """
    try:
        return format_date(parse_date(str(value).strip()))
    except ValueError:
        raise InvalidDate(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from None


def validate_frequency(value: Frequency | str | None) -> Frequency:
    """Validate a recurrence frequency.

    Raises:
        InvalidFrequency: If the value is not weekly, monthly or yearly.
    """
    try:
        return Frequency(value)
    except ValueError:
        raise InvalidFrequency(f"Invalid frequency: {value!r} (expected weekly, monthly or yearly)") from None


def next_due_date(record_date: DateStr, freq: Frequency) -> DateStr:
    """Project the next occurrence of a recurring expense."""
    return format_date(step_date(parse_date(record_date), freq))


def build_record(record_id: int, data: ExpenseInput) -> ExpenseRecord:
    """Validate input and build a consistent record.

    One-off records never carry a frequency or next due date; recurring records
    always get next_due recomputed from their own date.

    Raises:
        ValidationError: If amount, date or frequency is invalid.
    """
    amount = parse_amount(data.amount)
    record_date = validate_date(data.date)

    freq: Frequency | None = None
    next_due: DateStr | None = None
    if data.recurring:
        freq = validate_frequency(data.freq)
        next_due = next_due_date(record_date, freq)

    return ExpenseRecord(
        id=record_id,
        amount=amount,
        date=record_date,
        note=(data.note or "").strip(),
        recurring=bool(data.recurring),
        freq=freq,
        next_due=next_due,
    )


def apply_edit(record: ExpenseRecord, data: ExpenseInput) -> ExpenseRecord:
    """Apply edited form values to an existing record, keeping its id."""
    return build_record(record.id, data)


def next_record_id(existing_ids: Iterable[int], now_ms: int) -> int:
    """Time-based id, bumped past every existing id to stay unique."""
    highest = max(existing_ids, default=0)
    return max(now_ms, highest + 1)


def sum_amounts(records: Iterable[ExpenseRecord]) -> Money:
    return Money(sum(r.amount for r in records))


def filter_by_period(records: Iterable[ExpenseRecord], period: Period | str, today: date) -> PeriodView:
    """Select records inside a period window ending on today (inclusive).

    Args:
        records: Records to filter, in display order.
        period: today, week (trailing 7 days), month (month to date) or year (year to date).
        today: Reference date.

    Returns:
        PeriodView with matching records (order preserved) and their total.
    """
    since, until = period_range(Period(period), today)
    items = tuple(r for r in records if since <= r.date <= until)
    return PeriodView(items=items, total=sum_amounts(items))


def group_by_date(records: Iterable[ExpenseRecord]) -> list[DateGroup]:
    """Group records by date, most recent date first.

    Args:
        records: Records to group.

    Returns:
        List of DateGroup sorted by date descending; items keep input order.
    """
    groups: dict[str, list[ExpenseRecord]] = {}
    for record in records:
        groups.setdefault(record.date, []).append(record)

    return [
        DateGroup(date=DateStr(day), items=items, total=sum_amounts(items))
        for day, items in sorted(groups.items(), key=lambda kv: kv[0], reverse=True)
    ]


def days_until(due_date: str, today: date) -> str:
    """Describe how far away a due date is.

    Returns:
        "due today", "tomorrow", "{n}d overdue" or "in {n}d".
    """
    diff = (parse_date(due_date) - today).days
    if diff == 0:
        return "due today"
    if diff == 1:
        return "tomorrow"
    if diff < 0:
        return f"{abs(diff)}d overdue"
    return f"in {diff}d"


def upcoming_recurring(records: Iterable[ExpenseRecord]) -> list[ExpenseRecord]:
    """Recurring records ordered by next due date, soonest first."""
    recurring = [r for r in records if r.recurring and r.next_due]
    return sorted(recurring, key=lambda r: (r.next_due, r.id))


def sort_by_date_desc(records: Iterable[ExpenseRecord]) -> list[ExpenseRecord]:
    """Records sorted by date, newest first (stable for equal dates)."""
    return sorted(records, key=lambda r: r.date, reverse=True)


def time_progress(period: Period | str, now: datetime) -> float:
    """Fraction of the current period that has elapsed.

    Args:
        period: Period to measure.
        now: Current wall-clock time.

    Returns:
        Value between 0.0 and 1.0.
    """
    period = Period(period)
    day_fraction = (now.hour + now.minute / 60) / 24

    if period is Period.TODAY:
        progress = day_fraction
    elif period is Period.WEEK:
        # Sunday starts the week
        day_of_week = (now.weekday() + 1) % 7
        progress = (day_of_week + day_fraction) / 7
    elif period is Period.MONTH:
        progress = (now.day - 1 + day_fraction) / days_in_month(now.year, now.month)
    else:
        day_of_year = now.timetuple().tm_yday - 1
        progress = day_of_year / days_in_year(now.year)

    return min(max(progress, 0.0), 1.0)
