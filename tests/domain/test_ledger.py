"""Tests for moola.domain.ledger pure functions."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from moola.domain.ledger import (
    ExpenseInput,
    ExpenseRecord,
    apply_edit,
    build_record,
    days_until,
    filter_by_period,
    format_money,
    group_by_date,
    next_record_id,
    parse_amount,
    time_progress,
    upcoming_recurring,
)
from moola.domain.models import Frequency, Money, Period
from moola.errors import InvalidAmount, InvalidDate, InvalidFrequency

TODAY = date(2025, 5, 20)


def make(record_id: int, amount: str, day: str, recurring: bool = False, freq: str | None = None) -> ExpenseRecord:
    return build_record(record_id, ExpenseInput(amount=amount, date=day, recurring=recurring, freq=freq))


class TestParseAmount:
    """Tests for parse_amount."""

    def test_parses_string(self) -> None:
        """Should convert a decimal string to cents."""
        assert parse_amount("12.34") == Money(1234)

    def test_parses_whole_number(self) -> None:
        """Should accept integers."""
        assert parse_amount(5) == Money(500)

    def test_parses_float_without_drift(self) -> None:
        """Should not lose a cent to binary floating point."""
        assert parse_amount(0.1 + 0.2) == Money(30)
        assert parse_amount(19.99) == Money(1999)

    def test_rounds_half_up(self) -> None:
        """Should round sub-cent input half-up."""
        assert parse_amount("1.005") == Money(101)
        assert parse_amount(Decimal("2.004")) == Money(200)

    def test_strips_whitespace(self) -> None:
        """Should ignore surrounding whitespace."""
        assert parse_amount("  4.50 ") == Money(450)

    @pytest.mark.parametrize("value", ["0", "-3", "0.001", "abc", "", "nan", "inf", "-inf", True])
    def test_rejects_invalid(self, value: object) -> None:
        """Should reject zero, negative, non-numeric and non-finite amounts."""
        with pytest.raises(InvalidAmount):
            parse_amount(value)  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", ["1e30", "123456789012345678901234567890", 1e40])
    def test_rejects_amounts_beyond_decimal_precision(self, value: object) -> None:
        """Should report oversized amounts as InvalidAmount, not a decimal error."""
        with pytest.raises(InvalidAmount, match="too large"):
            parse_amount(value)  # type: ignore[arg-type]

    def test_format_money(self) -> None:
        """Should render cents with exactly two decimals."""
        assert format_money(Money(1234)) == "12.34"
        assert format_money(Money(500)) == "5.00"
        assert format_money(Money(7)) == "0.07"


class TestBuildRecord:
    """Tests for build_record and apply_edit."""

    def test_one_off_has_no_projection(self) -> None:
        """Should leave freq and next_due empty for one-off records."""
        record = build_record(1, ExpenseInput(amount="3", date="2025-05-20", freq="monthly"))

        assert record.recurring is False
        assert record.freq is None
        assert record.next_due is None

    def test_recurring_monthly_clamps(self) -> None:
        """Should project Jan 31 to the last day of February."""
        record = make(1, "10", "2025-01-31", recurring=True, freq="monthly")

        assert record.freq is Frequency.MONTHLY
        assert record.next_due == "2025-02-28"

    def test_recurring_weekly(self) -> None:
        """Should project one week ahead."""
        assert make(1, "10", "2025-05-20", recurring=True, freq="weekly").next_due == "2025-05-27"

    def test_recurring_yearly_leap_day(self) -> None:
        """Should project Feb 29 to Feb 28 of the next year."""
        assert make(1, "10", "2024-02-29", recurring=True, freq="yearly").next_due == "2025-02-28"

    def test_recurring_without_frequency_rejected(self) -> None:
        """Should require a frequency for recurring records."""
        with pytest.raises(InvalidFrequency):
            make(1, "10", "2025-05-20", recurring=True, freq=None)

    def test_invalid_date_rejected(self) -> None:
        """Should reject impossible dates."""
        with pytest.raises(InvalidDate):
            make(1, "10", "2025-02-30")

    def test_note_is_stripped(self) -> None:
        """Should strip surrounding whitespace from the note."""
        record = build_record(1, ExpenseInput(amount="1", date="2025-05-20", note="  coffee "))
        assert record.note == "coffee"

    def test_edit_to_one_off_clears_projection(self) -> None:
        """Should drop freq and next_due when recurring is switched off."""
        record = make(7, "10", "2025-01-31", recurring=True, freq="monthly")
        edited = apply_edit(record, ExpenseInput(amount="10", date="2025-01-31", recurring=False, freq="monthly"))

        assert edited.id == 7
        assert edited.freq is None
        assert edited.next_due is None

    def test_edit_to_recurring_projects_from_record_date(self) -> None:
        """Should compute next_due from the record's own date, even in the past."""
        record = make(7, "10", "2020-03-15")
        edited = apply_edit(record, ExpenseInput(amount="10", date="2020-03-15", recurring=True, freq="monthly"))

        assert edited.next_due == "2020-04-15"


class TestSerialization:
    """Tests for ExpenseRecord.to_dict/from_dict."""

    def test_to_dict_uses_stored_field_names(self) -> None:
        """Should write camelCase nextDue and a two-decimal amount string."""
        record = make(5, "9.5", "2025-01-31", recurring=True, freq="monthly")

        assert record.to_dict() == {
            "id": 5,
            "amount": "9.50",
            "note": "",
            "date": "2025-01-31",
            "recurring": True,
            "freq": "monthly",
            "nextDue": "2025-02-28",
        }

    def test_from_dict_accepts_numeric_amount(self) -> None:
        """Should read float amounts written by older releases."""
        record = ExpenseRecord.from_dict(
            {"id": 1, "amount": 12.1, "note": None, "date": "2025-05-20", "recurring": False, "freq": "monthly"}
        )

        assert record.amount == Money(1210)
        assert record.note == ""
        assert record.freq is None


class TestFilterByPeriod:
    """Tests for filter_by_period."""

    def setup_method(self) -> None:
        self.records = [
            make(1, "1", "2025-05-20"),
            make(2, "2", "2025-05-14"),
            make(3, "4", "2025-05-13"),
            make(4, "8", "2025-05-01", recurring=True, freq="monthly"),
            make(5, "16", "2025-04-30"),
            make(6, "32", "2025-01-01", recurring=True, freq="yearly"),
            make(7, "64", "2024-12-31"),
            make(8, "128", "2025-05-21"),
        ]

    def test_today(self) -> None:
        """Should match only today's date."""
        view = filter_by_period(self.records, Period.TODAY, TODAY)
        assert [r.id for r in view.items] == [1]
        assert view.total == Money(100)

    def test_week_includes_six_days_back(self) -> None:
        """Should include today-6 and exclude today-7."""
        view = filter_by_period(self.records, Period.WEEK, TODAY)
        assert [r.id for r in view.items] == [1, 2]
        assert view.total == Money(300)

    def test_month(self) -> None:
        """Should include the first of the month and exclude the previous month."""
        view = filter_by_period(self.records, "month", TODAY)
        assert [r.id for r in view.items] == [1, 2, 3, 4]
        assert view.total == Money(1500)

    def test_year(self) -> None:
        """Should include Jan 1 and exclude future dates."""
        view = filter_by_period(self.records, Period.YEAR, TODAY)
        assert [r.id for r in view.items] == [1, 2, 3, 4, 5, 6]
        assert view.total == Money(6300)

    def test_spending_and_recurring_split(self) -> None:
        """Should split the total by recurring flag."""
        view = filter_by_period(self.records, Period.YEAR, TODAY)
        assert view.spending_total == Money(2300)
        assert view.recurring_total == Money(4000)
        assert view.spending_total + view.recurring_total == view.total

    def test_empty(self) -> None:
        """Should return an empty view with zero total."""
        view = filter_by_period([], Period.MONTH, TODAY)
        assert view.items == ()
        assert view.total == Money(0)

    def test_invalid_period(self) -> None:
        """Should reject unknown periods."""
        with pytest.raises(ValueError):
            filter_by_period(self.records, "decade", TODAY)


class TestGroupByDate:
    """Tests for group_by_date."""

    def test_sorted_descending_with_totals(self) -> None:
        """Should group same-date records and sort dates newest first."""
        records = [
            make(1, "1.10", "2025-05-01"),
            make(2, "2.20", "2025-05-03"),
            make(3, "3.30", "2025-05-01"),
            make(4, "4.40", "2025-04-30"),
        ]

        groups = group_by_date(records)

        assert [g.date for g in groups] == ["2025-05-03", "2025-05-01", "2025-04-30"]
        assert [r.id for r in groups[1].items] == [1, 3]
        assert groups[1].total == Money(440)

    def test_empty(self) -> None:
        """Should return no groups for no records."""
        assert group_by_date([]) == []


class TestDaysUntil:
    """Tests for days_until."""

    def test_due_today(self) -> None:
        assert days_until("2025-05-20", TODAY) == "due today"

    def test_tomorrow(self) -> None:
        assert days_until("2025-05-21", TODAY) == "tomorrow"

    def test_yesterday_is_one_day_overdue(self) -> None:
        assert days_until("2025-05-19", TODAY) == "1d overdue"

    def test_overdue_across_month(self) -> None:
        assert days_until("2025-04-30", TODAY) == "20d overdue"

    def test_future(self) -> None:
        assert days_until("2025-05-22", TODAY) == "in 2d"


class TestTimeProgress:
    """Tests for time_progress."""

    def test_today_midday(self) -> None:
        """Should be half way through the day at noon."""
        assert time_progress(Period.TODAY, datetime(2025, 5, 20, 12, 0)) == pytest.approx(0.5)

    def test_today_midnight(self) -> None:
        """Should be zero at midnight."""
        assert time_progress(Period.TODAY, datetime(2025, 5, 20, 0, 0)) == 0.0

    def test_week_starts_on_sunday(self) -> None:
        """Should be zero at Sunday midnight and 1/7 at Monday midnight."""
        assert time_progress(Period.WEEK, datetime(2025, 5, 18, 0, 0)) == 0.0
        assert time_progress(Period.WEEK, datetime(2025, 5, 19, 0, 0)) == pytest.approx(1 / 7)

    def test_week_saturday_evening(self) -> None:
        """Should approach one at the end of Saturday."""
        progress = time_progress(Period.WEEK, datetime(2025, 5, 24, 18, 0))
        assert progress == pytest.approx((6 + 0.75) / 7)

    def test_month_first_day(self) -> None:
        """Should be zero at the start of the first day."""
        assert time_progress(Period.MONTH, datetime(2025, 2, 1, 0, 0)) == 0.0

    def test_month_end_of_february(self) -> None:
        """Should use 28 days for February in a non-leap year."""
        progress = time_progress(Period.MONTH, datetime(2025, 2, 28, 12, 0))
        assert progress == pytest.approx(27.5 / 28)

    def test_month_end_of_leap_february(self) -> None:
        """Should use 29 days for February in a leap year."""
        progress = time_progress(Period.MONTH, datetime(2024, 2, 29, 12, 0))
        assert progress == pytest.approx(28.5 / 29)

    def test_year_start(self) -> None:
        """Should be zero on January 1."""
        assert time_progress(Period.YEAR, datetime(2025, 1, 1, 15, 0)) == 0.0

    def test_year_end_non_leap(self) -> None:
        """Should divide by 365 in a non-leap year."""
        assert time_progress(Period.YEAR, datetime(2025, 12, 31, 0, 0)) == pytest.approx(364 / 365)

    def test_year_end_leap(self) -> None:
        """Should divide by 366 in a leap year."""
        assert time_progress(Period.YEAR, datetime(2024, 12, 31, 0, 0)) == pytest.approx(365 / 366)

    def test_always_in_unit_range(self) -> None:
        """Should stay between 0 and 1 for every period."""
        for period in Period:
            value = time_progress(period, datetime(2024, 12, 31, 23, 59))
            assert 0.0 <= value <= 1.0


class TestIdsAndUpcoming:
    """Tests for next_record_id and upcoming_recurring."""

    def test_next_id_uses_clock(self) -> None:
        """Should use the clock when it is ahead of existing ids."""
        assert next_record_id([1, 2], 1000) == 1000

    def test_next_id_bumps_past_collision(self) -> None:
        """Should stay unique when the clock repeats or goes backwards."""
        assert next_record_id([1000, 999], 1000) == 1001

    def test_upcoming_sorted_by_next_due(self) -> None:
        """Should list only recurring records, soonest first."""
        records = [
            make(1, "1", "2025-05-01", recurring=True, freq="yearly"),
            make(2, "1", "2025-05-10", recurring=True, freq="weekly"),
            make(3, "1", "2025-05-11"),
        ]

        assert [r.id for r in upcoming_recurring(records)] == [2, 1]
