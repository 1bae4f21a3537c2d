"""Expense management commands (add, edit, delete, clear)."""

import sys
from datetime import date

import pandas as pd
import typer
from rich.console import Console

from moola.app import MoolaApp
from moola.commands.security import run_unlocked
from moola.dates import format_date
from moola.domain.formatting import format_amount
from moola.domain.ledger import ExpenseInput, ExpenseRecord, days_until, format_money
from moola.reminders import Preferences

console = Console()


def normalize_date(value: str | None) -> str:
    """Normalize a user-entered date to YYYY-MM-DD (defaults to today)."""
    if not value:
        return format_date(date.today())

    try:
        return pd.to_datetime(value, dayfirst=True).strftime("%Y-%m-%d")
    except (ValueError, OverflowError) as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)


def print_record(record: ExpenseRecord, prefs: Preferences, today: date) -> None:
    """Print a record's fields under a confirmation line."""
    amount = format_amount(record.amount, prefs.currency_symbol, prefs.use_eu_format, prefs.hide_decimals)
    console.print(f"  ID: {record.id}")
    console.print(f"  Date: {record.date}")
    console.print(f"  Amount: {amount}")
    if record.note:
        console.print(f"  Note: {record.note}")
    if record.recurring and record.next_due:
        console.print(f"  Repeats: {record.freq.value} (next {record.next_due}, {days_until(record.next_due, today)})")


def add_command(
    amount: str,
    note: str = "",
    date_str: str | None = None,
    every: str | None = None,
) -> None:
    """Add an expense.

    Args:
        amount: Amount in major units (e.g. 12.50).
        note: Optional note.
        date_str: Expense date (YYYY-MM-DD, DD/MM/YYYY, ...). Defaults to today.
        every: Repeat frequency (weekly, monthly, yearly) for recurring expenses.
    """
    data = ExpenseInput(
        amount=amount,
        date=normalize_date(date_str),
        note=note,
        recurring=every is not None,
        freq=every,
    )

    async def run(app: MoolaApp) -> None:
        record = await app.ledger.add(data)
        prefs = await app.preferences.load()
        console.print("[green]✓[/green] Expense added:")
        print_record(record, prefs, date.today())

    run_unlocked(run)


def edit_command(
    record_id: int,
    amount: str | None = None,
    note: str | None = None,
    date_str: str | None = None,
    every: str | None = None,
    once: bool = False,
) -> None:
    """Edit an expense. Fields left out keep their current value.

    Args:
        record_id: Expense ID (from 'moola summary').
        amount: New amount.
        note: New note.
        date_str: New date.
        every: Make the expense recurring with this frequency.
        once: Make the expense a one-off.
    """
    new_date = normalize_date(date_str) if date_str else None

    async def run(app: MoolaApp) -> None:
        current = app.ledger.get(record_id)

        recurring = current.recurring
        freq = current.freq.value if current.freq else None
        if every:
            recurring, freq = True, every
        if once:
            recurring, freq = False, None

        data = ExpenseInput(
            amount=amount if amount is not None else format_money(current.amount),
            date=new_date or current.date,
            note=note if note is not None else current.note,
            recurring=recurring,
            freq=freq,
        )
        record = await app.ledger.edit(record_id, data)
        prefs = await app.preferences.load()
        console.print(f"[green]✓[/green] Updated expense {record_id}:")
        print_record(record, prefs, date.today())

    run_unlocked(run)


def delete_command(record_id: int) -> None:
    """Delete an expense."""

    async def run(app: MoolaApp) -> None:
        if await app.ledger.remove(record_id):
            console.print(f"[green]✓[/green] Deleted expense {record_id}")
        else:
            console.print(f"[yellow]Expense {record_id} not found[/yellow]")

    run_unlocked(run)


def clear_command(yes: bool = False, everything: bool = False) -> None:
    """Delete every expense (and optionally preferences) after confirmation."""

    async def run(app: MoolaApp) -> None:
        count = len(app.ledger.records)
        what = f"all {count} expenses" + (" and your preferences" if everything else "")
        if not yes and not typer.confirm(f"Permanently delete {what}?", default=False):
            console.print("[dim]Nothing deleted[/dim]")
            return

        await app.ledger.clear_all()
        if everything:
            await app.preferences.clear()
        console.print(f"[green]✓[/green] Deleted {what}")

    run_unlocked(run)
