"""Summary and recurring commands for viewing the ledger."""

import sys
from datetime import date, datetime

from rich.console import Console
from rich.table import Table

from moola.app import MoolaApp
from moola.commands.security import run_unlocked
from moola.dates import period_label
from moola.domain.formatting import format_amount, format_large_amount
from moola.domain.ledger import ExpenseRecord, days_until, group_by_date, time_progress
from moola.domain.models import Money, Period
from moola.reminders import Preferences, backup_overdue_message, is_backup_overdue

console = Console()

PROGRESS_BAR_WIDTH = 30


def progress_bar(fraction: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render a fraction in [0, 1] as a text bar."""
    filled = round(fraction * width)
    return "█" * filled + "░" * (width - filled)


def _money(amount: Money, prefs: Preferences) -> str:
    return format_amount(amount, prefs.currency_symbol, prefs.use_eu_format, prefs.hide_decimals)


def _headline(total: Money, prefs: Preferences) -> str:
    parts = format_large_amount(total, prefs.use_eu_format, prefs.hide_decimals)
    headline = f"[bold]{prefs.currency_symbol}{parts.whole}[/bold]"
    if parts.decimal is not None:
        headline += f"[dim]{parts.separator}{parts.decimal}[/dim]"
    return headline


def _records_table(title: str, records: list[ExpenseRecord], prefs: Preferences, today: date) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("ID", style="dim")
    table.add_column("Amount", justify="right")
    table.add_column("Note", style="white")
    table.add_column("Repeats", style="magenta")

    for record in records:
        repeats = ""
        if record.recurring and record.next_due:
            repeats = f"↻ {record.freq.value} · {days_until(record.next_due, today)}"
        table.add_row(str(record.id), _money(record.amount, prefs), record.note or "[dim]-[/dim]", repeats)

    return table


def summary_command(period: str = "today") -> None:
    """Show total, spending split and records for a period.

    Args:
        period: today, week, month or year.
    """
    try:
        selected = Period(period)
    except ValueError:
        console.print(f"[red]Invalid period '{period}'. Use today, week, month or year.[/red]")
        sys.exit(1)

    async def run(app: MoolaApp) -> None:
        prefs = await app.preferences.load()
        last_export = await app.preferences.last_export()
        now = datetime.now()
        today = now.date()

        view = app.ledger.view(selected, today)

        console.print(f"[dim]{period_label(selected, today)}[/dim]")
        console.print(_headline(view.total, prefs))
        console.print(
            f"Spending {_money(view.spending_total, prefs)}  ·  Recurring {_money(view.recurring_total, prefs)}"
        )
        progress = time_progress(selected, now)
        console.print(f"[cyan]{progress_bar(progress)}[/cyan] [dim]{progress:.0%} of the {selected.value}[/dim]")
        console.print()

        if not view.items:
            console.print("[yellow]No expenses in this period[/yellow]")
        elif selected is Period.TODAY:
            console.print(_records_table("Today", list(view.items), prefs, today))
        else:
            for group in group_by_date(view.items):
                console.print(
                    _records_table(f"{group.date}  {_money(group.total, prefs)}", group.items, prefs, today)
                )

        if is_backup_overdue(prefs, last_export, today):
            console.print(f"\n[yellow]{backup_overdue_message(last_export, today)}. Run 'moola export'.[/yellow]")

    run_unlocked(run)


def recurring_command() -> None:
    """List recurring expenses by next due date."""

    async def run(app: MoolaApp) -> None:
        prefs = await app.preferences.load()
        today = date.today()
        upcoming = app.ledger.upcoming()

        if not upcoming:
            console.print("[yellow]No recurring expenses[/yellow]")
            return

        table = Table(title="Recurring expenses")
        table.add_column("Next due", style="cyan")
        table.add_column("When")
        table.add_column("Amount", justify="right")
        table.add_column("Every", style="magenta")
        table.add_column("Note")
        table.add_column("ID", style="dim")

        for record in upcoming:
            when = days_until(record.next_due, today)
            style = "red" if when.endswith("overdue") else "green" if when in ("due today", "tomorrow") else "white"
            table.add_row(
                record.next_due,
                f"[{style}]{when}[/{style}]",
                _money(record.amount, prefs),
                record.freq.value,
                record.note or "[dim]-[/dim]",
                str(record.id),
            )

        console.print(table)

    run_unlocked(run)
