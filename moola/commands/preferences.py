"""Preference commands (display settings and reminders)."""

import sys

from rich.console import Console

from moola.app import MoolaApp
from moola.commands.security import run_unlocked
from moola.domain.formatting import format_amount
from moola.domain.models import Money
from moola.reminders import BACKUP_INTERVAL_DAYS, Preferences, parse_reminder_time, reminder_request

console = Console()


def print_preferences(prefs: Preferences) -> None:
    sample = format_amount(Money(123450), prefs.currency_symbol, prefs.use_eu_format, prefs.hide_decimals)
    console.print(f"  Name: {prefs.name or '[dim]-[/dim]'}")
    console.print(f"  Currency: {prefs.currency_code} ({prefs.currency_symbol})")
    console.print(f"  Amounts look like: {sample}")


def prefs_command(
    name: str | None = None,
    currency: str | None = None,
    symbol: str | None = None,
    eu_format: bool | None = None,
    hide_decimals: bool | None = None,
) -> None:
    """Show or change display preferences."""
    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = name
    if currency is not None:
        changes["currency_code"] = currency.upper()
        changes["currency_symbol"] = symbol if symbol is not None else currency.upper()
    elif symbol is not None:
        changes["currency_symbol"] = symbol
    if eu_format is not None:
        changes["use_eu_format"] = eu_format
    if hide_decimals is not None:
        changes["hide_decimals"] = hide_decimals

    async def run(app: MoolaApp) -> None:
        if changes:
            prefs = await app.preferences.update(**changes)
            console.print("[green]✓[/green] Preferences updated:")
        else:
            prefs = await app.preferences.load()
        print_preferences(prefs)

    run_unlocked(run)


def remind_command(
    at: str | None = None,
    off: bool = False,
    backup: str | None = None,
) -> None:
    """Configure the daily reminder and backup reminder.

    Args:
        at: Daily reminder time (HH:MM); turns the reminder on.
        off: Turn the daily reminder off.
        backup: Backup reminder frequency (weekly, monthly) or "off".
    """
    changes: dict[str, object] = {}

    if at is not None:
        try:
            hour, minute = parse_reminder_time(at)
        except ValueError:
            console.print(f"[red]Invalid time '{at}'. Use HH:MM (24-hour).[/red]")
            sys.exit(1)
        changes.update(daily_reminder_enabled=True, reminder_hour=hour, reminder_minute=minute)
    if off:
        changes["daily_reminder_enabled"] = False

    if backup is not None:
        if backup == "off":
            changes["backup_reminder_enabled"] = False
        elif backup in BACKUP_INTERVAL_DAYS:
            changes.update(backup_reminder_enabled=True, backup_reminder_freq=backup)
        else:
            console.print(f"[red]Invalid backup frequency '{backup}'. Use weekly, monthly or off.[/red]")
            sys.exit(1)

    async def run(app: MoolaApp) -> None:
        prefs = await app.preferences.update(**changes) if changes else await app.preferences.load()
        request = reminder_request(prefs)

        if request.should_schedule:
            console.print(f"Daily reminder: [green]on[/green] at {request.hour:02d}:{request.minute:02d}")
        else:
            console.print("Daily reminder: [dim]off[/dim]")

        if prefs.backup_reminder_enabled:
            console.print(f"Backup reminder: [green]{prefs.backup_reminder_freq}[/green]")
        else:
            console.print("Backup reminder: [dim]off[/dim]")

    run_unlocked(run)
