"""CLI entry point for moola."""

import sys
import tomllib

import typer
from rich.console import Console

from moola.commands.admin import export_command, init_command
from moola.commands.expenses import add_command, clear_command, delete_command, edit_command
from moola.commands.preferences import prefs_command, remind_command
from moola.commands.report import recurring_command, summary_command
from moola.commands.security import lock_command
from moola.config import get_config_path, get_setting, load_config
from moola.logs import setup_logging

console = Console()

app = typer.Typer(
    name="moola",
    help="moola - A quiet little ledger for your everyday spending",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """moola - A quiet little ledger for your everyday spending."""
    try:
        config = load_config()
    except tomllib.TOMLDecodeError as e:
        console.print(f"[red]Error: invalid config file {get_config_path()}: {e}[/red]")
        console.print("[dim]Fix or delete the file, then try again.[/dim]")
        sys.exit(1)

    level = "DEBUG" if verbose else str(get_setting(config, "log_level", "WARNING"))
    setup_logging(level)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing data and config"),
) -> None:
    """Initialize moola storage and configuration."""
    init_command(force)


@app.command()
def add(
    amount: str,
    note: str = typer.Option("", "--note", "-n", help="What it was for"),
    date: str = typer.Option(None, "--date", "-d", help="Date of the expense (default: today)"),
    every: str = typer.Option(None, "--every", help="Repeat weekly, monthly or yearly"),
) -> None:
    """Record an expense."""
    add_command(amount, note, date, every)


@app.command()
def edit(
    record_id: int,
    amount: str = typer.Option(None, "--amount", "-a", help="New amount"),
    note: str = typer.Option(None, "--note", "-n", help="New note"),
    date: str = typer.Option(None, "--date", "-d", help="New date"),
    every: str = typer.Option(None, "--every", help="Repeat weekly, monthly or yearly"),
    once: bool = typer.Option(False, "--once", help="Make it a one-off expense"),
) -> None:
    """Edit an expense."""
    edit_command(record_id, amount, note, date, every, once)


@app.command()
def delete(record_id: int) -> None:
    """Delete an expense."""
    delete_command(record_id)


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    everything: bool = typer.Option(False, "--all", help="Also reset your preferences"),
) -> None:
    """Delete all your expenses."""
    clear_command(yes, everything)


@app.command()
def summary(
    period: str = typer.Option("today", "--period", "-p", help="today, week, month or year"),
) -> None:
    """Show your spending for a period."""
    summary_command(period)


@app.command()
def recurring() -> None:
    """Show your recurring expenses and when they are due."""
    recurring_command()


@app.command()
def export(
    output_dir: str = typer.Option(None, "--output", "-o", help="Export directory (default: current directory)"),
) -> None:
    """Export your expenses to CSV."""
    export_command(output_dir)


@app.command()
def lock(
    action: str = typer.Argument("status", help="status, pin, biometric, both, off, change-pin or reset"),
) -> None:
    """Manage your app lock."""
    lock_command(action)


@app.command()
def remind(
    at: str = typer.Option(None, "--at", help="Daily reminder time (HH:MM)"),
    off: bool = typer.Option(False, "--off", help="Turn the daily reminder off"),
    backup: str = typer.Option(None, "--backup", help="Backup reminder: weekly, monthly or off"),
) -> None:
    """Configure your reminders."""
    remind_command(at, off, backup)


@app.command()
def prefs(
    name: str = typer.Option(None, "--name", help="Your name"),
    currency: str = typer.Option(None, "--currency", help="Currency code (e.g. EUR)"),
    symbol: str = typer.Option(None, "--symbol", help="Currency symbol (e.g. €)"),
    eu_format: bool = typer.Option(None, "--eu/--no-eu", help="Use 1.234,56 number format"),
    hide_decimals: bool = typer.Option(None, "--hide-decimals/--show-decimals", help="Round amounts to whole units"),
) -> None:
    """Show or change your display preferences."""
    prefs_command(name, currency, symbol, eu_format, hide_decimals)


if __name__ == "__main__":
    app()
