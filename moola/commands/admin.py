"""Admin commands for init and export."""

import asyncio
import sqlite3
import sys
from datetime import date
from pathlib import Path

from rich.console import Console

from moola.app import MoolaApp, build_app
from moola.commands.security import run_unlocked
from moola.config import create_default_config, get_config_path
from moola.errors import PersistenceError
from moola.export import write_export
from moola.store import get_db_path, get_secure_db_path, init_database

console = Console()


def run_full_init(data_dir: Path, config_path: Path) -> None:
    """Initialize new databases and config."""
    db_path = get_db_path(data_dir)
    secure_path = get_secure_db_path(data_dir)

    console.print(f"[cyan]Initializing ledger at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Ledger initialized")

    console.print(f"[cyan]Initializing secure store at {secure_path}...[/cyan]")
    init_database(secure_path, secure=True)
    console.print("[green]✓[/green] Secure store initialized (permissions: 600)")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")


def init_command(force: bool = False) -> None:
    """Initialize moola databases and configuration."""
    config_path = get_config_path()
    data_dir = build_app().data_dir
    db_path = get_db_path(data_dir)

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        # Guard: refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Ledger already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'moola init --force' to overwrite[/yellow]")
            sys.exit(1)

        if force and db_exists:
            # Wipe everything, including a configured lock
            for path in (db_path, get_secure_db_path(data_dir)):
                path.unlink(missing_ok=True)

        run_full_init(data_dir, config_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def export_command(output_dir: str | None = None) -> None:
    """Export all expenses to CSV."""
    target_dir = Path(output_dir).expanduser() if output_dir else Path.cwd()

    async def run(app: MoolaApp) -> None:
        prefs = await app.preferences.load()
        today = date.today()

        try:
            path = await asyncio.to_thread(
                write_export, app.ledger.records, target_dir, today, prefs.currency_code, prefs.use_eu_format
            )
        except OSError as e:
            raise PersistenceError(f"Export failed: {e}") from e

        await app.preferences.mark_exported(today)
        console.print(f"[green]✓[/green] Exported {len(app.ledger.records)} expenses to: {path}")

    run_unlocked(run)
