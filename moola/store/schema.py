"""Database locations and schema initialization."""

import os
import sqlite3
from pathlib import Path

GENERAL_DB_NAME = "moola.db"
SECURE_DB_NAME = "secure.db"


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_data_dir(override: str | None = None) -> Path:
    """Get the data directory (XDG compliant unless overridden in config)."""
    if override:
        return Path(override).expanduser()
    return get_xdg_data_home() / "moola"


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the general store database path."""
    return (data_dir or get_data_dir()) / GENERAL_DB_NAME


def get_secure_db_path(data_dir: Path | None = None) -> Path:
    """Get the secure store database path."""
    return (data_dir or get_data_dir()) / SECURE_DB_NAME


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path, secure: bool = False) -> None:
    """Initialize a key-value database with the required schema.

    Args:
        db_path: Path to the database file.
        secure: Restrict the file to the owner (0o600).

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )
        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()

    if secure:
        os.chmod(db_path, 0o600)
