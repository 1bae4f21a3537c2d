"""Store layer - provides persistence for the application.

This module re-exports the public store API for easy importing.
"""

from moola.store.kv import KeyValueStore, SqliteKeyValueStore
from moola.store.schema import (
    database_exists,
    get_data_dir,
    get_db_path,
    get_secure_db_path,
    init_database,
)

# Keys in the general store
EXPENSES_KEY = "@moola/expenses"
PREFERENCES_KEY = "@moola/preferences"
LAST_EXPORT_KEY = "@moola/last_export"

# Keys in the secure store
PIN_KEY = "moola_pin"
LOCK_METHOD_KEY = "moola_lock_method"

__all__ = [
    # Keys
    "EXPENSES_KEY",
    "LAST_EXPORT_KEY",
    "LOCK_METHOD_KEY",
    "PIN_KEY",
    "PREFERENCES_KEY",
    # Stores
    "KeyValueStore",
    "SqliteKeyValueStore",
    # Schema
    "database_exists",
    "get_data_dir",
    "get_db_path",
    "get_secure_db_path",
    "init_database",
]
