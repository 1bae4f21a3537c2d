"""Process-level wiring: build the ledger, lock and preferences once."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from moola.config import get_setting, load_config
from moola.engine import LedgerEngine
from moola.reminders import PreferencesRepository
from moola.security import DEFAULT_STORE_TIMEOUT, BiometricGateway, LockStateMachine
from moola.store import SqliteKeyValueStore, get_data_dir, get_db_path, get_secure_db_path


@dataclass
class MoolaApp:
    """Handles to the stateful owners, passed explicitly to whoever needs them."""

    ledger: LedgerEngine
    lock: LockStateMachine
    preferences: PreferencesRepository
    data_dir: Path


def build_app(
    config: dict[str, Any] | None = None,
    biometrics: BiometricGateway | None = None,
) -> MoolaApp:
    """Construct the application objects from configuration.

    Args:
        config: Loaded configuration. If None, loads from the default location.
        biometrics: Biometric capability; defaults to none available.

    Returns:
        MoolaApp with SQLite-backed general and secure stores.
    """
    if config is None:
        config = load_config()

    data_dir = get_data_dir(get_setting(config, "storage.data_dir") or None)
    general = SqliteKeyValueStore(get_db_path(data_dir))
    secure = SqliteKeyValueStore(get_secure_db_path(data_dir), secure=True)
    timeout = float(get_setting(config, "security.store_timeout", DEFAULT_STORE_TIMEOUT))

    return MoolaApp(
        ledger=LedgerEngine(general),
        lock=LockStateMachine(secure, biometrics=biometrics, timeout=timeout),
        preferences=PreferencesRepository(general),
        data_dir=data_dir,
    )
