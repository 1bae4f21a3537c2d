"""User preferences, daily reminders and backup reminders.

The ledger and lock never schedule anything themselves. Preferences produce a
ReminderRequest, and apply_reminder_request is the one place that talks to a
NotificationGateway.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from datetime import date
from typing import Any, Protocol

from moola.dates import format_date, parse_date
from moola.errors import PersistenceError
from moola.store import LAST_EXPORT_KEY, PREFERENCES_KEY, KeyValueStore

logger = logging.getLogger(__name__)

BACKUP_INTERVAL_DAYS = {"weekly": 7, "monthly": 30}


@dataclass(frozen=True)
class Preferences:
    """Immutable user preferences stored as JSON in the general store."""

    name: str = ""
    currency_code: str = "USD"
    currency_symbol: str = "$"
    use_eu_format: bool = False
    hide_decimals: bool = False
    daily_reminder_enabled: bool = False
    reminder_hour: int = 20
    reminder_minute: int = 0
    backup_reminder_enabled: bool = False
    backup_reminder_freq: str = "weekly"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Preferences":
        """Build preferences from stored JSON.

        Unknown keys are ignored. A value of the wrong type, or a reminder time
        out of range, falls back to the default for that field.
        """
        defaults = cls()
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in raw:
                continue
            value = raw[f.name]
            expected = type(getattr(defaults, f.name))
            if isinstance(value, expected) and not (expected is int and isinstance(value, bool)):
                values[f.name] = value
            else:
                logger.warning("Ignoring stored preference %s=%r", f.name, value)

        if not 0 <= values.get("reminder_hour", defaults.reminder_hour) < 24:
            logger.warning("Ignoring stored reminder hour %r", values.pop("reminder_hour"))
        if not 0 <= values.get("reminder_minute", defaults.reminder_minute) < 60:
            logger.warning("Ignoring stored reminder minute %r", values.pop("reminder_minute"))

        return cls(**values)


@dataclass(frozen=True)
class ReminderRequest:
    """What the notification layer should do for the daily reminder."""

    should_schedule: bool
    hour: int = 0
    minute: int = 0


class NotificationGateway(Protocol):
    """Local notification capability of the host platform."""

    async def request_permission(self) -> bool: ...

    async def schedule_daily(self, hour: int, minute: int) -> None: ...

    async def cancel_all(self) -> None: ...


def parse_reminder_time(value: str) -> tuple[int, int]:
    """Parse an HH:MM string.

    Raises:
        ValueError: If the time is malformed or out of range.
    """
    hour_str, _, minute_str = value.strip().partition(":")
    hour, minute = int(hour_str), int(minute_str or 0)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time: {value!r}")
    return hour, minute


def reminder_request(prefs: Preferences) -> ReminderRequest:
    """Daily reminder request derived from preferences."""
    if not prefs.daily_reminder_enabled:
        return ReminderRequest(should_schedule=False)
    return ReminderRequest(should_schedule=True, hour=prefs.reminder_hour, minute=prefs.reminder_minute)


async def apply_reminder_request(gateway: NotificationGateway, request: ReminderRequest) -> bool:
    """Bring scheduled notifications in line with a request.

    Existing reminders are always cancelled first. Returns False when the
    reminder should be scheduled but permission was denied, so the caller can
    switch the preference off.
    """
    await gateway.cancel_all()
    if not request.should_schedule:
        return True

    if not await gateway.request_permission():
        logger.info("Notification permission denied, daily reminder not scheduled")
        return False

    await gateway.schedule_daily(request.hour, request.minute)
    logger.info("Daily reminder scheduled for %02d:%02d", request.hour, request.minute)
    return True


def days_since(last: str, today: date) -> int:
    return (today - parse_date(last)).days


def is_backup_overdue(prefs: Preferences, last_export: str | None, today: date) -> bool:
    """Whether the backup reminder should fire.

    Never overdue when the reminder is off or nothing has been exported yet.
    """
    if not prefs.backup_reminder_enabled or not last_export:
        return False
    interval = BACKUP_INTERVAL_DAYS.get(prefs.backup_reminder_freq, BACKUP_INTERVAL_DAYS["monthly"])
    return days_since(last_export, today) >= interval


def backup_overdue_message(last_export: str | None, today: date) -> str:
    if not last_export:
        return "You haven't backed up your data yet"
    days = days_since(last_export, today)
    if days == 1:
        return "Last backup was yesterday"
    return f"Last backup was {days} days ago"


class PreferencesRepository:
    """Loads and saves Preferences and the last export date.

    Args:
        store: General key-value store.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def load(self) -> Preferences:
        """Load preferences, falling back to defaults when none are stored.

        Raises:
            PersistenceError: If stored preferences are not a JSON object.
        """
        payload = await self._store.get(PREFERENCES_KEY)
        if not payload:
            return Preferences()
        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Stored preferences are not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise PersistenceError("Stored preferences are not an object")
        return Preferences.from_dict(raw)

    async def save(self, prefs: Preferences) -> None:
        await self._store.set(PREFERENCES_KEY, json.dumps(prefs.to_dict()))

    async def update(self, **changes: Any) -> Preferences:
        """Load, change some fields, save and return the new preferences."""
        prefs = replace(await self.load(), **changes)
        await self.save(prefs)
        return prefs

    async def last_export(self) -> str | None:
        return await self._store.get(LAST_EXPORT_KEY)

    async def mark_exported(self, today: date) -> str:
        stamp = format_date(today)
        await self._store.set(LAST_EXPORT_KEY, stamp)
        return stamp

    async def clear(self) -> None:
        await self._store.remove([PREFERENCES_KEY, LAST_EXPORT_KEY])
