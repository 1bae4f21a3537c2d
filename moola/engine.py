"""LedgerEngine: owner of the expense list and its persisted mirror.

Mutations build the new list, write it to the general store, and only then
replace the in-memory list. A validation or persistence failure therefore
leaves both the list and the stored copy exactly as they were.
"""

import json
import logging
import time
from datetime import date
from typing import Callable

from moola.domain.ledger import (
    ExpenseInput,
    ExpenseRecord,
    PeriodView,
    apply_edit,
    build_record,
    filter_by_period,
    next_record_id,
    upcoming_recurring,
)
from moola.domain.models import Period
from moola.errors import NotFound, PersistenceError, ValidationError
from moola.store import EXPENSES_KEY, KeyValueStore

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def decode_records(payload: str | None) -> list[ExpenseRecord]:
    """Decode the stored JSON array of records.

    Records that fail validation are skipped with a warning.

    Raises:
        PersistenceError: If the payload is not a JSON array.
    """
    if not payload:
        return []

    try:
        raw_records = json.loads(payload)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Stored expenses are not valid JSON: {e}") from e

    if not isinstance(raw_records, list):
        raise PersistenceError("Stored expenses are not a list")

    records: list[ExpenseRecord] = []
    for raw in raw_records:
        try:
            records.append(ExpenseRecord.from_dict(raw))
        except (ValidationError, KeyError, TypeError, ValueError, ArithmeticError) as e:
            logger.warning("Skipping unreadable expense %r: %s", raw, e)
    return records


def encode_records(records: list[ExpenseRecord]) -> str:
    return json.dumps([r.to_dict() for r in records])


class LedgerEngine:
    """Maintains the expense list and exposes period-scoped views.

    Args:
        store: General key-value store holding the expense list.
        clock: Returns the current time in epoch milliseconds (used for ids).
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = _now_ms) -> None:
        self._store = store
        self._clock = clock
        self._records: list[ExpenseRecord] = []

    @property
    def records(self) -> tuple[ExpenseRecord, ...]:
        """Snapshot of all records, most recently added first."""
        return tuple(self._records)

    async def load(self) -> list[ExpenseRecord]:
        """Replace the in-memory list with the stored one."""
        self._records = decode_records(await self._store.get(EXPENSES_KEY))
        logger.debug("Loaded %d expenses", len(self._records))
        return list(self._records)

    async def _commit(self, records: list[ExpenseRecord]) -> None:
        await self._store.set(EXPENSES_KEY, encode_records(records))
        self._records = records

    def get(self, record_id: int) -> ExpenseRecord:
        """Look up a record by id.

        Raises:
            NotFound: If no record has this id.
        """
        for record in self._records:
            if record.id == record_id:
                return record
        raise NotFound(record_id)

    async def add(self, data: ExpenseInput) -> ExpenseRecord:
        """Validate and prepend a new record.

        Raises:
            ValidationError: If amount, date or frequency is invalid.
            PersistenceError: If the store write fails.
        """
        record_id = next_record_id((r.id for r in self._records), self._clock())
        record = build_record(record_id, data)
        await self._commit([record, *self._records])
        logger.debug("Added expense %d (%s on %s)", record.id, record.amount, record.date)
        return record

    async def edit(self, record_id: int, data: ExpenseInput) -> ExpenseRecord:
        """Replace a record's fields, recomputing its next due date.

        Raises:
            NotFound: If no record has this id.
            ValidationError: If amount, date or frequency is invalid.
            PersistenceError: If the store write fails.
        """
        edited = apply_edit(self.get(record_id), data)
        await self._commit([edited if r.id == record_id else r for r in self._records])
        logger.debug("Edited expense %d", record_id)
        return edited

    async def remove(self, record_id: int) -> bool:
        """Delete a record. Returns False if it did not exist."""
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) == len(self._records):
            return False
        await self._commit(remaining)
        logger.debug("Removed expense %d", record_id)
        return True

    async def clear_all(self) -> None:
        """Delete every record."""
        await self._store.remove([EXPENSES_KEY])
        self._records = []
        logger.debug("Cleared all expenses")

    def view(self, period: Period | str, today: date) -> PeriodView:
        """Records and totals for a period window ending today."""
        return filter_by_period(self._records, period, today)

    def upcoming(self) -> list[ExpenseRecord]:
        """Recurring records, soonest next due date first."""
        return upcoming_recurring(self._records)
