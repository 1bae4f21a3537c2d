"""Exception types for moola.

Every error raised by the ledger, the lock machine or the stores derives from
MoolaError, so the CLI can report any of them without crashing.
"""


class MoolaError(Exception):
    """Base class for all moola errors."""


class ValidationError(MoolaError):
    """Rejected input. Raised before any state is changed."""


class InvalidAmount(ValidationError):
    """Amount is missing, not a number, not finite, or not positive."""


class InvalidDate(ValidationError):
    """Date is not a real YYYY-MM-DD calendar date."""


class InvalidFrequency(ValidationError):
    """Recurring expense without a known frequency."""


class InvalidPin(ValidationError):
    """PIN is not 4-6 digits."""


class NotFound(MoolaError):
    """No expense record with the given id."""

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Expense {record_id} not found")
        self.record_id = record_id


class PersistenceError(MoolaError):
    """Reading or writing a store failed (I/O, corrupt data or timeout)."""


class AppLocked(MoolaError):
    """Lock settings cannot change until the app is unlocked."""


class InconsistentLockState(MoolaError):
    """Lock method configured without a usable credential.

    Never raised to callers; carried as the reason of a healed load result.
    """
