"""Pure functions for app-lock configuration and PIN credentials.

This module contains the functional core for the app lock:
- No I/O operations (the secure store is handled by moola.security)
- Consistency checks that decide when a stored lock must self-heal
- PIN validation, hashing and comparison
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from enum import Enum

from moola.errors import InconsistentLockState, InvalidPin

MIN_CREDENTIAL_LENGTH = 4
MIN_PIN_LENGTH = 4
MAX_PIN_LENGTH = 6

HASH_SCHEME = "pbkdf2_sha256"
HASH_ITERATIONS = 120_000


class LockMethod(str, Enum):
    """How the app is gated."""

    NONE = "none"
    PIN = "pin"
    BIOMETRIC = "biometric"
    BOTH = "both"

    @property
    def needs_credential(self) -> bool:
        return self in (LockMethod.PIN, LockMethod.BOTH)

    @property
    def uses_biometrics(self) -> bool:
        return self in (LockMethod.BIOMETRIC, LockMethod.BOTH)


@dataclass(frozen=True)
class LockConfig:
    """Immutable effective lock configuration."""

    method: LockMethod = LockMethod.NONE
    credential: str | None = None

    @property
    def enabled(self) -> bool:
        return self.method is not LockMethod.NONE


UNCONFIGURED = LockConfig()


@dataclass(frozen=True)
class Consistent:
    """Stored lock configuration passed the consistency check."""

    config: LockConfig


@dataclass(frozen=True)
class Healed:
    """Stored lock configuration was inconsistent and has been reset to none."""

    config: LockConfig
    reason: InconsistentLockState


LoadResult = Consistent | Healed


def is_usable_credential(credential: str | None) -> bool:
    """Check a stored credential is present and long enough to be a PIN or hash."""
    return credential is not None and len(credential) >= MIN_CREDENTIAL_LENGTH


def check_consistency(
    raw_method: str | None,
    credential: str | None,
    biometrics_available: bool = True,
) -> LoadResult:
    """Validate a stored (method, credential) pair.

    Args:
        raw_method: Method string read from the secure store, or None.
        credential: Credential read from the secure store, or None.
        biometrics_available: Whether the device can currently run a biometric check.

    Returns:
        Consistent with the effective config, or Healed with an unconfigured
        config when the method cannot be honoured: an unknown method, a PIN
        method without a usable credential, or a biometric-only lock on a
        device without biometrics (there would be no way back in).
    """
    if not raw_method or raw_method == LockMethod.NONE.value:
        return Consistent(UNCONFIGURED)

    try:
        method = LockMethod(raw_method)
    except ValueError:
        return Healed(UNCONFIGURED, InconsistentLockState(f"Unknown lock method {raw_method!r}"))

    if method.needs_credential and not is_usable_credential(credential):
        return Healed(
            UNCONFIGURED,
            InconsistentLockState(f"Lock method {method.value!r} requires a PIN but none was found"),
        )

    if method is LockMethod.BIOMETRIC and not biometrics_available:
        return Healed(
            UNCONFIGURED,
            InconsistentLockState("Biometric lock configured but biometrics are unavailable"),
        )

    return Consistent(LockConfig(method=method, credential=credential if method.needs_credential else None))


def validate_pin(pin: str) -> str:
    """Check a PIN is 4-6 digits.

    Raises:
        InvalidPin: If the PIN is too short, too long or not numeric.
    """
    if len(pin) < MIN_PIN_LENGTH:
        raise InvalidPin(f"PIN must be at least {MIN_PIN_LENGTH} digits")
    if len(pin) > MAX_PIN_LENGTH:
        raise InvalidPin(f"PIN must be at most {MAX_PIN_LENGTH} digits")
    if not pin.isdigit():
        raise InvalidPin("PIN must contain digits only")
    return pin


def _digest(pin: str, salt: str, iterations: int) -> str:
    return hashlib.pbkdf2_hmac("sha256", pin.encode(), bytes.fromhex(salt), iterations).hex()


def hash_pin(pin: str, salt: str | None = None, iterations: int = HASH_ITERATIONS) -> str:
    """Derive the stored credential for a PIN.

    Returns:
        String of the form ``pbkdf2_sha256$<iterations>$<salt>$<digest>``.
    """
    salt = salt or secrets.token_hex(16)
    return f"{HASH_SCHEME}${iterations}${salt}${_digest(pin, salt, iterations)}"


def verify_credential(pin: str, credential: str | None) -> bool:
    """Compare an entered PIN against a stored credential.

    Uses hmac.compare_digest so the comparison does not stop at the first
    differing character or on a length mismatch. Credentials without a ``$``
    are plaintext PINs written by older releases.
    """
    if not is_usable_credential(credential):
        return False

    if "$" not in credential:
        return hmac.compare_digest(pin.encode(), credential.encode())

    try:
        scheme, iterations, salt, expected = credential.split("$")
        if scheme != HASH_SCHEME:
            return False
        actual = _digest(pin, salt, int(iterations))
    except ValueError:
        return False

    return hmac.compare_digest(actual, expected)
