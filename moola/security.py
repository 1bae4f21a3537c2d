"""LockStateMachine: PIN/biometric gating of the app.

The machine fails open. A stored configuration that cannot be honoured is
reset to "none" on load, and any secure-store error or timeout degrades the
effective method to "none" instead of locking the user out.

Every lock/unlock decision bumps a transition counter. An async PIN check or
biometric prompt that resolves after the counter moved is discarded.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Protocol, TypeVar

from moola.domain.lock import (
    UNCONFIGURED,
    Consistent,
    Healed,
    LoadResult,
    LockConfig,
    LockMethod,
    check_consistency,
    hash_pin,
    is_usable_credential,
    validate_pin,
    verify_credential,
)
from moola.errors import AppLocked, InvalidPin, PersistenceError
from moola.store import LOCK_METHOD_KEY, PIN_KEY, KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STORE_TIMEOUT = 2.0


class LockState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURING = "configuring"
    ARMED = "armed"
    LOCKED = "locked"


class SetMethodResult(str, Enum):
    OK = "ok"
    NEEDS_CREDENTIAL = "needs_credential"
    BIOMETRIC_UNAVAILABLE = "biometric_unavailable"


class BiometricGateway(Protocol):
    """Device biometric capability (Face ID, fingerprint, ...)."""

    async def is_available(self) -> bool: ...

    async def authenticate(self, prompt: str) -> bool: ...

    def label(self) -> str: ...


class NoBiometrics:
    """Biometric gateway for devices without biometric hardware."""

    async def is_available(self) -> bool:
        return False

    async def authenticate(self, prompt: str) -> bool:
        return False

    def label(self) -> str:
        return ""


class LockStateMachine:
    """Owns the lock configuration and the locked/unlocked flag.

    Args:
        secure_store: Secure key-value store holding method and credential.
        biometrics: Biometric capability of the device.
        timeout: Upper bound in seconds for each secure-store call.
    """

    def __init__(
        self,
        secure_store: KeyValueStore,
        biometrics: BiometricGateway | None = None,
        timeout: float = DEFAULT_STORE_TIMEOUT,
    ) -> None:
        self._store = secure_store
        self._biometrics = biometrics or NoBiometrics()
        self._timeout = timeout
        self._config = UNCONFIGURED
        self._state = LockState.UNCONFIGURED
        self._pending_method: LockMethod | None = None
        self._transition = 0

    @property
    def config(self) -> LockConfig:
        return self._config

    @property
    def method(self) -> LockMethod:
        return self._config.method

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is LockState.LOCKED

    @property
    def pending_method(self) -> LockMethod | None:
        """Method waiting for a PIN while CONFIGURING."""
        return self._pending_method

    @property
    def transition(self) -> int:
        return self._transition

    def biometric_label(self) -> str:
        return self._biometrics.label()

    async def biometric_available(self) -> bool:
        try:
            return await self._biometrics.is_available()
        except Exception as e:
            logger.warning("Biometric availability check failed: %s", e)
            return False

    def _set_state(self, state: LockState) -> None:
        self._state = state
        self._transition += 1

    async def _call(self, operation: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError("Secure store timed out") from e

    def _fail_open(self, error: Exception) -> None:
        logger.warning("Secure store unavailable, disabling app lock: %s", error)
        self._config = UNCONFIGURED
        self._pending_method = None
        self._set_state(LockState.UNCONFIGURED)

    def _require_unlocked(self) -> None:
        if self.is_locked:
            raise AppLocked("Unlock the app before changing the app lock")

    def _arm(self, config: LockConfig) -> None:
        self._config = config
        self._pending_method = None
        self._set_state(LockState.ARMED if config.enabled else LockState.UNCONFIGURED)

    async def load_state(self) -> LoadResult:
        """Read the stored configuration and enforce its consistency.

        Runs on every start. A configured method comes up LOCKED; an
        inconsistent one is wiped from the store and comes up UNCONFIGURED.
        """
        try:
            raw_method = await self._call(self._store.get(LOCK_METHOD_KEY))
            credential = await self._call(self._store.get(PIN_KEY))
        except PersistenceError as e:
            self._fail_open(e)
            return Consistent(UNCONFIGURED)

        result = check_consistency(raw_method, credential, await self.biometric_available())

        if isinstance(result, Healed):
            logger.warning("Resetting app lock: %s", result.reason)
            try:
                await self._call(self._store.remove([LOCK_METHOD_KEY, PIN_KEY]))
            except PersistenceError as e:
                logger.warning("Could not clear inconsistent lock state: %s", e)

        self._config = result.config
        self._pending_method = None
        self._set_state(LockState.LOCKED if result.config.enabled else LockState.UNCONFIGURED)
        return result

    async def set_method(self, method: LockMethod | str) -> SetMethodResult:
        """Switch the lock method.

        PIN-based methods only activate once a credential exists; otherwise the
        machine enters CONFIGURING and NEEDS_CREDENTIAL is returned.

        Raises:
            AppLocked: If the app is locked.
            PersistenceError: If the secure store fails (after failing open).
        """
        self._require_unlocked()
        method = LockMethod(method)
        if method is LockMethod.NONE:
            await self.disable()
            return SetMethodResult.OK

        if method.uses_biometrics and not await self.biometric_available():
            return SetMethodResult.BIOMETRIC_UNAVAILABLE

        try:
            credential = None
            if method.needs_credential:
                credential = await self._call(self._store.get(PIN_KEY))
                if not is_usable_credential(credential):
                    self._pending_method = method
                    self._set_state(LockState.CONFIGURING)
                    return SetMethodResult.NEEDS_CREDENTIAL

            await self._call(self._store.set(LOCK_METHOD_KEY, method.value))
        except PersistenceError as e:
            self._fail_open(e)
            raise

        self._arm(LockConfig(method=method, credential=credential))
        logger.info("App lock set to %s", method.value)
        return SetMethodResult.OK

    async def save_pin(self, pin: str, method: LockMethod | str | None = None) -> None:
        """Store a new PIN and activate a PIN-based method.

        The credential is written before the method, so an interrupted save can
        only leave a credential without a method, which is harmless.

        Raises:
            AppLocked: If the app is locked.
            InvalidPin: If the PIN is not 4-6 digits.
            PersistenceError: If the secure store write fails.
        """
        self._require_unlocked()
        validate_pin(pin)
        target = LockMethod(method) if method else (self._pending_method or self._config.method)
        if not target.needs_credential:
            target = LockMethod.PIN

        credential = hash_pin(pin)
        try:
            await self._call(self._store.set(PIN_KEY, credential))
            await self._call(self._store.set(LOCK_METHOD_KEY, target.value))
        except PersistenceError as e:
            self._fail_open(e)
            raise

        self._arm(LockConfig(method=target, credential=credential))
        logger.info("PIN saved, app lock set to %s", target.value)

    def cancel_configuring(self) -> None:
        """Abandon a pending PIN setup."""
        if self._state is LockState.CONFIGURING:
            self._pending_method = None
            self._set_state(LockState.ARMED if self._config.enabled else LockState.UNCONFIGURED)

    async def verify(self, pin: str) -> bool:
        """Check a PIN against the stored credential."""
        try:
            credential = await self._call(self._store.get(PIN_KEY))
        except PersistenceError as e:
            self._fail_open(e)
            return False
        return verify_credential(pin, credential)

    async def unlock_with_pin(self, pin: str) -> bool:
        """Verify a PIN and unlock if it matches.

        Returns False when the PIN is wrong or when a newer lock/unlock
        superseded this attempt while it was being checked.
        """
        if not self.is_locked:
            return True

        token = self._transition
        ok = await self.verify(pin)
        if token != self._transition:
            logger.debug("Discarding stale PIN result")
            return not self.is_locked
        if ok:
            self._set_state(LockState.ARMED)
        return ok

    def on_background(self) -> None:
        """App left the foreground: lock when a method is configured."""
        if self._config.enabled:
            self._set_state(LockState.LOCKED)

    async def on_foreground(self) -> bool:
        """App returned: try biometrics automatically if configured.

        PIN-only locks never auto-challenge. Returns True if the app is unlocked.
        """
        if not self.is_locked:
            return True
        if not self._config.method.uses_biometrics:
            return False

        token = self._transition
        try:
            success = await self._biometrics.authenticate("Unlock moola")
        except Exception as e:
            logger.warning("Biometric authentication failed: %s", e)
            success = False

        if token != self._transition:
            logger.debug("Discarding stale biometric result")
            return not self.is_locked
        if success:
            self._set_state(LockState.ARMED)
        return success

    async def disable(self) -> None:
        """Remove method and credential together and unlock."""
        try:
            await self._call(self._store.remove([LOCK_METHOD_KEY, PIN_KEY]))
        except PersistenceError as e:
            self._fail_open(e)
            raise
        self._arm(UNCONFIGURED)
        logger.info("App lock disabled")

    async def emergency_reset(self) -> None:
        """Forgotten-PIN escape hatch: wipe the lock and let the user in.

        A store failure still leaves the app unlocked (disable fails open), so
        it is logged rather than raised.
        """
        try:
            await self.disable()
        except PersistenceError as e:
            logger.error("Emergency reset could not clear the secure store: %s", e)

    def begin_pin_setup(self, target: LockMethod | str = LockMethod.PIN, change: bool = False) -> "PinSetup":
        """Start a PIN entry flow and enter CONFIGURING.

        Raises:
            AppLocked: If the app is locked.
        """
        self._require_unlocked()
        self._pending_method = LockMethod(target)
        self._set_state(LockState.CONFIGURING)
        return PinSetup(self, target, change)


class PinSetupStep(str, Enum):
    VERIFY_CURRENT = "verify_current"
    ENTER_NEW = "enter_new"
    CONFIRM = "confirm"
    DONE = "done"


@dataclass
class PinSetupOutcome:
    step: PinSetupStep
    error: str | None = None


class PinSetup:
    """PIN entry flow: optional current-PIN check, new PIN, confirmation.

    Args:
        machine: Lock machine that will store the PIN.
        target: Method to activate once the PIN is saved (pin or both).
        change: Require the current PIN first.
    """

    def __init__(self, machine: LockStateMachine, target: LockMethod | str = LockMethod.PIN, change: bool = False) -> None:
        self._machine = machine
        self.target = LockMethod(target)
        self.step = PinSetupStep.VERIFY_CURRENT if change else PinSetupStep.ENTER_NEW
        self._first_entry: str | None = None

    async def submit(self, pin: str) -> PinSetupOutcome:
        """Feed one PIN entry and advance the flow."""
        if self.step is PinSetupStep.DONE:
            return PinSetupOutcome(self.step)

        if self.step is PinSetupStep.VERIFY_CURRENT:
            if await self._machine.verify(pin):
                self.step = PinSetupStep.ENTER_NEW
                return PinSetupOutcome(self.step)
            return PinSetupOutcome(self.step, "Incorrect PIN")

        try:
            validate_pin(pin)
        except InvalidPin as e:
            return PinSetupOutcome(self.step, str(e))

        if self.step is PinSetupStep.ENTER_NEW:
            self._first_entry = pin
            self.step = PinSetupStep.CONFIRM
            return PinSetupOutcome(self.step)

        if pin != self._first_entry:
            self._first_entry = None
            self.step = PinSetupStep.ENTER_NEW
            return PinSetupOutcome(self.step, "PINs do not match")

        await self._machine.save_pin(pin, self.target)
        self.step = PinSetupStep.DONE
        return PinSetupOutcome(self.step)
