"""App lock commands and the unlock gate shared by every other command."""

import asyncio
import sys
from typing import Awaitable, Callable, TypeVar

import typer
from rich.console import Console

from moola.app import MoolaApp, build_app
from moola.domain.lock import Healed, LockMethod
from moola.errors import MoolaError
from moola.security import LockStateMachine, PinSetupStep, SetMethodResult

console = Console()

T = TypeVar("T")

MAX_PIN_ATTEMPTS = 3

PIN_PROMPTS = {
    PinSetupStep.VERIFY_CURRENT: "Current PIN",
    PinSetupStep.ENTER_NEW: "New PIN (4-6 digits)",
    PinSetupStep.CONFIRM: "Confirm PIN",
}


async def unlock(app: MoolaApp) -> bool:
    """Load the lock state and get past it.

    Tries biometrics first where configured, then prompts for the PIN.

    Returns:
        True if the app is unlocked.
    """
    result = await app.lock.load_state()
    if isinstance(result, Healed):
        console.print(f"[yellow]Your app lock was reset: {result.reason}[/yellow]")

    if not app.lock.is_locked:
        return True

    if await app.lock.on_foreground():
        return True

    if not app.lock.method.needs_credential:
        console.print(f"[red]{app.lock.biometric_label() or 'Biometric'} check failed[/red]")
        return False

    for _ in range(MAX_PIN_ATTEMPTS):
        pin = typer.prompt("PIN", hide_input=True)
        if await app.lock.unlock_with_pin(pin):
            return True
        console.print("[red]Incorrect PIN[/red]")

    console.print("[dim]Forgot your PIN? Run 'moola lock reset'.[/dim]")
    return False


def run_unlocked(action: Callable[[MoolaApp], Awaitable[T]]) -> T:
    """Build the app, pass the lock gate, load the ledger and run an action.

    Exits with status 1 on any moola error or when the app stays locked.
    """
    app = build_app()

    async def runner() -> tuple[bool, T | None]:
        if not await unlock(app):
            return False, None
        await app.ledger.load()
        return True, await action(app)

    try:
        unlocked, value = asyncio.run(runner())
    except MoolaError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not unlocked:
        sys.exit(1)
    return value  # type: ignore[return-value]


async def collect_pin(lock: LockStateMachine, target: LockMethod, change: bool = False) -> bool:
    """Walk the user through PIN entry. Returns True once the PIN is saved."""
    setup = lock.begin_pin_setup(target, change=change)
    errors = 0

    while setup.step is not PinSetupStep.DONE:
        pin = typer.prompt(PIN_PROMPTS[setup.step], hide_input=True)
        outcome = await setup.submit(pin)
        if outcome.error:
            console.print(f"[red]{outcome.error}[/red]")
            errors += 1
            if errors >= MAX_PIN_ATTEMPTS:
                lock.cancel_configuring()
                console.print("[yellow]PIN setup cancelled[/yellow]")
                return False

    return True


def describe_method(lock: LockStateMachine) -> str:
    method = lock.method
    if method is LockMethod.NONE:
        return "Disabled"
    if method is LockMethod.PIN:
        return "PIN enabled"
    label = lock.biometric_label() or "Biometric"
    if method is LockMethod.BIOMETRIC:
        return f"{label} enabled"
    return f"PIN + {label} enabled"


async def _enable(app: MoolaApp, method: LockMethod) -> None:
    result = await app.lock.set_method(method)

    if result is SetMethodResult.BIOMETRIC_UNAVAILABLE:
        console.print("[red]Biometric unlock is not available on this device[/red]")
        return

    if result is SetMethodResult.NEEDS_CREDENTIAL:
        console.print("[cyan]Set a PIN to enable the app lock[/cyan]")
        if not await collect_pin(app.lock, method):
            return

    console.print(f"[green]✓[/green] App lock: {describe_method(app.lock)}")


async def _change_pin(app: MoolaApp) -> None:
    if not app.lock.method.needs_credential:
        console.print("[yellow]No PIN is set. Use 'moola lock pin' first.[/yellow]")
        return
    if await collect_pin(app.lock, app.lock.method, change=True):
        console.print("[green]✓[/green] PIN changed")


def lock_command(action: str) -> None:
    """Manage the app lock.

    Args:
        action: status, pin, biometric, both, off, change-pin or reset.
    """
    if action == "reset":
        reset_command()
        return

    async def run(app: MoolaApp) -> None:
        if action == "status":
            console.print(f"App lock: {describe_method(app.lock)}")
        elif action == "off":
            await app.lock.disable()
            console.print("[green]✓[/green] App lock disabled")
        elif action == "change-pin":
            await _change_pin(app)
        elif action in ("pin", "biometric", "both"):
            await _enable(app, LockMethod(action))
        else:
            console.print(f"[red]Unknown action '{action}'[/red]")
            console.print("[dim]Use one of: status, pin, biometric, both, off, change-pin, reset[/dim]")

    run_unlocked(run)


def reset_command() -> None:
    """Remove the PIN and lock method without unlocking first."""
    if not typer.confirm("Remove your PIN and disable the app lock?", default=False):
        console.print("[dim]Nothing changed[/dim]")
        return

    app = build_app()
    asyncio.run(app.lock.emergency_reset())
    console.print("[green]✓[/green] App lock removed")
