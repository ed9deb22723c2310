"""Timer core: a background countdown that fires an exit callback."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

MIN_MINUTES = 1
MAX_MINUTES = 999
# Any value outside MIN_MINUTES..MAX_MINUTES disarms the timer.
CANCEL_MINUTES = 0

_SECONDS_PER_MINUTE = 60.0


def is_valid_timeout(minutes: int) -> bool:
    """Return ``True`` if *minutes* arms the timer rather than cancelling it."""
    return MIN_MINUTES <= minutes <= MAX_MINUTES


@dataclass
class _SharedState:
    """Instruction cell shared between callers and the timer thread.

    Only ever read or written while holding the service's lock.
    """

    pending: bool = False
    terminate: bool = False
    deadline_minutes: int = CANCEL_MINUTES


class TimerService:
    """A single countdown timer that calls *on_expire* when it runs out.

    The service owns one background thread for its whole lifetime.  Callers
    post instructions (arm, cancel, shut down) into a shared cell and signal
    the thread; the thread only treats a wakeup as expiry when no new
    instruction is pending, so a deadline that has been superseded can never
    fire.  Rapid successive instructions are coalesced: the thread acts on
    whatever the cell holds when it next wakes.

    *unit_seconds* is the length of one timer "minute" and exists so tests
    can run with short units.
    """

    def __init__(
        self,
        on_expire: Callable[[], None],
        *,
        unit_seconds: float = _SECONDS_PER_MINUTE,
    ) -> None:
        if unit_seconds <= 0:
            raise ValueError(f"unit_seconds must be positive, got {unit_seconds}")
        self._on_expire = on_expire
        self._unit_seconds = unit_seconds
        self._state = _SharedState()
        self._cond = threading.Condition(threading.Lock())
        self._expired = False

        self._thread = threading.Thread(target=self._run, name="sleeptimer", daemon=True)
        self._thread.start()

    # -- public interface ----------------------------------------------------

    def set_timeout(self, minutes: int) -> None:
        """Arm the timer for *minutes*, replacing any running countdown.

        Values outside ``MIN_MINUTES..MAX_MINUTES`` cancel the timer instead.
        Returns without waiting for the timer thread to react.
        """
        if not isinstance(minutes, int):
            raise TypeError(f"minutes must be an integer, got {type(minutes).__name__}")
        armed = is_valid_timeout(minutes)
        self._post(terminate=False, minutes=minutes)
        if armed:
            logger.debug("Timer armed for %d minutes", minutes)
        else:
            logger.debug("Timer disarmed (timeout %d out of range)", minutes)

    def cancel(self) -> None:
        """Disarm the timer; nothing fires until the next valid ``set_timeout``."""
        self.set_timeout(CANCEL_MINUTES)

    def shutdown(self) -> None:
        """Stop the timer thread and wait for it to exit.

        Once this returns the expiry callback will never be invoked.  The
        service cannot be restarted; later calls to the other operations
        have no effect.
        """
        self._post(terminate=True, minutes=CANCEL_MINUTES)
        # The exit callback may tear the host down, and with it this service.
        if threading.current_thread() is not self._thread:
            self._thread.join()
        logger.debug("Timer service shut down")

    @property
    def is_alive(self) -> bool:
        """``True`` while the background thread is running."""
        return self._thread.is_alive()

    @property
    def expired(self) -> bool:
        """``True`` once the expiry callback has been invoked."""
        return self._expired

    # -- private helpers -----------------------------------------------------

    def _post(self, *, terminate: bool, minutes: int) -> None:
        """Publish a new instruction and wake the timer thread."""
        with self._cond:
            self._state.pending = True
            self._state.terminate = terminate
            self._state.deadline_minutes = minutes
            self._cond.notify()

    def _run(self) -> None:
        """Body of the timer thread."""
        with self._cond:
            fire = self._serve()

        if not fire:
            logger.debug("Timer thread exiting")
            return

        self._expired = True
        logger.info("Timer expired, invoking exit callback")
        try:
            self._on_expire()
        except Exception:
            logger.exception("Exit callback raised")
            raise

    def _serve(self) -> bool:
        """Process instructions until expiry or termination.

        Called with the lock held.  Returns ``True`` when a deadline elapsed
        with no new instruction pending, ``False`` on termination.
        """
        state = self._state
        while True:
            self._cond.wait_for(lambda: state.pending)
            state.pending = False

            while not state.terminate and is_valid_timeout(state.deadline_minutes):
                wake_at = time.monotonic() + state.deadline_minutes * self._unit_seconds
                while not state.pending:
                    remaining = wake_at - time.monotonic()
                    if remaining <= 0:
                        return True
                    self._cond.wait(remaining)
                state.pending = False

            if state.terminate:
                return False
