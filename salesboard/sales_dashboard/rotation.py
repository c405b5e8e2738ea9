# salesboard/sales_dashboard/rotation.py
"""
Rotation Controller

State is one integer: rotation_index = account_index * 3 + mode_index,
mode_index 0/1/2 = day/week/month, always within [0, account_count * 3).

- advance(): wraps (used by the auto-rotation timer)
- next() / prev(): clamp at the ends (manual navigation)
- select_account() / select_mode(): jump, keeping the other half

Auto-rotation owns at most one RepeatingTimer; starting always cancels
the previous one first. The timer holds the controller weakly, so a
controller dropped with its session is collected and its timer stops.

VERSION: 1.0.0
"""

import logging
import threading
import weakref
from functools import partial
from typing import Callable, Optional

from .constants import GRANULARITIES, MODES_PER_ACCOUNT, ROTATION_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


# ==================== TIMER ====================

class RepeatingTimer:
    """
    Calls `callback` every `interval` seconds on a daemon thread until
    cancelled, or until the callback returns False or raises. cancel() is
    idempotent and waits for the thread to exit unless called from the
    timer thread itself.
    """

    def __init__(self, interval: float, callback: Callable[[], Optional[bool]]):
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="rotation-timer", daemon=True
        )

    def _run(self):
        while not self._stopped.wait(self.interval):
            try:
                keep_going = self.callback()
            except Exception as e:
                logger.error(f"Rotation timer callback failed: {e}")
                self._stopped.set()
            else:
                if keep_going is False:
                    self._stopped.set()

    def start(self):
        self._thread.start()

    def cancel(self):
        self._stopped.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=self.interval + 1)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive() and not self._stopped.is_set()


TimerFactory = Callable[[float, Callable[[], Optional[bool]]], RepeatingTimer]


def _tick_controller(controller_ref: "weakref.ref", timer_id: int) -> bool:
    """Timer callback. Holds the controller weakly so a dropped session can be collected."""
    controller = controller_ref()
    if controller is None:
        return False
    return controller._tick(timer_id)


# ==================== CONTROLLER ====================

class RotationController:
    """
    Rotation over (account x granularity) pairs.

    Usage:
        rotation = RotationController(account_count=len(summaries))
        rotation.start_auto_rotation()
        ...
        account_idx, mode = rotation.account_index, rotation.mode
        rotation.close()
    """

    def __init__(
        self,
        account_count: int = 0,
        interval: float = ROTATION_INTERVAL_SECONDS,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self._lock = threading.RLock()
        self._account_count = max(0, int(account_count))
        self._index = 0
        self.interval = interval
        self._timer_factory = timer_factory or RepeatingTimer
        self._timer: Optional[RepeatingTimer] = None
        self._timer_id = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def account_count(self) -> int:
        return self._account_count

    @property
    def total_positions(self) -> int:
        return self._account_count * MODES_PER_ACCOUNT

    @property
    def rotation_index(self) -> int:
        return self._index

    @property
    def account_index(self) -> int:
        return self._index // MODES_PER_ACCOUNT

    @property
    def mode_index(self) -> int:
        return self._index % MODES_PER_ACCOUNT

    @property
    def mode(self) -> str:
        return GRANULARITIES[self.mode_index]

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self.total_positions == 0 or self._index == self.total_positions - 1

    def set_account_count(self, account_count: int) -> int:
        """Update the number of accounts and clamp the index into range."""
        with self._lock:
            self._account_count = max(0, int(account_count))
            if self.total_positions == 0:
                self._index = 0
            elif self._index >= self.total_positions:
                logger.debug(f"Clamping rotation index {self._index} to {self.total_positions - 1}")
                self._index = self.total_positions - 1
            return self._index

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def advance(self) -> int:
        """Wrap-around step (timer-driven)."""
        with self._lock:
            if self.total_positions:
                self._index = (self._index + 1) % self.total_positions
            return self._index

    def next(self) -> int:
        """Manual step forward, stops at the last position."""
        with self._lock:
            if self.total_positions:
                self._index = min(self.total_positions - 1, self._index + 1)
            return self._index

    def prev(self) -> int:
        """Manual step back, stops at 0."""
        with self._lock:
            self._index = max(0, self._index - 1)
            return self._index

    def select_account(self, account_index: int) -> int:
        with self._lock:
            if not 0 <= account_index < self._account_count:
                raise IndexError(f"Account index {account_index} out of range (0..{self._account_count - 1})")
            self._index = account_index * MODES_PER_ACCOUNT + self.mode_index
            return self._index

    def select_mode(self, mode: str) -> int:
        if mode not in GRANULARITIES:
            raise ValueError(f"Unknown mode: {mode!r}")
        with self._lock:
            if self.total_positions:
                self._index = self.account_index * MODES_PER_ACCOUNT + GRANULARITIES.index(mode)
            return self._index

    # -------------------------------------------------------------------------
    # Auto-rotation
    # -------------------------------------------------------------------------

    @property
    def is_rotating(self) -> bool:
        timer = self._timer
        return timer is not None and timer.is_alive

    def _tick(self, timer_id: int) -> bool:
        """Advance once; returns False (stopping the timer) once it has been replaced or stopped."""
        with self._lock:
            if timer_id != self._timer_id or self._timer is None:
                return False
            self.advance()
            return True

    def start_auto_rotation(self, interval: Optional[float] = None):
        """
        Start the timer. No-op if already rotating at the same interval;
        a different interval cancels the running timer before starting anew.
        """
        stale = None
        with self._lock:
            if interval is not None and interval != self.interval:
                self.interval = interval
                stale, self._timer = self._timer, None
            elif self._timer is not None and not self._timer.is_alive:
                logger.warning("Auto-rotation timer had stopped, restarting")
                stale, self._timer = self._timer, None
            if self._timer is None:
                self._timer_id += 1
                timer_id = self._timer_id
                self._timer = self._timer_factory(
                    self.interval, partial(_tick_controller, weakref.ref(self), timer_id)
                )
                self._timer.start()
                logger.info(f"▶️ Auto-rotation started ({self.interval}s)")
        if stale is not None:
            stale.cancel()

    def stop_auto_rotation(self):
        """Cancel the timer; no-op if not rotating."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._timer_id += 1
        if timer is not None:
            timer.cancel()
            logger.info("⏸️ Auto-rotation stopped")

    def set_auto_rotation(self, enabled: bool):
        if enabled:
            self.start_auto_rotation()
        else:
            self.stop_auto_rotation()

    def toggle_auto_rotation(self) -> bool:
        self.set_auto_rotation(not self.is_rotating)
        return self.is_rotating

    def close(self):
        """Teardown: cancel any running timer."""
        self.stop_auto_rotation()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __del__(self):
        timer = getattr(self, '_timer', None)
        if timer is not None:
            timer.cancel()
