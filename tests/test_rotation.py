# tests/test_rotation.py

"""
Tests for the account/mode rotation controller and its timer.
"""

import gc
import threading
import time

import pytest

from salesboard.sales_dashboard.rotation import RepeatingTimer, RotationController


class FakeTimer:
    """Timer stand-in that fires only when the test calls fire()"""

    instances = []

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False
        self.died = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    @property
    def is_alive(self):
        return self.started and not self.cancelled and not self.died

    def fire(self):
        return self.callback()


@pytest.fixture
def fake_timers():
    FakeTimer.instances = []
    return FakeTimer.instances


@pytest.fixture
def rotation(fake_timers):
    return RotationController(account_count=2, interval=5, timer_factory=FakeTimer)


class TestRotationIndex:

    def test_initial_position(self, rotation):
        assert rotation.rotation_index == 0
        assert rotation.account_index == 0
        assert rotation.mode == 'day'
        assert rotation.is_first

    def test_advance_cycles_modes_then_accounts(self, rotation):
        seen = []
        for _ in range(6):
            seen.append((rotation.account_index, rotation.mode))
            rotation.advance()

        assert seen == [
            (0, 'day'), (0, 'week'), (0, 'month'),
            (1, 'day'), (1, 'week'), (1, 'month'),
        ]
        # Wrapped back to the start
        assert rotation.rotation_index == 0

    def test_next_clamps_at_last(self, rotation):
        for _ in range(10):
            rotation.next()
        assert rotation.rotation_index == 5
        assert rotation.is_last

    def test_prev_clamps_at_zero(self, rotation):
        rotation.prev()
        assert rotation.rotation_index == 0

    def test_select_account_keeps_mode(self, rotation):
        rotation.select_mode('month')
        rotation.select_account(1)
        assert rotation.account_index == 1
        assert rotation.mode == 'month'

    def test_select_account_out_of_range(self, rotation):
        with pytest.raises(IndexError):
            rotation.select_account(2)

    def test_select_mode_keeps_account(self, rotation):
        rotation.select_account(1)
        rotation.select_mode('week')
        assert rotation.rotation_index == 4

    def test_select_unknown_mode(self, rotation):
        with pytest.raises(ValueError):
            rotation.select_mode('year')

    def test_shrinking_account_count_clamps(self, rotation):
        for _ in range(5):
            rotation.next()
        rotation.set_account_count(1)
        assert rotation.rotation_index == 2

    def test_no_accounts(self, fake_timers):
        rotation = RotationController(account_count=0, timer_factory=FakeTimer)
        rotation.advance()
        rotation.next()
        assert rotation.rotation_index == 0
        assert rotation.is_first and rotation.is_last

    @pytest.mark.parametrize("accounts", [1, 2, 5])
    def test_advance_full_cycle_returns_to_start(self, fake_timers, accounts):
        rotation = RotationController(account_count=accounts, timer_factory=FakeTimer)
        rotation.select_mode('week')
        start = rotation.rotation_index

        visited = set()
        for _ in range(accounts * 3):
            visited.add(rotation.rotation_index)
            rotation.advance()

        assert rotation.rotation_index == start
        assert visited == set(range(accounts * 3))


class TestAutoRotation:

    def test_tick_advances(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        fake_timers[0].fire()
        fake_timers[0].fire()
        assert rotation.rotation_index == 2

    def test_tick_wraps(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        for _ in range(6):
            fake_timers[0].fire()
        assert rotation.rotation_index == 0

    def test_start_is_idempotent(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        rotation.start_auto_rotation()
        assert len(fake_timers) == 1
        assert rotation.is_rotating

    def test_new_interval_replaces_timer(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        rotation.start_auto_rotation(interval=10)

        assert len(fake_timers) == 2
        assert fake_timers[0].cancelled
        assert fake_timers[1].interval == 10

        # The replaced timer can no longer move the rotation
        fake_timers[0].fire()
        assert rotation.rotation_index == 0
        fake_timers[1].fire()
        assert rotation.rotation_index == 1

    def test_stop_cancels_and_ignores_late_ticks(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        rotation.stop_auto_rotation()

        assert fake_timers[0].cancelled
        assert not rotation.is_rotating
        assert fake_timers[0].fire() is False
        assert rotation.rotation_index == 0

    def test_stop_when_idle_is_noop(self, rotation):
        rotation.stop_auto_rotation()
        assert not rotation.is_rotating

    def test_toggle(self, rotation):
        assert rotation.toggle_auto_rotation() is True
        assert rotation.toggle_auto_rotation() is False

    def test_manual_navigation_while_rotating(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        rotation.select_account(1)
        fake_timers[0].fire()
        assert (rotation.account_index, rotation.mode) == (1, 'week')

    def test_dead_timer_is_not_rotating(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        fake_timers[0].died = True
        assert not rotation.is_rotating

    def test_start_replaces_dead_timer(self, rotation, fake_timers):
        rotation.start_auto_rotation()
        fake_timers[0].died = True
        rotation.start_auto_rotation()

        assert len(fake_timers) == 2
        assert rotation.is_rotating
        fake_timers[1].fire()
        assert rotation.rotation_index == 1

    def test_timer_does_not_keep_controller_alive(self, fake_timers):
        rotation = RotationController(account_count=1, timer_factory=FakeTimer)
        rotation.start_auto_rotation()
        timer = fake_timers[0]

        del rotation
        gc.collect()

        assert timer.cancelled
        assert timer.fire() is False

    def test_context_manager_closes(self, fake_timers):
        with RotationController(account_count=1, timer_factory=FakeTimer) as rotation:
            rotation.start_auto_rotation()
        assert fake_timers[0].cancelled
        assert not rotation.is_rotating


class TestRepeatingTimer:

    def test_fires_until_cancelled(self):
        fired = threading.Event()
        calls = []

        def callback():
            calls.append(1)
            if len(calls) >= 2:
                fired.set()

        timer = RepeatingTimer(0.01, callback)
        timer.start()
        assert fired.wait(timeout=2)
        timer.cancel()

        assert not timer.is_alive
        count = len(calls)
        time.sleep(0.05)
        assert len(calls) == count

    def test_callback_error_stops_timer(self):
        done = threading.Event()

        def callback():
            done.set()
            raise RuntimeError("boom")

        timer = RepeatingTimer(0.01, callback)
        timer.start()
        assert done.wait(timeout=2)
        timer.cancel()
        assert not timer.is_alive

    def test_real_timer_drives_rotation(self):
        moved = threading.Event()
        rotation = RotationController(account_count=50, interval=0.01)
        rotation.start_auto_rotation()
        try:
            for _ in range(200):
                if rotation.rotation_index != 0:
                    moved.set()
                    break
                moved.wait(timeout=0.01)
        finally:
            rotation.close()
        assert moved.is_set()

    def test_callback_returning_false_stops_timer(self):
        calls = []

        def callback():
            calls.append(1)
            return False

        timer = RepeatingTimer(0.01, callback)
        timer.start()
        timer._thread.join(timeout=2)

        assert not timer.is_alive
        assert calls == [1]

    def test_dropped_controller_stops_timer_thread(self):
        rotation = RotationController(account_count=1, interval=0.01)
        rotation.start_auto_rotation()
        thread = rotation._timer._thread
        assert thread.is_alive()

        del rotation
        gc.collect()
        thread.join(timeout=2)

        assert not thread.is_alive()
