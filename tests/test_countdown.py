"""
Countdown engine tests.

Verifies:
- Ticks are strictly decreasing and end at 0
- Ticks follow the clock, not a counter (slow callbacks, early wake-ups)
- Cancellation interrupts the wait and stops ticks
- Real wall-clock duration stays within one tick of the requested time
"""
import threading
import time

import pytest

from timer_core import AlreadyRunning, CancelSignal, CountdownEngine, CountdownState, InvalidArgument


class TestCountdownCompletion:
    """Uninterrupted countdowns."""

    @pytest.mark.parametrize("duration", [1, 2, 3, 10, 125])
    def test_ticks_strictly_decrease_to_zero(self, fake_time, duration):
        ticks = []
        engine = CountdownEngine(duration, clock=fake_time.clock)

        state = engine.run(ticks.append, fake_time.signal())

        assert state == CountdownState.COMPLETED
        assert engine.state == CountdownState.COMPLETED
        assert ticks == list(range(duration, -1, -1))
        assert all(a > b for a, b in zip(ticks, ticks[1:]))
        assert engine.elapsed() == pytest.approx(duration)

    def test_sleeps_target_whole_second_boundaries(self, fake_time):
        engine = CountdownEngine(3, clock=fake_time.clock)
        engine.run(lambda remaining: None, fake_time.signal())

        assert fake_time.waits == [pytest.approx(1.0)] * 3

    def test_slow_callback_does_not_stretch_countdown(self, fake_time):
        ticks = []

        def slow_tick(remaining):
            ticks.append(remaining)
            fake_time.advance(1.5)

        engine = CountdownEngine(3, clock=fake_time.clock)
        state = engine.run(slow_tick, fake_time.signal())

        assert state == CountdownState.COMPLETED
        assert ticks == [3, 2, 0]
        # last callback itself takes 1.5s, the countdown proper stays at 3s
        assert engine.elapsed() == pytest.approx(4.5)

    def test_early_wakeup_does_not_repeat_ticks(self, fake_time):
        ticks = []
        engine = CountdownEngine(2, clock=fake_time.clock)

        engine.run(ticks.append, fake_time.signal(max_step=0.25))

        assert ticks == [2, 1, 0]

    def test_engine_runs_only_once(self, fake_time):
        engine = CountdownEngine(1, clock=fake_time.clock)
        engine.run(lambda remaining: None, fake_time.signal())

        with pytest.raises(AlreadyRunning):
            engine.run(lambda remaining: None, fake_time.signal())

    @pytest.mark.parametrize("duration", [0, -1, -60])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(InvalidArgument):
            CountdownEngine(duration)


class TestCountdownAbort:
    """Cancelled countdowns."""

    def test_abort_during_second_wait(self, fake_time):
        ticks = []
        engine = CountdownEngine(5, clock=fake_time.clock)

        state = engine.run(ticks.append, fake_time.signal(cancel_on_wait=2))

        assert state == CountdownState.ABORTED
        assert engine.state == CountdownState.ABORTED
        assert ticks == [5, 4]

    def test_cancelled_before_start_emits_nothing(self, fake_time):
        ticks = []
        signal = fake_time.signal()
        signal.cancel()

        state = CountdownEngine(5, clock=fake_time.clock).run(ticks.append, signal)

        assert state == CountdownState.ABORTED
        assert ticks == []

    def test_cancel_from_tick_callback(self, fake_time):
        ticks = []
        signal = fake_time.signal()

        def on_tick(remaining):
            ticks.append(remaining)
            if remaining == 3:
                signal.cancel()

        state = CountdownEngine(5, clock=fake_time.clock).run(on_tick, signal)

        assert state == CountdownState.ABORTED
        assert ticks == [5, 4, 3]

    def test_failing_callback_ends_countdown(self, fake_time):
        def on_tick(remaining):
            raise RuntimeError("announcer down")

        engine = CountdownEngine(5, clock=fake_time.clock)
        with pytest.raises(RuntimeError, match="announcer down"):
            engine.run(on_tick, fake_time.signal())
        assert engine.state == CountdownState.ABORTED


class TestCountdownWallClock:
    """Real-time behaviour (short durations)."""

    def test_real_countdown_duration_within_tolerance(self):
        ticks = []
        engine = CountdownEngine(2)

        t0 = time.monotonic()
        state = engine.run(ticks.append, CancelSignal())
        elapsed = time.monotonic() - t0

        assert state == CountdownState.COMPLETED
        assert ticks == [2, 1, 0]
        assert 1.9 <= elapsed <= 3.0

    def test_cancel_interrupts_sleep_immediately(self):
        ticks = []
        signal = CancelSignal()
        timer = threading.Timer(0.3, signal.cancel)

        t0 = time.monotonic()
        timer.start()
        try:
            state = CountdownEngine(30).run(ticks.append, signal)
        finally:
            timer.cancel()
        elapsed = time.monotonic() - t0

        assert state == CountdownState.ABORTED
        assert ticks == [30]
        assert elapsed < 1.0
