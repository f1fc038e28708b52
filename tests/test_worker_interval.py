"""Tests for the host-side interval facade, with and without the worker thread."""
import pytest

from core.interval_worker import ContextUnavailableError
from core.worker_interval import WorkerInterval


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


def _failing_factory():
    raise ContextUnavailableError("blocked")


@pytest.fixture(params=["background", "fallback"])
def scheduler(request):
    if request.param == "background":
        s = WorkerInterval()
    else:
        s = WorkerInterval(context_factory=_failing_factory)
    s.initialize()
    yield s
    s.teardown()


class TestInitialize:

    def test_background_context_used_when_available(self):
        s = WorkerInterval()
        s.initialize()
        try:
            assert s.uses_background
        finally:
            s.teardown()

    def test_factory_failure_falls_back(self):
        s = WorkerInterval(context_factory=_failing_factory)
        s.initialize()

        assert not s.uses_background

    def test_config_can_disable_background(self, clean_config):
        clean_config.set('scheduler.background_timers', False)
        s = WorkerInterval()
        s.initialize()

        assert not s.uses_background

    def test_fallback_is_reported_in_development(self, caplog):
        s = WorkerInterval(context_factory=_failing_factory)
        s.initialize()

        assert "falling back" in caplog.text

    def test_fallback_is_silent_in_production(self, clean_config, caplog):
        clean_config.set('app.environment', 'production')
        s = WorkerInterval(context_factory=_failing_factory)
        s.initialize()

        assert "falling back" not in caplog.text

    def test_initialize_is_idempotent(self):
        calls = []

        def factory():
            calls.append(1)
            raise ContextUnavailableError("nope")

        s = WorkerInterval(context_factory=factory)
        s.initialize()
        s.initialize()

        assert len(calls) == 1


class TestSchedule:

    def test_none_interval_creates_nothing(self, scheduler):
        assert scheduler.schedule(Counter(), None) is None
        assert scheduler.active_handles == []

    @pytest.mark.parametrize("bad", [-1, "100", True, float("nan"), float("inf"), 2 ** 31])
    def test_invalid_interval_rejected(self, scheduler, bad):
        with pytest.raises(ValueError):
            scheduler.schedule(Counter(), bad)
        assert scheduler.active_handles == []

    def test_largest_interval_accepted(self, scheduler):
        assert scheduler.schedule(Counter(), 2 ** 31 - 1) is not None

    def test_handles_are_unique(self, scheduler):
        handles = [scheduler.schedule(Counter(), 1000) for _ in range(25)]

        assert len(set(handles)) == 25
        assert all(handles)

    def test_handle_type_matches_backing_timer(self, scheduler):
        handle = scheduler.schedule(Counter(), 1000)

        if scheduler.uses_background:
            assert isinstance(handle, str)
        else:
            assert isinstance(handle, int)

    def test_cancel_unknown_handles_does_not_raise(self, scheduler):
        scheduler.cancel(None)
        scheduler.cancel("interval-999")
        scheduler.cancel(424242)

    def test_cancel_twice_does_not_raise(self, scheduler):
        handle = scheduler.schedule(Counter(), 1000)
        scheduler.cancel(handle)
        scheduler.cancel(handle)

        assert scheduler.active_handles == []

    def test_set_callback_unknown_handle(self, scheduler):
        assert scheduler.set_callback("interval-404", Counter()) is False


@pytest.mark.timing
class TestTiming:

    def test_fires_at_period(self, scheduler, wait):
        counter = Counter()
        scheduler.schedule(counter, 50)

        wait(260)

        assert 4 <= counter.calls <= 6

    def test_fractional_period_rounds_up(self, scheduler, wait):
        counter = Counter()
        scheduler.schedule(counter, 0.9)

        wait(100)

        # One tick per millisecond at most, never a 0ms busy timer
        assert 0 < counter.calls <= 130

    def test_cancel_then_tick_is_silent(self, scheduler, wait):
        counter = Counter()
        handle = scheduler.schedule(counter, 10)
        wait(55)

        scheduler.cancel(handle)
        fired = counter.calls
        wait(100)

        assert fired > 0
        assert counter.calls == fired

    def test_latest_callback_runs(self, scheduler, wait):
        a, b = Counter(), Counter()
        handle = scheduler.schedule(a, 100)
        wait(150)
        assert a.calls == 1

        assert scheduler.set_callback(handle, b)
        wait(100)

        assert a.calls == 1
        assert b.calls >= 1

    def test_teardown_sweeps_all(self, scheduler, wait):
        counters = [Counter(), Counter(), Counter()]
        for counter, period in zip(counters, (10, 20, 30)):
            scheduler.schedule(counter, period)
        wait(70)

        scheduler.teardown()
        fired = [c.calls for c in counters]
        wait(100)

        assert all(f > 0 for f in fired)
        assert [c.calls for c in counters] == fired
        assert scheduler.active_handles == []

    def test_callback_error_keeps_timer_running(self, scheduler, wait):
        calls = []

        def flaky():
            calls.append(1)
            raise RuntimeError("boom")

        scheduler.schedule(flaky, 20)
        wait(90)

        assert len(calls) >= 2

    def test_fallback_matches_background(self, wait):
        background = WorkerInterval()
        fallback = WorkerInterval(context_factory=_failing_factory)
        background.initialize()
        fallback.initialize()
        bg_counter, fb_counter = Counter(), Counter()
        try:
            background.schedule(bg_counter, 50)
            fallback.schedule(fb_counter, 50)
            wait(260)
        finally:
            background.teardown()
            fallback.teardown()

        assert abs(bg_counter.calls - fb_counter.calls) <= 1
