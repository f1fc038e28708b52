"""Tests for the background interval worker and its thread context."""
import pytest

from core.interval_worker import BackgroundContext, IntervalWorker, RUN_CALLBACK, coerce_delay
from data.models import ScheduledTimer


@pytest.fixture
def worker():
    w = IntervalWorker()
    yield w
    w.stop_all()


def collect(worker):
    received = []
    worker.message.connect(received.append)
    return received


class TestMessageHandling:
    """Worker runs in the test thread here so messages are handled synchronously."""

    def test_set_interval_registers_timer(self, worker):
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 20})

        assert worker.active_ids == ["a"]

    def test_clear_interval_removes_timer(self, worker):
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 20})
        worker.handle_message({"id": "a", "name": "clearInterval"})

        assert worker.active_ids == []

    def test_scheduled_reports_periods(self, worker):
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 20})
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 35})

        assert worker.scheduled == [ScheduledTimer(id="a", interval_ms=35)]

    def test_clear_unknown_id_is_noop(self, worker):
        worker.handle_message({"id": "missing", "name": "clearInterval"})

        assert worker.active_ids == []

    @pytest.mark.parametrize("payload", [
        None,
        "setInterval",
        {},
        {"name": "setInterval", "delay": 10},
        {"id": "a", "delay": 10},
        {"id": "a", "name": "setInterval"},
        {"id": "a", "name": "setInterval", "delay": -5},
        {"id": "a", "name": "setInterval", "delay": "10"},
        {"id": "a", "name": "bogus"},
        {"id": 7, "name": "setInterval", "delay": 10},
        {"id": "a", "name": "setInterval", "delay": float("nan")},
        {"id": "a", "name": "setInterval", "delay": float("inf")},
        {"id": "a", "name": "setInterval", "delay": 2 ** 31},
    ])
    def test_malformed_messages_are_ignored(self, worker, payload):
        worker.handle_message(payload)

        assert worker.active_ids == []

    @pytest.mark.timing
    def test_reschedule_same_id_replaces_timer(self, worker, wait):
        received = collect(worker)
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 40})
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 40})

        wait(110)

        assert worker.active_ids == ["a"]
        # One timer: two ticks in 110ms, not four
        assert 1 <= len(received) <= 3

    @pytest.mark.timing
    def test_ticks_post_run_callback_messages(self, worker, wait):
        received = collect(worker)
        worker.handle_message({"id": "a", "name": "setInterval", "delay": 20})

        wait(70)

        assert received
        assert all(m == {"id": "a", "name": RUN_CALLBACK} for m in received)


@pytest.mark.timing
class TestBackgroundContext:

    def test_ticks_arrive_from_worker_thread(self, wait):
        context = BackgroundContext()
        received = []
        context.message.connect(received.append)
        try:
            assert context.is_running
            context.post_message({"id": "x", "name": "setInterval", "delay": 20})
            wait(100)
        finally:
            context.release()

        assert {"id": "x", "name": RUN_CALLBACK} in received
        assert not context.is_running

    def test_release_stops_all_timers(self, wait):
        context = BackgroundContext()
        received = []
        context.message.connect(received.append)
        context.post_message({"id": "x", "name": "setInterval", "delay": 10})
        context.post_message({"id": "y", "name": "setInterval", "delay": 10})
        wait(50)

        context.release()
        wait(10)
        count = len(received)
        wait(60)

        assert len(received) == count

    def test_release_twice_is_harmless(self):
        context = BackgroundContext()
        context.release()
        context.release()


@pytest.mark.parametrize("value, expected", [
    (0, 0),
    (0.9, 1),
    (10, 10),
    (10.2, 11),
    (2 ** 31 - 1, 2 ** 31 - 1),
    (2 ** 31, None),
    (float("nan"), None),
    (float("-inf"), None),
    (-0.5, None),
    (None, None),
])
def test_coerce_delay(value, expected):
    assert coerce_delay(value) == expected
