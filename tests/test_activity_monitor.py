"""Tests for the activity state machine (debounce with inactivity timeout)."""

import threading
import time

import pytest

from packages.core.monitor.activity_monitor import (
    DEFAULT_INACTIVITY_TIMEOUT_S,
    ActivityStateMachine,
)

TIMEOUT_S = 0.3


@pytest.fixture
def machine():
    sm = ActivityStateMachine(timeout_s=TIMEOUT_S)
    yield sm
    sm.dispose()


class TestTransitions:
    def test_initial_state_is_inactive(self, machine):
        assert machine.is_active is False
        state = machine.get_state()
        assert state.is_active is False
        assert state.last_pulse_at is None

    def test_default_timeout_is_five_seconds(self):
        sm = ActivityStateMachine()
        try:
            assert DEFAULT_INACTIVITY_TIMEOUT_S == 5.0
            assert sm.timeout_s == 5.0
        finally:
            sm.dispose()

    def test_pulse_activates_and_emits_true(self, machine, recorder):
        machine.on_state_changed(recorder)

        machine.on_pulse()

        assert machine.is_active is True
        assert recorder.snapshot() == [True]

    def test_repeated_pulses_emit_once(self, machine, recorder):
        machine.on_state_changed(recorder)

        for _ in range(10):
            machine.on_pulse()

        assert recorder.snapshot() == [True]

    def test_timeout_emits_false_once(self, machine, recorder):
        machine.on_state_changed(recorder)
        machine.on_pulse()

        assert recorder.wait_for(2, timeout=2.0)
        time.sleep(TIMEOUT_S)
        assert recorder.snapshot() == [True, False]
        assert machine.is_active is False

    def test_false_arrives_within_timeout_plus_margin(self, machine, recorder):
        machine.on_state_changed(recorder)
        start = time.monotonic()
        machine.on_pulse()

        assert recorder.wait_for(2, timeout=TIMEOUT_S + 1.0)
        elapsed = time.monotonic() - start
        assert TIMEOUT_S * 0.9 <= elapsed < TIMEOUT_S + 0.5

    def test_pulses_within_timeout_keep_active(self, machine, recorder):
        machine.on_state_changed(recorder)

        # Total span well beyond one timeout, every gap shorter than it
        for _ in range(8):
            machine.on_pulse()
            time.sleep(TIMEOUT_S / 3)

        assert recorder.snapshot() == [True]
        assert machine.is_active is True

    def test_reactivation_after_timeout(self, machine, recorder):
        machine.on_state_changed(recorder)
        machine.on_pulse()
        assert recorder.wait_for(2, timeout=2.0)

        machine.on_pulse()

        assert recorder.snapshot() == [True, False, True]

    def test_pulse_updates_deadline(self, machine):
        machine.on_pulse()
        first = machine.get_state().deadline_at
        time.sleep(0.05)
        machine.on_pulse()
        second = machine.get_state().deadline_at

        assert second > first

    def test_update_timeout_applies_to_next_pulse(self, machine, recorder):
        machine.on_state_changed(recorder)
        machine.update_timeout(0.1)

        machine.on_pulse()

        assert recorder.wait_for(2, timeout=1.0)


class TestConcurrency:
    def test_burst_from_many_threads_emits_single_true(self, machine, recorder):
        machine.on_state_changed(recorder)
        barrier = threading.Barrier(8)

        def hammer():
            barrier.wait()
            for _ in range(50):
                machine.on_pulse()

        threads = [threading.Thread(target=hammer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert recorder.snapshot() == [True]

    def test_transitions_strictly_alternate(self, machine, recorder):
        machine.on_state_changed(recorder)

        for _ in range(3):
            machine.on_pulse()
            machine.on_pulse()
            assert recorder.wait_for(recorder.count + 1, timeout=2.0)

        events = recorder.snapshot()
        assert events == [True, False] * 3

    def test_listener_may_call_back_into_machine(self, machine):
        seen = []

        def listener(active):
            seen.append((active, machine.is_active))
            machine.on_pulse()

        machine.on_state_changed(listener)
        machine.on_pulse()

        assert seen == [(True, True)]

    def test_listener_errors_are_contained(self, machine, recorder):
        def broken(active):
            raise RuntimeError("listener failure")

        machine.on_state_changed(broken)
        machine.on_state_changed(recorder)

        machine.on_pulse()

        assert recorder.snapshot() == [True]


class TestDispose:
    def test_dispose_is_idempotent(self):
        sm = ActivityStateMachine(timeout_s=TIMEOUT_S)
        sm.dispose()
        sm.dispose()

    def test_no_events_after_dispose(self, recorder):
        sm = ActivityStateMachine(timeout_s=0.1)
        sm.on_state_changed(recorder)
        sm.on_pulse()
        sm.dispose()
        time.sleep(0.3)

        sm.on_pulse()

        assert recorder.snapshot() == [True]

    def test_removed_listener_gets_nothing(self, machine, recorder):
        machine.on_state_changed(recorder)
        machine.remove_state_listener(recorder)

        machine.on_pulse()

        assert recorder.count == 0
