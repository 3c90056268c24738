"""
Tests for the per-view refresh scheduler.

Ticks are driven by hand; the APScheduler job is only started in the
lifecycle test and stopped right away.
"""

import threading

import pytest

from ipdesk.core.scheduler import VIEW_KINDS, RefreshScheduler, View
from ipdesk.core.models import ReferenceKind


@pytest.fixture
def cycles():
    return []


@pytest.fixture
def scheduler(cycles):
    return RefreshScheduler(cycles.append, interval=3, step=1, tick_seconds=1)


class TestCountdown:

    def test_starts_idle_on_ip_list(self, scheduler):
        assert scheduler.state(View.IP_LIST).active
        assert not scheduler.state(View.DEVICE_LIST).active
        assert scheduler.state(View.IP_LIST).phase == "idle"

    def test_fires_once_per_interval(self, scheduler, cycles):
        fired = [scheduler.tick(View.IP_LIST) for _ in range(6)]

        assert fired == [False, False, True, False, False, True]
        assert cycles == [View.IP_LIST, View.IP_LIST]

    def test_count_resets_after_cycle(self, scheduler):
        for _ in range(3):
            scheduler.tick(View.IP_LIST)
        state = scheduler.state(View.IP_LIST)
        assert state.count == 3
        assert state.cycles == 1
        assert state.last_refresh is not None

    def test_inactive_view_does_not_count(self, scheduler, cycles):
        for _ in range(10):
            scheduler.tick(View.DEVICE_LIST)
        assert cycles == []
        assert scheduler.state(View.DEVICE_LIST).count == 3

    def test_modal_freezes_countdown(self, scheduler, cycles):
        scheduler.tick(View.IP_LIST)
        scheduler.set_modal(View.IP_LIST, True)
        for _ in range(10):
            scheduler.tick(View.IP_LIST)

        assert cycles == []
        assert scheduler.state(View.IP_LIST).count == 2

        scheduler.set_modal(View.IP_LIST, False)
        scheduler.tick(View.IP_LIST)
        scheduler.tick(View.IP_LIST)
        assert cycles == [View.IP_LIST]

    def test_tick_all(self, scheduler, cycles):
        for _ in range(3):
            scheduler.tick_all()
        assert cycles == [View.IP_LIST]


class TestForce:

    def test_force_fires_on_next_tick(self, scheduler, cycles):
        scheduler.force(View.IP_LIST)
        assert scheduler.state(View.IP_LIST).phase == "due"

        assert scheduler.tick(View.IP_LIST)
        assert cycles == [View.IP_LIST]

    def test_repeated_force_collapses(self, scheduler, cycles):
        scheduler.force(View.IP_LIST)
        scheduler.force(View.IP_LIST)
        scheduler.force(View.IP_LIST)

        scheduler.tick(View.IP_LIST)
        scheduler.tick(View.IP_LIST)
        assert cycles == [View.IP_LIST]

    def test_force_fires_while_modal_open(self, scheduler, cycles):
        scheduler.set_modal(View.IP_LIST, True)
        scheduler.force(View.IP_LIST)
        scheduler.tick(View.IP_LIST)
        assert cycles == [View.IP_LIST]

    def test_force_fires_on_inactive_view(self, scheduler, cycles):
        scheduler.force(View.DEVICE_LIST)

        scheduler.tick_all()
        scheduler.tick_all()

        assert cycles == [View.DEVICE_LIST]
        state = scheduler.state(View.DEVICE_LIST)
        assert not state.active
        assert state.count == 3

    def test_activate_switches_and_forces(self, scheduler, cycles):
        scheduler.activate(View.DEVICE_LIST)

        assert scheduler.state(View.DEVICE_LIST).active
        assert not scheduler.state(View.IP_LIST).active
        scheduler.tick_all()
        assert cycles == [View.DEVICE_LIST]


class TestNoOverlap:

    def test_due_during_fetching_is_ignored(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_cycle(view):
            calls.append(view)
            started.set()
            release.wait(timeout=5)

        scheduler = RefreshScheduler(slow_cycle, interval=1, step=1, tick_seconds=1)
        scheduler.force(View.IP_LIST)
        worker = threading.Thread(target=scheduler.tick, args=(View.IP_LIST,))
        worker.start()
        assert started.wait(timeout=5)

        assert scheduler.state(View.IP_LIST).phase == "fetching"
        # Second Due signal while the first cycle is still running
        scheduler.force(View.IP_LIST)
        assert scheduler.tick(View.IP_LIST) is False
        assert scheduler.run_now(View.IP_LIST) is False

        release.set()
        worker.join(timeout=5)

        assert calls == [View.IP_LIST]
        assert scheduler.state(View.IP_LIST).phase == "idle"

    def test_failed_cycle_resets_and_counts(self):
        def broken(view):
            raise RuntimeError("boom")

        scheduler = RefreshScheduler(broken, interval=2, step=1, tick_seconds=1)
        scheduler.force(View.IP_LIST)

        assert scheduler.tick(View.IP_LIST)
        state = scheduler.state(View.IP_LIST)
        assert not state.fetching
        assert state.count == 2
        assert state.cycles == 1


class TestViewKinds:

    def test_device_list_covers_form_kinds(self):
        assert set(VIEW_KINDS[View.DEVICE_LIST]) == {
            ReferenceKind.MANUFACTURER,
            ReferenceKind.SITE,
            ReferenceKind.DEVICE_TYPE,
            ReferenceKind.DEVICE_ROLE,
            ReferenceKind.TENANT,
            ReferenceKind.DEVICE,
        }

    def test_ip_list_kinds(self):
        assert VIEW_KINDS[View.IP_LIST] == (ReferenceKind.TENANT, ReferenceKind.DEVICE)


class TestLifecycle:

    def test_start_and_stop(self, scheduler):
        scheduler.start()
        try:
            status = scheduler.status()
            assert status["running"] is True
            assert [job["id"] for job in status["jobs"]] == ["view_refresh"]
            assert status["views"]["ip_list"]["active"] is True
        finally:
            scheduler.stop()

        assert scheduler.status()["running"] is False
