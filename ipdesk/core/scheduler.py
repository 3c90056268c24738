"""
Refresh scheduler for the console views using APScheduler.

Each view (IP list, device list) counts down from REFRESH_INTERVAL. A background
interval job ticks every TICK_SECONDS; when the active view's countdown reaches
zero one refresh cycle runs and the countdown resets. User actions (Refresh
button, login, a successful write) force the countdown to zero; a forced view
runs on the next tick whether or not it is the active one.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import settings
from .models import ReferenceKind

logger = logging.getLogger(__name__)


class View(str, Enum):
    IP_LIST = "ip_list"
    DEVICE_LIST = "device_list"


# Reference kinds repopulated by one refresh cycle of each view
VIEW_KINDS = {
    View.IP_LIST: (ReferenceKind.TENANT, ReferenceKind.DEVICE),
    View.DEVICE_LIST: (
        ReferenceKind.MANUFACTURER,
        ReferenceKind.SITE,
        ReferenceKind.DEVICE_TYPE,
        ReferenceKind.DEVICE_ROLE,
        ReferenceKind.TENANT,
        ReferenceKind.DEVICE,
    ),
}


@dataclass
class RefreshState:
    """
    Countdown for one view.

    Idle while count > 0, Due once count <= 0, Fetching while a cycle runs.
    The countdown is frozen while a modal input is open on the view.
    """
    count: float
    active: bool = False
    modal_open: bool = False
    fetching: bool = False
    cycles: int = 0
    last_refresh: Optional[datetime] = None

    @property
    def phase(self) -> str:
        if self.fetching:
            return "fetching"
        return "due" if self.count <= 0 else "idle"


class RefreshScheduler:
    """
    Decides when each view's caches must be repopulated.

    Args:
        cycle: Callable running one fetch-and-rebuild pass for a view
        interval: Countdown base value
        step: Amount subtracted per tick
        tick_seconds: Wall-clock period of the background tick job
    """

    def __init__(
        self,
        cycle: Callable[[View], None],
        interval: Optional[float] = None,
        step: Optional[float] = None,
        tick_seconds: Optional[float] = None,
    ):
        self._cycle = cycle
        self.interval = interval if interval is not None else settings.REFRESH_INTERVAL
        self.tick_seconds = tick_seconds if tick_seconds is not None else settings.TICK_SECONDS
        self.step = step if step is not None else self.tick_seconds
        self._lock = threading.Lock()
        self._states = {view: RefreshState(count=self.interval) for view in View}
        # The IP list is the home screen
        self._states[View.IP_LIST].active = True
        self._scheduler: Optional[BackgroundScheduler] = None

    def state(self, view: View) -> RefreshState:
        return self._states[view]

    def tick(self, view: View) -> bool:
        """
        Advance one view's countdown by a step.

        Returns:
            True if this tick ran a refresh cycle
        """
        with self._lock:
            state = self._states[view]
            # A Due arriving during Fetching is dropped, not queued
            if state.fetching:
                return False
            # Inactive views do not count down but still honour a force
            if state.active and not state.modal_open:
                state.count -= self.step
            if state.count > 0:
                return False
            state.fetching = True

        self._run_cycle(view)
        return True

    def tick_all(self) -> None:
        """Background job body: one tick for every view."""
        for view in View:
            self.tick(view)

    def force(self, view: View) -> None:
        """Make the next tick of this view Due. Repeated calls collapse into one cycle."""
        with self._lock:
            state = self._states[view]
            if state.fetching:
                logger.debug(f"Refresh of {view.value} already running, force ignored")
                return
            state.count = 0

    def run_now(self, view: View) -> bool:
        """Run a cycle synchronously unless one is already running for this view."""
        with self._lock:
            state = self._states[view]
            if state.fetching:
                return False
            state.fetching = True

        self._run_cycle(view)
        return True

    def _run_cycle(self, view: View) -> None:
        state = self._states[view]
        logger.info(f"Refreshing {view.value}")
        try:
            self._cycle(view)
        except Exception:
            # Next natural interval is the retry
            logger.exception(f"Refresh cycle for {view.value} failed")
        finally:
            with self._lock:
                state.fetching = False
                state.count = self.interval
                state.cycles += 1
                state.last_refresh = datetime.now()

    def activate(self, view: View) -> None:
        """Switch the visible view; only the active view counts down."""
        with self._lock:
            for v, state in self._states.items():
                state.active = v == view
        self.force(view)

    def set_modal(self, view: View, open_: bool) -> None:
        """Freeze or release the countdown while an input dialog is open."""
        with self._lock:
            self._states[view].modal_open = open_

    # ---- background job ----

    def start(self) -> None:
        """Start the background tick job."""
        if self._scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self.tick_all,
            IntervalTrigger(seconds=self.tick_seconds),
            id="view_refresh",
            name="Tick view refresh countdowns",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info("Refresh scheduler started")

    def stop(self) -> None:
        """Stop the background tick job."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Refresh scheduler stopped")

    def status(self) -> dict:
        """Scheduler and per-view countdown status."""
        jobs = []
        if self._scheduler is not None:
            for job in self._scheduler.get_jobs():
                jobs.append({
                    "id": job.id,
                    "name": job.name,
                    "next_run": str(job.next_run_time) if job.next_run_time else None
                })

        with self._lock:
            views = {
                view.value: {
                    "phase": state.phase,
                    "count": state.count,
                    "active": state.active,
                    "modal_open": state.modal_open,
                    "cycles": state.cycles,
                    "last_refresh": state.last_refresh.isoformat() if state.last_refresh else None,
                }
                for view, state in self._states.items()
            }

        return {
            "running": self._scheduler is not None and self._scheduler.running,
            "jobs": jobs,
            "views": views,
        }
