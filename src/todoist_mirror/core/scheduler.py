"""Periodic sync trigger with single-flight and primary-device gating."""

import enum
import socket
import threading
from collections.abc import Callable

from loguru import logger

from todoist_mirror.models.project import PassReport


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


def current_host_name() -> str:
    return socket.gethostname()


class Scheduler:
    """Fire sync passes on a timer, at most one in flight.

    A tick that arrives while a pass is running is dropped, not queued. A
    tick on a host that is not the configured primary device is skipped.
    """

    def __init__(
        self,
        run_pass: Callable[[], PassReport],
        *,
        interval: float,
        primary_device: str = "",
        host_name: Callable[[], str] = current_host_name,
    ) -> None:
        self._run_pass = run_pass
        self.interval = interval
        self.primary_device = primary_device
        self._host_name = host_name
        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self._timer_thread: threading.Thread | None = None
        self.last_report: PassReport | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    def is_primary_device(self) -> bool:
        """True when no primary device is configured, or this host is it."""
        return not self.primary_device or self.primary_device == self._host_name()

    def tick(self) -> bool:
        """Run one pass if allowed.

        Returns:
            True if a pass was executed (successfully or not), False if the
            tick was dropped or skipped.
        """
        with self._state_lock:
            if self._state is SchedulerState.RUNNING:
                logger.debug("Sync still running, tick dropped")
                return False
            if not self.is_primary_device():
                logger.debug(
                    "Not the primary sync device ({!r} != {!r}), skipping",
                    self._host_name(),
                    self.primary_device,
                )
                return False
            self._state = SchedulerState.RUNNING

        try:
            self.last_report = self._run_pass()
        except Exception:
            logger.exception("Sync pass failed, will retry on next tick")
        finally:
            with self._state_lock:
                self._state = SchedulerState.IDLE
        return True

    def start(self) -> bool:
        """Start the timer thread. Returns False when scheduling is disabled."""
        if self.interval <= 0:
            logger.info("Sync interval is 0, periodic sync disabled")
            return False
        if self._timer_thread is not None and self._timer_thread.is_alive():
            return True
        self._stop.clear()
        self._timer_thread = threading.Thread(
            target=self._timer_loop, name="sync-timer", daemon=True
        )
        self._timer_thread.start()
        logger.info("Periodic sync every {} seconds", self.interval)
        return True

    def stop(self, timeout: float | None = None) -> bool:
        """Stop firing ticks and wait for a pass in flight to finish.

        Returns:
            False if ``timeout`` expired while a pass was still running.
        """
        self._stop.set()
        if self._timer_thread is None:
            return True
        self._timer_thread.join(timeout)
        if self._timer_thread.is_alive():
            logger.warning("Sync pass still running after {} seconds", timeout)
            return False
        self._timer_thread = None
        return True

    def _timer_loop(self) -> None:
        # Passes run on the timer thread; the next wait starts when a pass ends.
        while not self._stop.wait(self.interval):
            self.tick()
