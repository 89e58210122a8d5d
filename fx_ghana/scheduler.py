"""Background timer that drives the coordinator's automatic path."""

from __future__ import annotations

import threading

from fx_ghana.coordinator import UpdateCoordinator
from fx_ghana.utils.logger import get_logger

LOGGER = get_logger(__name__)


class HourlyScheduler:
    """Call :meth:`UpdateCoordinator.tick` every ``interval_seconds`` on a daemon thread."""

    def __init__(
        self,
        coordinator: UpdateCoordinator,
        interval_seconds: float = 3600.0,
        *,
        run_immediately: bool = False,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.coordinator = coordinator
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="fx-ghana-scheduler", daemon=True)
        self._thread.start()
        LOGGER.info("Scheduler started (every %.0fs)", self.interval_seconds)

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the timer thread and wait for it; ``False`` if a tick is still running."""

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                LOGGER.warning("Scheduler still finishing a rate update after %ss", timeout)
                return False
            self._thread = None
        LOGGER.info("Scheduler stopped")
        return True

    def _run(self) -> None:
        if self.run_immediately:
            self._tick()
        while not self._stop_event.wait(self.interval_seconds):
            self._tick()

    def _tick(self) -> None:
        try:
            self.coordinator.tick()
        except Exception:
            # Keep the timer alive; the next tick retries.
            LOGGER.exception("Scheduled rate update failed")


__all__ = ["HourlyScheduler"]
