import logging
import signal
import threading
from typing import Iterable
from comwatch.pipeline.job_pool import JobPool


class ShutdownHandler:
    """Turns termination signals into a stop request for the scan loop.

    The signal handler only records the request and wakes the loop. The loop
    notices it at its next safe point (or immediately when sleeping) and calls
    `finish()`, which forwards SIGTERM to the running jobs. Children are not
    waited for.
    """

    def __init__(self, pool: JobPool):
        self.pool = pool
        self.stop_event = threading.Event()
        self._shutdown_requested = False
        self.logger = logging.getLogger(__name__)

    @property
    def requested(self) -> bool:
        return self._shutdown_requested or self.stop_event.is_set()

    def install(self, signals: Iterable[int] = (signal.SIGTERM, signal.SIGINT)):
        for signum in signals:
            signal.signal(signum, self._on_signal)

    def _on_signal(self, signum, frame):
        # Runs on the main thread, which may be inside stop_event.wait() holding
        # the event's non-reentrant lock. set() has to happen on another thread.
        first = not self._shutdown_requested
        self._shutdown_requested = True
        if first:
            self.logger.info(f"Received {signal.Signals(signum).name}, stopping...")
        threading.Thread(target=self.stop_event.set, name="comwatch-stop", daemon=True).start()

    def request(self, reason: str = "shutdown"):
        """Stops the loop from ordinary code (not from a signal handler)."""
        if not self.requested:
            self.logger.info(f"Received {reason}, stopping...")
        self._shutdown_requested = True
        self.stop_event.set()

    def finish(self) -> int:
        """Forwards termination to every in-flight job. Returns how many were signalled."""
        count = self.pool.terminate_all()
        if count:
            self.logger.info(f"Sent SIGTERM to {count} running job(s); not waiting for them")
        return count
