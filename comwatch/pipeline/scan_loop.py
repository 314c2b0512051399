"""Top-level driver for the commercial-detection watcher.

Every cycle: reap finished jobs, then visit each scan directory in
configured order (list once, reconcile orphans, check recording activity,
submit eligible videos), then sleep for `sleep_time`.

Once the job pool is full the cycle stops submitting altogether: the rest of
the current directory and every later directory (including their orphan
pass) are left for the next cycle. Files are considered in directory
listing order, never sorted.
"""

import logging
import threading
from pathlib import Path
from typing import List, Optional
from comwatch.config.models import GeneralConfig
from comwatch.domain.events import CycleFinished
from comwatch.domain.models import DirectoryListing, VideoFile
from comwatch.infrastructure.directory import DirectoryReader
from comwatch.infrastructure.event_bus import EventBus
from comwatch.pipeline.activity import ActivityGate
from comwatch.pipeline.job_pool import JobPool
from comwatch.pipeline.orphans import OrphanReconciler


def needs_detection(listing: DirectoryListing, video: VideoFile, result_extension: str) -> bool:
    """Retry policy: a video is eligible until its `<base>.<result_extension>` exists.

    A failed detection run leaves no result file, so the same video is
    submitted again on the next cycle. There is no backoff or attempt limit.
    """
    return not listing.has(f"{video.base_name}.{result_extension}")


class ScanLoop:
    """Drives reap -> per-directory (reconcile, gate, submit) -> sleep.

    Args:
        config: GeneralConfig with sleep_time and result_extension.
        scan_dirs: Directories to visit, in order.
        reader: DirectoryReader for listings and video classification.
        reconciler: OrphanReconciler run on every visited directory.
        gate: ActivityGate deciding whether a directory may get new jobs.
        pool: JobPool shared with the shutdown handler.
        event_bus: EventBus for CycleFinished.
        stop_event: Set to end the loop; also interrupts the sleep.
    """

    def __init__(
        self,
        config: GeneralConfig,
        scan_dirs: List[Path],
        reader: DirectoryReader,
        reconciler: OrphanReconciler,
        gate: ActivityGate,
        pool: JobPool,
        event_bus: EventBus,
        stop_event: Optional[threading.Event] = None,
    ):
        self.config = config
        self.scan_dirs = [Path(d) for d in scan_dirs]
        self.reader = reader
        self.reconciler = reconciler
        self.gate = gate
        self.pool = pool
        self.event_bus = event_bus
        self.stop_event = stop_event or threading.Event()
        self.cycle = 0
        self.logger = logging.getLogger(__name__)

    @property
    def stopping(self) -> bool:
        return self.stop_event.is_set()

    def run(self):
        """Cycles until the stop event is set."""
        self.logger.info(
            f"Watching {len(self.scan_dirs)} director{'y' if len(self.scan_dirs) == 1 else 'ies'} "
            f"(max_runners={self.pool.max_runners}, sleep={self.config.sleep_time}s)"
        )
        while not self.stopping:
            self.run_cycle()
            if self.stop_event.wait(self.config.sleep_time):
                break

    def run_cycle(self):
        self.cycle += 1
        self.pool.reap()

        for directory in self.scan_dirs:
            if self.stopping or self.pool.is_full:
                break
            if not self.scan_directory(directory):
                break

        self.event_bus.publish(CycleFinished(cycle=self.cycle, running_jobs=len(self.pool)))

    def scan_directory(self, directory: Path) -> bool:
        """Processes one directory. Returns False when the cycle should stop."""
        try:
            listing = self.reader.read(directory)
        except OSError as e:
            self.logger.error(f"Unable to read {directory}: {e}")
            return True

        self.reconciler.reconcile(listing)

        videos = list(self.reader.videos(listing))
        if self.gate.is_busy(listing, videos):
            return True

        for video in videos:
            if not needs_detection(listing, video, self.config.result_extension):
                self.logger.debug(f"Already done: {video.path}")
                continue
            if self.stopping or self.pool.is_full:
                return False
            if video.path in self.pool:
                continue
            self.pool.submit(video.path)

        return True
