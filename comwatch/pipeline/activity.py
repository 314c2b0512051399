import logging
import time
from datetime import datetime
from typing import Callable, Iterable, Optional
from comwatch.domain.events import DirectoryBusy
from comwatch.domain.models import DirectoryListing, VideoFile
from comwatch.infrastructure.event_bus import EventBus


class ActivityGate:
    """Holds back job submission for directories that are still being recorded into.

    A directory is busy when any non-empty video was modified within the last
    `idle_delay` minutes. With run_while_recording the gate always passes.
    """

    def __init__(
        self,
        idle_delay_minutes: float,
        run_while_recording: bool = False,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.idle_delay_seconds = idle_delay_minutes * 60.0
        self.run_while_recording = run_while_recording
        self.event_bus = event_bus
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def last_modified(videos: Iterable[VideoFile]) -> Optional[float]:
        latest: Optional[float] = None
        for video in videos:
            if video.size_bytes == 0:
                continue
            if latest is None or video.mtime > latest:
                latest = video.mtime
        return latest

    def is_busy(self, listing: DirectoryListing, videos: Iterable[VideoFile]) -> bool:
        if self.run_while_recording:
            return False

        latest = self.last_modified(videos)
        if latest is None:
            return False

        if latest <= self.clock() - self.idle_delay_seconds:
            return False

        last_modified = datetime.fromtimestamp(latest)
        self.logger.debug(
            f"Recording in progress in {listing.directory} "
            f"(last write {last_modified:%Y-%m-%d %H:%M:%S}), skipping submissions"
        )
        if self.event_bus is not None:
            self.event_bus.publish(DirectoryBusy(directory=listing.directory, last_modified=last_modified))
        return True
