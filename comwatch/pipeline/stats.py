import logging
from collections import deque
from datetime import datetime
from typing import Optional
from comwatch.infrastructure.event_bus import EventBus
from comwatch.domain.events import (
    JobEvent, JobSubmitted, JobCompleted, JobFailed, OrphanFound, DirectoryBusy, CycleFinished
)


class RunStats:
    """Counters for one daemon run."""

    def __init__(self, recent_max_items: int = 10):
        self.started_at = datetime.now()
        self.cycles = 0
        self.submitted_count = 0
        self.completed_count = 0
        self.failed_count = 0
        self.orphans_found = 0
        self.orphans_deleted = 0
        self.busy_skips = 0
        self.running_jobs = 0
        self.last_cycle_at: Optional[datetime] = None
        self.recent_failures = deque(maxlen=recent_max_items)

    def summary(self) -> str:
        return (
            f"cycles={self.cycles} running={self.running_jobs} "
            f"submitted={self.submitted_count} completed={self.completed_count} "
            f"failed={self.failed_count} orphans={self.orphans_deleted}/{self.orphans_found} "
            f"busy_skips={self.busy_skips}"
        )


class StatsCollector:
    """Subscribes to EventBus and updates RunStats."""

    def __init__(self, bus: EventBus, stats: RunStats):
        self.bus = bus
        self.stats = stats
        self.logger = logging.getLogger(__name__)
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(JobSubmitted, self.on_job_submitted)
        self.bus.subscribe(JobCompleted, self.on_job_completed)
        self.bus.subscribe(JobFailed, self.on_job_failed)
        self.bus.subscribe(OrphanFound, self.on_orphan_found)
        self.bus.subscribe(DirectoryBusy, self.on_directory_busy)
        self.bus.subscribe(CycleFinished, self.on_cycle_finished)
        self.bus.subscribe(JobEvent, self.on_job_event)

    def on_job_event(self, event: JobEvent):
        self.logger.debug(f"{type(event).__name__}: {event.job.path}")

    def on_job_submitted(self, event: JobSubmitted):
        self.stats.submitted_count += 1

    def on_job_completed(self, event: JobCompleted):
        self.stats.completed_count += 1

    def on_job_failed(self, event: JobFailed):
        self.stats.failed_count += 1
        self.stats.recent_failures.append((event.job.path, event.error_message))

    def on_orphan_found(self, event: OrphanFound):
        self.stats.orphans_found += 1
        if event.deleted:
            self.stats.orphans_deleted += 1

    def on_directory_busy(self, event: DirectoryBusy):
        self.stats.busy_skips += 1

    def on_cycle_finished(self, event: CycleFinished):
        self.stats.cycles = event.cycle
        self.stats.running_jobs = event.running_jobs
        self.stats.last_cycle_at = event.finished_at
        self.logger.debug(f"Cycle {event.cycle} done: {self.stats.summary()}")
