"""Fixed-capacity pool of external commercial-detection processes.

Jobs are keyed by absolute video path, so a path is tracked at most once.
The pool never blocks on a child: `reap()` polls each process and collects
the ones that have exited. Only the scan loop mutates the pool; the shutdown
path just reads it through `terminate_all()`.
"""

import logging
import shlex
from pathlib import Path
from typing import Dict, List, Optional
from comwatch.domain.events import JobCompleted, JobFailed, JobSubmitted
from comwatch.domain.models import Job, JobStatus
from comwatch.infrastructure.detector import DetectorAdapter, DetectorLaunchError
from comwatch.infrastructure.event_bus import EventBus


class JobPool:
    """Tracks running detection processes and enforces the max_runners ceiling.

    Args:
        max_runners: Maximum number of detection processes alive at once.
        detector: DetectorAdapter used to build and spawn commands.
        event_bus: Optional EventBus for JobSubmitted/JobCompleted/JobFailed.
        dry_run: Log the command that would run instead of spawning it.
    """

    def __init__(
        self,
        max_runners: int,
        detector: DetectorAdapter,
        event_bus: Optional[EventBus] = None,
        dry_run: bool = False,
    ):
        if max_runners < 1:
            raise ValueError("max_runners must be at least 1")
        self.max_runners = max_runners
        self.detector = detector
        self.event_bus = event_bus
        self.dry_run = dry_run
        self.logger = logging.getLogger(__name__)
        self._jobs: Dict[Path, Job] = {}

    @staticmethod
    def _key(path: Path) -> Path:
        return Path(path).absolute()

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, path: Path) -> bool:
        return self._key(path) in self._jobs

    @property
    def is_full(self) -> bool:
        return len(self._jobs) >= self.max_runners

    @property
    def jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def _publish(self, event):
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def reap(self) -> List[Job]:
        """Collects every job whose process has exited and drops it from the pool."""
        finished: List[Job] = []
        for key, job in list(self._jobs.items()):
            return_code = job.process.poll()
            if return_code is None:
                self.logger.debug(f"Still running ({job.runtime_seconds:.0f}s): {job.path}")
                continue

            job.return_code = return_code
            if return_code == 0:
                job.status = JobStatus.COMPLETED
                self.logger.info(f"Completed: {job.path}")
                self._publish(JobCompleted(job=job))
            else:
                job.status = JobStatus.FAILED
                job.error_message = f"exit status {return_code}"
                self.logger.warning(f"Failed: {job.path} ({job.error_message})")
                self._publish(JobFailed(job=job, error_message=job.error_message))

            del self._jobs[key]
            finished.append(job)
        return finished

    def submit(self, path: Path) -> Optional[Job]:
        """Starts detection for path.

        Returns None without doing anything when the pool is full, the path is
        already tracked, or in dry-run mode. A spawn failure returns a FAILED
        job that is not tracked.
        """
        key = self._key(path)
        if self.is_full:
            return None
        if key in self._jobs:
            return None

        command = self.detector.build_command(key)
        if self.dry_run:
            self.logger.info(f"DRY-RUN: would run: {shlex.join(command)}")
            return None

        job = Job(path=key, command=command)
        try:
            job.process = self.detector.spawn(command)
        except DetectorLaunchError as e:
            job.status = JobStatus.FAILED
            job.error_message = str(e)
            self.logger.error(f"Failed to start detection for {key}: {e}")
            self._publish(JobFailed(job=job, error_message=job.error_message))
            return job

        self._jobs[key] = job
        self.logger.info(f"Started ({len(self._jobs)}/{self.max_runners}): {key}")
        self._publish(JobSubmitted(job=job))
        return job

    def terminate_all(self) -> int:
        """Sends SIGTERM to every tracked process without waiting for exit.

        Only the direct child is signalled; anything the detection tool
        spawned itself is not.
        """
        signalled = 0
        for job in list(self._jobs.values()):
            try:
                job.process.terminate()
            except ProcessLookupError:
                continue
            self.logger.info(f"Terminated: {job.path}")
            signalled += 1
        return signalled
