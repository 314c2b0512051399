"""Domain events for the commercial-detection watcher.

Events describe state changes in the scan loop and job pool. They flow
through the EventBus so that run statistics (and anything else that wants
to observe the daemon) stay decoupled from the pipeline itself.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from datetime import datetime
from pathlib import Path
from pydantic import BaseModel, Field
from .models import Job


class Event(BaseModel):
    """Base class for all domain events.

    Events are validated Pydantic models. They are not frozen by default.
    """

    pass


class JobEvent(Event):
    """Base class for events related to a specific detection job."""

    job: Job


class JobSubmitted(JobEvent):
    """Emitted when a detection process has been spawned for a video."""

    pass


class JobCompleted(JobEvent):
    """Emitted when a reaped detection process exited with status 0."""

    pass


class JobFailed(JobEvent):
    """Emitted when a detection process exited nonzero or could not be spawned.

    The video stays eligible and is resubmitted on a later cycle.
    """

    error_message: str


class OrphanFound(Event):
    """Emitted for every side-car file without a matching video."""

    path: Path
    deleted: bool


class DirectoryBusy(Event):
    """Emitted when a directory is skipped because a recording is in progress."""

    directory: Path
    last_modified: datetime


class CycleFinished(Event):
    """Emitted at the end of every scan cycle, before the sleep."""

    cycle: int
    running_jobs: int
    finished_at: datetime = Field(default_factory=datetime.now)
