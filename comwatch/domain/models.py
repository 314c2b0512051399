from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Set
from pydantic import BaseModel, ConfigDict, Field

class JobStatus(str, Enum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

class DirectoryEntry(BaseModel):
    name: str
    size_bytes: int
    mtime: float

class DirectoryListing(BaseModel):
    """One read of a scan directory, in the order the OS returned the names."""
    directory: Path
    entries: List[DirectoryEntry] = Field(default_factory=list)
    names: Set[str] = Field(default_factory=set)

    def has(self, name: str) -> bool:
        return name in self.names

    def path_of(self, entry: DirectoryEntry) -> Path:
        return self.directory / entry.name

class VideoFile(BaseModel):
    path: Path
    base_name: str
    extension: str
    mtime: float
    size_bytes: int

class SidecarFile(BaseModel):
    path: Path
    suffix: str
    base_name: str

class Job(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: Path
    command: List[str]
    process: Optional[Any] = Field(default=None, exclude=True)  # subprocess.Popen
    started_at: datetime = Field(default_factory=datetime.now)
    status: JobStatus = JobStatus.RUNNING
    return_code: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.COMPLETED

    @property
    def runtime_seconds(self) -> float:
        return (datetime.now() - self.started_at).total_seconds()
