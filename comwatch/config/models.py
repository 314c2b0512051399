import shlex
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


def _normalize_suffix_list(values: List[str]) -> List[str]:
    normalized: List[str] = []
    for value in values:
        cleaned = value.strip().lstrip(".")
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class GeneralConfig(BaseModel):
    video_extensions: List[str] = Field(default_factory=lambda: ["mpg", "mpeg", "ts"])
    delete_suffixes: List[str] = Field(default_factory=lambda: ["edl", "txt", "logo.txt", "log"])
    result_extension: str = "edl"
    max_runners: int = Field(default=2, gt=0)
    sleep_time: float = Field(default=60.0, gt=0)  # seconds
    run_while_recording: bool = False
    idle_delay: float = Field(default=10.0, ge=0)  # minutes
    commercial_detect_cmd: str = "comskip"
    delete_orphans: bool = True

    @field_validator("video_extensions")
    @classmethod
    def validate_video_extensions(cls, v: List[str]) -> List[str]:
        normalized = [ext.lower() for ext in _normalize_suffix_list(v)]
        if not normalized:
            raise ValueError("video_extensions must contain at least one extension")
        return normalized

    @field_validator("delete_suffixes")
    @classmethod
    def validate_delete_suffixes(cls, v: List[str]) -> List[str]:
        # Multi-segment suffixes (logo.txt) must be tried before their tails (txt).
        return sorted(_normalize_suffix_list(v), key=len, reverse=True)

    @field_validator("result_extension")
    @classmethod
    def validate_result_extension(cls, v: str) -> str:
        cleaned = v.strip().lstrip(".")
        if not cleaned:
            raise ValueError("result_extension must not be empty")
        return cleaned

    @field_validator("commercial_detect_cmd")
    @classmethod
    def validate_command(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("commercial_detect_cmd must not be empty")
        try:
            shlex.split(v)
        except ValueError as e:
            raise ValueError(f"commercial_detect_cmd is not a valid command line: {e}")
        return v.strip()


class LoggingConfig(BaseModel):
    log_dir: str = "/var/log/comwatch"
    log_file: str = "comwatch.log"


class DaemonConfig(BaseModel):
    pid_file: Optional[str] = None


class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    scan_dirs: List[str] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    daemon: DaemonConfig = Field(default_factory=DaemonConfig)
