import logging
import shlex
import subprocess
from pathlib import Path
from typing import List

PATH_PLACEHOLDER = "{path}"


class DetectorLaunchError(Exception):
    """Raised when the detection command could not be started."""


class DetectorAdapter:
    """Wrapper around the external commercial-detection command."""

    def __init__(self, command_template: str):
        self.command_template = command_template
        self.logger = logging.getLogger(__name__)

    def build_command(self, video_path: Path) -> List[str]:
        """Constructs the argv for one video.

        The path replaces a `{path}` placeholder if the template has one,
        otherwise it is appended as the sole trailing argument.
        """
        parts = shlex.split(self.command_template)
        if PATH_PLACEHOLDER in parts:
            return [str(video_path) if part == PATH_PLACEHOLDER else part for part in parts]
        return parts + [str(video_path)]

    def spawn(self, command: List[str]) -> subprocess.Popen:
        """Starts the command detached from our stdio and returns immediately."""
        self.logger.debug(f"DETECT_CMD: {shlex.join(command)}")
        try:
            return subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise DetectorLaunchError(f"{command[0]}: {e}") from e
