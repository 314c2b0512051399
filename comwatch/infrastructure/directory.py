import os
from pathlib import Path
from typing import List, Iterator
from comwatch.domain.models import DirectoryEntry, DirectoryListing, VideoFile


def split_extension(name: str) -> tuple[str, str]:
    """Splits 'show.mpg' into ('show', 'mpg'). Names without a dot get ''."""
    base, dot, ext = name.rpartition(".")
    if not dot or not base:
        return name, ""
    return base, ext


class DirectoryReader:
    """Reads a single scan directory (non-recursive) into a DirectoryListing."""

    def __init__(self, video_extensions: List[str]):
        self.video_extensions = [ext.lower().lstrip(".") for ext in video_extensions]

    def read(self, directory: Path) -> DirectoryListing:
        """Lists regular files in OS order. Raises OSError if the directory can't be read."""
        entries: List[DirectoryEntry] = []
        with os.scandir(directory) as it:
            for dir_entry in it:
                try:
                    if not dir_entry.is_file():
                        continue
                    st = dir_entry.stat()
                except OSError:
                    # Vanished or unreadable between listing and stat
                    continue
                entries.append(DirectoryEntry(name=dir_entry.name, size_bytes=st.st_size, mtime=st.st_mtime))

        return DirectoryListing(
            directory=Path(directory),
            entries=entries,
            names={entry.name for entry in entries},
        )

    def videos(self, listing: DirectoryListing) -> Iterator[VideoFile]:
        """Yields non-empty recognized video files in listing order."""
        for entry in listing.entries:
            if entry.size_bytes == 0:
                continue
            base, ext = split_extension(entry.name)
            if ext.lower() not in self.video_extensions:
                continue
            yield VideoFile(
                path=listing.path_of(entry),
                base_name=base,
                extension=ext,
                mtime=entry.mtime,
                size_bytes=entry.size_bytes,
            )
