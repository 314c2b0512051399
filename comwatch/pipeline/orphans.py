import logging
from pathlib import Path
from typing import List, Optional, Set
from comwatch.domain.events import OrphanFound
from comwatch.domain.models import DirectoryListing, SidecarFile
from comwatch.infrastructure.directory import split_extension
from comwatch.infrastructure.event_bus import EventBus


class OrphanReconciler:
    """Finds side-car files whose video is gone and removes them.

    A side-car is any file ending in one of the deletable suffixes. It is an
    orphan when no `<base>.<ext>` exists in the same listing for any
    recognized video extension.
    """

    def __init__(
        self,
        video_extensions: List[str],
        delete_suffixes: List[str],
        delete_enabled: bool,
        event_bus: Optional[EventBus] = None,
    ):
        self.video_extensions = [ext.lower().lstrip(".") for ext in video_extensions]
        # Longest first so 'show.logo.txt' splits on 'logo.txt', not 'txt'.
        self.delete_suffixes = sorted((s.lstrip(".") for s in delete_suffixes), key=len, reverse=True)
        self.delete_enabled = delete_enabled
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    def match_sidecar(self, listing: DirectoryListing, name: str) -> Optional[SidecarFile]:
        """Returns the side-car view of name, or None if no suffix applies."""
        _, own_ext = split_extension(name)
        if own_ext.lower() in self.video_extensions:
            return None
        for suffix in self.delete_suffixes:
            tail = f".{suffix}"
            if name.endswith(tail) and len(name) > len(tail):
                return SidecarFile(
                    path=listing.directory / name,
                    suffix=suffix,
                    base_name=name[:-len(tail)],
                )
        return None

    def has_video(self, names: Set[str], base_name: str) -> bool:
        """names must be lower-cased; extensions on disk may differ in case."""
        base = base_name.lower()
        return any(f"{base}.{ext}" in names for ext in self.video_extensions)

    def find_orphans(self, listing: DirectoryListing) -> List[SidecarFile]:
        orphans: List[SidecarFile] = []
        names = {name.lower() for name in listing.names}
        for entry in listing.entries:
            sidecar = self.match_sidecar(listing, entry.name)
            if sidecar is None:
                continue
            if not self.has_video(names, sidecar.base_name):
                orphans.append(sidecar)
        return orphans

    def reconcile(self, listing: DirectoryListing) -> List[SidecarFile]:
        """Deletes (or reports) every orphan in the listing.

        Delete failures are logged and skipped; they never stop the scan.
        """
        orphans = self.find_orphans(listing)
        for orphan in orphans:
            deleted = False
            if self.delete_enabled:
                deleted = self._delete(orphan.path)
            else:
                self.logger.info(f"Would delete orphan: {orphan.path}")
            if self.event_bus is not None:
                self.event_bus.publish(OrphanFound(path=orphan.path, deleted=deleted))
        return orphans

    def _delete(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            self.logger.debug(f"Orphan already gone: {path}")
            return False
        except OSError as e:
            self.logger.warning(f"Unable to delete orphan {path}: {e}")
            return False
        self.logger.info(f"Deleted orphan: {path}")
        return True
