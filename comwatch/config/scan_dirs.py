import os
from pathlib import Path
from typing import List, Tuple, Optional

MAX_SCAN_DIRS = 50
STATUS_OK = "✓"
STATUS_MISSING = "✗"
STATUS_NO_ACCESS = "⚡"

_STATUS_STYLE = {
    STATUS_OK: ("green", ""),
    STATUS_MISSING: ("red", "not a directory"),
    STATUS_NO_ACCESS: ("red", "no read access"),
}


def _clean_entry(value: Optional[str]) -> str:
    """Trims whitespace and one pair of matching surrounding quotes."""
    if value is None:
        return ""
    value = value.strip()
    if value[:1] in ("'", '"') and len(value) > 1 and value.endswith(value[0]):
        value = value[1:-1].strip()
    return value


def normalize_scan_dir_entries(entries: List[str]) -> List[str]:
    return [cleaned for cleaned in map(_clean_entry, entries) if cleaned]


def dedupe_scan_dirs(entries: List[str]) -> List[str]:
    """Drops entries naming a directory already listed ('/tv/' == '/tv').

    The first spelling is kept. Symlinks are not resolved here.
    """
    kept = {}
    for entry in entries:
        kept.setdefault(os.path.normpath(os.path.expanduser(entry)), entry)
    return list(kept.values())


def parse_cli_scan_dirs(scan_dirs_arg: Optional[str]) -> List[str]:
    if scan_dirs_arg is None:
        return []
    return normalize_scan_dir_entries(scan_dirs_arg.split(","))


def validate_scan_dir_entries(entries: List[str]) -> None:
    if not entries:
        raise ValueError("No scan directories configured.")
    if len(entries) > MAX_SCAN_DIRS:
        raise ValueError(f"Too many scan directories ({len(entries)}). Max {MAX_SCAN_DIRS}.")


def _has_read_access(path: Path) -> bool:
    return os.access(path, os.R_OK | os.X_OK)


def evaluate_scan_dirs(entries: List[str]) -> Tuple[List[Path], List[Tuple[str, str]]]:
    """Resolves entries to absolute paths and reports each one's status.

    Only directories that exist and can be listed are returned as valid.
    """
    valid_dirs: List[Path] = []
    status_entries: List[Tuple[str, str]] = []

    for entry in entries:
        path = Path(entry).expanduser()
        if not path.is_dir():
            status_entries.append((STATUS_MISSING, entry))
            continue
        if not _has_read_access(path):
            status_entries.append((STATUS_NO_ACCESS, entry))
            continue
        status_entries.append((STATUS_OK, entry))
        valid_dirs.append(path.resolve())

    return valid_dirs, status_entries


def build_scan_dir_lines(status_entries: List[Tuple[str, str]]) -> List[str]:
    """Rich-markup lines for the startup report, one per requested directory."""
    lines: List[str] = []
    for status, entry in status_entries:
        style, reason = _STATUS_STYLE[status]
        suffix = f" [dim]({reason})[/]" if reason else ""
        lines.append(f"  [{style}]{status}[/] {entry}{suffix}")
    return lines
