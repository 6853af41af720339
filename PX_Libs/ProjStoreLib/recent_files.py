"""
Recent files persistence for Pixelargon.

The list is stored as a JSON array of path strings in
<data_dir>/recent_files.json, newest first. Reading is tolerant: a
missing, unreadable or malformed file reads as an empty list. Recent files
are a convenience, so callers treat write failures as non-fatal.

Functions:
    add_recent_file: Put a path at the front of a recent-files list

Classes:
    RecentFilesStore: Reads and writes the recent-files JSON file
"""

from pathlib import Path
from typing import List, Sequence, Union
import json
import logging

from PX_Libs.constants import MAX_RECENT_FILES, RECENT_FILES_NAME

logger = logging.getLogger(__name__)


def add_recent_file(
    files: Sequence[str],
    path: Union[str, Path],
    limit: int = MAX_RECENT_FILES,
) -> List[str]:
    """
    Return a new list with path first, without duplicates, capped at limit.

    Example:
        >>> add_recent_file(["b.png", "a.png"], "a.png")
        ['a.png', 'b.png']
    """
    entry = str(path)
    updated = [entry] + [item for item in files if item != entry]
    return updated[:max(0, limit)]


class RecentFilesStore:
    """JSON-backed recent files list inside the application data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    @property
    def path(self) -> Path:
        return self.data_dir / RECENT_FILES_NAME

    def load(self) -> List[str]:
        """Read the stored list; any problem reads as []."""
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read recent files from {self.path}: {e}")
            return []

        if not isinstance(payload, list):
            logger.warning(f"Ignoring malformed recent files in {self.path}")
            return []
        return [str(item) for item in payload if isinstance(item, str)]

    def save(self, files: Sequence[str]) -> None:
        """
        Write the list, creating the data directory when needed.

        Raises:
            OSError: If the directory or file cannot be written
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(list(files), indent=2), encoding="utf-8")
        logger.debug(f"Saved {len(files)} recent files to {self.path}")
