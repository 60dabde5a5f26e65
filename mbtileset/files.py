"""
Filesystem conventions around tileset files.
"""

from datetime import datetime, timezone
from pathlib import Path

import structlog

from .exceptions import IncompleteTilesetError, PathError

EXTENSION = ".mbtiles"


def journal_path(path: str | Path) -> Path:
    return Path(f"{path}-journal")


def get_mod_time(path: str | Path) -> datetime:
    """
    Last modification time of the tileset, in UTC and rounded to the second.

    Refuses tilesets with a ``-journal`` file next to them, as they are still
    being written.
    """
    path = Path(path)

    try:
        stat = path.stat()
    except FileNotFoundError as e:
        raise PathError(f"path does not exist: {str(path)!r}") from e

    if journal_path(path).exists():
        raise IncompleteTilesetError(
            f"refusing to open {str(path)!r} with an associated -journal file (incomplete tileset)"
        )

    # Halves round away from zero.
    return datetime.fromtimestamp(int(stat.st_mtime + 0.5), tz=timezone.utc)


def find_mbtiles(root: str | Path) -> list[Path]:
    """
    Recursively find all tileset files below ``root``, skipping any that
    are still being written.
    """
    log = structlog.get_logger()
    log = log.bind(root=str(root))

    root = Path(root)
    if not root.is_dir():
        raise PathError(f"path is not a directory: {str(root)!r}")

    found = []
    for candidate in sorted(root.rglob(f"*{EXTENSION}")):
        if not candidate.is_file():
            continue

        if journal_path(candidate).exists():
            log.info("find.incomplete_skipped", filename=str(candidate))
            continue

        found.append(candidate)

    log.info("find.complete", found=len(found))

    return found
