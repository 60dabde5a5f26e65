"""
Cloning a tileset into an independent in-memory database.

The whole file is duplicated, so this is only worth it for small, hot
tilesets. Cloning holds a dedicated session on the source for its whole
duration and should finish before read traffic starts.
"""

import sqlite3
from pathlib import Path

import structlog

from .database import SQLiteEngine
from .pool import Cancellation


def clone_to_memory(
    engine: SQLiteEngine,
    path: str | Path,
    pages: int = -1,
    cancel: Cancellation | None = None,
) -> tuple[str, sqlite3.Connection]:
    """
    Copy the tileset at ``path`` into a fresh shared in-memory database.

    Returns the URI of the in-memory database and the connection keeping it
    alive. If any copy step fails, the partial copy is discarded before the
    error propagates.
    """
    log = structlog.get_logger()
    log = log.bind(filename=str(path), pages=pages)

    def progress(status: int, remaining: int, total: int):
        log.debug("snapshot.step", remaining=remaining, total=total)

        if cancel is not None:
            cancel.check()

    source = engine.connect(engine.file_uri(path))

    try:
        uri = engine.memory_uri()
        target = engine.connect(uri)

        try:
            engine.backup(source, target, pages=pages, progress=progress)
        except Exception:
            target.close()
            log.warning("snapshot.aborted")
            raise
    finally:
        source.close()

    log.info("snapshot.complete")

    return uri, target
