"""
Access to the embedded SQLite engine.

An ``SQLiteEngine`` is handed to the open operations explicitly; nothing is
registered process-wide, and tests can substitute their own engine.
"""

import sqlite3
import uuid
from pathlib import Path
from typing import Callable

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.pool import QueuePool

from .exceptions import CapabilityError
from .pool import SessionPool


class SQLiteEngine:
    """
    Opens DB-API sessions against SQLite databases, builds pooled SQLAlchemy
    engines on top of them, and exposes the online-backup primitive.
    """

    def __init__(self, progress_interval: int = 1000):
        self.progress_interval = progress_interval
        self.log = structlog.get_logger()

    def file_uri(self, path: str | Path) -> str:
        """Read-only URI for a tileset on disk."""
        return Path(path).resolve().as_uri() + "?mode=ro"

    def memory_uri(self) -> str:
        """URI of a fresh, uniquely named in-memory database shared between sessions."""
        return f"file:mbtileset-{uuid.uuid4().hex}?mode=memory&cache=shared"

    def connect(self, uri: str) -> sqlite3.Connection:
        return sqlite3.connect(uri, uri=True, check_same_thread=False)

    def create_pool(
        self,
        uri: str,
        capacity: int,
        anchor: sqlite3.Connection | None = None,
        query_only: bool = False,
    ) -> SessionPool:
        """
        Create a bounded session pool for the database at ``uri``.

        Parameters
        ----------
        uri : str
            SQLite URI, as returned by ``file_uri`` or ``memory_uri``.
        capacity : int
            Maximum number of sessions checked out at once.
        anchor : sqlite3.Connection, optional
            Connection keeping an in-memory database alive; closed with the pool.
        query_only : bool
            Refuse writes on every session. Used where the URI cannot carry
            ``mode=ro``.
        """
        engine = create_engine(
            "sqlite://",
            creator=lambda: self.connect(uri),
            poolclass=QueuePool,
            pool_size=capacity,
            max_overflow=0,
        )

        if query_only:

            @event.listens_for(engine, "connect")
            def _set_query_only(dbapi_connection, connection_record):
                dbapi_connection.execute("PRAGMA query_only = ON")

        self.log.debug("engine.pool_created", capacity=capacity, query_only=query_only)

        return SessionPool(
            engine=engine,
            capacity=capacity,
            anchor=anchor,
            progress_interval=self.progress_interval,
        )

    def backup(
        self,
        source: sqlite3.Connection,
        target: sqlite3.Connection,
        pages: int = -1,
        progress: Callable[[int, int, int], object] | None = None,
    ):
        """
        Copy the whole of ``source`` into ``target`` in steps of ``pages``
        pages, then commit the target. An exception raised by ``progress``
        aborts the copy.
        """
        primitive = getattr(source, "backup", None)

        if primitive is None:
            raise CapabilityError(
                f"{type(source).__name__} sessions do not support backups"
            )

        primitive(target, pages=pages, progress=progress)
        target.commit()
