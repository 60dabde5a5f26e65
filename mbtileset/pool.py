"""
Bounded pool of read sessions against one tileset.

Every read checks out its own session, runs a single statement and gives the
session back, so concurrent readers only wait on each other once all
``capacity`` sessions are in use.
"""

import sqlite3
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator

import structlog
from sqlalchemy import Connection, Engine, Row
from sqlalchemy.exc import OperationalError
from structlog.types import FilteringBoundLogger

from .exceptions import CancelledError, ClosedHandleError

POLL_INTERVAL = 0.05


class Cancellation:
    """
    Cancellation signal supplied by the caller. Trips either when
    ``cancel()`` is called or once ``timeout`` seconds have elapsed.
    """

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self.deadline = None if timeout is None else time.monotonic() + timeout

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True

        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None

        return max(0.0, self.deadline - time.monotonic())

    def check(self):
        if self.cancelled:
            raise CancelledError("operation cancelled")


class SessionPool:
    engine: Engine
    capacity: int
    anchor: sqlite3.Connection | None
    progress_interval: int
    waiting: int
    "Callers currently waiting for a free session."
    total_waits: int
    "Checkouts that had to wait since the pool was created."
    logger: FilteringBoundLogger

    def __init__(
        self,
        engine: Engine,
        capacity: int,
        anchor: sqlite3.Connection | None = None,
        progress_interval: int = 1000,
    ):
        if capacity < 1:
            raise ValueError(f"Pool capacity must be at least 1, not {capacity}")

        self.engine = engine
        self.capacity = capacity
        self.anchor = anchor
        self.progress_interval = progress_interval
        self.waiting = 0
        self.total_waits = 0
        self.logger = structlog.get_logger()

        self._slots = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _acquire(self, cancel: Cancellation | None):
        if self._slots.acquire(blocking=False):
            return

        with self._lock:
            self.waiting += 1
            self.total_waits += 1

        log = self.logger.bind(capacity=self.capacity, waiting=self.waiting)
        log.debug("pool.waiting")

        try:
            while True:
                if self._closed:
                    raise ClosedHandleError("session pool is closed")

                timeout = POLL_INTERVAL
                if cancel is not None:
                    cancel.check()
                    remaining = cancel.remaining()
                    if remaining is not None:
                        timeout = min(timeout, remaining)

                if self._slots.acquire(timeout=timeout):
                    log.debug("pool.acquired")
                    return
        finally:
            with self._lock:
                self.waiting -= 1

    @contextmanager
    def session(self, cancel: Cancellation | None = None) -> Iterator[Connection]:
        """
        Check out one session for the duration of the ``with`` block. The
        session is returned to the pool on every exit path.
        """
        if self._closed:
            raise ClosedHandleError("session pool is closed")

        self._acquire(cancel)

        try:
            if cancel is not None:
                cancel.check()

            if self._closed:
                raise ClosedHandleError("session pool is closed")

            with self.engine.connect() as connection:
                driver_connection = connection.connection.driver_connection

                if cancel is not None:
                    driver_connection.set_progress_handler(
                        lambda: 1 if cancel.cancelled else 0,
                        self.progress_interval,
                    )

                try:
                    yield connection
                finally:
                    if cancel is not None:
                        driver_connection.set_progress_handler(None, 0)
        finally:
            self._slots.release()

    def query(self, statement: Any, cancel: Cancellation | None = None) -> list[Row]:
        """
        Run one parameterized statement on its own session and return all of
        its rows.
        """
        with self.session(cancel=cancel) as connection:
            try:
                return list(connection.execute(statement).all())
            except OperationalError as e:
                if cancel is not None and cancel.cancelled:
                    raise CancelledError("query cancelled") from e

                raise

    def close(self):
        """
        Release every pooled session. Reads still in flight may fail.
        """
        if self._closed:
            return

        self._closed = True
        self.engine.dispose()

        if self.anchor is not None:
            self.anchor.close()

        self.logger.debug("pool.closed", capacity=self.capacity)
